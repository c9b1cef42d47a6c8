"""Tests for the local filesystem blob store."""

from __future__ import annotations

import pytest

from app.storage.blob_store import LocalBlobStore


def test_store_fetch_delete(tmp_path):
    store = LocalBlobStore(tmp_path)
    assert store.store("abc.pdf", b"data") == "abc.pdf"
    assert (tmp_path / "abc.pdf").read_bytes() == b"data"
    assert store.fetch("abc.pdf") == b"data"
    store.delete("abc.pdf")
    assert not (tmp_path / "abc.pdf").exists()


def test_creates_root_on_first_store(tmp_path):
    store = LocalBlobStore(tmp_path / "nested" / "uploads")
    store.store("k", b"1")
    assert (tmp_path / "nested" / "uploads" / "k").exists()


def test_missing_blob_raises_file_not_found(tmp_path):
    store = LocalBlobStore(tmp_path)
    with pytest.raises(FileNotFoundError):
        store.fetch("nope")
    with pytest.raises(FileNotFoundError):
        store.delete("nope")


@pytest.mark.parametrize("key", ["", "../escape.pdf", "a/../../escape.pdf", "/etc/passwd"])
def test_keys_outside_root_rejected(tmp_path, key):
    store = LocalBlobStore(tmp_path / "root")
    with pytest.raises(ValueError):
        store.store(key, b"x")
