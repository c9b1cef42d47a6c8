"""Create a user for the pipeline tracker.

Usage:
    python -m app.scripts.create_user --username admin --password <password> --role admin
"""

from __future__ import annotations

import argparse
import sys

from app.db.session import SessionLocal
from app.models.user import USER_ROLES, User
from app.services.auth import create_user


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a pipeline tracker user")
    parser.add_argument("--username", required=True, help="Username for the new user")
    parser.add_argument("--password", required=True, help="Password for the new user")
    parser.add_argument("--full-name", default=None, help="Display name")
    parser.add_argument("--email", default=None, help="Contact email")
    parser.add_argument("--role", choices=USER_ROLES, default="manager", help="User role")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.username == args.username).first()
        if existing:
            print(f"User '{args.username}' already exists.")
            sys.exit(1)

        user = create_user(
            db,
            args.username,
            args.password,
            full_name=args.full_name,
            email=args.email,
            role=args.role,
        )
        print(f"User '{user.username}' created successfully (id={user.id}, role={user.role}).")
    finally:
        db.close()


if __name__ == "__main__":
    main()
