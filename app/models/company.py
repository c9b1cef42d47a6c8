"""Company model."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base

if TYPE_CHECKING:
    from app.models.company_file import CompanyFile
    from app.models.company_log import CompanyLog
    from app.models.user import User


class Company(Base):
    """Company moving through the pipeline. Soft-deleted via deleted_at."""

    __tablename__ = "companies"

    __table_args__ = (
        Index("ix_companies_stage_status", "stage", "status"),
        Index("ix_companies_deleted_at", "deleted_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    stage: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    comment: Mapped[str] = mapped_column(Text, default="", nullable=False)
    doc_link: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    tender_link: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    proposal_link: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    deadline_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    creator: Mapped[User | None] = relationship("User")
    logs: Mapped[list[CompanyLog]] = relationship(
        "CompanyLog", back_populates="company", passive_deletes=True
    )
    files: Mapped[list[CompanyFile]] = relationship(
        "CompanyFile", back_populates="company", passive_deletes=True
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
