"""Append-only audit trail for privileged actions."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.storage import Base, new_id, utc_now


class UserAudit(Base):
    """Audit entry for user lifecycle changes and admin operations."""

    __tablename__ = "user_audits"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # Not a foreign key: entries outlive permanently deleted profiles
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    performed_by: Mapped[str | None] = mapped_column(
        String(36), nullable=True, index=True
    )
    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSON, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False, index=True
    )

    @property
    def operation(self) -> str | None:
        return (self.metadata_ or {}).get("operation")
