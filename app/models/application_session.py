"""Upload session issued to anonymous job applicants."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.storage import Base, new_id, utc_now


class ApplicationSession(Base):
    """Short-lived token scoping file uploads to one application flow."""

    __tablename__ = "application_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    session_token: Mapped[str] = mapped_column(
        String(128), unique=True, nullable=False, index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    upload_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_uploads: Mapped[int] = mapped_column(Integer, default=10, nullable=False)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    position: Mapped[str] = mapped_column(String(100), nullable=False)

    ip_address: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)

    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    job_application_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False, index=True
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the session lifetime has elapsed."""
        return (now or utc_now()) >= self.expires_at

    def is_usable(self, now: datetime | None = None) -> bool:
        return not self.completed and not self.is_expired(now)
