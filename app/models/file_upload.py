"""Uploaded file metadata."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.storage import Base, new_id, utc_now


class FileUpload(Base):
    """A stored file attached to an order, job application or upload session."""

    __tablename__ = "file_uploads"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    file_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_temporary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    catering_request_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("catering_requests.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    on_demand_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("on_demand_requests.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    job_application_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("job_applications.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    application_session_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("application_sessions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
