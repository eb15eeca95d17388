"""Job application model."""

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.storage import Base, new_id, utc_now
from app.models.enums import ApplicationStatus
from app.models.file_upload import FileUpload


class JobApplication(Base):
    """Application submitted by a prospective driver, helpdesk or vendor hire."""

    __tablename__ = "job_applications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    profile_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    position: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    address_street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address_city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    address_state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address_zip: Mapped[str | None] = mapped_column(String(20), nullable=True)

    education: Mapped[str | None] = mapped_column(Text, nullable=True)
    work_experience: Mapped[str | None] = mapped_column(Text, nullable=True)
    skills: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_letter: Mapped[str | None] = mapped_column(Text, nullable=True)

    resume_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    drivers_license_url: Mapped[str | None] = mapped_column(
        String(1000), nullable=True
    )
    insurance_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    vehicle_registration_url: Mapped[str | None] = mapped_column(
        String(1000), nullable=True
    )
    food_handler_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    hipaa_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    driver_photo_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    car_photo_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    equipment_photo_url: Mapped[str | None] = mapped_column(
        String(1000), nullable=True
    )

    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, native_enum=False, length=20),
        default=ApplicationStatus.PENDING,
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    file_uploads: Mapped[list[FileUpload]] = relationship(lazy="selectin")
