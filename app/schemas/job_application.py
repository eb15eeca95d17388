"""Schemas for job application submission and administration."""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator, model_validator

from app.models.enums import ApplicationStatus
from app.schemas.common import CamelModel, FileUploadResponse


class ApplicantAddress(CamelModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None


class JobApplicationCreate(CamelModel):
    """Public job application form."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=50)
    role: str = Field(..., min_length=1, max_length=100)
    address: ApplicantAddress | None = None
    education: str | None = None
    work_experience: str | None = None
    skills: str | None = None
    cover_letter: str | None = None

    resume_file_id: str | None = None
    drivers_license_file_id: str | None = None
    insurance_file_id: str | None = None
    vehicle_registration_file_id: str | None = None
    food_handler_file_id: str | None = None
    hipaa_file_id: str | None = None
    driver_photo_file_id: str | None = None
    car_photo_file_id: str | None = None
    equipment_photo_file_id: str | None = None

    session_token: str | None = None

    @field_validator("skills", mode="before")
    @classmethod
    def join_skill_list(cls, value):
        if isinstance(value, list):
            return ", ".join(str(skill).strip() for skill in value if str(skill).strip())
        return value


class JobApplicationSubmitted(CamelModel):
    success: bool = True
    id: str


class JobApplicationResponse(CamelModel):
    """Full application as shown to admins."""

    id: str
    profile_id: str | None = None
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    position: str
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    address_zip: str | None = None
    education: str | None = None
    work_experience: str | None = None
    skills: str | None = None
    cover_letter: str | None = None
    resume_url: str | None = None
    drivers_license_url: str | None = None
    insurance_url: str | None = None
    vehicle_registration_url: str | None = None
    food_handler_url: str | None = None
    hipaa_url: str | None = None
    driver_photo_url: str | None = None
    car_photo_url: str | None = None
    equipment_photo_url: str | None = None
    status: ApplicationStatus
    created_at: datetime
    updated_at: datetime
    file_uploads: list[FileUploadResponse] = []
    has_file_uploads: bool = False
    file_upload_count: int = 0

    @model_validator(mode="after")
    def count_file_uploads(self):
        self.file_upload_count = len(self.file_uploads)
        self.has_file_uploads = self.file_upload_count > 0
        return self


class JobApplicationListResponse(CamelModel):
    applications: list[JobApplicationResponse]
    total_count: int
    total_pages: int
    current_page: int


class RecentApplication(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str
    position: str
    status: ApplicationStatus
    created_at: datetime


class JobApplicationStats(CamelModel):
    total_applications: int
    pending_applications: int
    approved_applications: int
    rejected_applications: int
    interviewing_applications: int
    applications_by_position: dict[str, int]
    recent_applications: list[RecentApplication]


class StatusUpdateRequest(CamelModel):
    status: ApplicationStatus


class StatusUpdateResponse(CamelModel):
    success: bool = True
    application: JobApplicationResponse
