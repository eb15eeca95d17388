"""Schemas for application session issuance and uploads."""

from datetime import datetime

from pydantic import EmailStr, Field

from app.schemas.common import CamelModel


class ApplicationSessionCreate(CamelModel):
    """Contact details supplied when an applicant starts an application."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=50)
    role: str = Field(..., min_length=1, max_length=100, description="Position applied for")


class ApplicationSessionCreated(CamelModel):
    session_id: str
    session_token: str
    expires_at: datetime
    max_uploads: int


class ApplicationSessionStatus(CamelModel):
    session_id: str
    expires_at: datetime
    upload_count: int
    max_uploads: int
    completed: bool
    expired: bool


class SessionUploadRequest(CamelModel):
    """Metadata of a file already placed in storage by the client."""

    file_name: str = Field(..., min_length=1, max_length=255)
    file_type: str = Field(..., min_length=1, max_length=100)
    file_size: int = Field(..., gt=0)
    file_url: str = Field(..., min_length=1, max_length=1000)
    category: str | None = Field(default=None, max_length=50)


class SessionUploadResponse(CamelModel):
    file_id: str
    file_url: str
    upload_count: int
