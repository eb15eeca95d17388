"""Schemas for user soft delete, restore and purge."""

from datetime import datetime

from pydantic import Field

from app.models.enums import UserStatus, UserType
from app.schemas.common import CamelModel


class SoftDeleteRequest(CamelModel):
    reason: str | None = Field(default=None, max_length=1000)


class PurgeRequest(CamelModel):
    """Explicit confirmation required before a profile is removed for good."""

    confirmed: bool | None = None
    reason: str | None = Field(default=None, max_length=1000)


class DeletedUserResponse(CamelModel):
    id: str
    name: str | None = None
    email: str
    type: UserType | None = None
    status: UserStatus
    contact_number: str | None = None
    company_name: str | None = None
    contact_name: str | None = None
    deleted_at: datetime | None = None
    deleted_by: str | None = None
    deletion_reason: str | None = None
    created_at: datetime
    updated_at: datetime


class PageInfo(CamelModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class DeletedUserListResponse(CamelModel):
    message: str = "Deleted users retrieved successfully"
    users: list[DeletedUserResponse]
    pagination: PageInfo
