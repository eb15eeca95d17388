"""Schemas for admin maintenance endpoints."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from app.models.enums import UserType
from app.schemas.common import CamelModel
from app.services.upload_error_service import parse_details


class CleanupRequest(CamelModel):
    """Manual cleanup options. Omitted limits fall back to configured defaults."""

    dry_run: bool = True
    force: bool = False
    retention_days: int | None = Field(default=None, ge=1)
    batch_size: int | None = Field(default=None, ge=1, le=500)
    max_daily_deletions: int | None = Field(default=None, ge=1)
    include_user_types: list[UserType] | None = None
    exclude_user_types: list[UserType] | None = None


class MonitoringCheckRequest(CamelModel):
    check_type: str = "full"
    start_time: datetime | None = None
    end_time: datetime | None = None


class UploadErrorResponse(CamelModel):
    id: str
    correlation_id: str
    error_type: str
    message: str
    user_message: str
    details: Any | None = None
    user_id: str | None = None
    timestamp: datetime
    retryable: bool
    resolved: bool

    @field_validator("details", mode="before")
    @classmethod
    def decode_details(cls, value: Any) -> Any:
        return parse_details(value) if isinstance(value, str) else value
