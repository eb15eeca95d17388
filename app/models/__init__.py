"""Database models."""

from app.models.application_session import ApplicationSession
from app.models.audit import UserAudit
from app.models.enums import (
    ApplicationStatus,
    AuditAction,
    CateringNeedHost,
    DriverStatus,
    OrderStatus,
    UserStatus,
    UserType,
    VehicleType,
)
from app.models.file_upload import FileUpload
from app.models.job_application import JobApplication
from app.models.order import CateringRequest, OnDemandRequest
from app.models.profile import Address, Profile
from app.models.upload_error import UploadError
from app.models.webhook import WebhookLog

__all__ = [
    "Address",
    "ApplicationSession",
    "ApplicationStatus",
    "AuditAction",
    "CateringNeedHost",
    "CateringRequest",
    "DriverStatus",
    "FileUpload",
    "JobApplication",
    "OnDemandRequest",
    "OrderStatus",
    "Profile",
    "UploadError",
    "UserAudit",
    "UserStatus",
    "UserType",
    "VehicleType",
    "WebhookLog",
]
