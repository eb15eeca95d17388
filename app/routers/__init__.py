"""API routers."""

from app.routers import (
    application_sessions,
    carriers,
    cleanup,
    job_applications,
    monitoring,
    orders,
    performance,
    upload_errors,
    users,
)

__all__ = [
    "application_sessions",
    "carriers",
    "cleanup",
    "job_applications",
    "monitoring",
    "orders",
    "performance",
    "upload_errors",
    "users",
]
