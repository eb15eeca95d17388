"""Pydantic schemas for request/response validation."""

from app.schemas.common import CamelModel, PerformedBy
from app.schemas.job_application import JobApplicationCreate, JobApplicationResponse
from app.schemas.order import CateringRequestCreate, OnDemandRequestCreate, OrderResponse

__all__ = [
    "CamelModel",
    "CateringRequestCreate",
    "JobApplicationCreate",
    "JobApplicationResponse",
    "OnDemandRequestCreate",
    "OrderResponse",
    "PerformedBy",
]
