"""Utility functions and classes."""

from app.utils.filters import DeletedUserFilter, JobApplicationFilter, UploadErrorFilter
from app.utils.pagination import Pagination
from app.utils.validators import ValidationResult, validate_required_fields

__all__ = [
    "DeletedUserFilter",
    "JobApplicationFilter",
    "Pagination",
    "UploadErrorFilter",
    "ValidationResult",
    "validate_required_fields",
]
