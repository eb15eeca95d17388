"""Request validation helpers."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from app.core.config import settings

MIN_PURGE_REASON_LENGTH = 10


@dataclass
class ValidationResult:
    """Result of validation process."""

    is_valid: bool
    error: str | None = None
    error_type: str | None = None
    warnings: list[str] = field(default_factory=list)


def _lookup(data: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path such as ``pickupAddress.id``."""
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def find_missing_fields(data: Mapping[str, Any], fields: Iterable[str]) -> list[str]:
    """Return the required (dotted) fields that are absent or blank."""
    return [path for path in fields if _is_blank(_lookup(data, path))]


def validate_required_fields(
    data: Mapping[str, Any], fields: Iterable[str]
) -> ValidationResult:
    """Validate that every required field carries a value."""
    missing = find_missing_fields(data, fields)
    if missing:
        return ValidationResult(
            is_valid=False,
            error=f"Missing required fields: {', '.join(missing)}",
            error_type="MISSING_FIELDS",
        )
    return ValidationResult(is_valid=True)


def validate_upload(
    file_type: str,
    file_size: int,
    upload_count: int,
    max_uploads: int,
) -> ValidationResult:
    """Check a file against the session cap, size limit and allowed types."""
    if upload_count >= max_uploads:
        return ValidationResult(
            is_valid=False,
            error=f"Upload limit of {max_uploads} files reached for this session",
            error_type="SESSION_LIMIT",
        )

    if file_size > settings.upload_max_file_size:
        limit_mb = settings.upload_max_file_size / (1024 * 1024)
        return ValidationResult(
            is_valid=False,
            error=f"File is too large. Maximum size is {limit_mb:g} MB",
            error_type="FILE_TOO_LARGE",
        )

    if file_type.lower() not in settings.upload_allowed_types:
        return ValidationResult(
            is_valid=False,
            error=f"File type {file_type} is not allowed",
            error_type="INVALID_FILE_TYPE",
        )

    warnings = []
    if upload_count + 1 == max_uploads:
        warnings.append("This is the last upload allowed for the session")
    return ValidationResult(is_valid=True, warnings=warnings)


def validate_purge_request(confirmed: bool | None, reason: str | None) -> ValidationResult:
    """Validate the confirmation payload of a permanent user deletion."""
    if confirmed is not True:
        return ValidationResult(
            is_valid=False,
            error="Permanent deletion requires confirmed=true",
        )

    stripped = (reason or "").strip()
    if not stripped:
        return ValidationResult(
            is_valid=False,
            error="A reason is required for permanent deletion",
        )
    if len(stripped) < MIN_PURGE_REASON_LENGTH:
        return ValidationResult(
            is_valid=False,
            error=f"Reason must be at least {MIN_PURGE_REASON_LENGTH} characters",
        )

    return ValidationResult(is_valid=True)


REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def describe_validation_error(errors: Iterable[Mapping[str, Any]]) -> str:
    """Condense request validation errors into one message for the first field."""
    first = next(iter(errors), None)
    if first is None:
        return "Invalid request"

    message = first.get("msg", "Invalid value")
    location = ".".join(
        str(part) for part in first.get("loc", ()) if part not in REQUEST_LOCATIONS
    )
    if first.get("type") == "missing":
        return f"Missing required field: {location}" if location else "Request body is required"
    return f"{location}: {message}" if location else message
