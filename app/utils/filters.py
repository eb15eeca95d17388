"""Query filters for admin list endpoints."""

from datetime import datetime, timedelta

from sqlalchemy import ColumnElement, or_

from app.models.enums import ApplicationStatus, UserStatus, UserType
from app.models.job_application import JobApplication
from app.models.profile import Profile
from app.models.upload_error import UploadError

DATE_RANGES = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


def _contains(term: str) -> str:
    return f"%{term.strip()}%"


class JobApplicationFilter:
    """Status, position and free-text search over non-deleted applications."""

    def __init__(
        self,
        status: ApplicationStatus | None = None,
        position: str | None = None,
        search: str | None = None,
    ):
        self.status = status
        self.position = position
        self.search = search

    def conditions(self) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = [JobApplication.deleted_at.is_(None)]

        if self.status:
            clauses.append(JobApplication.status == self.status)

        if self.position:
            clauses.append(JobApplication.position == self.position)

        if self.search and self.search.strip():
            pattern = _contains(self.search)
            clauses.append(
                or_(
                    JobApplication.first_name.ilike(pattern),
                    JobApplication.last_name.ilike(pattern),
                    JobApplication.email.ilike(pattern),
                )
            )

        return clauses


class DeletedUserFilter:
    """Filters over soft-deleted profiles."""

    def __init__(
        self,
        type: UserType | None = None,
        status: UserStatus | None = None,
        deleted_by: str | None = None,
        deleted_after: datetime | None = None,
        deleted_before: datetime | None = None,
        search: str | None = None,
    ):
        self.type = type
        self.status = status
        self.deleted_by = deleted_by
        self.deleted_after = deleted_after
        self.deleted_before = deleted_before
        self.search = search

    def conditions(self) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = [Profile.deleted_at.is_not(None)]

        if self.type:
            clauses.append(Profile.type == self.type)
        if self.status:
            clauses.append(Profile.status == self.status)
        if self.deleted_by:
            clauses.append(Profile.deleted_by == self.deleted_by)
        if self.deleted_after:
            clauses.append(Profile.deleted_at >= self.deleted_after)
        if self.deleted_before:
            clauses.append(Profile.deleted_at <= self.deleted_before)

        if self.search and self.search.strip():
            pattern = _contains(self.search)
            clauses.append(
                or_(
                    Profile.name.ilike(pattern),
                    Profile.email.ilike(pattern),
                    Profile.contact_name.ilike(pattern),
                    Profile.company_name.ilike(pattern),
                )
            )

        return clauses


class UploadErrorFilter:
    """Type, retryability, resolution and recency filters over upload errors."""

    def __init__(
        self,
        error_type: str | None = None,
        retryable: bool | None = None,
        resolved: bool | None = None,
        date_range: str | None = None,
    ):
        self.error_type = error_type
        self.retryable = retryable
        self.resolved = resolved
        self.date_range = date_range

    def conditions(self, now: datetime) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []

        if self.error_type:
            clauses.append(UploadError.error_type == self.error_type)
        if self.retryable is not None:
            clauses.append(UploadError.retryable == self.retryable)
        if self.resolved is not None:
            clauses.append(UploadError.resolved == self.resolved)
        if self.date_range in DATE_RANGES:
            clauses.append(UploadError.timestamp >= now - DATE_RANGES[self.date_range])

        return clauses
