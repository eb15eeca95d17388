"""Issuance of rate-limited upload sessions for anonymous applicants."""

import logging
import secrets
from datetime import timedelta

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import InvalidSessionError, RateLimitExceededError, UploadRejectedError
from app.core.storage import get_session, utc_now
from app.models.application_session import ApplicationSession
from app.models.file_upload import FileUpload
from app.schemas.application_session import ApplicationSessionCreate, SessionUploadRequest
from app.services.upload_error_service import UploadErrorService
from app.utils.validators import validate_upload

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_CATEGORY = "job-application"


class ApplicationSessionService:
    """Creates sessions, enforces the per-IP limit and tracks session uploads."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def count_recent_sessions(self, ip_address: str) -> int:
        """Count sessions issued to an IP within the rate-limit window."""
        window_start = utc_now() - timedelta(
            minutes=settings.application_session_rate_window_minutes
        )
        count = await self.session.scalar(
            select(func.count())
            .select_from(ApplicationSession)
            .where(
                ApplicationSession.ip_address == ip_address,
                ApplicationSession.created_at >= window_start,
            )
        )
        return count or 0

    async def create_session(
        self,
        request: ApplicationSessionCreate,
        ip_address: str,
        user_agent: str | None = None,
    ) -> ApplicationSession:
        """Issue a new session unless the caller's IP is over the limit.

        The count and the insert are not isolated from concurrent requests, so
        a burst can admit one session above the limit.
        """
        recent = await self.count_recent_sessions(ip_address)
        if recent >= settings.application_session_rate_limit:
            logger.warning(
                f"Session rate limit hit for {ip_address}: {recent} in window"
            )
            raise RateLimitExceededError(
                settings.application_session_rate_limit,
                settings.application_session_rate_window_minutes,
            )

        now = utc_now()
        app_session = ApplicationSession(
            session_token=secrets.token_urlsafe(32),
            expires_at=now + timedelta(hours=settings.application_session_ttl_hours),
            max_uploads=settings.application_session_max_uploads,
            first_name=request.first_name.strip(),
            last_name=request.last_name.strip(),
            email=str(request.email).lower(),
            phone=request.phone,
            position=request.role.strip(),
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
            created_at=now,
        )
        self.session.add(app_session)
        await self.session.commit()

        logger.info(f"Issued application session {app_session.id} for {ip_address}")
        return app_session

    async def get_by_token(self, token: str) -> ApplicationSession | None:
        result = await self.session.execute(
            select(ApplicationSession).where(ApplicationSession.session_token == token)
        )
        return result.scalar_one_or_none()

    async def get_usable_session(self, token: str) -> ApplicationSession:
        """Return the session for a token if it is neither expired nor completed."""
        app_session = await self.get_by_token(token)
        if app_session is None or not app_session.is_usable():
            raise InvalidSessionError()
        return app_session

    async def register_upload(
        self, token: str, upload: SessionUploadRequest
    ) -> tuple[ApplicationSession, FileUpload]:
        """Attach an uploaded file to the session after validating it."""
        app_session = await self.get_usable_session(token)

        validation = validate_upload(
            upload.file_type,
            upload.file_size,
            app_session.upload_count,
            app_session.max_uploads,
        )
        if not validation.is_valid:
            entry = await UploadErrorService(self.session).log_error(
                error_type=validation.error_type or "VALIDATION_ERROR",
                message=f"Session {app_session.id}: {validation.error}",
                user_message=validation.error or "Upload rejected",
                details={
                    "sessionId": app_session.id,
                    "fileName": upload.file_name,
                    "fileType": upload.file_type,
                    "fileSize": upload.file_size,
                },
            )
            raise UploadRejectedError(
                entry.error_type, entry.user_message, entry.correlation_id
            )

        file_upload = FileUpload(
            file_name=upload.file_name,
            file_type=upload.file_type,
            file_size=upload.file_size,
            file_url=upload.file_url,
            category=upload.category or DEFAULT_UPLOAD_CATEGORY,
            is_temporary=True,
            application_session_id=app_session.id,
        )
        self.session.add(file_upload)
        app_session.upload_count += 1
        await self.session.commit()

        for warning in validation.warnings:
            logger.info(f"Session {app_session.id}: {warning}")
        return app_session, file_upload

    def mark_completed(self, app_session: ApplicationSession, job_application_id: str):
        """Close the session; the caller commits."""
        app_session.completed = True
        app_session.completed_at = utc_now()
        app_session.job_application_id = job_application_id


def get_application_session_service(
    session: AsyncSession = Depends(get_session),
) -> ApplicationSessionService:
    return ApplicationSessionService(session)
