"""Job application intake and administration."""

import logging
from typing import Any

from fastapi import Depends
from redis.exceptions import RedisError
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.redis_client import StatsCache
from app.core.storage import get_session, utc_now
from app.models.enums import ApplicationStatus
from app.models.file_upload import FileUpload
from app.models.job_application import JobApplication
from app.schemas.job_application import (
    JobApplicationCreate,
    JobApplicationStats,
    RecentApplication,
)
from app.services.application_session_service import ApplicationSessionService
from app.utils.filters import JobApplicationFilter
from app.utils.pagination import Pagination

logger = logging.getLogger(__name__)

STATS_CACHE_KEY = "job_applications"
RECENT_APPLICATIONS_LIMIT = 5

# Request file id field -> application column receiving the file URL
DOCUMENT_FIELDS = {
    "resume_file_id": "resume_url",
    "drivers_license_file_id": "drivers_license_url",
    "insurance_file_id": "insurance_url",
    "vehicle_registration_file_id": "vehicle_registration_url",
    "food_handler_file_id": "food_handler_url",
    "hipaa_file_id": "hipaa_url",
    "driver_photo_file_id": "driver_photo_url",
    "car_photo_file_id": "car_photo_url",
    "equipment_photo_file_id": "equipment_photo_url",
}


class JobApplicationService:
    """Service for submitting, listing and reviewing job applications."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def submit(
        self, request: JobApplicationCreate, profile_id: str | None = None
    ) -> JobApplication:
        """Create a pending application and claim its uploaded documents."""
        sessions = ApplicationSessionService(self.session)
        app_session = None
        if request.session_token:
            app_session = await sessions.get_usable_session(request.session_token)

        address = request.address
        application = JobApplication(
            profile_id=profile_id,
            first_name=request.first_name.strip(),
            last_name=request.last_name.strip(),
            email=str(request.email).lower(),
            phone=request.phone,
            position=request.role.strip(),
            address_street=address.street if address else None,
            address_city=address.city if address else None,
            address_state=address.state if address else None,
            address_zip=address.zip if address else None,
            education=request.education,
            work_experience=request.work_experience,
            skills=request.skills,
            cover_letter=request.cover_letter,
            status=ApplicationStatus.PENDING,
        )
        self.session.add(application)
        await self.session.flush()

        file_ids = {
            field: getattr(request, field)
            for field in DOCUMENT_FIELDS
            if getattr(request, field)
        }
        if file_ids:
            uploads = await self._claim_uploads(
                list(file_ids.values()), application.id, app_session
            )
            for field, file_id in file_ids.items():
                upload = uploads.get(file_id)
                if upload is not None:
                    setattr(application, DOCUMENT_FIELDS[field], upload.file_url)
                else:
                    logger.warning(
                        f"Application {application.id}: file {file_id} not found for {field}"
                    )

        if app_session is not None:
            sessions.mark_completed(app_session, application.id)

        await self.session.commit()
        await self._invalidate_stats()

        logger.info(
            f"Job application {application.id} submitted for {application.position}"
        )
        return await self.get_application(application.id)

    async def _claim_uploads(
        self,
        file_ids: list[str],
        application_id: str,
        app_session=None,
    ) -> dict[str, FileUpload]:
        """Link uploads to the application and make them permanent.

        Only unclaimed temporary uploads made under an application session
        qualify, so order attachments can never be claimed.
        """
        query = select(FileUpload).where(
            FileUpload.id.in_(file_ids),
            FileUpload.is_temporary.is_(True),
            FileUpload.job_application_id.is_(None),
        )
        if app_session is not None:
            query = query.where(FileUpload.application_session_id == app_session.id)
        else:
            query = query.where(FileUpload.application_session_id.is_not(None))
        result = await self.session.execute(query)
        uploads = {upload.id: upload for upload in result.scalars().all()}

        if uploads:
            await self.session.execute(
                update(FileUpload)
                .where(FileUpload.id.in_(list(uploads)))
                .values(job_application_id=application_id, is_temporary=False)
            )
        return uploads

    async def list_applications(
        self, filters: JobApplicationFilter, pagination: Pagination
    ) -> tuple[list[JobApplication], int]:
        """Return one page of applications, newest first, and the total."""
        conditions = filters.conditions()
        total = await self.session.scalar(
            select(func.count()).select_from(JobApplication).where(*conditions)
        )
        result = await self.session.execute(
            select(JobApplication)
            .where(*conditions)
            .order_by(JobApplication.created_at.desc())
            .offset(pagination.skip)
            .limit(pagination.take)
        )
        return list(result.scalars().all()), total or 0

    async def get_stats(self) -> dict[str, Any]:
        """Aggregate counts by status and position, served from cache when warm."""
        try:
            cached = await StatsCache.get(STATS_CACHE_KEY)
        except RedisError as e:
            logger.warning(f"Stats cache unavailable: {e}")
            cached = None
        if cached is not None:
            return cached

        stats = await self._compute_stats()
        payload = stats.model_dump(mode="json", by_alias=True)
        try:
            await StatsCache.set(STATS_CACHE_KEY, payload)
        except RedisError as e:
            logger.warning(f"Failed to cache job application stats: {e}")
        return payload

    async def _compute_stats(self) -> JobApplicationStats:
        active = JobApplication.deleted_at.is_(None)

        status_rows = await self.session.execute(
            select(JobApplication.status, func.count())
            .where(active)
            .group_by(JobApplication.status)
        )
        by_status = {status: count for status, count in status_rows.all()}

        position_rows = await self.session.execute(
            select(JobApplication.position, func.count())
            .where(active)
            .group_by(JobApplication.position)
        )

        recent = await self.session.execute(
            select(JobApplication)
            .where(active)
            .order_by(JobApplication.created_at.desc())
            .limit(RECENT_APPLICATIONS_LIMIT)
        )

        return JobApplicationStats(
            total_applications=sum(by_status.values()),
            pending_applications=by_status.get(ApplicationStatus.PENDING, 0),
            approved_applications=by_status.get(ApplicationStatus.APPROVED, 0),
            rejected_applications=by_status.get(ApplicationStatus.REJECTED, 0),
            interviewing_applications=by_status.get(ApplicationStatus.INTERVIEWING, 0),
            applications_by_position={
                position: count for position, count in position_rows.all()
            },
            recent_applications=[
                RecentApplication.model_validate(app) for app in recent.scalars().all()
            ],
        )

    async def get_application(self, application_id: str) -> JobApplication:
        result = await self.session.execute(
            select(JobApplication)
            .where(
                JobApplication.id == application_id,
                JobApplication.deleted_at.is_(None),
            )
            .execution_options(populate_existing=True)
        )
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFoundError("Job application", application_id)
        return application

    async def update_status(
        self, application_id: str, status: ApplicationStatus
    ) -> JobApplication:
        application = await self.get_application(application_id)
        previous = application.status
        application.status = status
        await self.session.commit()
        await self._invalidate_stats()
        logger.info(
            f"Job application {application_id} status {previous.value} -> {status.value}"
        )
        return application

    async def soft_delete(self, application_id: str) -> JobApplication:
        application = await self.get_application(application_id)
        application.deleted_at = utc_now()
        await self.session.commit()
        await self._invalidate_stats()
        logger.info(f"Job application {application_id} soft deleted")
        return application

    async def _invalidate_stats(self) -> None:
        try:
            await StatsCache.invalidate(STATS_CACHE_KEY)
        except RedisError as e:
            logger.warning(f"Failed to invalidate stats cache: {e}")


def get_job_application_service(
    session: AsyncSession = Depends(get_session),
) -> JobApplicationService:
    return JobApplicationService(session)
