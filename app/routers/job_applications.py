"""API routes for job applications: public intake and admin review."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import InvalidSessionError, NotFoundError, not_found_exception
from app.core.security import ADMIN_ROLES, CurrentUser, require_roles
from app.models.enums import ApplicationStatus
from app.schemas.job_application import (
    JobApplicationCreate,
    JobApplicationListResponse,
    JobApplicationResponse,
    JobApplicationStats,
    JobApplicationSubmitted,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from app.services.job_application_service import (
    JobApplicationService,
    get_job_application_service,
)
from app.utils.filters import JobApplicationFilter
from app.utils.pagination import Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/job-applications", tags=["job-applications"])
admin_router = APIRouter(
    prefix="/api/admin/job-applications", tags=["admin", "job-applications"]
)

require_admin = require_roles(*ADMIN_ROLES)


@router.post("", response_model=JobApplicationSubmitted)
async def submit_job_application(
    payload: JobApplicationCreate,
    service: JobApplicationService = Depends(get_job_application_service),
):
    """Submit a job application, optionally completing an upload session."""
    try:
        application = await service.submit(payload)
    except InvalidSessionError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except SQLAlchemyError as e:
        logger.error(f"Database error submitting job application: {e}")
        raise HTTPException(
            status_code=500,
            detail="Failed to submit application. Please try again later.",
        )
    return JobApplicationSubmitted(id=application.id)


@admin_router.get(
    "", response_model=JobApplicationListResponse | JobApplicationStats
)
async def list_job_applications(
    status: ApplicationStatus | None = Query(default=None),
    position: str | None = Query(default=None),
    search: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    stats_only: bool = Query(default=False, alias="statsOnly"),
    user: CurrentUser = Depends(require_admin),
    service: JobApplicationService = Depends(get_job_application_service),
):
    """List applications with filters, or aggregate statistics when statsOnly."""
    try:
        if stats_only:
            return JobApplicationStats.model_validate(await service.get_stats())

        pagination = Pagination(page=page, limit=limit)
        applications, total = await service.list_applications(
            JobApplicationFilter(status=status, position=position, search=search),
            pagination,
        )
    except SQLAlchemyError as e:
        logger.error(f"Database error listing job applications: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch job applications")

    return JobApplicationListResponse(
        applications=[JobApplicationResponse.model_validate(a) for a in applications],
        total_count=total,
        total_pages=pagination.total_pages(total),
        current_page=pagination.page,
    )


@admin_router.get("/{application_id}", response_model=JobApplicationResponse)
async def get_job_application(
    application_id: str,
    user: CurrentUser = Depends(require_admin),
    service: JobApplicationService = Depends(get_job_application_service),
):
    """Get one application with its uploaded documents."""
    try:
        return await service.get_application(application_id)
    except NotFoundError:
        raise not_found_exception("Job application not found")
    except SQLAlchemyError as e:
        logger.error(f"Database error loading job application {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch job application")


@admin_router.patch("/{application_id}/status", response_model=StatusUpdateResponse)
async def update_job_application_status(
    application_id: str,
    payload: StatusUpdateRequest,
    user: CurrentUser = Depends(require_admin),
    service: JobApplicationService = Depends(get_job_application_service),
):
    """Move an application to a new review status."""
    try:
        application = await service.update_status(application_id, payload.status)
    except NotFoundError:
        raise not_found_exception("Job application not found")
    except SQLAlchemyError as e:
        logger.error(f"Database error updating job application {application_id}: {e}")
        raise HTTPException(
            status_code=500, detail="Failed to update job application status"
        )

    logger.info(f"User {user.id} set application {application_id} to {payload.status.value}")
    return StatusUpdateResponse(
        application=JobApplicationResponse.model_validate(application)
    )


@admin_router.delete("/{application_id}")
async def delete_job_application(
    application_id: str,
    user: CurrentUser = Depends(require_admin),
    service: JobApplicationService = Depends(get_job_application_service),
):
    """Soft delete an application."""
    try:
        application = await service.soft_delete(application_id)
    except NotFoundError:
        raise not_found_exception("Job application not found")
    except SQLAlchemyError as e:
        logger.error(f"Database error deleting job application {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete job application")

    return {
        "success": True,
        "id": application.id,
        "deletedAt": application.deleted_at.isoformat(),
    }
