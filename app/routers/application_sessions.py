"""API routes for anonymous applicant upload sessions."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    InvalidSessionError,
    RateLimitExceededError,
    UploadRejectedError,
    not_found_exception,
    rate_limited_exception,
    unauthorized_exception,
)
from app.schemas.application_session import (
    ApplicationSessionCreate,
    ApplicationSessionCreated,
    ApplicationSessionStatus,
    SessionUploadRequest,
    SessionUploadResponse,
)
from app.services.application_session_service import (
    ApplicationSessionService,
    get_application_session_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/application-sessions", tags=["application-sessions"])


def _client_ip(request: Request) -> str:
    """Caller IP, preferring the first hop of X-Forwarded-For."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


@router.post(
    "",
    response_model=ApplicationSessionCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_application_session(
    payload: ApplicationSessionCreate,
    request: Request,
    service: ApplicationSessionService = Depends(get_application_session_service),
):
    """Issue a short-lived upload session for a job applicant."""
    try:
        app_session = await service.create_session(
            payload,
            ip_address=_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    except RateLimitExceededError as e:
        raise rate_limited_exception(e.message, retry_after=e.window_minutes * 60)
    except SQLAlchemyError as e:
        logger.error(f"Database error creating application session: {e}")
        raise HTTPException(status_code=500, detail="Failed to create application session")

    return ApplicationSessionCreated(
        session_id=app_session.id,
        session_token=app_session.session_token,
        expires_at=app_session.expires_at,
        max_uploads=app_session.max_uploads,
    )


@router.get("/{token}", response_model=ApplicationSessionStatus)
async def get_application_session(
    token: str,
    service: ApplicationSessionService = Depends(get_application_session_service),
):
    """Report upload usage and expiry of a session."""
    try:
        app_session = await service.get_by_token(token)
    except SQLAlchemyError as e:
        logger.error(f"Database error loading application session: {e}")
        raise HTTPException(status_code=500, detail="Failed to load application session")

    if app_session is None:
        raise not_found_exception("Application session not found")

    return ApplicationSessionStatus(
        session_id=app_session.id,
        expires_at=app_session.expires_at,
        upload_count=app_session.upload_count,
        max_uploads=app_session.max_uploads,
        completed=app_session.completed,
        expired=app_session.is_expired(),
    )


@router.post(
    "/{token}/uploads",
    response_model=SessionUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_session_upload(
    token: str,
    payload: SessionUploadRequest,
    service: ApplicationSessionService = Depends(get_application_session_service),
):
    """Record a file uploaded under an application session."""
    try:
        app_session, file_upload = await service.register_upload(token, payload)
    except InvalidSessionError as e:
        raise unauthorized_exception(e.message)
    except UploadRejectedError as e:
        raise HTTPException(
            status_code=400,
            detail=e.user_message,
            headers={"X-Correlation-ID": e.correlation_id},
        )
    except SQLAlchemyError as e:
        logger.error(f"Database error registering upload: {e}")
        raise HTTPException(status_code=500, detail="Failed to register upload")

    return SessionUploadResponse(
        file_id=file_upload.id,
        file_url=file_upload.file_url,
        upload_count=app_session.upload_count,
    )
