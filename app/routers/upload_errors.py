"""Admin routes for reviewing failed uploads."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import NotFoundError, not_found_exception
from app.core.security import ADMIN_ROLES, CurrentUser, require_roles
from app.schemas.admin import UploadErrorResponse
from app.services.upload_error_service import UploadErrorService, get_upload_error_service
from app.utils.filters import UploadErrorFilter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/upload-errors", tags=["admin", "upload-errors"])

require_admin = require_roles(*ADMIN_ROLES)


@router.get("")
async def list_upload_errors(
    error_type: str | None = Query(default=None, alias="errorType"),
    retryable: bool | None = Query(default=None),
    resolved: bool | None = Query(default=None),
    date_range: str | None = Query(default=None, alias="dateRange"),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user: CurrentUser = Depends(require_admin),
    service: UploadErrorService = Depends(get_upload_error_service),
):
    filters = UploadErrorFilter(
        error_type=error_type,
        retryable=retryable,
        resolved=resolved,
        date_range=date_range,
    )
    try:
        errors, total = await service.list_errors(filters, limit=limit, offset=offset)
    except SQLAlchemyError as e:
        logger.error(f"Database error listing upload errors: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch upload errors")

    return {
        "success": True,
        "errors": [
            UploadErrorResponse.model_validate(error).model_dump(mode="json", by_alias=True)
            for error in errors
        ],
        "pagination": {
            "total": total,
            "limit": limit,
            "offset": offset,
            "hasMore": offset + len(errors) < total,
        },
    }


@router.patch("/{error_id}/resolve")
async def resolve_upload_error(
    error_id: str,
    user: CurrentUser = Depends(require_admin),
    service: UploadErrorService = Depends(get_upload_error_service),
):
    try:
        error = await service.resolve(error_id)
    except NotFoundError:
        raise not_found_exception("Upload error not found")
    except SQLAlchemyError as e:
        logger.error(f"Database error resolving upload error {error_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to resolve upload error")

    logger.info(f"Upload error {error_id} resolved by {user.id}")
    return {
        "success": True,
        "error": UploadErrorResponse.model_validate(error).model_dump(
            mode="json", by_alias=True
        ),
    }


@router.delete("")
async def delete_upload_errors(
    error_id: str | None = Query(default=None, alias="errorId"),
    all_resolved: bool = Query(default=False, alias="allResolved"),
    user: CurrentUser = Depends(require_admin),
    service: UploadErrorService = Depends(get_upload_error_service),
):
    """Delete one error by id, or every resolved error with ``allResolved=true``."""
    if not all_resolved and not error_id:
        raise HTTPException(
            status_code=400, detail="Either errorId or allResolved=true is required"
        )

    try:
        if all_resolved:
            deleted = await service.delete_resolved()
        else:
            deleted = await service.delete_error(error_id)
    except SQLAlchemyError as e:
        logger.error(f"Database error deleting upload errors: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete upload errors")

    return {"success": True, "deleted": deleted}
