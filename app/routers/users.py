"""API routes for the user soft delete lifecycle."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    conflict_exception,
    forbidden_exception,
    not_found_exception,
)
from app.core.security import ADMIN_ROLES, CurrentUser, require_roles
from app.core.storage import to_naive_utc
from app.models.enums import UserStatus, UserType
from app.schemas.user import (
    DeletedUserListResponse,
    DeletedUserResponse,
    PageInfo,
    PurgeRequest,
    SoftDeleteRequest,
)
from app.services.user_soft_delete_service import (
    UserSoftDeleteService,
    get_user_soft_delete_service,
)
from app.utils.filters import DeletedUserFilter
from app.utils.pagination import Pagination
from app.utils.validators import validate_purge_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

require_user_admin = require_roles(
    UserType.ADMIN,
    UserType.SUPER_ADMIN,
    detail="Forbidden: Only Admin or Super Admin can delete users",
)
require_restore_admin = require_roles(
    UserType.ADMIN,
    UserType.SUPER_ADMIN,
    detail="Forbidden: Only Admin or Super Admin can restore users",
)
require_admin = require_roles(*ADMIN_ROLES)
require_super_admin = require_roles(
    UserType.SUPER_ADMIN,
    detail="Forbidden: Only Super Admin can permanently delete users",
)


def _raise_for(error: Exception) -> None:
    if isinstance(error, NotFoundError):
        raise not_found_exception("User not found")
    if isinstance(error, PermissionDeniedError):
        raise forbidden_exception(error.message)
    if isinstance(error, ConflictError):
        raise conflict_exception(error.message)
    raise error


@router.get("/deleted", response_model=DeletedUserListResponse)
async def list_deleted_users(
    type: UserType | None = Query(default=None),
    status: UserStatus | None = Query(default=None),
    deleted_by: str | None = Query(default=None, alias="deletedBy"),
    deleted_after: datetime | None = Query(default=None, alias="deletedAfter"),
    deleted_before: datetime | None = Query(default=None, alias="deletedBefore"),
    search: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user: CurrentUser = Depends(require_admin),
    service: UserSoftDeleteService = Depends(get_user_soft_delete_service),
):
    """List soft-deleted users with filters."""
    pagination = Pagination(page=page, limit=limit)
    filters = DeletedUserFilter(
        type=type,
        status=status,
        deleted_by=deleted_by,
        deleted_after=to_naive_utc(deleted_after),
        deleted_before=to_naive_utc(deleted_before),
        search=search,
    )
    try:
        users, total = await service.get_deleted_users(filters, pagination)
    except SQLAlchemyError as e:
        logger.error(f"Database error listing deleted users: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch deleted users")

    total_pages = pagination.total_pages(total)
    return DeletedUserListResponse(
        users=[DeletedUserResponse.model_validate(u) for u in users],
        pagination=PageInfo(
            current_page=pagination.page,
            total_pages=total_pages,
            total_count=total,
            limit=pagination.limit,
            has_next_page=pagination.page < total_pages,
            has_prev_page=pagination.page > 1,
        ),
    )


@router.delete("/{user_id}")
async def soft_delete_user(
    user_id: str,
    payload: SoftDeleteRequest | None = None,
    user: CurrentUser = Depends(require_user_admin),
    service: UserSoftDeleteService = Depends(get_user_soft_delete_service),
):
    """Soft delete a user; the profile stays restorable until purged."""
    try:
        summary = await service.soft_delete_user(
            user_id, user.id, payload.reason if payload else None
        )
    except (NotFoundError, PermissionDeniedError, ConflictError) as e:
        _raise_for(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error soft deleting user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete user")

    return {"message": "User soft deleted successfully", "summary": summary}


@router.post("/{user_id}/restore")
async def restore_user(
    user_id: str,
    user: CurrentUser = Depends(require_restore_admin),
    service: UserSoftDeleteService = Depends(get_user_soft_delete_service),
):
    try:
        summary = await service.restore_user(user_id, user.id)
    except (NotFoundError, ConflictError) as e:
        _raise_for(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error restoring user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to restore user")

    return {"message": "User restored successfully", "summary": summary}


@router.delete("/{user_id}/purge")
async def purge_user(
    user_id: str,
    payload: PurgeRequest | None = None,
    user: CurrentUser = Depends(require_super_admin),
    service: UserSoftDeleteService = Depends(get_user_soft_delete_service),
):
    """Permanently delete a soft-deleted user. This cannot be undone."""
    payload = payload or PurgeRequest()
    check = validate_purge_request(payload.confirmed, payload.reason)
    if not check.is_valid:
        raise HTTPException(status_code=400, detail=check.error)

    try:
        summary = await service.permanently_delete_user(
            user_id, performed_by=user.id, reason=payload.reason.strip()
        )
    except (NotFoundError, PermissionDeniedError, ConflictError) as e:
        _raise_for(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error purging user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to permanently delete user")

    logger.info(f"User {user_id} purged by {user.id}")
    return {
        "message": "User permanently deleted successfully",
        "summary": summary,
        "warning": "This action cannot be undone. All user data has been permanently removed.",
    }
