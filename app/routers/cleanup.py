"""Admin routes for soft-deleted user cleanup."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.security import CurrentUser, require_roles
from app.core.storage import utc_now
from app.models.enums import AuditAction, UserType
from app.schemas.admin import CleanupRequest
from app.schemas.common import PerformedBy
from app.services.audit_service import AuditService
from app.services.cleanup_service import (
    CleanupConfig,
    SoftDeleteCleanupService,
    get_cleanup_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/cleanup", tags=["admin", "cleanup"])

require_cleanup_viewer = require_roles(
    UserType.SUPER_ADMIN, detail="Only Super Admin can access cleanup functions"
)
require_cleanup_runner = require_roles(
    UserType.SUPER_ADMIN, detail="Only Super Admin can run cleanup operations"
)


@router.get("")
async def get_cleanup_status(
    include_report: bool = Query(default=False, alias="includeReport"),
    user: CurrentUser = Depends(require_cleanup_viewer),
    service: SoftDeleteCleanupService = Depends(get_cleanup_service),
):
    """Current cleanup metrics, with the full report when requested."""
    try:
        response = {
            "metrics": await service.get_cleanup_metrics(),
            "timestamp": utc_now().isoformat(),
        }
        if include_report:
            response["report"] = await service.generate_cleanup_report()
    except SQLAlchemyError as e:
        logger.error(f"Failed to get cleanup metrics: {e}")
        raise HTTPException(status_code=500, detail="Failed to get cleanup metrics")
    return response


@router.post("")
async def run_manual_cleanup(
    payload: CleanupRequest | None = None,
    user: CurrentUser = Depends(require_cleanup_runner),
    service: SoftDeleteCleanupService = Depends(get_cleanup_service),
):
    """Run a cleanup now. Real deletion needs ``dryRun=false`` and ``force=true``."""
    payload = payload or CleanupRequest()
    if not payload.dry_run and not payload.force:
        raise HTTPException(
            status_code=400,
            detail="Non-dry-run cleanup requires force=true to confirm permanent deletion",
        )

    defaults = CleanupConfig()
    service.config = CleanupConfig(
        retention_days=payload.retention_days or settings.cleanup_retention_days,
        batch_size=payload.batch_size or settings.cleanup_batch_size,
        max_daily_deletions=payload.max_daily_deletions
        or settings.cleanup_max_daily_deletions,
        dry_run=payload.dry_run,
        include_user_types=payload.include_user_types or defaults.include_user_types,
        exclude_user_types=payload.exclude_user_types
        if payload.exclude_user_types is not None
        else defaults.exclude_user_types,
    )
    config = service.config.to_dict()
    audit = AuditService(service.session)

    try:
        await audit.record_and_commit(
            user.id,
            AuditAction.MANUAL_CLEANUP_INITIATED,
            user.id,
            reason=f"Manual cleanup initiated by {user.email or user.id}",
            metadata={"operation": "manual_cleanup", "config": config},
        )
        logger.info(f"Manual cleanup initiated by {user.id}: {config}")

        result = await service.run_cleanup()

        await audit.record_and_commit(
            user.id,
            AuditAction.MANUAL_CLEANUP_COMPLETED,
            user.id,
            reason=f"Manual cleanup completed: {result['processed']} users processed",
            metadata={"operation": "manual_cleanup", "config": config, "result": result},
        )
    except SQLAlchemyError as e:
        logger.error(f"Manual cleanup failed: {e}")
        raise HTTPException(status_code=500, detail="Manual cleanup failed")

    mode = "Dry run" if payload.dry_run else "Cleanup"
    return {
        "message": f"{mode} completed: {result['processed']} users processed",
        "result": result,
        "performedBy": PerformedBy(id=user.id, email=user.email).model_dump(by_alias=True),
    }
