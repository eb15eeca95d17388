"""Retention-based permanent deletion of soft-deleted users."""

import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any

from fastapi import Depends
from sqlalchemy import ColumnElement, Row, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ApplicationError
from app.core.storage import get_session, utc_now
from app.models.audit import UserAudit
from app.models.enums import AuditAction, UserType
from app.models.profile import Profile
from app.services.audit_service import SYSTEM_ACTOR
from app.services.user_soft_delete_service import UserSoftDeleteService

logger = logging.getLogger(__name__)

CLEANUP_OPERATION = "automated_cleanup"
RECENT_CLEANUPS_LIMIT = 100


@dataclass
class CleanupConfig:
    retention_days: int = 90
    batch_size: int = 50
    max_daily_deletions: int = 1000
    dry_run: bool = False
    include_user_types: list[UserType] = field(default_factory=list)
    exclude_user_types: list[UserType] = field(
        default_factory=lambda: [UserType.SUPER_ADMIN]
    )

    @classmethod
    def from_settings(cls) -> "CleanupConfig":
        """Configuration used by scheduled runs."""
        return cls(
            retention_days=settings.cleanup_retention_days,
            batch_size=settings.cleanup_batch_size,
            max_daily_deletions=settings.cleanup_max_daily_deletions,
            dry_run=settings.cleanup_dry_run,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["include_user_types"] = [t.value for t in self.include_user_types]
        data["exclude_user_types"] = [t.value for t in self.exclude_user_types]
        return data


@dataclass
class CleanupResult:
    success: bool = False
    processed: int = 0
    permanently_deleted: int = 0
    archived: int = 0
    errors: list[str] = field(default_factory=list)
    duration: int = 0
    timestamp: str = field(default_factory=lambda: utc_now().isoformat())

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "processed": self.processed,
            "permanentlyDeleted": self.permanently_deleted,
            "archived": self.archived,
            "errors": self.errors,
            "duration": self.duration,
            "timestamp": self.timestamp,
        }


class SoftDeleteCleanupService:
    """Permanently deletes users whose soft delete is older than the retention window.

    Runs oldest deletions first, in batches, and never exceeds the daily
    deletion quota counted from today's cleanup audit entries. A dry run only
    reports what would be deleted.
    """

    def __init__(self, session: AsyncSession, config: CleanupConfig | None = None):
        self.session = session
        self.config = config or CleanupConfig()
        self.users = UserSoftDeleteService(session)

    def _eligible_conditions(self, now: datetime) -> list[ColumnElement[bool]]:
        cutoff = now - timedelta(days=self.config.retention_days)
        clauses: list[ColumnElement[bool]] = [
            Profile.deleted_at.is_not(None),
            Profile.deleted_at <= cutoff,
        ]
        if self.config.include_user_types:
            clauses.append(Profile.type.in_(self.config.include_user_types))
        if self.config.exclude_user_types:
            clauses.append(
                or_(
                    Profile.type.is_(None),
                    Profile.type.not_in(self.config.exclude_user_types),
                )
            )
        return clauses

    async def _cleanup_audits_since(self, since: datetime | None = None) -> list[UserAudit]:
        query = select(UserAudit).where(
            UserAudit.action == AuditAction.PERMANENT_DELETE.value
        )
        if since is not None:
            query = query.where(UserAudit.created_at >= since)
        result = await self.session.execute(query.order_by(UserAudit.created_at.desc()))
        return [a for a in result.scalars().all() if a.operation == CLEANUP_OPERATION]

    async def get_cleanup_metrics(self) -> dict[str, Any]:
        now = utc_now()
        conditions = self._eligible_conditions(now)

        total_eligible, oldest, newest = (
            await self.session.execute(
                select(
                    func.count(),
                    func.min(Profile.deleted_at),
                    func.max(Profile.deleted_at),
                ).where(*conditions)
            )
        ).one()

        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        processed_today = len(await self._cleanup_audits_since(today_start))

        return {
            "totalEligible": total_eligible or 0,
            "processedToday": processed_today,
            "remainingToProcess": max(0, (total_eligible or 0) - processed_today),
            "oldestDeletionDate": oldest.isoformat() if oldest else None,
            "newestDeletionDate": newest.isoformat() if newest else None,
        }

    async def run_cleanup(self) -> dict[str, Any]:
        started = time.perf_counter()
        result = CleanupResult()
        logger.info(f"Starting soft delete cleanup: {self.config.to_dict()}")

        try:
            metrics = await self.get_cleanup_metrics()
            quota = self.config.max_daily_deletions - metrics["processedToday"]
            if quota <= 0:
                logger.warning(
                    f"Daily deletion limit reached ({metrics['processedToday']}/"
                    f"{self.config.max_daily_deletions}), skipping cleanup"
                )
                result.success = True
                return result.to_dict()

            to_process = min(quota, metrics["totalEligible"])
            offset = 0
            attempted = 0
            while attempted < to_process:
                size = min(self.config.batch_size, to_process - attempted)
                try:
                    batch = await self._fetch_batch(offset, size)
                except SQLAlchemyError as e:
                    result.errors.append(f"Batch processing error: {e}")
                    logger.error(f"Cleanup batch failed after {attempted} users: {e}")
                    break
                if not batch:
                    break

                failed = await self._process_batch(batch, result)
                attempted += len(batch)
                # Rows that stay in the eligible set must be skipped next time
                offset += len(batch) if self.config.dry_run else failed
                logger.info(
                    f"Cleanup batch processed: {attempted}/{to_process}, "
                    f"deleted={result.permanently_deleted}"
                )

            result.success = not result.errors
            logger.info(f"Cleanup completed: {result.to_dict()}")
        except SQLAlchemyError as e:
            result.errors.append(f"Cleanup job failed: {e}")
            logger.error(f"Cleanup job failed: {e}")
        finally:
            result.duration = int((time.perf_counter() - started) * 1000)

        return result.to_dict()

    async def _fetch_batch(self, offset: int, size: int) -> list[Row]:
        result = await self.session.execute(
            select(
                Profile.id, Profile.email, Profile.deleted_at, Profile.deletion_reason
            )
            .where(*self._eligible_conditions(utc_now()))
            .order_by(Profile.deleted_at.asc())
            .offset(offset)
            .limit(size)
        )
        return list(result.all())

    async def _process_batch(self, batch: list[Row], result: CleanupResult) -> int:
        """Process one batch; return the number of users that failed."""
        failed = 0
        for row in batch:
            user_id, email = row.id, row.email
            if self.config.dry_run:
                logger.info(
                    f"DRY RUN: would permanently delete user {user_id} ({email}), "
                    f"deleted at {row.deleted_at}"
                )
                result.archived += 1
                result.processed += 1
                continue

            reason = (
                f"Automated cleanup: retention period of {self.config.retention_days} "
                f"days exceeded. Original deletion reason: "
                f"{row.deletion_reason or 'Not specified'}"
            )
            try:
                await self.users.permanently_delete_user(
                    user_id,
                    performed_by=SYSTEM_ACTOR,
                    reason=reason,
                    operation=CLEANUP_OPERATION,
                )
            except (ApplicationError, SQLAlchemyError) as e:
                await self.session.rollback()
                failed += 1
                result.errors.append(f"Failed to process user {user_id}: {e}")
                logger.error(f"Cleanup failed for user {user_id} ({email}): {e}")
                continue

            result.permanently_deleted += 1
            result.processed += 1
        return failed

    async def generate_cleanup_report(self) -> dict[str, Any]:
        metrics = await self.get_cleanup_metrics()
        audits = (await self._cleanup_audits_since())[:RECENT_CLEANUPS_LIMIT]

        recommendations = []
        if metrics["totalEligible"] > 500:
            recommendations.append(
                "High number of users eligible for cleanup. Consider increasing batch size or frequency."
            )
        if metrics["processedToday"] >= self.config.max_daily_deletions * 0.8:
            recommendations.append(
                "Approaching daily deletion limit. Consider increasing the limit if needed."
            )
        if metrics["oldestDeletionDate"]:
            oldest = datetime.fromisoformat(metrics["oldestDeletionDate"])
            days_since = (utc_now() - oldest).days
            if days_since > self.config.retention_days + 30:
                recommendations.append(
                    f"Oldest deletion is {days_since} days old, significantly past retention period."
                )

        return {
            "metrics": metrics,
            "recentCleanups": [
                {
                    "id": audit.id,
                    "userId": audit.user_id,
                    "performedBy": audit.performed_by,
                    "createdAt": audit.created_at.isoformat(),
                    "reason": audit.reason,
                    "metadata": audit.metadata_,
                }
                for audit in audits
            ],
            "recommendations": recommendations,
        }


def get_cleanup_service(session: AsyncSession = Depends(get_session)) -> SoftDeleteCleanupService:
    return SoftDeleteCleanupService(session)
