"""Soft delete, restore and permanent deletion of user profiles."""

import logging
from typing import Any

from fastapi import Depends
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from app.core.storage import get_session, utc_now
from app.models.enums import ACTIVE_ORDER_STATUSES, AuditAction, UserType
from app.models.file_upload import FileUpload
from app.models.order import CateringRequest, OnDemandRequest
from app.models.profile import Address, Profile
from app.services.audit_service import AuditService
from app.utils.filters import DeletedUserFilter
from app.utils.pagination import Pagination

logger = logging.getLogger(__name__)

ORDER_MODELS = (CateringRequest, OnDemandRequest)


def _iso(value) -> str | None:
    return value.isoformat() if value else None


class UserSoftDeleteService:
    """User lifecycle operations; every change writes a ``UserAudit`` entry."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.audit = AuditService(session)

    async def _get_profile(self, user_id: str) -> Profile:
        profile = await self.session.get(Profile, user_id, populate_existing=True)
        if profile is None:
            raise NotFoundError("User", user_id)
        return profile

    async def count_active_orders(self, user_id: str) -> int:
        total = 0
        for model in ORDER_MODELS:
            total += await self.session.scalar(
                select(func.count())
                .select_from(model)
                .where(
                    model.user_id == user_id,
                    model.status.in_(ACTIVE_ORDER_STATUSES),
                    model.deleted_at.is_(None),
                )
            ) or 0
        return total

    async def soft_delete_user(
        self, user_id: str, deleted_by: str, reason: str | None = None
    ) -> dict[str, Any]:
        """Mark a profile deleted, refusing super admins, self-deletion and active orders."""
        profile = await self._get_profile(user_id)

        if profile.type == UserType.SUPER_ADMIN:
            raise PermissionDeniedError("Forbidden: Super Admin users cannot be deleted")
        if profile.id == deleted_by:
            raise PermissionDeniedError("Forbidden: Cannot delete your own account")
        if profile.is_deleted:
            raise ConflictError("User is already deleted")

        active_orders = await self.count_active_orders(user_id)
        if active_orders:
            raise ConflictError(
                "Cannot delete user with active orders. Complete or cancel orders first."
            )

        profile.deleted_at = utc_now()
        profile.deleted_by = deleted_by
        profile.deletion_reason = reason
        self.audit.record(
            user_id,
            AuditAction.SOFT_DELETE,
            deleted_by,
            reason=reason or "User soft deleted",
            changes={
                "before": {"deletedAt": None, "deletedBy": None, "deletionReason": None},
                "after": {
                    "deletedAt": _iso(profile.deleted_at),
                    "deletedBy": deleted_by,
                    "deletionReason": reason,
                },
            },
            metadata={"operation": "soft_delete"},
        )
        await self.session.commit()

        logger.info(f"User {user_id} soft deleted by {deleted_by}")
        return {
            "userId": profile.id,
            "deletedAt": _iso(profile.deleted_at),
            "deletedBy": deleted_by,
            "deletionReason": reason,
        }

    async def restore_user(self, user_id: str, restored_by: str) -> dict[str, Any]:
        profile = await self._get_profile(user_id)
        if not profile.is_deleted:
            raise ConflictError("User is not soft deleted")

        before = {
            "deletedAt": _iso(profile.deleted_at),
            "deletedBy": profile.deleted_by,
            "deletionReason": profile.deletion_reason,
        }
        profile.deleted_at = None
        profile.deleted_by = None
        profile.deletion_reason = None
        self.audit.record(
            user_id,
            AuditAction.RESTORE,
            restored_by,
            reason="User restored from soft delete",
            changes={
                "before": before,
                "after": {"deletedAt": None, "deletedBy": None, "deletionReason": None},
            },
            metadata={"operation": "restore"},
        )
        await self.session.commit()

        logger.info(f"User {user_id} restored by {restored_by}")
        return {
            "userId": profile.id,
            "restoredAt": utc_now().isoformat(),
            "restoredBy": restored_by,
        }

    async def get_deleted_users(
        self, filters: DeletedUserFilter, pagination: Pagination
    ) -> tuple[list[Profile], int]:
        """Soft-deleted profiles, most recently deleted first."""
        conditions = filters.conditions()
        total = await self.session.scalar(
            select(func.count()).select_from(Profile).where(*conditions)
        )
        result = await self.session.execute(
            select(Profile)
            .where(*conditions)
            .order_by(Profile.deleted_at.desc())
            .offset(pagination.skip)
            .limit(pagination.take)
        )
        return list(result.scalars().all()), total or 0

    async def permanently_delete_user(
        self,
        user_id: str,
        performed_by: str | None = None,
        reason: str | None = None,
        operation: str = "permanent_delete",
    ) -> dict[str, Any]:
        """Remove a soft-deleted profile and everything it exclusively owns.

        Orders placed by the user are deleted with their attachments, the
        user's remaining uploads are detached, and addresses the user created
        are deleted when nothing else references them, unlinked otherwise.
        """
        profile = await self._get_profile(user_id)
        if not profile.is_deleted:
            raise ConflictError("User must be soft deleted before permanent deletion")
        if profile.type == UserType.SUPER_ADMIN:
            raise PermissionDeniedError("Super Admin users cannot be permanently deleted")

        snapshot = {
            "id": profile.id,
            "email": profile.email,
            "type": profile.type.value if profile.type else None,
            "deletedAt": _iso(profile.deleted_at),
            "deletedBy": profile.deleted_by,
        }

        orders_deleted = 0
        for model, upload_column in (
            (CateringRequest, FileUpload.catering_request_id),
            (OnDemandRequest, FileUpload.on_demand_id),
        ):
            order_ids = select(model.id).where(model.user_id == user_id)
            await self.session.execute(
                delete(FileUpload).where(upload_column.in_(order_ids))
            )
            result = await self.session.execute(
                delete(model).where(model.user_id == user_id)
            )
            orders_deleted += result.rowcount or 0

        uploads = await self.session.execute(
            update(FileUpload).where(FileUpload.user_id == user_id).values(user_id=None)
        )

        addresses_deleted, addresses_updated = await self._release_addresses(user_id)

        await self.session.delete(profile)
        self.audit.record(
            user_id,
            AuditAction.PERMANENT_DELETE,
            performed_by or snapshot["deletedBy"],
            reason=reason or "User permanently deleted for GDPR compliance",
            changes={"before": snapshot, "after": None},
            metadata={
                "operation": operation,
                "affectedRecords": {
                    "ordersDeleted": orders_deleted,
                    "fileUploadsUpdated": uploads.rowcount or 0,
                    "addressesDeleted": addresses_deleted,
                    "addressesUpdated": addresses_updated,
                },
            },
        )
        await self.session.commit()

        logger.info(
            f"User {user_id} permanently deleted ({operation}): {orders_deleted} orders, "
            f"{addresses_deleted} addresses removed"
        )
        return {
            "userId": user_id,
            "email": snapshot["email"],
            "deletedAt": utc_now().isoformat(),
            "deletedBy": performed_by or snapshot["deletedBy"],
            "affectedRecords": {
                "ordersDeleted": orders_deleted,
                "fileUploadsUpdated": uploads.rowcount or 0,
                "addressesDeleted": addresses_deleted,
                "addressesUpdated": addresses_updated,
            },
        }

    async def _release_addresses(self, user_id: str) -> tuple[int, int]:
        result = await self.session.execute(
            select(Address).where(Address.created_by == user_id)
        )
        deleted = updated = 0
        for address in result.scalars().all():
            if address.is_shared or await self._address_in_use(address.id):
                address.created_by = None
                updated += 1
            else:
                await self.session.delete(address)
                deleted += 1
        return deleted, updated

    async def _address_in_use(self, address_id: str) -> bool:
        for model in ORDER_MODELS:
            used = await self.session.scalar(
                select(func.count())
                .select_from(model)
                .where(
                    or_(
                        model.pickup_address_id == address_id,
                        model.delivery_address_id == address_id,
                    )
                )
            )
            if used:
                return True
        return False


def get_user_soft_delete_service(
    session: AsyncSession = Depends(get_session),
) -> UserSoftDeleteService:
    return UserSoftDeleteService(session)
