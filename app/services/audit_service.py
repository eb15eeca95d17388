"""Append-only audit trail writes."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.storage import utc_now
from app.models.audit import UserAudit
from app.models.enums import AuditAction

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


class AuditService:
    """Adds audit entries to the caller's session; the caller commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def record(
        self,
        user_id: str,
        action: AuditAction | str,
        performed_by: str | None,
        reason: str | None = None,
        changes: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> UserAudit:
        action_value = action.value if isinstance(action, AuditAction) else action
        entry = UserAudit(
            user_id=user_id,
            action=action_value,
            performed_by=performed_by,
            reason=reason,
            changes=changes,
            metadata_={"timestamp": utc_now().isoformat(), **(metadata or {})},
        )
        self.session.add(entry)
        logger.debug(f"Audit {action_value} for {user_id} by {performed_by}")
        return entry

    async def record_and_commit(self, *args: Any, **kwargs: Any) -> UserAudit:
        entry = self.record(*args, **kwargs)
        await self.session.commit()
        return entry
