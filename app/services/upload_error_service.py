"""Persistence of failed upload attempts and admin queries over them."""

import json
import logging
import uuid
from typing import Any

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.storage import get_session, utc_now
from app.models.upload_error import UploadError
from app.utils.filters import UploadErrorFilter

logger = logging.getLogger(__name__)


def parse_details(raw: str | None) -> Any | None:
    """Decode stored JSON details, None when absent or malformed."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


class UploadErrorService:
    """Records and manages upload error log entries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log_error(
        self,
        error_type: str,
        message: str,
        user_message: str,
        details: dict[str, Any] | None = None,
        user_id: str | None = None,
        retryable: bool = False,
        correlation_id: str | None = None,
    ) -> UploadError:
        """Store a failed upload attempt and return the saved entry."""
        entry = UploadError(
            correlation_id=correlation_id or uuid.uuid4().hex,
            error_type=error_type,
            message=message,
            user_message=user_message,
            details=json.dumps(details, default=str) if details is not None else None,
            user_id=user_id,
            retryable=retryable,
        )
        self.session.add(entry)
        await self.session.commit()
        logger.warning(
            f"Upload error logged: {error_type} ({entry.correlation_id}) - {message}"
        )
        return entry

    async def list_errors(
        self,
        filters: UploadErrorFilter,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[UploadError], int]:
        """Return one page of matching errors, newest first, and the total."""
        conditions = filters.conditions(utc_now())

        total = await self.session.scalar(
            select(func.count()).select_from(UploadError).where(*conditions)
        )
        result = await self.session.execute(
            select(UploadError)
            .where(*conditions)
            .order_by(UploadError.timestamp.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def resolve(self, error_id: str) -> UploadError:
        entry = await self.session.get(UploadError, error_id)
        if entry is None:
            raise NotFoundError("Upload error", error_id)
        entry.resolved = True
        await self.session.commit()
        return entry

    async def delete_error(self, error_id: str) -> int:
        result = await self.session.execute(
            delete(UploadError).where(UploadError.id == error_id)
        )
        await self.session.commit()
        return result.rowcount or 0

    async def delete_resolved(self) -> int:
        result = await self.session.execute(
            delete(UploadError).where(UploadError.resolved.is_(True))
        )
        await self.session.commit()
        logger.info(f"Deleted {result.rowcount} resolved upload errors")
        return result.rowcount or 0


def get_upload_error_service(
    session: AsyncSession = Depends(get_session),
) -> UploadErrorService:
    return UploadErrorService(session)
