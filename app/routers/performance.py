"""Admin performance dashboard backed by Redis snapshots."""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Response
from redis.exceptions import RedisError

from app.core.config import settings
from app.core.redis_client import RequestTimingStore, StatsCache
from app.core.security import ADMIN_ROLES, CurrentUser, require_roles
from app.core.storage import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/performance", tags=["admin", "performance"])

require_admin = require_roles(*ADMIN_ROLES)


@router.get("")
async def get_performance_metrics(
    response: Response,
    user: CurrentUser = Depends(require_admin),
):
    """Request timings per route and stats cache efficiency."""
    started = time.perf_counter()
    try:
        dashboard = await RequestTimingStore.get_report()
        cache = await StatsCache.get_stats()
    except RedisError as e:
        logger.error(f"Failed to fetch performance metrics: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch performance metrics")

    response.headers["Cache-Control"] = "no-cache"
    response.headers["X-Response-Time"] = f"{(time.perf_counter() - started) * 1000:.2f}ms"
    return {
        "timestamp": utc_now().isoformat(),
        "dashboard": dashboard,
        "cache": cache,
        "environment": {
            "appEnv": settings.app_env,
            "appVersion": settings.app_version,
            "schedulerEnabled": settings.scheduler_enabled,
        },
    }
