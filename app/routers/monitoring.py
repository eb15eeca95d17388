"""Admin routes for soft delete monitoring."""

import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from app.core.security import CurrentUser, require_roles
from app.core.storage import to_naive_utc, utc_now
from app.models.enums import AuditAction, UserType
from app.schemas.admin import MonitoringCheckRequest
from app.schemas.common import PerformedBy
from app.services.audit_service import AuditService
from app.services.monitoring_service import (
    SoftDeleteMonitoringService,
    check_for_alerts,
    get_monitoring_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/monitoring", tags=["admin", "monitoring"])

require_monitoring_access = require_roles(
    UserType.ADMIN,
    UserType.SUPER_ADMIN,
    detail="Forbidden: Only Admin or Super Admin can access monitoring data",
)

VIEW_TYPES = ("dashboard", "metrics", "alerts", "health")
CHECK_TYPES = ("full", "metrics", "alerts")


def parse_timestamp(value: str | None, label: str) -> datetime | None:
    """Parse an ISO-8601 query value into naive UTC."""
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} format")
    return to_naive_utc(parsed)


def _summary(metrics: dict) -> dict:
    return {
        "deletions": metrics["totalSoftDeletes"],
        "restores": metrics["totalRestores"],
        "complianceRate": metrics["retentionCompliance"]["percentageCompliant"],
    }


@router.get("/soft-delete")
async def get_soft_delete_monitoring(
    type: str = Query(default="dashboard"),
    start_time: str | None = Query(default=None, alias="startTime"),
    end_time: str | None = Query(default=None, alias="endTime"),
    user: CurrentUser = Depends(require_monitoring_access),
    service: SoftDeleteMonitoringService = Depends(get_monitoring_service),
):
    """Dashboard, raw metrics, alerts or a health summary of soft delete activity."""
    if type not in VIEW_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Invalid type parameter. Must be dashboard, metrics, alerts, or health",
        )
    start = parse_timestamp(start_time, "startTime")
    end = parse_timestamp(end_time, "endTime")

    try:
        if type == "dashboard":
            return await service.get_dashboard_data()

        if type == "metrics":
            end = end or utc_now()
            start = start or end - timedelta(hours=24)
            metrics = await service.collect_metrics(start, end)
            return {
                "metrics": metrics,
                "timeRange": {"startTime": start.isoformat(), "endTime": end.isoformat()},
            }

        if type == "alerts":
            check = await service.run_monitoring_check(start, end)
            return {
                "alerts": check["alerts"],
                "metricsUsed": check["metrics"],
                "timestamp": check["timestamp"],
            }

        dashboard = await service.get_dashboard_data()
        return {
            "systemHealth": dashboard["systemHealth"],
            "summary": {
                "last24Hours": _summary(dashboard["last24Hours"]),
                "last7Days": _summary(dashboard["last7Days"]),
            },
            "recentAlertsCount": len(dashboard["recentAlerts"]),
        }
    except SQLAlchemyError as e:
        logger.error(f"Failed to get monitoring data ({type}): {e}")
        raise HTTPException(status_code=500, detail="Failed to get monitoring data")


@router.post("/soft-delete")
async def run_soft_delete_monitoring_check(
    payload: MonitoringCheckRequest | None = None,
    user: CurrentUser = Depends(require_monitoring_access),
    service: SoftDeleteMonitoringService = Depends(get_monitoring_service),
):
    """Run a monitoring check on demand and record it in the audit trail."""
    payload = payload or MonitoringCheckRequest()
    if payload.check_type not in CHECK_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Invalid checkType. Must be full, metrics, or alerts",
        )
    start = to_naive_utc(payload.start_time)
    end = to_naive_utc(payload.end_time)
    audit = AuditService(service.session)

    try:
        await audit.record_and_commit(
            user.id,
            AuditAction.MANUAL_MONITORING_CHECK,
            user.id,
            reason=f"Manual monitoring check ({payload.check_type})",
            metadata={"operation": "manual_monitoring_check", "checkType": payload.check_type},
        )

        if payload.check_type == "metrics":
            end = end or utc_now()
            start = start or end - timedelta(hours=24)
            data = await service.collect_metrics(start, end)
        elif payload.check_type == "alerts":
            end = end or utc_now()
            start = start or end - timedelta(hours=24)
            data = check_for_alerts(await service.collect_metrics(start, end))
        else:
            data = await service.run_monitoring_check(start, end)

        alert_count = len(data) if payload.check_type == "alerts" else len(
            data.get("alerts", [])
        )
        await audit.record_and_commit(
            user.id,
            AuditAction.MANUAL_MONITORING_CHECK_COMPLETED,
            user.id,
            reason=f"Manual monitoring check completed ({payload.check_type})",
            metadata={
                "operation": "manual_monitoring_check",
                "checkType": payload.check_type,
                "alertCount": alert_count,
            },
        )
    except SQLAlchemyError as e:
        logger.error(f"Monitoring check failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to run monitoring check")

    logger.info(f"Manual monitoring check ({payload.check_type}) run by {user.id}")
    return {
        "message": "Monitoring check completed",
        "result": {"type": payload.check_type, "data": data},
        "performedBy": PerformedBy(id=user.id, email=user.email).model_dump(by_alias=True),
    }
