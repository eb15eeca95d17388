"""Soft delete activity metrics, alert evaluation and health summary."""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.storage import get_session, utc_now
from app.models.audit import UserAudit
from app.models.enums import AuditAction, UserType
from app.models.profile import Profile

logger = logging.getLogger(__name__)

Metrics = dict[str, Any]

# Days a soft-deleted profile may be kept; 0 means manual deletion only
RETENTION_DAYS_BY_TYPE = {
    UserType.CLIENT: 90,
    UserType.VENDOR: 90,
    UserType.DRIVER: 90,
    UserType.ADMIN: 365,
    UserType.HELPDESK: 365,
    UserType.SUPER_ADMIN: 0,
}
DEFAULT_RETENTION_DAYS = 90
TOP_DELETERS_LIMIT = 10
RECENT_ALERTS_LIMIT = 10


def retention_days_for(user_type: UserType | None) -> int:
    if user_type is None:
        return DEFAULT_RETENTION_DAYS
    return RETENTION_DAYS_BY_TYPE.get(user_type, DEFAULT_RETENTION_DAYS)


def _admin_deletions(metrics: Metrics) -> int:
    by_type = metrics["deletionsByType"]
    return by_type[UserType.ADMIN.value] + by_type[UserType.HELPDESK.value]


def _restoration_rate(metrics: Metrics) -> float:
    return metrics["totalRestores"] / metrics["totalSoftDeletes"] * 100


def _mass_deletion_message(metrics: Metrics) -> str:
    if not metrics["deletionsByUser"]:
        return "Mass deletion pattern detected but no specific user data available."
    top = metrics["deletionsByUser"][0]
    return (
        f"Mass deletion by single user detected: {top['userEmail']} performed "
        f"{top['count']} deletions. Review for potential misuse."
    )


@dataclass(frozen=True)
class AlertTrigger:
    id: str
    name: str
    description: str
    severity: str
    condition: Callable[[Metrics], bool]
    message: Callable[[Metrics], str]
    enabled: bool = True


ALERT_TRIGGERS: tuple[AlertTrigger, ...] = (
    AlertTrigger(
        id="high_deletion_volume",
        name="High Deletion Volume",
        description="More than 50 deletions per day on average",
        severity="medium",
        condition=lambda m: m["averageDeletionsPerDay"] > 50,
        message=lambda m: (
            f"High deletion volume detected: {m['averageDeletionsPerDay']:.1f} deletions "
            f"per day (period: {m['period']}). Monitor for unusual patterns."
        ),
    ),
    AlertTrigger(
        id="excessive_deletion_volume",
        name="Excessive Deletion Volume",
        description="More than 100 deletions per day on average",
        severity="high",
        condition=lambda m: m["averageDeletionsPerDay"] > 100,
        message=lambda m: (
            f"Excessive deletion volume detected: {m['averageDeletionsPerDay']:.1f} "
            f"deletions per day (period: {m['period']}). Immediate review recommended."
        ),
    ),
    AlertTrigger(
        id="single_user_mass_deletion",
        name="Single User Mass Deletion",
        description="One user performed more than 20 deletions",
        severity="high",
        condition=lambda m: any(u["count"] > 20 for u in m["deletionsByUser"]),
        message=_mass_deletion_message,
    ),
    AlertTrigger(
        id="low_restoration_rate",
        name="Low Restoration Rate",
        description="Very low restoration rate (< 5% of deletions)",
        severity="low",
        condition=lambda m: m["totalSoftDeletes"] > 0 and _restoration_rate(m) < 5,
        message=lambda m: (
            f"Low restoration rate detected: {_restoration_rate(m):.1f}% of deleted users "
            f"were restored. May indicate over-aggressive deletion policies."
        ),
    ),
    AlertTrigger(
        id="poor_retention_compliance",
        name="Poor Retention Compliance",
        description="Retention compliance below 80%",
        severity="medium",
        condition=lambda m: m["retentionCompliance"]["percentageCompliant"] < 80,
        message=lambda m: (
            f"Poor retention compliance: "
            f"{m['retentionCompliance']['percentageCompliant']:.1f}% compliant. "
            f"{m['retentionCompliance']['overdue']} users overdue for permanent deletion."
        ),
    ),
    AlertTrigger(
        id="critical_retention_compliance",
        name="Critical Retention Compliance",
        description="Retention compliance below 50%",
        severity="critical",
        condition=lambda m: m["retentionCompliance"]["percentageCompliant"] < 50,
        message=lambda m: (
            f"Critical retention compliance issue: "
            f"{m['retentionCompliance']['percentageCompliant']:.1f}% compliant. "
            f"Immediate cleanup required for GDPR compliance."
        ),
    ),
    AlertTrigger(
        id="no_permanent_deletions",
        name="No Permanent Deletions",
        description="No permanent deletions in period but overdue users exist",
        severity="medium",
        condition=lambda m: m["totalPermanentDeletes"] == 0
        and m["retentionCompliance"]["overdue"] > 10,
        message=lambda m: (
            f"No permanent deletions performed but {m['retentionCompliance']['overdue']} "
            f"users are overdue. Cleanup job may not be running."
        ),
    ),
    AlertTrigger(
        id="rapid_restore_pattern",
        name="Rapid Restore Pattern",
        description="Users being restored very quickly (< 1 hour average)",
        severity="low",
        condition=lambda m: 0 < m["averageRestorationTime"] < 1,
        message=lambda m: (
            f"Rapid restore pattern detected: Average restoration time is "
            f"{m['averageRestorationTime']:.1f} hours. May indicate deletion/restore cycling."
        ),
    ),
    AlertTrigger(
        id="admin_deletion_spike",
        name="Admin Deletion Spike",
        description="Unusual number of admin/helpdesk deletions",
        severity="high",
        condition=lambda m: _admin_deletions(m) > 5,
        message=lambda m: (
            f"Unusual admin deletion activity: {_admin_deletions(m)} admin/helpdesk users "
            f"deleted. Review for security concerns."
        ),
    ),
)


def check_for_alerts(
    metrics: Metrics, triggers: tuple[AlertTrigger, ...] = ALERT_TRIGGERS
) -> list[dict[str, Any]]:
    """Evaluate every enabled trigger against one metrics snapshot."""
    alerts = []
    for trigger in triggers:
        if not trigger.enabled or not trigger.condition(metrics):
            continue
        alert = {
            "id": f"alert-{uuid.uuid4().hex[:12]}",
            "triggerId": trigger.id,
            "severity": trigger.severity,
            "title": trigger.name,
            "message": trigger.message(metrics),
            "data": {
                "description": trigger.description,
                "metrics": {
                    "period": metrics["period"],
                    "totalSoftDeletes": metrics["totalSoftDeletes"],
                    "totalRestores": metrics["totalRestores"],
                    "averageDeletionsPerDay": metrics["averageDeletionsPerDay"],
                    "retentionCompliance": metrics["retentionCompliance"],
                },
            },
            "timestamp": utc_now().isoformat(),
            "acknowledged": False,
        }
        alerts.append(alert)
        logger.warning(
            f"Soft delete alert triggered: {trigger.id} ({trigger.severity}) - {alert['message']}"
        )
    return alerts


def system_health(alerts: list[dict[str, Any]], last_30_days: Metrics) -> dict[str, Any]:
    critical = sum(1 for a in alerts if a["severity"] == "critical")
    high = sum(1 for a in alerts if a["severity"] == "high")
    compliance = last_30_days["retentionCompliance"]["percentageCompliant"]

    issues = []
    if critical:
        return {"status": "critical", "issues": [f"{critical} critical alerts detected"]}
    if high:
        issues.append(f"{high} high-severity alerts detected")
    if compliance < 90:
        issues.append("Retention compliance below 90%")
    return {"status": "warning" if issues else "healthy", "issues": issues}


class SoftDeleteMonitoringService:
    """Aggregates user audit entries over a time window."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _count_actions(self, action: AuditAction, start: datetime, end: datetime) -> int:
        return await self.session.scalar(
            select(func.count())
            .select_from(UserAudit)
            .where(
                UserAudit.action == action.value,
                UserAudit.created_at >= start,
                UserAudit.created_at <= end,
            )
        ) or 0

    async def collect_metrics(self, start: datetime, end: datetime) -> Metrics:
        soft_deletes = await self._count_actions(AuditAction.SOFT_DELETE, start, end)
        restores = await self._count_actions(AuditAction.RESTORE, start, end)
        permanent = await self._count_actions(AuditAction.PERMANENT_DELETE, start, end)

        in_window = (
            UserAudit.action == AuditAction.SOFT_DELETE.value,
            UserAudit.created_at >= start,
            UserAudit.created_at <= end,
        )

        deletions_by_type = {t.value: 0 for t in UserType}
        by_type = await self.session.execute(
            select(Profile.type, func.count())
            .select_from(UserAudit)
            .join(Profile, UserAudit.user_id == Profile.id)
            .where(*in_window)
            .group_by(Profile.type)
        )
        for user_type, count in by_type.all():
            if user_type is not None:
                deletions_by_type[user_type.value] = count

        count_col = func.count().label("count")
        by_user = await self.session.execute(
            select(UserAudit.performed_by, Profile.email, count_col)
            .select_from(UserAudit)
            .outerjoin(Profile, UserAudit.performed_by == Profile.id)
            .where(*in_window)
            .group_by(UserAudit.performed_by, Profile.email)
            .order_by(count_col.desc())
            .limit(TOP_DELETERS_LIMIT)
        )
        deletions_by_user = [
            {"userId": performed_by, "userEmail": email or "Unknown", "count": count}
            for performed_by, email, count in by_user.all()
        ]

        period_days = max(1.0, (end - start).total_seconds() / 86400)

        metrics = {
            "period": f"{start.isoformat()} to {end.isoformat()}",
            "startTime": start.isoformat(),
            "endTime": end.isoformat(),
            "totalSoftDeletes": soft_deletes,
            "totalRestores": restores,
            "totalPermanentDeletes": permanent,
            "deletionsByType": deletions_by_type,
            "deletionsByUser": deletions_by_user,
            "averageDeletionsPerDay": soft_deletes / period_days,
            "averageRestorationTime": await self._average_restoration_hours(start, end),
            "retentionCompliance": await self._retention_compliance(),
        }
        logger.info(
            f"Soft delete metrics collected for {metrics['period']}: "
            f"{soft_deletes} deletes, {restores} restores"
        )
        return metrics

    async def _average_restoration_hours(self, start: datetime, end: datetime) -> float:
        """Hours between each restore and the user's latest earlier soft delete."""
        restores = await self.session.execute(
            select(UserAudit.user_id, UserAudit.created_at).where(
                UserAudit.action == AuditAction.RESTORE.value,
                UserAudit.created_at >= start,
                UserAudit.created_at <= end,
            )
        )
        durations = []
        for user_id, restored_at in restores.all():
            deleted_at = await self.session.scalar(
                select(func.max(UserAudit.created_at)).where(
                    UserAudit.user_id == user_id,
                    UserAudit.action == AuditAction.SOFT_DELETE.value,
                    UserAudit.created_at < restored_at,
                )
            )
            if deleted_at is not None:
                durations.append((restored_at - deleted_at).total_seconds() / 3600)
        return sum(durations) / len(durations) if durations else 0.0

    async def _retention_compliance(self) -> dict[str, Any]:
        now = utc_now()
        result = await self.session.execute(
            select(Profile.type, Profile.deleted_at).where(Profile.deleted_at.is_not(None))
        )
        compliant = overdue = 0
        for user_type, deleted_at in result.all():
            retention = retention_days_for(user_type)
            if retention == 0:
                continue
            if (now - deleted_at).days <= retention:
                compliant += 1
            else:
                overdue += 1

        total = compliant + overdue
        return {
            "compliant": compliant,
            "overdue": overdue,
            "percentageCompliant": compliant / total * 100 if total else 100.0,
        }

    async def run_monitoring_check(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> dict[str, Any]:
        """Collect metrics and alerts, defaulting to the last 24 hours."""
        end = end or utc_now()
        start = start or end - timedelta(hours=24)
        logger.info(f"Running soft delete monitoring check {start} to {end}")

        metrics = await self.collect_metrics(start, end)
        alerts = check_for_alerts(metrics)
        if alerts:
            severities: dict[str, int] = {}
            for alert in alerts:
                severities[alert["severity"]] = severities.get(alert["severity"], 0) + 1
            logger.warning(f"Soft delete monitoring generated {len(alerts)} alerts: {severities}")
        else:
            logger.info("No soft delete alerts generated")

        return {"metrics": metrics, "alerts": alerts, "timestamp": utc_now().isoformat()}

    async def get_dashboard_data(self) -> dict[str, Any]:
        now = utc_now()
        last_24_hours = await self.collect_metrics(now - timedelta(hours=24), now)
        last_7_days = await self.collect_metrics(now - timedelta(days=7), now)
        last_30_days = await self.collect_metrics(now - timedelta(days=30), now)

        alerts = (
            check_for_alerts(last_24_hours)
            + check_for_alerts(last_7_days)
            + check_for_alerts(last_30_days)
        )
        return {
            "last24Hours": last_24_hours,
            "last7Days": last_7_days,
            "last30Days": last_30_days,
            "recentAlerts": alerts[:RECENT_ALERTS_LIMIT],
            "systemHealth": system_health(alerts, last_30_days),
        }


def get_monitoring_service(
    session: AsyncSession = Depends(get_session),
) -> SoftDeleteMonitoringService:
    return SoftDeleteMonitoringService(session)
