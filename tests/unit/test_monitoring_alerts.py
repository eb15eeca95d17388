"""Unit tests for soft delete alert triggers and health summary."""

from app.models.enums import UserType
from app.services.monitoring_service import (
    ALERT_TRIGGERS,
    check_for_alerts,
    retention_days_for,
    system_health,
)


def make_metrics(**overrides):
    """Metrics snapshot that triggers no alerts unless overridden."""
    metrics = {
        "period": "2024-01-01T00:00:00 to 2024-01-02T00:00:00",
        "totalSoftDeletes": 10,
        "totalRestores": 2,
        "totalPermanentDeletes": 1,
        "deletionsByType": {t.value: 0 for t in UserType},
        "deletionsByUser": [],
        "averageDeletionsPerDay": 10.0,
        "averageRestorationTime": 24.0,
        "retentionCompliance": {"compliant": 10, "overdue": 0, "percentageCompliant": 100.0},
    }
    metrics.update(overrides)
    return metrics


def trigger_ids(metrics):
    return {alert["triggerId"] for alert in check_for_alerts(metrics)}


class TestAlertTriggers:
    """Test alert trigger evaluation."""

    def test_quiet_metrics(self):
        assert check_for_alerts(make_metrics()) == []

    def test_trigger_ids_unique(self):
        ids = [trigger.id for trigger in ALERT_TRIGGERS]
        assert len(ids) == len(set(ids)) == 9

    def test_high_volume(self):
        assert trigger_ids(make_metrics(averageDeletionsPerDay=60.0)) == {
            "high_deletion_volume"
        }

    def test_excessive_volume_also_high(self):
        assert trigger_ids(make_metrics(averageDeletionsPerDay=150.0)) == {
            "high_deletion_volume",
            "excessive_deletion_volume",
        }

    def test_single_user_mass_deletion(self):
        metrics = make_metrics(
            deletionsByUser=[{"userId": "a1", "userEmail": "ops@example.com", "count": 25}]
        )
        alerts = check_for_alerts(metrics)
        assert [a["triggerId"] for a in alerts] == ["single_user_mass_deletion"]
        assert "ops@example.com performed 25 deletions" in alerts[0]["message"]
        assert alerts[0]["severity"] == "high"

    def test_low_restoration_rate(self):
        assert "low_restoration_rate" in trigger_ids(
            make_metrics(totalSoftDeletes=100, totalRestores=1)
        )

    def test_no_deletes_no_restoration_alert(self):
        assert "low_restoration_rate" not in trigger_ids(
            make_metrics(totalSoftDeletes=0, totalRestores=0)
        )

    def test_critical_compliance(self):
        compliance = {"compliant": 4, "overdue": 16, "percentageCompliant": 20.0}
        ids = trigger_ids(
            make_metrics(retentionCompliance=compliance, totalPermanentDeletes=0)
        )
        assert {
            "poor_retention_compliance",
            "critical_retention_compliance",
            "no_permanent_deletions",
        } <= ids

    def test_rapid_restore_pattern(self):
        assert "rapid_restore_pattern" in trigger_ids(
            make_metrics(averageRestorationTime=0.5)
        )

    def test_zero_restoration_time_ignored(self):
        assert "rapid_restore_pattern" not in trigger_ids(
            make_metrics(averageRestorationTime=0.0)
        )

    def test_admin_deletion_spike(self):
        by_type = {t.value: 0 for t in UserType}
        by_type["ADMIN"] = 4
        by_type["HELPDESK"] = 2
        alerts = check_for_alerts(make_metrics(deletionsByType=by_type))
        assert [a["triggerId"] for a in alerts] == ["admin_deletion_spike"]
        assert "6 admin/helpdesk users" in alerts[0]["message"]

    def test_alert_shape(self):
        alert = check_for_alerts(make_metrics(averageDeletionsPerDay=60.0))[0]
        assert alert["id"].startswith("alert-")
        assert alert["acknowledged"] is False
        assert alert["data"]["metrics"]["totalSoftDeletes"] == 10


class TestSystemHealth:
    """Test the overall health summary."""

    def test_healthy(self):
        assert system_health([], make_metrics()) == {"status": "healthy", "issues": []}

    def test_critical_alert(self):
        health = system_health([{"severity": "critical"}], make_metrics())
        assert health["status"] == "critical"
        assert health["issues"] == ["1 critical alerts detected"]

    def test_high_alerts_warn(self):
        health = system_health([{"severity": "high"}, {"severity": "high"}], make_metrics())
        assert health["status"] == "warning"
        assert "2 high-severity alerts detected" in health["issues"]

    def test_compliance_below_ninety_warns(self):
        compliance = {"compliant": 85, "overdue": 15, "percentageCompliant": 85.0}
        health = system_health([], make_metrics(retentionCompliance=compliance))
        assert health == {"status": "warning", "issues": ["Retention compliance below 90%"]}


class TestRetentionPolicy:
    def test_super_admin_manual_only(self):
        assert retention_days_for(UserType.SUPER_ADMIN) == 0

    def test_admin_longer_retention(self):
        assert retention_days_for(UserType.ADMIN) == 365

    def test_unknown_type_default(self):
        assert retention_days_for(None) == 90
