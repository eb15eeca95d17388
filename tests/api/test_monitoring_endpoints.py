"""Test soft delete monitoring endpoints."""

import pytest
from sqlalchemy import select

from app.models import UserAudit
from app.models.enums import AuditAction, UserType


class TestMonitoringViews:
    """Test the monitoring GET views."""

    @pytest.mark.asyncio
    async def test_helpdesk_forbidden(self, client, auth_headers, make_profile):
        helpdesk = await make_profile(UserType.HELPDESK)
        response = await client.get(
            "/api/admin/monitoring/soft-delete", headers=auth_headers(helpdesk)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_type(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.ADMIN)
        response = await client.get(
            "/api/admin/monitoring/soft-delete?type=weekly", headers=auth_headers(admin)
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_start_time(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.ADMIN)
        response = await client.get(
            "/api/admin/monitoring/soft-delete?type=metrics&startTime=yesterday",
            headers=auth_headers(admin),
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid startTime format"

    @pytest.mark.asyncio
    async def test_metrics(self, client, auth_headers, make_profile, make_audit):
        admin = await make_profile(UserType.ADMIN)
        target = await make_profile(UserType.DRIVER, deleted_days_ago=0.5)
        await make_audit(target.id, AuditAction.SOFT_DELETE, admin.id, hours_ago=5)
        await make_audit(target.id, AuditAction.RESTORE, admin.id, hours_ago=3)

        response = await client.get(
            "/api/admin/monitoring/soft-delete?type=metrics", headers=auth_headers(admin)
        )
        assert response.status_code == 200
        metrics = response.json()["metrics"]
        assert metrics["totalSoftDeletes"] == 1
        assert metrics["totalRestores"] == 1
        assert metrics["deletionsByType"]["DRIVER"] == 1
        assert metrics["deletionsByUser"] == [
            {"userId": admin.id, "userEmail": admin.email, "count": 1}
        ]
        assert metrics["averageRestorationTime"] == pytest.approx(2.0, abs=0.01)
        assert metrics["retentionCompliance"]["compliant"] == 1

    @pytest.mark.asyncio
    async def test_health(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.SUPER_ADMIN)
        response = await client.get(
            "/api/admin/monitoring/soft-delete?type=health", headers=auth_headers(admin)
        )
        assert response.status_code == 200
        data = response.json()
        assert data["systemHealth"]["status"] == "healthy"
        assert data["summary"]["last24Hours"]["complianceRate"] == 100.0

    @pytest.mark.asyncio
    async def test_dashboard_flags_overdue_users(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.ADMIN)
        for _ in range(3):
            await make_profile(UserType.CLIENT, deleted_days_ago=200)

        response = await client.get(
            "/api/admin/monitoring/soft-delete", headers=auth_headers(admin)
        )
        assert response.status_code == 200
        data = response.json()
        assert data["systemHealth"]["status"] == "critical"
        triggers = {a["triggerId"] for a in data["recentAlerts"]}
        assert "critical_retention_compliance" in triggers


class TestMonitoringCheck:
    """Test on-demand monitoring checks."""

    @pytest.mark.asyncio
    async def test_invalid_check_type(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.ADMIN)
        response = await client.post(
            "/api/admin/monitoring/soft-delete",
            json={"checkType": "everything"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid checkType. Must be full, metrics, or alerts"

    @pytest.mark.asyncio
    async def test_full_check(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.ADMIN)
        response = await client.post(
            "/api/admin/monitoring/soft-delete", headers=auth_headers(admin)
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Monitoring check completed"
        assert data["result"]["type"] == "full"
        assert data["result"]["data"]["alerts"] == []

    @pytest.mark.asyncio
    async def test_alerts_check_records_audits(
        self, client, auth_headers, make_profile, session_factory
    ):
        admin = await make_profile(UserType.ADMIN)
        response = await client.post(
            "/api/admin/monitoring/soft-delete",
            json={"checkType": "alerts"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        assert response.json()["result"]["data"] == []

        async with session_factory() as session:
            audits = (
                await session.execute(select(UserAudit).where(UserAudit.user_id == admin.id))
            ).scalars().all()
            assert sorted(a.action for a in audits) == [
                AuditAction.MANUAL_MONITORING_CHECK.value,
                AuditAction.MANUAL_MONITORING_CHECK_COMPLETED.value,
            ]
            completed = [a for a in audits if a.action.endswith("COMPLETED")][0]
            assert completed.metadata_["alertCount"] == 0
