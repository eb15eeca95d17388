"""Test user soft delete, restore and purge endpoints."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from app.models import Address, CateringRequest, Profile, UserAudit
from app.models.enums import AuditAction, OrderStatus, UserType

PURGE_BODY = {"confirmed": True, "reason": "GDPR erasure request from account owner"}


async def add_order(session_factory, user_id, address_id, status=OrderStatus.ACTIVE):
    async with session_factory() as session:
        order = CateringRequest(
            user_id=user_id,
            pickup_address_id=address_id,
            delivery_address_id=address_id,
            order_number=f"RS-{user_id[:8]}-{status.value}",
            status=status,
        )
        session.add(order)
        await session.commit()
        return order.id


async def audits_for(session_factory, user_id):
    async with session_factory() as session:
        result = await session.execute(
            select(UserAudit).where(UserAudit.user_id == user_id)
        )
        return list(result.scalars().all())


class TestSoftDelete:
    """Test soft deleting users."""

    @pytest.mark.asyncio
    async def test_soft_delete_user(self, client, auth_headers, make_profile, session_factory):
        admin = await make_profile(UserType.ADMIN)
        target = await make_profile(UserType.CLIENT)

        response = await client.request(
            "DELETE",
            f"/api/users/{target.id}",
            json={"reason": "Requested closure"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "User soft deleted successfully"
        assert data["summary"]["deletedBy"] == admin.id

        async with session_factory() as session:
            profile = await session.get(Profile, target.id)
            assert profile.deleted_at is not None
            assert profile.deletion_reason == "Requested closure"

        audits = await audits_for(session_factory, target.id)
        assert [a.action for a in audits] == [AuditAction.SOFT_DELETE.value]
        assert audits[0].changes["before"]["deletedAt"] is None
        assert audits[0].metadata_["operation"] == "soft_delete"

    @pytest.mark.asyncio
    async def test_deleted_user_cannot_authenticate(self, client, auth_headers, make_profile):
        user = await make_profile(UserType.ADMIN, deleted_days_ago=1)
        response = await client.get("/api/users/deleted", headers=auth_headers(user))
        assert response.status_code == 401
        assert response.json()["detail"] == "Unauthorized - account is deactivated"

    @pytest.mark.asyncio
    async def test_helpdesk_cannot_delete(self, client, auth_headers, make_profile):
        helpdesk = await make_profile(UserType.HELPDESK)
        target = await make_profile(UserType.CLIENT)
        response = await client.delete(
            f"/api/users/{target.id}", headers=auth_headers(helpdesk)
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden: Only Admin or Super Admin can delete users"

    @pytest.mark.asyncio
    async def test_super_admin_protected(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.SUPER_ADMIN)
        target = await make_profile(UserType.SUPER_ADMIN)
        response = await client.delete(f"/api/users/{target.id}", headers=auth_headers(admin))
        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden: Super Admin users cannot be deleted"

    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.ADMIN)
        response = await client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin))
        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden: Cannot delete your own account"

    @pytest.mark.asyncio
    async def test_active_orders_block_delete(
        self, client, auth_headers, make_profile, make_address, session_factory
    ):
        admin = await make_profile(UserType.ADMIN)
        target = await make_profile(UserType.CLIENT)
        address = await make_address()
        await add_order(session_factory, target.id, address.id, OrderStatus.ASSIGNED)

        response = await client.delete(f"/api/users/{target.id}", headers=auth_headers(admin))
        assert response.status_code == 409
        assert "active orders" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_completed_orders_do_not_block(
        self, client, auth_headers, make_profile, make_address, session_factory
    ):
        admin = await make_profile(UserType.ADMIN)
        target = await make_profile(UserType.CLIENT)
        address = await make_address()
        await add_order(session_factory, target.id, address.id, OrderStatus.COMPLETED)

        response = await client.delete(f"/api/users/{target.id}", headers=auth_headers(admin))
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_already_deleted(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.ADMIN)
        target = await make_profile(UserType.CLIENT, deleted_days_ago=2)
        response = await client.delete(f"/api/users/{target.id}", headers=auth_headers(admin))
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_unknown_user(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.ADMIN)
        response = await client.delete("/api/users/nobody", headers=auth_headers(admin))
        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"


class TestRestore:
    """Test restoring soft-deleted users."""

    @pytest.mark.asyncio
    async def test_restore_user(self, client, auth_headers, make_profile, session_factory):
        admin = await make_profile(UserType.SUPER_ADMIN)
        target = await make_profile(UserType.VENDOR, deleted_days_ago=3)

        response = await client.post(
            f"/api/users/{target.id}/restore", headers=auth_headers(admin)
        )
        assert response.status_code == 200
        assert response.json()["summary"]["restoredBy"] == admin.id

        async with session_factory() as session:
            profile = await session.get(Profile, target.id)
            assert profile.deleted_at is None
            assert profile.deleted_by is None

        audits = await audits_for(session_factory, target.id)
        assert audits[0].action == AuditAction.RESTORE.value
        assert audits[0].changes["before"]["deletedBy"] == "admin-id"

    @pytest.mark.asyncio
    async def test_restore_active_user(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.ADMIN)
        target = await make_profile(UserType.CLIENT)
        response = await client.post(
            f"/api/users/{target.id}/restore", headers=auth_headers(admin)
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "User is not soft deleted"


class TestDeletedUserList:
    """Test listing soft-deleted users."""

    @pytest.mark.asyncio
    async def test_list_with_filters(self, client, auth_headers, make_profile):
        helpdesk = await make_profile(UserType.HELPDESK)
        await make_profile(UserType.CLIENT, deleted_days_ago=1, company_name="Acme Catering")
        await make_profile(UserType.DRIVER, deleted_days_ago=5)
        await make_profile(UserType.CLIENT)

        response = await client.get("/api/users/deleted", headers=auth_headers(helpdesk))
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Deleted users retrieved successfully"
        assert data["pagination"]["totalCount"] == 2
        assert data["pagination"]["hasNextPage"] is False

        filtered = await client.get(
            "/api/users/deleted?type=CLIENT&search=acme", headers=auth_headers(helpdesk)
        )
        users = filtered.json()["users"]
        assert len(users) == 1
        assert users[0]["companyName"] == "Acme Catering"

    @pytest.mark.asyncio
    async def test_deleted_after_with_offset(self, client, auth_headers, make_profile):
        """Test an offset timestamp is converted to UTC before filtering."""
        admin = await make_profile(UserType.ADMIN)
        older = await make_profile(UserType.CLIENT, deleted_days_ago=2 / 24)
        recent = await make_profile(UserType.CLIENT, deleted_days_ago=10 / (24 * 60))

        pacific = timezone(timedelta(hours=-8))
        one_hour_ago = (datetime.now(UTC) - timedelta(hours=1)).astimezone(pacific)
        response = await client.get(
            "/api/users/deleted",
            params={"deletedAfter": one_hour_ago.isoformat()},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        ids = {u["id"] for u in response.json()["users"]}
        assert recent.id in ids
        assert older.id not in ids

    @pytest.mark.asyncio
    async def test_client_forbidden(self, client, auth_headers, make_profile):
        user = await make_profile(UserType.CLIENT)
        response = await client.get("/api/users/deleted", headers=auth_headers(user))
        assert response.status_code == 403


class TestPurge:
    """Test permanent deletion."""

    @pytest.mark.asyncio
    async def test_requires_super_admin(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.ADMIN)
        target = await make_profile(UserType.CLIENT, deleted_days_ago=1)
        response = await client.request(
            "DELETE", f"/api/users/{target.id}/purge", json=PURGE_BODY, headers=auth_headers(admin)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_requires_confirmation(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.SUPER_ADMIN)
        target = await make_profile(UserType.CLIENT, deleted_days_ago=1)
        response = await client.request(
            "DELETE",
            f"/api/users/{target.id}/purge",
            json={"confirmed": False, "reason": PURGE_BODY["reason"]},
            headers=auth_headers(admin),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_body(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.SUPER_ADMIN)
        target = await make_profile(UserType.CLIENT, deleted_days_ago=1)
        response = await client.request(
            "DELETE", f"/api/users/{target.id}/purge", headers=auth_headers(admin)
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Permanent deletion requires confirmed=true"

    @pytest.mark.asyncio
    async def test_must_be_soft_deleted_first(self, client, auth_headers, make_profile):
        admin = await make_profile(UserType.SUPER_ADMIN)
        target = await make_profile(UserType.CLIENT)
        response = await client.request(
            "DELETE", f"/api/users/{target.id}/purge", json=PURGE_BODY, headers=auth_headers(admin)
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_purge_removes_owned_records(
        self, client, auth_headers, make_profile, make_address, session_factory
    ):
        """Test orders go, unused addresses go and shared addresses are unlinked."""
        admin = await make_profile(UserType.SUPER_ADMIN)
        target = await make_profile(UserType.CLIENT, deleted_days_ago=100)
        private = await make_address(created_by=target.id)
        shared = await make_address(created_by=target.id, is_shared=True)
        await add_order(session_factory, target.id, private.id, OrderStatus.COMPLETED)

        response = await client.request(
            "DELETE", f"/api/users/{target.id}/purge", json=PURGE_BODY, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "User permanently deleted successfully"
        assert data["summary"]["affectedRecords"] == {
            "ordersDeleted": 1,
            "fileUploadsUpdated": 0,
            "addressesDeleted": 1,
            "addressesUpdated": 1,
        }

        async with session_factory() as session:
            assert await session.get(Profile, target.id) is None
            assert await session.get(Address, private.id) is None
            kept = await session.get(Address, shared.id)
            assert kept.created_by is None
            orders = await session.execute(
                select(CateringRequest).where(CateringRequest.user_id == target.id)
            )
            assert orders.scalars().all() == []

        audits = await audits_for(session_factory, target.id)
        purge = [a for a in audits if a.action == AuditAction.PERMANENT_DELETE.value][0]
        assert purge.performed_by == admin.id
        assert purge.metadata_["operation"] == "permanent_delete"
        assert purge.changes["before"]["email"] == target.email
