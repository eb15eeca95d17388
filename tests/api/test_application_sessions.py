"""Test application session endpoints."""

from datetime import timedelta

import pytest
from sqlalchemy import select, update

from app.core.storage import utc_now
from app.models import ApplicationSession, FileUpload, UploadError

SESSION_PAYLOAD = {
    "firstName": "Jane",
    "lastName": "Doe",
    "email": "Jane.Doe@Example.com",
    "phone": "555-0100",
    "role": "Driver",
}

PDF_UPLOAD = {
    "fileName": "resume.pdf",
    "fileType": "application/pdf",
    "fileSize": 2048,
    "fileUrl": "https://files.example.com/resume.pdf",
}


async def create_session(client, ip="203.0.113.7"):
    return await client.post(
        "/api/application-sessions",
        json=SESSION_PAYLOAD,
        headers={"X-Forwarded-For": f"{ip}, 10.0.0.1"},
    )


async def update_session(session_factory, token, **values):
    async with session_factory() as session:
        await session.execute(
            update(ApplicationSession)
            .where(ApplicationSession.session_token == token)
            .values(**values)
        )
        await session.commit()


class TestApplicationSessionEndpoints:
    """Test anonymous upload session issuance."""

    @pytest.mark.asyncio
    async def test_create_session(self, client):
        response = await create_session(client)
        assert response.status_code == 201
        data = response.json()
        assert data["sessionToken"]
        assert data["maxUploads"] == 10

    @pytest.mark.asyncio
    async def test_rate_limit_per_forwarded_ip(self, client):
        """Test the sixth session from one IP within the window is refused."""
        for _ in range(5):
            assert (await create_session(client)).status_code == 201

        response = await create_session(client)
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "3600"
        assert "Too many application sessions" in response.json()["detail"]

        assert (await create_session(client, ip="198.51.100.1")).status_code == 201

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(self, client):
        response = await client.post(
            "/api/application-sessions", json={**SESSION_PAYLOAD, "email": "nope"}
        )
        assert response.status_code == 400
        assert response.json()["detail"].startswith("email: ")

    @pytest.mark.asyncio
    async def test_missing_fields_rejected(self, client):
        response = await client.post("/api/application-sessions", json={"firstName": "A"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required field: lastName"

    @pytest.mark.asyncio
    async def test_session_status(self, client):
        token = (await create_session(client)).json()["sessionToken"]
        response = await client.get(f"/api/application-sessions/{token}")
        assert response.status_code == 200
        data = response.json()
        assert data["uploadCount"] == 0
        assert data["completed"] is False
        assert data["expired"] is False

    @pytest.mark.asyncio
    async def test_unknown_session(self, client):
        response = await client.get("/api/application-sessions/missing")
        assert response.status_code == 404


class TestSessionUploads:
    """Test uploads registered under a session."""

    @pytest.mark.asyncio
    async def test_register_upload(self, client, session_factory):
        token = (await create_session(client)).json()["sessionToken"]
        response = await client.post(
            f"/api/application-sessions/{token}/uploads", json=PDF_UPLOAD
        )
        assert response.status_code == 201
        assert response.json()["uploadCount"] == 1

        async with session_factory() as session:
            upload = await session.get(FileUpload, response.json()["fileId"])
            assert upload.is_temporary is True
            assert upload.category == "job-application"

    @pytest.mark.asyncio
    async def test_rejected_upload_is_logged(self, client, session_factory):
        """Test a disallowed file type returns 400 and records an upload error."""
        token = (await create_session(client)).json()["sessionToken"]
        response = await client.post(
            f"/api/application-sessions/{token}/uploads",
            json={**PDF_UPLOAD, "fileName": "setup.exe", "fileType": "application/x-msdownload"},
        )
        assert response.status_code == 400
        correlation_id = response.headers["X-Correlation-ID"]

        async with session_factory() as session:
            entry = (
                await session.execute(
                    select(UploadError).where(UploadError.correlation_id == correlation_id)
                )
            ).scalar_one()
            assert entry.error_type == "INVALID_FILE_TYPE"
            assert entry.resolved is False

    @pytest.mark.asyncio
    async def test_upload_with_unknown_token(self, client):
        response = await client.post(
            "/api/application-sessions/missing/uploads", json=PDF_UPLOAD
        )
        assert response.status_code == 401


class TestSessionLifecycle:
    """Test session expiry, completion and the rate-limit window."""

    @pytest.mark.asyncio
    async def test_expired_session(self, client, session_factory):
        """Test a session past its two-hour lifetime can no longer be used."""
        token = (await create_session(client)).json()["sessionToken"]
        await update_session(
            session_factory, token, expires_at=utc_now() - timedelta(minutes=1)
        )

        status = await client.get(f"/api/application-sessions/{token}")
        assert status.status_code == 200
        assert status.json()["expired"] is True

        upload = await client.post(
            f"/api/application-sessions/{token}/uploads", json=PDF_UPLOAD
        )
        assert upload.status_code == 401

        submit = await client.post(
            "/api/job-applications",
            json={
                "firstName": "Jane",
                "lastName": "Doe",
                "email": "jane.doe@example.com",
                "role": "Driver",
                "sessionToken": token,
            },
        )
        assert submit.status_code == 400

    @pytest.mark.asyncio
    async def test_session_lifetime(self, client, session_factory):
        response = await create_session(client)
        async with session_factory() as session:
            app_session = await session.get(ApplicationSession, response.json()["sessionId"])
            lifetime = app_session.expires_at - app_session.created_at
        assert lifetime == timedelta(hours=2)

    @pytest.mark.asyncio
    async def test_completed_session_refuses_uploads(self, client, session_factory):
        token = (await create_session(client)).json()["sessionToken"]
        await update_session(session_factory, token, completed=True, completed_at=utc_now())

        response = await client.post(
            f"/api/application-sessions/{token}/uploads", json=PDF_UPLOAD
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_sessions_outside_window_not_counted(self, client, session_factory):
        """Test sessions older than the hour-long window free up the limit."""
        for _ in range(5):
            assert (await create_session(client)).status_code == 201
        assert (await create_session(client)).status_code == 429

        async with session_factory() as session:
            await session.execute(
                update(ApplicationSession)
                .where(ApplicationSession.ip_address == "203.0.113.7")
                .values(created_at=utc_now() - timedelta(minutes=61))
            )
            await session.commit()

        assert (await create_session(client)).status_code == 201
