"""Pytest configuration and fixtures."""

import fnmatch
import os
import uuid
from collections.abc import AsyncIterator
from datetime import timedelta

import pytest
import pytest_asyncio

# Set test environment variables before importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("AUTH_SERVICE_URL", "http://identity.test")
os.environ.setdefault("AUTH_SERVICE_KEY", "test-service-key")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ["SCHEDULER_ENABLED"] = "false"

import httpx  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core import redis_client  # noqa: E402
from app.core.exceptions import AuthenticationError  # noqa: E402
from app.core.storage import Base, get_session, utc_now  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Address, Profile, UserAudit  # noqa: E402
from app.models.enums import AuditAction, UserType  # noqa: E402
from app.services.carrier_service import get_carrier_webhook_client  # noqa: E402
from app.services.identity_client import IdentityUser, get_identity_client  # noqa: E402


class FakePipeline:
    """Queues commands and applies them on ``execute``."""

    def __init__(self, redis: "FakeRedis"):
        self.redis = redis
        self.commands = []

    def __getattr__(self, name):
        def queue(*args, **kwargs):
            self.commands.append((name, args, kwargs))
            return self

        return queue

    async def execute(self):
        return [
            await getattr(self.redis, name)(*args, **kwargs)
            for name, args, kwargs in self.commands
        ]


class FakeRedis:
    """In-memory stand-in for the subset of redis.asyncio used by the app."""

    def __init__(self):
        self.values: dict[str, str] = {}
        self.hashes: dict[str, dict[str, str]] = {}
        self.sets: dict[str, set[str]] = {}

    async def get(self, key):
        return self.values.get(key)

    async def setex(self, key, ttl, value):
        self.values[key] = value
        return True

    async def incr(self, key):
        self.values[key] = str(int(self.values.get(key, 0)) + 1)
        return int(self.values[key])

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            for store in (self.values, self.hashes, self.sets):
                if store.pop(key, None) is not None:
                    removed += 1
        return removed

    async def scan(self, cursor=0, match="*", count=None):
        return 0, [k for k in self.values if fnmatch.fnmatch(k, match)]

    async def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    async def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = str(value)
        return 1

    async def hincrby(self, key, field, amount):
        data = self.hashes.setdefault(key, {})
        data[field] = str(int(data.get(field, 0)) + amount)
        return int(data[field])

    async def hincrbyfloat(self, key, field, amount):
        data = self.hashes.setdefault(key, {})
        data[field] = str(float(data.get(field, 0.0)) + amount)
        return float(data[field])

    async def expire(self, key, ttl):
        return True

    async def sadd(self, key, *members):
        self.sets.setdefault(key, set()).update(members)
        return len(members)

    async def smembers(self, key):
        return set(self.sets.get(key, set()))

    async def srem(self, key, *members):
        self.sets.get(key, set()).difference_update(members)
        return len(members)

    def pipeline(self):
        return FakePipeline(self)


class FakeIdentityClient:
    """Resolves tokens registered by the ``make_profile`` fixture."""

    def __init__(self):
        self.users: dict[str, IdentityUser] = {}

    def register(self, token: str, user_id: str, email: str | None = None):
        self.users[token] = IdentityUser(id=user_id, email=email)

    async def get_user(self, token: str) -> IdentityUser:
        if token not in self.users:
            raise AuthenticationError("Invalid token")
        return self.users[token]


class FakeWebhookClient:
    """Records carrier webhook posts and answers with a fixed status."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.calls = []

    async def post(self, url, payload):
        self.calls.append((url, payload))
        return httpx.Response(self.status_code, request=httpx.Request("POST", url))


@pytest.fixture
def auth_headers():
    """Build the bearer header for a profile created by ``make_profile``."""

    def build(profile: Profile) -> dict[str, str]:
        return {"Authorization": f"Bearer token-{profile.id}"}

    return build


@pytest.fixture
def fake_redis(monkeypatch):
    """Replace the Redis client with an in-memory fake."""
    fake = FakeRedis()

    async def get_fake_redis():
        return fake

    monkeypatch.setattr(redis_client, "get_redis", get_fake_redis)
    return fake


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Per-test SQLite database with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def identity():
    return FakeIdentityClient()


@pytest.fixture
def webhook_client():
    return FakeWebhookClient()


@pytest_asyncio.fixture
async def client(session_factory, identity, webhook_client, fake_redis):
    """HTTP client bound to the app with the test database and fakes."""

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_identity_client] = lambda: identity
    app.dependency_overrides[get_carrier_webhook_client] = lambda: webhook_client

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_profile(db_session, identity):
    """Create a profile and register a bearer token for it."""

    async def factory(
        user_type: UserType | None = UserType.CLIENT,
        email: str | None = None,
        deleted_days_ago: float | None = None,
        **fields,
    ) -> Profile:
        profile = Profile(
            type=user_type,
            email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            **fields,
        )
        if deleted_days_ago is not None:
            profile.deleted_at = utc_now() - timedelta(days=deleted_days_ago)
            profile.deleted_by = "admin-id"
        db_session.add(profile)
        await db_session.commit()
        identity.register(f"token-{profile.id}", profile.id, profile.email)
        return profile

    return factory


@pytest.fixture
def make_address(db_session):
    """Create an address row."""

    async def factory(created_by: str | None = None, **fields) -> Address:
        address = Address(
            street1=fields.pop("street1", "100 Market St"),
            city=fields.pop("city", "San Francisco"),
            state=fields.pop("state", "CA"),
            zip=fields.pop("zip", "94105"),
            created_by=created_by,
            **fields,
        )
        db_session.add(address)
        await db_session.commit()
        return address

    return factory


@pytest.fixture
def make_audit(db_session):
    """Create a user audit entry ``hours_ago`` in the past."""

    async def factory(
        user_id: str,
        action: AuditAction,
        performed_by: str | None = None,
        hours_ago: float = 1,
        metadata: dict | None = None,
    ) -> UserAudit:
        audit = UserAudit(
            user_id=user_id,
            action=action.value,
            performed_by=performed_by,
            metadata_=metadata,
            created_at=utc_now() - timedelta(hours=hours_ago),
        )
        db_session.add(audit)
        await db_session.commit()
        return audit

    return factory
