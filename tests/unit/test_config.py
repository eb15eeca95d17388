"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from app.core.config import CarrierConfig, Settings

REQUIRED = {
    "auth_service_url": "http://identity.test",
    "auth_service_key": "key",
    "database_url": "sqlite+aiosqlite:///./test.db",
}


class TestSettings:
    """Tests for Settings loading and validation."""

    def test_defaults(self):
        settings = Settings(**REQUIRED)
        assert settings.cleanup_retention_days == 90
        assert settings.cleanup_batch_size == 50
        assert settings.cleanup_max_daily_deletions == 1000
        assert settings.application_session_rate_limit == 5
        assert settings.webhook_success_fallback_rate == 98.0

    def test_default_carrier(self):
        settings = Settings(**REQUIRED)
        carrier = settings.carriers["catervalley"]
        assert isinstance(carrier, CarrierConfig)
        assert carrier.order_prefix == "CV-"

    def test_batch_size_bounds(self):
        with pytest.raises(ValidationError):
            Settings(**REQUIRED, cleanup_batch_size=0)
        with pytest.raises(ValidationError):
            Settings(**REQUIRED, cleanup_batch_size=501)

    def test_missing_identity_service(self, monkeypatch):
        monkeypatch.delenv("AUTH_SERVICE_URL", raising=False)
        with pytest.raises(ValidationError):
            Settings(
                _env_file=None,
                auth_service_key="key",
                database_url="sqlite+aiosqlite:///./test.db",
            )
