"""Application configuration management."""

from pydantic import AnyUrl, BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class CarrierConfig(BaseModel):
    """Delivery carrier integration settings."""

    name: str
    order_prefix: str
    webhook_url: str | None = None


def _default_carriers() -> dict[str, CarrierConfig]:
    return {
        "catervalley": CarrierConfig(
            name="CaterValley",
            order_prefix="CV-",
            webhook_url="https://api.catervalley.com/api/operation/order/update-order-status",
        ),
    }


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Identity service (bearer token validation)
    auth_service_url: str
    auth_service_key: str
    auth_timeout_seconds: float = Field(default=10.0, gt=0)

    # Database
    database_url: AnyUrl

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Runtime
    app_env: str = "development"
    app_version: str = "1.0.0"
    app_timezone: str = Field(
        default="America/Los_Angeles",
        description="Timezone used to interpret order dates and local times",
    )
    cors_origins: list[str] = ["*"]

    # Application sessions
    application_session_ttl_hours: int = Field(default=2, ge=1, le=48)
    application_session_rate_limit: int = Field(default=5, ge=1)
    application_session_rate_window_minutes: int = Field(default=60, ge=1)
    application_session_max_uploads: int = Field(default=10, ge=1)
    upload_max_file_size: int = Field(default=10 * 1024 * 1024, ge=1)
    upload_allowed_types: list[str] = [
        "application/pdf",
        "image/jpeg",
        "image/png",
        "image/webp",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ]

    # Soft-delete cleanup
    cleanup_retention_days: int = Field(default=90, ge=1)
    cleanup_batch_size: int = Field(default=50, ge=1, le=500)
    cleanup_max_daily_deletions: int = Field(default=1000, ge=1)
    cleanup_dry_run: bool = False

    # Scheduler
    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    cleanup_schedule_hour: int = Field(default=2, ge=0, le=23)
    cleanup_schedule_minute: int = Field(default=0, ge=0, le=59)
    monitoring_interval_hours: int = Field(default=6, ge=1, le=24)

    # Carriers
    carriers: dict[str, CarrierConfig] = Field(default_factory=_default_carriers)
    webhook_timeout_seconds: float = Field(default=10.0, gt=0)
    webhook_success_fallback_rate: float = Field(
        default=98.0,
        ge=0,
        le=100,
        description="Reported when the webhook success query fails",
    )

    # Performance snapshots
    performance_cache_ttl_seconds: int = Field(default=60, ge=1)

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
