"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

CHANNEL_EMAIL = "email"
CHANNEL_IN_APP = "in_app"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./claim_notifier.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="America/Lima",
        description="Timezone used when a tenant or preference does not define one",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    frontend_url: str | None = Field(
        default=None,
        description="Base URL of the dashboard, used to build links inside digests",
    )
    admin_api_key: str | None = Field(
        default=None,
        description="Shared secret expected in the X-Admin-Key header of admin job routes",
    )
    scheduler_enabled: bool = Field(
        default=True,
        description="Register the periodic notification cadences on application start-up",
    )
    daily_check_minute: str = Field(
        default="0",
        description="Cron minute expression for the daily digest check (runs every hour)",
    )
    weekly_check_day_of_week: str = Field(
        default="mon", description="Cron day of week for the weekly digest check"
    )
    weekly_check_hour: int = Field(default=9, ge=0, le=23)
    weekly_check_minute: int = Field(default=0, ge=0, le=59)
    sla_check_minute: str = Field(
        default="15",
        description="Cron minute expression for the hourly SLA check",
    )
    dispatch_concurrency: int = Field(
        default=4,
        gt=0,
        description="Maximum number of notification units dispatched in parallel per tick",
    )
    sla_days: int = Field(
        default=15, gt=0, description="Days a claim may stay unresolved before breaching SLA"
    )
    sla_warning_days: int = Field(
        default=2,
        ge=0,
        description="Days before the SLA deadline in which a claim is reported as at risk",
    )
    digest_channels: list[str] = Field(default_factory=lambda: [CHANNEL_EMAIL])
    sla_channels: list[str] = Field(default_factory=lambda: [CHANNEL_IN_APP])

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self

    @model_validator(mode="after")
    def _validate_channels(self) -> "Settings":
        known = {CHANNEL_EMAIL, CHANNEL_IN_APP}
        for name in (*self.digest_channels, *self.sla_channels):
            if name not in known:
                raise ValueError(f"Unknown notification channel '{name}'")
        if not self.digest_channels or not self.sla_channels:
            raise ValueError("At least one delivery channel is required per notification kind")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = [
    "CHANNEL_EMAIL",
    "CHANNEL_IN_APP",
    "Settings",
    "get_settings",
    "reset_settings_cache",
]
