"""Application configuration settings."""

from __future__ import annotations

import json
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./marketplace.db",
        description="SQLAlchemy URL of the database backing the document store",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to present timestamps (IANA name or UTC offset)",
    )

    stripe_secret_key: str | None = Field(
        default=None,
        description="Secret key used for payment intents and tax calculations",
    )
    stripe_api_version: str | None = Field(default=None)
    currency: str = Field(default="usd", min_length=3, max_length=3)

    tax_country: str = Field(default="US", min_length=2, max_length=2)
    tax_default_state: str = Field(default="UT")
    tax_flat_rate: float = Field(
        default=0.0719,
        description="Regional flat rate applied when the tax service is unavailable",
        ge=0,
        lt=1,
    )
    tax_line_item_reference: str = Field(default="detailing_service")

    firebase_service_account: str | None = Field(
        default=None,
        description="Service account JSON used to initialise the push backend",
    )
    device_token_collections: str = Field(
        default="detailer,customer",
        description="Comma separated profile collections searched for device tokens",
    )

    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma separated origins allowed to call the API from a browser",
    )

    notification_feed_limit: int = Field(default=50, gt=0)
    notification_composite_indexes_enabled: bool = Field(default=True)

    @model_validator(mode="after")
    def _validate_service_account(self) -> "Settings":
        if self.firebase_service_account:
            try:
                parsed = json.loads(self.firebase_service_account)
            except json.JSONDecodeError as exc:
                raise ValueError("FIREBASE_SERVICE_ACCOUNT must be valid JSON") from exc
            if not isinstance(parsed, dict):
                raise ValueError("FIREBASE_SERVICE_ACCOUNT must be a JSON object")
        return self

    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def profile_collections(self) -> tuple[str, ...]:
        """Return the configured device token collections in lookup order."""

        return tuple(
            name.strip()
            for name in self.device_token_collections.split(",")
            if name.strip()
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
