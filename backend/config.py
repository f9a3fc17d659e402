"""
Configuration management for the Checkout Bridge service.

Loads settings from the environment (and .env) via pydantic-settings.

Settings are built once by load_settings() when the app is created and
handed to each component; nothing reads the environment after startup.
"""
import logging
from typing import List, Literal

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Stripe ──────────────────────────────────────────────────────
    stripe_secret_key: str
    stripe_webhook_secret: str
    stripe_executor_workers: int = 4

    # ── WooCommerce REST ────────────────────────────────────────────
    wc_base_url: str
    wc_consumer_key: str
    wc_consumer_secret: str
    # "query" puts credentials in the URL (gets past most WAFs),
    # "basic" sends an Authorization header instead
    wc_auth_mode: Literal["query", "basic"] = "query"
    wc_timeout_seconds: float = 10.0

    # ── Internal API ────────────────────────────────────────────────
    internal_api_key: str
    app_base_url: str

    # ── Checkout ────────────────────────────────────────────────────
    checkout_currency: str = "jpy"
    checkout_expires_hours: int = 24   # Stripe's upper bound

    # ── Webhook dedup ───────────────────────────────────────────────
    webhook_event_ttl_seconds: int = 86_400
    webhook_event_cache_size: int = 10_000

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    port: int = 3000
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("wc_base_url", "app_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup. In production the checks are hard
        failures; elsewhere they only produce warnings.
        """
        problems = []
        if "*" in self.cors_origins_list:
            problems.append("CORS_ORIGINS contains '*' (open access)")
        if not self.app_base_url.startswith("https://"):
            problems.append("APP_BASE_URL is not https (redirects leak order ids)")
        if not self.wc_base_url.startswith("https://"):
            problems.append("WC_BASE_URL is not https (credentials sent in clear)")

        if self.environment == "production":
            if problems:
                raise ConfigurationError("; ".join(problems))
            logger.info("✅ Production settings validated")
        else:
            for p in problems:
                logger.warning(f"⚠️  {p}")


def load_settings(**overrides) -> Settings:
    """
    Build Settings from the environment, failing fast on missing values.

    Raises:
        ConfigurationError naming every required variable that is absent
        or empty.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        missing = [
            str(err["loc"][0]).upper()
            for err in e.errors()
            if err["type"] == "missing"
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            ) from e
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    empty = [
        name.upper()
        for name in (
            "stripe_secret_key",
            "stripe_webhook_secret",
            "wc_base_url",
            "wc_consumer_key",
            "wc_consumer_secret",
            "internal_api_key",
            "app_base_url",
        )
        if not getattr(settings, name)
    ]
    if empty:
        raise ConfigurationError(f"Missing required configuration: {', '.join(empty)}")

    return settings
