"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded in production)
    - get_settings() is cached (lru_cache) — single instance per process
    - is_production is the only switch for cookie secure/samesite attributes

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box locally
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://loanlink:loanlink@db:5432/loanlink"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Deployment
    environment: str = "development"
    port: int = 5000

    # Session tokens
    session_secret: str = "dev-session-secret-change-me"
    session_ttl_days: int = 7
    session_cookie_name: str = "token"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]
    frontend_base_url: str = "http://localhost:5173"

    # Payment provider
    payment_api_base: str = "https://api.stripe.com"
    payment_api_key: str = "sk_test_placeholder"
    payment_webhook_secret: str = "whsec_placeholder"
    payment_webhook_tolerance_seconds: int = 300
    payment_timeout_seconds: float = 15.0
    application_fee_cents: int = 1000
    payment_currency: str = "usd"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
