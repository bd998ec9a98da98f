"""Centralized application configuration via environment variables."""

from enum import StrEnum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The BigCommerce client secret doubles as the shared secret for
    ``signed_payload`` verification, so it is kept as SecretStr together
    with the MyRover API key.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App ---
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "DEBUG"
    # --- CORS ---
    cors_allowed_origins: list[str] = []
    cors_allow_credentials: bool = False
    cors_allowed_methods: list[str] = ["GET", "POST"]
    cors_allowed_headers: list[str] = ["Content-Type"]

    # --- BigCommerce OAuth ---
    bc_client_id: str = ""
    bc_client_secret: SecretStr | None = None
    # Must match the callback URL registered in the developer portal exactly.
    bc_redirect_uri: str = "http://localhost:8000/api/auth/callback"
    bc_token_url: str = "https://login.bigcommerce.com/oauth2/token"
    bc_scope: str = "store_v2_information store_v2_shipping"

    # --- MyRover pricing API ---
    myrover_base_url: str = "https://api.myrover.io"
    myrover_api_key: SecretStr | None = None
    myrover_services_path: str = "/services"
    myrover_price_path: str = "/get-price"

    # --- Rates ---
    upstream_timeout_seconds: float = Field(default=8.0, ge=1.0, le=30.0)
    # None keeps one in-flight lookup per offering.
    rates_max_concurrency: int | None = Field(default=None, ge=1)
    rates_currency: str = "CAD"
    # Whole-request deadline for discovery plus lookups; stays under the
    # checkout's 10s rate callback limit.
    rates_budget_seconds: float = Field(default=9.0, gt=0, le=30.0)

    # --- Convenience properties ---
    @property
    def is_dev(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING

    @property
    def shared_secret(self) -> str:
        """Secret used to verify ``signed_payload`` values ("" when unset)."""
        if self.bc_client_secret is None:
            return ""
        return self.bc_client_secret.get_secret_value()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton.

    Usage::

        from myrover_carrier.config import get_settings
        settings = get_settings()

    Or for dependency injection in FastAPI::

        @app.get("/")
        def root(settings: Settings = Depends(get_settings)):
            ...
    """
    return Settings()


settings = get_settings()
