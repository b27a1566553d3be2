import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Deskly"
    debug: bool = False
    base_url: str = Field(default="http://localhost:4000")

    # Session tokens
    jwt_secret: str | None = Field(default=DEFAULT_JWT_SECRET)
    jwt_algorithm: str = "HS256"
    token_ttl_days: int = Field(default=30)
    session_cookie_name: str = "deskly_token"

    # OAuth round trip
    nonce_cookie_name: str = "deskly_oauth_nonce"
    nonce_ttl_seconds: int = Field(default=10 * 60)

    # Desktop app deep link scheme (deskly://auth/callback?token=...)
    desktop_scheme: str = Field(default="deskly")

    # Identity provider - WorkOS AuthKit
    workos_api_key: str | None = Field(default=None)
    workos_client_id: str | None = Field(default=None)
    workos_api_base_url: str = Field(default="https://api.workos.com")
    provider_timeout_seconds: float = Field(default=10)

    @property
    def provider_configured(self) -> bool:
        return bool(self.workos_api_key and self.workos_client_id)

    @property
    def secure_cookies(self) -> bool:
        return not self.debug or self.base_url.startswith("https")

    @property
    def callback_path(self) -> str:
        return "/auth/callback"

    @property
    def callback_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.callback_path}"

    @property
    def token_ttl_seconds(self) -> int:
        return self.token_ttl_days * 24 * 60 * 60

    def validate_security(self) -> None:
        if not self.jwt_secret:
            raise RuntimeError("JWT_SECRET is not set. Refusing to sign session tokens without a key.")

        if self.jwt_secret == DEFAULT_JWT_SECRET and not self.debug:
            raise RuntimeError(
                "JWT_SECRET is still the default value. "
                "Set a secure JWT_SECRET or enable DEBUG mode for development."
            )

        workos_key = bool(self.workos_api_key)
        workos_client = bool(self.workos_client_id)
        if workos_key != workos_client:
            raise RuntimeError(
                "WorkOS is partially configured: both WORKOS_API_KEY and WORKOS_CLIENT_ID must be set together."
            )

    def get_auth_mode(self) -> str:
        if self.provider_configured:
            return "workos"
        if self.debug:
            return "dev"
        return "unconfigured"


@lru_cache
def get_settings() -> Settings:
    return Settings()
