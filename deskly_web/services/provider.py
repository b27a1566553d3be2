import logging
from typing import Protocol
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from deskly_web.config import Settings, get_settings
from deskly_web.schemas.auth import IdentityClaims

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """The identity provider could not complete a request."""


class ProviderUnconfiguredError(ProviderError):
    """Client credentials for the identity provider are missing."""


class IdentityProvider(Protocol):
    def get_authorization_url(self, redirect_uri: str, state: str) -> str: ...

    async def authenticate_with_code(self, code: str) -> IdentityClaims: ...


class WorkOSProvider:
    """WorkOS User Management (AuthKit) over its REST API."""

    def __init__(
        self,
        api_key: str | None,
        client_id: str | None,
        base_url: str = "https://api.workos.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.client_id = client_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "WorkOSProvider":
        return cls(
            api_key=settings.workos_api_key,
            client_id=settings.workos_client_id,
            base_url=settings.workos_api_base_url,
            timeout=settings.provider_timeout_seconds,
        )

    def _require_config(self) -> None:
        if not self.api_key or not self.client_id:
            raise ProviderUnconfiguredError("WORKOS_API_KEY and WORKOS_CLIENT_ID must be set")

    def get_authorization_url(self, redirect_uri: str, state: str) -> str:
        self._require_config()
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "provider": "authkit",
            "state": state,
        }
        return f"{self.base_url}/user_management/authorize?{urlencode(params)}"

    async def authenticate_with_code(self, code: str) -> IdentityClaims:
        self._require_config()
        payload = {
            "client_id": self.client_id,
            "client_secret": self.api_key,
            "grant_type": "authorization_code",
            "code": code,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/user_management/authenticate",
                    json=payload,
                )
        except httpx.TimeoutException as e:
            raise ProviderError(f"Timed out contacting WorkOS: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Failed to contact WorkOS: {e}") from e

        if response.status_code != 200:
            raise ProviderError(
                f"WorkOS code exchange failed: HTTP {response.status_code}: {response.text}"
            )

        try:
            user = response.json()["user"]
            return IdentityClaims.model_validate(user)
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            raise ProviderError(f"Unexpected WorkOS response: {e}") from e


def get_provider() -> IdentityProvider:
    """FastAPI dependency returning the configured identity provider."""
    return WorkOSProvider.from_settings(get_settings())
