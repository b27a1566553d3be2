import os

# Set test environment
os.environ["DEBUG"] = "true"
os.environ["JWT_SECRET"] = "test-secret-key-for-session-tokens"
os.environ["BASE_URL"] = "http://test"
os.environ["DESKTOP_SCHEME"] = "deskly"
os.environ["WORKOS_API_KEY"] = "sk_test_123"
os.environ["WORKOS_CLIENT_ID"] = "client_test_123"

from collections.abc import AsyncGenerator
from http.cookies import SimpleCookie
from urllib.parse import urlencode

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient, Response

from deskly_web.main import app
from deskly_web.schemas.auth import IdentityClaims
from deskly_web.services.provider import ProviderError, get_provider


class FakeProvider:
    """In-memory identity provider recording every code exchange."""

    def __init__(self, claims: IdentityClaims | None = None, error: Exception | None = None):
        self.claims = claims or IdentityClaims(
            id="user_01",
            email="jane@example.com",
            first_name="Jane",
            last_name="Doe",
        )
        self.error = error
        self.exchanged_codes: list[str] = []
        self.authorization_requests: list[tuple[str, str]] = []

    def get_authorization_url(self, redirect_uri: str, state: str) -> str:
        self.authorization_requests.append((redirect_uri, state))
        params = {"redirect_uri": redirect_uri, "state": state}
        return f"https://auth.example.com/authorize?{urlencode(params)}"

    async def authenticate_with_code(self, code: str) -> IdentityClaims:
        self.exchanged_codes.append(code)
        if self.error:
            raise self.error
        return self.claims


def get_set_cookie(response: Response, name: str) -> dict | None:
    """Return the attributes of a Set-Cookie header for ``name``, or None."""
    for header in response.headers.get_list("set-cookie"):
        cookie = SimpleCookie()
        cookie.load(header)
        if name in cookie:
            morsel = cookie[name]
            attrs = {key: value for key, value in morsel.items() if value}
            attrs["value"] = morsel.value
            attrs["raw"] = header
            return attrs
    return None


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def failing_provider() -> FakeProvider:
    return FakeProvider(error=ProviderError("invalid_grant: code already used"))


@pytest_asyncio.fixture(scope="function")
async def client(provider: FakeProvider) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with the identity provider replaced."""
    app.dependency_overrides[get_provider] = lambda: provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def sample_claims() -> IdentityClaims:
    return IdentityClaims(
        id="user_01",
        email="jane@example.com",
        first_name="Jane",
        last_name="Doe",
        profile_picture_url="https://cdn.example.com/jane.png",
    )
