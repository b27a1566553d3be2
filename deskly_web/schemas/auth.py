from typing import Literal

from pydantic import BaseModel, Field

FlowSource = Literal["desktop", "web"]


class IdentityClaims(BaseModel):
    """User record returned by the identity provider after a code exchange."""

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    profile_picture_url: str | None = None


class TokenPayload(BaseModel):
    sub: str  # Subject (provider user id)
    email: str
    name: str
    picture: str | None = None
    iat: int  # Issued at timestamp
    exp: int  # Expiration timestamp


class FlowContext(BaseModel):
    """Context threaded through the provider's state parameter."""

    nonce: str | None = None
    device_id: str | None = None
    source: FlowSource = "desktop"


class MeResponse(BaseModel):
    user: TokenPayload


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human readable reason")
