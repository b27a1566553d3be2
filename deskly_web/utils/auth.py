from typing import Annotated, Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi.security.utils import get_authorization_scheme_param

from deskly_web.config import get_settings
from deskly_web.schemas.auth import TokenPayload
from deskly_web.utils.tokens import verify_token

# HTTP Bearer token scheme
bearer_scheme = HTTPBearer(auto_error=False)


class NotAuthenticatedError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def get_session_token(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Optional[str]:
    """
    Extract a session token from the request.

    An explicit Bearer token (desktop app, API clients) wins over the
    session cookie set for browser visitors. A Bearer header with no token
    yields an empty string so it is rejected instead of falling back to
    the cookie.
    """
    if credentials:
        return credentials.credentials

    scheme, _ = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() == "bearer":
        return ""
    return request.cookies.get(get_settings().session_cookie_name)


def get_current_claims_optional(
    token: Annotated[Optional[str], Depends(get_session_token)],
) -> Optional[TokenPayload]:
    if not token:
        return None
    return verify_token(token)


def get_current_claims(
    token: Annotated[Optional[str], Depends(get_session_token)],
) -> TokenPayload:
    if not token:
        raise NotAuthenticatedError("Missing token")

    claims = verify_token(token)
    if claims is None:
        raise NotAuthenticatedError("Invalid or expired token")
    return claims


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.token_ttl_seconds,
        path="/",
        secure=settings.secure_cookies,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        secure=settings.secure_cookies,
        httponly=True,
        samesite="lax",
    )


# Type aliases for dependency injection
CurrentClaims = Annotated[TokenPayload, Depends(get_current_claims)]
CurrentClaimsOptional = Annotated[Optional[TokenPayload], Depends(get_current_claims_optional)]
