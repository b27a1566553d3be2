"""One-time CSRF nonce carried in a short-lived cookie scoped to the callback."""

import secrets
from dataclasses import dataclass
from typing import Literal

from fastapi import Response

from deskly_web.config import Settings, get_settings

NONCE_BYTES = 32


@dataclass(frozen=True)
class CookieDirective:
    key: str
    value: str
    max_age: int
    path: str
    secure: bool
    httponly: bool = True
    samesite: Literal["lax", "strict", "none"] = "lax"

    def apply(self, response: Response) -> None:
        response.set_cookie(
            key=self.key,
            value=self.value,
            max_age=self.max_age,
            path=self.path,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )


def begin(settings: Settings | None = None) -> tuple[str, CookieDirective]:
    settings = settings or get_settings()
    nonce = secrets.token_urlsafe(NONCE_BYTES)
    cookie = CookieDirective(
        key=settings.nonce_cookie_name,
        value=nonce,
        max_age=settings.nonce_ttl_seconds,
        path=settings.callback_path,
        secure=settings.secure_cookies,
    )
    return nonce, cookie


def consume(received_nonce: str | None, cookie_value: str | None) -> bool:
    """Check the nonce echoed through state against the cookie copy.

    A missing value on either side is a mismatch. The caller must clear the
    cookie afterwards whatever the result.
    """
    if not received_nonce or not cookie_value:
        return False
    return secrets.compare_digest(received_nonce.encode(), cookie_value.encode())


def clear_nonce_cookie(response: Response, settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    response.delete_cookie(
        key=settings.nonce_cookie_name,
        path=settings.callback_path,
        secure=settings.secure_cookies,
        httponly=True,
        samesite="lax",
    )
