"""Service layer for the sign in relay."""

from deskly_web.services.auth_flow import AuthorizationRedirectBuilder, CallbackHandler
from deskly_web.services.provider import WorkOSProvider, get_provider

__all__ = [
    "AuthorizationRedirectBuilder",
    "CallbackHandler",
    "WorkOSProvider",
    "get_provider",
]
