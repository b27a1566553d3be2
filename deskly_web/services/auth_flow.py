"""OAuth round trip: building the provider redirect and handling its callback."""

import json
import logging
from dataclasses import dataclass
from enum import Enum

from deskly_web.config import Settings, get_settings
from deskly_web.schemas.auth import FlowContext, IdentityClaims, TokenPayload
from deskly_web.services.provider import IdentityProvider, ProviderError
from deskly_web.utils import nonce as nonce_store
from deskly_web.utils.nonce import CookieDirective
from deskly_web.utils.tokens import issue_token, verify_token

logger = logging.getLogger(__name__)


class CallbackState(str, Enum):
    AWAITING_CODE = "awaiting_code"
    NONCE_CHECKED = "nonce_checked"
    CODE_EXCHANGED = "code_exchanged"
    TOKEN_ISSUED = "token_issued"
    RESPONSE_RENDERED = "response_rendered"
    REJECTED_NO_CODE = "rejected_no_code"
    REJECTED_CSRF = "rejected_csrf"
    REJECTED_EXCHANGE_FAILED = "rejected_exchange_failed"


class AuthFlowError(Exception):
    status_code = 500
    title = "Something went wrong"
    public_message = "Sign in failed. Please try again."
    state = CallbackState.AWAITING_CODE


class MissingCodeError(AuthFlowError):
    status_code = 400
    title = "Sign in failed"
    public_message = "Missing authorization code from the identity provider."
    state = CallbackState.REJECTED_NO_CODE


class CsrfMismatchError(AuthFlowError):
    status_code = 403
    title = "Sign in blocked"
    public_message = (
        "This sign in request could not be verified (possible CSRF). "
        "Please start the sign in again."
    )
    state = CallbackState.REJECTED_CSRF


class ProviderExchangeError(AuthFlowError):
    status_code = 500
    title = "Something went wrong"
    public_message = "We could not complete sign in with the identity provider. Please try again."
    state = CallbackState.REJECTED_EXCHANGE_FAILED


@dataclass
class CallbackResult:
    context: FlowContext
    claims: IdentityClaims
    token: str
    payload: TokenPayload
    transitions: list[CallbackState]

    @property
    def state(self) -> CallbackState:
        return self.transitions[-1]

    def mark_rendered(self) -> None:
        self.transitions.append(CallbackState.RESPONSE_RENDERED)


def normalize_source(source: str | None) -> str:
    return "web" if source == "web" else "desktop"


def parse_state(state: str | None) -> FlowContext | None:
    """
    Parse the JSON context round-tripped through the provider.

    Returns None when state is absent or unreadable; fields of the wrong
    type are dropped rather than trusted.
    """
    if not state:
        return None
    try:
        raw = json.loads(state)
    except ValueError:
        logger.info("Ignoring malformed OAuth state parameter")
        return None
    if not isinstance(raw, dict):
        return None

    nonce = raw.get("nonce")
    device_id = raw.get("device_id")
    return FlowContext(
        nonce=nonce if isinstance(nonce, str) and nonce else None,
        device_id=device_id if isinstance(device_id, str) and device_id else None,
        source=normalize_source(raw.get("source")),
    )


class AuthorizationRedirectBuilder:
    def __init__(self, provider: IdentityProvider, settings: Settings | None = None):
        self.provider = provider
        self.settings = settings or get_settings()

    def build(
        self, device_id: str | None = None, source: str | None = None
    ) -> tuple[str, CookieDirective]:
        """Return the provider authorization URL and the nonce cookie to set.

        Raises ProviderUnconfiguredError when client credentials are missing.
        """
        nonce, cookie = nonce_store.begin(self.settings)
        state = json.dumps(
            {
                "nonce": nonce,
                "device_id": device_id or None,
                "source": normalize_source(source),
            }
        )
        url = self.provider.get_authorization_url(self.settings.callback_url, state)
        return url, cookie


class CallbackHandler:
    def __init__(self, provider: IdentityProvider, settings: Settings | None = None):
        self.provider = provider
        self.settings = settings or get_settings()
        self.transitions: list[CallbackState] = [CallbackState.AWAITING_CODE]

    @property
    def state(self) -> CallbackState:
        return self.transitions[-1]

    def _reject(self, exc: AuthFlowError) -> AuthFlowError:
        self.transitions.append(exc.state)
        return exc

    def check_nonce(self, state: str | None, nonce_cookie: str | None) -> FlowContext:
        context = parse_state(state)
        if context is None:
            # No usable state means no context, not a forged callback
            return FlowContext()

        if not nonce_store.consume(context.nonce, nonce_cookie):
            logger.warning(
                "OAuth state nonce mismatch (cookie present: %s)", nonce_cookie is not None
            )
            raise self._reject(CsrfMismatchError())
        return context

    async def handle(
        self, code: str | None, state: str | None, nonce_cookie: str | None
    ) -> CallbackResult:
        if not code:
            logger.warning("OAuth callback without authorization code")
            raise self._reject(MissingCodeError())

        context = self.check_nonce(state, nonce_cookie)
        self.transitions.append(CallbackState.NONCE_CHECKED)

        try:
            claims = await self.provider.authenticate_with_code(code)
        except ProviderError as e:
            logger.error("Provider code exchange failed: %s", e)
            raise self._reject(ProviderExchangeError(str(e))) from e
        self.transitions.append(CallbackState.CODE_EXCHANGED)

        token = issue_token(claims)
        payload = verify_token(token)
        if payload is None:
            raise self._reject(ProviderExchangeError("Issued token failed verification"))
        self.transitions.append(CallbackState.TOKEN_ISSUED)

        logger.info(
            "Signed in %s via %s flow (device id present: %s)",
            claims.id,
            context.source,
            context.device_id is not None,
        )
        return CallbackResult(
            context=context,
            claims=claims,
            token=token,
            payload=payload,
            transitions=self.transitions,
        )
