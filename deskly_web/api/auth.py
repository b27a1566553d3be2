import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from deskly_web.config import get_settings
from deskly_web.services.auth_flow import (
    AuthFlowError,
    AuthorizationRedirectBuilder,
    CallbackHandler,
    CallbackState,
)
from deskly_web.services.provider import (
    IdentityProvider,
    ProviderUnconfiguredError,
    get_provider,
)
from deskly_web.services.renderer import build_deep_link, render_desktop_page, render_error_page
from deskly_web.utils.auth import clear_session_cookie, set_session_cookie
from deskly_web.utils.nonce import clear_nonce_cookie

router = APIRouter(prefix="/auth", tags=["Authentication"])
settings = get_settings()
logger = logging.getLogger(__name__)


def _error_response(title: str, message: str, status_code: int) -> HTMLResponse:
    return HTMLResponse(content=render_error_page(title, message), status_code=status_code)


def _flow_error_response(exc: AuthFlowError) -> HTMLResponse:
    message = exc.public_message
    if settings.debug and exc.state == CallbackState.REJECTED_EXCHANGE_FAILED and str(exc):
        message = f"{message} ({exc})"
    return _error_response(exc.title, message, exc.status_code)


@router.get("/login")
async def login(
    provider: Annotated[IdentityProvider, Depends(get_provider)],
    device_id: str | None = None,
    source: str | None = None,
) -> Response:
    builder = AuthorizationRedirectBuilder(provider, settings)
    try:
        url, nonce_cookie = builder.build(device_id=device_id, source=source)
    except ProviderUnconfiguredError as e:
        logger.error("Cannot start sign in: %s", e)
        return _error_response(
            "Sign in unavailable",
            "Sign in is not configured on this server yet.",
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    logger.info(
        "Starting sign in (source=%s, device id present: %s)", source or "desktop", bool(device_id)
    )
    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    nonce_cookie.apply(response)
    return response


@router.get("/callback")
async def callback(
    request: Request,
    provider: Annotated[IdentityProvider, Depends(get_provider)],
    code: str | None = None,
    state: str | None = None,
) -> Response:
    handler = CallbackHandler(provider, settings)
    nonce_cookie = request.cookies.get(settings.nonce_cookie_name)

    try:
        result = await handler.handle(code, state, nonce_cookie)
    except AuthFlowError as e:
        logger.debug("OAuth callback rejected in state %s", handler.state.value)
        error_response = _flow_error_response(e)
        clear_nonce_cookie(error_response, settings)
        return error_response

    response: Response
    if result.context.source == "web":
        response = RedirectResponse("/account", status_code=status.HTTP_302_FOUND)
    else:
        deep_link = build_deep_link(settings.desktop_scheme, result.token)
        response = HTMLResponse(content=render_desktop_page(result.payload, deep_link))

    # Browser visitors stay signed in whichever surface started the flow
    set_session_cookie(response, result.token)
    clear_nonce_cookie(response, settings)
    result.mark_rendered()
    logger.debug(
        "OAuth callback transitions: %s", " -> ".join(s.value for s in result.transitions)
    )
    return response


@router.api_route("/logout", methods=["GET", "POST"])
async def logout() -> RedirectResponse:
    response = RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    clear_session_cookie(response)
    return response
