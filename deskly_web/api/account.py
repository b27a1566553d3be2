from fastapi import APIRouter, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from deskly_web.config import get_settings
from deskly_web.services.renderer import (
    render_account_page,
    render_account_unconfigured_page,
    render_landing_page,
)
from deskly_web.utils.auth import CurrentClaimsOptional

router = APIRouter(tags=["Pages"])
settings = get_settings()


@router.get("/", response_class=HTMLResponse)
async def landing() -> HTMLResponse:
    return HTMLResponse(content=render_landing_page())


@router.get("/account")
async def account(claims: CurrentClaimsOptional) -> Response:
    if not settings.provider_configured:
        return HTMLResponse(content=render_account_unconfigured_page())

    if claims is None:
        return RedirectResponse("/auth/login?source=web", status_code=status.HTTP_302_FOUND)

    return HTMLResponse(content=render_account_page(claims))
