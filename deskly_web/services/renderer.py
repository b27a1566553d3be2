from pathlib import Path
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader

from deskly_web.config import get_settings
from deskly_web.schemas.auth import TokenPayload

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
jinja_env = Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=True)

# Delay before the desktop page tries the deep link on its own
AUTO_REDIRECT_MS = 1500


def build_deep_link(scheme: str, token: str) -> str:
    return f"{scheme}://auth/callback?token={quote(token, safe='')}"


def _render(template_name: str, **context: object) -> str:
    template = jinja_env.get_template(template_name)
    return template.render(app_name=get_settings().app_name, **context)


def render_desktop_page(user: TokenPayload, deep_link: str) -> str:
    return _render(
        "desktop_callback.html",
        user=user,
        deep_link=deep_link,
        auto_redirect_ms=AUTO_REDIRECT_MS,
    )


def render_account_page(user: TokenPayload) -> str:
    initial = user.name[:1].upper() if user.name else "?"
    return _render("account.html", user=user, initial=initial, provider_name="WorkOS")


def render_account_unconfigured_page() -> str:
    return _render("account_unconfigured.html")


def render_error_page(title: str, message: str) -> str:
    return _render("error.html", title=title, message=message)


def render_landing_page() -> str:
    return _render("landing.html")
