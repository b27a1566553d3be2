import time

from deskly_web.schemas.auth import TokenPayload
from deskly_web.services.renderer import (
    build_deep_link,
    render_account_page,
    render_desktop_page,
    render_error_page,
)


def _payload(**overrides) -> TokenPayload:
    now = int(time.time())
    values = {
        "sub": "user_01",
        "email": "jane@example.com",
        "name": "Jane Doe",
        "picture": None,
        "iat": now,
        "exp": now + 60,
    }
    values.update(overrides)
    return TokenPayload(**values)


class TestDeepLink:
    def test_token_is_url_encoded(self):
        assert build_deep_link("deskly", "a+b/c=d") == "deskly://auth/callback?token=a%2Bb%2Fc%3Dd"

    def test_jwt_characters_pass_through(self):
        assert build_deep_link("deskly", "aaa.bbb-ccc_ddd") == "deskly://auth/callback?token=aaa.bbb-ccc_ddd"


class TestDesktopPage:
    def test_contains_manual_link_and_auto_redirect(self):
        link = "deskly://auth/callback?token=abc.def.ghi"
        html = render_desktop_page(_payload(), link)

        assert f'href="{link}"' in html
        assert f"<code>{link}</code>" in html
        assert f'window.location.href = "{link}"' in html
        assert "1500" in html
        assert "Welcome, Jane Doe!" in html

    def test_escapes_name_and_email(self):
        html = render_desktop_page(
            _payload(name="<img src=x onerror=alert(1)>", email="a@b.com<b>"),
            "deskly://auth/callback?token=t",
        )

        assert "<img src=x" not in html
        assert "&lt;img src=x onerror=alert(1)&gt;" in html
        assert "a@b.com&lt;b&gt;" in html

    def test_escapes_deep_link(self):
        html = render_desktop_page(_payload(), 'deskly://x"><script>alert(1)</script>')

        assert '"><script>alert(1)' not in html
        assert "\\u003cscript\\u003e" in html


class TestAccountPage:
    def test_initial_without_picture(self):
        html = render_account_page(_payload(name="jane"))
        assert ">J<" in html.replace(" ", "").replace("\n", "")

    def test_picture(self):
        html = render_account_page(_payload(picture="https://cdn.example.com/j.png"))
        assert '<img src="https://cdn.example.com/j.png"' in html


def test_error_page_escapes_message():
    html = render_error_page("Oops", "<b>bad</b>")
    assert "&lt;b&gt;bad&lt;/b&gt;" in html
