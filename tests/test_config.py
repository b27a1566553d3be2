import pytest

from deskly_web.config import DEFAULT_JWT_SECRET, Settings


def _settings(**overrides) -> Settings:
    values = {
        "debug": False,
        "jwt_secret": "a-real-secret",
        "workos_api_key": "sk_test_123",
        "workos_client_id": "client_test_123",
        "base_url": "https://deskly.in",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestValidateSecurity:
    def test_valid_production_config(self):
        _settings().validate_security()

    def test_default_secret_in_production_refuses_to_start(self):
        with pytest.raises(RuntimeError, match="JWT_SECRET"):
            _settings(jwt_secret=DEFAULT_JWT_SECRET).validate_security()

    def test_missing_secret_refuses_to_start(self):
        with pytest.raises(RuntimeError, match="JWT_SECRET"):
            _settings(jwt_secret="").validate_security()

    def test_default_secret_allowed_in_debug(self):
        _settings(jwt_secret=DEFAULT_JWT_SECRET, debug=True).validate_security()

    def test_partial_provider_config(self):
        with pytest.raises(RuntimeError, match="partially configured"):
            _settings(workos_client_id=None).validate_security()


class TestDerivedSettings:
    def test_callback_url(self):
        assert _settings(base_url="https://deskly.in/").callback_url == "https://deskly.in/auth/callback"

    def test_secure_cookies(self):
        assert _settings().secure_cookies is True
        assert _settings(debug=True, base_url="http://localhost:4000").secure_cookies is False
        assert _settings(debug=True, base_url="https://staging.deskly.in").secure_cookies is True

    def test_auth_mode(self):
        assert _settings().get_auth_mode() == "workos"
        assert _settings(workos_api_key=None, workos_client_id=None, debug=True).get_auth_mode() == "dev"
        assert _settings(workos_api_key=None, workos_client_id=None).get_auth_mode() == "unconfigured"
