"""
Tests for application configuration.

These tests verify that:
1. Default values are set correctly
2. Environment variables override defaults, including nested bearer settings
"""

from todo_api.core.config import BearerSchemeSettings, Settings, SigningKey


class TestSettings:
    """Test the Settings configuration class."""

    def test_default_values(self, monkeypatch):
        """Settings should have sensible defaults when no env vars are set."""
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_MINUTES", raising=False)
        monkeypatch.delenv("DEBUG", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = Settings(
            _env_file=None,  # Don't read .env file
        )

        assert settings.database_url.startswith("sqlite+aiosqlite")
        assert settings.access_token_expire_minutes == 60
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.bearer.valid_audiences == ["http://localhost:8000"]
        assert settings.bearer.signing_keys == []

    def test_env_override(self, monkeypatch):
        """Environment variables should override default values."""
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./other.db")
        monkeypatch.setenv("DEBUG", "true")

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./other.db"
        assert settings.debug is True

    def test_nested_bearer_override(self, monkeypatch):
        """Bearer settings are read from AUTHENTICATION__SCHEMES__BEARER__*."""
        monkeypatch.setenv(
            "AUTHENTICATION__SCHEMES__BEARER__VALID_AUDIENCES",
            '["http://localhost:5000", "https://localhost:5001"]',
        )
        monkeypatch.setenv(
            "AUTHENTICATION__SCHEMES__BEARER__SIGNING_KEYS",
            '[{"issuer": "user-jwts", "value": "c2VjcmV0"}]',
        )

        settings = Settings(_env_file=None)

        assert settings.bearer.valid_audiences == [
            "http://localhost:5000",
            "https://localhost:5001",
        ]
        assert settings.bearer.signing_keys == [SigningKey(issuer="user-jwts", value="c2VjcmV0")]


class TestBearerSchemeSettings:
    """Test signing key lookup."""

    def test_signing_key_for_issuer(self):
        first = SigningKey(issuer="a", value="AAAA")
        second = SigningKey(issuer="b", value="BBBB")
        bearer = BearerSchemeSettings(signing_keys=[first, second])

        assert bearer.signing_key_for("b") == second
        assert bearer.signing_key_for("missing") is None
        assert bearer.signing_key_for(None) is None
