"""
Tests for configuration validation.
"""

import pytest
from pydantic import ValidationError

from auth.jwt_handler import get_jwt_handler
from config.settings import Settings, config


class TestSettings:
    @pytest.mark.parametrize("secret", ["", "   "])
    def test_empty_secret_rejected_at_load(self, secret):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, jwt_secret=secret)

    def test_non_positive_expiry_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, jwt_expiry_minutes=0)

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("JWT_ISSUER", "custom-issuer")
        assert Settings(_env_file=None).jwt_issuer == "custom-issuer"

    def test_handler_built_from_config(self):
        handler = get_jwt_handler()
        assert handler.issuer == config.jwt_issuer
        assert handler.audience == config.jwt_audience
        assert handler.expiry.total_seconds() == config.jwt_expiry_minutes * 60

    def test_missing_secret_rejected_at_load(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
