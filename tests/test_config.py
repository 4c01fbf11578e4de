"""
Test configuration validation
"""

import dataclasses

import pytest

from guru_mcp.config import DEFAULT_GURU_API_BASE_URL, Config
from guru_mcp.errors import ConfigurationError


def _config(**overrides) -> Config:
    values = {
        "guru_email": "me@example.com",
        "guru_api_token": "secret",
        "guru_api_base_url": DEFAULT_GURU_API_BASE_URL,
        "debug": False,
        "request_timeout": 30.0,
    }
    values.update(overrides)
    return Config(**values)


class TestConfigValidation:
    def test_valid_config(self):
        config = _config()
        assert config.validate() == []
        config.require_valid()

    def test_missing_email(self):
        assert _config(guru_email="").validate() == ["GURU_EMAIL is not configured"]

    def test_missing_token(self):
        assert _config(guru_api_token="").validate() == ["GURU_API_TOKEN is not configured"]

    def test_require_valid_lists_all_errors(self):
        with pytest.raises(ConfigurationError) as exc_info:
            _config(guru_email="", guru_api_token="").require_valid()

        assert exc_info.value.errors == ["GURU_EMAIL is not configured", "GURU_API_TOKEN is not configured"]
        assert "GURU_EMAIL" in str(exc_info.value)

    def test_non_positive_timeout(self):
        assert _config(request_timeout=0).validate() == ["REQUEST_TIMEOUT must be a positive number of seconds"]

    def test_config_is_immutable(self):
        config = _config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.guru_email = "other@example.com"
