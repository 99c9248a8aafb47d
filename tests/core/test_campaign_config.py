"""
Test suite for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from campaign_management.core.config import Settings, get_settings


class TestSettings:
    """Test suite for Settings defaults and validation."""

    def test_defaults(self):
        settings = Settings()

        assert settings.DEFAULT_CURRENCY == "EUR"
        assert settings.BUDGET_ALERT_THRESHOLD == 0.9
        assert settings.LOW_CTR_THRESHOLD == 1.0
        assert settings.LOW_CTR_MIN_IMPRESSIONS == 1000
        assert settings.LOW_CONVERSION_THRESHOLD == 2.0
        assert settings.LOW_CONVERSION_MIN_CLICKS == 100
        assert settings.DEFAULT_PAGE_SIZE == 20
        assert settings.MAX_PAGE_SIZE == 100
        assert settings.is_production is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_CURRENCY", "usd")
        monkeypatch.setenv("BUDGET_ALERT_THRESHOLD", "0.75")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("ENVIRONMENT", "Production")

        settings = Settings()

        assert settings.DEFAULT_CURRENCY == "USD"
        assert settings.BUDGET_ALERT_THRESHOLD == 0.75
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.is_production is True

    @pytest.mark.parametrize("raw,expected", [("yes", True), ("ON", True), ("0", False), ("nope", False)])
    def test_debug_flag_parsing(self, monkeypatch, raw, expected):
        monkeypatch.setenv("DEBUG", raw)
        assert Settings().DEBUG is expected

    @pytest.mark.parametrize(
        "field,value",
        [
            ("BUDGET_ALERT_THRESHOLD", 0),
            ("BUDGET_ALERT_THRESHOLD", 1.5),
            ("EVENT_PUBLISH_TIMEOUT_SECONDS", 0),
            ("NOTIFICATION_TIMEOUT_SECONDS", -1),
            ("MAX_PAGE_SIZE", 0),
            ("LOG_LEVEL", "chatty"),
            ("DEFAULT_CURRENCY", "EURO"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})

    def test_get_settings_returns_shared_instance(self):
        assert get_settings() is get_settings()
