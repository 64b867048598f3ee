"""
Unit tests for configuration and logging.
"""

import pytest

from shared.config import Environment, LLMProvider, Settings
from shared.logging.logger import REDACTED, censor_secrets
from services.compliance_search.progress import (
    ProgressReporter,
    ProgressStep,
    batch_percentage,
)


class TestSettings:
    """Tests for Settings."""

    def test_search_defaults(self) -> None:
        settings = Settings()

        assert settings.search.cache_ttl_seconds == 21600
        assert settings.search.cache_max_entries == 1000
        assert settings.search.source_timeout_seconds == 8.0
        assert settings.search.relevance_threshold == 0.8
        assert settings.search.batch_size == 10
        assert settings.search.batch_delay_seconds == 1.0

    def test_test_environment(self) -> None:
        settings = Settings()

        assert settings.environment == Environment.TESTING
        assert settings.is_testing
        assert settings.llm.enabled is False

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SEARCH_BATCH_SIZE", "5")
        monkeypatch.setenv("REGULATIONS_GOV_API_KEY", "abc123")
        monkeypatch.setenv("LLM_PROVIDER", "claude")

        settings = Settings()

        assert settings.search.batch_size == 5
        assert settings.regulations_gov.api_key.get_secret_value() == "abc123"
        assert settings.llm.provider == LLMProvider.CLAUDE

    def test_log_level_uppercased(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings().log_level.value == "DEBUG"

    def test_cors_origins_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")

        assert Settings().cors.origins_list == ["http://a.test", "http://b.test"]


class TestCensorSecrets:
    """Tests for the secret-redaction processor."""

    def test_redacts_nested_keys(self) -> None:
        event = {
            "event": "source_request",
            "api_key": "abc",
            "headers": {"X-Api-Key": "abc", "Accept": "application/json"},
        }

        censored = censor_secrets(None, "info", event)

        assert censored["api_key"] == REDACTED
        assert censored["headers"]["X-Api-Key"] == REDACTED
        assert censored["headers"]["Accept"] == "application/json"
        assert censored["event"] == "source_request"


class TestProgressReporter:
    """Tests for ProgressReporter."""

    @pytest.mark.asyncio
    async def test_percentages_never_decrease(self) -> None:
        reporter = ProgressReporter()

        await reporter.emit(ProgressStep.PROCESSING_APIS, "found")
        await reporter.emit(ProgressStep.API_SEARCH, "late event")

        assert [e.percentage for e in reporter.events] == [60, 60]

    @pytest.mark.asyncio
    async def test_error_keeps_last_percentage(self) -> None:
        reporter = ProgressReporter()

        await reporter.emit(ProgressStep.API_SEARCH, "searching")
        await reporter.error("source down", recoverable=True)

        event = reporter.events[-1]
        assert event.step == ProgressStep.ERROR
        assert event.percentage == 30
        assert event.recoverable is True

    def test_batch_percentage(self) -> None:
        assert batch_percentage(0, 4) == 82
        assert batch_percentage(2, 4) == 85
        assert batch_percentage(4, 4) == 88
        assert batch_percentage(0, 0) == 88
