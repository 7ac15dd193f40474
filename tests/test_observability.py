"""Tests for settings parsing, structlog configuration, and pipeline metrics."""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY

from src.callsnap.api.middleware.logging import configure_structlog
from src.callsnap.config import Environment, Settings, get_settings
from src.callsnap.core.monitoring import track_processing_run


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.ENVIRONMENT == Environment.development
        assert settings.DEFAULT_SUMMARY_LANGUAGE == "pt-BR"
        assert settings.PRESERVE_MANUAL_EDITS is False

    def test_cors_wildcard(self):
        assert Settings(CORS_ALLOWED_ORIGINS="*").cors_origins() == ["*"]

    def test_cors_list(self):
        settings = Settings(CORS_ALLOWED_ORIGINS="https://a.app, https://b.app,")
        assert settings.cors_origins() == ["https://a.app", "https://b.app"]

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PRESERVE_MANUAL_EDITS", "true")
        monkeypatch.setenv("SEGMENT_SECONDS", "10")
        settings = Settings()
        assert settings.PRESERVE_MANUAL_EDITS is True
        assert settings.SEGMENT_SECONDS == 10

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestStructlog:
    def test_configure_structlog_runs(self):
        configure_structlog()


class TestProcessingMetrics:
    def test_success_is_counted(self):
        before = _sample("processing_runs_total", {"status": "success"})
        with track_processing_run():
            pass
        assert _sample("processing_runs_total", {"status": "success"}) == before + 1

    def test_error_is_counted_and_reraised(self):
        before = _sample("processing_runs_total", {"status": "error"})
        with pytest.raises(RuntimeError):
            with track_processing_run():
                raise RuntimeError("boom")
        assert _sample("processing_runs_total", {"status": "error"}) == before + 1
