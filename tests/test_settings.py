"""Tests for environment-driven settings."""

import logging
from pathlib import Path

import pytest

from src.config.settings import DEFAULT_LOG_FILE, DEFAULT_LOG_LEVEL, DEFAULT_MAX_ARTIFACTS, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TIMELINE_QUALITY_HEURISTICS", "TIMELINE_QUALITY_MAX_ARTIFACTS", "TIMELINE_QUALITY_LOG_LEVEL",
                 "TIMELINE_QUALITY_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)


class TestGetSettings:
    def test_defaults(self):
        settings = get_settings()
        assert settings.heuristics_path is None
        assert settings.max_artifacts == DEFAULT_MAX_ARTIFACTS
        assert settings.log_level == DEFAULT_LOG_LEVEL

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("TIMELINE_QUALITY_HEURISTICS", "config/custom.yaml")
        monkeypatch.setenv("TIMELINE_QUALITY_MAX_ARTIFACTS", "50")
        monkeypatch.setenv("TIMELINE_QUALITY_LOG_LEVEL", "debug")

        settings = get_settings()
        assert settings.heuristics_path == Path("config/custom.yaml")
        assert settings.max_artifacts == 50
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("raw", ["lots", "0", "-3"])
    def test_invalid_max_artifacts_falls_back(self, monkeypatch, caplog, raw):
        monkeypatch.setenv("TIMELINE_QUALITY_MAX_ARTIFACTS", raw)
        with caplog.at_level(logging.WARNING):
            settings = get_settings()
        assert settings.max_artifacts == DEFAULT_MAX_ARTIFACTS
        assert "TIMELINE_QUALITY_MAX_ARTIFACTS" in caplog.text

    def test_blank_values_ignored(self, monkeypatch):
        monkeypatch.setenv("TIMELINE_QUALITY_HEURISTICS", "   ")
        monkeypatch.setenv("TIMELINE_QUALITY_MAX_ARTIFACTS", "")
        settings = get_settings()
        assert settings.heuristics_path is None
        assert settings.max_artifacts == DEFAULT_MAX_ARTIFACTS

    def test_log_file_default_override_and_off(self, monkeypatch):
        assert get_settings().log_file == DEFAULT_LOG_FILE

        monkeypatch.setenv("TIMELINE_QUALITY_LOG_FILE", "/tmp/tq.log")
        assert get_settings().log_file == Path("/tmp/tq.log")

        monkeypatch.setenv("TIMELINE_QUALITY_LOG_FILE", "None")
        assert get_settings().log_file is None
