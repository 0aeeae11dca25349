"""Tests for configuration loading."""

import logging

import pytest

from code_hints.config import AnalyzerConfig, parse_bool
from code_hints.models import AnalysisOptions

ENV_VARS = (
    "CODE_HINTS_MAX_UNIT_SIZE",
    "CODE_HINTS_COMPLEXITY",
    "CODE_HINTS_PERFORMANCE",
    "CODE_HINTS_SECURITY",
    "CODE_HINTS_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAnalyzerConfig:
    def test_defaults(self):
        config = AnalyzerConfig()

        assert config.max_unit_size == 10_000
        assert config.options == AnalysisOptions()
        assert config.logging_level == logging.WARNING

    def test_log_level_is_normalised(self):
        assert AnalyzerConfig(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("size", [0, -1])
    def test_rejects_non_positive_size(self, size):
        with pytest.raises(ValueError, match="max_unit_size"):
            AnalyzerConfig(max_unit_size=size)

    def test_rejects_unknown_log_level(self):
        with pytest.raises(ValueError, match="log_level"):
            AnalyzerConfig(log_level="chatty")


class TestFromEnv:
    def test_defaults_without_environment(self, clean_env):
        assert AnalyzerConfig.from_env() == AnalyzerConfig()

    def test_reads_environment(self, clean_env):
        clean_env.setenv("CODE_HINTS_MAX_UNIT_SIZE", "500")
        clean_env.setenv("CODE_HINTS_SECURITY", "off")
        clean_env.setenv("CODE_HINTS_LOG_LEVEL", "info")

        config = AnalyzerConfig.from_env()

        assert config.max_unit_size == 500
        assert config.options == AnalysisOptions(complexity=True, performance=True, security=False)
        assert config.logging_level == logging.INFO

    def test_invalid_size(self, clean_env):
        clean_env.setenv("CODE_HINTS_MAX_UNIT_SIZE", "lots")
        with pytest.raises(ValueError, match="CODE_HINTS_MAX_UNIT_SIZE"):
            AnalyzerConfig.from_env()

    def test_invalid_toggle(self, clean_env):
        clean_env.setenv("CODE_HINTS_PERFORMANCE", "maybe")
        with pytest.raises(ValueError, match="CODE_HINTS_PERFORMANCE"):
            AnalyzerConfig.from_env()


class TestParseBool:
    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_true_values(self, value):
        assert parse_bool(value, "X") is True

    @pytest.mark.parametrize("value", ["0", "False", "no", "off"])
    def test_false_values(self, value):
        assert parse_bool(value, "X") is False
