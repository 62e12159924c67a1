"""Tests for environment-driven configuration loading."""

from __future__ import annotations

import os
from datetime import timedelta

import pytest

from k8sintellect.config import load_config
from k8sintellect.models.config import parse_time_window

_MIB = 1024 * 1024


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("K8SINTELLECT_"):
            monkeypatch.delenv(key)


class TestDefaults:
    def test_defaults(self) -> None:
        config = load_config()
        assert config.cluster_name == ""
        assert config.kube_context == ""
        assert config.analyzer.binary == "k8sgpt"
        assert config.analyzer.timeout_seconds == 300
        assert config.analyzer.max_output_bytes == 10 * _MIB
        assert config.collectors.enabled is False
        assert config.collectors.event_window == "1h"
        assert config.collectors.restart_threshold == 5
        assert config.analysis.continue_on_error is False
        assert config.analysis.max_concurrency == 4
        assert config.enhancement.anonymous_mode is True
        assert config.api.host == "localhost"
        assert config.api.port == 3000
        assert config.log.level == "info"


class TestOverrides:
    def test_values_read_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("K8SINTELLECT_CLUSTER_NAME", "prod-eu")
        monkeypatch.setenv("K8SINTELLECT_KUBE_CONTEXT", "admin@prod-eu")
        monkeypatch.setenv("K8SINTELLECT_ANALYZER_BINARY", "/usr/local/bin/k8sgpt")
        monkeypatch.setenv("K8SINTELLECT_DIRECT_COLLECTORS_ENABLED", "yes")
        monkeypatch.setenv("K8SINTELLECT_EVENT_WINDOW", "30m")
        monkeypatch.setenv("K8SINTELLECT_CONTINUE_ON_ERROR", "1")
        monkeypatch.setenv("K8SINTELLECT_ANONYMOUS_MODE", "false")
        monkeypatch.setenv("K8SINTELLECT_AI_PROVIDER", "openai")
        monkeypatch.setenv("K8SINTELLECT_LOG_LEVEL", "DEBUG")

        config = load_config()
        assert config.cluster_name == "prod-eu"
        assert config.kube_context == "admin@prod-eu"
        assert config.analyzer.binary == "/usr/local/bin/k8sgpt"
        assert config.collectors.enabled is True
        assert config.collectors.event_window_delta == timedelta(minutes=30)
        assert config.analysis.continue_on_error is True
        assert config.enhancement.anonymous_mode is False
        assert config.enhancement.ai_provider == "openai"
        assert config.log.level == "debug"

    def test_empty_binary_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("K8SINTELLECT_ANALYZER_BINARY", "")
        assert load_config().analyzer.binary == "k8sgpt"

    @pytest.mark.parametrize(
        ("key", "raw", "attr", "expected"),
        [
            ("ANALYZER_TIMEOUT", "1", ("analyzer", "timeout_seconds"), 10),
            ("ANALYZER_TIMEOUT", "99999", ("analyzer", "timeout_seconds"), 3600),
            ("ANALYZER_MAX_OUTPUT_MB", "2048", ("analyzer", "max_output_bytes"), 512 * _MIB),
            ("MAX_CONCURRENCY", "0", ("analysis", "max_concurrency"), 1),
            ("MAX_CONCURRENCY", "500", ("analysis", "max_concurrency"), 32),
            ("API_PORT", "80", ("api", "port"), 1024),
        ],
    )
    def test_clamping(
        self,
        monkeypatch: pytest.MonkeyPatch,
        key: str,
        raw: str,
        attr: tuple[str, str],
        expected: int,
    ) -> None:
        monkeypatch.setenv(f"K8SINTELLECT_{key}", raw)
        section = getattr(load_config(), attr[0])
        assert getattr(section, attr[1]) == expected


class TestValidation:
    @pytest.mark.parametrize("window", ["1", "h", "1w", "-1h", "1.5h", "one hour"])
    def test_invalid_event_window(self, monkeypatch: pytest.MonkeyPatch, window: str) -> None:
        monkeypatch.setenv("K8SINTELLECT_EVENT_WINDOW", window)
        with pytest.raises(ValueError, match="Invalid time window"):
            load_config()

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("K8SINTELLECT_LOG_LEVEL", "verbose")
        with pytest.raises(ValueError, match="Invalid log level"):
            load_config()

    def test_non_integer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("K8SINTELLECT_MAX_CONCURRENCY", "many")
        with pytest.raises(ValueError):
            load_config()


class TestParseTimeWindow:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("30m", timedelta(minutes=30)),
            ("1h", timedelta(hours=1)),
            ("2d", timedelta(days=2)),
        ],
    )
    def test_valid(self, value: str, expected: timedelta) -> None:
        assert parse_time_window(value) == expected

    @pytest.mark.parametrize("value", ["", "m", "10", "10s"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_time_window(value)
