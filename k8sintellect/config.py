"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from k8sintellect.models.config import (
    AnalysisConfig,
    AnalyzerConfig,
    APIConfig,
    CollectorConfig,
    EnhancementConfig,
    K8sIntellectConfig,
    LogConfig,
)

_MIB = 1024 * 1024


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"K8SINTELLECT_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_time_window(value: str) -> str:
    if not re.match(r"^[0-9]+(m|h|d)$", value):
        raise ValueError(f"Invalid time window format: {value}")
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> K8sIntellectConfig:
    """Load configuration from K8SINTELLECT_* environment variables."""
    return K8sIntellectConfig(
        cluster_name=_env("CLUSTER_NAME", ""),
        kube_context=_env("KUBE_CONTEXT", ""),
        analyzer=AnalyzerConfig(
            binary=_env("ANALYZER_BINARY", "k8sgpt") or "k8sgpt",
            timeout_seconds=_env_int("ANALYZER_TIMEOUT", 300, min_val=10, max_val=3600),
            max_output_bytes=_env_int("ANALYZER_MAX_OUTPUT_MB", 10, min_val=10, max_val=512) * _MIB,
        ),
        collectors=CollectorConfig(
            enabled=_env_bool("DIRECT_COLLECTORS_ENABLED", False),
            event_window=_validate_time_window(_env("EVENT_WINDOW", "1h")),
            restart_threshold=_env_int("RESTART_THRESHOLD", 5, min_val=1, max_val=1000),
        ),
        analysis=AnalysisConfig(
            continue_on_error=_env_bool("CONTINUE_ON_ERROR", False),
            max_concurrency=_env_int("MAX_CONCURRENCY", 4, min_val=1, max_val=32),
        ),
        enhancement=EnhancementConfig(
            anonymous_mode=_env_bool("ANONYMOUS_MODE", True),
            ai_provider=_env("AI_PROVIDER", ""),
            ai_model=_env("AI_MODEL", ""),
        ),
        api=APIConfig(
            host=_env("API_HOST", "localhost"),
            port=_env_int("API_PORT", 3000, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
