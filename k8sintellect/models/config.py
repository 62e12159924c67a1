"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

_MIB = 1024 * 1024


@dataclass
class AnalyzerConfig:
    """k8sgpt subprocess configuration."""

    binary: str = "k8sgpt"
    timeout_seconds: float = 300
    max_output_bytes: int = 10 * _MIB


@dataclass
class CollectorConfig:
    """Direct observation collector configuration."""

    enabled: bool = False
    event_window: str = "1h"
    restart_threshold: int = 5

    @property
    def event_window_delta(self) -> timedelta:
        return parse_time_window(self.event_window)


@dataclass
class AnalysisConfig:
    """Aggregation orchestrator policy."""

    continue_on_error: bool = False
    max_concurrency: int = 4


@dataclass
class EnhancementConfig:
    """Gate for the optional non-local enhancement step."""

    anonymous_mode: bool = True
    ai_provider: str = ""
    ai_model: str = ""


@dataclass
class APIConfig:
    """REST API configuration."""

    host: str = "localhost"
    port: int = 3000


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class K8sIntellectConfig:
    """Top-level k8sintellect configuration."""

    cluster_name: str = ""
    kube_context: str = ""
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    collectors: CollectorConfig = field(default_factory=CollectorConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    enhancement: EnhancementConfig = field(default_factory=EnhancementConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)


_WINDOW_UNITS = {"m": "minutes", "h": "hours", "d": "days"}


def parse_time_window(value: str) -> timedelta:
    """Convert ``30m`` / ``1h`` / ``2d`` into a timedelta."""
    unit = _WINDOW_UNITS.get(value[-1:]) if value else None
    if unit is None or not value[:-1].isdigit():
        raise ValueError(f"Invalid time window format: {value}")
    return timedelta(**{unit: int(value[:-1])})
