"""Gate for the optional non-local issue enhancement step.

In anonymous mode (the default) no cluster data leaves the process and
issues pass through untouched. No external enhancement backend exists yet,
so a disabled anonymous mode only logs that the step was skipped.
"""

from __future__ import annotations

from k8sintellect.models.config import EnhancementConfig
from k8sintellect.models.issues import Issue
from k8sintellect.observability.logging import get_logger

_log = get_logger("analyst.enhancer")


class IssueEnhancer:
    def __init__(self, config: EnhancementConfig | None = None) -> None:
        self._config = config or EnhancementConfig()
        if self._config.anonymous_mode:
            _log.info("anonymous mode enabled; no data is sent to external services")
        else:
            _log.warning("anonymous mode disabled; external AI services may be used")

    @property
    def anonymous_mode(self) -> bool:
        return self._config.anonymous_mode

    async def enhance(self, issues: list[Issue]) -> list[Issue]:
        if self.anonymous_mode:
            return issues
        if self._config.ai_provider:
            _log.warning(
                "external_enhancement_unavailable",
                provider=self._config.ai_provider,
                model=self._config.ai_model or None,
                issues=len(issues),
            )
        return issues
