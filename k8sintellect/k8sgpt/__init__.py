"""k8sgpt integration.

Exposes:
    K8sGPTAdapter      -- subprocess invoker for ``k8sgpt analyze``.
    AnalyzerRun        -- issues + audit command of one invocation.
    AnalyzerError      -- base for per-scope invocation failures.
    ToolMissingError   -- k8sgpt executable not found.
    ToolExecutionError -- k8sgpt failed for one namespace scope.
"""

from k8sintellect.k8sgpt.adapter import (
    AnalyzerError,
    AnalyzerRun,
    K8sGPTAdapter,
    ToolExecutionError,
    ToolMissingError,
)
from k8sintellect.k8sgpt.filters import AVAILABLE_FILTERS

__all__ = [
    "AVAILABLE_FILTERS",
    "AnalyzerError",
    "AnalyzerRun",
    "K8sGPTAdapter",
    "ToolExecutionError",
    "ToolMissingError",
]
