"""Analysis coordinator -- top-level entry point for one aggregation run.

Resolves the scope into an execution plan, fans out one k8sgpt invocation
per planned namespace (plus the optional direct collectors), and assembles
an AnalysisResult whose ordering never depends on completion order:
issues and commands always follow the plan.

Failure policy for k8sgpt invocations:
    continue_on_error=False -- the first AnalyzerError aborts the run;
                               in-flight siblings are cancelled (child
                               processes killed) and the error re-raised.
    continue_on_error=True  -- failed scopes are recorded in ``errors``
                               (their audit command is still listed) and the
                               run continues with the remaining scopes.
Direct collectors never fail the run.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, TypeVar

from k8sintellect.analysis.recommendations import build_recommendations
from k8sintellect.analyst.enhancer import IssueEnhancer
from k8sintellect.cluster.client import ClusterReader
from k8sintellect.collector import CollectorSuite
from k8sintellect.k8sgpt.adapter import AnalyzerError, AnalyzerRun, K8sGPTAdapter
from k8sintellect.k8sgpt.filters import AVAILABLE_FILTERS
from k8sintellect.models.cluster import ClusterInfo
from k8sintellect.models.config import K8sIntellectConfig
from k8sintellect.models.issues import AnalysisResult, AnalysisScope, Issue, Summary
from k8sintellect.observability.logging import get_logger
from k8sintellect.observability.metrics import analysis_runs_total, issues_reported_total

_log = get_logger("analyst.coordinator")

T = TypeVar("T")


class AnalysisTimeoutError(Exception):
    """The caller-supplied deadline expired; partial results were discarded."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Analysis did not complete within {timeout:g}s")
        self.timeout = timeout


class _ConnectionProto(Protocol):
    @property
    def info(self) -> ClusterInfo: ...

    def client(self) -> AbstractAsyncContextManager[ClusterReader]: ...


@dataclass
class _ExternalOutcome:
    issues: list[Issue] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class AnalysisCoordinator:
    """Orchestrates k8sgpt runs and direct collectors for one request at a time.

    Holds no per-request state: concurrent ``analyze`` calls are independent.
    """

    def __init__(
        self,
        adapter: K8sGPTAdapter,
        connection: _ConnectionProto,
        config: K8sIntellectConfig | None = None,
        collectors: CollectorSuite | None = None,
        enhancer: IssueEnhancer | None = None,
    ) -> None:
        self._adapter = adapter
        self._connection = connection
        self._config = config or K8sIntellectConfig()
        self._collectors = collectors
        self._enhancer = enhancer or IssueEnhancer(self._config.enhancement)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def cluster_info(self) -> ClusterInfo:
        return self._connection.info

    async def list_namespaces(self) -> list[str]:
        async with self._connection.client() as client:
            return await client.list_namespaces()

    def resolve_filters(self, scope: AnalysisScope) -> tuple[str, ...]:
        """Requested filters, or every supported kind when none were given."""
        if not scope.filters:
            return AVAILABLE_FILTERS
        unknown = [f for f in scope.filters if f not in AVAILABLE_FILTERS]
        if unknown:
            _log.warning("unknown_filters_requested", filters=unknown)
        return scope.filters

    async def analyze(
        self,
        scope: AnalysisScope,
        *,
        run_external: bool = True,
        run_direct: bool | None = None,
        timeout: float | None = None,
    ) -> AnalysisResult:
        """Run one aggregation.

        Args:
            scope:        Namespaces / all-namespaces flag / kind filters.
            run_external: Invoke k8sgpt (default True).
            run_direct:   Run the direct collectors; None uses configuration.
            timeout:      Overall deadline in seconds; None means no deadline.

        Raises:
            ToolMissingError / ToolExecutionError: k8sgpt failed for a scope
                and the policy is to abort.
            AnalysisTimeoutError: *timeout* expired.
        """
        t_start = time.monotonic()
        try:
            async with asyncio.timeout(timeout):
                result = await self._analyze(scope, run_external, run_direct)
        except TimeoutError as exc:
            analysis_runs_total.labels(outcome="timeout").inc()
            _log.error("analysis_timed_out", timeout=timeout)
            raise AnalysisTimeoutError(timeout or 0.0) from exc
        except AnalyzerError as exc:
            analysis_runs_total.labels(outcome="failed").inc()
            _log.error(
                "analysis_failed",
                scope=exc.scope_label,
                command=exc.command,
                error=str(exc),
            )
            raise

        analysis_runs_total.labels(outcome="partial" if result.errors else "success").inc()
        for issue in result.issues:
            issues_reported_total.labels(severity=issue.severity.value).inc()
        _log.info(
            "analysis_completed",
            cluster=result.cluster,
            issues=result.summary.total,
            critical=result.summary.critical,
            commands=len(result.commands),
            errors=len(result.errors),
            duration_ms=int((time.monotonic() - t_start) * 1000),
        )
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _analyze(
        self,
        scope: AnalysisScope,
        run_external: bool,
        run_direct: bool | None,
    ) -> AnalysisResult:
        filters = self.resolve_filters(scope)
        cluster = self.cluster_info().display_name
        plan = scope.execution_plan()
        direct = self._config.collectors.enabled if run_direct is None else run_direct

        _log.info(
            "analysis_started",
            cluster=cluster,
            targets=[t or "*" for t in plan],
            filters=len(filters),
            external=run_external,
            direct=direct,
        )

        external_stage: Awaitable[_ExternalOutcome] = (
            self._run_external(plan, filters) if run_external else _resolved(_ExternalOutcome())
        )
        direct_stage: Awaitable[list[Issue]] = (
            self._run_direct(plan, filters) if direct else _resolved([])
        )
        external, direct_issues = await _gather_in_order([external_stage, direct_stage])

        issues = [*external.issues, *direct_issues]
        issues = await self._enhancer.enhance(issues)

        return AnalysisResult(
            cluster=cluster,
            issues=tuple(issues),
            summary=Summary.from_issues(issues),
            commands=tuple(external.commands),
            errors=tuple(external.errors),
            recommendations=tuple(build_recommendations(issues)),
            timestamp=_utc_timestamp(),
        )

    async def _run_external(
        self,
        plan: list[str | None],
        filters: tuple[str, ...],
    ) -> _ExternalOutcome:
        semaphore = asyncio.Semaphore(self._config.analysis.max_concurrency)

        async def _one(namespace: str | None) -> AnalyzerRun:
            async with semaphore:
                return await self._adapter.run_analysis(namespace, filters)

        outcome = _ExternalOutcome()
        if not self._config.analysis.continue_on_error:
            runs = await _gather_in_order([_one(ns) for ns in plan])
            for run in runs:
                outcome.issues.extend(run.issues)
                outcome.commands.append(run.command)
            return outcome

        results = await asyncio.gather(*(_one(ns) for ns in plan), return_exceptions=True)
        for result in results:
            if isinstance(result, AnalyzerError):
                _log.warning("analyzer_scope_failed", scope=result.scope_label, error=str(result))
                outcome.commands.append(result.command)
                outcome.errors.append(str(result))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcome.issues.extend(result.issues)
                outcome.commands.append(result.command)
        return outcome

    async def _run_direct(
        self,
        plan: list[str | None],
        filters: tuple[str, ...],
    ) -> list[Issue]:
        if self._collectors is None:
            _log.debug("direct_collectors_not_configured")
            return []
        try:
            async with self._connection.client() as client:
                return await self._collectors.collect(client, plan, filters)
        except Exception as exc:  # noqa: BLE001
            _log.error("direct_collection_unavailable", error=str(exc))
            return []


async def _resolved(value: T) -> T:
    return value


async def _gather_in_order(aws: list[Awaitable[T]]) -> list[T]:
    """Await all, preserving input order; on any failure cancel the rest.

    Also covers cancellation of the caller: every child task is cancelled
    and awaited before the exception propagates.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _utc_timestamp() -> str:
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
