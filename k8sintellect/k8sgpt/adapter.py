"""k8sgpt subprocess adapter.

Runs ``k8sgpt analyze --output=json`` once per namespace scope and turns its
output into Issues. Arguments are always passed as a discrete argv list;
the space-joined command string exists only as an audit record.
"""

from __future__ import annotations

import asyncio
import json
import os
import re
import signal
import time
from dataclasses import dataclass, field

from k8sintellect.analysis.normalizer import normalize_findings, parse_findings
from k8sintellect.models.config import AnalyzerConfig
from k8sintellect.models.issues import Issue
from k8sintellect.observability.logging import get_logger
from k8sintellect.observability.metrics import analyzer_duration_seconds, analyzer_invocations_total

_log = get_logger("k8sgpt.adapter")

INSTALL_URL = "https://github.com/k8sgpt-ai/k8sgpt"

_PROBE_TIMEOUT_SECONDS = 10
_PROBE_MAX_OUTPUT_BYTES = 1024 * 1024
_READ_CHUNK = 64 * 1024
_STDERR_EXCERPT = 500
_REAP_TIMEOUT_SECONDS = 5

_RE_VERSION = re.compile(r"k8sgpt:\s+([\d.]+)")
_RE_ACTIVE_BACKEND = re.compile(r">\s*(\w+)")


class AnalyzerError(Exception):
    """Base class for failures of a single k8sgpt invocation.

    ``namespace`` is None when the invocation covered all namespaces.
    """

    def __init__(self, message: str, *, namespace: str | None, command: str) -> None:
        super().__init__(message)
        self.namespace = namespace
        self.command = command

    @property
    def scope_label(self) -> str:
        return scope_label(self.namespace)


class ToolMissingError(AnalyzerError):
    """The k8sgpt executable could not be found."""


class ToolExecutionError(AnalyzerError):
    """k8sgpt ran but exited non-zero, timed out or produced unusable output."""

    def __init__(
        self,
        message: str,
        *,
        namespace: str | None,
        command: str,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message, namespace=namespace, command=command)
        self.returncode = returncode
        self.stderr = stderr


class _OutputOverflowError(Exception):
    pass


def scope_label(namespace: str | None) -> str:
    return f"namespace '{namespace}'" if namespace else "all namespaces"


@dataclass(frozen=True)
class AnalyzerRun:
    """Issues and audit command of one successful k8sgpt invocation."""

    namespace: str | None
    command: str
    issues: list[Issue] = field(default_factory=list)


class K8sGPTAdapter:
    """Invokes the k8sgpt CLI as a child process.

    Stateless between calls: concurrent ``run_analysis`` calls each own
    their child process.
    """

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        self._config = config or AnalyzerConfig()

    @property
    def binary(self) -> str:
        return self._config.binary

    def build_args(self, filters: list[str] | tuple[str, ...], namespace: str | None) -> list[str]:
        """Deterministic argv (without the executable) for one analysis run."""
        args = ["analyze", "--output=json"]
        if filters:
            args.append(f"--filter={','.join(filters)}")
        if namespace:
            args.append(f"--namespace={namespace}")
        return args

    def format_command(self, args: list[str]) -> str:
        return " ".join([self.binary, *args])

    async def run_analysis(
        self,
        namespace: str | None,
        filters: list[str] | tuple[str, ...],
    ) -> AnalyzerRun:
        """Run one k8sgpt analysis for *namespace* (None = all namespaces).

        Raises:
            ToolMissingError:   k8sgpt is not installed / not on PATH.
            ToolExecutionError: non-zero exit, timeout, output overflow or
                                output that is not valid JSON.
        """
        args = self.build_args(filters, namespace)
        command = self.format_command(args)
        scope = scope_label(namespace)
        _log.debug("k8sgpt_run_started", command=command, scope=scope)

        t_start = time.monotonic()
        try:
            returncode, stdout, stderr = await self._execute(
                args,
                timeout=self._config.timeout_seconds,
                max_output_bytes=self._config.max_output_bytes,
            )
        except FileNotFoundError as exc:
            analyzer_invocations_total.labels(outcome="missing").inc()
            _log.error("k8sgpt_not_installed", binary=self.binary, install_url=INSTALL_URL)
            raise ToolMissingError(
                f"k8sgpt is not installed (executable '{self.binary}' not found). "
                f"Install it from {INSTALL_URL} to use this tool.",
                namespace=namespace,
                command=command,
            ) from exc
        except TimeoutError as exc:
            analyzer_invocations_total.labels(outcome="timeout").inc()
            raise ToolExecutionError(
                f"k8sgpt analysis for {scope} timed out after {self._config.timeout_seconds}s",
                namespace=namespace,
                command=command,
            ) from exc
        except _OutputOverflowError as exc:
            analyzer_invocations_total.labels(outcome="overflow").inc()
            raise ToolExecutionError(
                f"k8sgpt analysis for {scope} exceeded the {self._config.max_output_bytes} byte output limit",
                namespace=namespace,
                command=command,
            ) from exc
        except OSError as exc:
            analyzer_invocations_total.labels(outcome="failed").inc()
            raise ToolExecutionError(
                f"k8sgpt analysis for {scope} could not be started: {exc}",
                namespace=namespace,
                command=command,
            ) from exc
        finally:
            analyzer_duration_seconds.observe(time.monotonic() - t_start)

        stderr_text = stderr.decode("utf-8", errors="replace").strip()
        if stderr_text:
            _log.debug("k8sgpt_stderr", scope=scope, stderr=stderr_text[:_STDERR_EXCERPT])

        if returncode != 0:
            analyzer_invocations_total.labels(outcome="failed").inc()
            raise ToolExecutionError(
                f"k8sgpt analysis for {scope} exited with status {returncode}"
                + (f": {stderr_text[:_STDERR_EXCERPT]}" if stderr_text else ""),
                namespace=namespace,
                command=command,
                returncode=returncode,
                stderr=stderr_text[:_STDERR_EXCERPT],
            )

        try:
            payload = json.loads(stdout)
        except ValueError as exc:
            analyzer_invocations_total.labels(outcome="unparseable").inc()
            raise ToolExecutionError(
                f"k8sgpt analysis for {scope} returned output that is not valid JSON: {exc}",
                namespace=namespace,
                command=command,
                returncode=returncode,
                stderr=stderr_text[:_STDERR_EXCERPT],
            ) from exc

        issues = normalize_findings(parse_findings(payload))
        analyzer_invocations_total.labels(outcome="success").inc()
        _log.info("k8sgpt_run_completed", command=command, scope=scope, issues=len(issues))
        return AnalyzerRun(namespace=namespace, command=command, issues=issues)

    async def get_version(self) -> str:
        """Return the installed k8sgpt version, or ``unknown``."""
        try:
            returncode, stdout, _ = await self._execute(
                ["version"],
                timeout=_PROBE_TIMEOUT_SECONDS,
                max_output_bytes=_PROBE_MAX_OUTPUT_BYTES,
            )
        except Exception as exc:  # noqa: BLE001
            _log.debug("k8sgpt_version_unavailable", error=str(exc))
            return "unknown"
        match = _RE_VERSION.search(stdout.decode("utf-8", errors="replace"))
        if returncode != 0 or match is None:
            return "unknown"
        return match.group(1)

    async def get_backend_info(self) -> dict[str, str]:
        """Return the active k8sgpt AI backend (``localai`` when none is configured)."""
        default = {"provider": "localai"}
        try:
            returncode, stdout, _ = await self._execute(
                ["auth", "list"],
                timeout=_PROBE_TIMEOUT_SECONDS,
                max_output_bytes=_PROBE_MAX_OUTPUT_BYTES,
            )
        except Exception as exc:  # noqa: BLE001
            _log.debug("k8sgpt_backend_unavailable", error=str(exc))
            return default
        if returncode != 0:
            return default
        for line in stdout.decode("utf-8", errors="replace").splitlines():
            if "Active:" in line or "Default:" in line or ">" in line:
                match = _RE_ACTIVE_BACKEND.search(line)
                if match:
                    return {"provider": match.group(1)}
        return default

    async def _execute(
        self,
        args: list[str],
        *,
        timeout: float | None,
        max_output_bytes: int,
    ) -> tuple[int, bytes, bytes]:
        """Run the executable and collect bounded stdout/stderr.

        The child runs in its own session; it and everything it spawned are
        killed and reaped on timeout, overflow or cancellation.
        """
        proc = await asyncio.create_subprocess_exec(
            self.binary,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
        readers = [
            asyncio.ensure_future(_read_bounded(proc.stdout, max_output_bytes)),
            asyncio.ensure_future(_read_bounded(proc.stderr, max_output_bytes)),
        ]
        try:
            async with asyncio.timeout(timeout):
                stdout, stderr = await asyncio.gather(*readers)
                returncode = await proc.wait()
        except BaseException:
            for reader in readers:
                reader.cancel()
            await _terminate(proc)
            raise
        return returncode, stdout, stderr


async def _read_bounded(stream: asyncio.StreamReader | None, limit: int) -> bytes:
    if stream is None:
        return b""
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            return b"".join(chunks)
        total += len(chunk)
        if total > limit:
            raise _OutputOverflowError(f"output exceeded {limit} bytes")
        chunks.append(chunk)


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill the child's whole process group and reap it within a grace period.

    Helpers spawned by the executable share its session and may hold the
    output pipes open; ``Process.wait`` only returns once every pipe closes.
    """
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    try:
        await asyncio.wait_for(proc.wait(), _REAP_TIMEOUT_SECONDS)
    except TimeoutError:
        _log.warning("k8sgpt_child_not_reaped", pid=proc.pid)
        transport = getattr(proc, "_transport", None)
        if transport is not None:
            transport.close()
