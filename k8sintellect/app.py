"""Application bootstrap for k8sintellect.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config -> logging -> cluster connection -> k8sgpt adapter
              -> collectors -> coordinator -> REST

Shutdown stops the REST server first; every stop step is caught and logged
independently so a single failure does not prevent a clean exit.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from k8sintellect.analyst.coordinator import AnalysisCoordinator
from k8sintellect.analyst.enhancer import IssueEnhancer
from k8sintellect.cluster.connection import ClusterConnection
from k8sintellect.collector import build_collector_suite
from k8sintellect.config import load_config
from k8sintellect.k8sgpt.adapter import K8sGPTAdapter
from k8sintellect.models.config import K8sIntellectConfig
from k8sintellect.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


async def build_coordinator(config: K8sIntellectConfig) -> tuple[AnalysisCoordinator, K8sGPTAdapter]:
    """Load the cluster connection once and wire a coordinator around it.

    Shared by the ``serve`` bootstrap and the one-shot ``analyze`` command.
    """
    connection = await ClusterConnection.load(
        context=config.kube_context,
        cluster_name=config.cluster_name,
    )
    adapter = K8sGPTAdapter(config.analyzer)
    coordinator = AnalysisCoordinator(
        adapter=adapter,
        connection=connection,
        config=config,
        collectors=build_collector_suite(
            config.collectors,
            max_concurrency=config.analysis.max_concurrency,
        ),
        enhancer=IssueEnhancer(config.enhancement),
    )
    return coordinator, adapter


class K8sIntellectApp:
    """Application root for ``k8sintellect serve``.

    ``stop()`` is safe to call on an app that was never started or that
    has already stopped.
    """

    def __init__(self, config: K8sIntellectConfig | None = None) -> None:
        self.config = config
        self._coordinator: AnalysisCoordinator | None = None
        self._adapter: K8sGPTAdapter | None = None
        self._rest_server: object | None = None
        self._background_tasks: list[asyncio.Task[None]] = []
        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        # --- 1. Configuration -------------------------------------------
        if self.config is None:
            self.config = load_config()

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level, fmt="json")
        self._log = get_logger("app")
        self._log.info("k8sintellect starting", version=_k8sintellect_version())

        # --- 3. Cluster connection, adapter, coordinator ----------------
        await self._start_coordinator()

        # --- 4. REST API ------------------------------------------------
        await self._start_rest()

        self._running = True
        self._log.info(
            "k8sintellect started",
            host=self.config.api.host,
            port=self.config.api.port,
        )

    async def _start_coordinator(self) -> None:
        assert self._log is not None
        assert self.config is not None
        self._log.debug("starting analysis coordinator")
        try:
            self._coordinator, self._adapter = await build_coordinator(self.config)
            self._log.info(
                "analysis coordinator started",
                cluster=self._coordinator.cluster_info().display_name,
                direct_collectors=self.config.collectors.enabled,
            )
        except Exception as exc:
            raise _ComponentError("coordinator", exc) from exc

    async def _start_rest(self) -> None:
        """Start the uvicorn REST server."""
        assert self._log is not None
        assert self.config is not None
        assert self._coordinator is not None
        self._log.debug("starting rest api")
        try:
            import uvicorn

            from k8sintellect.api import build_app

            fastapi_app = build_app(
                coordinator=self._coordinator,
                adapter=self._adapter,
                config=self.config,
            )
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host=self.config.api.host,
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop the REST server and background tasks."""
        if not self._running and self._log is None:
            return

        log = self._log or get_logger("app")
        log.info("k8sintellect shutting down")
        self._running = False

        if self._rest_server is not None:
            self._rest_server.should_exit = True  # type: ignore[attr-defined]

        pending = [task for task in self._background_tasks if not task.done()]
        if pending:
            _, still_running = await asyncio.wait(pending, timeout=_SHUTDOWN_GRACE_SECONDS)
            for task in still_running:
                log.warning("background task did not stop in time", task=task.get_name())
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        self._background_tasks.clear()
        self._rest_server = None
        self._coordinator = None
        self._adapter = None

        log.info("k8sintellect stopped")


def _k8sintellect_version() -> str:
    from k8sintellect import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: K8sIntellectConfig | None = None) -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = K8sIntellectApp(config)
    loop = asyncio.get_running_loop()

    shutdown_triggered = False

    def _request_shutdown() -> None:
        nonlocal shutdown_triggered
        if shutdown_triggered:
            return
        shutdown_triggered = True
        asyncio.create_task(app.stop(), name="shutdown")

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        while app.running:
            await asyncio.sleep(1)
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        if app.running:
            await app.stop()
