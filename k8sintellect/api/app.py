"""FastAPI application factory for k8sintellect.

Usage::

    from k8sintellect.api.app import create_app

    app = create_app(
        coordinator=coordinator,
        adapter=adapter,
        config=config,
    )

The factory is designed for use by both the production bootstrap
(``k8sintellect.app``) and unit tests.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from k8sintellect.analyst.coordinator import AnalysisTimeoutError
from k8sintellect.api.routes import router
from k8sintellect.api.schemas import ErrorResponse
from k8sintellect.k8sgpt.adapter import ToolExecutionError, ToolMissingError
from k8sintellect.models.config import K8sIntellectConfig

_log = structlog.get_logger(component="api.app")


def create_app(
    coordinator: Any,
    adapter: Any,
    config: K8sIntellectConfig | None = None,
) -> FastAPI:
    """Create and configure the k8sintellect FastAPI application.

    Args:
        coordinator: AnalysisCoordinator instance.
        adapter:     K8sGPTAdapter, used for the version/backend status probes.
        config:      K8sIntellectConfig. Defaults are used when omitted.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from k8sintellect import __version__

    app = FastAPI(
        title="k8sintellect",
        summary="Kubernetes cluster issue analysis powered by k8sgpt",
        version=__version__,
        description=(
            "k8sintellect aggregates k8sgpt findings and direct cluster "
            "observations into one deduplicated, severity-ranked issue list."
        ),
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Dependencies live in app.state so route handlers can reach them
    # without module-level globals.
    app.state.coordinator = coordinator
    app.state.adapter = adapter
    app.state.config = config or K8sIntellectConfig()

    app.include_router(router)

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = exc.errors()
        detail = ""
        if errors:
            locs = errors[0].get("loc", ())
            field = str(locs[-1]) if locs else ""
            detail = f"{field}: {errors[0].get('msg', '')}" if field else str(errors[0].get("msg", ""))
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="INVALID_REQUEST", detail=detail).model_dump(),
        )

    @app.exception_handler(ToolMissingError)
    async def tool_missing_handler(_request: Request, exc: ToolMissingError) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content=ErrorResponse(error="TOOL_MISSING", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(ToolExecutionError)
    async def tool_execution_handler(_request: Request, exc: ToolExecutionError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content=ErrorResponse(error="ANALYZER_FAILED", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(AnalysisTimeoutError)
    async def timeout_handler(_request: Request, exc: AnalysisTimeoutError) -> JSONResponse:
        return JSONResponse(
            status_code=504,
            content=ErrorResponse(error="ANALYSIS_TIMEOUT", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions -- never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
