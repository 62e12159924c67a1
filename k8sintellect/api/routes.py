"""REST API route handlers.

Handlers read their collaborators from ``request.app.state`` (populated by
``create_app``). Analyzer failures propagate to the exception handlers
registered in ``k8sintellect.api.app``.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from k8sintellect.api.schemas import (
    AnalysisResponse,
    ErrorResponse,
    FiltersResponse,
    HealthResponse,
    NamespacesResponse,
    StatusResponse,
)
from k8sintellect.k8sgpt.filters import AVAILABLE_FILTERS
from k8sintellect.models.issues import AnalysisScope

_log = structlog.get_logger(component="api.routes")

router = APIRouter()

_MAX_TIMEOUT_SECONDS = 3600.0


def _now() -> str:
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(timestamp=_now())


@router.get("/api/status", response_model=StatusResponse, response_model_by_alias=True)
async def status(request: Request) -> StatusResponse:
    """Anonymous mode, k8sgpt backend/version and cluster connection details."""
    from k8sintellect import __version__

    state = request.app.state
    anonymous_mode = state.config.enhancement.anonymous_mode
    try:
        backend, k8sgpt_version = await asyncio.gather(
            state.adapter.get_backend_info(),
            state.adapter.get_version(),
        )
        cluster = state.coordinator.cluster_info().to_dict()
    except Exception as exc:  # noqa: BLE001
        _log.error("status_lookup_failed", error=str(exc))
        backend = {"provider": "unknown"}
        k8sgpt_version = "unknown"
        cluster = {"name": "unknown", "server": None, "context": "unknown"}

    return StatusResponse(
        anonymous_mode=anonymous_mode,
        backend=backend,
        cluster=cluster,
        k8sgpt_version=k8sgpt_version,
        version=__version__,
        timestamp=_now(),
    )


@router.get("/api/filters", response_model=FiltersResponse)
async def filters() -> FiltersResponse:
    return FiltersResponse(filters=list(AVAILABLE_FILTERS))


@router.get(
    "/api/namespaces",
    response_model=NamespacesResponse,
    responses={500: {"model": ErrorResponse}},
)
async def namespaces(request: Request) -> NamespacesResponse | JSONResponse:
    try:
        names = await request.app.state.coordinator.list_namespaces()
    except Exception as exc:  # noqa: BLE001
        _log.error("namespace_listing_failed", error=str(exc))
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="NAMESPACES_UNAVAILABLE", detail=str(exc)).model_dump(),
        )
    return NamespacesResponse(namespaces=names)


@router.get(
    "/api/analyze",
    response_model=AnalysisResponse,
    responses={
        400: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def analyze(
    request: Request,
    namespace: str | None = None,
    namespaces: str | None = None,
    all_namespaces: bool = Query(False, alias="allNamespaces"),
    filters: str | None = None,
    direct: bool | None = None,
    timeout: float | None = Query(None, gt=0, le=_MAX_TIMEOUT_SECONDS),
) -> dict[str, object] | JSONResponse:
    """Run one aggregation.

    ``namespaces`` (comma-separated) wins over ``namespace``; either wins
    over ``allNamespaces``.
    """
    namespace_list = _split_csv(namespaces) or _split_csv(namespace)
    filter_list = _split_csv(filters)

    unknown = [f for f in filter_list if f not in AVAILABLE_FILTERS]
    if unknown:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error="INVALID_FILTER",
                detail=f"Unknown filter(s): {', '.join(unknown)}",
            ).model_dump(),
        )

    scope = AnalysisScope.build(
        namespaces=namespace_list,
        all_namespaces=all_namespaces,
        filters=filter_list,
    )
    result = await request.app.state.coordinator.analyze(scope, run_direct=direct, timeout=timeout)
    return result.to_dict()  # type: ignore[no-any-return]


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
