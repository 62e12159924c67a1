"""``k8sintellect`` command-line interface."""

from __future__ import annotations

import asyncio

import click

from k8sintellect import __version__
from k8sintellect.analyst.coordinator import AnalysisTimeoutError
from k8sintellect.cli.output import RENDERERS
from k8sintellect.config import load_config
from k8sintellect.k8sgpt.adapter import AnalyzerError
from k8sintellect.models.config import K8sIntellectConfig
from k8sintellect.models.issues import AnalysisResult, AnalysisScope
from k8sintellect.observability.logging import get_logger, setup_logging

_log = get_logger("cli")


def _split_csv(values: tuple[str, ...] | str | None) -> list[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = (values,)
    return [part.strip() for value in values for part in value.split(",") if part.strip()]


@click.group()
@click.version_option(__version__, prog_name="k8sintellect")
def cli() -> None:
    """Kubernetes/OpenShift cluster analysis powered by k8sgpt."""


@cli.command()
@click.option(
    "-n",
    "--namespace",
    "namespaces",
    multiple=True,
    help="Namespace to analyze; repeat or comma-separate for several.",
)
@click.option("--all-namespaces", is_flag=True, default=False, help="Analyze all namespaces.")
@click.option("-f", "--filter", "filters", default=None, help="Comma-separated kinds, e.g. Pod,Service.")
@click.option(
    "-o",
    "--output",
    type=click.Choice(sorted(RENDERERS)),
    default="text",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--direct/--no-direct",
    default=None,
    help="Also run the direct API collectors (default from K8SINTELLECT_DIRECT_COLLECTORS_ENABLED).",
)
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None, help="Deadline in seconds.")
def analyze(
    namespaces: tuple[str, ...],
    all_namespaces: bool,
    filters: str | None,
    output: str,
    direct: bool | None,
    timeout: float | None,
) -> None:
    """Analyze the cluster for issues."""
    config = load_config()
    setup_logging(config.log.level, fmt="console")

    scope = AnalysisScope.build(
        namespaces=_split_csv(namespaces),
        all_namespaces=all_namespaces,
        filters=_split_csv(filters),
    )

    try:
        result = asyncio.run(_run_analysis(config, scope, direct=direct, timeout=timeout))
    except AnalyzerError as exc:
        click.echo(f"Analysis failed ({exc.scope_label}): {exc}", err=True)
        raise SystemExit(1) from exc
    except AnalysisTimeoutError as exc:
        click.echo(f"Analysis failed: {exc}", err=True)
        raise SystemExit(1) from exc
    except Exception as exc:
        _log.error("analysis_aborted", error=str(exc))
        click.echo(f"Analysis failed: {exc}", err=True)
        raise SystemExit(1) from exc

    click.echo(RENDERERS[output](result))


async def _run_analysis(
    config: K8sIntellectConfig,
    scope: AnalysisScope,
    *,
    direct: bool | None,
    timeout: float | None,
) -> AnalysisResult:
    from k8sintellect.app import build_coordinator

    coordinator, _ = await build_coordinator(config)
    return await coordinator.analyze(scope, run_direct=direct, timeout=timeout)


@cli.command()
@click.option("-p", "--port", type=click.IntRange(1024, 65535), default=None, help="Server port.")
@click.option("-h", "--host", default=None, help="Server host.")
def serve(port: int | None, host: str | None) -> None:
    """Start the REST API server."""
    from k8sintellect.app import main

    config = load_config()
    if port is not None:
        config.api.port = port
    if host is not None:
        config.api.host = host
    asyncio.run(main(config))
