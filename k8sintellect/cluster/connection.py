"""Process-wide cluster connection configuration.

A ClusterConnection is built once at startup (in-cluster service account or
kubeconfig) and then only read. Every analysis request opens its own
ClusterClient from it, so no API connection pool is shared between
concurrent requests.
"""

from __future__ import annotations

import os
from typing import Any

import yaml

from k8sintellect.cluster.client import ClusterClient
from k8sintellect.models.cluster import ClusterInfo
from k8sintellect.observability.logging import get_logger

_log = get_logger("cluster.connection")

_DEFAULT_KUBECONFIG = "~/.kube/config"


class ClusterConnection:
    """Immutable handle on the loaded kubernetes-asyncio Configuration."""

    def __init__(self, configuration: Any, info: ClusterInfo) -> None:
        self._configuration = configuration
        self._info = info

    @property
    def info(self) -> ClusterInfo:
        return self._info

    def client(self) -> ClusterClient:
        """Open a fresh, request-scoped API client (use as ``async with``)."""
        return ClusterClient(self._configuration)

    @classmethod
    async def load(cls, context: str = "", cluster_name: str = "") -> ClusterConnection:
        """Load in-cluster config, falling back to the kubeconfig file."""
        # Import lazily so the pure analysis modules stay importable without
        # kubernetes-asyncio's cluster auto-detection side effects.
        from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
        from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]

        configuration = k8s_client.Configuration()
        try:
            k8s_config.load_incluster_config(client_configuration=configuration)
            _log.info("k8s client configured from in-cluster service account")
            return cls(configuration, ClusterInfo(name=cluster_name, context="", server=configuration.host))
        except k8s_config.ConfigException:
            pass

        await k8s_config.load_kube_config(
            context=context or None,
            client_configuration=configuration,
        )
        info = read_kubeconfig_info(kubeconfig_path(), context=context or None)
        if cluster_name:
            info = ClusterInfo(name=cluster_name, context=info.context, server=info.server)
        _log.info("k8s client configured from kubeconfig", context=info.context, cluster=info.display_name)
        return cls(configuration, info)


def kubeconfig_path() -> str:
    """First entry of ``$KUBECONFIG``, else ``~/.kube/config``."""
    raw = os.environ.get("KUBECONFIG", "") or _DEFAULT_KUBECONFIG
    first = raw.split(os.pathsep)[0] or _DEFAULT_KUBECONFIG
    return os.path.expanduser(first)


def read_kubeconfig_info(path: str, context: str | None = None) -> ClusterInfo:
    """Read context / cluster / server names from a kubeconfig file."""
    try:
        with open(path, encoding="utf-8") as fh:
            document = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        _log.warning("kubeconfig_unreadable", path=path, error=str(exc))
        return ClusterInfo(context=context or "")
    return cluster_info_from_kubeconfig(document, context=context)


def cluster_info_from_kubeconfig(document: Any, context: str | None = None) -> ClusterInfo:
    """Resolve the active context's cluster record from a parsed kubeconfig."""
    if not isinstance(document, dict):
        return ClusterInfo(context=context or "")

    context_name = context or str(document.get("current-context") or "")
    cluster_name = ""
    for entry in _named_entries(document.get("contexts")):
        if entry.get("name") == context_name:
            ctx = entry.get("context") if isinstance(entry.get("context"), dict) else {}
            cluster_name = str(ctx.get("cluster") or "")
            break

    server: str | None = None
    for entry in _named_entries(document.get("clusters")):
        if cluster_name and entry.get("name") == cluster_name:
            cluster = entry.get("cluster") if isinstance(entry.get("cluster"), dict) else {}
            server = cluster.get("server") or None
            break

    return ClusterInfo(name=cluster_name, context=context_name, server=server)


def _named_entries(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]
