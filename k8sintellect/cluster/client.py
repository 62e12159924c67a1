"""Read-only Kubernetes API client.

Responses are converted to plain JSON-style dicts (camelCase keys, RFC 3339
timestamps) so collectors work on the same shape as ``kubectl get -o json``.
No write operation is ever issued from this module.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ClusterReader(Protocol):
    """The list operations the collectors and orchestrator depend on.

    ``namespace=None`` means every namespace.
    """

    async def list_namespaces(self) -> list[str]: ...

    async def list_pods(self, namespace: str | None) -> list[dict[str, Any]]: ...

    async def list_deployments(self, namespace: str | None) -> list[dict[str, Any]]: ...

    async def list_services(self, namespace: str | None) -> list[dict[str, Any]]: ...

    async def list_pod_events(self, pod_name: str, namespace: str) -> list[dict[str, Any]]: ...


class ClusterClient:
    """Request-scoped client backed by its own kubernetes-asyncio ApiClient."""

    def __init__(self, configuration: Any) -> None:
        self._configuration = configuration
        self._api_client: Any = None
        self._core_v1: Any = None
        self._apps_v1: Any = None

    async def __aenter__(self) -> ClusterClient:
        from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

        self._api_client = k8s_client.ApiClient(configuration=self._configuration)
        self._core_v1 = k8s_client.CoreV1Api(self._api_client)
        self._apps_v1 = k8s_client.AppsV1Api(self._api_client)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._api_client is not None:
            await self._api_client.close()
            self._api_client = None

    async def list_namespaces(self) -> list[str]:
        response = await self._core_v1.list_namespace()
        names = [
            item.get("metadata", {}).get("name")
            for item in self._items(response)
        ]
        return sorted(name for name in names if name)

    async def list_pods(self, namespace: str | None) -> list[dict[str, Any]]:
        if namespace:
            response = await self._core_v1.list_namespaced_pod(namespace)
        else:
            response = await self._core_v1.list_pod_for_all_namespaces()
        return self._items(response)

    async def list_deployments(self, namespace: str | None) -> list[dict[str, Any]]:
        if namespace:
            response = await self._apps_v1.list_namespaced_deployment(namespace)
        else:
            response = await self._apps_v1.list_deployment_for_all_namespaces()
        return self._items(response)

    async def list_services(self, namespace: str | None) -> list[dict[str, Any]]:
        if namespace:
            response = await self._core_v1.list_namespaced_service(namespace)
        else:
            response = await self._core_v1.list_service_for_all_namespaces()
        return self._items(response)

    async def list_pod_events(self, pod_name: str, namespace: str) -> list[dict[str, Any]]:
        response = await self._core_v1.list_namespaced_event(
            namespace,
            field_selector=f"involvedObject.name={pod_name},involvedObject.kind=Pod",
        )
        return self._items(response)

    def _items(self, response: Any) -> list[dict[str, Any]]:
        data = self._api_client.sanitize_for_serialization(response)
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            return []
        return [item for item in items if isinstance(item, dict)]
