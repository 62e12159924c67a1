"""Resource kinds understood by ``k8sgpt analyze --filter``."""

from __future__ import annotations

AVAILABLE_FILTERS: tuple[str, ...] = (
    "Pod",
    "Service",
    "Deployment",
    "ReplicaSet",
    "StatefulSet",
    "PersistentVolumeClaim",
    "Ingress",
    "Node",
    "CronJob",
    "Job",
    "HorizontalPodAutoscaler",
    "NetworkPolicy",
    "MutatingWebhookConfiguration",
    "ValidatingWebhookConfiguration",
    "ConfigMap",
    "ClusterExtension",
    "Log",
    "GatewayClass",
    "Gateway",
    "HTTPRoute",
    "Storage",
    "Security",
    "ClusterCatalog",
    "PodDisruptionBudget",
)
