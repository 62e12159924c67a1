"""Cluster access for k8sintellect.

Submodules:
    connection -- ClusterConnection: startup-time config + context metadata.
    client     -- ClusterClient: request-scoped, read-only list operations.
"""

from k8sintellect.cluster.client import ClusterClient, ClusterReader
from k8sintellect.cluster.connection import ClusterConnection

__all__ = ["ClusterClient", "ClusterConnection", "ClusterReader"]
