from kubernetes_asyncio import client

from .base import ClusterClient
from .kubernetes import KubernetesClusterClient

# Expose the kubernetes client at package level so tests can monkeypatch
# paths like 'opmon.cluster.client.CoreV1Api'.
__all__ = ["ClusterClient", "KubernetesClusterClient", "client"]
