# src/opmon/cluster/base.py
"""
This module defines the abstract cluster client used by the provisioning
workflow. Keeping the control plane behind this narrow interface lets the
workflow run against a real cluster or against an in-memory fake in tests.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.workload import WorkloadSpec


class ClusterClient(ABC):
    """
    Abstract Base Class for cluster control-plane access.
    """

    @abstractmethod
    async def connect(self) -> bool:
        """
        Establish a session with the control plane.

        Returns:
            True if a session (kubeconfig or in-cluster credentials) is available.
        """
        pass

    @abstractmethod
    async def current_user(self) -> Optional[str]:
        """Return the authenticated username, or None when the session is unauthenticated."""
        pass

    @abstractmethod
    async def can_i(self, verb: str, resource: str, namespace: Optional[str] = None) -> bool:
        """Return whether the current identity may perform `verb` on `resource`."""
        pass

    @abstractmethod
    async def ensure_namespace(self, name: str) -> bool:
        """
        Create the namespace if absent.

        Returns:
            True if it was created, False if it already existed.
        """
        pass

    @abstractmethod
    async def ensure_service_account(self, namespace: str, name: str) -> bool:
        """
        Create the service account if absent.

        Returns:
            True if it was created, False if it already existed.
        """
        pass

    @abstractmethod
    async def bind_role(self, role: str, namespace: str, service_account: str) -> bool:
        """
        Grant a cluster role to a service account. Safe to repeat.

        Returns:
            True if the binding changed, False if the grant was already in place.
        """
        pass

    @abstractmethod
    async def mint_token(self, namespace: str, service_account: str, duration_seconds: int) -> str:
        """Request a bearer token for the service account. May return an empty string."""
        pass

    @abstractmethod
    async def resolve_route(self, namespace: str, name: str) -> Optional[str]:
        """Return the host of an externally exposed route, or None if there is none."""
        pass

    @abstractmethod
    async def launch_workload(self, spec: WorkloadSpec) -> None:
        """Create the pod or job described by `spec`."""
        pass

    @abstractmethod
    async def workload_ready(self, spec: WorkloadSpec) -> bool:
        """Return whether a pod workload reports the Ready condition."""
        pass

    @abstractmethod
    async def workload_finished(self, spec: WorkloadSpec) -> bool:
        """Return whether a job workload has succeeded or failed."""
        pass

    @abstractmethod
    async def exec_in_workload(self, spec: WorkloadSpec, command: List[str]) -> str:
        """Run `command` inside a pod workload and return its standard output."""
        pass

    @abstractmethod
    async def read_workload_output(self, spec: WorkloadSpec) -> Optional[str]:
        """Return the log of the workload's pod, or None if no pod exists."""
        pass

    @abstractmethod
    async def delete_resource(self, spec: WorkloadSpec) -> None:
        """Delete the workload. Raises on failure; callers decide whether to swallow."""
        pass

    async def close(self):
        """
        Clean up resources (e.g., close API clients).
        """
        pass
