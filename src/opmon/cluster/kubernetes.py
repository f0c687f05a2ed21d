# src/opmon/cluster/kubernetes.py

import logging
from typing import List, Optional

from kubernetes_asyncio import client
from kubernetes_asyncio.client.rest import ApiException
from kubernetes_asyncio.stream import WsApiClient

from ..core.exceptions import ClusterError
from ..core.k8s_client import get_api_client
from ..models.workload import WorkloadKind, WorkloadSpec
from .base import ClusterClient

logger = logging.getLogger(__name__)

ROUTE_GROUP = "route.openshift.io"
ROUTE_VERSION = "v1"


def _is_status(exc: ApiException, *codes: int) -> bool:
    return getattr(exc, "status", None) in codes


class KubernetesClusterClient(ClusterClient):
    """
    Talks to the Kubernetes/OpenShift control plane through kubernetes_asyncio.
    """

    def __init__(self, config_file: Optional[str] = None):
        self._config_file = config_file
        self._api = None

    async def connect(self) -> bool:
        """
        Lazily initialize the shared ApiClient using the centralized config loader.
        """
        if self._api:
            return True
        self._api = await get_api_client(self._config_file)
        return self._api is not None

    def _client(self) -> client.ApiClient:
        if not self._api:
            raise ClusterError("Kubernetes client is not connected.")
        return self._api

    async def close(self):
        """Close the Kubernetes API client if it exists."""
        if self._api:
            await self._api.close()
            logger.debug("Kubernetes API client closed.")
            self._api = None

    # --- Identity ---

    async def current_user(self) -> Optional[str]:
        try:
            review = await client.AuthenticationV1Api(self._client()).create_self_subject_review(
                body=client.V1SelfSubjectReview()
            )
            user_info = getattr(getattr(review, "status", None), "user_info", None)
            username = getattr(user_info, "username", None)
            if username:
                return username
        except ApiException as e:
            if _is_status(e, 401):
                logger.debug("Self subject review rejected as unauthenticated.")
                return None
            logger.debug("Self subject review unavailable (HTTP %s); trying OpenShift user API.", e.status)

        # Older clusters: the OpenShift 'current user' endpoint
        try:
            user = await client.CustomObjectsApi(self._client()).get_cluster_custom_object(
                group="user.openshift.io", version="v1", plural="users", name="~"
            )
            return (user.get("metadata") or {}).get("name")
        except ApiException as e:
            logger.debug("Could not determine current user (HTTP %s).", e.status)
            return None

    async def can_i(self, verb: str, resource: str, namespace: Optional[str] = None) -> bool:
        review = client.V1SelfSubjectAccessReview(
            spec=client.V1SelfSubjectAccessReviewSpec(
                resource_attributes=client.V1ResourceAttributes(verb=verb, resource=resource, namespace=namespace)
            )
        )
        try:
            resp = await client.AuthorizationV1Api(self._client()).create_self_subject_access_review(body=review)
        except ApiException as e:
            logger.debug("Access review for %s %s failed: %s", verb, resource, e)
            return False
        return bool(getattr(getattr(resp, "status", None), "allowed", False))

    # --- Idempotent provisioning ---

    async def ensure_namespace(self, name: str) -> bool:
        core = client.CoreV1Api(self._client())
        try:
            await core.read_namespace(name=name)
            return False
        except ApiException as e:
            if not _is_status(e, 404):
                raise ClusterError(f"Failed to read namespace '{name}': {e.reason}") from e

        try:
            await core.create_namespace(body=client.V1Namespace(metadata=client.V1ObjectMeta(name=name)))
            return True
        except ApiException as e:
            if _is_status(e, 409):
                return False
            raise ClusterError(f"Failed to create namespace '{name}': {e.reason}") from e

    async def ensure_service_account(self, namespace: str, name: str) -> bool:
        core = client.CoreV1Api(self._client())
        try:
            await core.read_namespaced_service_account(name=name, namespace=namespace)
            return False
        except ApiException as e:
            if not _is_status(e, 404):
                raise ClusterError(f"Failed to read service account '{namespace}/{name}': {e.reason}") from e

        body = client.V1ServiceAccount(
            api_version="v1",
            kind="ServiceAccount",
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
        )
        try:
            await core.create_namespaced_service_account(namespace=namespace, body=body)
            return True
        except ApiException as e:
            if _is_status(e, 409):
                return False
            raise ClusterError(f"Failed to create service account '{namespace}/{name}': {e.reason}") from e

    @staticmethod
    def binding_name(role: str, namespace: str, service_account: str) -> str:
        return f"{role}-{namespace}-{service_account}"[:253]

    async def bind_role(self, role: str, namespace: str, service_account: str) -> bool:
        rbac = client.RbacAuthorizationV1Api(self._client())
        name = self.binding_name(role, namespace, service_account)
        subject = {"kind": "ServiceAccount", "name": service_account, "namespace": namespace}

        try:
            existing = await rbac.read_cluster_role_binding(name=name)
        except ApiException as e:
            if not _is_status(e, 404):
                raise ClusterError(f"Failed to read cluster role binding '{name}': {e.reason}") from e
            existing = None

        if existing is None:
            body = {
                "apiVersion": "rbac.authorization.k8s.io/v1",
                "kind": "ClusterRoleBinding",
                "metadata": {"name": name},
                "roleRef": {"apiGroup": "rbac.authorization.k8s.io", "kind": "ClusterRole", "name": role},
                "subjects": [subject],
            }
            try:
                await rbac.create_cluster_role_binding(body=body)
                return True
            except ApiException as e:
                if _is_status(e, 409):
                    return False
                raise ClusterError(f"Failed to create cluster role binding '{name}': {e.reason}") from e

        if existing.role_ref.name != role:
            raise ClusterError(
                f"Cluster role binding '{name}' already references role '{existing.role_ref.name}', not '{role}'."
            )

        subjects = list(existing.subjects or [])
        for s in subjects:
            if s.kind == "ServiceAccount" and s.name == service_account and s.namespace == namespace:
                return False

        # Role refs are immutable, subjects are not: add ours to the existing binding.
        patch = {"subjects": [{"kind": s.kind, "name": s.name, "namespace": s.namespace} for s in subjects] + [subject]}
        try:
            await rbac.patch_cluster_role_binding(name=name, body=patch)
        except ApiException as e:
            raise ClusterError(f"Failed to update cluster role binding '{name}': {e.reason}") from e
        return True

    async def mint_token(self, namespace: str, service_account: str, duration_seconds: int) -> str:
        body = {
            "apiVersion": "authentication.k8s.io/v1",
            "kind": "TokenRequest",
            "spec": {"expirationSeconds": duration_seconds},
        }
        try:
            resp = await client.CoreV1Api(self._client()).create_namespaced_service_account_token(
                name=service_account, namespace=namespace, body=body
            )
        except ApiException as e:
            logger.error("TokenRequest for %s/%s failed: %s", namespace, service_account, e.reason)
            return ""

        status = getattr(resp, "status", None)
        expires = getattr(status, "expiration_timestamp", None)
        if expires:
            logger.info("Token for %s/%s expires at %s", namespace, service_account, expires)
        return getattr(status, "token", None) or ""

    async def resolve_route(self, namespace: str, name: str) -> Optional[str]:
        try:
            route = await client.CustomObjectsApi(self._client()).get_namespaced_custom_object(
                group=ROUTE_GROUP, version=ROUTE_VERSION, namespace=namespace, plural="routes", name=name
            )
        except ApiException as e:
            logger.debug("Route %s/%s not available (HTTP %s).", namespace, name, e.status)
            return None
        return (route.get("spec") or {}).get("host") or None

    # --- Ephemeral workloads ---

    def _pod_spec(self, spec: WorkloadSpec) -> client.V1PodSpec:
        return client.V1PodSpec(
            service_account_name=spec.service_account,
            restart_policy="Never",
            containers=[client.V1Container(name=spec.container_name, image=spec.image, command=list(spec.command))],
        )

    async def launch_workload(self, spec: WorkloadSpec) -> None:
        metadata = client.V1ObjectMeta(
            name=spec.name, namespace=spec.namespace, labels={"app.kubernetes.io/managed-by": "opmon"}
        )
        try:
            if spec.kind == WorkloadKind.POD:
                body = client.V1Pod(api_version="v1", kind="Pod", metadata=metadata, spec=self._pod_spec(spec))
                await client.CoreV1Api(self._client()).create_namespaced_pod(namespace=spec.namespace, body=body)
            else:
                body = client.V1Job(
                    api_version="batch/v1",
                    kind="Job",
                    metadata=metadata,
                    spec=client.V1JobSpec(
                        backoff_limit=spec.backoff_limit,
                        template=client.V1PodTemplateSpec(spec=self._pod_spec(spec)),
                    ),
                )
                await client.BatchV1Api(self._client()).create_namespaced_job(namespace=spec.namespace, body=body)
        except ApiException as e:
            if _is_status(e, 409):
                logger.warning("%s %s/%s already exists; reusing it.", spec.kind.value, spec.namespace, spec.name)
                return
            raise ClusterError(f"Failed to create {spec.kind.value} '{spec.namespace}/{spec.name}': {e.reason}") from e
        logger.debug("Created %s %s/%s", spec.kind.value, spec.namespace, spec.name)

    async def workload_ready(self, spec: WorkloadSpec) -> bool:
        pod = await client.CoreV1Api(self._client()).read_namespaced_pod(name=spec.name, namespace=spec.namespace)
        conditions = getattr(pod.status, "conditions", None) or []
        return any(c.type == "Ready" and c.status == "True" for c in conditions)

    async def workload_finished(self, spec: WorkloadSpec) -> bool:
        job = await client.BatchV1Api(self._client()).read_namespaced_job(name=spec.name, namespace=spec.namespace)
        conditions = getattr(job.status, "conditions", None) or []
        return any(c.type in ("Complete", "Failed") and c.status == "True" for c in conditions)

    async def exec_in_workload(self, spec: WorkloadSpec, command: List[str]) -> str:
        # Exec needs a websocket-capable client; it reuses the loaded default configuration.
        async with WsApiClient() as ws_api:
            core = client.CoreV1Api(api_client=ws_api)
            return await core.connect_get_namespaced_pod_exec(
                spec.name,
                spec.namespace,
                container=spec.container_name,
                command=command,
                stderr=False,
                stdin=False,
                stdout=True,
                tty=False,
            )

    async def _workload_pod_name(self, spec: WorkloadSpec) -> Optional[str]:
        if spec.kind == WorkloadKind.POD:
            return spec.name
        pods = await client.CoreV1Api(self._client()).list_namespaced_pod(
            namespace=spec.namespace, label_selector=f"job-name={spec.name}"
        )
        if not pods.items:
            return None
        return pods.items[0].metadata.name

    async def read_workload_output(self, spec: WorkloadSpec) -> Optional[str]:
        try:
            pod_name = await self._workload_pod_name(spec)
            if not pod_name:
                return None
            return await client.CoreV1Api(self._client()).read_namespaced_pod_log(
                name=pod_name, namespace=spec.namespace
            )
        except ApiException as e:
            logger.debug("Could not read output of %s %s: %s", spec.kind.value, spec.name, e.reason)
            return None

    async def delete_resource(self, spec: WorkloadSpec) -> None:
        try:
            if spec.kind == WorkloadKind.POD:
                await client.CoreV1Api(self._client()).delete_namespaced_pod(
                    name=spec.name, namespace=spec.namespace, grace_period_seconds=0
                )
            else:
                await client.BatchV1Api(self._client()).delete_namespaced_job(
                    name=spec.name, namespace=spec.namespace, propagation_policy="Background"
                )
        except ApiException as e:
            if _is_status(e, 404):
                return
            raise
