# src/opmon/core/workflow.py
"""
The provisioning workflow: a strictly linear sequence of idempotent steps that
prepares a cluster for Prometheus scraping by an external monitoring platform,
followed by advisory connectivity checks and artifact generation.

Only missing session, missing authentication, missing privilege or an empty
token abort the run (SetupError). Every other anomaly is recorded as a warning
and the pipeline continues.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..artifacts import (
    ActiveGateConfigArtifact,
    BaseArtifact,
    EndpointsArtifact,
    SampleQueriesArtifact,
    TokenArtifact,
)
from ..cluster.base import ClusterClient
from ..models.endpoints import PrometheusEndpoints
from ..models.report import SetupReport, StepStatus
from ..models.settings import SetupSettings
from ..models.workload import WorkloadKind, WorkloadResult, WorkloadSpec
from ..probes import NO_RESPONSE, probe_query_endpoint
from ..reporters.base_reporter import BaseReporter
from ..reporters.console_reporter import ConsoleReporter
from ..utils.duration import duration_to_seconds, humanize_duration
from .exceptions import PreconditionError, TokenMintError
from .wait import Clock, wait_until

logger = logging.getLogger(__name__)

SUCCESS_MARKER = "SUCCESS"
FAILED_MARKER = "FAILED"


class ProvisioningWorkflow:
    """
    Runs the setup steps in order against a ClusterClient.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        settings: SetupSettings = None,
        reporter: BaseReporter = None,
        clock: Clock = None,
    ):
        self.cluster = cluster
        self.settings = settings or SetupSettings()
        self.reporter = reporter or ConsoleReporter()
        self.clock = clock or Clock()
        self.report = SetupReport()
        self._token: Optional[str] = None
        self._endpoints: Optional[PrometheusEndpoints] = None

    # --- Narrative helpers ---

    def _ok(self, step: str, message: str):
        logger.info("[%s] %s", step, message)
        self.reporter.success(message)
        self.report.add(step, StepStatus.OK, message)

    def _warn(self, step: str, message: str):
        logger.warning("[%s] %s", step, message)
        self.reporter.warning(message)
        self.report.add(step, StepStatus.WARNING, message)

    def _note(self, step: str, message: str):
        logger.info("[%s] %s", step, message)
        self.reporter.info(message)
        self.report.add(step, StepStatus.INFO, message)

    def _fatal(self, exc_type, message: str):
        logger.error(message)
        self.reporter.error(message)
        raise exc_type(message)

    # --- Steps ---

    async def check_prerequisites(self) -> str:
        """Fails with PreconditionError unless an authenticated, sufficiently privileged session exists."""
        step = "Prerequisites"
        self.reporter.header("Checking Prerequisites")

        if not await self.cluster.connect():
            self._fatal(
                PreconditionError,
                "No cluster session configured. Log in first (oc login) or provide a kubeconfig.",
            )
        self.reporter.success("Cluster client configured")

        user = await self.cluster.current_user()
        if not user:
            self._fatal(PreconditionError, "Not logged into the cluster. Please login first: oc login")
        self.report.user = user
        self._ok(step, f"Logged into the cluster as {user}")

        if not await self.cluster.can_i("create", "namespaces"):
            self._fatal(PreconditionError, "Insufficient privileges. Cluster admin access required.")
        self._ok(step, "Cluster admin privileges confirmed")

        host = await self.cluster.resolve_route(
            self.settings.prometheus_namespace, self.settings.prometheus_route_name
        )
        if host:
            self._ok(step, "OpenShift monitoring stack is deployed")
        else:
            self._warn(step, "Cannot find Prometheus route. Continuing anyway...")
        return user

    async def create_namespace(self) -> bool:
        step = "Namespace"
        self.reporter.header("Creating Namespace")
        name = self.settings.namespace
        created = await self.cluster.ensure_namespace(name)
        if created:
            self._ok(step, f"Created namespace: {name}")
        else:
            self._note(step, f"Namespace {name} already exists")
        return created

    async def create_service_account(self) -> bool:
        step = "Service account"
        self.reporter.header("Creating Service Account")
        s = self.settings
        created = await self.cluster.ensure_service_account(s.namespace, s.service_account)
        if created:
            self._ok(step, f"Created service account: {s.service_account}")
        else:
            self._note(step, f"Service account {s.service_account} already exists")
        return created

    async def grant_permissions(self) -> bool:
        step = "Permissions"
        self.reporter.header("Granting Permissions")
        s = self.settings
        changed = await self.cluster.bind_role(s.cluster_role, s.namespace, s.service_account)
        if changed:
            self._ok(step, f"Granted {s.cluster_role} role to {s.service_account_user}")
        else:
            self._ok(step, f"{s.service_account_user} already has the {s.cluster_role} role")
        return changed

    async def generate_token(self) -> str:
        """Mints the token and persists it. An empty token is fatal."""
        step = "Token"
        self.reporter.header("Generating Service Account Token")
        s = self.settings
        token = await self.cluster.mint_token(
            s.namespace, s.service_account, duration_to_seconds(s.token_duration)
        )
        token = (token or "").strip()
        if not token:
            self._fatal(TokenMintError, "Failed to generate token")

        self._token = token
        self._ok(step, f"Generated long-lived token ({humanize_duration(s.token_duration)})")
        path = await self._write(TokenArtifact(), step, "Token saved to")
        self.reporter.warning("IMPORTANT: Store this token securely!")
        logger.debug("Token written to %s", path)
        return token

    async def resolve_endpoints(self) -> PrometheusEndpoints:
        step = "Endpoints"
        self.reporter.header("Getting Prometheus Endpoint")
        s = self.settings
        host = await self.cluster.resolve_route(s.prometheus_namespace, s.prometheus_route_name)
        endpoints = PrometheusEndpoints(
            external=f"https://{host}" if host else None,
            internal=s.internal_endpoint,
        )
        self._endpoints = endpoints
        self.report.endpoints = endpoints

        if endpoints.external:
            self.reporter.info(f"External: {endpoints.external}")
        else:
            self._note(step, "No external route found; only the internal endpoint is available")
        self.reporter.info(f"Internal: {endpoints.internal}")
        await self._write(EndpointsArtifact(), step, "Endpoint information saved to")
        return endpoints

    async def test_prometheus_access(self) -> str:
        """
        Probes the internal endpoint from a pod running as the service account.

        Returns the HTTP status code ("000" when no response); never raises for a failed probe.
        """
        step = "Connectivity"
        self.reporter.header("Testing Prometheus Access")
        self.reporter.info("Testing internal Prometheus endpoint...")
        s = self.settings

        spec = WorkloadSpec(
            kind=WorkloadKind.POD,
            name=s.probe_pod_name,
            namespace=s.namespace,
            service_account=s.service_account,
            image=s.probe_image,
            command=["sleep", "3600"],
        )
        command = [
            "curl",
            "-k",
            "-s",
            "-o",
            "/dev/null",
            "-w",
            "%{http_code}",
            "-H",
            f"Authorization: Bearer {self._token}",
            self._endpoints.query_url("up"),
        ]
        result = await self.run_ephemeral_workload(spec, command)

        if result.status == "200":
            self._ok(step, "Successfully connected to Prometheus!")
        else:
            self._warn(
                step,
                f"Could not verify Prometheus access (HTTP {result.status}). "
                "This may be normal if testing from outside the cluster.",
            )

        if s.external_probe and self._endpoints.has_external:
            await self._probe_external()
        return result.status

    async def _probe_external(self):
        step = "External route"
        self.reporter.info(f"Testing external Prometheus route {self._endpoints.external}...")
        status, success = await probe_query_endpoint(
            self._endpoints.external, self._token, verify=self.settings.verify_certs
        )
        if status == "200" and success:
            self._ok(step, "External route answered the query API")
        else:
            self._warn(step, f"External route did not answer the query API (HTTP {status})")

    async def verify_metrics(self) -> bool:
        """Runs a batch job that greps the query response for the verification metric."""
        step = "Metrics"
        self.reporter.header("Verifying Cluster Operator Metrics")
        self.reporter.info("Checking if cluster operator metrics are available in Prometheus...")
        s = self.settings
        metric = s.verification_metric
        script = (
            f'curl -k -s -H "Authorization: Bearer {self._token}" '
            f"'{self._endpoints.query_url(metric)}' "
            f"| grep -q '{metric}' && echo \"{SUCCESS_MARKER}\" || echo \"{FAILED_MARKER}\""
        )
        spec = WorkloadSpec(
            kind=WorkloadKind.JOB,
            name=s.verify_job_name,
            namespace=s.namespace,
            service_account=s.service_account,
            image=s.probe_image,
            command=["/bin/sh", "-c", script],
            backoff_limit=1,
        )
        self.reporter.info("Waiting for verification job to complete...")
        result = await self.run_ephemeral_workload(spec)

        if result.status == SUCCESS_MARKER:
            self._ok(step, "Cluster operator metrics are available in Prometheus!")
            return True
        self._warn(step, "Could not verify metrics. Please check manually.")
        return False

    async def generate_artifacts(self) -> List[Path]:
        self.reporter.header("Generating ActiveGate Configuration")
        paths = [await self._write(ActiveGateConfigArtifact(), "ActiveGate config", "Configuration saved to")]
        self.reporter.header("Creating Sample Queries")
        paths.append(await self._write(SampleQueriesArtifact(), "Sample queries", "Sample queries saved to"))
        return paths

    # --- Workloads ---

    async def run_ephemeral_workload(self, spec: WorkloadSpec, command: List[str] = None) -> WorkloadResult:
        """
        Launches a short-lived workload, waits for it (bounded), collects its result and
        always requests its deletion.

        Pods are waited on until Ready, then `command` is executed inside them and its output
        is the status. Jobs are waited on until finished (at most the settle time), then their
        log is scanned for the SUCCESS/FAILED marker.
        """
        try:
            try:
                await self.cluster.launch_workload(spec)
            except Exception as e:
                logger.warning("Could not launch %s %s: %s", spec.kind.value, spec.name, e)
                status = NO_RESPONSE if spec.kind == WorkloadKind.POD else ""
                return WorkloadResult(status=status, output=str(e))

            if spec.kind == WorkloadKind.POD:
                return await self._collect_pod(spec, command or [])
            return await self._collect_job(spec)
        finally:
            await self._cleanup(spec)

    async def _collect_pod(self, spec: WorkloadSpec, command: List[str]) -> WorkloadResult:
        s = self.settings
        self.reporter.info("Waiting for test pod to be ready...")
        ready = await wait_until(
            lambda: self.cluster.workload_ready(spec),
            timeout=s.ready_timeout,
            interval=s.poll_interval,
            clock=self.clock,
            description=f"pod {spec.name} to be ready",
        )
        if not ready:
            logger.warning(
                "Pod %s/%s not ready after %ss; probing anyway.", spec.namespace, spec.name, s.ready_timeout
            )
        await self.clock.sleep(s.post_ready_delay)

        try:
            output = await self.cluster.exec_in_workload(spec, command)
        except Exception as e:
            logger.debug("Exec in %s failed: %s", spec.name, e)
            return WorkloadResult(status=NO_RESPONSE, output=str(e))
        output = (output or "").strip()
        return WorkloadResult(status=output or NO_RESPONSE, output=output)

    async def _collect_job(self, spec: WorkloadSpec) -> WorkloadResult:
        s = self.settings
        finished = await wait_until(
            lambda: self.cluster.workload_finished(spec),
            timeout=s.settle_time,
            interval=s.poll_interval,
            clock=self.clock,
            description=f"job {spec.name} to finish",
        )
        if not finished:
            logger.debug("Job %s/%s still running after %ss.", spec.namespace, spec.name, s.settle_time)

        try:
            output = await self.cluster.read_workload_output(spec) or ""
        except Exception as e:
            logger.debug("Reading output of job %s failed: %s", spec.name, e)
            output = ""
        if SUCCESS_MARKER in output:
            status = SUCCESS_MARKER
        elif FAILED_MARKER in output:
            status = FAILED_MARKER
        else:
            status = ""
        return WorkloadResult(status=status, output=output)

    async def _cleanup(self, spec: WorkloadSpec):
        try:
            await self.cluster.delete_resource(spec)
        except Exception as e:
            logger.debug("Ignoring failure to delete %s %s: %s", spec.kind.value, spec.name, e)

    # --- Artifacts ---

    async def _write(self, artifact: BaseArtifact, step: str, label: str) -> Path:
        path = await artifact.write(self._token, self._endpoints, self.settings)
        self.report.artifacts.append(path)
        self._ok(step, f"{label}: {path}")
        return path

    async def run(self) -> SetupReport:
        """
        Runs every step in order and returns the report. SetupError propagates on fatal failures.
        """
        await self.check_prerequisites()
        await self.create_namespace()
        await self.create_service_account()
        await self.grant_permissions()
        await self.generate_token()
        await self.resolve_endpoints()
        await self.test_prometheus_access()
        await self.verify_metrics()
        await self.generate_artifacts()
        return self.report
