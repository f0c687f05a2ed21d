# src/opmon/models/settings.py

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.config import Config
from ..core.config import config as global_config
from ..utils.duration import parse_duration


class SetupSettings(BaseModel):
    """
    Explicit configuration for one provisioning run.

    Every resource name the workflow touches is a field here, so tests can inject
    unique names instead of relying on the fixed defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    namespace: str = Field("dynatrace-monitoring", description="Namespace holding created resources")
    service_account: str = Field("dynatrace-prometheus", description="Service account used to query metrics")
    cluster_role: str = Field("cluster-monitoring-view", description="Pre-existing cluster role to bind")
    token_duration: str = Field("87600h", description="Validity requested for the minted token")

    prometheus_route_name: str = Field("prometheus-k8s", description="Route exposing Prometheus externally")
    prometheus_namespace: str = Field("openshift-monitoring", description="Namespace of the monitoring stack")
    prometheus_service_host: str = Field(
        "prometheus-k8s.openshift-monitoring.svc", description="In-cluster DNS name of the Prometheus service"
    )
    prometheus_service_port: int = Field(9091, description="In-cluster Prometheus service port")
    verification_metric: str = Field("cluster_operator_conditions", description="Metric expected in Prometheus")

    probe_image: str = Field("curlimages/curl:latest", description="Image used by the verification workloads")
    probe_pod_name: str = Field("prometheus-test", description="Name of the connectivity probe pod")
    verify_job_name: str = Field("verify-metrics", description="Name of the metric verification job")
    ready_timeout: float = Field(60.0, ge=0, description="Seconds to wait for the probe pod to be ready")
    post_ready_delay: float = Field(5.0, ge=0, description="Seconds to wait after the probe pod is ready")
    settle_time: float = Field(10.0, ge=0, description="Seconds to wait for the verification job")
    poll_interval: float = Field(2.0, gt=0, description="Seconds between readiness polls")
    external_probe: bool = Field(True, description="Also probe the external route from this machine")
    verify_certs: bool = Field(False, description="Verify TLS certificates on the external probe")

    output_dir: Path = Field(Path("."), description="Directory receiving the generated files")
    token_file: str = Field("dynatrace-prometheus-token.txt", description="Token file name")
    endpoints_file: str = Field("prometheus-endpoints.txt", description="Endpoint descriptor file name")
    activegate_config_file: str = Field(
        "activegate-prometheus-config.yaml", description="ActiveGate configuration file name"
    )
    sample_queries_file: str = Field("sample-queries.txt", description="Example query file name")

    @field_validator("token_duration")
    @classmethod
    def _check_duration(cls, value: str) -> str:
        parse_duration(value)
        return value

    @property
    def service_account_user(self) -> str:
        """The RBAC subject string of the service account."""
        return f"system:serviceaccount:{self.namespace}:{self.service_account}"

    @property
    def internal_endpoint(self) -> str:
        return f"https://{self.prometheus_service_host}:{self.prometheus_service_port}"

    def output_path(self, file_name: str) -> Path:
        return Path(self.output_dir) / file_name

    @classmethod
    def from_config(cls, cfg: Config = None, **overrides) -> "SetupSettings":
        """
        Builds settings from the environment-driven Config. Keyword overrides set to None are ignored.
        """
        cfg = cfg or global_config
        values = {
            "namespace": cfg.NAMESPACE,
            "service_account": cfg.SERVICE_ACCOUNT,
            "cluster_role": cfg.CLUSTER_ROLE,
            "token_duration": cfg.TOKEN_DURATION,
            "prometheus_route_name": cfg.PROMETHEUS_ROUTE_NAME,
            "prometheus_namespace": cfg.PROMETHEUS_NAMESPACE,
            "prometheus_service_host": cfg.PROMETHEUS_SERVICE_HOST,
            "prometheus_service_port": cfg.PROMETHEUS_SERVICE_PORT,
            "verification_metric": cfg.VERIFICATION_METRIC,
            "probe_image": cfg.PROBE_IMAGE,
            "probe_pod_name": cfg.PROBE_POD_NAME,
            "verify_job_name": cfg.VERIFY_JOB_NAME,
            "ready_timeout": cfg.READY_TIMEOUT,
            "post_ready_delay": cfg.POST_READY_DELAY,
            "settle_time": cfg.SETTLE_TIME,
            "poll_interval": cfg.POLL_INTERVAL,
            "external_probe": cfg.EXTERNAL_PROBE,
            "verify_certs": cfg.VERIFY_CERTS,
            "output_dir": Path(cfg.OUTPUT_DIR),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
