# src/opmon/core/config.py

import logging
import os
import re

from dotenv import load_dotenv

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

DURATION_PATTERN = r"^(\d+)([smhd])$"


def _get_bool(key: str, default: str) -> bool:
    return os.getenv(key, default).lower() in (
        "true",
        "1",
        "t",
        "y",
        "yes",
    )


class Config:
    """
    Handles the application's configuration by loading values from environment variables.
    """

    def __init__(self):
        # --- Cluster session variables ---
        # Optional explicit kubeconfig path; falls back to the client's default lookup.
        self.KUBECONFIG = self._get_secret("KUBECONFIG")

    @staticmethod
    def _get_secret(key: str, default: str = None) -> str:
        """
        Retrieves a secret from a file (mounted volume) or falls back to environment variable.

        Raises:
            PermissionError: If the secret file exists but cannot be read due to permissions.
            IOError: If the secret file exists but cannot be read due to I/O errors.
        """
        secret_file = f"/etc/opmon/secrets/{key}"
        if os.path.exists(secret_file):
            try:
                with open(secret_file, "r") as f:
                    value = f.read().strip()
                    logging.getLogger(__name__).debug(f"Loaded secret '{key}' from {secret_file}")
                    return value
            except PermissionError as e:
                raise PermissionError(
                    f"Secret file '{secret_file}' exists but cannot be read due to permission denied. "
                    f"Please check file permissions or run with appropriate privileges."
                ) from e
            except (IOError, OSError) as e:
                raise IOError(
                    f"Secret file '{secret_file}' exists but cannot be read: {e}. "
                    f"Please check the file integrity and system resources."
                ) from e
        return os.getenv(key, default)

    # --- Logging variables ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # --- Provisioned resources ---
    NAMESPACE = os.getenv("OPMON_NAMESPACE", "dynatrace-monitoring")
    SERVICE_ACCOUNT = os.getenv("OPMON_SERVICE_ACCOUNT", "dynatrace-prometheus")
    CLUSTER_ROLE = os.getenv("OPMON_CLUSTER_ROLE", "cluster-monitoring-view")
    # Ten years, the longest validity the original tooling requested.
    TOKEN_DURATION = os.getenv("OPMON_TOKEN_DURATION", "87600h")

    # --- Prometheus (OpenShift monitoring stack) ---
    PROMETHEUS_ROUTE_NAME = os.getenv("OPMON_PROMETHEUS_ROUTE", "prometheus-k8s")
    PROMETHEUS_NAMESPACE = os.getenv("OPMON_PROMETHEUS_NAMESPACE", "openshift-monitoring")
    PROMETHEUS_SERVICE_HOST = os.getenv(
        "OPMON_PROMETHEUS_SERVICE_HOST", "prometheus-k8s.openshift-monitoring.svc"
    )
    PROMETHEUS_SERVICE_PORT = int(os.getenv("OPMON_PROMETHEUS_SERVICE_PORT", "9091"))
    VERIFICATION_METRIC = os.getenv("OPMON_VERIFICATION_METRIC", "cluster_operator_conditions")

    # --- Verification workloads ---
    PROBE_IMAGE = os.getenv("OPMON_PROBE_IMAGE", "curlimages/curl:latest")
    PROBE_POD_NAME = os.getenv("OPMON_PROBE_POD_NAME", "prometheus-test")
    VERIFY_JOB_NAME = os.getenv("OPMON_VERIFY_JOB_NAME", "verify-metrics")
    READY_TIMEOUT = float(os.getenv("OPMON_READY_TIMEOUT", "60"))
    POST_READY_DELAY = float(os.getenv("OPMON_POST_READY_DELAY", "5"))
    SETTLE_TIME = float(os.getenv("OPMON_SETTLE_TIME", "10"))
    POLL_INTERVAL = float(os.getenv("OPMON_POLL_INTERVAL", "2"))
    EXTERNAL_PROBE = _get_bool("OPMON_EXTERNAL_PROBE", "True")
    VERIFY_CERTS = _get_bool("OPMON_VERIFY_CERTS", "False")

    # --- Output ---
    OUTPUT_DIR = os.getenv("OPMON_OUTPUT_DIR", ".")

    # --- HTTP client ---
    DEFAULT_TIMEOUT_CONNECT = float(os.getenv("DEFAULT_TIMEOUT_CONNECT", "5"))
    DEFAULT_TIMEOUT_READ = float(os.getenv("DEFAULT_TIMEOUT_READ", "15"))
    USER_AGENT = os.getenv("USER_AGENT", "opmon/0.1")

    def validate_instance(self):
        if not re.match(DURATION_PATTERN, self.TOKEN_DURATION.lower()):
            raise ValueError("OPMON_TOKEN_DURATION format is invalid. Use 's', 'm', 'h' or 'd' (e.g. '87600h').")
        if not 0 < self.PROMETHEUS_SERVICE_PORT < 65536:
            raise ValueError("OPMON_PROMETHEUS_SERVICE_PORT must be a valid TCP port.")
        for name in ("READY_TIMEOUT", "POST_READY_DELAY", "SETTLE_TIME", "POLL_INTERVAL"):
            if getattr(self, name) < 0:
                raise ValueError(f"OPMON_{name} must not be negative.")
        if self.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            logging.warning("Unknown LOG_LEVEL '%s'.", self.LOG_LEVEL)


# Instantiate the config to be imported by other modules
config = Config()
config.validate_instance()
