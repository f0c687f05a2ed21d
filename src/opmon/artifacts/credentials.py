"""
Artifacts holding the credential and connection details for the ActiveGate.
"""

from ..models.endpoints import PrometheusEndpoints
from ..models.settings import SetupSettings
from .base_artifact import BaseArtifact

EXTERNAL_UNAVAILABLE = "not available (no route found)"


class TokenArtifact(BaseArtifact):
    """The raw bearer token, one line, readable only by the owner."""

    settings_field = "token_file"
    file_mode = 0o600

    def render(self, token: str, endpoints: PrometheusEndpoints, settings: SetupSettings) -> str:
        return f"{token}\n"


class EndpointsArtifact(BaseArtifact):
    """Descriptor listing the external route (if any) and the in-cluster service URL."""

    settings_field = "endpoints_file"

    def render(self, token: str, endpoints: PrometheusEndpoints, settings: SetupSettings) -> str:
        external = endpoints.external or EXTERNAL_UNAVAILABLE
        return (
            "Prometheus Endpoints for Dynatrace Configuration:\n"
            "\n"
            "External Route (if accessible from ActiveGate):\n"
            f"External: {external}\n"
            "\n"
            "Internal Service (if ActiveGate is in cluster):\n"
            f"Internal: {endpoints.internal}\n"
            "\n"
            "Note: Use the internal endpoint if your ActiveGate is deployed within the OpenShift cluster.\n"
            "Use the external endpoint if ActiveGate is deployed outside the cluster.\n"
        )
