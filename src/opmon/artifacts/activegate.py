from string import Template

from ..models.endpoints import PrometheusEndpoints
from ..models.settings import SetupSettings
from .base_artifact import BaseArtifact

OPERATOR_METRICS = (
    "cluster_operator_conditions",
    "cluster_operator_up",
    "cluster_version_available_updates",
)

ACTIVEGATE_TEMPLATE = Template(
    """# ActiveGate Prometheus Configuration for OpenShift Operators
# Deploy this on your Dynatrace ActiveGate

# Option 1: Using custom.properties file
# Location: /var/lib/dynatrace/remotepluginmodule/agent/conf/custom.properties

# Add the following to custom.properties:
[prometheus_openshift_operators]
enabled=true
endpoint=$endpoint
interval=60s
verify_ssl=true
bearer_token=$token

# Metric filters (optional - to reduce cardinality)
metric_filter=$metric_filter
$external_note
---

# Option 2: Using Dynatrace UI Configuration
# Navigate to: Settings > Cloud and virtualization > Prometheus

Configuration Values:
  Endpoint URL: $endpoint
  Authentication: Bearer token
  Token: $token
  Scrape interval: 60 seconds

  Metrics to include (optional):
$metric_list

---

# Option 3: Using Kubernetes ConfigMap (if ActiveGate is in cluster)

apiVersion: v1
kind: ConfigMap
metadata:
  name: prometheus-config
  namespace: dynatrace
data:
  custom.properties: |
    [prometheus_openshift_operators]
    enabled=true
    endpoint=$endpoint
    interval=60s
    verify_ssl=true
    bearer_token=$token
"""
)


class ActiveGateConfigArtifact(BaseArtifact):
    """ActiveGate scrape configuration in its three deployment flavours."""

    settings_field = "activegate_config_file"
    # The document embeds the token.
    file_mode = 0o600

    def render(self, token: str, endpoints: PrometheusEndpoints, settings: SetupSettings) -> str:
        external_note = ""
        if endpoints.has_external:
            external_note = (
                "\n# ActiveGate outside the cluster? Use the external route instead:\n"
                f"# endpoint={endpoints.external}\n"
            )
        return ACTIVEGATE_TEMPLATE.substitute(
            endpoint=endpoints.internal,
            token=token,
            metric_filter="|".join(OPERATOR_METRICS),
            metric_list="\n".join(f"    - {name}" for name in OPERATOR_METRICS),
            external_note=external_note,
        )
