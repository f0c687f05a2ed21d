from string import Template

from ..models.endpoints import PrometheusEndpoints
from ..models.settings import SetupSettings
from .base_artifact import BaseArtifact

QUERIES_TEMPLATE = Template(
    """# Sample Prometheus Queries for OpenShift Operator Monitoring

# Run any query directly against Prometheus:
#   curl -k -H "Authorization: Bearer $$(cat $token_file)" \\
#     '$query_url'

# Query 1: Check all operators' availability status
cluster_operator_conditions{condition="Available"}

# Query 2: Find degraded operators
cluster_operator_conditions{condition="Degraded", value="1"}

# Query 3: Monitor operators in progressing state
cluster_operator_conditions{condition="Progressing", value="1"}

# Query 4: Critical operators health
cluster_operator_conditions{name=~"authentication|kube-apiserver|etcd|dns|ingress|network"}

# Query 5: Count of unavailable operators
count(cluster_operator_conditions{condition="Available", value="0"})

# Query 6: Operators unavailable for more than 5 minutes
cluster_operator_conditions{condition="Available", value="0"} [5m]

---

# Sample DQL Queries for Dynatrace Dashboards

// Query 1: All operators status
fetch dt.metrics.cluster_operator_conditions
| fieldsAdd operator = name, condition, status = value
| pivot condition, avg(status), by: {operator}

// Query 2: Critical operators only
fetch dt.metrics.cluster_operator_conditions
| filter name in ["authentication", "kube-apiserver", "etcd", "dns", "ingress"]
| fieldsAdd operator = name, condition, status = value
| pivot condition, avg(status), by: {operator}

// Query 3: Degraded operators alert
fetch dt.metrics.cluster_operator_conditions
| filter condition == "Degraded" and value == 1
| summarize count = count(), by: {name}

// Query 4: Availability trend over 24h
timeseries available = avg(cluster_operator_conditions{condition="Available"}), by: {name}, interval: 5m

// Query 5: Time in degraded state
fetch dt.metrics.cluster_operator_conditions
| filter condition == "Degraded" and value == 1
| fieldsAdd operator = name, degraded_since = timestamp
"""
)


class SampleQueriesArtifact(BaseArtifact):
    """PromQL and DQL examples for operator health; references the token file rather than the token."""

    settings_field = "sample_queries_file"

    def render(self, token: str, endpoints: PrometheusEndpoints, settings: SetupSettings) -> str:
        return QUERIES_TEMPLATE.substitute(
            query_url=endpoints.query_url("cluster_operator_up", external=endpoints.has_external),
            token_file=settings.token_file,
        )
