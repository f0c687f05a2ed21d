from .activegate import ActiveGateConfigArtifact
from .base_artifact import BaseArtifact
from .credentials import EndpointsArtifact, TokenArtifact
from .queries import SampleQueriesArtifact

__all__ = [
    "ActiveGateConfigArtifact",
    "BaseArtifact",
    "EndpointsArtifact",
    "SampleQueriesArtifact",
    "TokenArtifact",
]
