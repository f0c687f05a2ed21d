from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PrometheusEndpoints(BaseModel):
    """
    Reachable URLs of the Prometheus query API.

    Attributes:
        external: URL of the externally exposed route, if the cluster has one
        internal: In-cluster service URL, always present
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    external: Optional[str] = Field(None, description="External route URL")
    internal: str = Field(..., description="In-cluster service URL")

    @property
    def has_external(self) -> bool:
        return bool(self.external)

    def query_url(self, query: str, external: bool = False) -> str:
        base = self.external if external else self.internal
        return f"{base.rstrip('/')}/api/v1/query?query={query}"
