from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class WorkloadKind(str, Enum):
    POD = "pod"
    JOB = "job"


class WorkloadSpec(BaseModel):
    """
    Pydantic model describing a short-lived verification workload.

    Attributes:
        kind: Either a long-running pod used for exec, or a batch job
        name: Fixed resource name
        namespace: Namespace the workload runs in
        service_account: Service account the workload runs under
        image: Container image
        command: Container command
        backoff_limit: Retries for jobs
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: WorkloadKind = Field(..., description="Workload kind")
    name: str = Field(..., description="Resource name")
    namespace: str = Field(..., description="Namespace")
    service_account: str = Field(..., description="Service account name")
    image: str = Field("curlimages/curl:latest", description="Container image")
    command: List[str] = Field(default_factory=list, description="Container command")
    backoff_limit: int = Field(1, ge=0, description="Job retries")
    container_name: str = Field("curl", description="Container name")


class WorkloadResult(BaseModel):
    """Outcome of an ephemeral workload: a status token and the raw output it produced."""

    model_config = ConfigDict(frozen=True)

    status: str = Field("", description="HTTP code for probes, SUCCESS/FAILED for verification")
    output: str = Field("", description="Raw output")
