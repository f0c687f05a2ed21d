from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from .endpoints import PrometheusEndpoints


class StepStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    INFO = "info"


class StepOutcome(BaseModel):
    step: str = Field(..., description="Workflow step title")
    status: StepStatus = Field(StepStatus.OK, description="Outcome of the step")
    message: str = Field("", description="Human readable outcome")


class SetupReport(BaseModel):
    """
    Everything a completed run produced: per-step outcomes, written files and resolved endpoints.

    A run with warnings still completed; callers inspect `has_warnings` or the outcomes
    to tell a clean run from a degraded one.
    """

    outcomes: List[StepOutcome] = Field(default_factory=list)
    artifacts: List[Path] = Field(default_factory=list)
    endpoints: Optional[PrometheusEndpoints] = None
    user: Optional[str] = None

    def add(self, step: str, status: StepStatus, message: str) -> StepOutcome:
        outcome = StepOutcome(step=step, status=status, message=message)
        self.outcomes.append(outcome)
        return outcome

    @property
    def warnings(self) -> List[StepOutcome]:
        return [o for o in self.outcomes if o.status == StepStatus.WARNING]

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
