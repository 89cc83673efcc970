from __future__ import annotations

from enum import Enum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

from applife.core.models import ComponentInstance, ComponentState
from applife.utils.diagnostics import LifecycleDiagnostic


class LifecycleStatus(str, Enum):
    """Outcome of one run_lifecycle() call."""

    SUCCESS = "success"
    DEGRADED = "degraded"


class StartOutcome(BaseModel):
    """Settled result of one start hook."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    identity: Any
    state: ComponentState
    error: str | None = None
    diagnostic: LifecycleDiagnostic | None = None


class LifecycleReport(BaseModel):
    """Host-facing summary of a completed run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    app_name: str = "AppLife App"
    status: LifecycleStatus = LifecycleStatus.SUCCESS
    construction_order: List[Any] = Field(default_factory=list)
    start_outcomes: List[StartOutcome] = Field(default_factory=list)
    components: List[ComponentInstance] = Field(default_factory=list)
    diagnostics: List[LifecycleDiagnostic] = Field(default_factory=list)

    @property
    def failed_starts(self) -> List[Any]:
        return [o.identity for o in self.start_outcomes if o.state == ComponentState.START_FAILED]
