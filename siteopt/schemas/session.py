"""Session snapshots as returned by the store and sent over the wire."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .optimization import Metrics


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class StepRecord(_Wire):
    step_number: int = Field(alias="stepNumber")
    data: dict


class OptimizationRecord(_Wire):
    agent_id: str = Field(alias="agentId")
    suggestions: list[dict] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=dict)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class SessionSnapshot(_Wire):
    """A session with its steps (ascending) and its most recent optimization result."""

    id: int
    domain: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    steps: list[StepRecord] = Field(default_factory=list)
    optimization_result: Optional[OptimizationRecord] = Field(default=None, alias="optimizationResult")


class SessionHistoryEntry(SessionSnapshot):
    """History view: every optimization result of the session, newest first."""

    optimization_results: list[OptimizationRecord] = Field(
        default_factory=list, alias="optimizationResults"
    )


class SessionOverview(_Wire):
    current_session: Optional[SessionSnapshot] = Field(default=None, alias="currentSession")
    history: list[SessionHistoryEntry] = Field(default_factory=list)
