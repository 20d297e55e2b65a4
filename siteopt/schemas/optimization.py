"""Agent records and optimization outcomes."""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Agent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    title: str
    description: str
    image_url: str = Field(alias="imageUrl")
    status: Optional[Literal["beta", "stable"]] = None
    capabilities: list[str] = Field(default_factory=list)


class OptimizationSuggestion(BaseModel):
    type: str
    title: str
    description: str
    impact: Literal["high", "medium", "low"]
    implementation: str


Metrics = dict[str, Union[int, float]]


class OptimizationOutcome(BaseModel):
    """Static agent bundle plus the note tying it to the site description."""

    model_config = ConfigDict(populate_by_name=True)

    suggestions: list[OptimizationSuggestion] = Field(default_factory=list)
    optimized_description: str = Field(default="", alias="optimizedDescription")
    performance_metrics: Metrics = Field(default_factory=dict, alias="performanceMetrics")
