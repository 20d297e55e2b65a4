"""
Step payloads — one variant per wizard step.

    1 → UrlStep          {"url": ...}
    2 → AgentStep        {"agentId": ...}
    3 → DescriptionStep  {"siteDescription": ...}
    4 → ContextStep      {"optimizationContext": {questionType: [str, ...]}}

Payloads are validated with parse_step() before they reach the store and
are persisted in their camelCase wire form (dump_step()).
"""

from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ValidationError
from .suggestions import QuestionType


class _StepBase(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    step_number: ClassVar[int]


class UrlStep(_StepBase):
    step_number: ClassVar[int] = 1

    url: str = Field(min_length=1)


class AgentStep(_StepBase):
    step_number: ClassVar[int] = 2

    agent_id: str = Field(alias="agentId", min_length=1)


class DescriptionStep(_StepBase):
    step_number: ClassVar[int] = 3

    site_description: str = Field(alias="siteDescription")


class ContextStep(_StepBase):
    step_number: ClassVar[int] = 4

    optimization_context: dict[QuestionType, list[str]] = Field(alias="optimizationContext")


StepPayload = Union[UrlStep, AgentStep, DescriptionStep, ContextStep]

STEP_TYPES: dict[int, type[_StepBase]] = {
    cls.step_number: cls for cls in (UrlStep, AgentStep, DescriptionStep, ContextStep)
}


def parse_step(step_number: Any, data: Any) -> StepPayload:
    """Validate a raw (step_number, data) pair. Raises ValidationError(INVALID_STEP)."""
    # bool is an int subclass; True must not mean step 1
    if isinstance(step_number, bool) or not isinstance(step_number, int):
        raise ValidationError(f"stepNumber must be an integer, got {step_number!r}", "INVALID_STEP")

    model = STEP_TYPES.get(step_number)
    if model is None:
        raise ValidationError(
            f"Unknown stepNumber {step_number}; expected one of {sorted(STEP_TYPES)}",
            "INVALID_STEP",
        )
    if not isinstance(data, dict):
        raise ValidationError(f"stepData for step {step_number} must be an object", "INVALID_STEP")

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationError(
            f"Invalid stepData for step {step_number}: {where} {first.get('msg', '')}".strip(),
            "INVALID_STEP",
        ) from e


def dump_step(step: StepPayload) -> dict:
    """Wire/storage form of a step payload."""
    return step.model_dump(by_alias=True, mode="json")
