"""
Transient wizard state and the pure functions that rebuild it from stored steps.

apply_step() is the only way a step changes state: it sets the fields the
step carries and leaves everything else alone, so a session that never
reached step 3 simply has no description yet.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Optional
from urllib.parse import urlparse

from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ValidationError
from ..schemas.optimization import Agent, OptimizationOutcome
from ..schemas.session import SessionSnapshot
from ..schemas.steps import AgentStep, ContextStep, DescriptionStep, StepPayload, UrlStep, parse_step
from ..schemas.suggestions import QuestionType, WebsiteInfo
from ..services.catalog import AgentCatalog, get_catalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WizardState:
    domain: str = ""
    url: str = ""
    agent: Optional[Agent] = None
    site_description: Optional[str] = None
    optimization_context: Optional[dict[QuestionType, list[str]]] = None
    optimization_result: Optional[OptimizationOutcome] = None
    website_info: Optional[WebsiteInfo] = None
    session_id: Optional[int] = None


def domain_from_url(url: str) -> str:
    """Hostname of a URL; tolerates scheme-less input like 'example.com/pricing'."""
    url = (url or "").strip()
    if not url:
        return ""
    host = urlparse(url).hostname
    if not host:
        host = re.sub(r"^[a-z]+://", "", url, flags=re.IGNORECASE).split("/")[0].split(":")[0]
    return host.lower()


def apply_step(
    state: WizardState,
    step: StepPayload,
    catalog: Optional[AgentCatalog] = None,
) -> WizardState:
    """Pure reducer: (state, step) → new state."""
    if isinstance(step, UrlStep):
        return replace(state, url=step.url)

    if isinstance(step, AgentStep):
        agent = (catalog or get_catalog()).get(step.agent_id)
        if agent is None:
            logger.warning("Stored agent '%s' is not in the catalog; leaving agent unset", step.agent_id)
            return state
        return replace(state, agent=agent)

    if isinstance(step, DescriptionStep):
        return replace(state, site_description=step.site_description)

    if isinstance(step, ContextStep):
        return replace(state, optimization_context=dict(step.optimization_context))

    raise TypeError(f"Unsupported step payload: {type(step).__name__}")


def rebuild_state(
    snapshot: Optional[SessionSnapshot],
    domain: str,
    catalog: Optional[AgentCatalog] = None,
) -> WizardState:
    """Fresh state for a domain, with the stored session replayed in step order."""
    state = WizardState(domain=domain)
    if snapshot is None:
        return state

    state = replace(state, session_id=snapshot.id)
    for record in sorted(snapshot.steps, key=lambda r: r.step_number):
        try:
            step = parse_step(record.step_number, record.data)
        except ValidationError as e:
            logger.warning("Ignoring stored step %d for %s: %s", record.step_number, domain, e.message)
            continue
        state = apply_step(state, step, catalog)

    if snapshot.optimization_result is not None:
        stored = snapshot.optimization_result
        try:
            outcome = OptimizationOutcome(
                suggestions=stored.suggestions,
                performance_metrics=stored.metrics,
                optimized_description="",
            )
        except PydanticValidationError as e:
            logger.warning("Ignoring unreadable optimization result for %s: %s", domain, e)
        else:
            state = replace(state, optimization_result=outcome)

    return state
