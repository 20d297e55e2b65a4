"""
Wizard driver — owns a WizardState and turns user actions into state
changes plus background writes.

    wizard = Wizard(api)
    await wizard.set_url("https://example.com")    # loads the stored session
    wizard.choose_agent("max")
    wizard.set_description("Online store for ...")
    outcome = wizard.complete()
    await wizard.writer.drain()

Every handler updates state in memory first. The matching write is handed
to the StepWriter and may fail without affecting the in-memory state,
which stays authoritative for the rest of the run.
"""

import logging
from dataclasses import replace
from typing import Optional, Union

from ..client.api import SiteOptClient
from ..core.errors import ValidationError
from ..schemas.optimization import OptimizationOutcome
from ..schemas.session import SessionSnapshot
from ..schemas.steps import AgentStep, ContextStep, DescriptionStep, StepPayload, UrlStep
from ..schemas.suggestions import QuestionType
from ..services.catalog import AgentCatalog, UnknownAgentError, get_catalog
from ..services.suggestions import coerce_question_type
from .persistence import StepWriter
from .state import WizardState, apply_step, domain_from_url, rebuild_state

logger = logging.getLogger(__name__)


class Wizard:

    def __init__(
        self,
        api: SiteOptClient,
        writer: Optional[StepWriter] = None,
        catalog: Optional[AgentCatalog] = None,
    ):
        self.api = api
        self.writer = writer or StepWriter()
        self.catalog = catalog or get_catalog()
        self.state = WizardState()

    # ── Loading ──────────────────────────────────────────────────────

    async def load(self, domain: str) -> WizardState:
        """Replace the state wholesale with the domain's stored session (if any)."""
        snapshot = None
        try:
            overview = await self.api.get_session(domain)
            snapshot = overview.current_session
        except Exception as e:
            logger.warning("Could not load session for %s, starting fresh: %s", domain, e)

        self.state = rebuild_state(snapshot, domain, self.catalog)
        logger.info(
            "Loaded %s (session=%s, agent=%s)",
            domain, self.state.session_id, self.state.agent.id if self.state.agent else None,
        )
        return self.state

    # ── Step handlers ────────────────────────────────────────────────

    async def set_url(self, url: str) -> WizardState:
        """Step 1. A new domain triggers a reload; the typed URL then wins over the stored one."""
        domain = domain_from_url(url)
        if not domain:
            raise ValidationError(f"Cannot determine a domain from {url!r}", "MISSING_DOMAIN")
        if domain != self.state.domain:
            await self.load(domain)
        return self._record(UrlStep(url=url))

    def choose_agent(self, agent_id: str) -> WizardState:
        """Step 2."""
        if self.catalog.get(agent_id) is None:
            raise UnknownAgentError(agent_id)
        return self._record(AgentStep(agent_id=agent_id))

    def set_description(self, description: str) -> WizardState:
        """Step 3."""
        return self._record(DescriptionStep(site_description=description))

    def set_context(self, context: dict[Union[str, QuestionType], list[str]]) -> WizardState:
        """Step 4. Keys are question types, values the answers the user kept."""
        return self._record(ContextStep(optimization_context=context))

    # ── Content helpers ──────────────────────────────────────────────

    async def analyze(self) -> str:
        """Extract the site's content and return the drafted description. Doesn't record step 3."""
        info, description = await self.api.analyze(self.state.url)
        self.state = replace(self.state, website_info=info)
        return description

    async def suggest(self, question_type: Union[str, QuestionType]) -> list[str]:
        """Suggestions for one question; [] whenever the service can't provide three."""
        qtype = coerce_question_type(question_type)
        try:
            return await self.api.suggestions(qtype, self.state.url, self.state.website_info)
        except Exception as e:
            logger.warning("Suggestions request failed (%s): %s", question_type, e)
            return []

    # ── Completion ───────────────────────────────────────────────────

    def complete(self) -> OptimizationOutcome:
        """Compose the chosen agent's optimization and queue it for the session."""
        if self.state.agent is None:
            raise ValidationError("Choose an agent before completing the wizard", "MISSING_PARAMS")

        outcome = self.catalog.compose(self.state.agent.id, self.state.site_description or "")
        self.state = replace(self.state, optimization_result=outcome)

        domain, agent_id = self.state.domain, self.state.agent.id
        self.writer.submit(
            f"finalize {domain}",
            lambda: self.api.finalize(domain, agent_id, outcome),
        )
        return outcome

    # ── Internals ────────────────────────────────────────────────────

    def _record(self, step: StepPayload) -> WizardState:
        if not self.state.domain:
            raise ValidationError("Set a URL before other steps", "MISSING_DOMAIN")

        self.state = apply_step(self.state, step, self.catalog)

        domain = self.state.domain

        async def write():
            snapshot = await self.api.upsert_step(domain, step)
            self._adopt_session(domain, snapshot)

        self.writer.submit(f"step {step.step_number} {domain}", write)
        return self.state

    def _adopt_session(self, domain: str, snapshot: Optional[SessionSnapshot]) -> None:
        """The first write for a new domain creates its session; remember the id."""
        if snapshot is None or self.state.domain != domain:
            return
        if self.state.session_id != snapshot.id:
            self.state = replace(self.state, session_id=snapshot.id)
