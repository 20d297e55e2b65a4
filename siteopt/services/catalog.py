"""
Optimization catalog. A fixed set of agents, each with a static bundle of
suggestions and metrics. Composition is pure: no I/O, same input → same output.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..schemas.optimization import Agent, Metrics, OptimizationOutcome, OptimizationSuggestion

logger = logging.getLogger(__name__)


class UnknownAgentError(LookupError):
    """An agent id outside the catalog reached composition. Upstream data is wrong."""

    def __init__(self, agent_id: str):
        super().__init__(f"Unknown agent '{agent_id}'")
        self.agent_id = agent_id


@dataclass(frozen=True)
class CatalogEntry:
    agent: Agent
    suggestions: tuple[OptimizationSuggestion, ...]
    metrics: tuple[tuple[str, int], ...]


class AgentCatalog:
    """Lookup table for agents and their optimization bundles."""

    def __init__(self, entries: list[CatalogEntry]):
        self._entries: dict[str, CatalogEntry] = {}
        for entry in entries:
            if entry.agent.id in self._entries:
                raise ValueError(f"Duplicate agent id '{entry.agent.id}'")
            self._entries[entry.agent.id] = entry

    def get(self, agent_id: str) -> Optional[Agent]:
        """Get an agent by id. Returns None if not found."""
        entry = self._entries.get(agent_id)
        return entry.agent if entry else None

    def list_agents(self) -> list[Agent]:
        return [e.agent for e in self._entries.values()]

    def compose(self, agent_id: str, site_description: str) -> OptimizationOutcome:
        """
        Copy the agent's bundle and attach a note combining the site
        description with the agent's capabilities.
        Raises UnknownAgentError for ids outside the catalog.
        """
        entry = self._entries.get(agent_id)
        if entry is None:
            raise UnknownAgentError(agent_id)

        agent = entry.agent
        metrics: Metrics = dict(entry.metrics)
        return OptimizationOutcome(
            suggestions=[s.model_copy() for s in entry.suggestions],
            performance_metrics=metrics,
            optimized_description=(
                f"{site_description}\n\n"
                f"Optimized for {agent.name}'s specialties: {', '.join(agent.capabilities)}."
            ),
        )


# ── Built-in agents ──────────────────────────────────────────────────

def _s(type_: str, title: str, description: str, impact: str, implementation: str) -> OptimizationSuggestion:
    return OptimizationSuggestion(
        type=type_, title=title, description=description,
        impact=impact, implementation=implementation,
    )


BUILTIN_ENTRIES = [
    CatalogEntry(
        agent=Agent(
            id="liv",
            name="Liv",
            title="Personalization Agent",
            description=(
                "Liv creates tailored web experiences for every visitor, leveraging insights "
                "from ads and user behavior to deliver truly personalized pages that boost conversion."
            ),
            image_url="/agents/liv.jpg",
            capabilities=["Personalization", "User Behavior Analysis", "Conversion Optimization"],
        ),
        suggestions=(
            _s("personalization", "Implement Dynamic Content",
               "Personalize content based on user behavior and preferences", "high",
               "Use user segmentation and dynamic content blocks"),
            _s("conversion", "Smart CTAs",
               "Adapt call-to-action buttons based on user journey stage", "high",
               "Implement smart CTAs using user behavior data"),
            _s("engagement", "Personalized Recommendations",
               "Show tailored product/content recommendations", "medium",
               "Integrate recommendation engine based on user preferences"),
        ),
        metrics=(("personalization", 92), ("engagement", 88), ("conversion", 95), ("retention", 90)),
    ),
    CatalogEntry(
        agent=Agent(
            id="max",
            name="Max",
            title="Experimentation Agent",
            description=(
                "Max drives results through continuous A/B testing and data analysis, "
                "fine-tuning every element of your website to maximize conversions."
            ),
            image_url="/agents/max.jpg",
            capabilities=["A/B Testing", "Data Analysis", "Conversion Rate Optimization"],
        ),
        suggestions=(
            _s("testing", "A/B Test Homepage Layout",
               "Test different layouts to optimize conversion rate", "high",
               "Set up A/B test variants for homepage components"),
            _s("analytics", "Enhanced Conversion Tracking",
               "Implement detailed funnel analytics", "high",
               "Set up conversion funnels and event tracking"),
            _s("optimization", "Form Optimization",
               "Optimize form fields and validation for better completion rates", "medium",
               "Implement progressive form filling and smart validation"),
        ),
        metrics=(("conversionRate", 95), ("bounceRate", 88), ("engagement", 92), ("retention", 94)),
    ),
    CatalogEntry(
        agent=Agent(
            id="aya",
            name="Aya",
            title="Web Performance Agent",
            description=(
                "Aya ensures your website runs at peak performance, proactively monitoring "
                "speed, and reliability to deliver a seamless user experience."
            ),
            image_url="/agents/aya.jpg",
            status="beta",
            capabilities=["Performance Monitoring", "Speed Optimization", "Reliability Analysis"],
        ),
        suggestions=(
            _s("performance", "Image Optimization",
               "Optimize and lazy load images for faster page loads", "high",
               "Serve responsive images and lazy load below-the-fold media"),
            _s("speed", "Core Web Vitals Optimization",
               "Improve LCP, INP, and CLS metrics", "high",
               "Optimize critical rendering path and layout stability"),
            _s("reliability", "Error Monitoring Setup",
               "Implement real-time error tracking and monitoring", "medium",
               "Set up error tracking and monitoring tools"),
        ),
        metrics=(("speed", 96), ("reliability", 98), ("accessibility", 94), ("bestPractices", 95)),
    ),
]


# ── Global catalog ───────────────────────────────────────────────────

_catalog: Optional[AgentCatalog] = None


def get_catalog() -> AgentCatalog:
    """Get or create the global agent catalog."""
    global _catalog
    if _catalog is None:
        _catalog = AgentCatalog(BUILTIN_ENTRIES)
        logger.info("Agent catalog ready: %d agents", len(_catalog.list_agents()))
    return _catalog


def compose_optimization(agent_id: str, site_description: str) -> OptimizationOutcome:
    return get_catalog().compose(agent_id, site_description)
