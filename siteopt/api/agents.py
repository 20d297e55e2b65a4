"""
Agents API.

GET /v1/agents — Catalog agents offered at step 2
"""

from fastapi import APIRouter

from ..schemas.envelope import Envelope, ok
from ..schemas.optimization import Agent
from ..services.catalog import get_catalog

agents_router = APIRouter(prefix="/agents", tags=["agents"])


@agents_router.get("", response_model=Envelope[list[Agent]])
async def list_agents():
    """List all available agents. Used by the wizard's agent selection step."""
    return ok(get_catalog().list_agents())
