"""
Session API.

POST /v1/session  — Get-or-create the domain's session, optionally upsert one step
GET  /v1/session  — Current session + full history for a domain
PUT  /v1/session  — Append an optimization result to the current session
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import get_db
from ..core.errors import AppError, ValidationError
from ..schemas.envelope import Envelope, ok
from ..schemas.optimization import Metrics, OptimizationSuggestion
from ..schemas.session import SessionOverview, SessionSnapshot
from ..schemas.steps import parse_step
from ..services import session_store

logger = logging.getLogger(__name__)

session_router = APIRouter(prefix="/session", tags=["session"])


def _require_domain(domain: Optional[str]) -> str:
    domain = (domain or "").strip().lower()
    if not domain:
        raise ValidationError("Domain is required", "MISSING_DOMAIN")
    return domain


# ── Upsert ───────────────────────────────────────────────────────────

class SessionUpsertRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    domain: Optional[str] = None
    # Left untyped so shape errors surface as INVALID_STEP, not a generic 422
    step_number: Optional[Any] = Field(default=None, alias="stepNumber")
    step_data: Optional[Any] = Field(default=None, alias="stepData")


@session_router.post("", response_model=Envelope[Optional[SessionSnapshot]])
async def upsert_session(
    request: SessionUpsertRequest,
    db: AsyncSession = Depends(get_db),
):
    """Look up (or create) the domain's current session and write a step into it."""
    domain = _require_domain(request.domain)

    step = None
    if request.step_number is not None or request.step_data is not None:
        step = parse_step(request.step_number, request.step_data)

    try:
        session_id = await session_store.get_or_create_session(db, domain)
        if step is not None:
            await session_store.upsert_step(db, session_id, step)
        await db.commit()
        snapshot = await session_store.get_latest(db, domain)
    except AppError:
        raise
    except Exception as e:
        logger.error("Error handling session for %s: %s", domain, e)
        raise AppError("Failed to handle session", "SESSION_ERROR") from e

    return ok(snapshot)


# ── Read ─────────────────────────────────────────────────────────────

@session_router.get("", response_model=Envelope[SessionOverview])
async def read_session(
    domain: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Current session (or null) plus every session the domain has had."""
    domain = _require_domain(domain)

    try:
        current = await session_store.get_latest(db, domain)
        history = await session_store.get_history(db, domain)
    except Exception as e:
        logger.error("Error getting session data for %s: %s", domain, e)
        raise AppError("Failed to get session data", "SESSION_ERROR") from e

    return ok(SessionOverview(current_session=current, history=history))


# ── Finalize ─────────────────────────────────────────────────────────

_SUGGESTIONS = TypeAdapter(list[OptimizationSuggestion])
_METRICS = TypeAdapter(Metrics)


class FinalizeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    domain: Optional[str] = None
    agent_id: Optional[str] = Field(default=None, alias="agentId")
    # Checked in the handler, after the required fields
    suggestions: Any = None
    metrics: Any = None


@session_router.put("", response_model=Envelope[Optional[SessionSnapshot]])
async def finalize_session(
    request: FinalizeRequest,
    db: AsyncSession = Depends(get_db),
):
    """Persist the optimization result chosen at the end of the wizard."""
    domain = (request.domain or "").strip().lower()
    agent_id = (request.agent_id or "").strip()
    if not domain or not agent_id:
        raise ValidationError("Domain and agent ID are required", "MISSING_PARAMS")

    try:
        suggestions = _SUGGESTIONS.validate_python(request.suggestions or [])
        metrics = _METRICS.validate_python(request.metrics or {})
    except PydanticValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationError(
            f"Invalid optimization result: {where} {first.get('msg', '')}".strip(),
            "INVALID_REQUEST",
        ) from e

    try:
        await session_store.finalize_optimization(
            db, domain, agent_id, suggestions, metrics,
        )
        await db.commit()
        snapshot = await session_store.get_latest(db, domain)
    except AppError:
        raise
    except Exception as e:
        logger.error("Error saving optimization results for %s: %s", domain, e)
        raise AppError("Failed to save optimization results", "OPTIMIZATION_ERROR") from e

    return ok(snapshot)
