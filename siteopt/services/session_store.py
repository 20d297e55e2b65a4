"""
Session store — durable per-domain wizard sessions.

A domain may own several sessions. The most recently created one is the
current session; the others are only exposed through history. Nothing
here merges or deduplicates sessions.

Used by:
  - /v1/session endpoints (upsert a step, read current + history, finalize)
"""

import logging
from collections import defaultdict
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.session import WizardSession, SessionStep, OptimizationResult
from ..schemas.optimization import Metrics, OptimizationSuggestion
from ..schemas.session import (
    OptimizationRecord,
    SessionHistoryEntry,
    SessionSnapshot,
    StepRecord,
)
from ..schemas.steps import StepPayload, dump_step, parse_step

logger = logging.getLogger(__name__)


# ── Writes ───────────────────────────────────────────────────────────

async def create_session(db: AsyncSession, domain: str) -> int:
    """Insert a new session row for the domain. Never looks at existing rows."""
    session = WizardSession(domain=domain)
    db.add(session)
    await db.flush()
    logger.info("Created session %d for %s", session.id, domain)
    return session.id


async def get_or_create_session(db: AsyncSession, domain: str) -> int:
    """Id of the current session for the domain, creating one on first contact."""
    current = await _latest_session(db, domain)
    if current is not None:
        return current.id
    return await create_session(db, domain)


def _insert_for(db: AsyncSession):
    """Dialect insert() that supports ON CONFLICT (Postgres or SQLite)."""
    if db.bind.dialect.name == "postgresql":
        return pg_insert
    return sqlite_insert


async def upsert_step(db: AsyncSession, session_id: int, step: StepPayload) -> None:
    """
    Write a step payload, overwriting whatever the session had for that step.
    Replaying the same call leaves the same stored value. A single
    INSERT ... ON CONFLICT statement, so concurrent first writes can't collide.
    """
    data = dump_step(step)
    now = utcnow()

    stmt = _insert_for(db)(SessionStep).values(
        session_id=session_id,
        step_number=step.step_number,
        step_data=data,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["session_id", "step_number"],
        set_={"step_data": stmt.excluded.step_data, "updated_at": stmt.excluded.updated_at},
    )
    await db.execute(stmt)
    logger.debug("Upserted step %d for session %d", step.step_number, session_id)


async def finalize_optimization(
    db: AsyncSession,
    domain: str,
    agent_id: str,
    suggestions: list[OptimizationSuggestion] | list[dict],
    metrics: Metrics,
) -> OptimizationResult:
    """
    Append an optimization result to the domain's current session.
    Raises NotFoundError (no write) when the domain has no session.
    """
    if not agent_id:
        raise ValidationError("Agent ID is required", "MISSING_PARAMS")

    current = await _latest_session(db, domain)
    if current is None:
        raise NotFoundError(f"Session not found for {domain}", "SESSION_NOT_FOUND")

    row = OptimizationResult(
        session_id=current.id,
        agent_id=agent_id,
        suggestions=[
            s.model_dump(mode="json") if isinstance(s, OptimizationSuggestion) else dict(s)
            for s in suggestions
        ],
        metrics=dict(metrics),
    )
    db.add(row)
    await db.flush()
    logger.info("Saved optimization result for session %d (agent=%s)", current.id, agent_id)
    return row


# ── Reads ────────────────────────────────────────────────────────────

async def get_latest(db: AsyncSession, domain: str) -> Optional[SessionSnapshot]:
    """
    Current session for the domain with its steps and latest result.
    Returns None if the domain has never been seen.
    """
    session = await _latest_session(db, domain)
    if session is None:
        return None

    steps = await _steps_by_session(db, [session.id])
    results = await _results_by_session(db, [session.id])
    session_results = results.get(session.id, [])

    return SessionSnapshot(
        id=session.id,
        domain=session.domain,
        created_at=session.created_at,
        steps=steps.get(session.id, []),
        optimization_result=session_results[0] if session_results else None,
    )


async def get_history(db: AsyncSession, domain: str) -> list[SessionHistoryEntry]:
    """All sessions for the domain, newest first, each with all of its results."""
    result = await db.execute(
        select(WizardSession)
        .where(WizardSession.domain == domain)
        .order_by(WizardSession.created_at.desc(), WizardSession.id.desc())
    )
    sessions = result.scalars().all()
    if not sessions:
        return []

    ids = [s.id for s in sessions]
    steps = await _steps_by_session(db, ids)
    results = await _results_by_session(db, ids)

    history = []
    for s in sessions:
        session_results = results.get(s.id, [])
        history.append(
            SessionHistoryEntry(
                id=s.id,
                domain=s.domain,
                created_at=s.created_at,
                steps=steps.get(s.id, []),
                optimization_result=session_results[0] if session_results else None,
                optimization_results=session_results,
            )
        )
    return history


# ── Helpers ──────────────────────────────────────────────────────────

async def _latest_session(db: AsyncSession, domain: str) -> Optional[WizardSession]:
    result = await db.execute(
        select(WizardSession)
        .where(WizardSession.domain == domain)
        .order_by(WizardSession.created_at.desc(), WizardSession.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _steps_by_session(db: AsyncSession, session_ids: list[int]) -> dict[int, list[StepRecord]]:
    result = await db.execute(
        select(SessionStep)
        .where(SessionStep.session_id.in_(session_ids))
        .order_by(SessionStep.session_id, SessionStep.step_number.asc())
        # Steps are written with Core upserts; refresh any rows already in the identity map
        .execution_options(populate_existing=True)
    )
    grouped: dict[int, list[StepRecord]] = defaultdict(list)
    for row in result.scalars().all():
        try:
            step = parse_step(row.step_number, row.step_data)
        except ValidationError as e:
            # Rows written before validation existed; treat as "not yet set"
            logger.warning("Skipping unreadable step %d of session %d: %s", row.step_number, row.session_id, e.message)
            continue
        grouped[row.session_id].append(StepRecord(step_number=row.step_number, data=dump_step(step)))
    return grouped


async def _results_by_session(
    db: AsyncSession, session_ids: list[int]
) -> dict[int, list[OptimizationRecord]]:
    result = await db.execute(
        select(OptimizationResult)
        .where(OptimizationResult.session_id.in_(session_ids))
        .order_by(OptimizationResult.created_at.desc(), OptimizationResult.id.desc())
    )
    grouped: dict[int, list[OptimizationRecord]] = defaultdict(list)
    for row in result.scalars().all():
        grouped[row.session_id].append(
            OptimizationRecord(
                agent_id=row.agent_id,
                suggestions=row.suggestions or [],
                metrics=row.metrics or {},
                created_at=row.created_at,
            )
        )
    return grouped
