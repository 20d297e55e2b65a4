"""
Wizard sessions, their step records, and optimization results.

One domain can own many sessions; the newest is the current one and
the rest are history. Steps are upserted per (session, step_number).
Optimization results are append-only.
"""

from datetime import datetime

from sqlalchemy import String, Integer, JSON, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import TimestampedBase, utcnow


class WizardSession(TimestampedBase):
    __tablename__ = "sessions"

    domain: Mapped[str] = mapped_column(String, nullable=False, index=True)


class SessionStep(TimestampedBase):
    __tablename__ = "session_steps"
    __table_args__ = (
        UniqueConstraint("session_id", "step_number", name="uq_session_steps_session_step"),
    )

    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sessions.id"), nullable=False, index=True
    )
    step_number: Mapped[int] = mapped_column(Integer, nullable=False)
    # camelCase payload, shape fixed per step_number (see schemas.steps)
    step_data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class OptimizationResult(TimestampedBase):
    __tablename__ = "optimization_results"

    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sessions.id"), nullable=False, index=True
    )
    agent_id: Mapped[str] = mapped_column(String, nullable=False)
    suggestions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    metrics: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
