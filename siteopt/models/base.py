"""
Base model with an integer id and creation timestamp. Every model inherits from this.
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class TimestampedBase(Base):
    """Abstract base. Ids increase with insertion order, so they break created_at ties."""

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    # Set client-side so rows created within the same second still order correctly
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
