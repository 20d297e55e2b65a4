"""
All database models. Imported here so Base.metadata sees them for create_all().
"""

from .base import TimestampedBase
from .session import WizardSession, SessionStep, OptimizationResult

__all__ = [
    "TimestampedBase",
    "WizardSession", "SessionStep", "OptimizationResult",
]
