"""
FastAPI dependencies. Injected into route handlers.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from .database import get_db as _get_db


async def get_db() -> AsyncSession:
    """Yields an async DB session per request."""
    async for session in _get_db():
        yield session
