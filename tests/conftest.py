"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import func, select

from siteopt.core.config import get_settings
from siteopt.core.database import close_db, get_session_factory, init_db
from siteopt.core.flags import get_flags
from siteopt.factory import create_app
from siteopt.models.session import OptimizationResult


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Every test gets its own SQLite file and no real API keys."""
    monkeypatch.chdir(tmp_path)  # keep any local .env out of the picture
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'siteopt.db'}")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("AIML_API_KEY", "")
    get_settings.cache_clear()
    get_flags.cache_clear()
    yield
    get_settings.cache_clear()
    get_flags.cache_clear()


@pytest_asyncio.fixture
async def database():
    """Fresh schema; yields nothing. Use db or api_client to talk to it."""
    await close_db()
    await init_db()
    yield
    await close_db()


@pytest_asyncio.fixture
async def db(database):
    async with get_session_factory()() as session:
        yield session


@pytest_asyncio.fixture
async def api_client(database):
    """httpx client wired straight into the ASGI app."""
    app = create_app()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def count_results(database):
    """Counts optimization_results rows through a fresh session (sees committed rows only)."""
    async def count() -> int:
        async with get_session_factory()() as session:
            result = await session.execute(select(func.count()).select_from(OptimizationResult))
            return result.scalar_one()
    return count
