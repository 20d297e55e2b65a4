"""
Main API router. Mounts all sub-routers.
"""

from fastapi import APIRouter

router = APIRouter()


# ── Health ───────────────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {"status": "ok", "service": "siteopt"}


# ── V1 routes ────────────────────────────────────────────────────────

from .agents import agents_router
from .session import session_router
from .site import site_router
from .suggestions import suggestions_router

router.include_router(session_router, prefix="/v1")
router.include_router(suggestions_router, prefix="/v1")
router.include_router(site_router, prefix="/v1")
router.include_router(agents_router, prefix="/v1")
