"""
FastAPI application factory.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .core.database import init_db, close_db
from .core.errors import register_error_handlers
from .api.router import router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Site Optimizer",
        description="Website optimization wizard backend",
        version="1.0.0",
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url="/redoc" if settings.env == "development" else None,
    )

    # ── CORS ─────────────────────────────────────────────────────
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Errors ───────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Startup ──────────────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup():
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        logger.info("Starting Site Optimizer (env=%s)", settings.env)

        # Create database tables
        await init_db()

        # Build the agent catalog
        from .services.catalog import get_catalog
        get_catalog()

        from .core.flags import get_flags
        flags = get_flags()
        logger.info(
            "Flags: llm=%s ai_description=%s screenshot=%s",
            flags.llm_provider, flags.use_ai_description, flags.use_screenshot,
        )

        logger.info("Site Optimizer is ready")

    # ── Shutdown ─────────────────────────────────────────────────
    @app.on_event("shutdown")
    async def on_shutdown():
        from .services.llm import close_client
        await close_client()
        await close_db()
        logger.info("Site Optimizer shut down")

    # ── Routes ───────────────────────────────────────────────────
    app.include_router(router)

    return app
