"""Watchlist — FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from watchlist import __version__
from watchlist.config import Settings, settings as default_settings
from watchlist.api import auth, health, watchlist
from watchlist.clients.omdb import OmdbClient
from watchlist.database import build_engine, build_sessionmaker, init_db
from watchlist.services.integration_probe import probe_all

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        # Startup: engine + session factory, schema, poster client, probes
        engine = build_engine(settings.database_url, echo=settings.debug)
        app.state.engine = engine
        app.state.sessionmaker = build_sessionmaker(engine)
        await init_db(engine)

        app.state.posters = OmdbClient(
            settings.omdb_api_key,
            base_url=settings.omdb_base_url,
            timeout=settings.omdb_timeout_seconds,
        )
        app.state.integrations = await probe_all(settings, app.state.posters)
        logger.info(f"{settings.app_name} started: {app.state.integrations}")
        yield
        # Shutdown: close DB pool
        await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="Personal media watchlist with poster lookup",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )
    app.state.settings = settings

    # CORS — allow frontend dev server + production URL
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Mount routers ────────────────────────────────────────────
    app.include_router(health.router,     tags=["system"])
    app.include_router(auth.router,       tags=["auth"])
    app.include_router(watchlist.router,  tags=["watchlist"])

    return app


app = create_app()
