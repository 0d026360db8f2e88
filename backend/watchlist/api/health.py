"""Health and system status endpoints."""

from fastapi import APIRouter, Request
from datetime import datetime, timezone

from watchlist import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Service health check — OMDb configuration and startup probe result."""
    settings = request.app.state.settings
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "poster_lookup": {
            "provider": "omdb",
            "configured": settings.has_omdb,
            "backfill_delay_seconds": settings.poster_refresh_delay_seconds,
        },
        "integrations": getattr(request.app.state, "integrations", {}),
    }
