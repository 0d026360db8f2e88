"""Probe configured integrations on startup and report status."""

from watchlist.clients.omdb import OmdbClient
from watchlist.config import Settings


async def probe_all(settings: Settings, omdb: OmdbClient) -> dict:
    """Check reachability of all configured services. Returns status dict."""
    results = {}

    # OMDb
    if settings.has_omdb:
        ok = await omdb.test_connection()
        results["omdb"] = {"status": "ok" if ok else "error"}
    else:
        results["omdb"] = {"status": "not_configured"}

    return results
