"""OMDb client — poster lookup by title.

Handles: title cleanup, media type mapping to OMDb's vocabulary, and the
single ``?t=`` query. Failures are logged and turned into an unsuccessful
:class:`PosterLookupResult`; nothing here raises to the caller.
"""

import logging
import re
from typing import Optional

import httpx

from watchlist.clients.base import IPosterProvider, PosterLookupResult
from watchlist.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE = re.compile(r"\s+")

# Our free-form types → OMDb "type" parameter. "" means any type.
OMDB_TYPES = {
    "movie": "movie",
    "film": "movie",
    "series": "series",
    "serie": "series",
    "tv": "series",
    "documentary": "movie",      # OMDb has no documentary type
    "dokumentation": "movie",
    "anime": "series",
}


def clean_title(title: Optional[str]) -> str:
    """Strip everything but ASCII letters, digits and single spaces."""
    if title is None:
        return ""
    cleaned = _NON_ALNUM.sub("", title.strip())
    return _WHITESPACE.sub(" ", cleaned).strip()


def map_media_type(media_type: Optional[str]) -> str:
    if media_type is None:
        return ""
    return OMDB_TYPES.get(media_type.lower(), "")


def _valid_poster(poster) -> bool:
    return isinstance(poster, str) and bool(poster) and poster != "N/A"


class OmdbClient(IPosterProvider):
    """The Open Movie Database client (poster lookups only)."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "http://www.omdbapi.com/",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def _get(self, params: dict) -> dict:
        """Make an authenticated GET request to OMDb.

        Raises UpstreamUnavailable for anything other than a JSON object.
        """
        if not self.api_key:
            raise UpstreamUnavailable("OMDb API key not configured")

        all_params = {**params, "apikey": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(self.base_url, params=all_params)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"OMDb request failed: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailable(f"OMDb returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamUnavailable("OMDb returned an unexpected response shape")
        return data

    async def _query(self, title: str, params: dict) -> PosterLookupResult:
        logger.info(f"OMDb lookup: t={params.get('t')!r} type={params.get('type')!r} y={params.get('y')}")
        try:
            data = await self._get(params)
        except UpstreamUnavailable as e:
            logger.warning(f"OMDb lookup failed for {title!r}: {e.message}")
            return PosterLookupResult.missing(e.message)

        if data.get("Response") != "True":
            error = data.get("Error") or "Title not found"
            logger.info(f"OMDb: no match for {title!r} ({error})")
            return PosterLookupResult.missing(error)

        poster = data.get("Poster")
        if not _valid_poster(poster):
            logger.info(f"OMDb: no poster available for {title!r}")
            return PosterLookupResult.missing("No poster available")

        logger.info(f"OMDb: poster found for {title!r}: {poster}")
        return PosterLookupResult.found(poster)

    # ── IPosterProvider implementation ───────────────────────────

    async def lookup(self, title: str, media_type: Optional[str]) -> PosterLookupResult:
        params = {"t": clean_title(title), "type": map_media_type(media_type)}
        return await self._query(title, params)

    async def lookup_with_year(
        self, title: str, media_type: Optional[str], year: Optional[int],
    ) -> PosterLookupResult:
        if year is not None and year > 1900:
            params = {
                "t": clean_title(title),
                "y": year,
                "type": map_media_type(media_type),
            }
            result = await self._query(title, params)
            if result.success:
                return result

        # Fallback: plain title search
        return await self.lookup(title, media_type)

    # ── Test connection ──────────────────────────────────────────

    async def test_connection(self) -> bool:
        """Check that OMDb answers with a JSON body for our key."""
        try:
            data = await self._get({"t": "test"})
        except UpstreamUnavailable:
            return False
        return "Response" in data
