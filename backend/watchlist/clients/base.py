"""Abstract interface for poster/cover-art providers.

OMDb is the only implementation. The workflow depends on this contract so
tests (and a future TMDB provider) can stand in for it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


# ── Data Transfer Objects ────────────────────────────────────────

@dataclass(frozen=True)
class PosterLookupResult:
    """Outcome of a single poster lookup. Produced per call, never stored."""
    success: bool
    poster_url: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def found(cls, poster_url: str) -> "PosterLookupResult":
        return cls(success=True, poster_url=poster_url)

    @classmethod
    def missing(cls, error: Optional[str] = None) -> "PosterLookupResult":
        return cls(success=False, error=error)


# ── Abstract Interfaces ──────────────────────────────────────────

class IPosterProvider(ABC):
    """Interface for cover-art lookups. Implementations must never raise."""

    @abstractmethod
    async def lookup(self, title: str, media_type: Optional[str]) -> PosterLookupResult:
        """Find a poster for a title, using the media type as a hint."""
        ...

    @abstractmethod
    async def lookup_with_year(
        self, title: str, media_type: Optional[str], year: Optional[int],
    ) -> PosterLookupResult:
        """Year-qualified lookup, falling back to :meth:`lookup`."""
        ...
