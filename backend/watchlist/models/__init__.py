"""Re-export all SQLAlchemy models for Alembic and import convenience."""

from watchlist.models.tables import (  # noqa: F401
    User, WatchlistItem,
)
