"""Watchlist service — ownership-scoped CRUD with poster enrichment.

Every read and write is filtered by (item id, owning user id); an item owned
by someone else behaves exactly like a missing one. Posters come from an
IPosterProvider on create, on title/type change, on manual refresh, and
during the batch backfill.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from watchlist.clients.base import IPosterProvider
from watchlist.errors import ItemNotFound, UserNotFound
from watchlist.models.tables import User, WatchlistItem

logger = logging.getLogger(__name__)


@dataclass
class WatchlistValues:
    """Caller-supplied fields for create/update."""
    title: str
    type: Optional[str] = None
    genre: Optional[str] = None
    watched: bool = False
    rating: int = 0
    poster_url: Optional[str] = None


def has_poster(poster_url: Optional[str]) -> bool:
    """Empty strings and OMDb's "N/A" placeholder count as no poster."""
    return bool(poster_url) and poster_url != "N/A"


class WatchlistService:
    """Watchlist workflow over the watchlist table."""

    # OMDb free tier is rate limited; pause between backfill lookups.
    REFRESH_DELAY = 0.2

    def __init__(
        self,
        db: AsyncSession,
        posters: IPosterProvider,
        refresh_delay: Optional[float] = None,
    ):
        self.db = db
        self.posters = posters
        self.refresh_delay = self.REFRESH_DELAY if refresh_delay is None else refresh_delay

    # ── Reads ────────────────────────────────────────────────────

    async def list_all(self) -> list[WatchlistItem]:
        """Every item regardless of owner. Administrative use only."""
        result = await self.db.execute(select(WatchlistItem).order_by(WatchlistItem.id))
        return list(result.scalars().all())

    async def list_by_user(self, user_id: int) -> list[WatchlistItem]:
        result = await self.db.execute(
            select(WatchlistItem)
            .where(WatchlistItem.user_id == user_id)
            .order_by(WatchlistItem.id)
        )
        return list(result.scalars().all())

    async def get_one(self, item_id: int, user_id: int) -> WatchlistItem:
        result = await self.db.execute(
            select(WatchlistItem).where(
                WatchlistItem.id == item_id, WatchlistItem.user_id == user_id,
            )
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise ItemNotFound(item_id)
        return item

    # ── Writes ───────────────────────────────────────────────────

    async def create(self, values: WatchlistValues, user_id: int) -> WatchlistItem:
        """Insert a new item, looking up a poster when none was supplied."""
        if await self.db.get(User, user_id) is None:
            raise UserNotFound(user_id)

        poster_url = values.poster_url
        if not has_poster(poster_url):
            poster_url = (await self.posters.lookup(values.title, values.type)).poster_url

        item = WatchlistItem(
            title=values.title,
            type=values.type,
            genre=values.genre,
            watched=values.watched,
            rating=values.rating,
            poster_url=poster_url,
            user_id=user_id,
        )
        self.db.add(item)
        await self.db.flush()
        return item

    async def update(self, item_id: int, values: WatchlistValues, user_id: int) -> WatchlistItem:
        """Overwrite an owned item.

        Poster: re-fetched when title or type changed, else replaced by an
        explicitly supplied URL, else kept.
        """
        current = await self.get_one(item_id, user_id)

        changes = {
            "title": values.title,
            "type": values.type,
            "genre": values.genre,
            "watched": values.watched,
            "rating": values.rating,
        }
        if values.title != current.title or values.type != current.type:
            result = await self.posters.lookup(values.title, values.type)
            changes["poster_url"] = result.poster_url
        elif values.poster_url is not None:
            changes["poster_url"] = values.poster_url

        return await self._apply(current, user_id, changes)

    async def delete(self, item_id: int, user_id: int) -> bool:
        """Remove an owned item in a single conditional statement."""
        result = await self.db.execute(
            delete(WatchlistItem)
            .where(WatchlistItem.id == item_id, WatchlistItem.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    # ── Poster enrichment ────────────────────────────────────────

    async def refresh_poster(self, item_id: int, user_id: int) -> WatchlistItem:
        """Re-fetch the poster for an owned item, replacing whatever is stored."""
        current = await self.get_one(item_id, user_id)
        result = await self.posters.lookup(current.title, current.type)
        return await self._apply(current, user_id, {"poster_url": result.poster_url})

    async def refresh_all_missing_posters(self, user_id: int) -> dict:
        """Backfill posters for every owned item that has none.

        Lookups run sequentially with a fixed pause in between. Each hit is
        committed right away, so a cancelled pause leaves earlier updates in
        place and simply ends the batch.

        Returns:
            {"checked": N, "missing": N, "updated": N, "interrupted": bool}
        """
        items = await self.list_by_user(user_id)
        missing = [item for item in items if not has_poster(item.poster_url)]
        summary = {"checked": len(items), "missing": len(missing), "updated": 0, "interrupted": False}

        for i, item in enumerate(missing):
            if i > 0:
                try:
                    await asyncio.sleep(self.refresh_delay)
                except asyncio.CancelledError:
                    # An interrupted pause ends the batch, not the request. The
                    # cancellation is consumed here, so the cancel count is reset.
                    task = asyncio.current_task()
                    if task is not None:
                        task.uncancel()
                    logger.warning(
                        f"Poster backfill for user {user_id} interrupted after "
                        f"{i} of {len(missing)} lookups"
                    )
                    summary["interrupted"] = True
                    break

            result = await self.posters.lookup(item.title, item.type)
            if result.poster_url:
                item.poster_url = result.poster_url
                await self.db.commit()
                summary["updated"] += 1

        logger.info(f"Poster backfill for user {user_id}: {summary}")
        return summary

    # ── Helpers ──────────────────────────────────────────────────

    async def _apply(self, item: WatchlistItem, user_id: int, changes: dict) -> WatchlistItem:
        """Conditional UPDATE on (id, user_id); zero rows means the item is gone."""
        result = await self.db.execute(
            update(WatchlistItem)
            .where(WatchlistItem.id == item.id, WatchlistItem.user_id == user_id)
            .values(**changes)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ItemNotFound(item.id)

        await self.db.refresh(item)
        return item
