"""Watchlist service — ownership scoping and poster enrichment."""

import asyncio
import time

import pytest

from watchlist.errors import ItemNotFound, UserNotFound
from watchlist.services.watchlist import WatchlistService, WatchlistValues


def _values(title="Inception", type="Film", **kwargs):
    return WatchlistValues(title=title, type=type, **kwargs)


@pytest.fixture
def service(db, posters):
    return WatchlistService(db, posters, refresh_delay=0)


# ── Create ───────────────────────────────────────────────────────

async def test_create_fetches_poster_when_missing(service, posters, user):
    posters.responses["Inception"] = "http://p/1.jpg"

    item = await service.create(_values(genre="Sci-Fi"), user.id)

    assert item.id is not None
    assert item.poster_url == "http://p/1.jpg"
    assert item.user_id == user.id
    assert posters.calls == [("Inception", "Film")]


async def test_create_stores_none_when_lookup_misses(service, user):
    item = await service.create(_values(), user.id)

    assert item.poster_url is None


async def test_create_with_empty_poster_triggers_lookup(service, posters, user):
    posters.default = "http://p/x.jpg"

    item = await service.create(_values(poster_url=""), user.id)

    assert item.poster_url == "http://p/x.jpg"


async def test_create_keeps_supplied_poster(service, posters, user):
    item = await service.create(_values(poster_url="http://mine.jpg"), user.id)

    assert item.poster_url == "http://mine.jpg"
    assert posters.calls == []


async def test_create_defaults(service, user):
    item = await service.create(WatchlistValues(title="Dark"), user.id)

    assert item.watched is False
    assert item.rating == 0


async def test_create_allows_out_of_range_rating(service, user):
    item = await service.create(_values(rating=-3), user.id)

    assert item.rating == -3


async def test_create_for_unknown_user(service):
    with pytest.raises(UserNotFound):
        await service.create(_values(), 999)


# ── Read ─────────────────────────────────────────────────────────

async def test_list_by_user_is_scoped(service, user, other_user):
    mine = await service.create(_values("Inception"), user.id)
    await service.create(_values("Alien"), other_user.id)

    assert [i.id for i in await service.list_by_user(user.id)] == [mine.id]
    assert await service.list_by_user(12345) == []
    assert len(await service.list_all()) == 2


async def test_get_one_is_scoped(service, user, other_user):
    item = await service.create(_values(), user.id)

    assert (await service.get_one(item.id, user.id)).id == item.id
    with pytest.raises(ItemNotFound):
        await service.get_one(item.id, other_user.id)
    with pytest.raises(ItemNotFound):
        await service.get_one(999, user.id)


# ── Update ───────────────────────────────────────────────────────

async def test_update_without_title_change_keeps_poster(service, posters, user):
    posters.responses["Inception"] = "http://p/1.jpg"
    item = await service.create(_values(genre="Sci-Fi"), user.id)
    posters.calls.clear()

    updated = await service.update(item.id, _values(genre="Thriller", watched=True, rating=9), user.id)

    assert updated.genre == "Thriller"
    assert updated.watched is True
    assert updated.rating == 9
    assert updated.poster_url == "http://p/1.jpg"
    assert posters.calls == []


async def test_update_title_change_refetches_once(service, posters, user):
    posters.responses["Inception"] = "http://p/1.jpg"
    posters.responses["Inception 2"] = "http://p/2.jpg"
    item = await service.create(_values(), user.id)
    posters.calls.clear()

    updated = await service.update(item.id, _values("Inception 2"), user.id)

    assert posters.calls == [("Inception 2", "Film")]
    assert updated.poster_url == "http://p/2.jpg"


async def test_update_type_change_can_clear_poster(service, posters, user):
    posters.responses["Inception"] = "http://p/1.jpg"
    item = await service.create(_values(), user.id)
    posters.responses["Inception"] = None

    updated = await service.update(item.id, _values(type="Series"), user.id)

    assert updated.type == "Series"
    assert updated.poster_url is None


async def test_update_with_supplied_poster_overrides(service, posters, user):
    posters.default = "http://p/1.jpg"
    item = await service.create(_values(), user.id)
    posters.calls.clear()

    updated = await service.update(item.id, _values(poster_url="http://mine.jpg"), user.id)

    assert updated.poster_url == "http://mine.jpg"
    assert posters.calls == []


async def test_update_other_users_item(service, user, other_user):
    item = await service.create(_values(), user.id)

    with pytest.raises(ItemNotFound):
        await service.update(item.id, _values("Hijacked"), other_user.id)
    assert (await service.get_one(item.id, user.id)).title == "Inception"


# ── Delete ───────────────────────────────────────────────────────

async def test_delete_owned_item(service, user):
    item = await service.create(_values(), user.id)

    assert await service.delete(item.id, user.id) is True
    assert await service.list_by_user(user.id) == []


async def test_delete_with_wrong_owner_leaves_item(service, user, other_user):
    item = await service.create(_values(), user.id)

    assert await service.delete(item.id, other_user.id) is False
    assert (await service.get_one(item.id, user.id)).id == item.id


async def test_delete_missing_item(service, user):
    assert await service.delete(999, user.id) is False


# ── Poster refresh ───────────────────────────────────────────────

async def test_refresh_poster_overwrites_existing(service, posters, user):
    item = await service.create(_values(poster_url="http://old.jpg"), user.id)
    posters.responses["Inception"] = "http://new.jpg"

    refreshed = await service.refresh_poster(item.id, user.id)

    assert refreshed.poster_url == "http://new.jpg"
    assert posters.calls == [("Inception", "Film")]


async def test_refresh_poster_other_user(service, user, other_user):
    item = await service.create(_values(poster_url="http://old.jpg"), user.id)

    with pytest.raises(ItemNotFound):
        await service.refresh_poster(item.id, other_user.id)


async def test_refresh_all_only_touches_missing_posters(service, posters, user, other_user):
    has = await service.create(_values("Has", poster_url="http://has.jpg"), user.id)
    none = await service.create(_values("None"), user.id)
    empty = await service.create(_values("Empty"), user.id)
    na = await service.create(_values("NA"), user.id)
    stays_missing = await service.create(_values("Unknown"), user.id)
    await service.create(_values("Theirs"), other_user.id)
    empty.poster_url = ""
    na.poster_url = "N/A"
    await service.db.flush()

    posters.calls.clear()
    posters.responses.update({"None": "http://n.jpg", "Empty": "http://e.jpg", "NA": "http://na.jpg"})

    summary = await service.refresh_all_missing_posters(user.id)

    assert summary == {"checked": 5, "missing": 4, "updated": 3, "interrupted": False}
    assert [title for title, _ in posters.calls] == ["None", "Empty", "NA", "Unknown"]
    assert (await service.get_one(has.id, user.id)).poster_url == "http://has.jpg"
    assert (await service.get_one(none.id, user.id)).poster_url == "http://n.jpg"
    assert (await service.get_one(empty.id, user.id)).poster_url == "http://e.jpg"
    assert (await service.get_one(na.id, user.id)).poster_url == "http://na.jpg"
    assert (await service.get_one(stays_missing.id, user.id)).poster_url is None


async def test_refresh_all_pauses_between_lookups(db, posters, user):
    service = WatchlistService(db, posters, refresh_delay=0.05)
    for title in ("A", "B", "C"):
        await service.create(_values(title), user.id)

    started = time.monotonic()
    await service.refresh_all_missing_posters(user.id)

    # Two pauses for three lookups
    assert time.monotonic() - started >= 0.1


async def test_refresh_all_stops_early_when_pause_is_cancelled(db, posters, user):
    service = WatchlistService(db, posters, refresh_delay=30)
    first = await service.create(_values("First"), user.id)
    second = await service.create(_values("Second"), user.id)
    posters.calls.clear()
    posters.default = "http://p/x.jpg"

    task = asyncio.create_task(service.refresh_all_missing_posters(user.id))
    while not posters.calls:
        await asyncio.sleep(0.01)
    await asyncio.sleep(0.2)
    task.cancel()
    summary = await task

    assert summary["interrupted"] is True
    assert task.cancelling() == 0
    assert summary["updated"] == 1
    assert len(posters.calls) == 1
    assert (await service.get_one(first.id, user.id)).poster_url == "http://p/x.jpg"
    assert (await service.get_one(second.id, user.id)).poster_url is None


# ── End to end ───────────────────────────────────────────────────

async def test_watchlist_lifecycle(service, posters, user):
    posters.responses["Inception"] = "http://p/1.jpg"
    posters.responses["Inception 2"] = "http://p/2.jpg"

    item = await service.create(_values(watched=False, rating=0), user.id)
    assert item.poster_url == "http://p/1.jpg"

    item = await service.update(item.id, _values("Inception 2"), user.id)
    assert item.poster_url == "http://p/2.jpg"

    assert await service.delete(item.id, user.id) is True
    assert await service.list_by_user(user.id) == []
