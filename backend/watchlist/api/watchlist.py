"""Watchlist endpoints — ownership-scoped CRUD and poster refresh."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from watchlist.api.schemas import BackfillSummary, WatchlistItemOut, WatchlistRequest
from watchlist.database import get_db
from watchlist.errors import NotFound
from watchlist.services.watchlist import WatchlistService, WatchlistValues

router = APIRouter(prefix="/Watchlist")


def _get_service(request: Request, db: AsyncSession = Depends(get_db)) -> WatchlistService:
    """Build the watchlist service from the per-request session and app-wide poster client."""
    return WatchlistService(
        db=db,
        posters=request.app.state.posters,
        refresh_delay=request.app.state.settings.poster_refresh_delay_seconds,
    )


def _values(req: WatchlistRequest) -> WatchlistValues:
    return WatchlistValues(
        title=req.title,
        type=req.type,
        genre=req.genre,
        watched=req.watched,
        rating=req.rating,
        poster_url=req.poster_url,
    )


@router.get("", response_model=list[WatchlistItemOut])
async def list_items(
    user_id: Optional[int] = Query(None, alias="userId"),
    service: WatchlistService = Depends(_get_service),
):
    """Items owned by ``userId``; every item when it is omitted."""
    if user_id is None:
        return await service.list_all()
    return await service.list_by_user(user_id)


@router.post("", response_model=WatchlistItemOut)
async def create_item(req: WatchlistRequest, service: WatchlistService = Depends(_get_service)):
    try:
        return await service.create(_values(req), req.user_id)
    except NotFound as e:
        raise HTTPException(404, e.message)


@router.post("/refresh-all-posters", response_model=BackfillSummary)
async def refresh_all_posters(
    user_id: int = Query(..., alias="userId"),
    service: WatchlistService = Depends(_get_service),
):
    """Look up posters for every item of the user that has none."""
    return await service.refresh_all_missing_posters(user_id)


@router.get("/{item_id}", response_model=WatchlistItemOut)
async def get_item(
    item_id: int,
    user_id: int = Query(..., alias="userId"),
    service: WatchlistService = Depends(_get_service),
):
    try:
        return await service.get_one(item_id, user_id)
    except NotFound as e:
        raise HTTPException(404, e.message)


@router.put("/{item_id}", response_model=WatchlistItemOut)
async def update_item(
    item_id: int,
    req: WatchlistRequest,
    service: WatchlistService = Depends(_get_service),
):
    try:
        return await service.update(item_id, _values(req), req.user_id)
    except NotFound as e:
        raise HTTPException(404, e.message)


@router.delete("/{item_id}")
async def delete_item(
    item_id: int,
    user_id: int = Query(..., alias="userId"),
    service: WatchlistService = Depends(_get_service),
) -> bool:
    return await service.delete(item_id, user_id)


@router.post("/{item_id}/refresh-poster", response_model=WatchlistItemOut)
async def refresh_poster(
    item_id: int,
    user_id: int = Query(..., alias="userId"),
    service: WatchlistService = Depends(_get_service),
):
    """Force a new poster lookup, replacing any stored poster."""
    try:
        return await service.refresh_poster(item_id, user_id)
    except NotFound as e:
        raise HTTPException(404, e.message)
