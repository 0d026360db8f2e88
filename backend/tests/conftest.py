"""Shared fixtures: a throwaway SQLite database and a scripted poster provider."""

from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient

from watchlist.clients.base import IPosterProvider, PosterLookupResult
from watchlist.config import Settings
from watchlist.database import build_engine, build_sessionmaker, init_db
from watchlist.main import create_app
from watchlist.services.users import UserService


class FakePosters(IPosterProvider):
    """Poster provider that answers from a dict and records every call."""

    def __init__(self):
        self.responses: dict[str, Optional[str]] = {}
        self.default: Optional[str] = None
        self.calls: list[tuple[str, Optional[str]]] = []

    async def lookup(self, title, media_type):
        self.calls.append((title, media_type))
        url = self.responses.get(title, self.default)
        if url:
            return PosterLookupResult.found(url)
        return PosterLookupResult.missing("Movie not found!")

    async def lookup_with_year(self, title, media_type, year):
        return await self.lookup(title, media_type)


@pytest.fixture
def posters():
    return FakePosters()


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'watchlist.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine):
    async with build_sessionmaker(engine)() as session:
        yield session


@pytest.fixture
async def user(db):
    return await UserService(db).register("a1", "a1@x.com", "secret", "Ada", "Lovelace")


@pytest.fixture
async def other_user(db):
    return await UserService(db).register("b2", "b2@x.com", "secret", "Bob", "Builder")


@pytest.fixture
async def client(engine, posters, tmp_path):
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'watchlist.db'}",
        omdb_api_key=None,
        poster_refresh_delay_seconds=0.0,
    )
    app = create_app(settings)
    app.state.sessionmaker = build_sessionmaker(engine)
    app.state.posters = posters
    app.state.integrations = {"omdb": {"status": "not_configured"}}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
