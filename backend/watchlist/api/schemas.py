"""Request/response bodies. JSON uses camelCase, Python uses snake_case."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ── Auth ─────────────────────────────────────────────────────────

class RegisterRequest(CamelModel):
    username: str
    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class LoginRequest(CamelModel):
    username: str
    password: str


class UpdateUserRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str


class UserOut(CamelModel):
    """Public profile. The password hash never leaves the service."""
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class AuthResponse(CamelModel):
    success: bool
    message: str
    user: Optional[UserOut] = None


# ── Watchlist ────────────────────────────────────────────────────

class WatchlistRequest(CamelModel):
    title: str
    type: Optional[str] = None
    genre: Optional[str] = None
    watched: bool = False
    rating: int = 0
    poster_url: Optional[str] = None
    user_id: int


class WatchlistItemOut(CamelModel):
    id: int
    title: str
    type: Optional[str] = None
    genre: Optional[str] = None
    watched: bool
    rating: int
    poster_url: Optional[str] = None
    user_id: int


class BackfillSummary(CamelModel):
    checked: int
    missing: int
    updated: int
    interrupted: bool
