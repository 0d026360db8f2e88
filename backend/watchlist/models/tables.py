"""SQLAlchemy ORM models — all database tables."""

from datetime import datetime
from typing import Optional
from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from watchlist.database import Base


# ── Users ────────────────────────────────────────────────────────

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(300), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)  # bcrypt
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False,
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    watchlist_items: Mapped[list["WatchlistItem"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True,
    )


# ── Watchlist ────────────────────────────────────────────────────

class WatchlistItem(Base):
    __tablename__ = "watchlist"
    __table_args__ = (
        Index("idx_watchlist_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(50))     # movie | series | documentary | anime | ...
    genre: Mapped[Optional[str]] = mapped_column(String(100))
    watched: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # unbounded
    poster_url: Mapped[Optional[str]] = mapped_column(String(1000))
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )

    user: Mapped[User] = relationship(back_populates="watchlist_items")
