"""Account service — registration, login and profile maintenance.

Passwords are stored as bcrypt hashes. Login failures never reveal whether
the username or the password was wrong.
"""

import base64
import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional

import bcrypt
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from watchlist.errors import DuplicateEmail, DuplicateUsername, Unauthenticated, UserNotFound
from watchlist.models.tables import User, WatchlistItem

logger = logging.getLogger(__name__)


def _prehash(password: str) -> bytes:
    # bcrypt only takes 72 bytes; a sha256 digest keeps any length usable
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


class UserService:
    """Account workflow over the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """Create an account. Username is checked before email."""
        if await self._exists(User.username == username):
            raise DuplicateUsername()
        if await self._exists(User.email == email):
            raise DuplicateEmail()

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            created_at=datetime.now(timezone.utc),
            last_login=None,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            # A concurrent registration won the unique constraint
            await self.db.rollback()
            if await self.find_by_username(username) is not None:
                raise DuplicateUsername()
            raise DuplicateEmail()
        logger.info(f"Registered user id={user.id} username={username!r}")
        return user

    async def login(self, username: str, password: str) -> User:
        """Check credentials and stamp last_login.

        Raises Unauthenticated for an unknown user and for a wrong password alike.
        """
        user = await self.find_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for username={username!r}")
            raise Unauthenticated()

        user.last_login = datetime.now(timezone.utc)
        await self.db.flush()
        return user

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get(self, user_id: int) -> User:
        user = await self.find_by_id(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    async def update_profile(
        self,
        user_id: int,
        first_name: Optional[str],
        last_name: Optional[str],
        email: str,
    ) -> User:
        """Overwrite name and email.

        Email uniqueness is not re-checked here; a clash surfaces as an
        integrity error from the store.
        """
        user = await self.get(user_id)
        user.first_name = first_name
        user.last_name = last_name
        user.email = email
        await self.db.flush()
        return user

    async def delete_user(self, user_id: int) -> bool:
        """Remove an account together with all of its watchlist entries."""
        user = await self.find_by_id(user_id)
        if user is None:
            return False

        await self.db.execute(delete(WatchlistItem).where(WatchlistItem.user_id == user_id))
        await self.db.delete(user)
        await self.db.flush()
        logger.info(f"Deleted user id={user_id}")
        return True

    async def _exists(self, clause) -> bool:
        result = await self.db.execute(select(User.id).where(clause).limit(1))
        return result.first() is not None
