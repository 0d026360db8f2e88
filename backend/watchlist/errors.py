"""Domain errors raised by the service layer.

Routers translate these into HTTP responses; services never raise
``HTTPException`` themselves.
"""


class WatchlistError(Exception):
    """Base class for all domain errors."""

    message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class DuplicateUsername(WatchlistError):
    message = "Username already taken"


class DuplicateEmail(WatchlistError):
    message = "Email already registered"


class Unauthenticated(WatchlistError):
    message = "Invalid credentials"


class NotFound(WatchlistError):
    message = "Not found"


class UserNotFound(NotFound):
    def __init__(self, user_id: int):
        super().__init__(f"User with id {user_id} not found")
        self.user_id = user_id


class ItemNotFound(NotFound):
    def __init__(self, item_id: int):
        super().__init__(f"Watchlist item with id {item_id} not found")
        self.item_id = item_id


class UpstreamUnavailable(WatchlistError):
    """Poster lookup transport or parse failure. Never leaves the client."""

    message = "Poster service unavailable"
