"""Watchlist — personal media watchlist backend."""

__version__ = "0.1.0"
