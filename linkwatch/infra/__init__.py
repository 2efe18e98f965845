"""Infra layer utilities (SQLite connections, cache store)."""

from .cache_store import STATUS_ERROR, STATUS_PENDING, CacheStore, QueueEntry
from .storage import SQLiteManager

__all__ = ["CacheStore", "QueueEntry", "SQLiteManager", "STATUS_ERROR", "STATUS_PENDING"]
