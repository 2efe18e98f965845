"""Typed key/value cache with per-entry expiry, backed by SQLite."""

from __future__ import annotations

import json
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Iterator

from ..exceptions import HTTPFailureStatus, StorageError
from .storage import SQLiteManager

STATUS_PENDING = "pending"
STATUS_ERROR = "error"

_COLUMNS = "key, kind, source_url, target_url, created_at, status, preview, expires_at"

_ORDER_COLUMNS = {
    "status": "CASE WHEN status GLOB '[0-9]*' THEN CAST(status AS INTEGER) ELSE 0 END",
    "created_at": "created_at",
    "source_url": "source_url",
    "target_url": "target_url",
}


@dataclass(slots=True)
class QueueEntry:
    """One cached fetch job, keyed by the hash of its target URL."""

    id: str
    target_url: str
    source_url: str = ""
    created_at: float = 0.0
    status: int | str = STATUS_PENDING
    preview: dict[str, str] | None = field(default=None)
    kind: str = "link"
    expires_at: float | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == STATUS_PENDING

    @property
    def is_resolved(self) -> bool:
        return not self.is_pending

    @property
    def is_broken(self) -> bool:
        if self.status == STATUS_ERROR:
            return True
        return isinstance(self.status, int) and 400 <= self.status < 600

    def raise_for_status(self) -> None:
        if self.is_broken:
            raise HTTPFailureStatus(self.target_url, self.status)

    def to_row(self) -> tuple[Any, ...]:
        preview = json.dumps(self.preview, ensure_ascii=False) if self.preview is not None else None
        return (
            self.id,
            self.kind,
            self.source_url,
            self.target_url,
            self.created_at,
            str(self.status),
            preview,
            self.expires_at,
        )

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "QueueEntry":
        status: int | str = row["status"]
        if isinstance(status, str) and status.isdigit():
            status = int(status)
        preview = json.loads(row["preview"]) if row["preview"] else None
        return cls(
            id=row["key"],
            target_url=row["target_url"],
            source_url=row["source_url"],
            created_at=row["created_at"],
            status=status,
            preview=preview,
            kind=row["kind"],
            expires_at=row["expires_at"],
        )


class CacheStore:
    """Persist queue entries with optional TTL.

    Expired rows are hidden from every read (lazy expiry) and can be removed
    eagerly with :meth:`purge_expired`; callers cannot tell the two apart.
    """

    def __init__(
        self,
        manager: SQLiteManager,
        db_path: Path,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.manager = manager
        self.db_path = db_path
        self.clock = clock or time.time
        self._lock = Lock()
        with self._guard():
            self._conn = self.manager.connect(db_path)

    @contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as exc:
            raise StorageError(f"Cache backend failure ({self.db_path}): {exc}") from exc

    def now(self) -> float:
        return self.clock()

    # ------------------------------------------------------------------
    # Single-key operations
    # ------------------------------------------------------------------
    def put(self, key: str, entry: QueueEntry, ttl: float | None = None) -> QueueEntry:
        expires_at = self.now() + ttl if ttl is not None else None
        entry = replace(entry, id=key, expires_at=expires_at)
        with self._guard(), self._lock:
            self._conn.execute(
                f"INSERT OR REPLACE INTO link_cache({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                entry.to_row(),
            )
            self._conn.commit()
        return entry

    def add(self, key: str, entry: QueueEntry) -> bool:
        """Insert without TTL unless a live row already holds the key."""

        entry = replace(entry, id=key, expires_at=None)
        with self._guard(), self._lock:
            self._conn.execute(
                "DELETE FROM link_cache WHERE key = ? AND expires_at IS NOT NULL AND expires_at <= ?",
                (key, self.now()),
            )
            cur = self._conn.execute(
                f"INSERT OR IGNORE INTO link_cache({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                entry.to_row(),
            )
            self._conn.commit()
        return cur.rowcount == 1

    def update_if_status(
        self, key: str, entry: QueueEntry, expected_status: int | str, ttl: float | None = None
    ) -> QueueEntry | None:
        """Overwrite a live row only while it still has ``expected_status``.

        Returns the stored entry, or ``None`` when the row is gone or has moved on.
        """

        expires_at = self.now() + ttl if ttl is not None else None
        entry = replace(entry, id=key, expires_at=expires_at)
        row = entry.to_row()
        with self._guard(), self._lock:
            cur = self._conn.execute(
                "UPDATE link_cache SET kind = ?, source_url = ?, target_url = ?, created_at = ?,"
                " status = ?, preview = ?, expires_at = ?"
                " WHERE key = ? AND status = ? AND (expires_at IS NULL OR expires_at > ?)",
                (*row[1:], key, str(expected_status), self.now()),
            )
            self._conn.commit()
        return entry if cur.rowcount == 1 else None

    def get(self, key: str) -> QueueEntry | None:
        with self._guard(), self._lock:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM link_cache WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        entry = QueueEntry.from_row(row)
        if entry.expires_at is not None and entry.expires_at <= self.now():
            return None
        return entry

    def delete(self, key: str) -> bool:
        with self._guard(), self._lock:
            cur = self._conn.execute(
                "DELETE FROM link_cache WHERE key = ? AND (expires_at IS NULL OR expires_at > ?)",
                (key, self.now()),
            )
            self._conn.commit()
        return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Range operations
    # ------------------------------------------------------------------
    def _where(
        self, key_prefix: str, status: int | str | None, search: str | None
    ) -> tuple[str, list[Any]]:
        clauses = ["substr(key, 1, ?) = ?", "(expires_at IS NULL OR expires_at > ?)"]
        params: list[Any] = [len(key_prefix), key_prefix, self.now()]
        if status not in (None, ""):
            clauses.append("status = ?")
            params.append(str(status))
        if search:
            clauses.append(
                "instr(lower(key || ' ' || kind || ' ' || source_url || ' ' || target_url"
                " || ' ' || status || ' ' || coalesce(preview, '')), lower(?)) > 0"
            )
            params.append(search)
        return " AND ".join(clauses), params

    def list(
        self,
        key_prefix: str = "",
        status: int | str | None = None,
        search: str | None = None,
        order_by: str = "status",
        descending: bool = False,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[QueueEntry]:
        if order_by not in _ORDER_COLUMNS:
            raise ValueError(f"Unsupported order column: {order_by}")
        where, params = self._where(key_prefix, status, search)
        direction = "DESC" if descending else "ASC"
        query = (
            f"SELECT {_COLUMNS} FROM link_cache WHERE {where} "
            f"ORDER BY {_ORDER_COLUMNS[order_by]} {direction}, created_at {direction}, key ASC"
        )
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([max(limit, 0), max(offset, 0)])
        elif offset:
            query += " LIMIT -1 OFFSET ?"
            params.append(max(offset, 0))
        with self._guard(), self._lock:
            rows = self._conn.execute(query, params).fetchall()
        return [QueueEntry.from_row(row) for row in rows]

    def count(
        self, key_prefix: str = "", status: int | str | None = None, search: str | None = None
    ) -> int:
        where, params = self._where(key_prefix, status, search)
        with self._guard(), self._lock:
            row = self._conn.execute(f"SELECT count(*) FROM link_cache WHERE {where}", params).fetchone()
        return int(row[0])

    def delete_matching(self, key_prefix: str = "", search: str | None = None) -> int:
        where, params = self._where(key_prefix, None, search)
        with self._guard(), self._lock:
            cur = self._conn.execute(f"DELETE FROM link_cache WHERE {where}", params)
            self._conn.commit()
        return cur.rowcount

    def purge_expired(self) -> int:
        with self._guard(), self._lock:
            cur = self._conn.execute(
                "DELETE FROM link_cache WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (self.now(),),
            )
            self._conn.commit()
        return cur.rowcount


__all__ = ["CacheStore", "QueueEntry", "STATUS_ERROR", "STATUS_PENDING"]
