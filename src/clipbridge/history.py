#!/usr/bin/env python3
"""Clipboard history record store.

This module defines the RecordStorePort capability used by the sync
service, and SqliteHistory, its implementation on the standard-library
sqlite3 driver.

The store is an append-only history of clipboard entries:
- Entries are inserted with a store-assigned, strictly increasing id
- Entries can be pinned/unpinned and deleted permanently
- Listing orders pinned entries first, then by id descending

All operations on the connection are serialized by a lock so that id
assignment stays monotonic. Every mutation is committed before returning.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import NamedTuple, Protocol

from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from clipbridge.errors import InvalidArgument, NoRows, NotFound, StorageError
from clipbridge.models import ClipboardEntry

logger = logging.getLogger(__name__)

# Bounds accepted for the list() limit argument.
MIN_LIST_LIMIT: int = 1
MAX_LIST_LIMIT: int = 200

# Attempts made when SQLite reports the database as locked.
LOCK_RETRY_ATTEMPTS: int = 4

# Backoff between locked-database retries in seconds.
LOCK_RETRY_MIN_WAIT: float = 0.05
LOCK_RETRY_MAX_WAIT: float = 1.0

MEMORY_PATH: str = ":memory:"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS clipboard_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    text TEXT NOT NULL,
    source TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    pinned INTEGER NOT NULL DEFAULT 0
);
"""

SELECT_COLUMNS = "SELECT id, text, source, updated_at, pinned FROM clipboard_history"
ORDERING = "ORDER BY pinned DESC, id DESC"


class RecordStorePort(Protocol):
    """Operations the sync service requires from a history store."""

    def insert(self, text: str, source: str) -> ClipboardEntry: ...

    def by_id(self, entry_id: int) -> ClipboardEntry: ...

    def list(self, limit: int, search: str = "") -> list[ClipboardEntry]: ...

    def set_pinned(self, entry_id: int, pinned: bool) -> None: ...

    def delete(self, entry_id: int) -> None: ...

    def latest(self) -> ClipboardEntry: ...


class _Result(NamedTuple):
    rows: list[sqlite3.Row]
    lastrowid: int | None
    rowcount: int


def _is_locked(exc: BaseException) -> bool:
    """Return True for SQLite errors worth retrying (busy/locked database)."""
    return isinstance(exc, sqlite3.OperationalError) and "locked" in str(exc).lower()


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


def validate_limit(limit: int) -> None:
    """Raise InvalidArgument if limit is outside the accepted range.

    Args:
        limit: Requested maximum number of entries.

    Raises:
        InvalidArgument: If limit is not within MIN_LIST_LIMIT..MAX_LIST_LIMIT.
    """
    if limit < MIN_LIST_LIMIT or limit > MAX_LIST_LIMIT:
        raise InvalidArgument(
            f"limit must be between {MIN_LIST_LIMIT} and {MAX_LIST_LIMIT}, got {limit}"
        )


class SqliteHistory:
    """Clipboard history stored in a single SQLite table.

    Usage:
        history = SqliteHistory("clipboard.db")
        history.init()
        entry = history.insert("hello", "laptop")
    """

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._path

    def init(self) -> None:
        """Open the database, create the table, and migrate older schemas.

        Raises:
            StorageError: If the database cannot be opened or initialized.
        """
        try:
            if self._path != MEMORY_PATH:
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self._path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.create_function("casefold", 1, _casefold, deterministic=True)
            conn.executescript(SCHEMA_SQL)
            self._migrate(conn)
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"failed to initialize {self._path}: {e}") from e
        self._conn = conn
        logger.debug("History store ready at %s", self._path)

    @staticmethod
    def _migrate(conn: sqlite3.Connection) -> None:
        """Add the pinned column to databases created before pinning existed."""
        columns = {row["name"] for row in conn.execute("PRAGMA table_info(clipboard_history)")}
        if "pinned" not in columns:
            logger.info("Adding pinned column to clipboard_history")
            conn.execute(
                "ALTER TABLE clipboard_history ADD COLUMN pinned INTEGER NOT NULL DEFAULT 0"
            )

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    @retry(
        retry=retry_if_exception(_is_locked),
        wait=wait_exponential(
            multiplier=LOCK_RETRY_MIN_WAIT, min=LOCK_RETRY_MIN_WAIT, max=LOCK_RETRY_MAX_WAIT
        ),
        stop=stop_after_attempt(LOCK_RETRY_ATTEMPTS),
        reraise=True,
    )
    def _run(self, sql: str, params: tuple, commit: bool) -> _Result:
        with self._lock:
            if self._conn is None:
                raise sqlite3.ProgrammingError("history store is not initialized")
            try:
                cursor = self._conn.execute(sql, params)
                rows = cursor.fetchall()
                if commit:
                    self._conn.commit()
            except sqlite3.Error:
                if self._conn.in_transaction:
                    self._conn.rollback()
                raise
            return _Result(rows, cursor.lastrowid, cursor.rowcount)

    def _execute(self, sql: str, params: tuple = (), commit: bool = False) -> _Result:
        try:
            return self._run(sql, params, commit)
        except sqlite3.Error as e:
            logger.error("History store failure: %s", e)
            raise StorageError(f"sqlite: {e}") from e

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> ClipboardEntry:
        updated_at = datetime.fromisoformat(row["updated_at"])
        if updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=timezone.utc)
        return ClipboardEntry(
            id=row["id"],
            text=row["text"],
            source=row["source"],
            updated_at=updated_at,
            pinned=bool(row["pinned"]),
        )

    def insert(self, text: str, source: str) -> ClipboardEntry:
        """Append a new entry and return it with its assigned id.

        Args:
            text: Normalized, non-empty clipboard text.
            source: Normalized source label.

        Returns:
            The stored entry, unpinned, stamped with the current UTC time.

        Raises:
            StorageError: If the insert fails.
        """
        now = datetime.now(timezone.utc)
        result = self._execute(
            "INSERT INTO clipboard_history (text, source, updated_at, pinned) VALUES (?, ?, ?, 0)",
            (text, source, now.isoformat()),
            commit=True,
        )
        if result.lastrowid is None:
            raise StorageError("insert did not return a row id")
        return ClipboardEntry(
            id=result.lastrowid, text=text, source=source, updated_at=now, pinned=False
        )

    def by_id(self, entry_id: int) -> ClipboardEntry:
        result = self._execute(f"{SELECT_COLUMNS} WHERE id = ?", (entry_id,))
        if not result.rows:
            raise NotFound(f"entry {entry_id} not found")
        return self._row_to_entry(result.rows[0])

    def list(self, limit: int, search: str = "") -> list[ClipboardEntry]:
        """Return up to limit entries, pinned first, newest first.

        Args:
            limit: Maximum number of entries (1..200).
            search: Optional case-insensitive substring to match in text.

        Raises:
            InvalidArgument: If limit is out of range.
            StorageError: If the query fails.
        """
        validate_limit(limit)
        if search:
            result = self._execute(
                f"{SELECT_COLUMNS} WHERE instr(casefold(text), ?) > 0 {ORDERING} LIMIT ?",
                (search.casefold(), limit),
            )
        else:
            result = self._execute(f"{SELECT_COLUMNS} {ORDERING} LIMIT ?", (limit,))
        return [self._row_to_entry(row) for row in result.rows]

    def set_pinned(self, entry_id: int, pinned: bool) -> None:
        result = self._execute(
            "UPDATE clipboard_history SET pinned = ? WHERE id = ?",
            (int(pinned), entry_id),
            commit=True,
        )
        if result.rowcount == 0:
            raise NotFound(f"entry {entry_id} not found")

    def delete(self, entry_id: int) -> None:
        result = self._execute(
            "DELETE FROM clipboard_history WHERE id = ?", (entry_id,), commit=True
        )
        if result.rowcount == 0:
            raise NotFound(f"entry {entry_id} not found")

    def latest(self) -> ClipboardEntry:
        """Return the entry that list(1) would return.

        Raises:
            NoRows: If the store is empty.
        """
        result = self._execute(f"{SELECT_COLUMNS} {ORDERING} LIMIT 1")
        if not result.rows:
            raise NoRows("clipboard history is empty")
        return self._row_to_entry(result.rows[0])

    def count(self) -> int:
        result = self._execute("SELECT COUNT(*) FROM clipboard_history")
        return int(result.rows[0][0])
