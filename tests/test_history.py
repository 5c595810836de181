#!/usr/bin/env python3
"""
Tests for the SQLite history store.

Tests id assignment, ordering, search, pin/delete semantics, text
round-trip, schema migration, and error translation.
"""
import sqlite3
import threading
from datetime import timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from clipbridge.errors import InvalidArgument, NoRows, NotFound, StorageError
from clipbridge.history import SqliteHistory


def test_insert_assigns_increasing_ids(history: SqliteHistory) -> None:
    """Test insert returns unpinned entries with strictly increasing ids."""
    first = history.insert("one", "laptop")
    second = history.insert("two", "phone")

    assert second.id > first.id
    assert first.pinned is False
    assert first.updated_at.tzinfo is not None
    assert first.updated_at.utcoffset() == timezone.utc.utcoffset(None)


def test_ids_not_reused_after_delete(history: SqliteHistory) -> None:
    """Test a deleted id is never handed out again."""
    first = history.insert("one", "laptop")
    second = history.insert("two", "laptop")
    history.delete(second.id)

    third = history.insert("three", "laptop")
    assert third.id > second.id > first.id


def test_concurrent_inserts_get_unique_contiguous_ids(history: SqliteHistory) -> None:
    """Test parallel inserts from many threads never share or skip an id."""
    per_thread = 10
    workers = 8
    ids: list[int] = []
    ids_lock = threading.Lock()
    start = threading.Barrier(workers)

    def insert_many(worker: int) -> None:
        start.wait()
        for n in range(per_thread):
            entry = history.insert(f"w{worker}-{n}", f"worker-{worker}")
            with ids_lock:
                ids.append(entry.id)

    threads = [threading.Thread(target=insert_many, args=(w,)) for w in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    total = per_thread * workers
    assert sorted(ids) == list(range(1, total + 1))
    assert history.count() == total
    listed = [entry.id for entry in history.list(200)]
    assert listed == sorted(listed, reverse=True)
    assert len(set(listed)) == total


def test_by_id_returns_stored_entry(history: SqliteHistory) -> None:
    """Test by_id returns the entry as inserted."""
    created = history.insert("hello", "phone")
    assert history.by_id(created.id) == created


def test_by_id_missing_raises_not_found(history: SqliteHistory) -> None:
    """Test by_id raises NotFound for unknown ids."""
    with pytest.raises(NotFound):
        history.by_id(42)


def test_round_trip_preserves_control_characters(history: SqliteHistory) -> None:
    """Test newlines, tabs and quotes survive storage byte-for-byte."""
    text = "line one\n\tindented 'single' \"double\"\n%_ percent\\backslash\x07"
    created = history.insert(text, "laptop")

    assert history.by_id(created.id).text == text
    assert history.list(1)[0].text == text


def test_list_orders_pinned_first_then_newest(history: SqliteHistory) -> None:
    """Test inserting A then B then pinning A lists [A, B]."""
    a = history.insert("A", "laptop")
    b = history.insert("B", "laptop")
    history.set_pinned(a.id, True)

    assert [entry.id for entry in history.list(2)] == [a.id, b.id]


def test_list_newest_first_without_pins(history: SqliteHistory) -> None:
    """Test unpinned entries are listed by id descending."""
    ids = [history.insert(f"entry {n}", "laptop").id for n in range(3)]
    assert [entry.id for entry in history.list(10)] == list(reversed(ids))


def test_list_respects_limit(history: SqliteHistory) -> None:
    """Test list returns at most limit entries."""
    for n in range(5):
        history.insert(f"entry {n}", "laptop")
    assert len(history.list(3)) == 3


def test_list_search_is_case_insensitive_substring(history: SqliteHistory) -> None:
    """Test search matches substrings regardless of case."""
    history.insert("Hello World", "laptop")
    history.insert("goodbye", "laptop")
    history.insert("say HELLO again", "phone")

    texts = [entry.text for entry in history.list(10, "hello")]
    assert texts == ["say HELLO again", "Hello World"]


def test_list_search_treats_wildcards_literally(history: SqliteHistory) -> None:
    """Test % and _ in the search term are not SQL wildcards."""
    history.insert("100% done", "laptop")
    history.insert("100 percent", "laptop")

    assert [entry.text for entry in history.list(10, "100%")] == ["100% done"]
    assert history.list(10, "_") == []


@pytest.mark.parametrize("limit", [0, -1, 201])
def test_list_rejects_out_of_range_limit(history: SqliteHistory, limit: int) -> None:
    """Test limits outside 1..200 raise InvalidArgument."""
    with pytest.raises(InvalidArgument):
        history.list(limit)


def test_set_pinned_is_idempotent(history: SqliteHistory) -> None:
    """Test pinning twice leaves the entry pinned."""
    entry = history.insert("pin me", "laptop")
    history.set_pinned(entry.id, True)
    history.set_pinned(entry.id, True)
    assert history.by_id(entry.id).pinned is True

    history.set_pinned(entry.id, False)
    assert history.by_id(entry.id).pinned is False


def test_set_pinned_missing_raises_not_found(history: SqliteHistory) -> None:
    """Test pinning an unknown id raises NotFound."""
    with pytest.raises(NotFound):
        history.set_pinned(99, True)


def test_delete_removes_entry_permanently(history: SqliteHistory) -> None:
    """Test delete removes the entry and a second delete raises NotFound."""
    entry = history.insert("gone", "laptop")
    history.delete(entry.id)

    with pytest.raises(NotFound):
        history.by_id(entry.id)
    with pytest.raises(NotFound):
        history.delete(entry.id)
    assert history.count() == 0


def test_latest_empty_raises_no_rows(history: SqliteHistory) -> None:
    """Test latest raises NoRows, a NotFound, on an empty store."""
    with pytest.raises(NoRows):
        history.latest()
    assert issubclass(NoRows, NotFound)


def test_latest_prefers_pinned_entry(history: SqliteHistory) -> None:
    """Test latest follows list(1) ordering."""
    pinned = history.insert("old but pinned", "laptop")
    history.insert("newer", "laptop")
    history.set_pinned(pinned.id, True)

    assert history.latest().id == pinned.id
    assert history.latest() == history.list(1)[0]


def test_entries_persist_across_reopen(tmp_path: Path) -> None:
    """Test entries are committed to disk before insert returns."""
    path = tmp_path / "persist.db"
    first = SqliteHistory(path)
    first.init()
    created = first.insert("durable", "laptop")
    first.close()

    second = SqliteHistory(path)
    second.init()
    try:
        assert second.by_id(created.id).text == "durable"
    finally:
        second.close()


def test_memory_path_is_supported() -> None:
    """Test ':memory:' opens a working private database."""
    store = SqliteHistory(":memory:")
    store.init()
    try:
        assert store.insert("x", "y").id == 1
    finally:
        store.close()


def test_init_adds_missing_pinned_column(tmp_path: Path) -> None:
    """Test databases created before pinning gain the pinned column."""
    path = tmp_path / "legacy.db"
    conn = sqlite3.connect(path)
    conn.execute(
        "CREATE TABLE clipboard_history (id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "text TEXT NOT NULL, source TEXT NOT NULL, updated_at TEXT NOT NULL)"
    )
    conn.execute(
        "INSERT INTO clipboard_history (text, source, updated_at) VALUES (?, ?, ?)",
        ("legacy", "old-client", "2024-01-02T03:04:05Z"),
    )
    conn.commit()
    conn.close()

    store = SqliteHistory(path)
    store.init()
    try:
        entry = store.latest()
        assert entry.text == "legacy"
        assert entry.pinned is False
        assert entry.updated_at.tzinfo is not None
    finally:
        store.close()


def test_uninitialized_store_raises_storage_error(tmp_path: Path) -> None:
    """Test using the store before init raises StorageError."""
    store = SqliteHistory(tmp_path / "never.db")
    with pytest.raises(StorageError):
        store.insert("x", "y")


def test_init_failure_raises_storage_error(tmp_path: Path) -> None:
    """Test an unusable database path raises StorageError."""
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    store = SqliteHistory(blocker / "clipboard.db")
    with pytest.raises(StorageError):
        store.init()


class LockedConnection:
    """Connection proxy failing the first N execute calls as locked."""

    def __init__(self, conn: sqlite3.Connection, failures: int) -> None:
        self._conn = conn
        self.failures = failures

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        if self.failures:
            self.failures -= 1
            raise sqlite3.OperationalError("database is locked")
        return self._conn.execute(sql, params)

    def __getattr__(self, name: str):
        return getattr(self._conn, name)


def test_locked_database_is_retried(history: SqliteHistory) -> None:
    """Test a transient 'database is locked' error is retried."""
    history._conn = LockedConnection(history._conn, failures=1)

    entry = history.insert("after lock", "laptop")
    assert history.by_id(entry.id).text == "after lock"


def test_persistently_locked_database_raises_storage_error(history: SqliteHistory) -> None:
    """Test retries give up and surface StorageError."""
    history._conn = LockedConnection(history._conn, failures=100)

    with pytest.raises(StorageError):
        history.insert("never stored", "laptop")
    history._conn.failures = 0
    assert history.count() == 0


def test_other_sqlite_errors_are_not_retried(history: SqliteHistory) -> None:
    """Test non-lock errors surface immediately as StorageError."""
    with patch.object(
        history, "_conn", wraps=history._conn
    ) as conn:
        conn.execute.side_effect = sqlite3.DatabaseError("disk image is malformed")
        conn.in_transaction = False
        with pytest.raises(StorageError):
            history.latest()
        assert conn.execute.call_count == 1
