#!/usr/bin/env python3
"""Pytest fixtures for clipbridge tests.

Provides a temporary SQLite history, a sync service and HTTP app built on
it, an in-memory clipboard double, and a RemoteClipboard wired to the app
through httpx's ASGI transport.
"""

from collections.abc import AsyncGenerator, Generator
from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from clipbridge.errors import NoRows, NotFound, ReadError, StorageError, WriteError
from clipbridge.history import SqliteHistory, validate_limit
from clipbridge.models import ClipboardEntry
from clipbridge.remote import RemoteClipboard
from clipbridge.server_app import create_app
from clipbridge.server_handlers import SyncService


class FakeClipboard:
    """In-memory ClipboardPort double recording every write."""

    def __init__(self, text: str = "", writable: bool = True) -> None:
        self.text = text
        self.writable = writable
        self.writes: list[str] = []
        self.reads = 0
        self.fail_reads = False
        self.fail_writes = False

    @property
    def can_write(self) -> bool:
        return self.writable

    async def read(self) -> str:
        self.reads += 1
        if self.fail_reads:
            raise ReadError("fake read failure")
        return self.text

    async def write(self, text: str) -> None:
        if self.fail_writes:
            raise WriteError("fake write failure")
        self.writes.append(text)
        self.text = text


class MemoryHistory:
    """In-memory RecordStorePort double.

    Set fail_writes to make insert raise StorageError.
    """

    def __init__(self) -> None:
        self.entries: dict[int, ClipboardEntry] = {}
        self.next_id = 1
        self.fail_writes = False

    def insert(self, text: str, source: str) -> ClipboardEntry:
        if self.fail_writes:
            raise StorageError("fake storage failure")
        entry = ClipboardEntry(
            id=self.next_id, text=text, source=source, updated_at=datetime.now(timezone.utc)
        )
        self.entries[entry.id] = entry
        self.next_id += 1
        return entry

    def by_id(self, entry_id: int) -> ClipboardEntry:
        if entry_id not in self.entries:
            raise NotFound(f"entry {entry_id} not found")
        return self.entries[entry_id]

    def list(self, limit: int, search: str = "") -> list[ClipboardEntry]:
        validate_limit(limit)
        matches = [
            entry
            for entry in self.entries.values()
            if not search or search.casefold() in entry.text.casefold()
        ]
        matches.sort(key=lambda entry: (entry.pinned, entry.id), reverse=True)
        return matches[:limit]

    def set_pinned(self, entry_id: int, pinned: bool) -> None:
        entry = self.by_id(entry_id)
        self.entries[entry_id] = entry.model_copy(update={"pinned": pinned})

    def delete(self, entry_id: int) -> None:
        self.by_id(entry_id)
        del self.entries[entry_id]

    def latest(self) -> ClipboardEntry:
        if not self.entries:
            raise NoRows("clipboard history is empty")
        return self.list(1)[0]


@pytest.fixture
def history(tmp_path: Path) -> Generator[SqliteHistory, None, None]:
    """Create an initialized SqliteHistory in a temporary directory."""
    store = SqliteHistory(tmp_path / "clipboard.db")
    store.init()
    yield store
    store.close()


@pytest.fixture
def service(history: SqliteHistory) -> SyncService:
    """Create a SyncService over the temporary history."""
    return SyncService(history)


@pytest.fixture
def app(service: SyncService) -> FastAPI:
    """Create the HTTP app serving the temporary history."""
    return create_app(service)


@pytest.fixture
def api(app: FastAPI) -> TestClient:
    """Create a TestClient for the HTTP app."""
    return TestClient(app)


@pytest.fixture
def fake_clipboard() -> FakeClipboard:
    """Create an empty, writable fake clipboard."""
    return FakeClipboard()


@pytest.fixture
async def remote(app: FastAPI) -> AsyncGenerator[RemoteClipboard, None]:
    """Create a RemoteClipboard talking to the app in-process."""
    transport = httpx.ASGITransport(app=app)
    client = RemoteClipboard("http://clipbridge.test/", timeout=5.0, transport=transport)
    yield client
    await client.close()


@pytest.fixture
def memory_history() -> MemoryHistory:
    """Create an empty in-memory history."""
    return MemoryHistory()
