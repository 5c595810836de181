#!/usr/bin/env python3
"""Server-side sync operations.

SyncService is the transport-agnostic API behind the HTTP routes. It
validates input at the boundary, writes through the history store, and
keeps the latest-value cache consistent:
- submit() is the only path that creates clipboard content
- the cache is updated only after the store write succeeded
- pin and delete change history metadata, never an entry's text

Cache writes go through one service lock, so an insert and its cache
update can never interleave with a re-seed after pin or delete.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from clipbridge.errors import InvalidArgument, NoRows, NotFound
from clipbridge.latest_cache import LatestCache
from clipbridge.text import normalize_source, normalize_text

if TYPE_CHECKING:
    from clipbridge.history import RecordStorePort
    from clipbridge.models import ClipboardEntry

logger = logging.getLogger(__name__)


def _validate_id(entry_id: int) -> None:
    if entry_id <= 0:
        raise InvalidArgument("id is required")


class SyncService:
    """Clipboard sync operations over a history store and latest cache.

    Args:
        store: The history store backing all reads and writes.
        cache: Latest-value cache; a fresh one is created when omitted.
    """

    def __init__(self, store: RecordStorePort, cache: LatestCache | None = None) -> None:
        self.store = store
        self.cache = cache if cache is not None else LatestCache()
        self._write_lock = threading.Lock()

    def seed_cache(self) -> None:
        """Load the store's latest entry into the cache.

        Called once at startup. An empty store leaves the cache unset.

        Raises:
            StorageError: If the store cannot be read.
        """
        try:
            latest = self.store.latest()
        except NoRows:
            logger.debug("History is empty, latest cache left unset")
            return
        self.cache.set(latest)
        logger.debug("Latest cache seeded with entry %d", latest.id)

    def submit(self, text: str, source: str | None) -> ClipboardEntry:
        """Record a new clipboard value.

        Args:
            text: Clipboard text from the client.
            source: Label of the submitting device or UI.

        Returns:
            The created entry.

        Raises:
            InvalidArgument: If the text is empty after trimming.
            StorageError: If the store write fails (cache is left untouched).
        """
        text = normalize_text(text).strip()
        if not text:
            raise InvalidArgument("text is required")
        source = normalize_source(source)

        with self._write_lock:
            entry = self.store.insert(text, source)
            self.cache.set(entry)
        logger.debug("Stored entry %d from %s (%d chars)", entry.id, source, len(text))
        return entry

    def fetch_latest(self) -> ClipboardEntry:
        """Return the cached latest entry.

        Raises:
            NotFound: If nothing has been stored yet.
        """
        latest = self.cache.get()
        if latest is None or not latest.text.strip():
            raise NotFound("clipboard is empty")
        return latest

    def list_history(self, limit: int, search: str = "") -> list[ClipboardEntry]:
        return self.store.list(limit, search.strip())

    def set_pin(self, entry_id: int, pinned: bool) -> ClipboardEntry:
        """Pin or unpin an entry and return its updated state.

        When the entry is the cached latest value, the cache is refreshed
        so GET /clipboard reports the new pinned flag.

        Raises:
            InvalidArgument: If entry_id is not positive.
            NotFound: If the entry does not exist.
        """
        _validate_id(entry_id)
        with self._write_lock:
            self.store.set_pinned(entry_id, pinned)
            entry = self.store.by_id(entry_id)
            cached = self.cache.get()
            if cached is not None and cached.id == entry_id:
                self.cache.set(entry)
        return entry

    def delete_entry(self, entry_id: int) -> None:
        """Permanently delete an entry.

        If the deleted entry is the cached latest value, the cache is
        re-derived from the store so a removed value is never served.

        Raises:
            InvalidArgument: If entry_id is not positive.
            NotFound: If the entry does not exist.
        """
        _validate_id(entry_id)
        with self._write_lock:
            self.store.delete(entry_id)
            cached = self.cache.get()
            if cached is not None and cached.id == entry_id:
                try:
                    self.cache.set(self.store.latest())
                except NoRows:
                    self.cache.set(None)
