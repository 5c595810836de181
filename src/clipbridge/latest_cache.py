#!/usr/bin/env python3
"""Single-slot cache of the latest clipboard entry.

The cache is a read shortcut over the history store's latest() so that
polling clients never hit the database. It is owned by the sync service,
seeded from the store at startup, and overwritten only after a store write
has succeeded. Readers may run concurrently with each other but never with
the writer.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clipbridge.models import ClipboardEntry


class ReadWriteLock:
    """Readers-writer lock that lets a waiting writer block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()


class LatestCache:
    """Holds the most recent ClipboardEntry, or None if never set."""

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._entry: ClipboardEntry | None = None

    def set(self, entry: ClipboardEntry | None) -> None:
        """Replace the cached entry unconditionally.

        Args:
            entry: The new latest entry, or None to clear the cache.
        """
        self._lock.acquire_write()
        try:
            self._entry = entry
        finally:
            self._lock.release_write()

    def get(self) -> ClipboardEntry | None:
        self._lock.acquire_read()
        try:
            return self._entry
        finally:
            self._lock.release_read()
