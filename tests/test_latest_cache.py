#!/usr/bin/env python3
"""
Tests for the latest-value cache and its readers-writer lock.
"""
import threading
import time
from datetime import datetime, timezone

from clipbridge.latest_cache import LatestCache, ReadWriteLock
from clipbridge.models import ClipboardEntry


def make_entry(entry_id: int, text: str = "value") -> ClipboardEntry:
    return ClipboardEntry(
        id=entry_id, text=text, source="laptop", updated_at=datetime.now(timezone.utc)
    )


def test_get_before_set_returns_none() -> None:
    """Test an unset cache returns None."""
    assert LatestCache().get() is None


def test_set_replaces_unconditionally() -> None:
    """Test set overwrites even with an older entry."""
    cache = LatestCache()
    cache.set(make_entry(5))
    cache.set(make_entry(2))
    assert cache.get().id == 2


def test_set_none_clears() -> None:
    """Test setting None clears the cache."""
    cache = LatestCache()
    cache.set(make_entry(1))
    cache.set(None)
    assert cache.get() is None


def test_readers_share_the_lock() -> None:
    """Test two readers can hold the lock at the same time."""
    lock = ReadWriteLock()
    lock.acquire_read()
    acquired = threading.Event()

    def second_reader() -> None:
        lock.acquire_read()
        acquired.set()
        lock.release_read()

    thread = threading.Thread(target=second_reader)
    thread.start()
    assert acquired.wait(timeout=1.0)
    thread.join()
    lock.release_read()


def test_writer_waits_for_readers() -> None:
    """Test a writer blocks until active readers release."""
    lock = ReadWriteLock()
    lock.acquire_read()
    written = threading.Event()

    def writer() -> None:
        lock.acquire_write()
        written.set()
        lock.release_write()

    thread = threading.Thread(target=writer)
    thread.start()
    time.sleep(0.05)
    assert not written.is_set()

    lock.release_read()
    assert written.wait(timeout=1.0)
    thread.join()


def test_concurrent_readers_never_see_partial_state() -> None:
    """Test readers only ever observe complete entries during writes."""
    cache = LatestCache()
    cache.set(make_entry(1, "text-1"))
    stop = threading.Event()
    bad: list[ClipboardEntry] = []

    def reader() -> None:
        while not stop.is_set():
            entry = cache.get()
            if entry is None or entry.text != f"text-{entry.id}":
                bad.append(entry)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for thread in readers:
        thread.start()
    for n in range(2, 200):
        cache.set(make_entry(n, f"text-{n}"))
    stop.set()
    for thread in readers:
        thread.join()

    assert bad == []
    assert cache.get().id == 199
