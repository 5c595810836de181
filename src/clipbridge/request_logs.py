#!/usr/bin/env python3
"""In-memory log of recent HTTP requests served by the clipboard server.

Keeps at most MAX_REQUEST_LOGS records in a ring buffer. Bodies are
truncated to MAX_BODY_LOG_SIZE bytes. The records are exposed read-only
through GET /logs.
"""

from __future__ import annotations

import threading
from collections import deque
from datetime import datetime

from pydantic import BaseModel

MAX_REQUEST_LOGS: int = 500

# Per-body cap in bytes (64 KB).
MAX_BODY_LOG_SIZE: int = 64 * 1024


class RequestLogRecord(BaseModel):
    method: str
    path: str
    status: int
    remote_addr: str
    timestamp: datetime
    request_body: str = ""
    response_body: str = ""


def truncate_for_log(data: bytes, limit: int = MAX_BODY_LOG_SIZE) -> str:
    """Decode up to limit bytes of a body for logging."""
    if not data:
        return ""
    return data[:limit].decode("utf-8", errors="replace")


class RequestLogs:
    """Thread-safe ring buffer of RequestLogRecord."""

    def __init__(self, maxlen: int = MAX_REQUEST_LOGS) -> None:
        self._lock = threading.Lock()
        self._records: deque[RequestLogRecord] = deque(maxlen=maxlen)

    def add(self, record: RequestLogRecord) -> None:
        with self._lock:
            self._records.append(record)

    def list(self) -> list[RequestLogRecord]:
        """Return a copy of the buffered records, newest first."""
        with self._lock:
            return list(reversed(self._records))
