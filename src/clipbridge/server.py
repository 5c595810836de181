#!/usr/bin/env python3
"""Server mode implementation for clipbridge.

The server owns the authoritative clipboard value and its history:
- Opens (and migrates) the SQLite history database
- Seeds the latest-value cache from the newest qualifying entry
- Serves the HTTP API with uvicorn until interrupted

Usage:
    clipbridge --server --addr :8080 --db clipboard.db
"""

from __future__ import annotations

import logging

import uvicorn

from clipbridge.history import SqliteHistory
from clipbridge.server_address import parse_listen_addr, print_startup_message
from clipbridge.server_app import create_app
from clipbridge.server_handlers import SyncService

logger = logging.getLogger(__name__)


def build_service(history: SqliteHistory) -> SyncService:
    """Open the history store and return a sync service with a seeded cache.

    Args:
        history: The SQLite history store, not yet initialized.

    Raises:
        StorageError: If the database cannot be opened or read.
    """
    history.init()
    service = SyncService(history)
    service.seed_cache()
    return service


def run_server(addr: str, db_path: str, verbose: bool = False) -> None:
    """Run the clipboard server until interrupted.

    Args:
        addr: Listen address, e.g. ":8080" or "127.0.0.1:9000".
        db_path: Path to the SQLite history database.
        verbose: Raise uvicorn's log level to debug.

    Raises:
        ValueError: If the listen address is malformed.
        StorageError: If the history database is unusable.
    """
    host, port = parse_listen_addr(addr)
    history = SqliteHistory(db_path)
    app = create_app(build_service(history))

    print_startup_message(host, port, db_path)
    try:
        uvicorn.run(app, host=host, port=port, log_level="debug" if verbose else "warning")
    finally:
        history.close()
        logger.debug("History store closed")
