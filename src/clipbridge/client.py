#!/usr/bin/env python3
"""Client mode implementation for clipbridge.

This module provides the main entry point for client mode, which polls the
local clipboard and keeps it converged with the clipboard server: local
copies are pushed, and values copied elsewhere are pulled and applied.

See sync_loop.py for the per-cycle state machine and client_retry.py for
the startup wait.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import socket

from clipbridge.client_constants import FALLBACK_SOURCE
from clipbridge.client_retry import wait_for_server_or_shutdown
from clipbridge.clipboard import create_clipboard
from clipbridge.remote import RemoteClipboard, request_timeout
from clipbridge.sync_loop import run_sync_loop
from clipbridge.sync_state import ClientSyncState

logger = logging.getLogger(__name__)


def default_source() -> str:
    """Return this machine's hostname, or FALLBACK_SOURCE if unavailable."""
    try:
        hostname = socket.gethostname().strip()
    except OSError:
        return FALLBACK_SOURCE
    return hostname or FALLBACK_SOURCE


async def run_client(server_url: str, interval: float, source: str) -> None:
    """Run client mode against a clipboard server.

    Main entry point for client mode. Detects the local clipboard tools
    (failing fast when none is installed), waits for the server, and runs
    the convergence loop until SIGINT or SIGTERM.

    Args:
        server_url: Base URL of the clipboard server.
        interval: Seconds between convergence cycles.
        source: Source label identifying this client.

    Raises:
        AdapterError: If no supported clipboard tool is installed.
    """
    clipboard = create_clipboard()
    state = ClientSyncState(source=source)

    # Register signal handlers for clean shutdown
    shutdown_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_requested.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_requested.set)

    async with RemoteClipboard(server_url, timeout=request_timeout(interval)) as remote:
        if not await wait_for_server_or_shutdown(remote, shutdown_requested):
            return
        logger.info("Syncing clipboard with %s as %r", remote.base_url, source)
        await run_sync_loop(state, clipboard, remote, interval, shutdown_requested)
