#!/usr/bin/env python3
"""Client convergence loop.

Each cycle runs strictly in order: read the local clipboard, maybe push,
maybe pull and apply, then sleep. The loop has no terminal state; it runs
until shutdown is requested. A requested shutdown never interrupts a cycle
in progress, only the sleep between cycles. An unexpected error in one
cycle is logged and the next cycle runs as usual.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import TYPE_CHECKING

from clipbridge.errors import AdapterError
from clipbridge.sync_handlers import pull_remote_change, push_local_change

if TYPE_CHECKING:
    from clipbridge.clipboard import ClipboardPort
    from clipbridge.remote import RemoteClipboard
    from clipbridge.sync_state import ClientSyncState

logger = logging.getLogger(__name__)


async def run_cycle(
    state: ClientSyncState, clipboard: ClipboardPort, remote: RemoteClipboard
) -> None:
    """Run one read / push / pull / apply cycle.

    A failed local read skips the rest of the cycle.

    Args:
        state: The client sync state.
        clipboard: Local clipboard adapter.
        remote: Client for the clipboard server.
    """
    try:
        text = await clipboard.read()
    except AdapterError as e:
        logger.debug("Local clipboard read failed, skipping cycle: %s", e)
        return

    text = text.strip()
    await push_local_change(state, remote, text)

    if clipboard.can_write:
        await pull_remote_change(state, clipboard, remote, text)


async def wait_for_shutdown(shutdown_requested: asyncio.Event, interval: float) -> bool:
    """Sleep for interval unless shutdown is requested first.

    Returns:
        True if shutdown was requested.
    """
    with suppress(asyncio.TimeoutError):
        await asyncio.wait_for(shutdown_requested.wait(), timeout=interval)
    return shutdown_requested.is_set()


async def run_sync_loop(
    state: ClientSyncState,
    clipboard: ClipboardPort,
    remote: RemoteClipboard,
    interval: float,
    shutdown_requested: asyncio.Event,
) -> None:
    """Run convergence cycles every interval seconds until shutdown.

    Args:
        state: The client sync state.
        clipboard: Local clipboard adapter.
        remote: Client for the clipboard server.
        interval: Seconds to sleep between cycles.
        shutdown_requested: Event that stops the loop once set.
    """
    while not shutdown_requested.is_set():
        try:
            await run_cycle(state, clipboard, remote)
        except Exception:
            logger.exception("Unexpected error in sync cycle, continuing")
        if await wait_for_shutdown(shutdown_requested, interval):
            break
    logger.debug("Sync loop stopped")
