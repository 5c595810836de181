#!/usr/bin/env python3
"""Startup wait for the clipboard server.

This module provides server reachability checks with automatic retry using
tenacity for exponential backoff. The client waits here before entering
the convergence loop so that a server started after the client is picked
up without spinning through failed cycles.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import TYPE_CHECKING

from tenacity import retry, retry_if_exception_type, stop_never, wait_exponential

from clipbridge.client_constants import INITIAL_WAIT, MAX_WAIT, WAIT_MULTIPLIER
from clipbridge.errors import TransportError

if TYPE_CHECKING:
    from clipbridge.remote import RemoteClipboard

logger = logging.getLogger(__name__)


@retry(
    wait=wait_exponential(
        multiplier=WAIT_MULTIPLIER,
        min=INITIAL_WAIT,
        max=MAX_WAIT,
    ),
    retry=retry_if_exception_type(TransportError),
    stop=stop_never,
)
async def wait_for_server(remote: RemoteClipboard) -> None:
    """Block until the server answers, retrying with exponential backoff.

    Args:
        remote: Client for the clipboard server.

    Note:
        This function only returns once the server is reachable; cancel
        the awaiting task to give up.
    """
    logger.debug("Checking server at %s", remote.base_url)
    try:
        await remote.ping()
    except TransportError as e:
        logger.warning("Server at %s unreachable, will retry: %s", remote.base_url, e)
        raise
    logger.debug("Server at %s is reachable", remote.base_url)


async def wait_for_server_or_shutdown(
    remote: RemoteClipboard, shutdown_requested: asyncio.Event
) -> bool:
    """Wait for the server unless shutdown is requested first.

    Args:
        remote: Client for the clipboard server.
        shutdown_requested: Event signaling graceful shutdown request.

    Returns:
        True if the server is reachable, False if shutdown won the race.
    """
    server_task = asyncio.create_task(wait_for_server(remote))
    shutdown_task = asyncio.create_task(shutdown_requested.wait())
    try:
        done, _ = await asyncio.wait(
            {server_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (server_task, shutdown_task):
            if not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task

    if server_task in done:
        server_task.result()
        return True
    return False
