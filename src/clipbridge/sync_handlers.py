#!/usr/bin/env python3
"""Convergence decisions for one polling cycle.

This module provides the two halves of a client cycle:
- push_local_change: submit the local clipboard when it holds a new value
- pull_remote_change: apply the server's latest value to the local clipboard

Both treat transport and adapter failures as non-fatal: the failure is
logged, the sync state is left unchanged, and the next cycle retries.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from clipbridge.errors import AdapterError, NotFound, TransportError

if TYPE_CHECKING:
    from clipbridge.clipboard import ClipboardPort
    from clipbridge.remote import RemoteClipboard
    from clipbridge.sync_state import ClientSyncState

logger = logging.getLogger(__name__)


async def push_local_change(
    state: ClientSyncState, remote: RemoteClipboard, text: str
) -> bool:
    """Submit local clipboard text if it is new.

    Args:
        state: The client sync state.
        remote: Client for the clipboard server.
        text: Trimmed text read from the local clipboard.

    Returns:
        True if the text was submitted, False if skipped or failed.
    """
    if not state.should_push(text):
        return False

    try:
        entry = await remote.submit(text, state.source)
    except (TransportError, NotFound) as e:
        logger.warning("Push failed, will retry next cycle: %s", e)
        return False

    state.record_observed(text)
    logger.debug("Pushed %d chars as entry %d", len(text), entry.id)
    return True


async def pull_remote_change(
    state: ClientSyncState,
    clipboard: ClipboardPort,
    remote: RemoteClipboard,
    local_text: str,
) -> bool:
    """Fetch the server's latest value and apply it locally if warranted.

    The remote value is applied only when it is non-empty, did not come
    from this client's source label, and differs from local_text.

    Args:
        state: The client sync state.
        clipboard: Local clipboard adapter with write capability.
        remote: Client for the clipboard server.
        local_text: Trimmed text read from the local clipboard this cycle.

    Returns:
        True if the local clipboard was updated.
    """
    try:
        latest = await remote.fetch_latest()
    except NotFound:
        logger.debug("Server clipboard is empty")
        return False
    except TransportError as e:
        logger.warning("Pull failed, will retry next cycle: %s", e)
        return False

    if not state.should_apply(latest, local_text):
        return False

    try:
        await clipboard.write(latest.text)
    except AdapterError as e:
        logger.warning("Local clipboard write failed: %s", e)
        return False

    state.record_observed(latest.text)
    logger.debug("Applied entry %d from %s", latest.id, latest.source)
    return True
