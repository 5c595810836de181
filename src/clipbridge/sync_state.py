#!/usr/bin/env python3
"""
Client synchronization state for echo suppression.

Without tracking, a polling client would re-push an unchanged clipboard on
every cycle and re-apply values it had just pushed itself. ClientSyncState
remembers the last value the client either sent or applied
("last observed") and combines it with the source label of remote entries:
- should_push(): local text is new, so submit it
- should_apply(): remote text came from another source and differs from
  what is already on the local clipboard

The state is process-local and reset only on restart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from clipbridge.hashing import compute_hash

if TYPE_CHECKING:
    from clipbridge.models import ClipboardEntry


@dataclass
class ClientSyncState:
    """
    Track the last observed clipboard value of one client.

    Attributes:
        source: This client's source label.
        last_observed_hash: SHA-256 hex digest of the last text sent or
            applied, or None before the first successful push or apply.
    """

    source: str
    last_observed_hash: str | None = None

    def should_push(self, text: str) -> bool:
        """
        Check whether trimmed local text should be submitted.

        Args:
            text: Trimmed local clipboard text.

        Returns:
            True if text is non-empty and differs from the last observed value.
        """
        if not text:
            return False
        return compute_hash(text) != self.last_observed_hash

    def should_apply(self, remote: ClipboardEntry, local_text: str) -> bool:
        """
        Check whether a remote entry should be written to the local clipboard.

        Args:
            remote: Latest entry fetched from the server.
            local_text: Trimmed text read from the local clipboard this cycle.

        Returns:
            True if the remote text is non-empty, came from a different
            source, and differs from the local text.
        """
        if not remote.text:
            return False
        if remote.source == self.source:
            return False
        return remote.text != local_text

    def record_observed(self, text: str) -> None:
        """
        Record text as the last value sent or applied.

        Call after a successful submit or a successful local write.
        """
        self.last_observed_hash = compute_hash(text)
