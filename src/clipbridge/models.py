#!/usr/bin/env python3
"""Wire and storage models for clipboard entries.

ClipboardEntry is the unit of record shared by the history store, the
latest-value cache, the HTTP API, and the polling client. The request
models describe the JSON bodies accepted by the server.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ClipboardEntry(BaseModel):
    """One recorded clipboard value with its metadata.

    Attributes:
        id: Store-assigned, strictly increasing identifier.
        text: Normalized, non-empty clipboard content.
        source: Label of the device or UI that produced the entry.
        updated_at: UTC timestamp set at insertion.
        pinned: Whether the entry is pinned ahead of newer entries.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    text: str
    source: str
    updated_at: datetime
    pinned: bool = False


class SubmitRequest(BaseModel):
    text: str
    source: str | None = None


class PinRequest(BaseModel):
    id: int
    pinned: bool


class DeleteRequest(BaseModel):
    id: int
