#!/usr/bin/env python3
"""Text normalization applied to clipboard content before it is persisted."""

DEFAULT_SOURCE: str = "unknown"


def normalize_text(value: str) -> str:
    """Strip NUL characters and normalize line endings to LF.

    Args:
        value: Raw text as received from a client.

    Returns:
        The text with NUL removed and CRLF / lone CR converted to LF.
    """
    value = value.replace("\x00", "")
    value = value.replace("\r\n", "\n")
    return value.replace("\r", "\n")


def normalize_source(source: str | None) -> str:
    """Return a normalized source label, defaulting blank labels.

    Args:
        source: Source label sent by the client, possibly empty or None.

    Returns:
        The normalized label, or DEFAULT_SOURCE when blank after trimming.
    """
    if source is None or not source.strip():
        return DEFAULT_SOURCE
    return normalize_text(source)
