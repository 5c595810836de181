#!/usr/bin/env python3
"""SHA-256 digests of clipboard text for change detection."""
import hashlib

__all__ = ["compute_hash"]


def compute_hash(text: str) -> str:
    """
    Compute SHA-256 hash of clipboard text.

    Args:
        text: Clipboard text to hash (UTF-8 encoded before hashing).

    Returns:
        Hexadecimal string representation of the SHA-256 digest.
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
