#!/usr/bin/env python3
"""
Error taxonomy for clipbridge.

Server-side errors map onto HTTP status codes in server_app.py:
- InvalidArgument: bad input, surfaced as 400
- NotFound (and NoRows): missing id or empty store, surfaced as 404
- StorageError: persistence failure, surfaced as 500

Client-side errors never terminate the convergence loop:
- AdapterError (ReadError, WriteError): local clipboard tool failed
- TransportError: the server could not be reached or answered unexpectedly
"""


class ClipbridgeError(Exception):
    """Base class for all clipbridge errors."""

    pass


class InvalidArgument(ClipbridgeError):
    """Input rejected at the boundary before reaching the store."""

    pass


class NotFound(ClipbridgeError):
    """Requested entry does not exist."""

    pass


class NoRows(NotFound):
    """The history store holds no entries."""

    pass


class StorageError(ClipbridgeError):
    """The underlying persistence layer failed."""

    pass


class AdapterError(ClipbridgeError):
    """
    Local clipboard tool is unavailable, failed, or timed out.

    Raised by the clipboard adapter. Non-fatal inside the convergence loop:
    the current cycle is skipped and the next one tries again.
    """

    pass


class ReadError(AdapterError):
    """Reading the local clipboard failed."""

    pass


class WriteError(AdapterError):
    """Writing the local clipboard failed."""

    pass


class TransportError(ClipbridgeError):
    """Network failure or unexpected response talking to the server."""

    pass
