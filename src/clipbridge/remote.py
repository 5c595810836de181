#!/usr/bin/env python3
"""HTTP client for the clipboard server.

RemoteClipboard is the client-side view of the server's Submit and
FetchLatest operations. Every request is bounded by a timeout; network
failures and unexpected responses are raised as TransportError so the
convergence loop can skip the step and retry on the next cycle.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from clipbridge.errors import NotFound, TransportError
from clipbridge.models import ClipboardEntry

logger = logging.getLogger(__name__)

# Upper bound in seconds for a single request to the server.
MAX_REQUEST_TIMEOUT: float = 5.0


def request_timeout(interval: float) -> float:
    """Return the request timeout for a poll interval (at most MAX_REQUEST_TIMEOUT)."""
    return min(interval, MAX_REQUEST_TIMEOUT)


class RemoteClipboard:
    """Async client for the clipboard server API.

    Args:
        base_url: Server base URL, e.g. "http://127.0.0.1:8080".
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (used to run against an
            in-process app).

    Usage:
        async with RemoteClipboard("http://127.0.0.1:8080", timeout=1.0) as remote:
            entry = await remote.fetch_latest()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = MAX_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RemoteClipboard:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {self.base_url}{path}: {e}") from e

    @staticmethod
    def _parse_entry(response: httpx.Response) -> ClipboardEntry:
        try:
            return ClipboardEntry.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportError(f"invalid entry in response: {e}") from e

    async def submit(self, text: str, source: str) -> ClipboardEntry:
        """Post text as the new clipboard value.

        Raises:
            TransportError: On network failure or a non-2xx response.
        """
        response = await self._request(
            "POST", "/clipboard", json={"text": text, "source": source}
        )
        if not response.is_success:
            raise TransportError(f"unexpected status {response.status_code} from POST /clipboard")
        return self._parse_entry(response)

    async def fetch_latest(self) -> ClipboardEntry:
        """Return the server's latest clipboard entry.

        Raises:
            NotFound: If the server has no clipboard value yet.
            TransportError: On network failure or an unexpected response.
        """
        response = await self._request("GET", "/clipboard")
        if response.status_code == 404:
            raise NotFound("server clipboard is empty")
        if response.status_code != 200:
            raise TransportError(f"unexpected status {response.status_code} from GET /clipboard")
        return self._parse_entry(response)

    async def ping(self) -> None:
        """Check that the server answers GET /clipboard (200 or 404).

        Raises:
            TransportError: If the server is unreachable or misbehaving.
        """
        try:
            await self.fetch_latest()
        except NotFound:
            pass
