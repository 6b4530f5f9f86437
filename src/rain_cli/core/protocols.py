"""Protocols (interfaces) consumed by the core layer.

Core code depends ONLY on these protocols, never on httpx or on the
concrete transport, so handlers can be exercised with a fake.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

QueryValue = str | int | bool | None


class Transport(Protocol):
    """Contract for the HTTP transport to the bookmark service."""

    def request(
        self,
        method: str,
        path: str,
        credential: str,
        *,
        query: Mapping[str, QueryValue] | None = None,
        body: Any = None,
    ) -> Any:
        """Perform one request and return the decoded response.

        Query entries whose value is ``None`` are omitted entirely.
        A 2xx body is returned as parsed JSON when it is JSON, otherwise
        as raw text.

        Raises
        ------
        NetworkError
            The exchange could not be completed (DNS, refused, timeout).
        AuthInvalidError
            Status 401 or 403.
        NotFoundError
            Status 404.
        RateLimitedError
            Status 429.
        ApiError
            Any other non-2xx status.
        """
        ...  # pragma: no cover


class BatchSource(Protocol):
    """Contract for piped batch input (one record per line)."""

    def available(self) -> bool:
        """``True`` when batch input was supplied (stdin is not a terminal)."""
        ...  # pragma: no cover

    def lines(self) -> list[str]:
        """All non-blank, trimmed input lines."""
        ...  # pragma: no cover
