"""httpx-backed implementation of :class:`~rain_cli.core.protocols.Transport`.

This module is the **only** place in the codebase that imports ``httpx``.
All httpx exceptions are caught here and re-raised as typed
:class:`~rain_cli.exceptions.RainError` subclasses, and HTTP status
codes are classified here and nowhere else.

No retries and no backoff: the first failure is surfaced to the caller.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from rain_cli.core.protocols import QueryValue
from rain_cli.exceptions import (
    ApiError,
    AuthInvalidError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
)
from rain_cli.version import __version__

logger = logging.getLogger(__name__)

_MAX_BODY_IN_MESSAGE: int = 300


def build_query(query: Mapping[str, QueryValue] | None) -> dict[str, str]:
    """Drop absent values and serialise the rest the way the API expects."""
    params: dict[str, str] = {}
    for key, value in (query or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        else:
            params[key] = str(value)
    return params


def decode_body(response: httpx.Response) -> Any:
    """Parse a JSON body; fall back to the raw text for anything else."""
    text = response.text
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def _upstream_message(payload: Any) -> str | None:
    if isinstance(payload, dict):
        for key in ("errorMessage", "message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    if isinstance(payload, str) and payload.strip():
        return payload.strip()[:_MAX_BODY_IN_MESSAGE]
    return None


class HttpTransport:
    """Synchronous REST transport.

    Usage::

        with HttpTransport("https://api.raindrop.io/rest/v1") as transport:
            payload = transport.request("GET", "/raindrop/1", token)

    Parameters
    ----------
    base_url:
        Service root; request paths are appended to it.
    timeout:
        Seconds per request, or ``None`` to keep httpx's default.
    client:
        Pre-built client (tests); when given, *base_url* is still used
        to build absolute URLs.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url: str = base_url.rstrip("/")
        if client is None:
            options: dict[str, Any] = {
                "headers": {
                    "User-Agent": f"raindrop-cli/{__version__}",
                    "Accept": "application/json",
                },
            }
            if timeout is not None:
                options["timeout"] = httpx.Timeout(timeout)
            client = httpx.Client(**options)
        self._client: httpx.Client = client

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        credential: str,
        *,
        query: Mapping[str, QueryValue] | None = None,
        body: Any = None,
    ) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        params = build_query(query)
        headers = {"Authorization": f"Bearer {credential}"}
        logger.debug("%s %s params=%s", method, url, params)

        try:
            response = self._client.request(
                method,
                url,
                params=params or None,
                json=body,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(
                f"Request to {url} timed out.",
                hint="Set RAINDROP_TIMEOUT to allow slower responses.",
            ) from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise NetworkError(
                f"Could not complete {method} {url}: {type(exc).__name__}: {exc}",
                hint="Check RAINDROP_API_BASE and your connection, then retry.",
            ) from exc

        logger.debug("%s %s -> %s", method, url, response.status_code)
        payload = decode_body(response)
        if response.is_success:
            return payload
        self._raise_mapped(response.status_code, payload, method, path)

    # ------------------------------------------------------------------
    # Status mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _raise_mapped(status: int, payload: Any, method: str, path: str) -> None:
        """Translate a non-2xx status into a domain exception.

        Always raises.
        """
        detail = _upstream_message(payload)
        suffix = f": {detail}" if detail else ""
        if status in (401, 403):
            raise AuthInvalidError(f"Token rejected by the server (HTTP {status}){suffix}")
        if status == 404:
            raise NotFoundError(f"Not found: {method} {path}{suffix}")
        if status == 429:
            raise RateLimitedError(f"Rate limited by the server (HTTP 429){suffix}")
        raise ApiError(
            f"Server returned HTTP {status} for {method} {path}{suffix}",
            status=status,
            body=payload,
        )
