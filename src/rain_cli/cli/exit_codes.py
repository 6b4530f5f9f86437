"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Command completed; for ``exists`` the URL was found."""

NOT_FOUND: int = 1
"""Resource missing upstream, or ``exists`` found no match."""

INVALID_ARGS: int = 2
"""Malformed or unsupported command-line input."""

AUTH: int = 3
"""No credential available, or the credential was rejected."""

RATE_LIMITED: int = 4
"""The remote service throttled the request."""

API_FAILURE: int = 5
"""Upstream error, transport failure, or an unexpected internal error."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""

BY_ERROR_CODE: dict[str, int] = {
    "INVALID_ARGS": INVALID_ARGS,
    "AUTH_MISSING": AUTH,
    "AUTH_INVALID": AUTH,
    "NOT_FOUND": NOT_FOUND,
    "RATE_LIMITED": RATE_LIMITED,
    "API_ERROR": API_FAILURE,
    "NETWORK_ERROR": API_FAILURE,
    "INTERNAL_ERROR": API_FAILURE,
}


def for_error_code(code: str) -> int:
    """Exit code for an envelope error code."""
    return BY_ERROR_CODE.get(code, API_FAILURE)
