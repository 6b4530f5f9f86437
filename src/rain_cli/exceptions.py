"""Custom exception hierarchy for raindrop-cli.

All exceptions that cross layer boundaries must inherit from
:class:`RainError`.  Raw third-party exceptions (e.g. from httpx)
must NEVER propagate beyond the infrastructure layer. They must be
caught and re-raised as a typed subclass defined here.

Every subclass carries a stable machine-readable ``code`` which the
CLI layer maps to a process exit code.

Hierarchy
---------
RainError
├── InvalidArgumentsError   INVALID_ARGS
├── AuthMissingError        AUTH_MISSING
├── AuthInvalidError        AUTH_INVALID
├── NotFoundError           NOT_FOUND
├── RateLimitedError        RATE_LIMITED
├── ApiError                API_ERROR
└── NetworkError            NETWORK_ERROR
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class RainError(Exception):
    """Base exception for all raindrop-cli errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean
    envelope without leaking internal stack traces.
    """

    code: str = "INTERNAL_ERROR"
    default_suggest: tuple[str, ...] = (
        "Run `rain help` to see available commands.",
    )

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        suggest: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance, listed first in ``suggest``."""
        self._extra_suggest: tuple[str, ...] = tuple(suggest)

    @property
    def message(self) -> str:
        return str(self)

    @property
    def suggest(self) -> list[str]:
        """Ordered, de-duplicated suggestions; never empty."""
        items: list[str] = []
        for entry in (self.hint, *self._extra_suggest, *self.default_suggest):
            if entry and entry not in items:
                items.append(entry)
        return items


# --- Local validation -------------------------------------------------------

class InvalidArgumentsError(RainError):
    """Raised when CLI input is malformed or unsupported."""

    code = "INVALID_ARGS"
    default_suggest = ("Run `rain help <command>` to see accepted flags.",)


# --- Authentication ---------------------------------------------------------

class AuthMissingError(RainError):
    """Raised when no credential can be resolved locally."""

    code = "AUTH_MISSING"
    default_suggest = (
        "Set RAINDROP_TOKEN to a Raindrop.io test token.",
        "Or write the token to ~/.config/rain/token.",
    )


class AuthInvalidError(RainError):
    """Raised when the remote service rejects the credential (401/403)."""

    code = "AUTH_INVALID"
    default_suggest = (
        "Check that RAINDROP_TOKEN (or ~/.config/rain/token) holds a valid token.",
        "Create a new test token at https://app.raindrop.io/settings/integrations.",
    )


# --- Remote responses -------------------------------------------------------

class NotFoundError(RainError):
    """Raised when the addressed resource does not exist upstream (404)."""

    code = "NOT_FOUND"
    default_suggest = ("Verify the id with `rain ls --ids-only` or `rain search`.",)


class RateLimitedError(RainError):
    """Raised when the remote service throttles the client (429)."""

    code = "RATE_LIMITED"
    default_suggest = ("Wait a minute before retrying; Raindrop allows 120 requests per minute.",)


class ApiError(RainError):
    """Raised for any other non-success response or an unexpected payload shape."""

    code = "API_ERROR"
    default_suggest = ("Retry later; if the problem persists check https://status.raindrop.io.",)

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: Any = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status: int | None = status
        self.body: Any = body


class NetworkError(RainError):
    """Raised when the HTTP exchange could not be completed at all."""

    code = "NETWORK_ERROR"
    default_suggest = (
        "Check your network connection.",
        "Check RAINDROP_API_BASE if you point the client at a custom server.",
    )
