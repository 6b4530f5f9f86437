"""Local validation of positionals and flag values.

Everything here runs before any credential lookup or network call, so
bad input always ends in ``INVALID_ARGS`` with zero requests issued.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime, timezone

from rain_cli.core.models import ParsedInvocation
from rain_cli.exceptions import InvalidArgumentsError

MAX_PAGE_SIZE: int = 50
"""Largest ``perpage`` the remote service accepts."""

_ID_RE = re.compile(r"^[1-9][0-9]*$")
_COLLECTION_RE = re.compile(r"^-?[0-9]+$")


def parse_id(raw: str, *, what: str = "bookmark id") -> int:
    """Positive integer id."""
    value = raw.strip()
    if not _ID_RE.match(value):
        raise InvalidArgumentsError(
            f"Invalid {what}: {raw!r}",
            hint="Ids are positive integers, e.g. 483920.",
        )
    return int(value)


def parse_collection_id(raw: str) -> int:
    """Collection id; system collections are negative (-1 unsorted, -99 trash)."""
    value = raw.strip()
    if not _COLLECTION_RE.match(value):
        raise InvalidArgumentsError(
            f"Invalid collection id: {raw!r}",
            hint="Use a numeric id from `rain collections`, 0 for all, -1 for Unsorted.",
        )
    return int(value)


def parse_int_range(
    raw: str,
    *,
    flag: str,
    minimum: int,
    maximum: int | None = None,
) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise InvalidArgumentsError(f"--{flag} must be an integer, got {raw!r}.") from None
    if value < minimum or (maximum is not None and value > maximum):
        bound = f"between {minimum} and {maximum}" if maximum is not None else f">= {minimum}"
        raise InvalidArgumentsError(f"--{flag} must be {bound}, got {value}.")
    return value


def parse_limit(invocation: ParsedInvocation, default: int) -> int:
    raw = invocation.flag("limit")
    if raw is None:
        return default
    return parse_int_range(raw, flag="limit", minimum=1, maximum=MAX_PAGE_SIZE)


def parse_page(invocation: ParsedInvocation) -> int:
    raw = invocation.flag("page")
    if raw is None:
        return 0
    return parse_int_range(raw, flag="page", minimum=0)


def parse_choice(raw: str, *, flag: str, choices: Sequence[str]) -> str:
    if raw not in choices:
        raise InvalidArgumentsError(
            f"--{flag} must be one of {', '.join(choices)}; got {raw!r}.",
        )
    return raw


def parse_csv_list(raw: str) -> list[str]:
    """Comma-separated list, trimmed, empty entries dropped."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_fields(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    fields = parse_csv_list(raw)
    if not fields:
        raise InvalidArgumentsError(
            "--fields needs at least one field name.",
            hint="Example: --fields id,title,link,tags",
        )
    return fields


def parse_url(raw: str) -> str:
    value = raw.strip()
    if not value.startswith(("http://", "https://")):
        raise InvalidArgumentsError(
            f"Invalid URL: {raw!r}",
            hint="URL must start with http:// or https://",
        )
    return value


def parse_timestamp(raw: str, *, flag: str = "since") -> datetime:
    """ISO-8601 instant; naive values are taken as UTC."""
    try:
        value = datetime.fromisoformat(raw.strip())
    except ValueError:
        raise InvalidArgumentsError(
            f"--{flag} must be an ISO-8601 timestamp, got {raw!r}.",
            hint="Example: --since 2024-06-15T00:00:00Z",
        ) from None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def no_positionals(invocation: ParsedInvocation) -> None:
    if invocation.positionals:
        raise InvalidArgumentsError(
            f"`{invocation.command}` takes no positional arguments; "
            f"got {' '.join(invocation.positionals)!r}.",
        )


def at_most_one_positional(invocation: ParsedInvocation, what: str) -> str | None:
    if len(invocation.positionals) > 1:
        raise InvalidArgumentsError(
            f"`{invocation.command}` expects at most one {what}.",
        )
    return invocation.positionals[0] if invocation.positionals else None


def exactly_one_positional(invocation: ParsedInvocation, what: str) -> str:
    if len(invocation.positionals) != 1:
        raise InvalidArgumentsError(
            f"`{invocation.command}` expects exactly one {what}.",
        )
    return invocation.positionals[0]
