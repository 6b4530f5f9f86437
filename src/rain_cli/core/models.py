"""Domain models for raindrop-cli.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access and small derived properties.  They live
for exactly one process invocation; nothing is persisted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any


# ---------------------------------------------------------------------------
# Parsed command line
# ---------------------------------------------------------------------------

FlagValue = str | bool


@dataclass(frozen=True, slots=True)
class ParsedInvocation:
    """One tokenized command line."""

    command: str
    """Verb, e.g. ``search`` or ``collection create``."""

    positionals: tuple[str, ...] = ()
    """Positional tokens in input order."""

    flags: Mapping[str, FlagValue] = field(default_factory=lambda: MappingProxyType({}))
    """Read-only map of flag name (without ``--``) → string value, or ``True`` for switches."""

    def flag(self, name: str) -> str | None:
        """Return a string flag value, or ``None`` when absent."""
        value = self.flags.get(name)
        return value if isinstance(value, str) else None

    def switch(self, name: str) -> bool:
        """Return ``True`` when boolean flag *name* was given."""
        return self.flags.get(name) is True


# ---------------------------------------------------------------------------
# Tag algebra
# ---------------------------------------------------------------------------

class TagMode(str, Enum):
    """How a tag expression mutates a bookmark's tag set."""

    REPLACE = "replace"
    OPS = "ops"
    DIRECT = "direct"


@dataclass(frozen=True, slots=True)
class TagExpression:
    """Parsed ``--tags`` value.

    * ``REPLACE``: ``adds`` is the complete new set.
    * ``DIRECT``: bare list; written as the new set in one call.
    * ``OPS``: signed tokens; needs the current set to compute the result.
    """

    mode: TagMode
    adds: tuple[str, ...] = ()
    removes: tuple[str, ...] = ()

    @property
    def needs_current_tags(self) -> bool:
        return self.mode is TagMode.OPS


# ---------------------------------------------------------------------------
# Watch window
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class WatchWindow:
    """Cutoff for ``watch`` plus the safety margin used while paging."""

    cutoff: datetime
    safety_margin: timedelta

    @property
    def relaxed_cutoff(self) -> datetime:
        """Cutoff shifted earlier by the safety margin."""
        return self.cutoff - self.safety_margin


# ---------------------------------------------------------------------------
# Dispatch result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Success:
    """Successful command result.

    ``found`` is ``False`` only when the answer itself is "no such
    resource" (``exists``); the envelope is still ``ok: true``.
    """

    data: Any
    meta: dict[str, Any] | None = None
    found: bool = True


@dataclass(frozen=True, slots=True)
class Failure:
    """Failed command result, carrying the classified error."""

    code: str
    message: str
    suggest: tuple[str, ...]
    exit_code: int


Outcome = Success | Failure
