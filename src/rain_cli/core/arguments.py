"""Schema-driven tokenizer for command-line arguments.

Every function in this module is a **pure** transformation with no I/O
and is fully deterministic.  The parser knows only flag names and kinds; it
never interprets positional count or type.  That is each command
handler's job (see :mod:`rain_cli.core.validators`).

Rules
-----
* Flags are long-form only (``--name`` or ``--name=value``) and may
  appear anywhere on the line.
* A string flag consumes the next token verbatim, even when it starts
  with ``-`` (``--sort -created``, ``--tags -old``).
* ``--`` ends flag parsing; everything after it is positional.
* Unknown flags, missing values and repeated flags raise
  :class:`~rain_cli.exceptions.InvalidArgumentsError`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from rain_cli.core.models import FlagValue, ParsedInvocation
from rain_cli.exceptions import InvalidArgumentsError

JSON_FLAG: str = "--json"


class FlagKind(str, Enum):
    BOOL = "boolean"
    STRING = "string"


@dataclass(frozen=True, slots=True)
class FlagSpec:
    """One flag accepted by a command."""

    kind: FlagKind
    help: str = ""
    metavar: str = ""


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """Flag schema and help text for one command."""

    name: str
    summary: str
    usage: str
    flags: Mapping[str, FlagSpec] = field(default_factory=dict)
    needs_auth: bool = True


def extract_json_flag(tokens: Sequence[str]) -> tuple[list[str], bool]:
    """Global pre-pass: strip every ``--json`` token.

    Returns the remaining tokens and whether JSON output was forced.
    Tokens after a ``--`` terminator are left untouched.
    """
    remaining: list[str] = []
    forced = False
    terminated = False
    for token in tokens:
        if not terminated and token == "--":
            terminated = True
        if not terminated and token == JSON_FLAG:
            forced = True
            continue
        remaining.append(token)
    return remaining, forced


def parse_invocation(
    spec: CommandSpec,
    tokens: Sequence[str],
) -> ParsedInvocation:
    """Split *tokens* into positionals and a flag map according to *spec*."""
    positionals: list[str] = []
    flags: dict[str, FlagValue] = {}

    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1

        if token == "--":
            positionals.extend(tokens[index:])
            break

        if not token.startswith("--"):
            positionals.append(token)
            continue

        name, has_inline, inline_value = token[2:].partition("=")
        flag_spec = spec.flags.get(name)
        if not name or flag_spec is None:
            raise InvalidArgumentsError(
                f"Unknown flag for `{spec.name}`: {token}",
                hint=f"Usage: {spec.usage}",
            )
        if name in flags:
            raise InvalidArgumentsError(
                f"Flag --{name} was given more than once.",
                hint=f"Usage: {spec.usage}",
            )

        if flag_spec.kind is FlagKind.BOOL:
            if has_inline:
                raise InvalidArgumentsError(
                    f"Flag --{name} does not take a value: {token}",
                )
            flags[name] = True
            continue

        if has_inline:
            flags[name] = inline_value
            continue
        if index >= len(tokens):
            raise InvalidArgumentsError(
                f"Flag --{name} requires a value.",
                hint=f"Usage: {spec.usage}",
            )
        flags[name] = tokens[index]
        index += 1

    return ParsedInvocation(
        command=spec.name,
        positionals=tuple(positionals),
        flags=MappingProxyType(flags),
    )
