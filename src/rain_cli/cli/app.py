"""CLI application entry point and command routing for raindrop-cli.

This module is the **sole error boundary** for the entire application.
The dispatch pipeline returns an explicit
:class:`~rain_cli.core.models.Outcome`; only :func:`main` turns it into
output and only :func:`cli` turns it into a process exit.

Architecture notes
------------------
* No business logic lives here; all work is delegated to the core
  handlers and the infrastructure layer.
* Exactly one envelope (or one help/version text) is printed per run.
* Nothing is written to stderr in normal operation.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from typing import TextIO

from pydantic import ValidationError

from rain_cli.cli import envelope, exit_codes
from rain_cli.cli.console import configure_logging
from rain_cli.cli.schema import (
    COLLECTION_SUBCOMMANDS,
    COMMANDS,
    command_help,
    help_text,
    robot_docs,
)
from rain_cli.config import RainSettings, resolve_credential
from rain_cli.core import bookmarks, library
from rain_cli.core.arguments import CommandSpec, extract_json_flag, parse_invocation
from rain_cli.core.context import CommandContext
from rain_cli.core.models import Outcome, ParsedInvocation, Success
from rain_cli.core.protocols import Transport
from rain_cli.core.validators import no_positionals
from rain_cli.exceptions import InvalidArgumentsError, RainError
from rain_cli.infra.batch_input import BatchInput
from rain_cli.infra.http_transport import HttpTransport
from rain_cli.version import __version__

Handler = Callable[[ParsedInvocation, CommandContext], Success]

HANDLERS: dict[str, Handler] = {
    "search": bookmarks.search,
    "get": bookmarks.get,
    "add": bookmarks.add,
    "update": bookmarks.update,
    "rm": bookmarks.remove,
    "ls": bookmarks.list_bookmarks,
    "exists": bookmarks.exists,
    "suggest": bookmarks.suggest,
    "export": bookmarks.export,
    "watch": bookmarks.watch,
    "collections": library.list_collections,
    "collection create": library.create_collection,
    "collection update": library.update_collection,
    "collection rm": library.remove_collection,
    "tags": library.list_tags,
    "status": library.status,
    "highlights": library.list_highlights,
}

HELP_WORDS: frozenset[str] = frozenset({"help", "--help", "-h"})
VERSION_WORDS: frozenset[str] = frozenset({"version", "--version", "-v"})


# ---------------------------------------------------------------------------
# Command resolution
# ---------------------------------------------------------------------------

def resolve_command(tokens: Sequence[str]) -> tuple[CommandSpec, list[str]]:
    """Map the leading token(s) to a command spec; return the rest."""
    verb, rest = tokens[0], list(tokens[1:])
    if verb == "collection":
        if not rest or rest[0] not in COLLECTION_SUBCOMMANDS:
            raise InvalidArgumentsError(
                "`collection` needs a subcommand: create, update or rm.",
                hint="Example: rain collection create Research",
            )
        verb, rest = f"collection {rest[0]}", rest[1:]
    spec = COMMANDS.get(verb)
    if spec is None:
        raise InvalidArgumentsError(
            f"Unknown command: {verb}",
            hint="Run `rain help` to list commands.",
        )
    return spec, rest


def load_settings() -> RainSettings:
    try:
        return RainSettings()
    except ValidationError as exc:
        raise InvalidArgumentsError(
            f"Invalid configuration in environment: {exc.errors()[0].get('msg', exc)}",
            hint="Check RAINDROP_API_BASE and RAINDROP_TIMEOUT.",
        ) from exc


# ---------------------------------------------------------------------------
# Dispatch pipeline
# ---------------------------------------------------------------------------

def dispatch(
    tokens: Sequence[str],
    *,
    stdin: TextIO | None = None,
    transport: Transport | None = None,
) -> Outcome:
    """Run one command and return its outcome; never raises ``RainError``."""
    try:
        spec, rest = resolve_command(tokens)
        invocation = parse_invocation(spec, rest)
        if spec.name == "robot-docs":
            no_positionals(invocation)
            return Success(data=robot_docs())

        settings = load_settings()
        configure_logging(settings.debug)
        owned: HttpTransport | None = None
        if transport is None:
            owned = HttpTransport(settings.api_base, timeout=settings.timeout)
            transport = owned
        try:
            ctx = CommandContext(
                transport,
                BatchInput(stdin),
                lambda: resolve_credential(settings),
            )
            return HANDLERS[spec.name](invocation, ctx)
        finally:
            if owned is not None:
                owned.close()
    except RainError as exc:
        return envelope.failure_from(exc)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def _wants_json(forced: bool) -> bool:
    if forced:
        return True
    isatty = getattr(sys.stdout, "isatty", None)
    return not (callable(isatty) and isatty())


def _emit(outcome: Outcome, json_mode: bool) -> int:
    if json_mode:
        print(envelope.dumps(outcome))
    else:
        from rain_cli.cli.render import render

        render(outcome)
    return envelope.exit_code_for(outcome)


def _text_command(tokens: Sequence[str], forced_json: bool) -> int | None:
    """Handle help/version, which print plain text unless ``--json``."""
    if tokens and tokens[0] in VERSION_WORDS:
        text, data = __version__, {"version": __version__}
    elif not tokens or tokens[0] in HELP_WORDS:
        topic = " ".join(tokens[1:])
        if topic:
            try:
                spec, _ = resolve_command(tokens[1:])
            except RainError as exc:
                return _emit(envelope.failure_from(exc), _wants_json(forced_json))
            text = command_help(spec)
        else:
            text = help_text()
        data = {"help": text}
    elif any(token in ("--help", "-h") for token in tokens[1:]):
        try:
            spec, _ = resolve_command([t for t in tokens if t not in ("--help", "-h")])
        except RainError as exc:
            return _emit(envelope.failure_from(exc), _wants_json(forced_json))
        text = command_help(spec)
        data = {"help": text}
    else:
        return None

    if forced_json:
        return _emit(Success(data=data), True)
    print(text)
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: list[str] | None = None,
    *,
    stdin: TextIO | None = None,
    transport: Transport | None = None,
) -> int:
    """Run the raindrop CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.
    stdin:
        Batch input stream; defaults to ``sys.stdin``.
    transport:
        Transport override (tests); defaults to :class:`HttpTransport`.

    Returns
    -------
    int
        OS process exit code.
    """
    raw = list(sys.argv[1:] if argv is None else argv)
    tokens, forced_json = extract_json_flag(raw)

    handled = _text_command(tokens, forced_json)
    if handled is not None:
        return handled

    outcome = dispatch(tokens, stdin=stdin, transport=transport)
    return _emit(outcome, _wants_json(forced_json))


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
    except KeyboardInterrupt:
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        print(envelope.dumps(envelope.internal_failure(exc)))
        sys.exit(exit_codes.API_FAILURE)
    sys.exit(code)
