"""Core / service layer: command semantics and pure transformations.

Rules
-----
* No ``print()`` calls.
* No direct network I/O; requests go through the ``Transport`` protocol.
* No imports from ``cli`` or ``infra``.
"""

from rain_cli.core.context import CommandContext
from rain_cli.core.models import (
    Failure,
    Outcome,
    ParsedInvocation,
    Success,
    TagExpression,
    TagMode,
    WatchWindow,
)
from rain_cli.core.protocols import BatchSource, Transport

__all__: list[str] = [
    "BatchSource",
    "CommandContext",
    "Failure",
    "Outcome",
    "ParsedInvocation",
    "Success",
    "TagExpression",
    "TagMode",
    "Transport",
    "WatchWindow",
]
