"""Human-readable rendering for interactive terminals.

Only used when stdout is a TTY and ``--json`` was not given; pipes and
scripts always receive the JSON envelope.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from rain_cli.cli.console import get_rich_console
from rain_cli.core.models import Outcome, Success

_PREFERRED_COLUMNS: tuple[str, ...] = ("id", "title", "link", "tags", "count", "tag", "color", "text")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(entry) for entry in value)
    return str(value)


def _columns(records: Sequence[Mapping[str, Any]]) -> list[str]:
    keys = list(records[0].keys())
    preferred = [name for name in _PREFERRED_COLUMNS if name in keys]
    return preferred or keys


def render(outcome: Outcome) -> None:
    from rich.json import JSON
    from rich.markup import escape
    from rich.table import Table

    console = get_rich_console()
    if not isinstance(outcome, Success):
        console.print(f"[bold red]Error ({outcome.code}):[/bold red] {escape(outcome.message)}")
        for hint in outcome.suggest:
            console.print(f"[yellow]Hint:[/yellow] {escape(hint)}")
        return

    data = outcome.data
    if not outcome.found:
        console.print("[yellow]Not found.[/yellow]")
    elif isinstance(data, str):
        console.print(data, markup=False, highlight=False, end="" if data.endswith("\n") else "\n")
    elif isinstance(data, list) and data and all(isinstance(row, Mapping) for row in data):
        columns = _columns(data)
        table = Table(*columns, show_lines=False)
        for row in data:
            table.add_row(*(_cell(row.get(name)) for name in columns))
        console.print(table)
    else:
        console.print(JSON.from_data(data, default=str))

    if outcome.meta:
        summary = "  ".join(f"{key}={_cell(value)}" for key, value in outcome.meta.items())
        console.print(f"[dim]{escape(summary)}[/dim]")
