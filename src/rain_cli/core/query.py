"""Search-query synthesis and field projection.

Pure helpers that translate CLI semantics into the remote search
syntax: default sort selection, filter flags → search operators, and
client-side projection of result fields.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from rain_cli.exceptions import InvalidArgumentsError

SORT_RELEVANCE: str = "score"
SORT_NEWEST: str = "-created"
SORT_LAST_UPDATE: str = "-lastUpdate"

SORT_CHOICES: tuple[str, ...] = (
    "score",
    "-created",
    "created",
    "-lastUpdate",
    "lastUpdate",
    "title",
    "-title",
    "domain",
    "-domain",
    "-sort",
    "sort",
)

# ``#tag`` / ``#"multi word"`` and ``field:value`` operator tokens.  Field names
# carry no dots, so dotted ``host:port`` and ``scheme://`` text stays free text.
_OPERATOR_RE = re.compile(r'(^|\s)(#\S|[A-Za-z]\w*:(?!//)\S)')


def has_operators(query: str) -> bool:
    """``True`` when *query* contains a tag marker or a ``field:value`` token."""
    return bool(_OPERATOR_RE.search(query))


def default_sort(query: str) -> str:
    """Relevance for free text; newest-first for empty or operator queries."""
    text = query.strip()
    if text and not has_operators(text):
        return SORT_RELEVANCE
    return SORT_NEWEST


def choose_sort(query: str, explicit: str | None) -> str:
    if explicit is not None:
        if explicit not in SORT_CHOICES:
            raise InvalidArgumentsError(
                f"Unknown sort {explicit!r}.",
                hint=f"Use one of: {', '.join(SORT_CHOICES)}",
            )
        return explicit
    return default_sort(query)


def tag_operator(tag: str) -> str:
    return f'#"{tag}"' if any(ch.isspace() for ch in tag) else f"#{tag}"


def build_filter_query(
    *,
    text: str | None = None,
    tags: Sequence[str] = (),
    item_type: str | None = None,
    notag: bool = False,
    important: bool = False,
    broken: bool = False,
    duplicates: bool = False,
) -> str:
    """Compose filter flags into one search string."""
    parts: list[str] = []
    if text and text.strip():
        parts.append(text.strip())
    parts.extend(tag_operator(tag) for tag in tags)
    if item_type:
        parts.append(f"type:{item_type}")
    if notag:
        parts.append("notag:true")
    if important:
        parts.append("important:true")
    if broken:
        parts.append("broken:true")
    if duplicates:
        parts.append("duplicate:true")
    return " ".join(parts)


def project(record: Mapping[str, Any], fields: Sequence[str] | None) -> dict[str, Any]:
    """Keep only *fields* (in the requested order); ``None`` keeps all."""
    if fields is None:
        return dict(record)
    return {name: record.get(name) for name in fields}


def project_all(
    records: Iterable[Mapping[str, Any]],
    fields: Sequence[str] | None,
) -> list[dict[str, Any]]:
    return [project(record, fields) for record in records]
