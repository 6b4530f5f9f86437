"""Tag algebra: the ``+add,-remove,=replace`` mini-language for ``--tags``.

Grammar
-------
* ``=a,b``     → ``REPLACE``: the remainder is the final tag set.
* ``+a,-b,c``  → ``OPS``: ``+``/bare tokens add, ``-`` tokens remove.
* ``a,b``      → ``DIRECT``: no signed token at all.

Tokens are trimmed and empty tokens dropped.  ``OPS`` needs the current
tag set because a single-bookmark update replaces the whole set.
"""

from __future__ import annotations

from collections.abc import Sequence

from rain_cli.core.models import TagExpression, TagMode
from rain_cli.exceptions import InvalidArgumentsError


def _dedupe(tags: Sequence[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for tag in tags:
        seen.setdefault(tag, None)
    return tuple(seen)


def _split(text: str) -> list[str]:
    return [token.strip() for token in text.split(",") if token.strip()]


def parse_tag_expression(expression: str) -> TagExpression:
    """Classify *expression* into one of the three tag modes."""
    stripped = expression.strip()
    if stripped.startswith("="):
        return TagExpression(mode=TagMode.REPLACE, adds=_dedupe(_split(stripped[1:])))

    adds: list[str] = []
    removes: list[str] = []
    signed = False
    for token in _split(stripped):
        if token[0] in "+-":
            signed = True
            name = token[1:].strip()
            if not name:
                raise InvalidArgumentsError(
                    f"Empty tag in expression: {expression!r}",
                    hint="Example: --tags +new,-old",
                )
            (adds if token[0] == "+" else removes).append(name)
        else:
            adds.append(token)

    mode = TagMode.OPS if signed else TagMode.DIRECT
    return TagExpression(mode=mode, adds=_dedupe(adds), removes=_dedupe(removes))


def apply_tag_expression(
    expression: TagExpression,
    current: Sequence[str] = (),
) -> list[str]:
    """Compute the tag set to write.

    For ``OPS`` the result is ``(current - removes) + adds``: retained
    tags keep their order, new tags are appended in expression order.
    ``REPLACE`` and ``DIRECT`` ignore *current*.
    """
    if expression.mode is not TagMode.OPS:
        return list(expression.adds)

    removed = set(expression.removes)
    result = [tag for tag in _dedupe(current) if tag not in removed]
    for tag in expression.adds:
        if tag not in result:
            result.append(tag)
    return result


def require_additive(expression: TagExpression) -> tuple[str, ...]:
    """Validate *expression* for bulk updates and return the tags to append.

    The bulk endpoint can only append tags (there is no per-item read),
    so replacement and removal are rejected.
    """
    if expression.mode is TagMode.REPLACE:
        raise InvalidArgumentsError(
            "Tag replacement (=...) is not supported for batch updates.",
            hint="Update bookmarks one at a time to replace their tags.",
        )
    if expression.removes:
        raise InvalidArgumentsError(
            "Tag removal (-tag) is not supported for batch updates.",
            hint="Batch updates can only add tags, e.g. --tags +needs-review.",
        )
    if not expression.adds:
        raise InvalidArgumentsError("--tags names no tags to add.")
    return expression.adds
