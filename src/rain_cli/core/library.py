"""Library-level handlers: collections, tags, account status, highlights."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from rain_cli.core.bookmarks import DEFAULT_LIMIT
from rain_cli.core.context import CommandContext
from rain_cli.core.models import ParsedInvocation, Success
from rain_cli.core.shapes import (
    expect_item,
    expect_items,
    expect_result,
    parse_collection,
    parse_highlight,
    parse_stats,
    parse_tag,
)
from rain_cli.core.validators import (
    exactly_one_positional,
    no_positionals,
    parse_choice,
    parse_collection_id,
    parse_id,
    parse_limit,
    parse_page,
)
from rain_cli.exceptions import InvalidArgumentsError

COLLECTION_VIEWS: tuple[str, ...] = ("list", "simple", "grid", "masonry")
TAG_SORTS: tuple[str, ...] = ("count", "name")


# ---------------------------------------------------------------------------
# collections
# ---------------------------------------------------------------------------

def build_tree(collections: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Nest collections under their parents.

    Collections whose parent is unknown are treated as roots.
    """
    nodes = {entry["id"]: {**entry, "children": []} for entry in collections}
    roots: list[dict[str, Any]] = []
    for entry in collections:
        node = nodes[entry["id"]]
        parent = nodes.get(entry["parent"]) if entry["parent"] is not None else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent["children"].append(node)
    return roots


def list_collections(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    no_positionals(invocation)
    roots = [parse_collection(raw) for raw in expect_items(ctx.call("GET", "/collections"))]
    children = [
        parse_collection(raw)
        for raw in expect_items(ctx.call("GET", "/collections/childrens"))
    ]
    flat = roots + children
    meta = {"count": len(flat)}
    if invocation.switch("tree"):
        return Success(data=build_tree(flat), meta=meta)
    return Success(data=flat, meta=meta)


def _collection_body(invocation: ParsedInvocation) -> dict[str, Any]:
    body: dict[str, Any] = {}
    parent = invocation.flag("parent")
    if parent is not None:
        body["parent"] = {"$id": parse_id(parent, what="parent collection id")}
    view = invocation.flag("view")
    if view is not None:
        body["view"] = parse_choice(view, flag="view", choices=COLLECTION_VIEWS)
    if invocation.switch("public") and invocation.switch("private"):
        raise InvalidArgumentsError("--public and --private are mutually exclusive.")
    if invocation.switch("public"):
        body["public"] = True
    if invocation.switch("private"):
        body["public"] = False
    return body


def create_collection(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    title = " ".join(invocation.positionals).strip()
    if not title:
        raise InvalidArgumentsError(
            "`collection create` needs a title.",
            hint='Example: rain collection create "Research" --parent 123',
        )
    body = {"title": title, **_collection_body(invocation)}
    item = expect_item(ctx.call("POST", "/collection", body=body))
    return Success(data=parse_collection(item))


def update_collection(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    collection_id = parse_id(
        exactly_one_positional(invocation, "collection id"), what="collection id",
    )
    body = _collection_body(invocation)
    title = invocation.flag("title")
    if title is not None:
        if not title.strip():
            raise InvalidArgumentsError("--title must not be empty.")
        body["title"] = title.strip()
    if not body:
        raise InvalidArgumentsError(
            "Nothing to update.",
            hint="Pass at least one of --title, --parent, --view, --public, --private.",
        )
    item = expect_item(ctx.call("PUT", f"/collection/{collection_id}", body=body))
    return Success(data=parse_collection(item))


def remove_collection(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    """Delete a collection; the service trashes its bookmarks and sub-collections."""
    collection_id = parse_id(
        exactly_one_positional(invocation, "collection id"), what="collection id",
    )
    expect_result(ctx.call("DELETE", f"/collection/{collection_id}"))
    return Success(data={"id": collection_id, "removed": True})


# ---------------------------------------------------------------------------
# tags / status
# ---------------------------------------------------------------------------

def list_tags(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    no_positionals(invocation)
    order = parse_choice(invocation.flag("sort") or "count", flag="sort", choices=TAG_SORTS)
    raw_collection = invocation.flag("collection")
    path = "/tags"
    if raw_collection is not None:
        path = f"/tags/{parse_collection_id(raw_collection)}"

    tags = [parse_tag(raw) for raw in expect_items(ctx.call("GET", path))]
    if order == "name":
        tags.sort(key=lambda entry: entry["tag"].lower())
    else:
        tags.sort(key=lambda entry: (-entry["count"], entry["tag"].lower()))
    return Success(data=tags, meta={"count": len(tags), "sort": order})


def status(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    no_positionals(invocation)
    return Success(data=parse_stats(ctx.call("GET", "/user/stats")))


# ---------------------------------------------------------------------------
# highlights
# ---------------------------------------------------------------------------

def list_highlights(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    """One page of highlights; ``--color`` filters client-side."""
    no_positionals(invocation)
    raw_collection = invocation.flag("collection")
    path = "/highlights"
    if raw_collection is not None:
        path = f"/highlights/{parse_collection_id(raw_collection)}"
    limit = parse_limit(invocation, DEFAULT_LIMIT)
    page = parse_page(invocation)
    color = invocation.flag("color")

    payload = ctx.call("GET", path, query={"page": page, "perpage": limit})
    highlights = [parse_highlight(raw) for raw in expect_items(payload)]
    if color is not None:
        wanted = color.strip().lower()
        highlights = [entry for entry in highlights if str(entry["color"]).lower() == wanted]

    meta: dict[str, Any] = {"count": len(highlights), "page": page, "limit": limit}
    if color is not None:
        meta["color"] = color
    return Success(data=highlights, meta=meta)
