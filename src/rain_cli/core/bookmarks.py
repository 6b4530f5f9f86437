"""Bookmark command handlers.

Each handler is a single pass: validate positionals and flags, then
issue one or more requests through :class:`CommandContext`, then shape
the result.  All validation happens before the first remote call.

Guarantees
----------
* No ``print()``, no httpx import, no exit codes.
* Only :class:`~rain_cli.exceptions.RainError` subclasses escape.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, TypeVar

from rain_cli.core.context import CommandContext
from rain_cli.core.fallback import attempt
from rain_cli.core.models import ParsedInvocation, Success, TagExpression
from rain_cli.core.pagination import Page, collect_all, collect_since, watch_window
from rain_cli.core.query import (
    SORT_LAST_UPDATE,
    build_filter_query,
    choose_sort,
    project,
    project_all,
)
from rain_cli.core.shapes import (
    BOOKMARK_FIELDS,
    TRASH_COLLECTION_ID,
    expect_count,
    expect_item,
    expect_result,
    parse_bookmark,
    parse_bookmarks,
    parse_existing_urls,
    parse_suggestions,
)
from rain_cli.core.tag_algebra import (
    apply_tag_expression,
    parse_tag_expression,
    require_additive,
)
from rain_cli.core.validators import (
    at_most_one_positional,
    exactly_one_positional,
    no_positionals,
    parse_choice,
    parse_collection_id,
    parse_csv_list,
    parse_fields,
    parse_id,
    parse_limit,
    parse_page,
    parse_timestamp,
    parse_url,
)
from rain_cli.exceptions import InvalidArgumentsError

ALL_COLLECTIONS: int = 0
DEFAULT_LIMIT: int = 25
BATCH_SIZE: int = 100
"""Maximum items per bulk request."""

DEFAULT_EXPORT_FIELDS: tuple[str, ...] = ("id", "title", "link", "tags", "created")
EXPORT_FORMATS: tuple[str, ...] = ("json", "csv")

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def chunked(items: Sequence[T], size: int = BATCH_SIZE) -> Iterator[list[T]]:
    """Split *items* into consecutive chunks of at most *size*."""
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def _collection_flag(invocation: ParsedInvocation, default: int | None = None) -> int | None:
    raw = invocation.flag("collection")
    return parse_collection_id(raw) if raw is not None else default


def _check_fields(fields: list[str] | None) -> list[str] | None:
    if fields is None:
        return None
    unknown = [name for name in fields if name not in BOOKMARK_FIELDS]
    if unknown:
        raise InvalidArgumentsError(
            f"Unknown field(s): {', '.join(unknown)}",
            hint=f"Available fields: {', '.join(BOOKMARK_FIELDS)}",
        )
    return fields


def _fetch_page(
    ctx: CommandContext,
    collection: int,
    *,
    search: str,
    sort: str,
    page: int,
    perpage: int,
) -> Page:
    payload = ctx.call(
        "GET",
        f"/raindrops/{collection}",
        query={
            "search": search or None,
            "sort": sort,
            "perpage": perpage,
            "page": page,
        },
    )
    return Page(items=parse_bookmarks(payload), total=expect_count(payload))


def _ids_from_batch(ctx: CommandContext, command: str) -> list[int]:
    if not ctx.batch.available():
        raise InvalidArgumentsError(
            f"`{command}` needs a bookmark id or ids piped on stdin.",
            hint=f"Example: rain ls --ids-only --json | jq '.data[]' | rain {command} ...",
        )
    lines = ctx.batch.lines()
    if not lines:
        raise InvalidArgumentsError(f"No bookmark ids on stdin for `{command}`.")
    return [parse_id(line) for line in lines]


def _scalar_changes(invocation: ParsedInvocation) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for name in ("title", "excerpt", "note"):
        value = invocation.flag(name)
        if value is not None:
            changes[name] = value
    collection = _collection_flag(invocation)
    if collection is not None:
        changes["collection"] = {"$id": collection}
    if invocation.switch("important") and invocation.switch("unimportant"):
        raise InvalidArgumentsError("--important and --unimportant are mutually exclusive.")
    if invocation.switch("important"):
        changes["important"] = True
    if invocation.switch("unimportant"):
        changes["important"] = False
    return changes


# ---------------------------------------------------------------------------
# search / get / ls
# ---------------------------------------------------------------------------

def search(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    """Full-text/operator search within a collection (all by default)."""
    query = " ".join(invocation.positionals).strip()
    collection = _collection_flag(invocation, ALL_COLLECTIONS)
    sort = choose_sort(query, invocation.flag("sort"))
    limit = parse_limit(invocation, DEFAULT_LIMIT)
    page = parse_page(invocation)
    fields = _check_fields(parse_fields(invocation.flag("fields")))

    result = _fetch_page(ctx, collection, search=query, sort=sort, page=page, perpage=limit)
    return Success(
        data=project_all(result.items, fields),
        meta={
            "count": result.total if result.total is not None else len(result.items),
            "page": page,
            "limit": limit,
            "sort": sort,
        },
    )


def get(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    bookmark_id = parse_id(exactly_one_positional(invocation, "bookmark id"))
    fields = _check_fields(parse_fields(invocation.flag("fields")))
    item = parse_bookmark(expect_item(ctx.call("GET", f"/raindrop/{bookmark_id}")))
    return Success(data=project(item, fields))


def list_bookmarks(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    """``ls``: filter flags are folded into search operators."""
    no_positionals(invocation)
    collection = _collection_flag(invocation, ALL_COLLECTIONS)
    tag_flag = invocation.flag("tag")
    search_text = build_filter_query(
        text=invocation.flag("search"),
        tags=parse_csv_list(tag_flag) if tag_flag is not None else (),
        item_type=invocation.flag("type"),
        notag=invocation.switch("notag"),
        important=invocation.switch("important"),
        broken=invocation.switch("broken"),
        duplicates=invocation.switch("duplicates"),
    )
    sort = choose_sort("", invocation.flag("sort"))
    fields = _check_fields(parse_fields(invocation.flag("fields")))
    ids_only = invocation.switch("ids-only")
    if ids_only and fields is not None:
        raise InvalidArgumentsError("--ids-only and --fields are mutually exclusive.")

    if invocation.switch("all"):
        if invocation.flag("limit") is not None or invocation.flag("page") is not None:
            raise InvalidArgumentsError("--all cannot be combined with --limit or --page.")
        items = collect_all(
            lambda page, perpage: _fetch_page(
                ctx, collection, search=search_text, sort=sort, page=page, perpage=perpage,
            ),
        )
        meta: dict[str, Any] = {"count": len(items), "all": True, "sort": sort}
    else:
        limit = parse_limit(invocation, DEFAULT_LIMIT)
        page = parse_page(invocation)
        result = _fetch_page(
            ctx, collection, search=search_text, sort=sort, page=page, perpage=limit,
        )
        items = result.items
        meta = {
            "count": result.total if result.total is not None else len(items),
            "page": page,
            "limit": limit,
            "sort": sort,
        }
    if search_text:
        meta["search"] = search_text

    if ids_only:
        return Success(data=[item["id"] for item in items], meta=meta)
    return Success(data=project_all(items, fields), meta=meta)


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------

def _batch_item(line: str, line_number: int, defaults: Mapping[str, Any]) -> dict[str, Any]:
    """One stdin line: a bare URL or a JSON object with ``link``."""
    if line.startswith("{"):
        try:
            raw = json.loads(line)
        except ValueError:
            raise InvalidArgumentsError(
                f"Line {line_number} is not valid JSON.",
                hint="Give one URL or one JSON object per line.",
            ) from None
        if not isinstance(raw, dict) or not isinstance(raw.get("link"), str):
            raise InvalidArgumentsError(
                f'Line {line_number} must be a JSON object with a "link" string.',
            )
        item = dict(raw)
        item["link"] = parse_url(item["link"])
        if "tags" in item and not (
            isinstance(item["tags"], list) and all(isinstance(t, str) for t in item["tags"])
        ):
            raise InvalidArgumentsError(f'Line {line_number}: "tags" must be a list of strings.')
        if isinstance(item.get("collection"), int):
            item["collection"] = {"$id": item["collection"]}
    else:
        item = {"link": parse_url(line)}

    for key, value in defaults.items():
        item.setdefault(key, value)
    return item


def add(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    """Create one bookmark from a URL, or many from stdin."""
    url_arg = at_most_one_positional(invocation, "URL")
    tags_flag = invocation.flag("tags")
    tags = parse_csv_list(tags_flag) if tags_flag is not None else None
    collection = _collection_flag(invocation)

    if url_arg is not None:
        return _add_one(invocation, ctx, parse_url(url_arg), tags, collection)

    for name in ("from-suggest", "parse"):
        if invocation.switch(name):
            raise InvalidArgumentsError(f"--{name} only applies when adding a single URL.")
    for name in ("title", "excerpt", "note"):
        if invocation.flag(name) is not None:
            raise InvalidArgumentsError(
                f"--{name} only applies when adding a single URL.",
                hint=f'Set "{name}" per line with JSONL input instead.',
            )
    if not ctx.batch.available():
        raise InvalidArgumentsError(
            "`add` needs a URL argument or URLs piped on stdin.",
            hint="Example: rain add https://example.com",
        )

    defaults: dict[str, Any] = {}
    if tags is not None:
        defaults["tags"] = tags
    if collection is not None:
        defaults["collection"] = {"$id": collection}
    if invocation.switch("important"):
        defaults["important"] = True

    lines = ctx.batch.lines()
    if not lines:
        raise InvalidArgumentsError("No URLs on stdin for `add`.")
    items = [_batch_item(line, number, defaults) for number, line in enumerate(lines, start=1)]

    created: list[dict[str, Any]] = []
    requests = 0
    for chunk in chunked(items):
        payload = ctx.call("POST", "/raindrops", body={"items": chunk})
        created.extend(parse_bookmarks(payload))
        requests += 1
    return Success(
        data=created,
        meta={"count": len(created), "submitted": len(items), "requests": requests},
    )


def _add_one(
    invocation: ParsedInvocation,
    ctx: CommandContext,
    url: str,
    tags: list[str] | None,
    collection: int | None,
) -> Success:
    body: dict[str, Any] = {"link": url}
    for name in ("title", "excerpt", "note"):
        value = invocation.flag(name)
        if value is not None:
            body[name] = value
    if tags is not None:
        body["tags"] = tags
    if collection is not None:
        body["collection"] = {"$id": collection}
    if invocation.switch("important"):
        body["important"] = True
    if invocation.switch("parse"):
        body["pleaseParse"] = {}

    meta: dict[str, Any] = {}
    if invocation.switch("from-suggest"):
        ctx.credential()
        suggestion = attempt(
            lambda: parse_suggestions(ctx.call("POST", "/raindrop/suggest", body={"link": url})),
        )
        suggested = suggestion.value_or({"collections": [], "tags": []})
        if tags is None and suggested["tags"]:
            body["tags"] = suggested["tags"]
        if collection is None and suggested["collections"]:
            body["collection"] = {"$id": suggested["collections"][0]["id"]}
        meta["suggested"] = suggestion.succeeded

    item = parse_bookmark(expect_item(ctx.call("POST", "/raindrop", body=body)))
    return Success(data=item, meta=meta or None)


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------

def update(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    """Update one bookmark, or append tags/move many piped ids."""
    id_arg = at_most_one_positional(invocation, "bookmark id")
    tags_flag = invocation.flag("tags")
    expression = parse_tag_expression(tags_flag) if tags_flag is not None else None
    changes = _scalar_changes(invocation)

    if id_arg is None:
        return _update_batch(invocation, ctx, expression, changes)

    bookmark_id = parse_id(id_arg)
    if not changes and expression is None:
        raise InvalidArgumentsError(
            "Nothing to update.",
            hint="Pass at least one of --title, --excerpt, --note, --tags, --collection, --important.",
        )

    path = f"/raindrop/{bookmark_id}"
    if expression is not None:
        current: list[str] = []
        if expression.needs_current_tags:
            current = parse_bookmark(expect_item(ctx.call("GET", path)))["tags"]
        changes["tags"] = apply_tag_expression(expression, current)

    item = parse_bookmark(expect_item(ctx.call("PUT", path, body=changes)))
    return Success(data=item)


def _update_batch(
    invocation: ParsedInvocation,
    ctx: CommandContext,
    expression: TagExpression | None,
    changes: dict[str, Any],
) -> Success:
    for name in ("title", "excerpt", "note"):
        if name in changes:
            raise InvalidArgumentsError(f"--{name} cannot be applied to a batch of ids.")
    body = dict(changes)
    if expression is not None:
        body["tags"] = list(require_additive(expression))
    if not body:
        raise InvalidArgumentsError(
            "Nothing to update.",
            hint="Batch updates accept --tags +tag, --collection and --important.",
        )

    ids = _ids_from_batch(ctx, "update")
    requests = 0
    for chunk in chunked(ids):
        expect_result(ctx.call("PUT", f"/raindrops/{ALL_COLLECTIONS}", body={"ids": chunk, **body}))
        requests += 1
    return Success(data={"ids": ids, "updated": len(ids)}, meta={"requests": requests})


# ---------------------------------------------------------------------------
# rm
# ---------------------------------------------------------------------------

def remove(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    """Move to trash, or with ``--permanent`` trash-then-delete."""
    id_arg = at_most_one_positional(invocation, "bookmark id")
    permanent = invocation.switch("permanent")
    to_trash = {"collection": {"$id": TRASH_COLLECTION_ID}}

    if id_arg is None:
        ids = _ids_from_batch(ctx, "rm")
        for chunk in chunked(ids):
            if permanent:
                # Permanent deletion is only allowed from the trash.
                expect_result(ctx.call("PUT", f"/raindrops/{ALL_COLLECTIONS}", body={"ids": chunk, **to_trash}))
                expect_result(ctx.call("DELETE", f"/raindrops/{TRASH_COLLECTION_ID}", body={"ids": chunk}))
            else:
                expect_result(ctx.call("DELETE", f"/raindrops/{ALL_COLLECTIONS}", body={"ids": chunk}))
        return Success(data={"ids": ids, "removed": len(ids), "permanent": permanent})

    bookmark_id = parse_id(id_arg)
    path = f"/raindrop/{bookmark_id}"
    if permanent:
        # Moving into the trash is idempotent, so the delete below is always permanent.
        expect_item(ctx.call("PUT", path, body=to_trash))
    expect_result(ctx.call("DELETE", path))
    return Success(data={"id": bookmark_id, "removed": True, "permanent": permanent})


# ---------------------------------------------------------------------------
# exists / suggest
# ---------------------------------------------------------------------------

def exists(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    """Look up saved URLs; a single miss is a successful "not found" answer."""
    url_arg = at_most_one_positional(invocation, "URL")
    if url_arg is not None:
        url = parse_url(url_arg)
        ids, _ = parse_existing_urls(ctx.call("POST", "/import/url/exists", body={"urls": [url]}))
        if ids:
            return Success(data={"id": ids[0]}, meta={"url": url})
        return Success(data=None, meta={"url": url}, found=False)

    if not ctx.batch.available():
        raise InvalidArgumentsError("`exists` needs a URL argument or URLs piped on stdin.")
    urls = [parse_url(line) for line in ctx.batch.lines()]
    if not urls:
        raise InvalidArgumentsError("No URLs on stdin for `exists`.")

    matches: dict[str, int] = {}
    for chunk in chunked(urls):
        _, duplicates = parse_existing_urls(ctx.call("POST", "/import/url/exists", body={"urls": chunk}))
        for entry in duplicates:
            if isinstance(entry.get("link"), str):
                matches.setdefault(entry["link"], entry["id"])
    results = [{"url": url, "id": matches.get(url)} for url in urls]
    found = sum(1 for entry in results if entry["id"] is not None)
    return Success(data=results, meta={"found": found, "missing": len(results) - found})


def suggest(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    url = parse_url(exactly_one_positional(invocation, "URL"))
    return Success(data=parse_suggestions(ctx.call("POST", "/raindrop/suggest", body={"link": url})))


# ---------------------------------------------------------------------------
# export / watch
# ---------------------------------------------------------------------------

def render_csv(rows: Sequence[Mapping[str, Any]], fields: Sequence[str]) -> str:
    """CSV text with a header row; list values are comma-joined."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(fields)
    for row in rows:
        cells = []
        for name in fields:
            value = row.get(name)
            if isinstance(value, list):
                value = ",".join(str(entry) for entry in value)
            cells.append("" if value is None else value)
        writer.writerow(cells)
    return buffer.getvalue()


def export(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    """Dump every bookmark in a collection as JSON records or CSV text."""
    no_positionals(invocation)
    collection = _collection_flag(invocation, ALL_COLLECTIONS)
    output_format = parse_choice(
        invocation.flag("format") or "json", flag="format", choices=EXPORT_FORMATS,
    )
    fields = _check_fields(parse_fields(invocation.flag("fields"))) or list(DEFAULT_EXPORT_FIELDS)
    search_text = (invocation.flag("search") or "").strip()
    sort = choose_sort("", None)

    items = collect_all(
        lambda page, perpage: _fetch_page(
            ctx, collection, search=search_text, sort=sort, page=page, perpage=perpage,
        ),
    )
    rows = project_all(items, fields)
    meta = {"count": len(rows), "format": output_format, "fields": fields}
    if output_format == "csv":
        return Success(data=render_csv(rows, fields), meta=meta)
    return Success(data=rows, meta=meta)


def watch(invocation: ParsedInvocation, ctx: CommandContext) -> Success:
    """Bookmarks modified strictly after ``--since``."""
    no_positionals(invocation)
    since_raw = invocation.flag("since")
    if since_raw is None:
        raise InvalidArgumentsError(
            "`watch` requires --since.",
            hint="Example: rain watch --since 2024-06-15T00:00:00Z",
        )
    window = watch_window(parse_timestamp(since_raw))
    collection = _collection_flag(invocation, ALL_COLLECTIONS)
    search_text = (invocation.flag("search") or "").strip()

    items = collect_since(
        lambda page, perpage: _fetch_page(
            ctx, collection, search=search_text, sort=SORT_LAST_UPDATE, page=page, perpage=perpage,
        ),
        window,
    )
    return Success(
        data=[dict(item) for item in items],
        meta={"since": window.cutoff.isoformat(), "count": len(items)},
    )
