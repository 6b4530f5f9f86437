"""Raw-payload → domain-shape parsers.

Each parser checks one expected response shape and raises
:class:`~rain_cli.exceptions.ApiError` when the payload does not match,
instead of silently defaulting.  Parsers are pure.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rain_cli.exceptions import ApiError

BOOKMARK_FIELDS: tuple[str, ...] = (
    "id",
    "title",
    "link",
    "excerpt",
    "note",
    "type",
    "tags",
    "collection",
    "created",
    "lastUpdate",
    "important",
    "domain",
)

TRASH_COLLECTION_ID: int = -99


def _unexpected(what: str, payload: Any) -> ApiError:
    return ApiError(
        f"Unexpected response shape: expected {what}.",
        status=200,
        body=payload,
    )


def _require_mapping(payload: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise _unexpected(what, payload)
    return payload


def _ref_id(value: Any) -> int | None:
    """Extract an id from ``{"$id": n}`` references or plain integers."""
    if isinstance(value, Mapping):
        value = value.get("$id", value.get("_id", value.get("id")))
    if isinstance(value, bool):
        return None
    return value if isinstance(value, int) else None


def _entity_id(raw: Mapping[str, Any], what: str) -> int:
    value = raw.get("_id", raw.get("id"))
    if isinstance(value, bool) or not isinstance(value, int):
        raise _unexpected(f"{what} with an integer id", raw)
    return value


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------

def expect_item(payload: Any) -> Mapping[str, Any]:
    """``{"item": {...}}``."""
    item = _require_mapping(payload, "an object").get("item")
    if not isinstance(item, Mapping):
        raise _unexpected('an "item" object', payload)
    return item


def expect_items(payload: Any) -> list[Mapping[str, Any]]:
    """``{"items": [{...}, ...]}``."""
    items = _require_mapping(payload, "an object").get("items")
    if not isinstance(items, list) or not all(isinstance(i, Mapping) for i in items):
        raise _unexpected('an "items" list of objects', payload)
    return items


def expect_count(payload: Any) -> int | None:
    """Optional total reported next to a page of items."""
    count = _require_mapping(payload, "an object").get("count")
    if isinstance(count, bool) or not isinstance(count, int):
        return None
    return count


def expect_result(payload: Any) -> bool:
    """``{"result": true|false}``; ``false`` is an upstream failure."""
    result = _require_mapping(payload, "an object").get("result")
    if result is not True:
        message = payload.get("errorMessage") if isinstance(payload, Mapping) else None
        raise ApiError(
            f"Server reported failure: {message or 'result was not true'}",
            status=200,
            body=payload,
        )
    return True


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

def parse_bookmark(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Normalise one raindrop into the CLI's bookmark shape."""
    tags = raw.get("tags", [])
    if not isinstance(tags, list):
        raise _unexpected('a "tags" list', raw)
    return {
        "id": _entity_id(raw, "bookmark"),
        "title": raw.get("title", ""),
        "link": raw.get("link", ""),
        "excerpt": raw.get("excerpt", ""),
        "note": raw.get("note", ""),
        "type": raw.get("type"),
        "tags": [str(tag) for tag in tags],
        "collection": _ref_id(raw.get("collection", raw.get("collectionId"))),
        "created": raw.get("created"),
        "lastUpdate": raw.get("lastUpdate"),
        "important": bool(raw.get("important", False)),
        "domain": raw.get("domain"),
    }


def parse_bookmarks(payload: Any) -> list[dict[str, Any]]:
    return [parse_bookmark(raw) for raw in expect_items(payload)]


def parse_collection(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": _entity_id(raw, "collection"),
        "title": raw.get("title", ""),
        "count": raw.get("count", 0),
        "parent": _ref_id(raw.get("parent")),
        "public": bool(raw.get("public", False)),
        "view": raw.get("view"),
    }


def parse_tag(raw: Mapping[str, Any]) -> dict[str, Any]:
    name = raw.get("_id", raw.get("tag"))
    count = raw.get("count", 0)
    if not isinstance(name, str) or isinstance(count, bool) or not isinstance(count, int):
        raise _unexpected("tag entries with a name and a count", raw)
    return {"tag": name, "count": count}


def parse_highlight(raw: Mapping[str, Any]) -> dict[str, Any]:
    highlight_id = raw.get("_id", raw.get("id"))
    if not isinstance(highlight_id, (str, int)) or isinstance(highlight_id, bool):
        raise _unexpected("highlights with an id", raw)
    return {
        "id": highlight_id,
        "text": raw.get("text", ""),
        "note": raw.get("note", ""),
        "color": raw.get("color", "yellow"),
        "created": raw.get("created"),
        "bookmark": raw.get("raindropRef"),
        "title": raw.get("title"),
        "link": raw.get("link"),
        "tags": raw.get("tags", []),
    }


def parse_suggestions(payload: Any) -> dict[str, Any]:
    """``{"item": {"collections": [{"$id"}], "tags": [...]}}``."""
    item = expect_item(payload)
    collections = item.get("collections")
    tags = item.get("tags")
    if not isinstance(collections, list) or not isinstance(tags, list):
        raise _unexpected("suggestion lists", payload)
    ids = [_ref_id(entry) for entry in collections]
    return {
        "collections": [{"id": cid} for cid in ids if cid is not None],
        "tags": [str(tag) for tag in tags],
    }


def parse_existing_urls(payload: Any) -> tuple[list[int], list[dict[str, Any]]]:
    """``POST /import/url/exists``: matching ids plus ``{_id, link}`` duplicates.

    The service answers ``"result": false`` with an empty ``ids`` list when
    nothing matches, so only a false result with an error message is a
    failure.  ``ids`` is always required; ``duplicates`` may be omitted only
    when ``ids`` is empty.
    """
    body = _require_mapping(payload, "an object")
    if body.get("result") is not True and body.get("errorMessage"):
        expect_result(body)
    ids = body.get("ids")
    if not isinstance(ids, list) or not all(
        isinstance(i, int) and not isinstance(i, bool) for i in ids
    ):
        raise _unexpected('an "ids" list of integers', payload)
    duplicates = body.get("duplicates", [] if not ids else None)
    if not isinstance(duplicates, list):
        raise _unexpected('a "duplicates" list', payload)
    found: list[dict[str, Any]] = []
    for entry in duplicates:
        if not isinstance(entry, Mapping):
            raise _unexpected("duplicate entries as objects", payload)
        found.append({"id": _entity_id(entry, "duplicate"), "link": entry.get("link")})
    return ids, found


def parse_stats(payload: Any) -> dict[str, Any]:
    """``GET /user/stats`` → the ``status`` summary."""
    items = expect_items(payload)
    meta = _require_mapping(payload, "an object").get("meta")
    if not isinstance(meta, Mapping):
        raise _unexpected('a "meta" object', payload)
    counts = {entry.get("_id"): entry.get("count", 0) for entry in items}

    def nested_count(key: str) -> int:
        value = meta.get(key)
        if isinstance(value, Mapping):
            value = value.get("count")
        return value if isinstance(value, int) and not isinstance(value, bool) else 0

    return {
        "total": counts.get(0, 0),
        "unsorted": counts.get(-1, 0),
        "trash": counts.get(TRASH_COLLECTION_ID, 0),
        "pro": bool(meta.get("pro", False)),
        "broken": nested_count("broken"),
        "duplicates": nested_count("duplicates"),
        "lastChanged": meta.get("changedBytesDate"),
    }
