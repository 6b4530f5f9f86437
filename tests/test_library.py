"""End-to-end tests for collection, tag, status and highlight commands."""

from __future__ import annotations

import pytest

from rain_cli.core.library import build_tree

ROOTS = {"result": True, "items": [
    {"_id": 1, "title": "Work", "count": 10},
    {"_id": 2, "title": "Home", "count": 3, "public": True},
]}
CHILDREN = {"result": True, "items": [
    {"_id": 11, "title": "Reports", "count": 4, "parent": {"$id": 1}},
    {"_id": 111, "title": "2024", "count": 1, "parent": {"$id": 11}},
]}


# ---------------------------------------------------------------------------
# collections
# ---------------------------------------------------------------------------

class TestCollections:
    def test_flat(self, api, rain) -> None:
        api.get("/collections").respond(json=ROOTS)
        api.get("/collections/childrens").respond(json=CHILDREN)
        code, envelope = rain("collections")
        assert code == 0
        assert [entry["id"] for entry in envelope["data"]] == [1, 2, 11, 111]
        assert envelope["data"][2]["parent"] == 1
        assert envelope["meta"] == {"count": 4}

    def test_tree(self, api, rain) -> None:
        api.get("/collections").respond(json=ROOTS)
        api.get("/collections/childrens").respond(json=CHILDREN)
        _, envelope = rain("collections", "--tree")
        work, home = envelope["data"]
        assert work["children"][0]["id"] == 11
        assert work["children"][0]["children"][0]["id"] == 111
        assert home["children"] == []

    def test_build_tree_orphans_become_roots(self) -> None:
        tree = build_tree([{"id": 5, "parent": 999}, {"id": 6, "parent": None}])
        assert [node["id"] for node in tree] == [5, 6]


class TestCollectionCommands:
    def test_create(self, api, rain, sent_json) -> None:
        route = api.post("/collection").respond(
            json={"result": True, "item": {"_id": 50, "title": "Research", "parent": {"$id": 1}}},
        )
        code, envelope = rain("collection", "create", "Research", "--parent", "1", "--view", "grid", "--public")
        assert code == 0
        assert sent_json(route) == {
            "title": "Research", "parent": {"$id": 1}, "view": "grid", "public": True,
        }
        assert envelope["data"]["id"] == 50

    def test_create_needs_title(self, api, rain) -> None:
        code, _ = rain("collection", "create")
        assert code == 2

    def test_update(self, api, rain, sent_json) -> None:
        route = api.put("/collection/123").respond(
            json={"result": True, "item": {"_id": 123, "title": "Renamed"}},
        )
        code, _ = rain("collection", "update", "123", "--title", "Renamed", "--private")
        assert code == 0
        assert sent_json(route) == {"title": "Renamed", "public": False}

    def test_update_conflicting_visibility(self, api, rain) -> None:
        code, _ = rain("collection", "update", "123", "--public", "--private")
        assert code == 2

    def test_rm(self, api, rain) -> None:
        api.delete("/collection/123").respond(json={"result": True})
        code, envelope = rain("collection", "rm", "123")
        assert code == 0
        assert envelope["data"] == {"id": 123, "removed": True}

    def test_unknown_subcommand(self, api, rain) -> None:
        code, envelope = rain("collection", "rename", "1")
        assert code == 2
        assert envelope["error"]["code"] == "INVALID_ARGS"


# ---------------------------------------------------------------------------
# tags / status
# ---------------------------------------------------------------------------

class TestTags:
    PAYLOAD = {"result": True, "items": [
        {"_id": "beta", "count": 2}, {"_id": "Alpha", "count": 2}, {"_id": "gamma", "count": 9},
    ]}

    def test_sorted_by_count(self, api, rain) -> None:
        api.get("/tags").respond(json=self.PAYLOAD)
        _, envelope = rain("tags")
        assert [entry["tag"] for entry in envelope["data"]] == ["gamma", "Alpha", "beta"]

    def test_sorted_by_name_in_collection(self, api, rain) -> None:
        route = api.get("/tags/123").respond(json=self.PAYLOAD)
        _, envelope = rain("tags", "--collection", "123", "--sort", "name")
        assert route.call_count == 1
        assert [entry["tag"] for entry in envelope["data"]] == ["Alpha", "beta", "gamma"]
        assert envelope["meta"] == {"count": 3, "sort": "name"}


class TestStatus:
    def test_summary(self, api, rain) -> None:
        api.get("/user/stats").respond(json={
            "result": True,
            "items": [{"_id": 0, "count": 42}, {"_id": -1, "count": 5}, {"_id": -99, "count": 1}],
            "meta": {"pro": False, "broken": {"count": 2}, "duplicates": {"count": 0}},
        })
        code, envelope = rain("status")
        assert code == 0
        assert envelope["data"]["total"] == 42
        assert envelope["data"]["unsorted"] == 5
        assert envelope["data"]["broken"] == 2

    def test_rejects_arguments(self, api, rain) -> None:
        code, _ = rain("status", "now")
        assert code == 2


# ---------------------------------------------------------------------------
# highlights
# ---------------------------------------------------------------------------

class TestHighlights:
    def test_color_filter_is_client_side(self, api, rain) -> None:
        route = api.get("/highlights").respond(json={"result": True, "items": [
            {"_id": "a", "color": "yellow", "text": "A"},
            {"_id": "b", "color": "green", "text": "B"},
        ]})
        code, envelope = rain("highlights", "--color", "Yellow")
        assert code == 0
        assert [entry["id"] for entry in envelope["data"]] == ["a"]
        assert "color" not in route.calls.last.request.url.params
        assert envelope["meta"]["color"] == "Yellow"

    @pytest.mark.parametrize("argv", [["--limit", "100"], ["--collection", "abc"]])
    def test_invalid_flags(self, api, rain, argv) -> None:
        code, _ = rain("highlights", *argv)
        assert code == 2
        assert len(api.calls) == 0
