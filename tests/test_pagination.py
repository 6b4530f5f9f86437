"""Tests for the pagination engine (core/pagination.py).

Page fetchers are plain fakes that record the pages requested, so every
test asserts both the result and the number of remote calls.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from rain_cli.core.pagination import (
    Page,
    collect_all,
    collect_since,
    parse_instant,
    watch_window,
)

CUTOFF = datetime(2024, 6, 15, tzinfo=timezone.utc)


class FakePager:
    """Serves a fixed list of pages and records which were requested."""

    def __init__(self, pages: list[list[dict[str, Any]]], total: int | None = None) -> None:
        self.pages = pages
        self.total = total
        self.requested: list[tuple[int, int]] = []

    def __call__(self, page: int, perpage: int) -> Page:
        self.requested.append((page, perpage))
        items = self.pages[page] if page < len(self.pages) else []
        return Page(items=items, total=self.total)


def _items(start: int, count: int) -> list[dict[str, Any]]:
    return [{"id": n} for n in range(start, start + count)]


def _stamp(offset_seconds: int) -> str:
    return (CUTOFF + timedelta(seconds=offset_seconds)).isoformat()


# ---------------------------------------------------------------------------
# collect_all
# ---------------------------------------------------------------------------

class TestCollectAll:
    def test_stops_on_short_page(self) -> None:
        pager = FakePager([_items(0, 3), _items(3, 3), _items(6, 1)])
        result = collect_all(pager, page_size=3)
        assert [item["id"] for item in result] == list(range(7))
        assert len(pager.requested) == 3

    def test_stops_when_total_reached(self) -> None:
        pager = FakePager([_items(0, 3), _items(3, 3)], total=6)
        collect_all(pager, page_size=3)
        assert len(pager.requested) == 2

    def test_exact_multiple_without_total_costs_one_empty_page(self) -> None:
        pager = FakePager([_items(0, 3), _items(3, 3)])
        result = collect_all(pager, page_size=3)
        assert len(result) == 6
        assert len(pager.requested) == 3

    def test_page_ceiling(self) -> None:
        pager = FakePager([_items(n * 2, 2) for n in range(10)])
        result = collect_all(pager, page_size=2, max_pages=4)
        assert len(result) == 8
        assert [page for page, _ in pager.requested] == [0, 1, 2, 3]

    def test_empty_listing(self) -> None:
        pager = FakePager([[]])
        assert collect_all(pager) == []
        assert pager.requested == [(0, 50)]


# ---------------------------------------------------------------------------
# collect_since
# ---------------------------------------------------------------------------

class TestCollectSince:
    def test_returns_only_newer_items(self) -> None:
        pager = FakePager([[
            {"id": 1, "lastUpdate": _stamp(300)},
            {"id": 2, "lastUpdate": _stamp(10)},
            {"id": 3, "lastUpdate": _stamp(-10)},
            {"id": 4, "lastUpdate": _stamp(-3600)},
        ]])
        result = collect_since(pager, watch_window(CUTOFF), page_size=4)
        assert [item["id"] for item in result] == [1, 2]
        assert len(pager.requested) == 1

    def test_item_at_cutoff_is_excluded(self) -> None:
        pager = FakePager([[{"id": 1, "lastUpdate": _stamp(0)}]])
        assert collect_since(pager, watch_window(CUTOFF)) == []

    def test_keeps_paging_inside_margin(self) -> None:
        # Page 0 is full and everything is newer than the relaxed cutoff.
        pager = FakePager([
            [{"id": 1, "lastUpdate": _stamp(120)}, {"id": 2, "lastUpdate": _stamp(-30)}],
            [{"id": 3, "lastUpdate": _stamp(-90)}],
        ])
        result = collect_since(pager, watch_window(CUTOFF), page_size=2)
        assert [item["id"] for item in result] == [1]
        assert len(pager.requested) == 2

    def test_overlapping_pages_are_deduplicated(self) -> None:
        # Item 2 shifts onto page 1 between fetches.
        pager = FakePager([
            [{"id": 1, "lastUpdate": _stamp(200)}, {"id": 2, "lastUpdate": _stamp(100)}],
            [{"id": 2, "lastUpdate": _stamp(100)}, {"id": 3, "lastUpdate": _stamp(50)}],
            [{"id": 4, "lastUpdate": _stamp(-3600)}],
        ])
        result = collect_since(pager, watch_window(CUTOFF), page_size=2)
        assert [item["id"] for item in result] == [1, 2, 3]

    def test_items_without_timestamp_are_skipped(self) -> None:
        pager = FakePager([[{"id": 1}, {"id": 2, "lastUpdate": "garbage"},
                            {"id": 3, "lastUpdate": _stamp(5)}]])
        result = collect_since(pager, watch_window(CUTOFF), page_size=3)
        assert [item["id"] for item in result] == [3]

    def test_zero_margin(self) -> None:
        pager = FakePager([
            [{"id": 1, "lastUpdate": _stamp(5)}, {"id": 2, "lastUpdate": _stamp(-5)}],
        ])
        collect_since(pager, watch_window(CUTOFF, timedelta(0)), page_size=2)
        assert len(pager.requested) == 1


class TestParseInstant:
    def test_zulu_suffix(self) -> None:
        assert parse_instant("2024-06-15T00:00:00Z") == CUTOFF

    def test_naive_is_utc(self) -> None:
        assert parse_instant("2024-06-15T00:00:00") == CUTOFF

    def test_unusable(self) -> None:
        assert parse_instant(None) is None
        assert parse_instant("") is None
        assert parse_instant("yesterday") is None
