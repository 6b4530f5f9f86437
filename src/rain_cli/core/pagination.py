"""Pagination and aggregation over offset-paged list endpoints.

Two policies:

* :func:`collect_all`: exhaustive listing for ``ls --all`` and
  ``export``.  Stops on a short page, when the reported total is
  reached, or at a page ceiling.
* :func:`collect_since`: change polling for ``watch``.  Pages are
  sorted newest-modified first; paging stops at the first item at or
  before the *relaxed* cutoff, items are de-duplicated by id across
  pages, and the strict cutoff is re-applied at the end.

Both take a ``fetch_page(page, perpage) -> Page`` callable, so the
engine never touches the transport itself.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from rain_cli.core.models import WatchWindow

logger = logging.getLogger(__name__)

PAGE_SIZE: int = 50
"""Items per request; the remote ceiling."""

MAX_PAGES: int = 500
"""Upper bound on requests per aggregation run."""

WATCH_SAFETY_MARGIN: timedelta = timedelta(seconds=60)
"""Heuristic margin against items reordering between page fetches."""

Record = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class Page:
    """One fetched page."""

    items: list[Record]
    total: int | None = None


PageFetcher = Callable[[int, int], Page]


def collect_all(
    fetch_page: PageFetcher,
    *,
    page_size: int = PAGE_SIZE,
    max_pages: int = MAX_PAGES,
) -> list[Record]:
    """Fetch successive pages until the listing is exhausted."""
    collected: list[Record] = []
    for page_number in range(max_pages):
        page = fetch_page(page_number, page_size)
        collected.extend(page.items)
        if len(page.items) < page_size:
            break
        if page.total is not None and len(collected) >= page.total:
            break
    else:
        logger.debug("stopped at the %d-page ceiling", max_pages)
    logger.debug("collected %d items", len(collected))
    return collected


def parse_instant(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp from a payload; ``None`` if unusable."""
    if not isinstance(value, str) or not value:
        return None
    try:
        instant = datetime.fromisoformat(value)
    except ValueError:
        return None
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def watch_window(since: datetime, margin: timedelta = WATCH_SAFETY_MARGIN) -> WatchWindow:
    return WatchWindow(cutoff=since, safety_margin=margin)


def collect_since(
    fetch_page: PageFetcher,
    window: WatchWindow,
    *,
    timestamp_field: str = "lastUpdate",
    id_field: str = "id",
    page_size: int = PAGE_SIZE,
    max_pages: int = MAX_PAGES,
) -> list[Record]:
    """Return items modified strictly after ``window.cutoff``, newest first.

    Items without a parseable timestamp are skipped.
    """
    relaxed = window.relaxed_cutoff
    seen: set[Any] = set()
    candidates: list[tuple[datetime, Record]] = []

    for page_number in range(max_pages):
        page = fetch_page(page_number, page_size)
        reached_old = False
        for item in page.items:
            instant = parse_instant(item.get(timestamp_field))
            if instant is None:
                continue
            if instant <= relaxed:
                reached_old = True
                continue
            key = item.get(id_field)
            if key in seen:
                continue
            seen.add(key)
            candidates.append((instant, item))
        if reached_old or len(page.items) < page_size:
            break
    else:
        logger.debug("stopped at the %d-page ceiling", max_pages)

    logger.debug("%d candidates newer than relaxed cutoff %s", len(candidates), relaxed)
    return [item for instant, item in candidates if instant > window.cutoff]
