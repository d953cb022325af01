from __future__ import annotations

import asyncio
from typing import Iterable

import pytest

from core.activity_service import ActivityService
from core.clock import ManualClock
from core.config import ActivityConfig, FrontPageConfig
from core.errors import (
    InvalidInputError,
    ItemNotFoundError,
    ParseFailedError,
    UpstreamFetchFailedError,
)
from core.front_page import FrontPageTimeResolver
from core.models import Item
from core.ttl_cache import TTLCache

NOW = 1_700_000_000
MINUTE = 60
HOUR = 3600


class FakeItemSource:
    def __init__(self, items: Iterable[Item]) -> None:
        self.items = {item.id: item for item in items}

    async def get_max_item_id(self) -> int:
        return max(self.items)

    async def get_items(self, ids: Iterable[int], skip_missing: bool = False) -> dict[int, Item]:
        found = {}
        for item_id in ids:
            item = self.items.get(item_id)
            if item is None:
                if skip_missing:
                    continue
                raise ItemNotFoundError(item_id)
            found[item_id] = item
        return found


class FakeFetcher:
    def __init__(self, document: str = "", error: Exception = None) -> None:
        self.document = document
        self.error = error

    async def get_text(self, url: str) -> str:
        if self.error is not None:
            raise self.error
        return self.document


class CountingFormatter:
    def __init__(self) -> None:
        self.calls: list[int] = []

    def __call__(self, item: Item, strip_html: bool) -> str:
        self.calls.append(item.id)
        return item.title or item.text


def _age_span(item_id: int, absolute: int, phrase: str) -> str:
    return (
        f'<span class="age" title="2023-11-14T22:13:20 {absolute}">'
        f'<a href="item?id={item_id}">{phrase} ago</a></span>'
    )


def _items() -> list[Item]:
    return [
        Item(id=1, time=NOW - 10 * MINUTE, by="alice", title="Story", kids=(2, 3)),
        Item(id=2, parent=1, time=NOW - 2 * MINUTE, by="bob", text="fresh reply"),
        Item(id=3, parent=1, time=NOW - 8 * MINUTE, by="carol", text="older reply"),
        Item(id=4, time=NOW - 3 * 86400, by="dave", title="Resurfaced", kids=(5,)),
        Item(id=5, parent=4, time=NOW - 1 * MINUTE, by="erin", text="new comment"),
    ]


def _service(fetcher: FakeFetcher, formatter=None) -> tuple[ActivityService, CountingFormatter]:
    clock = ManualClock(NOW)
    formatter = formatter or CountingFormatter()
    service = ActivityService(
        source=FakeItemSource(_items()),
        resolver=FrontPageTimeResolver(fetcher, clock, FrontPageConfig(url="https://example.test")),
        text_cache=TTLCache(clock, lambda item, now: 60),
        formatter=formatter,
        clock=clock,
        activity_config=ActivityConfig(min_by=1),
    )
    return service, formatter


def test_active_marks_fresh_nodes_and_hides_inert_text() -> None:
    service, _ = _service(FakeFetcher("<html></html>"))
    result = asyncio.run(service.active(window=5 * MINUTE, max_age=HOUR))

    assert not result.second_chance_failed
    by_id = {row.id: row for row in result.rows}
    assert [row.id for row in result.rows] == [1, 2, 3]
    assert by_id[1].text == "Story"
    assert not by_id[1].active
    assert by_id[2].active and by_id[2].text == "fresh reply"
    assert by_id[3].text == ""
    assert by_id[3].by == "carol"
    assert by_id[2].depth == 1
    assert by_id[2].age == "2m"


def test_second_chance_root_is_included_and_flagged() -> None:
    document = _age_span(4, NOW - 3 * 86400, "5 minutes")
    service, _ = _service(FakeFetcher(document))
    result = asyncio.run(service.active(window=5 * MINUTE, max_age=HOUR))

    assert [row.id for row in result.rows if row.depth == 0] == [4, 1]
    root = next(row for row in result.rows if row.id == 4)
    assert root.second_chance
    assert root.age == "5m"


@pytest.mark.parametrize(
    "error",
    [UpstreamFetchFailedError("status not ok"), ParseFailedError("unexpected age format")],
)
def test_front_page_failure_degrades(error: Exception) -> None:
    service, _ = _service(FakeFetcher(error=error))
    result = asyncio.run(service.active(window=5 * MINUTE, max_age=HOUR))

    assert result.second_chance_failed
    # The resurfaced story is too old without its front page time.
    assert [row.id for row in result.rows] == [1, 2, 3]


def test_item_source_failure_is_fatal() -> None:
    class BrokenSource(FakeItemSource):
        async def get_max_item_id(self) -> int:
            raise UpstreamFetchFailedError("unreachable")

    clock = ManualClock(NOW)
    service = ActivityService(
        source=BrokenSource([]),
        resolver=FrontPageTimeResolver(FakeFetcher(), clock),
        text_cache=TTLCache(clock, lambda item, now: 60),
        formatter=CountingFormatter(),
        clock=clock,
    )
    with pytest.raises(UpstreamFetchFailedError):
        asyncio.run(service.active())


def test_hide_users_blanks_authors() -> None:
    service, _ = _service(FakeFetcher(""))
    result = asyncio.run(service.active(window=5 * MINUTE, max_age=HOUR, show_user=False))
    assert all(row.by == "" for row in result.rows)


def test_text_is_formatted_once_while_cached() -> None:
    service, formatter = _service(FakeFetcher(""))
    asyncio.run(service.active(window=5 * MINUTE, max_age=HOUR))
    asyncio.run(service.active(window=5 * MINUTE, max_age=HOUR))
    assert sorted(formatter.calls) == [1, 2]


def test_invalid_window_is_rejected() -> None:
    service, _ = _service(FakeFetcher(""))
    with pytest.raises(InvalidInputError):
        asyncio.run(service.active(window=0))


def test_tree_renders_every_node() -> None:
    service, _ = _service(FakeFetcher(""))
    rows = asyncio.run(service.tree(1))
    assert [(row.id, row.depth) for row in rows] == [(1, 0), (2, 1), (3, 1)]
    assert [row.text for row in rows] == ["Story", "fresh reply", "older reply"]
    assert rows[1].time == NOW - 2 * MINUTE


def test_tree_of_unknown_item_fails() -> None:
    service, _ = _service(FakeFetcher(""))
    with pytest.raises(ItemNotFoundError):
        asyncio.run(service.tree(999))
