from __future__ import annotations

import asyncio
from typing import Iterable

import pytest

from core.errors import ItemNotFoundError
from core.item_graph import get_active, get_descendants, group_by_parent
from core.models import Item

NOW = 1_700_000_000
HOUR = 3600


class FakeItemSource:
    def __init__(self, items: Iterable[Item]) -> None:
        self.items = {item.id: item for item in items}
        self.requested: list[int] = []

    async def get_max_item_id(self) -> int:
        return max(self.items)

    async def get_items(self, ids: Iterable[int], skip_missing: bool = False) -> dict[int, Item]:
        found = {}
        for item_id in ids:
            self.requested.append(item_id)
            item = self.items.get(item_id)
            if item is None:
                if skip_missing:
                    continue
                raise ItemNotFoundError(item_id)
            found[item_id] = item
        return found


def _forum() -> list[Item]:
    # Story 10 (old) with fresh replies from three authors; story 20 with one
    # fresh reply; story 1 from last month with a fresh reply.
    return [
        Item(id=1, time=NOW - 30 * 24 * HOUR, by="old", kids=(30,)),
        Item(id=10, time=NOW - 5 * HOUR, by="op", kids=(11, 12)),
        Item(id=11, parent=10, time=NOW - 4 * HOUR, by="a", kids=(21,)),
        Item(id=12, parent=10, time=NOW - 3 * HOUR, by="b", kids=(22,)),
        Item(id=20, time=NOW - 2 * HOUR, by="op2", kids=(23,)),
        Item(id=21, parent=11, time=NOW - 600, by="c", kids=(24,)),
        Item(id=22, parent=12, time=NOW - 500, by="d"),
        Item(id=23, parent=20, time=NOW - 400, by="e"),
        Item(id=24, parent=21, time=NOW - 300, by="f"),
        Item(id=30, parent=1, time=NOW - 200, by="g"),
        Item(id=31, time=NOW - 100, by="h", dead=True),
    ]


def test_group_by_parent_sorts_children_and_roots() -> None:
    items = [
        Item(id=5, parent=1),
        Item(id=3, parent=1),
        Item(id=9),
        Item(id=1),
        Item(id=4, parent=3),
    ]
    graph, roots = group_by_parent(items)
    assert [child.id for child in graph[1]] == [3, 5]
    assert [child.id for child in graph[3]] == [4]
    assert [root.id for root in roots] == [1, 9]


def test_get_descendants_returns_full_closure() -> None:
    source = FakeItemSource(_forum())
    start = {10: source.items[10]}
    found = asyncio.run(get_descendants(source, start))
    assert sorted(found) == [10, 11, 12, 21, 22, 24]


def test_get_descendants_skips_vanished_replies() -> None:
    source = FakeItemSource([Item(id=1, kids=(2, 3)), Item(id=2, parent=1)])
    found = asyncio.run(get_descendants(source, {1: source.items[1]}))
    assert sorted(found) == [1, 2]


def test_get_active_filters_by_distinct_authors() -> None:
    source = FakeItemSource(_forum())
    roots, graph = asyncio.run(
        get_active(source, NOW - HOUR, NOW - 7 * 24 * HOUR, min_by=3, scan_limit=1000)
    )
    assert [root.id for root in roots] == [10]
    assert [child.id for child in graph[10]] == [11, 12]


def test_get_active_with_low_threshold_keeps_recent_roots_only() -> None:
    source = FakeItemSource(_forum())
    roots, _ = asyncio.run(
        get_active(source, NOW - HOUR, NOW - 7 * 24 * HOUR, min_by=1, scan_limit=1000)
    )
    # Story 1 is older than the lookback even though it has a fresh reply.
    assert [root.id for root in roots] == [20, 10]


def test_get_active_propagates_source_failures() -> None:
    class BrokenSource(FakeItemSource):
        async def get_max_item_id(self) -> int:
            raise ItemNotFoundError(0)

    with pytest.raises(ItemNotFoundError):
        asyncio.run(get_active(BrokenSource([]), NOW - HOUR, NOW - HOUR, 1, 10))
