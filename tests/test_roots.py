from __future__ import annotations

from core.models import Item
from core.roots import effective_root, select_roots

NOW = 1_700_000_000


def test_ties_are_broken_by_id_descending() -> None:
    candidates = [Item(id=100, time=NOW - 60), Item(id=200, time=NOW - 60)]
    roots = select_roots(candidates, {}, NOW - 3600)
    assert [root.item.id for root in roots] == [200, 100]


def test_orders_by_effective_time_descending() -> None:
    candidates = [
        Item(id=1, time=NOW - 300),
        Item(id=2, time=NOW - 100),
        Item(id=3, time=NOW - 200),
    ]
    roots = select_roots(candidates, None, NOW - 3600)
    assert [root.item.id for root in roots] == [2, 3, 1]


def test_second_chance_time_revives_old_root() -> None:
    old = Item(id=5, time=NOW - 3 * 86400)
    roots = select_roots([old], {5: NOW - 600}, NOW - 86400)
    assert len(roots) == 1
    assert roots[0].time == NOW - 600
    assert roots[0].second_chance


def test_aged_out_roots_are_dropped() -> None:
    candidates = [Item(id=1, time=NOW - 2 * 86400), Item(id=2, time=NOW - 60)]
    roots = select_roots(candidates, {}, NOW - 86400)
    assert [root.item.id for root in roots] == [2]


def test_root_exactly_at_cutoff_is_dropped() -> None:
    roots = select_roots([Item(id=1, time=NOW - 86400)], {}, NOW - 86400)
    assert roots == []


def test_earlier_front_page_time_is_ignored() -> None:
    root = effective_root(Item(id=1, time=NOW - 60), {1: NOW - 600})
    assert root.time == NOW - 60
    assert not root.second_chance


def test_missing_front_page_entry_uses_item_time() -> None:
    root = effective_root(Item(id=1, time=NOW - 60), {2: NOW})
    assert root.time == NOW - 60
    assert not root.second_chance
