"""Helpers that turn an item source into a parent -> children graph."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from core.activity import flatten, is_fresh
from core.models import Item, ItemGraph
from core.ports import ItemSourcePort

LOGGER = logging.getLogger(__name__)

SCAN_BATCH_SIZE = 100


def group_by_parent(items: Iterable[Item]) -> tuple[ItemGraph, list[Item]]:
    """Group items under their parent id.

    Returns the graph (children sorted by id) and the parentless items, also
    sorted by id.
    """

    graph: ItemGraph = {}
    roots: list[Item] = []
    for item in items:
        if item.parent is None:
            roots.append(item)
        else:
            graph.setdefault(item.parent, []).append(item)
    for children in graph.values():
        children.sort(key=lambda child: child.id)
    roots.sort(key=lambda root: root.id)
    return graph, roots


async def get_descendants(source: ItemSourcePort, items: Mapping[int, Item]) -> dict[int, Item]:
    """Return ``items`` plus every transitive reply, fetched level by level."""

    found: dict[int, Item] = dict(items)
    frontier = [kid for item in items.values() for kid in item.kids]
    while frontier:
        pending = [kid for kid in dict.fromkeys(frontier) if kid not in found]
        if not pending:
            break
        # Replies can vanish between listing and fetching.
        fetched = await source.get_items(pending, skip_missing=True)
        found.update(fetched)
        frontier = [kid for item in fetched.values() for kid in item.kids]
    return found


async def _scan_recent(
    source: ItemSourcePort,
    active_after: float,
    scan_limit: int,
) -> dict[int, Item]:
    """Walk ids backwards from the newest until items fall out of the window."""

    fresh: dict[int, Item] = {}
    next_id = await source.get_max_item_id()
    scanned = 0
    while next_id > 0 and scanned < scan_limit:
        count = min(SCAN_BATCH_SIZE, scan_limit - scanned, next_id)
        ids = list(range(next_id, next_id - count, -1))
        next_id -= count
        scanned += count

        batch = await source.get_items(ids, skip_missing=True)
        reached_end = False
        for item in batch.values():
            if item.time <= active_after:
                reached_end = True
            elif is_fresh(item, active_after):
                fresh[item.id] = item
        if reached_end:
            break
    else:
        if next_id > 0:
            LOGGER.warning("Stopped scanning after %s ids; window may be truncated", scanned)
    return fresh


async def _resolve_roots(source: ItemSourcePort, items: Mapping[int, Item]) -> dict[int, Item]:
    """Follow parent links until every item is mapped onto its thread root."""

    known: dict[int, Item] = dict(items)
    roots: dict[int, Item] = {}
    pending: set[int] = set()
    for item in items.values():
        if item.parent is None:
            roots[item.id] = item
        else:
            pending.add(item.parent)

    seen: set[int] = set()
    while pending:
        missing = [parent_id for parent_id in pending if parent_id not in known]
        if missing:
            known.update(await source.get_items(missing, skip_missing=True))
        seen.update(pending)
        next_pending: set[int] = set()
        for parent_id in pending:
            parent = known.get(parent_id)
            if parent is None:
                continue
            if parent.parent is None:
                roots[parent.id] = parent
            elif parent.parent not in seen:
                next_pending.add(parent.parent)
        pending = next_pending
    return roots


def distinct_active_authors(root: Item, graph: ItemGraph, active_after: float) -> int:
    authors = {
        node.item.by
        for node in flatten(root, graph)
        if node.item.by and is_fresh(node.item, active_after)
    }
    return len(authors)


async def get_active(
    source: ItemSourcePort,
    active_after: float,
    aged_after: float,
    min_by: int,
    scan_limit: int,
) -> tuple[list[Item], ItemGraph]:
    """Find thread roots with recent activity.

    A root qualifies when it was created after ``aged_after`` and at least
    ``min_by`` distinct authors posted in its tree after ``active_after``.
    Roots come back sorted by id, newest first.
    """

    fresh = await _scan_recent(source, active_after, scan_limit)
    roots = await _resolve_roots(source, fresh)
    roots = {root_id: root for root_id, root in roots.items() if root.time > aged_after}

    everything = await get_descendants(source, roots)
    graph, _ = group_by_parent(everything.values())

    selected = [
        root
        for root in roots.values()
        if distinct_active_authors(root, graph, active_after) >= min_by
    ]
    selected.sort(key=lambda root: root.id, reverse=True)
    LOGGER.info(
        "Active scan: fresh=%s, roots=%s, selected=%s",
        len(fresh),
        len(roots),
        len(selected),
    )
    return selected, graph
