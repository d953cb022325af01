"""Root selection: second-chance time adjustment, age filter, ordering."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from core.models import Item, Root


def effective_root(item: Item, front_page_times: Optional[Mapping[int, int]]) -> Root:
    """Use the front page time when it is later than the item's own time."""

    updated = (front_page_times or {}).get(item.id)
    if updated is not None and updated > item.time:
        return Root(item=item, time=updated, second_chance=True)
    return Root(item=item, time=item.time)


def select_roots(
    candidates: Iterable[Item],
    front_page_times: Optional[Mapping[int, int]],
    aged_after: float,
) -> list[Root]:
    """Keep candidates newer than ``aged_after``, newest first, ties by id desc."""

    roots = [effective_root(item, front_page_times) for item in candidates]
    kept = [root for root in roots if root.time > aged_after]
    kept.sort(key=lambda root: (root.time, root.item.id), reverse=True)
    return kept
