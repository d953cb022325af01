"""Orchestrates the active-threads and item-tree requests.

This module is integration-agnostic. It relies on the item source port, the
front page resolver and a text formatter, enabling other frontends without
changes here.
"""

from __future__ import annotations

import logging
from typing import Optional

from core import item_graph
from core.activity import ActivityMark, ActivityTree, flatten
from core.clock import Clock
from core.config import ActivityConfig, ItemSourceConfig
from core.durations import pretty_format_duration
from core.errors import InvalidInputError, ParseFailedError, UpstreamFetchFailedError
from core.front_page import FrontPageTimeResolver
from core.models import ActiveResult, ActiveRow, Item, TreeRow
from core.ports import ItemSourcePort, TextFormatterPort
from core.roots import select_roots
from core.ttl_cache import TTLCache

LOGGER = logging.getLogger(__name__)


class ActivityService:
    """Builds presentation rows for active threads and single item trees."""

    def __init__(
        self,
        source: ItemSourcePort,
        resolver: FrontPageTimeResolver,
        text_cache: TTLCache[Item, str],
        formatter: TextFormatterPort,
        clock: Clock,
        activity_config: Optional[ActivityConfig] = None,
        source_config: Optional[ItemSourceConfig] = None,
    ) -> None:
        self._source = source
        self._resolver = resolver
        self._text_cache = text_cache
        self._formatter = formatter
        self._clock = clock
        self._activity = activity_config or ActivityConfig()
        self._source_config = source_config or ItemSourceConfig()

    def format_text(self, item: Item) -> str:
        """Return sanitized display text, reusing the cached copy when valid."""

        found = self._text_cache.get([item])
        if found:
            return found[0][1]
        text = self._formatter(item, True)
        self._text_cache.put(item, text)
        return text

    async def _front_page_times(self, now: float) -> tuple[dict[int, int], bool]:
        try:
            return await self._resolver.resolve_times(now), False
        except (UpstreamFetchFailedError, ParseFailedError):
            # Degrade to raw item times; the next request retries the scrape.
            LOGGER.warning("Second-chance times unavailable", exc_info=True)
            return {}, True

    async def active(
        self,
        window: Optional[float] = None,
        max_age: Optional[float] = None,
        min_by: Optional[int] = None,
        show_user: bool = True,
    ) -> ActiveResult:
        """Return rows for every thread with activity inside ``window`` seconds."""

        window = self._activity.window_seconds if window is None else window
        max_age = self._activity.max_age_seconds if max_age is None else max_age
        min_by = self._activity.min_by if min_by is None else min_by
        if window <= 0 or max_age <= 0:
            raise InvalidInputError("window and max age must be positive")
        if min_by < 0:
            raise InvalidInputError("min_by must not be negative")

        now = self._clock.now()
        active_after = now - window

        candidates, graph = await item_graph.get_active(
            self._source,
            active_after,
            now - self._activity.second_chance_lookback_seconds,
            min_by,
            self._source_config.scan_limit,
        )
        times, degraded = await self._front_page_times(now)
        roots = select_roots(candidates, times, now - max_age)

        rows: list[ActiveRow] = []
        for root in roots:
            tree = ActivityTree.build(root.item, graph, active_after, root_time=root.time)
            for node in tree.nodes:
                mark = tree.mark(node)
                is_root = node.id == root.item.id
                rows.append(
                    ActiveRow(
                        by=node.item.by if show_user else "",
                        text=self.format_text(node.item) if tree.rendered(node) else "",
                        age=pretty_format_duration(now - node.time),
                        id=node.id,
                        depth=node.depth,
                        active=bool(mark & ActivityMark.SELF),
                        second_chance=is_root and root.second_chance,
                    )
                )

        LOGGER.info(
            "Active request: roots=%s, rows=%s, second_chance_failed=%s",
            len(roots),
            len(rows),
            degraded,
        )
        return ActiveResult(rows=rows, second_chance_failed=degraded)

    async def tree(self, item_id: int, show_user: bool = True) -> list[TreeRow]:
        """Return every node under ``item_id`` with its display text."""

        if item_id <= 0:
            raise InvalidInputError(f"invalid item id: {item_id}")

        items = await self._source.get_items([item_id])
        item = items[item_id]
        everything = await item_graph.get_descendants(self._source, items)
        graph, _ = item_graph.group_by_parent(everything.values())

        return [
            TreeRow(
                by=node.item.by if show_user else "",
                text=self.format_text(node.item),
                time=node.time,
                id=node.id,
                depth=node.depth,
            )
            for node in flatten(item, graph)
        ]
