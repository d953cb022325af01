"""Ports (interfaces) used by the core.

Ports define the minimal contracts for the item source and the text
formatter so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Iterable, Protocol

from core.front_page import PageFetcherPort
from core.models import Item

__all__ = ["ItemSourcePort", "PageFetcherPort", "TextFormatterPort"]


class ItemSourcePort(Protocol):
    """Item retrieval required by the graph helpers."""

    async def get_max_item_id(self) -> int:
        ...

    async def get_items(self, ids: Iterable[int], skip_missing: bool = False) -> dict[int, Item]:
        """Fetch items by id; missing ids raise ItemNotFoundError unless skipped."""
        ...


class TextFormatterPort(Protocol):
    """Pure, deterministic display text formatting for an item."""

    def __call__(self, item: Item, strip_html: bool) -> str:
        ...
