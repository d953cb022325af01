"""Hacker News Firebase API adapter.

Implements the core ItemSourcePort. Items are fetched fresh on every call so
reply lists never go stale; nothing is persisted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

import httpx

from core.config import ItemSourceConfig
from core.errors import ItemNotFoundError, ParseFailedError, UpstreamFetchFailedError
from core.models import Item

LOGGER = logging.getLogger(__name__)


class HackerNewsClient:
    """Concurrent item fetcher bounded by a semaphore."""

    def __init__(self, client: httpx.AsyncClient, config: Optional[ItemSourceConfig] = None) -> None:
        self._client = client
        self._config = config or ItemSourceConfig()
        self._semaphore = asyncio.Semaphore(self._config.concurrency)

    def _url(self, path: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/{path}"

    async def _get_json(self, path: str):
        url = self._url(path)
        async with self._semaphore:
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as e:
                raise UpstreamFetchFailedError(f"failed to fetch {url}: {e}") from e
        if response.status_code != httpx.codes.OK:
            raise UpstreamFetchFailedError(f"status not ok for {url}: {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise ParseFailedError(f"invalid JSON from {url}") from e

    async def get_max_item_id(self) -> int:
        payload = await self._get_json("maxitem.json")
        if not isinstance(payload, int):
            raise ParseFailedError(f"unexpected maxitem payload: {payload!r}")
        return payload

    async def _get_item(self, item_id: int) -> Optional[Item]:
        payload = await self._get_json(f"item/{item_id}.json")
        if payload is None:
            return None
        try:
            return Item.from_api(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise ParseFailedError(f"malformed item {item_id}") from e

    async def get_items(self, ids: Iterable[int], skip_missing: bool = False) -> dict[int, Item]:
        """Fetch items concurrently, returned in request order."""

        wanted = list(dict.fromkeys(ids))
        fetched = await asyncio.gather(*(self._get_item(item_id) for item_id in wanted))

        items: dict[int, Item] = {}
        for item_id, item in zip(wanted, fetched):
            if item is None:
                if skip_missing:
                    continue
                raise ItemNotFoundError(item_id)
            items[item_id] = item
        LOGGER.debug("Fetched %s of %s requested items", len(items), len(wanted))
        return items
