"""HTTP page fetcher adapter.

Implements the core PageFetcherPort with an httpx AsyncClient.
"""

from __future__ import annotations

import httpx

from core.errors import UpstreamFetchFailedError


class HttpPageFetcher:
    """Fetches page bodies and maps transport failures onto core errors."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def get_text(self, url: str) -> str:
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise UpstreamFetchFailedError(f"failed to fetch {url}: {e}") from e
        if response.status_code != httpx.codes.OK:
            raise UpstreamFetchFailedError(f"status not ok for {url}: {response.status_code}")
        return response.text
