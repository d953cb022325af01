"""Second-chance time correction from the front page listing.

Items pulled back onto the front page from the second-chance pool keep their
original timestamp in the ``title`` attribute of the age span, while the
visible "N hours ago" text is reset to the time of promotion. When the two
disagree by more than the drift threshold, the relative age wins.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Protocol

from core.clock import Clock
from core.coalesce import CoalescedFetch
from core.config import ONE_DAY, ONE_HOUR, ONE_MINUTE, FrontPageConfig
from core.errors import ParseFailedError

LOGGER = logging.getLogger(__name__)

FRONT_PAGE_AGE_PATTERN = re.compile(
    r'<span class="age" title="[^"]+\s+(\d+)"><a href="item\?id=(\d+)">([^<]+) ago</a></span>'
)

RELATIVE_AGE_PATTERN = re.compile(r"^\s*(\d+)\s+(hour|hours|minute|minutes|day|days)\s*$")

_UNIT_SECONDS = {
    "minute": ONE_MINUTE,
    "minutes": ONE_MINUTE,
    "hour": ONE_HOUR,
    "hours": ONE_HOUR,
    "day": ONE_DAY,
    "days": ONE_DAY,
}


class PageFetcherPort(Protocol):
    """Fetches a page body; raises UpstreamFetchFailedError on failure."""

    async def get_text(self, url: str) -> str:
        ...


def parse_age(phrase: str) -> int:
    """Parse ``"3 hours"`` style phrases into seconds."""

    match = RELATIVE_AGE_PATTERN.match(phrase)
    if match is None:
        raise ParseFailedError(f"unexpected age format: {phrase!r}")
    return int(match.group(1)) * _UNIT_SECONDS[match.group(2)]


def extract_front_page_times(
    document: str,
    now: float,
    drift_threshold: float = 2 * ONE_HOUR,
) -> dict[int, int]:
    """Return item id -> effective unix time for every age span in ``document``.

    Drift is compared by magnitude: the relative age wins whenever the two
    signals disagree by more than ``drift_threshold`` in either direction.
    A single malformed fragment fails the whole batch.
    """

    times: dict[int, int] = {}
    for match in FRONT_PAGE_AGE_PATTERN.finditer(document):
        absolute = int(match.group(1))
        item_id = int(match.group(2))
        age = parse_age(match.group(3))

        drift = (now - absolute) - age
        if abs(drift) > drift_threshold:
            times[item_id] = int(now - age)
        else:
            times[item_id] = absolute
    return times


class FrontPageTimeResolver:
    """Scrapes the listing page at most once per cache window."""

    def __init__(
        self,
        fetcher: PageFetcherPort,
        clock: Clock,
        config: Optional[FrontPageConfig] = None,
    ) -> None:
        self._fetcher = fetcher
        self._clock = clock
        self._config = config or FrontPageConfig()
        self._fetch = CoalescedFetch(
            self._scrape,
            clock,
            ttl=self._config.cache_ttl_seconds,
            name="front page scrape",
        )

    @property
    def scrape_count(self) -> int:
        return self._fetch.calls

    async def resolve_times(self, now: Optional[float] = None) -> dict[int, int]:
        return await self._fetch.fetch(now)

    async def _scrape(self, now: float) -> dict[int, int]:
        document = await self._fetcher.get_text(self._config.url)
        times = extract_front_page_times(document, now, self._config.drift_threshold_seconds)
        LOGGER.info("Front page scrape found %s items", len(times))
        return times
