"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

ONE_MINUTE = 60
ONE_HOUR = 60 * ONE_MINUTE
ONE_DAY = 24 * ONE_HOUR


@dataclass(frozen=True)
class FrontPageConfig:
    """Where and how often to scrape the listing page for second-chance times."""

    url: str = "https://news.ycombinator.com"
    cache_ttl_seconds: float = ONE_MINUTE
    drift_threshold_seconds: float = 2 * ONE_HOUR
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class ItemSourceConfig:
    """Item API settings consumed by the item source adapter."""

    base_url: str = "https://hacker-news.firebaseio.com/v0"
    concurrency: int = 32
    timeout_seconds: float = 10.0
    scan_limit: int = 2000


@dataclass(frozen=True)
class ActivityConfig:
    """Defaults for the active-threads request."""

    window_seconds: float = ONE_HOUR
    max_age_seconds: float = ONE_DAY
    min_by: int = 3
    # Candidate lookback must reach items pulled from the second-chance pool.
    second_chance_lookback_seconds: float = 7 * ONE_DAY


@dataclass(frozen=True)
class TextCacheConfig:
    """Display text cache settings."""

    sweep_interval_seconds: float = 10 * ONE_MINUTE
