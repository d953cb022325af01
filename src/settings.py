"""Static configuration for threadwatch.

All user-editable settings (API endpoints, windows, cache and logging) live
in a single JSON file for quick edits without touching Python.
"""

import json
import os

from dotenv import load_dotenv

from core.config import ActivityConfig, FrontPageConfig, ItemSourceConfig, TextCacheConfig
from core.durations import parse_duration

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# THREADWATCH_CONFIG points at an alternative config file.
CONFIG_PATH = os.getenv("THREADWATCH_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Item API used to discover active threads and load reply trees.
_hn_api = _CONFIG.get("hn_api", {})
ITEM_SOURCE = ItemSourceConfig(
    base_url=_hn_api.get("base_url", ItemSourceConfig.base_url),
    concurrency=int(_hn_api.get("concurrency", ItemSourceConfig.concurrency)),
    timeout_seconds=float(_hn_api.get("timeout_seconds", ItemSourceConfig.timeout_seconds)),
    scan_limit=int(_hn_api.get("scan_limit", ItemSourceConfig.scan_limit)),
)

# Front page scrape for second-chance times.
# - cache_ttl_seconds: how long one scrape is reused across requests
# - drift_threshold_seconds: drift above which the relative age is trusted
_front_page = _CONFIG.get("front_page", {})
FRONT_PAGE = FrontPageConfig(
    url=_front_page.get("url", FrontPageConfig.url),
    cache_ttl_seconds=float(_front_page.get("cache_ttl_seconds", FrontPageConfig.cache_ttl_seconds)),
    drift_threshold_seconds=float(
        _front_page.get("drift_threshold_seconds", FrontPageConfig.drift_threshold_seconds)
    ),
    timeout_seconds=float(_front_page.get("timeout_seconds", FrontPageConfig.timeout_seconds)),
)

# Defaults for the active command; durations use the "1h30m" form.
_active = _CONFIG.get("active", {})
ACTIVITY = ActivityConfig(
    window_seconds=parse_duration(_active.get("window", "1h")),
    max_age_seconds=parse_duration(_active.get("max_age", "24h")),
    min_by=int(_active.get("min_by", ActivityConfig.min_by)),
    second_chance_lookback_seconds=parse_duration(_active.get("second_chance_lookback", "168h")),
)

_text_cache = _CONFIG.get("text_cache", {})
TEXT_CACHE = TextCacheConfig(
    sweep_interval_seconds=float(
        _text_cache.get("sweep_interval_seconds", TextCacheConfig.sweep_interval_seconds)
    ),
)

# Sent with every request so the API operators can identify the client.
USER_AGENT = os.getenv("THREADWATCH_USER_AGENT", "threadwatch/0.1")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
