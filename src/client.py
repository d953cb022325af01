"""HTTP client factory for threadwatch.

We explicitly manage the client's lifecycle (open per command, closed on
exit) so it is obvious when connections are created and when they end.
"""

from __future__ import annotations

import logging

import httpx

import settings


def build_client(timeout_seconds: float) -> httpx.AsyncClient:
    """Create the shared async HTTP client.

    The user agent comes from THREADWATCH_USER_AGENT (read via python-dotenv)
    so operators can add contact details without editing code.
    """

    logging.getLogger(__name__).info("Initializing HTTP client")

    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        headers={"User-Agent": settings.USER_AGENT},
        follow_redirects=True,
    )
