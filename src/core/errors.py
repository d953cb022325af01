"""Error taxonomy shared by the core and adapters."""

from __future__ import annotations


class ThreadwatchError(Exception):
    """Base class for all threadwatch errors."""


class InvalidInputError(ThreadwatchError, ValueError):
    """A caller-supplied value (window, id, duration) is malformed."""


class UpstreamFetchFailedError(ThreadwatchError):
    """An upstream source was unreachable or answered with a non-200 status."""


class ItemNotFoundError(UpstreamFetchFailedError):
    """The item source has no record for one of the requested ids."""

    def __init__(self, item_id: int) -> None:
        super().__init__(f"item {item_id} not found")
        self.item_id = item_id


class FetchCancelledError(UpstreamFetchFailedError):
    """A shared in-flight fetch was cancelled before it produced a result."""


class ParseFailedError(ThreadwatchError):
    """A fetched document did not have the expected shape."""
