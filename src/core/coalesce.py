"""Single-flight fetch with a short-lived result cache."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from core.clock import Clock
from core.errors import FetchCancelledError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class CoalescedFetch(Generic[T]):
    """Share one in-flight ``operation`` across concurrent callers.

    A successful result is reused for ``ttl`` seconds. Failures are not cached:
    the next caller after a failure starts a fresh attempt. The caller that
    starts an attempt owns it; cancelling that caller cancels the attempt and
    every other waiter fails with ``FetchCancelledError``.

    Callers may run on different threads with their own event loops. The
    shared handle is a ``concurrent.futures.Future`` so followers on any loop
    can wait on it.
    """

    def __init__(
        self,
        operation: Callable[[float], Awaitable[T]],
        clock: Clock,
        ttl: float,
        name: str = "fetch",
    ) -> None:
        self._operation = operation
        self._clock = clock
        self._ttl = ttl
        self._name = name
        self._lock = threading.Lock()
        self._inflight: Optional[concurrent.futures.Future] = None
        self._cached: Optional[tuple[T, float]] = None
        self.calls = 0

    async def fetch(self, now: Optional[float] = None) -> T:
        current = self._clock.now() if now is None else now
        with self._lock:
            # A cached falsy value (e.g. an empty mapping) is still a valid hit.
            if self._cached is not None and current - self._cached[1] < self._ttl:
                return self._cached[0]
            shared = self._inflight
            if shared is None:
                shared = concurrent.futures.Future()
                self._inflight = shared
                self.calls += 1
                leader = True
            else:
                leader = False

        if not leader:
            # Shielded so a cancelled follower does not cancel the shared attempt.
            return await asyncio.shield(asyncio.wrap_future(shared))

        LOGGER.debug("Starting %s", self._name)
        try:
            result = await self._operation(current)
        except asyncio.CancelledError:
            self._finish(shared, error=FetchCancelledError(f"{self._name} was cancelled"))
            raise
        except Exception as e:
            self._finish(shared, error=e)
            raise
        self._finish(shared, result=result)
        return result

    def _finish(
        self,
        shared: concurrent.futures.Future,
        result: Optional[T] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        with self._lock:
            if error is None:
                self._cached = (result, self._clock.now())
            if self._inflight is shared:
                self._inflight = None
        if error is None:
            shared.set_result(result)
        else:
            shared.set_exception(error)
