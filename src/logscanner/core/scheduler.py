"""Cooperative batch draining of the ingestion queue.

``submit`` only enqueues and, when the scheduler is idle, books a drain pass
on the next event loop iteration. Drain work therefore never runs inside the
socket receive callback, and other loop work (display refresh, command input,
readers of the aggregate) interleaves between batches.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from logscanner.core.queue import IngestionQueue
from logscanner.models.enums import SchedulerState

logger = logging.getLogger("logscanner.scheduler")

T = TypeVar("T")

CallSoon = Callable[[Callable[[], None]], Any]


def _loop_call_soon(callback: Callable[[], None]) -> Any:
    return asyncio.get_running_loop().call_soon(callback)


class DrainScheduler(Generic[T]):
    """Idle/draining state machine feeding queued items to ``handler``."""

    def __init__(
        self,
        queue: IngestionQueue[T],
        handler: Callable[[T], None],
        batch_size: int = 100,
        call_soon: CallSoon | None = None,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._queue = queue
        self._handler = handler
        self._batch_size = batch_size
        self._call_soon = call_soon or _loop_call_soon
        self._state = SchedulerState.IDLE
        self._passes = 0
        # Items already popped for the current pass, not yet handled
        self._in_flight: deque[T] = deque()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def dropped(self) -> int:
        return self._queue.dropped

    @property
    def passes(self) -> int:
        return self._passes

    def submit(self, item: T) -> bool:
        """Enqueue ``item`` and make sure a drain pass is pending."""
        accepted = self._queue.enqueue(item)
        if accepted and self._state is SchedulerState.IDLE:
            self._schedule()
        return accepted

    def _schedule(self) -> None:
        try:
            self._call_soon(self._drain_pass)
        except Exception:
            # Nothing is booked; stay idle so the next submit tries again
            self._state = SchedulerState.IDLE
            raise
        self._state = SchedulerState.DRAINING

    def _drain_pass(self) -> None:
        self._passes += 1
        self._in_flight.extend(self._queue.pop_batch(self._batch_size))
        while self._in_flight:
            self._dispatch(self._in_flight.popleft())

        if len(self._queue):
            self._schedule()
        else:
            self._state = SchedulerState.IDLE

    def _dispatch(self, item: T) -> None:
        try:
            self._handler(item)
        except Exception:
            logger.exception("Handler failed for queued item")

    def flush(self) -> int:
        """Drain everything still queued, synchronously. Returns items processed.

        Items popped by a pass that is still running (``flush`` called from a
        handler) go first, so FIFO order holds. A pass that is already booked
        on the loop finds the queue empty and returns the scheduler to idle.
        """
        processed = 0
        while self._in_flight or len(self._queue):
            if not self._in_flight:
                self._in_flight.extend(self._queue.pop_batch(self._batch_size))
            self._dispatch(self._in_flight.popleft())
            processed += 1
        return processed
