"""Ingest pipeline: listener -> queue -> scheduler -> decode -> match -> aggregate.

Outcomes are fanned out to explicit observer lists. Observers run on the
event loop between drain steps and must not block.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from logscanner.config import IngestionConfig, ListenerConfig
from logscanner.core.aggregator import StatsAggregator
from logscanner.core.decoder import decode_datagram
from logscanner.core.listener import UdpListener
from logscanner.core.matcher import SearchMatcher
from logscanner.core.queue import IngestionQueue
from logscanner.core.scheduler import CallSoon, DrainScheduler
from logscanner.models.runtime import (
    DecodedMessage,
    DecodeFailure,
    QueueStats,
    RawDatagram,
)

logger = logging.getLogger("logscanner.pipeline")

MessageObserver = Callable[[DecodedMessage, list[str]], None]
NewSubsystemObserver = Callable[[str, str], None]
SearchMatchObserver = Callable[[DecodedMessage, list[str]], None]
OverflowObserver = Callable[[int], None]
ErrorObserver = Callable[[Exception], None]


class IngestPipeline:
    """Wires the ingest components together and owns their lifecycle."""

    def __init__(
        self,
        listener_config: ListenerConfig | None = None,
        ingestion_config: IngestionConfig | None = None,
        aggregator: StatsAggregator | None = None,
        matcher: SearchMatcher | None = None,
        call_soon: CallSoon | None = None,
    ) -> None:
        self._listener_config = listener_config or ListenerConfig()
        self._ingestion = ingestion_config or IngestionConfig()
        self.aggregator = aggregator or StatsAggregator()
        self.matcher = matcher or SearchMatcher()

        self._queue: IngestionQueue[RawDatagram] = IngestionQueue(self._ingestion.queue_capacity)
        self._scheduler: DrainScheduler[RawDatagram] = DrainScheduler(
            self._queue,
            self.route,
            batch_size=self._ingestion.batch_size,
            call_soon=call_soon,
        )
        self._listener = UdpListener(self._listener_config, self.submit, self._emit_error)

        self._decode_failures = 0
        self._message_observers: list[MessageObserver] = []
        self._new_subsystem_observers: list[NewSubsystemObserver] = []
        self._search_match_observers: list[SearchMatchObserver] = []
        self._overflow_observers: list[OverflowObserver] = []
        self._error_observers: list[ErrorObserver] = []

    # --- Observers ---

    def subscribe_message(self, observer: MessageObserver) -> None:
        self._message_observers.append(observer)

    def subscribe_new_subsystem(self, observer: NewSubsystemObserver) -> None:
        self._new_subsystem_observers.append(observer)

    def subscribe_search_match(self, observer: SearchMatchObserver) -> None:
        self._search_match_observers.append(observer)

    def subscribe_queue_overflow(self, observer: OverflowObserver) -> None:
        self._overflow_observers.append(observer)

    def subscribe_error(self, observer: ErrorObserver) -> None:
        self._error_observers.append(observer)

    def _notify(self, observers: list, *args: object) -> None:
        for observer in list(observers):
            try:
                observer(*args)
            except Exception:
                logger.exception("Observer %r failed", observer)

    def _emit_error(self, exc: Exception) -> None:
        self._notify(self._error_observers, exc)

    # --- Lifecycle ---

    @property
    def is_running(self) -> bool:
        return self._listener.is_running

    @property
    def address(self) -> tuple[str, int] | None:
        return self._listener.address

    async def start(self) -> None:
        """Bind the socket. Raises ListenerStartupError if that fails."""
        await self._listener.start()

    def stop(self) -> int:
        """Close the socket, then flush what is already queued. Returns items flushed."""
        self._listener.stop()
        flushed = self._scheduler.flush()
        if flushed:
            logger.info("Flushed %d queued datagrams on shutdown", flushed)
        return flushed

    # --- Ingest path ---

    def submit(self, datagram: RawDatagram) -> bool:
        """Receive-path entry point. Enqueues only; never decodes inline."""
        accepted = self._scheduler.submit(datagram)
        if not accepted:
            dropped = self._scheduler.dropped
            if dropped == 1 or dropped % self._ingestion.overflow_report_every == 0:
                logger.warning(
                    "Ingestion queue full (capacity %d); %d datagrams dropped so far",
                    self._queue.capacity,
                    dropped,
                )
                self._notify(self._overflow_observers, dropped)
        return accepted

    def route(self, datagram: RawDatagram) -> DecodedMessage | None:
        """Decode, match and aggregate one datagram."""
        result = decode_datagram(datagram)
        if isinstance(result, DecodeFailure):
            self._decode_failures += 1
            logger.warning(
                "Dropping datagram from %s:%d: %s",
                result.sender_ip,
                result.sender_port,
                result.reason,
            )
            return None

        logger.debug("Decoded message from %s/%s", result.source, result.subsystem)
        matches = self.matcher.find_matches(result.match_text)
        is_new = self.aggregator.track(result, matches)

        self._notify(self._message_observers, result, matches)
        if is_new:
            logger.info("New subsystem discovered: %s -> %s", result.source, result.subsystem)
            self._notify(self._new_subsystem_observers, result.source, result.subsystem)
        if matches:
            self._notify(self._search_match_observers, result, matches)
        return result

    # --- Metrics ---

    @property
    def decode_failures(self) -> int:
        return self._decode_failures

    @property
    def queue_stats(self) -> QueueStats:
        return self._queue.stats()

    @property
    def scheduler(self) -> DrainScheduler[RawDatagram]:
        return self._scheduler
