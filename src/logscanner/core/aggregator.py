"""In-memory per-(source, subsystem) statistics."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from logscanner.models.runtime import (
    DecodedMessage,
    StatRecord,
    StatsSnapshot,
    SubsystemStat,
)

logger = logging.getLogger("logscanner.aggregator")

AggregateKey = tuple[str, str]


class StatsAggregator:
    """Authoritative aggregate of everything routed since the last reset.

    Only the ingest pipeline writes to it, and every public method runs to
    completion synchronously, so readers on the same event loop never see a
    half-applied ``track`` or ``reset``.
    """

    def __init__(self) -> None:
        self._stats: dict[AggregateKey, SubsystemStat] = {}
        self._known_keys: set[AggregateKey] = set()
        self._sender_ips: set[str] = set()
        self._total_messages = 0

    def track(
        self,
        message: DecodedMessage,
        matching_terms: Iterable[str] = (),
    ) -> bool:
        """Count a decoded message. Returns True the first time its key is seen."""
        if not message.source or not message.subsystem:
            return False

        if message.sender_ip:
            self._sender_ips.add(message.sender_ip)

        key = (message.source, message.subsystem)
        is_new = key not in self._known_keys
        if is_new:
            self._known_keys.add(key)

        stat = self._stats.get(key)
        if stat is None:
            stat = self._stats[key] = SubsystemStat()

        stat.count += 1
        if message.sender_ip:
            stat.sender_ips.add(message.sender_ip)
        if message.log_level:
            stat.log_levels.add(message.log_level)
        stat.search_matches.update(matching_terms)

        self._total_messages += 1
        return is_new

    def get_all_stats(self) -> list[StatRecord]:
        """Flattened records ordered by source, then subsystem."""
        return [
            StatRecord(
                source=source,
                subsystem=subsystem,
                count=stat.count,
                sender_ips=tuple(sorted(stat.sender_ips)),
                log_levels=tuple(sorted(stat.log_levels)),
                search_matches=tuple(sorted(stat.search_matches)),
            )
            for (source, subsystem), stat in sorted(self._stats.items())
        ]

    def get_total_messages(self) -> int:
        return self._total_messages

    def get_unique_subsystem_count(self) -> int:
        return len(self._known_keys)

    def get_all_sender_ips(self) -> list[str]:
        return sorted(self._sender_ips)

    def reset(self) -> None:
        """Clear every record and counter in one step."""
        self._stats = {}
        self._known_keys = set()
        self._sender_ips = set()
        self._total_messages = 0
        logger.info("Aggregate statistics reset")

    def export_snapshot(self) -> StatsSnapshot:
        """Self-consistent copy of the aggregate at the moment of the call."""
        return StatsSnapshot(
            total_messages=self._total_messages,
            unique_subsystems=len(self._known_keys),
            stats=tuple(self.get_all_stats()),
            timestamp=datetime.now(timezone.utc),
        )
