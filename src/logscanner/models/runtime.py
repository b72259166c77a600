"""Dataclass models for datagrams, decoded messages and aggregate stats."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class RawDatagram:
    """A UDP payload as received, before decoding."""

    payload: bytes
    sender_host: str
    sender_port: int
    received_at: datetime = field(default_factory=_now)


@dataclass(frozen=True, slots=True)
class DecodedMessage:
    """A single Log4Net UDP record split into its fields."""

    source: str
    log_row_number: str = ""
    iso_timestamp: str = ""
    local_timestamp: str = ""
    log_level: str = ""
    host: str = ""
    subsystem: str = ""
    windows_user: str = ""
    message_content: str = ""
    sender_ip: str = ""
    sender_port: int = 0
    raw_message: str = ""

    @property
    def match_text(self) -> str:
        """Text checked against search terms: message body plus subsystem."""
        return f"{self.message_content} {self.subsystem}"


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    """A datagram that could not be decoded."""

    reason: str
    raw_message: str = ""
    sender_ip: str = ""
    sender_port: int = 0


@dataclass(slots=True)
class SubsystemStat:
    """Running statistics for one (source, subsystem) key."""

    count: int = 0
    sender_ips: set[str] = field(default_factory=set)
    log_levels: set[str] = field(default_factory=set)
    search_matches: set[str] = field(default_factory=set)


@dataclass(frozen=True, slots=True)
class StatRecord:
    """Flattened, read-only view of one SubsystemStat."""

    source: str
    subsystem: str
    count: int
    sender_ips: tuple[str, ...] = ()
    log_levels: tuple[str, ...] = ()
    search_matches: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "subsystem": self.subsystem,
            "count": self.count,
            "senderIps": list(self.sender_ips),
            "logLevels": list(self.log_levels),
            "searchMatches": list(self.search_matches),
        }


@dataclass(frozen=True, slots=True)
class StatsSnapshot:
    """Point-in-time copy of the whole aggregate."""

    total_messages: int
    unique_subsystems: int
    stats: tuple[StatRecord, ...] = ()
    timestamp: datetime = field(default_factory=_now)

    def to_dict(self) -> dict:
        return {
            "totalMessages": self.total_messages,
            "uniqueSubsystems": self.unique_subsystems,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
            "stats": [s.to_dict() for s in self.stats],
        }


@dataclass(frozen=True, slots=True)
class QueueStats:
    """Ingestion queue metrics."""

    length: int
    capacity: int
    dropped: int
