"""logscanner data models."""

from logscanner.models.enums import ExportFormat, SchedulerState, SortColumn
from logscanner.models.runtime import (
    DecodedMessage,
    DecodeFailure,
    QueueStats,
    RawDatagram,
    StatRecord,
    StatsSnapshot,
    SubsystemStat,
)

__all__ = [
    "SchedulerState",
    "SortColumn",
    "ExportFormat",
    "RawDatagram",
    "DecodedMessage",
    "DecodeFailure",
    "SubsystemStat",
    "StatRecord",
    "StatsSnapshot",
    "QueueStats",
]
