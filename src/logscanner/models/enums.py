"""Enumerations for logscanner models."""

from enum import Enum


class SchedulerState(str, Enum):
    """Drain scheduler state."""

    IDLE = "idle"
    DRAINING = "draining"


class SortColumn(str, Enum):
    """Columns the stats table can be sorted by."""

    SOURCE = "source"
    SUBSYSTEM = "subsystem"
    COUNT = "count"
    IP = "ip"
    LEVEL = "level"


class ExportFormat(str, Enum):
    """Supported stats export formats."""

    JSON = "json"
    CSV = "csv"
