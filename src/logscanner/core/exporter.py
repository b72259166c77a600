"""JSON and CSV rendering of stats snapshots."""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from logscanner.models.enums import ExportFormat
from logscanner.models.runtime import StatRecord, StatsSnapshot

logger = logging.getLogger("logscanner.exporter")

CSV_HEADER = ("Source", "Subsystem", "Count", "Sender IPs", "Log Levels", "Search Matches")
MULTI_VALUE_SEPARATOR = "; "


def to_json(snapshot: StatsSnapshot) -> str:
    return json.dumps(snapshot.to_dict(), indent=2)


def to_csv(records: list[StatRecord] | tuple[StatRecord, ...]) -> str:
    """One row per stat. Fields are quoted only when they need it."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in records:
        writer.writerow([
            r.source,
            r.subsystem,
            r.count,
            MULTI_VALUE_SEPARATOR.join(r.sender_ips),
            MULTI_VALUE_SEPARATOR.join(r.log_levels),
            MULTI_VALUE_SEPARATOR.join(r.search_matches),
        ])
    return buf.getvalue()


def default_export_path(fmt: ExportFormat, now: datetime | None = None) -> Path:
    """``qs-log-scanner-<epoch ms>.<ext>`` in the working directory."""
    moment = now or datetime.now(timezone.utc)
    stamp = int(moment.timestamp() * 1000)
    return Path(f"qs-log-scanner-{stamp}.{fmt.value}").resolve()


def write_export(
    snapshot: StatsSnapshot,
    path: Path | str | None = None,
    fmt: ExportFormat = ExportFormat.JSON,
) -> Path:
    """Write a snapshot to disk and return the resolved path."""
    target = Path(path).resolve() if path else default_export_path(fmt, snapshot.timestamp)

    if fmt == ExportFormat.CSV:
        if not snapshot.stats:
            raise ValueError("No data to export")
        content = to_csv(snapshot.stats)
    else:
        content = to_json(snapshot)

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    logger.info("Exported %d stats to %s", len(snapshot.stats), target)
    return target
