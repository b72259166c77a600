"""Markdown formatters for LLM-friendly output."""

from __future__ import annotations

from pathlib import Path

from logscanner.models.runtime import QueueStats, StatsSnapshot


def _cell(value: str) -> str:
    return value.replace("|", "\\|") if value else "—"


def format_stats(
    snapshot: StatsSnapshot,
    queue: QueueStats | None = None,
    decode_failures: int = 0,
) -> str:
    """Format an aggregate snapshot as a markdown table with a summary header."""
    lines = [
        "## Subsystem Statistics",
        f"**Time:** {snapshot.timestamp.isoformat()}  ",
        f"**Total messages:** {snapshot.total_messages}  ",
        f"**Unique subsystems:** {snapshot.unique_subsystems}  ",
    ]
    if queue is not None:
        lines.append(
            f"**Queue:** {queue.length}/{queue.capacity} (dropped {queue.dropped})  "
        )
    if decode_failures:
        lines.append(f"**Decode failures:** {decode_failures}  ")
    lines.append("")

    if not snapshot.stats:
        lines.append("*No messages received yet.*")
        return "\n".join(lines)

    lines.extend([
        "| Source | Subsystem | Count | Sender IPs | Log Levels | Search Matches |",
        "|--------|-----------|-------|------------|------------|----------------|",
    ])
    for s in snapshot.stats:
        lines.append(
            f"| {_cell(s.source)} | {_cell(s.subsystem)} | {s.count} "
            f"| {_cell(', '.join(s.sender_ips))} | {_cell(', '.join(s.log_levels))} "
            f"| {_cell(', '.join(s.search_matches))} |"
        )
    return "\n".join(lines)


def format_terms(hit_counts: dict[str, int]) -> str:
    if not hit_counts:
        return "No active search terms."
    lines = [
        "## Search Terms",
        "",
        "| Term | Matches |",
        "|------|---------|",
    ]
    for term, count in hit_counts.items():
        lines.append(f"| {_cell(term)} | {count} |")
    return "\n".join(lines)


def format_sender_ips(ips: list[str]) -> str:
    if not ips:
        return "No senders seen yet."
    return "## Sender IPs\n\n" + "\n".join(f"- {ip}" for ip in ips)


def format_term_change(term: str, action: str, changed: bool) -> str:
    if changed:
        return f"Search term `{term}` {action}."
    if action == "added":
        return f"Search term `{term}` is blank or already registered."
    return f"Search term `{term}` was not registered."


def format_export(path: Path, record_count: int) -> str:
    return f"Exported {record_count} stat records to `{path}`."
