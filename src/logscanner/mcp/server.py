"""FastMCP server exposing the live aggregate and search terms as tools."""

from __future__ import annotations

from logscanner.core.exporter import write_export
from logscanner.core.pipeline import IngestPipeline
from logscanner.mcp.formatters import (
    format_export,
    format_sender_ips,
    format_stats,
    format_term_change,
    format_terms,
)
from logscanner.models.enums import ExportFormat


def create_server(pipeline: IngestPipeline):
    """Create a FastMCP instance bound to a running pipeline.

    Tools run on the same event loop as the pipeline, between drain passes,
    so every read sees a consistent aggregate.
    """
    from mcp.server.fastmcp import FastMCP

    mcp = FastMCP("logscanner", instructions="Live statistics for Qlik Sense UDP log traffic")

    @mcp.tool()
    def scanner_stats() -> str:
        """Per-(source, subsystem) message counts, sender IPs, log levels and search matches."""
        return format_stats(
            pipeline.aggregator.export_snapshot(),
            pipeline.queue_stats,
            pipeline.decode_failures,
        )

    @mcp.tool()
    def scanner_sender_ips() -> str:
        """All sender IP addresses seen since the last reset."""
        return format_sender_ips(pipeline.aggregator.get_all_sender_ips())

    @mcp.tool()
    def scanner_terms() -> str:
        """Active search terms with their hit counts."""
        return format_terms(pipeline.matcher.hit_counts())

    @mcp.tool()
    def scanner_add_term(term: str) -> str:
        """Add a case-insensitive substring search term.

        Args:
            term: Text matched against message content and subsystem
        """
        return format_term_change(term, "added", pipeline.matcher.add_term(term))

    @mcp.tool()
    def scanner_remove_term(term: str) -> str:
        """Remove a search term and its hit counter.

        Args:
            term: Previously added search term
        """
        return format_term_change(term, "removed", pipeline.matcher.remove_term(term))

    @mcp.tool()
    def scanner_clear_terms() -> str:
        """Remove every search term."""
        pipeline.matcher.clear()
        return "All search terms cleared."

    @mcp.tool()
    def scanner_reset() -> str:
        """Reset all aggregate counters."""
        pipeline.aggregator.reset()
        return "All counters reset."

    @mcp.tool()
    def scanner_export(path: str | None = None, format: str = "json") -> str:
        """Write the current statistics to a file.

        Args:
            path: Output file (default: qs-log-scanner-<timestamp>.<ext> in cwd)
            format: "json" or "csv"
        """
        try:
            fmt = ExportFormat(format.lower())
        except ValueError:
            return f"Unsupported export format: {format}"

        snapshot = pipeline.aggregator.export_snapshot()
        try:
            target = write_export(snapshot, path, fmt)
        except (ValueError, OSError) as exc:
            return f"Error exporting stats: {exc}"
        return format_export(target, len(snapshot.stats))

    return mcp
