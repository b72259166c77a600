"""Rich rendering for the live console view."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from logscanner.config import DisplayConfig
from logscanner.core.netinfo import InterfaceAddress
from logscanner.models.enums import SortColumn
from logscanner.models.runtime import DecodedMessage, QueueStats, StatRecord

HELP_TEXT = """\
[bold]Commands[/bold]
  [cyan]stats[/cyan]  (s, 1)            Show statistics table
  [cyan]add[/cyan]    (a, 2) TERM       Add a search term
  [cyan]remove[/cyan] (r, 3) TERM       Remove a search term
  [cyan]list[/cyan]   (l, 4)            List search terms and hit counts
  [cyan]clear[/cyan]  (c, 5)            Remove all search terms
  [cyan]export[/cyan] (e, 6) [FILE]     Export stats as JSON
  [cyan]csv[/cyan]    [FILE]            Export stats as CSV
  [cyan]reset[/cyan]  (x, 7)            Reset all counters
  [cyan]ip[/cyan]     (i, 8)            Show local IP addresses
  [cyan]sort[/cyan]   [COLUMN]          Sort by source, subsystem, count, ip or level
  [cyan]auto[/cyan]                     Toggle auto-refresh
  [cyan]help[/cyan]   (h, 9)            Show this help
  [cyan]quit[/cyan]   (q, 10)           Stop listening and exit"""


def _first(values: Sequence[str]) -> str:
    return values[0] if values else ""


_SORT_KEYS = {
    SortColumn.SOURCE: lambda r: (r.source, r.subsystem),
    SortColumn.SUBSYSTEM: lambda r: r.subsystem,
    SortColumn.COUNT: lambda r: r.count,
    SortColumn.IP: lambda r: _first(r.sender_ips),
    SortColumn.LEVEL: lambda r: _first(r.log_levels),
}


def sort_stats(
    records: Sequence[StatRecord],
    column: SortColumn = SortColumn.SOURCE,
    ascending: bool = True,
) -> list[StatRecord]:
    """Return records ordered for display. Stable, so ties keep source order."""
    return sorted(records, key=_SORT_KEYS[column], reverse=not ascending)


def preview(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class ConsoleView:
    """Prints tables and notices for the interactive scanner."""

    def __init__(self, console: Console, config: DisplayConfig | None = None) -> None:
        self.console = console
        self._config = config or DisplayConfig()

    def show_banner(self, address: tuple[str, int] | None) -> None:
        self.console.print("[bold cyan]Qlik Sense UDP Log Scanner[/bold cyan]")
        if address:
            self.console.print(f"Listening on [bold]{address[0]}:{address[1]}[/bold]\n")

    def show_help(self) -> None:
        self.console.print(HELP_TEXT)

    def show_stats(
        self,
        records: Sequence[StatRecord],
        total_messages: int,
        unique_subsystems: int,
        active_terms: int,
        sender_ips: Sequence[str],
        queue: QueueStats | None = None,
        sort_column: SortColumn = SortColumn.SOURCE,
        ascending: bool = True,
    ) -> None:
        arrow = "▲" if ascending else "▼"
        table = Table(title=f"Subsystem Statistics (sorted by {sort_column.value} {arrow})")
        table.add_column("Source", style="bold")
        table.add_column("Subsystem")
        table.add_column("Count", justify="right")
        table.add_column("Sender IPs")
        table.add_column("Log Levels")
        table.add_column("Search Matches", style="yellow")

        for r in sort_stats(records, sort_column, ascending):
            table.add_row(
                escape(r.source),
                escape(r.subsystem),
                str(r.count),
                ", ".join(r.sender_ips) or "—",
                escape(", ".join(r.log_levels)) or "—",
                escape(", ".join(r.search_matches)) or "—",
            )

        if records:
            self.console.print(table)
        else:
            self.console.print("[dim]No messages received yet.[/dim]")

        summary = (
            f"Total messages: [bold]{total_messages}[/bold]  "
            f"Subsystems: [bold]{unique_subsystems}[/bold]  "
            f"Search terms: [bold]{active_terms}[/bold]  "
            f"Senders: {', '.join(sender_ips) or '—'}"
        )
        self.console.print(summary)
        if queue and (queue.length or queue.dropped):
            style = "red" if queue.dropped else "yellow"
            self.console.print(f"[{style}]Queue: {queue.length} | Dropped: {queue.dropped}[/{style}]")

    def show_new_subsystem(self, source: str, subsystem: str) -> None:
        self.console.print(f"[green]NEW:[/green] {escape(source)} → {escape(subsystem)}")

    def show_search_match(self, message: DecodedMessage, terms: Sequence[str]) -> None:
        body = preview(message.message_content, self._config.max_message_preview)
        detail = (
            f"[{', '.join(terms)}] {message.source}/{message.subsystem} "
            f"({message.log_level}) from {message.sender_ip}: {body}"
        )
        self.console.print(f"[yellow]MATCH[/yellow] {escape(detail)}", highlight=False)

    def show_terms(self, hit_counts: dict[str, int]) -> None:
        if not hit_counts:
            self.console.print("[yellow]No active search terms[/yellow]")
            return
        table = Table(title="Active Search Terms")
        table.add_column("#", justify="right")
        table.add_column("Term", style="bold")
        table.add_column("Matches", justify="right")
        for i, (term, count) in enumerate(hit_counts.items(), start=1):
            table.add_row(str(i), escape(term), str(count))
        self.console.print(table)

    def show_interfaces(self, addresses: Sequence[InterfaceAddress]) -> None:
        if not addresses:
            self.console.print("[yellow]No external network interfaces found[/yellow]")
            return
        table = Table(title="Local IP Addresses")
        table.add_column("Interface", style="bold")
        table.add_column("Address", style="cyan")
        table.add_column("Family")
        for a in addresses:
            table.add_row(a.interface, a.address, a.family)
        self.console.print(table)

    def show_queue_overflow(self, dropped: int) -> None:
        self.console.print(f"[red]Ingestion queue full: {dropped} datagrams dropped[/red]")

    def show_error(self, exc: Exception) -> None:
        self.console.print(f"[red]UDP socket error:[/red] {escape(str(exc))}")

    def success(self, text: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(text)}")

    def warn(self, text: str) -> None:
        self.console.print(f"[yellow]{escape(text)}[/yellow]")

    def error(self, text: str) -> None:
        self.console.print(f"[red]{escape(text)}[/red]")
