"""Line-oriented command shell that runs alongside the ingest pipeline."""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from collections.abc import Callable
from typing import TextIO

from logscanner.cli.display import ConsoleView
from logscanner.core.exporter import write_export
from logscanner.core.netinfo import local_addresses
from logscanner.core.pipeline import IngestPipeline
from logscanner.models.enums import ExportFormat, SortColumn

logger = logging.getLogger("logscanner.shell")

_SORT_CYCLE = [SortColumn.SOURCE, SortColumn.SUBSYSTEM, SortColumn.COUNT, SortColumn.IP]


class CommandShell:
    """Maps typed commands onto pipeline and display operations."""

    def __init__(
        self,
        pipeline: IngestPipeline,
        view: ConsoleView,
        auto_refresh: bool = False,
        refresh_interval: float = 5.0,
    ) -> None:
        self.pipeline = pipeline
        self.view = view
        self.auto_refresh = auto_refresh
        self.refresh_interval = refresh_interval
        self.sort_column = SortColumn.SOURCE
        self.ascending = True
        self._help_visible = False

        self._commands: dict[str, Callable[[str], bool | None]] = {}
        for names, handler in (
            (("1", "s", "stats"), self._cmd_stats),
            (("2", "a", "add"), self._cmd_add),
            (("3", "r", "remove"), self._cmd_remove),
            (("4", "l", "list"), self._cmd_list),
            (("5", "c", "clear"), self._cmd_clear),
            (("6", "e", "export"), self._cmd_export),
            (("csv",), self._cmd_csv),
            (("7", "x", "reset"), self._cmd_reset),
            (("8", "i", "ip"), self._cmd_ip),
            (("sort",), self._cmd_sort),
            (("auto",), self._cmd_auto),
            (("9", "h", "help"), self._cmd_help),
            (("10", "q", "quit", "exit"), self._cmd_quit),
        ):
            for name in names:
                self._commands[name] = handler

    def handle(self, line: str) -> bool:
        """Run one command line. Returns False when the shell should exit."""
        line = line.strip()
        if not line:
            return True

        command, _, arg = line.partition(" ")
        handler = self._commands.get(command.lower())
        self._help_visible = False
        if handler is None:
            self.view.error(f"Unknown command: {command}")
            self.view.warn('Type "h" or "help" for available commands')
            return True
        return handler(arg.strip()) is not False

    # --- Commands ---

    def show_stats(self) -> None:
        agg = self.pipeline.aggregator
        snapshot = agg.export_snapshot()
        self.view.show_stats(
            snapshot.stats,
            snapshot.total_messages,
            snapshot.unique_subsystems,
            len(self.pipeline.matcher),
            agg.get_all_sender_ips(),
            queue=self.pipeline.queue_stats,
            sort_column=self.sort_column,
            ascending=self.ascending,
        )

    def _cmd_stats(self, arg: str) -> None:
        self.show_stats()

    def _cmd_add(self, term: str) -> None:
        if not term:
            self.view.error("Error: Please provide a search term")
        elif self.pipeline.matcher.add_term(term):
            self.view.success(f'Added search term: "{term}"')
        else:
            self.view.warn(f'Search term already exists: "{term}"')

    def _cmd_remove(self, term: str) -> None:
        if not term:
            self.view.error("Error: Please provide a search term")
        elif self.pipeline.matcher.remove_term(term):
            self.view.success(f'Removed search term: "{term}"')
        else:
            self.view.warn(f'Search term not found: "{term}"')

    def _cmd_list(self, arg: str) -> None:
        self.view.show_terms(self.pipeline.matcher.hit_counts())

    def _cmd_clear(self, arg: str) -> None:
        self.pipeline.matcher.clear()
        self.view.success("All search terms cleared")

    def _export(self, path: str, fmt: ExportFormat) -> None:
        snapshot = self.pipeline.aggregator.export_snapshot()
        try:
            target = write_export(snapshot, path or None, fmt)
        except ValueError as exc:
            self.view.warn(str(exc))
            return
        except OSError as exc:
            logger.error("Export error: %s", exc)
            self.view.error(f"Error exporting data: {exc}")
            return
        self.view.success(f"Data exported to: {target}")

    def _cmd_export(self, path: str) -> None:
        self._export(path, ExportFormat.JSON)

    def _cmd_csv(self, path: str) -> None:
        self._export(path, ExportFormat.CSV)

    def _cmd_reset(self, arg: str) -> None:
        self.pipeline.aggregator.reset()
        self.view.success("All counters reset")

    def _cmd_ip(self, arg: str) -> None:
        self.view.show_interfaces(local_addresses())

    def _cmd_sort(self, arg: str) -> None:
        if arg:
            try:
                column = SortColumn(arg.lower())
            except ValueError:
                choices = ", ".join(c.value for c in SortColumn)
                self.view.error(f"Invalid sort column: {arg} (choose from {choices})")
                return
        else:
            idx = _SORT_CYCLE.index(self.sort_column) if self.sort_column in _SORT_CYCLE else -1
            column = _SORT_CYCLE[(idx + 1) % len(_SORT_CYCLE)]

        if column == self.sort_column:
            self.ascending = not self.ascending
        else:
            self.sort_column = column
            self.ascending = True
        direction = "ascending" if self.ascending else "descending"
        self.view.success(f"Sorting by {column.value} ({direction})")
        self.show_stats()

    def _cmd_auto(self, arg: str) -> None:
        self.auto_refresh = not self.auto_refresh
        self.view.success(f"Auto-refresh {'enabled' if self.auto_refresh else 'disabled'}")

    def _cmd_help(self, arg: str) -> None:
        self._help_visible = True
        self.view.show_help()

    def _cmd_quit(self, arg: str) -> bool:
        return False

    # --- Event loop integration ---

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval)
            if self.auto_refresh and not self._help_visible:
                self.show_stats()

    async def run(self, stream: TextIO | None = None) -> None:
        """Read commands until quit or end of input.

        Lines are read on a daemon thread so a blocking ``readline`` never
        holds up the event loop or interpreter shutdown.
        """
        loop = asyncio.get_running_loop()
        lines: asyncio.Queue[str | None] = asyncio.Queue()
        source = stream or sys.stdin

        def _push(item: str | None) -> bool:
            try:
                loop.call_soon_threadsafe(lines.put_nowait, item)
            except RuntimeError:
                return False
            return True

        def _reader() -> None:
            for raw in source:
                if not _push(raw):
                    return
            _push(None)

        threading.Thread(target=_reader, name="logscanner-input", daemon=True).start()
        refresher = asyncio.create_task(self._refresh_loop())

        self.view.show_help()
        try:
            while True:
                line = await lines.get()
                if line is None or not self.handle(line):
                    break
        finally:
            refresher.cancel()
