"""Typer CLI for the UDP log scanner."""

from __future__ import annotations

import asyncio
import socket
from dataclasses import replace
from datetime import datetime, timezone
from typing import Annotated, Optional

import typer
from rich.console import Console

from logscanner.config import ListenerConfig, ScannerConfig
from logscanner.core.listener import ListenerStartupError
from logscanner.logging_setup import setup_logging

app = typer.Typer(
    name="logscanner",
    help="Live scanner for Qlik Sense Log4Net UDP traffic — counts, senders, search matches.",
    no_args_is_help=True,
)
console = Console(stderr=True)


def _config() -> ScannerConfig:
    try:
        return ScannerConfig.load()
    except ValueError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(1)


def _listener_config(config: ScannerConfig, host: str | None, port: int | None) -> ListenerConfig:
    listener = config.listener
    if host is not None:
        listener = replace(listener, host=host)
    if port is not None:
        listener = replace(listener, port=port)
    return listener


def _sample_datagram(seq: int) -> str:
    now = datetime.now(timezone.utc)
    return ";".join([
        "/qseow-proxy/",
        str(seq),
        now.strftime("%Y%m%dT%H%M%S.%f")[:-3] + "+0000",
        now.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
        "INFO",
        socket.gethostname(),
        "Proxy.Session",
        "INTERNAL\\sa_scheduler",
        f"Test message {seq}; sent by logscanner",
    ])


@app.command()
def listen(
    host: Annotated[Optional[str], typer.Option("--host", help="Address to bind")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="UDP port")] = None,
    term: Annotated[Optional[list[str]], typer.Option("--term", "-t", help="Initial search terms")] = None,
    auto_refresh: Annotated[
        Optional[bool], typer.Option("--auto-refresh/--no-auto-refresh", help="Redraw stats periodically")
    ] = None,
) -> None:
    """Listen for log datagrams and inspect them interactively."""
    from logscanner.cli.display import ConsoleView
    from logscanner.cli.shell import CommandShell
    from logscanner.core.pipeline import IngestPipeline

    config = _config()
    setup_logging(config.logging.level, config.log_path)
    listener = _listener_config(config, host, port)

    async def _run() -> None:
        pipeline = IngestPipeline(listener, config.ingestion)
        for t in term or []:
            pipeline.matcher.add_term(t)

        view = ConsoleView(Console(), config.display)
        pipeline.subscribe_new_subsystem(view.show_new_subsystem)
        pipeline.subscribe_search_match(view.show_search_match)
        pipeline.subscribe_queue_overflow(view.show_queue_overflow)
        pipeline.subscribe_error(view.show_error)

        await pipeline.start()
        view.show_banner(pipeline.address)
        shell = CommandShell(
            pipeline,
            view,
            auto_refresh=config.display.auto_refresh if auto_refresh is None else auto_refresh,
            refresh_interval=config.display.refresh_interval,
        )
        try:
            await shell.run()
        finally:
            pipeline.stop()

    try:
        asyncio.run(_run())
    except ListenerStartupError as exc:
        console.print(f"[red]Failed to start UDP listener:[/red] {exc}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


@app.command()
def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Address to bind")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="UDP port")] = None,
) -> None:
    """Listen for log datagrams and expose the stats as MCP tools over stdio."""
    try:
        from mcp.server.fastmcp import FastMCP  # noqa: F401
    except ImportError as exc:
        console.print(f"[red]MCP support requires the mcp extra (mcp>=1.0,<2):[/red] {exc}")
        raise typer.Exit(1)

    from logscanner.core.pipeline import IngestPipeline
    from logscanner.mcp.server import create_server

    config = _config()
    setup_logging(config.logging.level, config.log_path)
    listener = _listener_config(config, host, port)

    async def _run() -> None:
        pipeline = IngestPipeline(listener, config.ingestion)
        await pipeline.start()
        try:
            await create_server(pipeline).run_stdio_async()
        finally:
            pipeline.stop()

    try:
        asyncio.run(_run())
    except ListenerStartupError as exc:
        console.print(f"[red]Failed to start UDP listener:[/red] {exc}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        pass


@app.command()
def decode(
    datagram: Annotated[str, typer.Argument(help="Raw datagram text")],
    sender: Annotated[str, typer.Option("--sender", help="Sender IP to attribute")] = "127.0.0.1",
) -> None:
    """Decode one datagram and show its fields."""
    from rich.markup import escape
    from rich.table import Table

    from logscanner.core.decoder import decode as decode_payload
    from logscanner.models.runtime import DecodeFailure

    result = decode_payload(datagram.encode("utf-8"), (sender, 0))
    if isinstance(result, DecodeFailure):
        console.print(f"[red]Cannot decode:[/red] {escape(result.reason)}")
        raise typer.Exit(1)

    table = Table(title="Decoded Message")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for name, value in (
        ("source", result.source),
        ("log_row_number", result.log_row_number),
        ("iso_timestamp", result.iso_timestamp),
        ("local_timestamp", result.local_timestamp),
        ("log_level", result.log_level),
        ("host", result.host),
        ("subsystem", result.subsystem),
        ("windows_user", result.windows_user),
        ("message_content", result.message_content),
        ("sender_ip", result.sender_ip),
    ):
        table.add_row(name, escape(value) or "—")
    console.print(table)


@app.command()
def send(
    message: Annotated[Optional[str], typer.Argument(help="Datagram text (default: generated sample)")] = None,
    host: Annotated[str, typer.Option("--host", help="Target host")] = "127.0.0.1",
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Target UDP port")] = None,
    count: Annotated[int, typer.Option("--count", "-n", help="Datagrams to send")] = 1,
) -> None:
    """Send test datagrams to a listening scanner."""
    config = _config()
    target_port = port if port is not None else config.listener.port

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        for seq in range(1, count + 1):
            text = message if message is not None else _sample_datagram(seq)
            sock.sendto(text.encode("utf-8"), (host, target_port))
    except OSError as exc:
        console.print(f"[red]Send failed:[/red] {exc}")
        raise typer.Exit(1)
    finally:
        sock.close()

    console.print(f"[green]Sent {count} datagram(s) to {host}:{target_port}[/green]")


@app.command()
def ips() -> None:
    """List local IP addresses senders can target."""
    from logscanner.cli.display import ConsoleView
    from logscanner.core.netinfo import local_addresses

    ConsoleView(console).show_interfaces(local_addresses())


def main() -> None:
    """Entry point for the logscanner CLI."""
    app()


if __name__ == "__main__":
    main()
