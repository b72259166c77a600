"""UDP socket ownership: receive datagrams and hand them off without doing work inline."""

from __future__ import annotations

import asyncio
import logging
import socket
from collections.abc import Callable

from logscanner.config import ListenerConfig
from logscanner.models.runtime import RawDatagram

logger = logging.getLogger("logscanner.listener")

DatagramSink = Callable[[RawDatagram], bool]
ErrorSink = Callable[[Exception], None]


class ListenerStartupError(RuntimeError):
    """The UDP socket could not be created or bound."""


class _DatagramProtocol(asyncio.DatagramProtocol):
    def __init__(self, sink: DatagramSink, on_error: ErrorSink) -> None:
        self._sink = sink
        self._on_error = on_error

    def datagram_received(self, data: bytes, addr) -> None:  # type: ignore[override]
        self._sink(RawDatagram(payload=data, sender_host=addr[0], sender_port=addr[1]))

    def error_received(self, exc: Exception) -> None:  # type: ignore[override]
        logger.error("UDP socket error: %s", exc)
        self._on_error(exc)

    def connection_lost(self, exc: Exception | None) -> None:  # type: ignore[override]
        if exc is not None:
            logger.error("UDP socket closed with error: %s", exc)
            self._on_error(exc)


def _open_socket(config: ListenerConfig) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, config.recv_buffer_bytes)
        sock.bind((config.host, config.port))
        sock.setblocking(False)
    except OSError:
        sock.close()
        raise
    return sock


class UdpListener:
    """Owns the datagram socket. Each datagram is passed to ``sink`` and forgotten."""

    def __init__(
        self,
        config: ListenerConfig,
        sink: DatagramSink,
        on_error: ErrorSink | None = None,
    ) -> None:
        self._config = config
        self._sink = sink
        self._on_error = on_error or (lambda exc: None)
        self._transport: asyncio.DatagramTransport | None = None
        self._address: tuple[str, int] | None = None

    @property
    def is_running(self) -> bool:
        return self._transport is not None

    @property
    def address(self) -> tuple[str, int] | None:
        """Bound (host, port), available once started."""
        return self._address

    async def start(self) -> None:
        """Bind the socket and start receiving. Raises ListenerStartupError."""
        if self._transport is not None:
            return

        try:
            sock = _open_socket(self._config)
        except OSError as exc:
            raise ListenerStartupError(
                f"Cannot listen on {self._config.host}:{self._config.port}: {exc}"
            ) from exc

        loop = asyncio.get_running_loop()
        try:
            transport, _ = await loop.create_datagram_endpoint(
                lambda: _DatagramProtocol(self._sink, self._on_error),
                sock=sock,
            )
        except OSError as exc:
            sock.close()
            raise ListenerStartupError(f"Cannot start UDP endpoint: {exc}") from exc

        self._transport = transport
        self._address = sock.getsockname()[:2]
        actual_rcvbuf = sock.getsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF)
        logger.info(
            "UDP listener on %s:%d (SO_RCVBUF=%d bytes)",
            self._address[0],
            self._address[1],
            actual_rcvbuf,
        )

    def stop(self) -> None:
        """Close the socket. No datagrams are delivered afterwards."""
        if self._transport is None:
            return
        self._transport.close()
        self._transport = None
        logger.info("UDP listener stopped")
