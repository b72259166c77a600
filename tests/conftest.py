"""Shared fixtures for logscanner tests."""

import pytest

from logscanner.models.runtime import DecodedMessage, RawDatagram

SAMPLE = (
    "app;42;2024-01-01T00:00:00Z;2024-01-01 00:00:00;INFO;host1;"
    "Persistence;DOMAIN\\user;Hello;World"
)


class ManualLoop:
    """Stands in for loop.call_soon so drain passes run only when a test says so."""

    def __init__(self):
        self.pending = []

    def call_soon(self, callback):
        self.pending.append(callback)

    def run_once(self):
        callbacks, self.pending = self.pending, []
        for cb in callbacks:
            cb()
        return len(callbacks)

    def run_all(self):
        rounds = 0
        while self.pending:
            self.run_once()
            rounds += 1
        return rounds


@pytest.fixture
def manual_loop():
    return ManualLoop()


def make_datagram(text, host="10.0.0.1", port=5000):
    return RawDatagram(payload=text.encode("utf-8"), sender_host=host, sender_port=port)


def make_message(source="app", subsystem="Persistence", level="INFO", ip="10.0.0.1", content="hello"):
    return DecodedMessage(
        source=source,
        subsystem=subsystem,
        log_level=level,
        sender_ip=ip,
        sender_port=5000,
        message_content=content,
    )
