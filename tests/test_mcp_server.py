"""Tests for the MCP server factory."""

import asyncio
import json

import pytest
from conftest import SAMPLE, make_datagram

from logscanner.config import IngestionConfig, ListenerConfig
from logscanner.core.pipeline import IngestPipeline

pytest.importorskip("mcp")


def _call(server, name, **kwargs):
    result = asyncio.run(server.call_tool(name, kwargs))
    # FastMCP returns either a content list or (content, structured) depending on version
    content = result[0] if isinstance(result, tuple) else result
    return "\n".join(getattr(block, "text", "") for block in content)


@pytest.fixture
def pipeline(manual_loop):
    return IngestPipeline(
        ListenerConfig(host="127.0.0.1", port=0),
        IngestionConfig(),
        call_soon=manual_loop.call_soon,
    )


class TestTools:
    def test_registered(self, pipeline):
        from logscanner.mcp.server import create_server

        server = create_server(pipeline)
        names = {t.name for t in asyncio.run(server.list_tools())}
        assert {"scanner_stats", "scanner_add_term", "scanner_export", "scanner_reset"} <= names

    def test_terms_and_stats(self, pipeline):
        from logscanner.mcp.server import create_server

        server = create_server(pipeline)
        assert "added" in _call(server, "scanner_add_term", term="World")
        pipeline.route(make_datagram(SAMPLE))
        out = _call(server, "scanner_stats")
        assert "Persistence" in out
        assert "world" in out
        assert "| world | 1 |" in _call(server, "scanner_terms")

    def test_reset(self, pipeline):
        from logscanner.mcp.server import create_server

        server = create_server(pipeline)
        pipeline.route(make_datagram(SAMPLE))
        _call(server, "scanner_reset")
        assert pipeline.aggregator.get_total_messages() == 0

    def test_export(self, pipeline, tmp_path):
        from logscanner.mcp.server import create_server

        server = create_server(pipeline)
        pipeline.route(make_datagram(SAMPLE))
        target = tmp_path / "out.json"
        out = _call(server, "scanner_export", path=str(target), format="json")
        assert "Exported 1" in out
        assert json.loads(target.read_text())["totalMessages"] == 1

    def test_export_bad_format(self, pipeline):
        from logscanner.mcp.server import create_server

        server = create_server(pipeline)
        assert "Unsupported" in _call(server, "scanner_export", format="xml")
