"""Tests for ScannerConfig."""

import pytest

from logscanner.config import (
    DisplayConfig,
    IngestionConfig,
    ListenerConfig,
    LoggingConfig,
    ScannerConfig,
)


class TestDefaults:
    def test_listener_defaults(self):
        c = ListenerConfig()
        assert c.host == "0.0.0.0"
        assert c.port == 9999
        assert c.recv_buffer_bytes == 4 * 1024 * 1024

    def test_ingestion_defaults(self):
        c = IngestionConfig()
        assert c.queue_capacity == 10000
        assert c.batch_size == 100
        assert c.overflow_report_every == 100

    def test_display_defaults(self):
        c = DisplayConfig()
        assert c.max_message_preview == 200
        assert c.auto_refresh is False

    def test_logging_defaults(self):
        assert LoggingConfig().level == "INFO"


class TestScannerConfig:
    def test_properties(self, tmp_path):
        config = ScannerConfig(project_path=tmp_path)
        assert config.config_dir == tmp_path / ".logscanner"
        assert config.log_path is None

    def test_relative_log_path(self, tmp_path):
        config = ScannerConfig(project_path=tmp_path, logging=LoggingConfig(log_file="logs/scan.log"))
        assert config.log_path == tmp_path / "logs" / "scan.log"

    def test_load_defaults(self, tmp_path):
        config = ScannerConfig.load(tmp_path)
        assert config.listener.port == 9999
        assert config.project_path == tmp_path

    def test_load_from_toml(self, tmp_path):
        config_dir = tmp_path / ".logscanner"
        config_dir.mkdir()
        (config_dir / "config.toml").write_text(
            '[listener]\nport = 5140\nhost = "127.0.0.1"\n'
            '[ingestion]\nbatch_size = 25\n'
            '[display]\nauto_refresh = true\nrefresh_interval = 2.5\n'
            '[logging]\nlevel = "debug"\n'
        )
        config = ScannerConfig.load(tmp_path)
        assert config.listener.port == 5140
        assert config.listener.host == "127.0.0.1"
        assert config.ingestion.batch_size == 25
        assert config.display.auto_refresh is True
        assert config.display.refresh_interval == 2.5
        assert config.logging.level == "DEBUG"

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOGSCANNER_QUEUE_CAPACITY", "50")
        config = ScannerConfig.load(tmp_path)
        assert config.ingestion.queue_capacity == 50

    def test_env_overrides_toml(self, tmp_path, monkeypatch):
        config_dir = tmp_path / ".logscanner"
        config_dir.mkdir()
        (config_dir / "config.toml").write_text("[listener]\nport = 5140\n")
        monkeypatch.setenv("LOGSCANNER_PORT", "6000")
        config = ScannerConfig.load(tmp_path)
        assert config.listener.port == 6000

    def test_invalid_batch_size(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOGSCANNER_BATCH_SIZE", "0")
        with pytest.raises(ValueError):
            ScannerConfig.load(tmp_path)

    def test_invalid_port(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOGSCANNER_PORT", "70000")
        with pytest.raises(ValueError):
            ScannerConfig.load(tmp_path)
