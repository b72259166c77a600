"""Layered configuration: .logscanner/config.toml -> LOGSCANNER_* env vars -> defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib  # 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]


@dataclass(frozen=True, slots=True)
class ListenerConfig:
    """UDP socket settings."""

    host: str = "0.0.0.0"
    port: int = 9999
    recv_buffer_bytes: int = 4 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class IngestionConfig:
    """Queue and drain settings."""

    queue_capacity: int = 10000
    batch_size: int = 100
    overflow_report_every: int = 100


@dataclass(frozen=True, slots=True)
class DisplayConfig:
    """Console view settings."""

    max_message_preview: int = 200
    auto_refresh: bool = False
    refresh_interval: float = 5.0


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Diagnostic logging settings."""

    level: str = "INFO"
    log_file: str = ""


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _layered(env_name: str, section: dict, key: str, default: object) -> object:
    return os.environ.get(env_name, section.get(key, default))


@dataclass(frozen=True, slots=True)
class ScannerConfig:
    """Top-level configuration container."""

    project_path: Path = field(default_factory=Path.cwd)
    listener: ListenerConfig = field(default_factory=ListenerConfig)
    ingestion: IngestionConfig = field(default_factory=IngestionConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_dir(self) -> Path:
        return self.project_path / ".logscanner"

    @property
    def log_path(self) -> Path | None:
        if not self.logging.log_file:
            return None
        path = Path(self.logging.log_file)
        return path if path.is_absolute() else self.project_path / path

    @classmethod
    def load(cls, project_path: Path | None = None) -> ScannerConfig:
        """Load config with layering: TOML file -> env vars -> defaults."""
        project = Path(project_path) if project_path else Path.cwd()
        toml_path = project / ".logscanner" / "config.toml"

        toml_data: dict = {}
        if toml_path.is_file():
            with open(toml_path, "rb") as f:
                toml_data = tomllib.load(f)

        listener_data = toml_data.get("listener", {})
        ingestion_data = toml_data.get("ingestion", {})
        display_data = toml_data.get("display", {})
        logging_data = toml_data.get("logging", {})

        # Use literal defaults (slots=True prevents class-level attribute access)
        _listen_defaults = ListenerConfig()
        _ingest_defaults = IngestionConfig()
        _display_defaults = DisplayConfig()
        _log_defaults = LoggingConfig()

        listener = ListenerConfig(
            host=str(_layered("LOGSCANNER_HOST", listener_data, "host", _listen_defaults.host)),
            port=int(_layered("LOGSCANNER_PORT", listener_data, "port", _listen_defaults.port)),
            recv_buffer_bytes=int(
                _layered(
                    "LOGSCANNER_RECV_BUFFER_BYTES",
                    listener_data,
                    "recv_buffer_bytes",
                    _listen_defaults.recv_buffer_bytes,
                )
            ),
        )

        ingestion = IngestionConfig(
            queue_capacity=int(
                _layered(
                    "LOGSCANNER_QUEUE_CAPACITY",
                    ingestion_data,
                    "queue_capacity",
                    _ingest_defaults.queue_capacity,
                )
            ),
            batch_size=int(
                _layered(
                    "LOGSCANNER_BATCH_SIZE",
                    ingestion_data,
                    "batch_size",
                    _ingest_defaults.batch_size,
                )
            ),
            overflow_report_every=int(
                _layered(
                    "LOGSCANNER_OVERFLOW_REPORT_EVERY",
                    ingestion_data,
                    "overflow_report_every",
                    _ingest_defaults.overflow_report_every,
                )
            ),
        )

        display = DisplayConfig(
            max_message_preview=int(
                display_data.get("max_message_preview", _display_defaults.max_message_preview)
            ),
            auto_refresh=_as_bool(
                display_data.get("auto_refresh", _display_defaults.auto_refresh)
            ),
            refresh_interval=float(
                display_data.get("refresh_interval", _display_defaults.refresh_interval)
            ),
        )

        log_cfg = LoggingConfig(
            level=str(_layered("LOGSCANNER_LOG_LEVEL", logging_data, "level", _log_defaults.level)).upper(),
            log_file=str(
                _layered("LOGSCANNER_LOG_FILE", logging_data, "log_file", _log_defaults.log_file)
            ),
        )

        config = cls(
            project_path=project,
            listener=listener,
            ingestion=ingestion,
            display=display,
            logging=log_cfg,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Reject values the pipeline cannot run with."""
        if not 0 <= self.listener.port <= 65535:
            raise ValueError(f"listener.port out of range: {self.listener.port}")
        if self.listener.recv_buffer_bytes <= 0:
            raise ValueError("listener.recv_buffer_bytes must be positive")
        if self.ingestion.queue_capacity <= 0:
            raise ValueError("ingestion.queue_capacity must be positive")
        if self.ingestion.batch_size <= 0:
            raise ValueError("ingestion.batch_size must be positive")
        if self.ingestion.overflow_report_every <= 0:
            raise ValueError("ingestion.overflow_report_every must be positive")
