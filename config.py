"""
config.py
---------
Centralised configuration management for the database transfer tool.

Loads settings from environment variables (with .env file support via
python-dotenv). Provides typed settings as frozen dataclasses so
configuration is immutable at runtime.

Design Decision:
    Using a dataclass with class-level defaults means the tool works
    "out of the box" without any .env file, while still allowing
    environment-based overrides for production deployments.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

_env_path = Path.cwd() / ".env"
if _env_path.exists():
    load_dotenv(dotenv_path=_env_path)


def _optional(name: str) -> str | None:
    return os.getenv(name) or None


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection settings."""
    host: str = field(default_factory=lambda: os.getenv("DB_HOST", "localhost"))
    port: int = field(default_factory=lambda: int(os.getenv("DB_PORT", "3306")))
    user: str = field(default_factory=lambda: os.getenv("DB_USER", "root"))
    password: str = field(default_factory=lambda: os.getenv("DB_PASSWORD", ""))
    database: str | None = field(default_factory=lambda: _optional("DB_NAME"))
    charset: str = field(default_factory=lambda: os.getenv("DB_CHARSET", "utf8mb4"))
    connect_timeout: int = field(
        default_factory=lambda: int(os.getenv("DB_CONNECT_TIMEOUT", "10"))
    )
    # One attempt: the transfer engine never retries on its own.
    connect_attempts: int = field(
        default_factory=lambda: int(os.getenv("DB_CONNECT_ATTEMPTS", "1"))
    )


@dataclass(frozen=True)
class TransferConfig:
    """Export/import engine settings."""
    batch_size: int = field(
        default_factory=lambda: int(os.getenv("TRANSFER_BATCH_SIZE", "1000"))
    )
    progress_interval: int = field(
        default_factory=lambda: int(os.getenv("TRANSFER_PROGRESS_INTERVAL", "5000"))
    )
    write_buffer_size: int = field(
        default_factory=lambda: int(os.getenv("TRANSFER_WRITE_BUFFER", str(1 << 16)))
    )
    read_chunk_size: int = field(
        default_factory=lambda: int(os.getenv("TRANSFER_READ_CHUNK", str(1 << 16)))
    )
    fetch_size: int = field(
        default_factory=lambda: int(os.getenv("TRANSFER_FETCH_SIZE", "1000"))
    )
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper()
    )
    log_file: str | None = field(
        default_factory=lambda: _optional("LOG_FILE")  # None → log to stderr only
    )


@dataclass(frozen=True)
class AppConfig:
    """Root application configuration."""
    db: DatabaseConfig = field(default_factory=DatabaseConfig)
    transfer: TransferConfig = field(default_factory=TransferConfig)
    app_name: str = "dbtransfer"
    app_version: str = "1.0.0"


def load_config() -> AppConfig:
    """
    Build and return the application configuration.

    Returns:
        AppConfig: Fully populated (and frozen) configuration object.

    Example::

        cfg = load_config()
        print(cfg.db.host)                 # "localhost"
        print(cfg.transfer.batch_size)     # 1000
    """
    return AppConfig()


# Module-level singleton used throughout the application
CONFIG: AppConfig = load_config()


def get_log_level() -> int:
    """Convert string log level from config to logging module constant."""
    level = getattr(logging, CONFIG.transfer.log_level, None)
    if not isinstance(level, int):
        return logging.INFO
    return level
