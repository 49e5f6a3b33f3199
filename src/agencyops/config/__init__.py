"""Application configuration helpers."""

from __future__ import annotations

from .attendance import AttendanceConfig, get_attendance_config, load_timezone
from .dedup import DedupConfig, get_dedup_config
from .env import optional_env_int
from .errors import ConfigurationError
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "AttendanceConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "DedupConfig",
    "StorageConfig",
    "configure_logging",
    "get_attendance_config",
    "get_database_config",
    "get_dedup_config",
    "get_storage_config",
    "load_timezone",
    "optional_env_int",
]
