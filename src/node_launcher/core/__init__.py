"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from node_launcher.core.config import load_config
from node_launcher.core.constants import (
    DEFAULT_CONTAINER_DATA_DIR,
    DEFAULT_GC_DELAY_SECONDS,
    DEFAULT_GC_INTERVAL_SECONDS,
    STOP_CONTAINER_TIMEOUT,
)
from node_launcher.core.errors import ErrorKind, RuntimeAPIError, classify
from node_launcher.core.schemas import RunnerConfig, Volume

__all__ = [
    "DEFAULT_CONTAINER_DATA_DIR",
    "DEFAULT_GC_DELAY_SECONDS",
    "DEFAULT_GC_INTERVAL_SECONDS",
    "ErrorKind",
    "RunnerConfig",
    "RuntimeAPIError",
    "STOP_CONTAINER_TIMEOUT",
    "Volume",
    "classify",
    "load_config",
]
