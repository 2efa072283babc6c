"""Shared constants for the node launcher.

Centralized constants to avoid duplication and ensure consistency across modules.
"""

from __future__ import annotations

# Seconds a container gets to shut down gracefully before the runtime kills it.
STOP_CONTAINER_TIMEOUT = 60

# Minimum age (seconds) before a tracked container is inspected by the collector.
DEFAULT_GC_DELAY_SECONDS = 600

# Seconds between two garbage collection passes.
DEFAULT_GC_INTERVAL_SECONDS = 60

# Data directory inside the container when volumes are inherited via volumes-from.
DEFAULT_CONTAINER_DATA_DIR = "/data"

# Host interface that published ports are bound to.
BIND_ALL_INTERFACES = "0.0.0.0"

# Port stride between starters running on the same host.
PORT_OFFSET_INCREMENT = 5

# Default port of a containerised starter.
STARTER_DEFAULT_PORT = 4000

# Backoff (seconds) between retries of an interrupted container wait.
WAIT_RETRY_INITIAL_DELAY = 0.5
WAIT_RETRY_MAX_DELAY = 10.0
