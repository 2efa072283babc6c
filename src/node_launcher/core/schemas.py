"""Pydantic schemas for the node launcher.

This module defines the data contracts shared between the configuration layer,
the CLI and the container runner.
"""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, Field, field_validator

from node_launcher.core.constants import (
    DEFAULT_CONTAINER_DATA_DIR,
    DEFAULT_GC_DELAY_SECONDS,
    DEFAULT_GC_INTERVAL_SECONDS,
)


class Volume(BaseModel):
    """A host directory bind-mounted into a container.

    Attributes:
        host_path: Directory on the Docker host
        container_path: Mount point inside the container
        read_only: Mount read-only when True
    """

    host_path: str = Field(..., min_length=1)
    container_path: str = Field(..., min_length=1)
    read_only: bool = Field(default=False)

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, value: str) -> Volume:
        """Parse a ``host:container[:ro]`` volume string."""
        parts = value.split(":")
        if len(parts) == 3 and parts[2] in ("ro", "rw"):
            return cls(host_path=parts[0], container_path=parts[1], read_only=parts[2] == "ro")
        if len(parts) == 2:
            return cls(host_path=parts[0], container_path=parts[1])
        raise ValueError(f"Invalid volume '{value}'. Use host:container[:ro]")

    def to_bind(self) -> str:
        """Render the Docker bind string for this volume."""
        bind = f"{self.host_path}:{self.container_path}"
        if self.read_only:
            bind += ":ro"
        return bind


class RunnerConfig(BaseModel):
    """Process-wide configuration of the container runner.

    Set once at construction; the runner never mutates it.

    Attributes:
        image: Image reference every container is created from
        user: Fixed user to run the container process as
        volumes_from: Container to inherit volumes from (overrides explicit volumes)
        gc_delay_seconds: Minimum age before a container is considered for collection
        gc_interval_seconds: Time between two garbage collection passes
        endpoint: Docker endpoint (e.g. 'unix:///var/run/docker.sock'), env when unset
        container_data_dir: Data directory reported in volumes-from mode
    """

    image: str = Field(..., min_length=1, description="Docker image reference")
    user: str | None = Field(default=None, description="Fixed container user")
    volumes_from: str | None = Field(default=None, description="Container to take volumes from")
    gc_delay_seconds: float = Field(
        default=DEFAULT_GC_DELAY_SECONDS, ge=0, description="Minimum container age for GC"
    )
    gc_interval_seconds: float = Field(
        default=DEFAULT_GC_INTERVAL_SECONDS, gt=0, description="Interval between GC passes"
    )
    endpoint: str | None = Field(default=None, description="Docker daemon endpoint")
    container_data_dir: str = Field(default=DEFAULT_CONTAINER_DATA_DIR)

    model_config = {"frozen": True}

    @field_validator("user", "volumes_from", "endpoint")
    @classmethod
    def empty_as_none(cls, v: str | None) -> str | None:
        """Treat empty strings from config files and flags as unset."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def gc_delay(self) -> timedelta:
        return timedelta(seconds=self.gc_delay_seconds)

    @property
    def gc_interval(self) -> timedelta:
        return timedelta(seconds=self.gc_interval_seconds)
