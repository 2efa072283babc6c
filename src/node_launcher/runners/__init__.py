"""Runners module - process execution backends."""

from __future__ import annotations

from node_launcher.runners.base import Process, Runner
from node_launcher.runners.container_runner import ContainerProcess, ContainerRunner
from node_launcher.runners.docker_client import ContainerSpec, ContainerState, DockerRuntime
from node_launcher.runners.gc import GarbageCollector
from node_launcher.runners.registry import ContainerRegistry

__all__ = [
    "ContainerProcess",
    "ContainerRegistry",
    "ContainerRunner",
    "ContainerSpec",
    "ContainerState",
    "DockerRuntime",
    "GarbageCollector",
    "Process",
    "Runner",
]
