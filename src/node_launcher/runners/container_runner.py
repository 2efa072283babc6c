"""Docker container runner for database nodes.

This module manages the lifecycle of node containers:
- Image pulling (before every create, so updated images are picked up)
- Container creation with port and volume wiring
- Per-container control handles (wait, terminate, kill, cleanup)
- Background garbage collection of stopped containers
- Bulk cleanup at shutdown

Every container created here is tracked in a registry until it is removed,
whichever path removes it first.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime

from node_launcher.core.constants import (
    BIND_ALL_INTERFACES,
    PORT_OFFSET_INCREMENT,
    STARTER_DEFAULT_PORT,
    STOP_CONTAINER_TIMEOUT,
    WAIT_RETRY_INITIAL_DELAY,
    WAIT_RETRY_MAX_DELAY,
)
from node_launcher.core.errors import ErrorKind, RuntimeAPIError
from node_launcher.core.schemas import RunnerConfig, Volume
from node_launcher.runners.base import Process, Runner
from node_launcher.runners.docker_client import ContainerSpec, DockerRuntime, parse_image_reference
from node_launcher.runners.gc import GarbageCollector
from node_launcher.runners.registry import ContainerRegistry, utcnow

logger = logging.getLogger(__name__)


def sanitize_container_name(name: str) -> str:
    """Docker rejects colons in container names."""
    return name.replace(":", "")


class ContainerProcess(Process):
    """Handle to one container started by a ContainerRunner."""

    def __init__(
        self,
        runtime: DockerRuntime,
        container_id: str,
        on_removed: Callable[[str], object] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._runtime = runtime
        self._container_id = container_id
        self._on_removed = on_removed
        self._sleep = sleep

    def __repr__(self) -> str:
        return f"ContainerProcess({self._container_id[:12]})"

    @property
    def process_id(self) -> int:
        # No local PID for a containerised process
        return 0

    @property
    def container_id(self) -> str:
        return self._container_id

    def wait(self) -> None:
        """Block until the container exits.

        Transient API failures (connection resets, daemon restarts) restart the
        wait after a backoff that doubles up to WAIT_RETRY_MAX_DELAY seconds.
        A container that is gone counts as exited.
        """
        delay = WAIT_RETRY_INITIAL_DELAY
        while True:
            try:
                exit_code = self._runtime.wait(self._container_id)
            except RuntimeAPIError as e:
                if e.is_transient:
                    logger.debug(
                        f"Wait on container {self._container_id} interrupted, "
                        f"retrying in {delay:.1f}s: {e}"
                    )
                    self._sleep(delay)
                    delay = min(delay * 2, WAIT_RETRY_MAX_DELAY)
                    continue
                if e.is_not_found:
                    return
                raise
            logger.debug(f"Container {self._container_id} exited with code {exit_code}")
            return

    def terminate(self) -> None:
        """Stop gracefully; Docker kills the container after STOP_CONTAINER_TIMEOUT seconds."""
        try:
            self._runtime.stop(self._container_id, timeout=STOP_CONTAINER_TIMEOUT)
        except RuntimeAPIError as e:
            if e.kind not in (ErrorKind.NOT_FOUND, ErrorKind.NOT_RUNNING):
                raise
            logger.debug(f"Container {self._container_id} already stopped: {e}")

    def kill(self) -> None:
        try:
            self._runtime.kill(self._container_id)
        except RuntimeAPIError as e:
            if e.kind not in (ErrorKind.NOT_FOUND, ErrorKind.NOT_RUNNING):
                raise
            logger.debug(f"Container {self._container_id} already stopped: {e}")

    def cleanup(self) -> None:
        """Force-remove the container (killing it if still running)."""
        try:
            self._runtime.remove(self._container_id, force=True)
        except RuntimeAPIError as e:
            if not e.is_not_found:
                raise
            logger.debug(f"Container {self._container_id} already removed")
        if self._on_removed is not None:
            self._on_removed(self._container_id)


class ContainerRunner(Runner):
    """Runs database-node processes in Docker containers.

    Example:
        ```python
        runner = ContainerRunner(RunnerConfig(image="arangodb/arangodb:3.11"))
        process = runner.start(
            "arangod",
            ["--server.endpoint=tcp://0.0.0.0:8529"],
            volumes=[Volume(host_path="/host/data", container_path="/data")],
            ports=[8529],
            name="node:1",
        )
        process.wait()
        runner.cleanup()
        ```
    """

    def __init__(
        self,
        config: RunnerConfig,
        runtime: DockerRuntime | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the container runner.

        Args:
            config: Runner configuration (image, user, volumes-from, GC timing)
            runtime: Docker adapter; connects to config.endpoint when None
            clock: Source of the current UTC time

        Raises:
            RuntimeAPIError: If the Docker daemon cannot be reached
        """
        self.config = config
        self._runtime = runtime if runtime is not None else DockerRuntime(config.endpoint)
        self._registry = ContainerRegistry(clock=clock)
        self._gc = GarbageCollector(
            self._runtime,
            self._registry,
            delay=config.gc_delay,
            interval=config.gc_interval,
            clock=clock,
        )

    @property
    def registry(self) -> ContainerRegistry:
        return self._registry

    @property
    def garbage_collector(self) -> GarbageCollector:
        return self._gc

    def get_container_dir(self, host_dir: str) -> str:
        if self.config.volumes_from:
            # Data dir is inherited from the volumes-from container, not bind-mounted
            return self.config.container_data_dir
        return host_dir

    def start(
        self,
        command: str,
        args: Sequence[str],
        volumes: Sequence[Volume],
        ports: Sequence[int],
        name: str,
    ) -> ContainerProcess:
        """Pull the image, then create and start a container.

        Raises:
            RuntimeAPIError: If pull, create or start fails. Nothing is registered
                when create fails; a container that was created but failed to
                start stays registered so it is reclaimed later.
        """
        self._gc.ensure_started()

        repository, tag = parse_image_reference(self.config.image)
        logger.debug(f"Pulling image {repository}:{tag}")
        self._runtime.pull(repository, tag)

        spec = self._build_spec(command, args, volumes, ports, name)
        logger.debug(f"Creating container {spec.name}")
        container_id = self._runtime.create(spec)
        self._registry.record(container_id)

        logger.debug(f"Starting container {spec.name}")
        self._runtime.start(container_id)
        logger.debug(f"Started container {spec.name} ({container_id[:12]})")

        return ContainerProcess(self._runtime, container_id, on_removed=self._registry.unrecord)

    def _build_spec(
        self,
        command: str,
        args: Sequence[str],
        volumes: Sequence[Volume],
        ports: Sequence[int],
        name: str,
    ) -> ContainerSpec:
        spec = ContainerSpec(
            name=sanitize_container_name(name),
            image=self.config.image,
            entrypoint=[command],
            command=list(args),
            tty=True,
            user=self.config.user,
        )
        if self.config.volumes_from:
            spec.volumes_from = [self.config.volumes_from]
        else:
            spec.binds = [v.to_bind() for v in volumes]
        for port in ports:
            spec.port_bindings[f"{port}/tcp"] = (BIND_ALL_INTERFACES, port)
        return spec

    def cleanup(self) -> None:
        """Force-remove every tracked container and forget about all of them.

        Best effort: failures are logged and the registry is cleared regardless.
        """
        for container_id in self._registry.snapshot():
            logger.info(f"Removing container {container_id}")
            try:
                self._runtime.remove(container_id, force=True)
            except RuntimeAPIError as e:
                if e.is_not_found:
                    logger.info(f"Container {container_id} was already removed")
                else:
                    logger.warning(f"Failed to remove container {container_id}: {e}")
        self._registry.clear()

    def close(self) -> None:
        """Stop the garbage collector and close the Docker connection."""
        self._gc.stop(timeout=5.0)
        self._runtime.close()

    def create_start_command(self, index: int, master_ip: str, master_port: str = "") -> str:
        return create_start_command(index, master_ip, master_port)


def create_start_command(index: int, master_ip: str, master_port: str = "") -> str:
    """Shell instructions for starting a containerised starter that joins this one.

    Args:
        index: 1-based index of the starter being added
        master_ip: Address of this (master) starter
        master_port: Port of this starter, if not the default
    """
    addr = master_ip
    host_port = STARTER_DEFAULT_PORT + PORT_OFFSET_INCREMENT * (index - 1)
    if master_port:
        addr = f"{addr}:{master_port}"
        host_port = int(master_port) + PORT_OFFSET_INCREMENT * (index - 1)
    lines = [
        f"docker volume create arangodb{index} &&",
        (
            f"docker run -it --name=adb{index} --rm -p {host_port}:{STARTER_DEFAULT_PORT} "
            f"-v arangodb{index}:/data -v /var/run/docker.sock:/var/run/docker.sock "
            "arangodb/arangodb-starter"
        ),
        f"--dockerContainer=adb{index} --ownAddress={master_ip} --join={addr}",
    ]
    return " \\\n    ".join(lines)
