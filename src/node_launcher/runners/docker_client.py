"""Thin adapter over the Docker Engine API.

Translates the runner's vocabulary (entrypoint, binds, port bindings) into
Docker SDK calls and turns every SDK or transport failure into a tagged
RuntimeAPIError. Holds no state besides the SDK client.
"""

from __future__ import annotations

import contextlib
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import docker
import requests
from docker.errors import DockerException
from docker.utils import parse_repository_tag

from node_launcher.core.errors import ErrorKind, RuntimeAPIError

if TYPE_CHECKING:
    from docker.models.containers import Container

logger = logging.getLogger(__name__)

_FRACTION_RE = re.compile(r"\.(\d+)")


@dataclass
class ContainerSpec:
    """Everything needed to create one container."""

    name: str
    image: str
    entrypoint: list[str]
    command: list[str] = field(default_factory=list)
    tty: bool = True
    user: str | None = None
    # "8529/tcp" -> ("0.0.0.0", 8529); keys double as exposed ports
    port_bindings: dict[str, tuple[str, int]] = field(default_factory=dict)
    binds: list[str] = field(default_factory=list)
    volumes_from: list[str] = field(default_factory=list)

    @property
    def exposed_ports(self) -> list[str]:
        return list(self.port_bindings)


@dataclass
class ContainerState:
    """Runtime state of a container as reported by inspect."""

    container_id: str
    status: str  # created, running, paused, restarting, removing, exited, dead
    created_at: datetime | None
    finished_at: datetime | None
    exit_code: int | None = None


def parse_image_reference(reference: str) -> tuple[str, str]:
    """Split an image reference into repository and tag (default 'latest')."""
    repository, tag = parse_repository_tag(reference)
    return repository, tag or "latest"


def parse_docker_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp from the Docker API into an aware datetime.

    Docker reports nanosecond precision; fractions are cut to microseconds.
    The zero time ('0001-01-01T00:00:00Z') parses to year 1.
    """
    if not value:
        return None
    text = value.strip().replace("Z", "+00:00")
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Unparseable Docker timestamp: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@contextlib.contextmanager
def _translate_errors(operation: str, target: str) -> Iterator[None]:
    try:
        yield
    except (DockerException, requests.exceptions.RequestException) as e:
        raise RuntimeAPIError.from_exception(e, operation=operation, target=target) from e


class DockerRuntime:
    """Docker Engine API adapter used by the container runner.

    Example:
        ```python
        runtime = DockerRuntime("unix:///var/run/docker.sock")
        runtime.pull("arangodb/arangodb", "3.11")
        container_id = runtime.create(spec)
        runtime.start(container_id)
        ```
    """

    def __init__(self, endpoint: str | None = None, client: docker.DockerClient | None = None) -> None:
        """Connect to the Docker daemon.

        Args:
            endpoint: Docker endpoint, environment settings (DOCKER_HOST) when None
            client: Pre-built SDK client, mainly for tests

        Raises:
            RuntimeAPIError: (kind FATAL) if the daemon cannot be reached
        """
        if client is None:
            try:
                client = docker.DockerClient(base_url=endpoint) if endpoint else docker.from_env()
                client.ping()
            except (DockerException, requests.exceptions.RequestException) as e:
                raise RuntimeAPIError(
                    f"Cannot connect to Docker at {endpoint or 'environment endpoint'}: {e}",
                    ErrorKind.FATAL,
                    operation="connect",
                    target=endpoint,
                ) from e
        self._client = client

    def pull(self, repository: str, tag: str) -> None:
        with _translate_errors("pull", f"{repository}:{tag}"):
            self._client.images.pull(repository, tag=tag)

    def create(self, spec: ContainerSpec) -> str:
        """Create (but do not start) a container and return its ID."""
        kwargs: dict[str, Any] = {
            "name": spec.name,
            "entrypoint": spec.entrypoint,
            "command": spec.command,
            "tty": spec.tty,
            "ports": dict(spec.port_bindings),
            "publish_all_ports": True,
            "auto_remove": False,
        }
        if spec.user:
            kwargs["user"] = spec.user
        if spec.volumes_from:
            kwargs["volumes_from"] = list(spec.volumes_from)
        elif spec.binds:
            kwargs["volumes"] = list(spec.binds)

        with _translate_errors("create", spec.name):
            container: Container = self._client.containers.create(spec.image, **kwargs)
        return container.id

    def start(self, container_id: str) -> None:
        with _translate_errors("start", container_id):
            self._client.api.start(container_id)

    def inspect(self, container_id: str) -> ContainerState:
        """Return the current state of a container.

        Raises:
            RuntimeAPIError: kind NOT_FOUND when the container no longer exists
        """
        with _translate_errors("inspect", container_id):
            attrs = self._client.api.inspect_container(container_id)

        state = attrs.get("State") or {}
        return ContainerState(
            container_id=attrs.get("Id", container_id),
            status=str(state.get("Status", "")).lower(),
            created_at=parse_docker_timestamp(attrs.get("Created")),
            finished_at=parse_docker_timestamp(state.get("FinishedAt")),
            exit_code=state.get("ExitCode"),
        )

    def stop(self, container_id: str, timeout: int) -> None:
        """Stop a container, letting the daemon kill it after `timeout` seconds."""
        with _translate_errors("stop", container_id):
            self._client.api.stop(container_id, timeout=timeout)

    def kill(self, container_id: str) -> None:
        with _translate_errors("kill", container_id):
            self._client.api.kill(container_id)

    def remove(self, container_id: str, force: bool = False) -> None:
        with _translate_errors("remove", container_id):
            self._client.api.remove_container(container_id, force=force)

    def wait(self, container_id: str) -> int | None:
        """Block until the container exits and return its exit code.

        The SDK sends this request without a read timeout, so it blocks for as
        long as the container runs. Dropped connections surface as TRANSIENT.
        """
        with _translate_errors("wait", container_id):
            result = self._client.api.wait(container_id)
        if isinstance(result, dict):
            return result.get("StatusCode")
        return None

    def close(self) -> None:
        with contextlib.suppress(Exception):
            self._client.close()
