"""Shared fixtures for node launcher tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from node_launcher.core.errors import ErrorKind, RuntimeAPIError
from node_launcher.core.schemas import RunnerConfig
from node_launcher.runners.container_runner import ContainerRunner
from node_launcher.runners.docker_client import ContainerState, DockerRuntime

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def api_error(kind: ErrorKind, operation: str = "test") -> RuntimeAPIError:
    return RuntimeAPIError(f"{operation} failed ({kind.value})", kind, operation=operation)


def container_state(
    status: str,
    created_at: datetime | None = T0,
    finished_at: datetime | None = None,
    container_id: str = "c1",
) -> ContainerState:
    return ContainerState(
        container_id=container_id,
        status=status,
        created_at=created_at,
        finished_at=finished_at,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def runtime() -> MagicMock:
    mock = MagicMock(spec=DockerRuntime)
    mock.create.return_value = "c1"
    return mock


@pytest.fixture
def config() -> RunnerConfig:
    return RunnerConfig(image="arangodb/arangodb:3.11", gc_delay_seconds=600)


@pytest.fixture
def runner(config, runtime, clock):
    """Runner whose background collector thread exits immediately.

    Collection passes are driven explicitly from the tests.
    """
    runner = ContainerRunner(config, runtime=runtime, clock=clock)
    runner.garbage_collector.stop()
    yield runner
    runner.close()
