"""Tagged errors raised by the Docker runtime adapter.

Every failure coming out of the Docker SDK is classified exactly once, where it
is raised, so callers can branch on ``error.kind`` instead of digging through
exception chains.
"""

from __future__ import annotations

from enum import Enum

import requests
from docker.errors import APIError, DockerException, NotFound


class ErrorKind(str, Enum):
    """Classification of a container runtime failure."""

    NOT_FOUND = "not_found"  # Container (or image) does not exist
    NOT_RUNNING = "not_running"  # Container exists but is already stopped
    TRANSIENT = "transient"  # Network blip, timeout or daemon-side 5xx
    FATAL = "fatal"  # Anything else


class RuntimeAPIError(Exception):
    """A container runtime call failed.

    Attributes:
        kind: Classification of the failure
        operation: Adapter operation that failed (e.g. 'inspect')
        target: Container identifier or image reference the call was about
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.FATAL,
        operation: str | None = None,
        target: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.operation = operation
        self.target = target

    @property
    def is_not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND

    @property
    def is_transient(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT

    @classmethod
    def from_exception(
        cls, exc: BaseException, operation: str | None = None, target: str | None = None
    ) -> RuntimeAPIError:
        """Wrap an SDK or transport exception, preserving its classification."""
        if isinstance(exc, cls):
            return exc
        prefix = f"{operation} {target}: " if operation and target else ""
        return cls(f"{prefix}{exc}", classify(exc), operation=operation, target=target)


def classify(exc: BaseException) -> ErrorKind:
    """Classify an exception raised by the Docker SDK or its HTTP transport.

    Walks the ``__cause__`` chain so errors re-raised with ``raise ... from``
    keep their original classification.
    """
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, RuntimeAPIError):
            return current.kind
        if isinstance(current, NotFound):
            return ErrorKind.NOT_FOUND
        if isinstance(current, APIError):
            if current.status_code == 409 and "is not running" in str(current.explanation or ""):
                return ErrorKind.NOT_RUNNING
            if current.is_server_error():
                return ErrorKind.TRANSIENT
            return ErrorKind.FATAL
        if isinstance(current, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
            return ErrorKind.TRANSIENT
        if isinstance(current, DockerException):
            return ErrorKind.FATAL
        current = current.__cause__
    return ErrorKind.FATAL
