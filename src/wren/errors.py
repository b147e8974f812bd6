"""Wren exception hierarchy and failure constructors.

Handlers report failure by returning (or raising) an exception. A failure
that exposes an integer ``status`` is a *status failure* and maps to that
HTTP status verbatim; anything else is a *plain failure* and maps to 500.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when routes or middleware are registered incorrectly.

    Always raised at setup time, never while serving.
    """


@runtime_checkable
class HasStatus(Protocol):
    """Capability of a failure that carries its own HTTP status."""

    @property
    def status(self) -> int: ...


@dataclass(frozen=True, slots=True)
class StatusError(WrenError):
    """A failure carrying a human-readable message and an HTTP status.

    ``str()`` is exactly the message, so the boundary adaptor can use it
    as the response body unchanged.
    """

    message: str
    status: int = 500
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        return self.message


class NotFound(StatusError):  # noqa: N818
    """404: nothing to serve at this path."""

    def __init__(self, message: str = "Not Found") -> None:
        super().__init__(message=message, status=404)


class MethodNotAllowed(StatusError):  # noqa: N818
    """405: the path exists but not for this method.

    Carries an ``Allow`` header listing the accepted methods.
    """

    def __init__(self, allowed: frozenset[str], message: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        super().__init__(
            message=message or f"Method not allowed. Allowed methods: {allow_value}",
            status=405,
            headers=(("Allow", allow_value),),
        )


def error(status: int, message: str) -> StatusError:
    """Return a failure that carries an HTTP status code."""
    return StatusError(message=message, status=status)


def errorf(status: int, format: str, *args: object) -> StatusError:
    """Return a status failure with a printf-style formatted message.

    ``errorf(400, "bad %s", "input")`` has the message ``"bad input"``.
    """
    return error(status, format % args if args else format)


def status_of(failure: BaseException) -> int | None:
    """Return the HTTP status a failure carries, or ``None`` for plain failures."""
    if isinstance(failure, HasStatus):
        status = failure.status
        if isinstance(status, int) and not isinstance(status, bool):
            return status
    return None
