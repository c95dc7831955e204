"""Exception hierarchy shared across netplayground."""

from __future__ import annotations


class NetPlaygroundError(Exception):
    """Base class for all library errors."""


class ConfigurationError(NetPlaygroundError, ValueError):
    """Invalid parameters or a batch whose shape does not match the model."""


class RuntimeFault(NetPlaygroundError, RuntimeError):
    """Misuse of the numeric runtime, e.g. reading a released buffer."""


class TrainingInProgressError(NetPlaygroundError, RuntimeError):
    """Raised when a second run is started while one is still active."""


class TrainingFailedError(NetPlaygroundError, RuntimeError):
    """A training run aborted; the original exception is chained as ``__cause__``."""

    def __init__(self, reason: str, *, epoch: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.epoch = epoch


def describe_error(exc: BaseException) -> str:
    """Return ``"Name: message"`` for diagnostics."""

    message = str(exc)
    name = type(exc).__name__
    return f"{name}: {message}" if message else name


__all__ = [
    "ConfigurationError",
    "NetPlaygroundError",
    "RuntimeFault",
    "TrainingFailedError",
    "TrainingInProgressError",
    "describe_error",
]
