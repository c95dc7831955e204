"""Metrics/status channel between the training driver and its observers."""

from __future__ import annotations

from typing import List, Protocol

from ..core.types import EpochMetrics, TerminalEvent


class TrainingObserver(Protocol):
    """Anything with these hooks can subscribe to a :class:`MetricsChannel`."""

    def on_epoch(self, epoch: int, metrics: EpochMetrics) -> None:
        """Called once per completed epoch with the global epoch index."""

    def on_terminal(self, event: TerminalEvent) -> None:
        """Called exactly once at the end of a run."""


class MetricsChannel:
    """Fan out epoch and terminal events, enforcing their ordering.

    Within one run epoch indices must strictly increase and the terminal
    event is delivered exactly once, after the last epoch event.
    """

    def __init__(self) -> None:
        self._observers: List[object] = []
        self._last_epoch = -1
        self._closed = True

    def subscribe(self, observer: object) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: object) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def run_open(self) -> bool:
        return not self._closed

    def begin_run(self) -> None:
        self._last_epoch = -1
        self._closed = False

    def emit_epoch(self, epoch: int, metrics: EpochMetrics) -> None:
        if self._closed:
            raise RuntimeError("emit_epoch called outside an open run")
        if epoch <= self._last_epoch:
            raise RuntimeError(
                f"Epoch {epoch} emitted after epoch {self._last_epoch}; indices must increase"
            )
        self._last_epoch = epoch
        for observer in list(self._observers):
            if hasattr(observer, "on_epoch"):
                observer.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(observer):
                observer(epoch, metrics)

    def emit_terminal(self, event: TerminalEvent) -> None:
        if self._closed:
            raise RuntimeError("Terminal event already delivered for this run")
        self._closed = True
        for observer in list(self._observers):
            hook = getattr(observer, "on_terminal", None)
            if hook is not None:
                hook(event)


__all__ = ["MetricsChannel", "TrainingObserver"]
