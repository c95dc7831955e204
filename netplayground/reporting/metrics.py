"""Metrics sinks that subscribe to a :class:`MetricsChannel`."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Mapping

from ..core.types import EpochMetrics, TerminalEvent
from .artifacts import git_sha


def _as_mapping(metrics: EpochMetrics | Mapping[str, float]) -> Mapping[str, float]:
    if isinstance(metrics, EpochMetrics):
        return metrics.as_dict()
    return metrics


class JsonlSink:
    """Append-only JSONL writer; one record per epoch plus a terminal record."""

    def __init__(self, path: str | Path, *, task: str = "", seed: int | None = None, sha: str | None = None) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.task = task
        self.seed = seed
        self.sha = sha or git_sha()

    def _append(self, record: Mapping[str, object]) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    def on_epoch(self, epoch: int, metrics: EpochMetrics | Mapping[str, float]) -> None:
        record: dict[str, object] = {
            "epoch": int(epoch),
            "task": self.task,
            "seed": self.seed,
            "sha": self.sha,
        }
        record.update({k: float(v) for k, v in _as_mapping(metrics).items()})
        self._append(record)

    def on_terminal(self, event: TerminalEvent) -> None:
        self._append(
            {
                "status": event.status.value,
                "epochs_completed": event.epochs_completed,
                "reason": event.reason,
            }
        )


class CsvSink:
    """Write per-epoch metrics to CSV with a stable, sorted header."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_epoch(self, epoch: int, metrics: EpochMetrics | Mapping[str, float]) -> None:
        row: dict[str, float | int] = {"epoch": int(epoch)}
        row.update({k: float(v) for k, v in _as_mapping(metrics).items()})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=sorted(row.keys()))
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)


class HistoryCapture:
    """Keep the epoch records and terminal event in memory."""

    def __init__(self) -> None:
        self.history: list[tuple[int, EpochMetrics]] = []
        self.terminal: TerminalEvent | None = None

    @property
    def last(self) -> EpochMetrics | None:
        return self.history[-1][1] if self.history else None

    def on_epoch(self, epoch: int, metrics: EpochMetrics) -> None:
        self.history.append((int(epoch), metrics))

    def on_terminal(self, event: TerminalEvent) -> None:
        self.terminal = event


__all__ = ["CsvSink", "HistoryCapture", "JsonlSink"]
