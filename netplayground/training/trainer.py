"""Epoch loop that fits a model on runtime tensors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Sequence

import numpy as np

from ..core.runtime import Tensor
from ..data.utils import shuffled_batches
from .metrics import raw_metric
from .model import FeedForwardModel

EpochCallback = Callable[[int, Mapping[str, float]], Any]


@dataclass
class History:
    """Raw per-epoch logs returned by :meth:`Trainer.fit`."""

    epochs: List[int] = field(default_factory=list)
    logs: List[Dict[str, float]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.epochs)


class Trainer:
    """Run mini-batch epochs on a :class:`FeedForwardModel`.

    Logs use the key of the family's native metric (``acc``, ``accuracy`` or
    ``mse``); callers that need a stable schema go through
    :class:`~netplayground.training.metrics.LogAdapter`.  Setting
    ``model.stop_training`` from a callback ends the fit after the current
    epoch.
    """

    def __init__(self, model: FeedForwardModel, *, seed: int | None = None) -> None:
        self.model = model
        self._rng = np.random.default_rng(seed)

    def fit(
        self,
        inputs: Tensor,
        targets: Tensor,
        *,
        epochs: int,
        batch_size: int,
        callbacks: Sequence[object] | None = None,
        shuffle: bool = True,
    ) -> History:
        x = inputs.data
        y = targets.data
        if x.shape[0] != y.shape[0]:
            raise ValueError(f"fit got {x.shape[0]} inputs but {y.shape[0]} targets")
        metric_key, metric_fn = raw_metric(self.model.family)
        callbacks = list(callbacks or [])
        history = History()
        self.model.stop_training = False

        for epoch in range(epochs):
            losses: list[float] = []
            weights: list[int] = []
            preds_all: list[np.ndarray] = []
            targets_all: list[np.ndarray] = []
            rng = self._rng if shuffle else None
            for idx in shuffled_batches(x.shape[0], batch_size, rng):
                loss_value, outputs = self.model.train_step(x[idx], y[idx])
                losses.append(loss_value)
                weights.append(len(idx))
                preds_all.append(outputs)
                targets_all.append(y[idx])
            logs = {
                "loss": float(np.average(losses, weights=weights)),
                metric_key: metric_fn(np.concatenate(preds_all), np.concatenate(targets_all)),
            }
            history.epochs.append(epoch)
            history.logs.append(logs)
            self._emit_epoch(epoch, logs, callbacks)
            if self.model.stop_training:
                break
        return history

    @staticmethod
    def _emit_epoch(epoch: int, logs: Mapping[str, float], callbacks: Sequence[object]) -> None:
        for callback in callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, logs)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, logs)


__all__ = ["EpochCallback", "History", "Trainer"]
