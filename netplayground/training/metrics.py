"""Metric helpers and the adapter that normalises raw fit logs."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

import numpy as np

from ..core.types import Array, EpochMetrics, TaskFamily

ACCURACY_KEYS: tuple[str, ...] = ("acc", "accuracy")
MSE_KEYS: tuple[str, ...] = ("mse", "mean_squared_error")

# Regression has no accuracy; this maps MSE onto a rough 0..1 scale for the
# accuracy chart.  It is not bounded: large errors go negative.
REGRESSION_MSE_SCALE = 10.0


def binary_accuracy(probs: Array, targets: Array) -> float:
    pred = (probs >= 0.5).astype(int)
    return float(np.mean(pred == targets.astype(int)))


def categorical_accuracy(probs: Array, targets: Array) -> float:
    return float(np.mean(np.argmax(probs, axis=1) == np.argmax(targets, axis=1)))


def mean_squared_error(pred: Array, targets: Array) -> float:
    return float(np.mean((pred - targets) ** 2))


_METRICS: Mapping[TaskFamily, tuple[str, Callable[[Array, Array], float]]] = {
    TaskFamily.BINARY: ("acc", binary_accuracy),
    TaskFamily.MULTICLASS: ("accuracy", categorical_accuracy),
    TaskFamily.REGRESSION: ("mse", mean_squared_error),
}


def raw_metric(family: TaskFamily) -> tuple[str, Callable[[Array, Array], float]]:
    """Return the ``(log key, fn)`` pair the fit loop reports for ``family``."""

    return _METRICS[family]


def regression_accuracy(mse: float) -> float:
    return 1.0 - mse / REGRESSION_MSE_SCALE


def _first_number(logs: Mapping[str, object], keys: Sequence[str]) -> float | None:
    for key in keys:
        value = logs.get(key)
        if isinstance(value, (int, float, np.floating)) and not math.isnan(float(value)):
            return float(value)
    return None


@dataclass(frozen=True)
class LogAdapter:
    """Turn a raw fit log record into :class:`EpochMetrics`.

    This is the only place that knows which key names the fit loop may use.
    """

    family: TaskFamily

    def __call__(self, logs: Mapping[str, object]) -> EpochMetrics:
        loss = _first_number(logs, ("loss",))
        if self.family is TaskFamily.REGRESSION:
            mse = _first_number(logs, MSE_KEYS)
            accuracy = None if mse is None else regression_accuracy(mse)
        else:
            accuracy = _first_number(logs, ACCURACY_KEYS)
        return EpochMetrics(
            loss=0.0 if loss is None else loss,
            accuracy=0.0 if accuracy is None else accuracy,
        )


__all__ = [
    "LogAdapter",
    "binary_accuracy",
    "categorical_accuracy",
    "mean_squared_error",
    "raw_metric",
    "regression_accuracy",
]
