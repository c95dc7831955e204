"""Loss registry used by the fit loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from ..core.types import Array, TaskFamily

LossFn = Callable[[Array, Array], tuple[float, Array]]

_EPS = 1e-7


@dataclass(frozen=True)
class Loss:
    """Loss wrapper returning the scalar loss and the gradient at the head.

    The gradient is taken with respect to the head's *pre-activation*, which
    lets sigmoid/softmax heads use the ``p - y`` shortcut.
    """

    name: str
    fn: LossFn

    def __call__(self, outputs: Array, targets: Array) -> tuple[float, Array]:
        return self.fn(outputs, targets)


class LossRegistry:
    """Central registry for loss functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, Loss] = {}

    def register(self, name: str, fn: LossFn) -> None:
        self._registry[name] = Loss(name, fn)

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def resolve(self, name: str, *, family: TaskFamily) -> Loss:
        if name == "auto":
            name = {
                TaskFamily.REGRESSION: "mse",
                TaskFamily.MULTICLASS: "ce",
                TaskFamily.BINARY: "bce",
            }[family]
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown loss {name!r}. Available losses: {available}")
        return self._registry[name]


REGISTRY = LossRegistry()


def _mse(pred: Array, target: Array) -> tuple[float, Array]:
    diff = pred - target
    loss = float(np.mean(np.square(diff)))
    return loss, 2.0 * diff / diff.shape[1]


def _binary_crossentropy(probs: Array, target: Array) -> tuple[float, Array]:
    clipped = np.clip(probs, _EPS, 1.0 - _EPS)
    loss = float(-np.mean(target * np.log(clipped) + (1 - target) * np.log(1 - clipped)))
    return loss, (probs - target) / probs.shape[1]


def _categorical_crossentropy(probs: Array, target: Array) -> tuple[float, Array]:
    clipped = np.clip(probs, _EPS, 1.0)
    loss = float(-np.mean(np.sum(target * np.log(clipped), axis=1)))
    return loss, probs - target


REGISTRY.register("mse", _mse)
REGISTRY.register("bce", _binary_crossentropy)
REGISTRY.register("ce", _categorical_crossentropy)

__all__ = ["Loss", "LossRegistry", "REGISTRY"]
