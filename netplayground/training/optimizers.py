"""Optimizers whose state lives in runtime tensors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from ..core.runtime import NumericRuntime, Tensor
from ..core.types import Array


@dataclass
class SGDOptimizer:
    """Vanilla SGD; carries no state tensors."""

    lr: float

    def init(self, runtime: NumericRuntime, params: Sequence[Tensor]) -> None:
        del runtime, params

    def step(self, params: Sequence[Tensor], grads: Sequence[Array]) -> None:
        for param, grad in zip(params, grads):
            param.assign(param.data - self.lr * grad)

    def state(self) -> List[Tensor]:
        return []

    def dispose(self) -> None:
        return None


@dataclass
class AdamOptimizer:
    """Adam with the usual defaults; one first- and second-moment slot per parameter."""

    lr: float
    beta1: float = 0.9
    beta2: float = 0.999
    epsilon: float = 1e-7
    iterations: int = 0
    _m: List[Tensor] = field(default_factory=list, repr=False)
    _v: List[Tensor] = field(default_factory=list, repr=False)

    def init(self, runtime: NumericRuntime, params: Sequence[Tensor]) -> None:
        self._m = [runtime.keep(runtime.zeros(p.shape, name=f"adam_m/{p.name}")) for p in params]
        self._v = [runtime.keep(runtime.zeros(p.shape, name=f"adam_v/{p.name}")) for p in params]
        self.iterations = 0

    def step(self, params: Sequence[Tensor], grads: Sequence[Array]) -> None:
        self.iterations += 1
        t = self.iterations
        lr_t = self.lr * np.sqrt(1.0 - self.beta2**t) / (1.0 - self.beta1**t)
        for param, grad, m, v in zip(params, grads, self._m, self._v):
            m.assign(self.beta1 * m.data + (1.0 - self.beta1) * grad)
            v.assign(self.beta2 * v.data + (1.0 - self.beta2) * np.square(grad))
            param.assign(param.data - lr_t * m.data / (np.sqrt(v.data) + self.epsilon))

    def state(self) -> List[Tensor]:
        return [*self._m, *self._v]

    def dispose(self) -> None:
        for tensor in self.state():
            tensor.dispose()
        self._m, self._v = [], []


def make_optimizer(name: str, lr: float):
    key = name.lower()
    if key == "adam":
        return AdamOptimizer(lr=lr)
    if key == "sgd":
        return SGDOptimizer(lr=lr)
    raise ValueError(f"Unknown optimizer: {name}")


__all__ = ["AdamOptimizer", "SGDOptimizer", "make_optimizer"]
