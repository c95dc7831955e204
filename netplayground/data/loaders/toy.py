"""Pure in-memory toy datasets in the [-1, 1] input space."""

from __future__ import annotations

import numpy as np

from ...core.types import Dataset, TaskFamily
from ..registry import TaskSpec, register_dataset
from ..utils import make_rng

CIRCLE_RADIUS = 0.5
REGRESSION_NOISE = 0.1

XOR_INPUTS = np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=np.float32)
XOR_OUTPUTS = np.array([[0], [1], [1], [0]], dtype=np.float32)


@register_dataset(TaskSpec("xor", TaskFamily.BINARY, input_width=2, default_samples=4, two_dimensional=True))
def make_xor(sample_count: int = 4, *, seed: int | None = None, **_: object) -> Dataset:
    # Always the four corner points; sample_count and seed do not apply.
    return Dataset("xor", XOR_INPUTS.copy(), XOR_OUTPUTS.copy(), TaskFamily.BINARY)


def circle_labels(points: np.ndarray, radius: float = CIRCLE_RADIUS) -> np.ndarray:
    distance = np.sqrt(points[:, 0] ** 2 + points[:, 1] ** 2)
    return (distance < radius).astype(np.float32).reshape(-1, 1)


@register_dataset(TaskSpec("circle", TaskFamily.BINARY, input_width=2, default_samples=500, two_dimensional=True))
def make_circle(sample_count: int = 500, *, seed: int | None = None, **_: object) -> Dataset:
    rng = make_rng(seed)
    points = rng.uniform(-1.0, 1.0, size=(sample_count, 2)).astype(np.float32)
    return Dataset("circle", points, circle_labels(points), TaskFamily.BINARY)


@register_dataset(TaskSpec("regression", TaskFamily.REGRESSION, input_width=1, default_samples=200))
def make_regression(sample_count: int = 200, *, seed: int | None = None, **_: object) -> Dataset:
    rng = make_rng(seed)
    x = rng.uniform(-1.0, 1.0, size=(sample_count, 1))
    noise = rng.uniform(-REGRESSION_NOISE, REGRESSION_NOISE, size=x.shape)
    y = x**3 + noise
    return Dataset(
        "regression", x.astype(np.float32), y.astype(np.float32), TaskFamily.REGRESSION
    )


__all__ = ["circle_labels", "make_circle", "make_regression", "make_xor"]
