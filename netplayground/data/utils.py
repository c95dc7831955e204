"""Utility helpers for dataset loaders."""

from __future__ import annotations

from typing import Iterator

import numpy as np

from ..core.types import Array


def make_rng(seed: int | None) -> np.random.Generator:
    """Seeded generator, or fresh entropy when ``seed`` is ``None``."""

    return np.random.default_rng(seed)


def one_hot(labels: Array, num_classes: int) -> Array:
    eye = np.eye(num_classes, dtype=np.float32)
    return eye[labels.reshape(-1).astype(int)]


def shuffled_batches(
    n_samples: int,
    batch_size: int,
    rng: np.random.Generator | None,
) -> Iterator[Array]:
    """Yield index arrays covering ``range(n_samples)`` once.

    Order is random when ``rng`` is given and sequential otherwise.
    The last batch may be short; ``batch_size`` larger than the dataset
    yields a single full batch.
    """

    order = rng.permutation(n_samples) if rng is not None else np.arange(n_samples)
    step = max(1, min(batch_size, n_samples))
    for start in range(0, n_samples, step):
        yield order[start : start + step]


__all__ = ["make_rng", "one_hot", "shuffled_batches"]
