"""Synthetic stand-in for the MNIST digit task.

No real images are loaded: pixels are uniform noise in ``[0, 0.5]`` paired
with random one-hot labels.  Generation never raises; on any failure the
loader returns zero pixels with random labels so training can still start.
"""

from __future__ import annotations

import numpy as np
from loguru import logger

from ...core.types import Dataset, TaskFamily
from ..registry import TaskSpec, register_dataset
from ..utils import make_rng, one_hot

IMAGE_SIDE = 28
IMAGE_WIDTH = IMAGE_SIDE * IMAGE_SIDE
NUM_CLASSES = 10
PIXEL_MAX = 0.5


def _pixels(rng: np.random.Generator, sample_count: int) -> np.ndarray:
    return rng.uniform(0.0, PIXEL_MAX, size=(sample_count, IMAGE_WIDTH)).astype(np.float32)


def _labels(rng: np.random.Generator, sample_count: int) -> np.ndarray:
    return one_hot(rng.integers(0, NUM_CLASSES, size=sample_count), NUM_CLASSES)


@register_dataset(TaskSpec("mnist", TaskFamily.MULTICLASS, input_width=IMAGE_WIDTH, default_samples=100))
def make_image_standin(sample_count: int = 100, *, seed: int | None = None, **_: object) -> Dataset:
    rng = make_rng(seed)
    try:
        inputs = _pixels(rng, sample_count)
        outputs = _labels(rng, sample_count)
    except Exception as exc:
        logger.warning("Synthetic image generation failed ({}); using blank images", exc)
        inputs = np.zeros((sample_count, IMAGE_WIDTH), dtype=np.float32)
        outputs = _labels(make_rng(seed), sample_count)
    return Dataset("mnist", inputs, outputs, TaskFamily.MULTICLASS)


__all__ = ["IMAGE_WIDTH", "NUM_CLASSES", "make_image_standin"]
