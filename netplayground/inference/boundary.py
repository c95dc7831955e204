"""Dense prediction grid backing the decision-boundary view.

The canvas is sampled every ``resolution`` pixels, x outer and y inner, and
each pixel is mapped into feature space with
``feature = (pixel / canvas_size) * 2 - 1``.  A consumer drawing the grid has
to use the same convention for predictions to line up with the geometry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
from loguru import logger

from ..core.errors import describe_error
from ..core.types import Array
from ..training.model import FeedForwardModel
from .engine import InferenceEngine, PredictionTier

DEFAULT_CANVAS_SIZE = 400
DEFAULT_RESOLUTION = 10
REFRESH_EVERY = 5

Color = Tuple[int, int, int, float]

PLACEHOLDER_START: Color = (255, 100, 100, 0.5)
PLACEHOLDER_END: Color = (100, 255, 100, 0.5)


def pixel_to_feature(pixel: float, canvas_size: int) -> float:
    return (pixel / canvas_size) * 2.0 - 1.0


def feature_to_pixel(feature: float, canvas_size: int) -> float:
    return ((feature + 1.0) / 2.0) * canvas_size


def grid_pixels(canvas_size: int = DEFAULT_CANVAS_SIZE, resolution: int = DEFAULT_RESOLUTION) -> Array:
    """Top-left pixel of every cell, shape ``[cells, 2]``, x outer and y inner."""

    if canvas_size < 1 or resolution < 1:
        raise ValueError("canvas_size and resolution must be positive")
    steps = np.arange(0, canvas_size, resolution)
    xs, ys = np.meshgrid(steps, steps, indexing="ij")
    return np.stack([xs.ravel(), ys.ravel()], axis=1)


def grid_points(canvas_size: int = DEFAULT_CANVAS_SIZE, resolution: int = DEFAULT_RESOLUTION) -> Array:
    pixels = grid_pixels(canvas_size, resolution).astype(np.float32)
    return pixel_to_feature(pixels, canvas_size)


def prediction_color(value: float) -> Color:
    v = float(np.clip(value, 0.0, 1.0))
    return (int(round(255 * (1 - v))), int(round(255 * v)), 128, 1.0)


def placeholder_color(x: float, y: float, canvas_size: int) -> Color:
    """Diagonal gradient from the top-left to the bottom-right corner."""

    t = float(np.clip((x + y) / (2.0 * canvas_size), 0.0, 1.0))
    r = int(round(PLACEHOLDER_START[0] + (PLACEHOLDER_END[0] - PLACEHOLDER_START[0]) * t))
    g = int(round(PLACEHOLDER_START[1] + (PLACEHOLDER_END[1] - PLACEHOLDER_START[1]) * t))
    b = int(round(PLACEHOLDER_START[2] + (PLACEHOLDER_END[2] - PLACEHOLDER_START[2]) * t))
    return (r, g, b, PLACEHOLDER_START[3])


@dataclass(frozen=True)
class BoundaryGrid:
    """Cell geometry, predicted values and colours for one boundary refresh.

    ``values`` is ``None`` when the grid is the gradient placeholder.
    """

    canvas_size: int
    resolution: int
    pixels: Array
    values: Array | None
    colors: List[Color]
    tier: PredictionTier | None
    placeholder: bool = False
    error: str | None = None

    @property
    def cells_per_side(self) -> int:
        return len(range(0, self.canvas_size, self.resolution))

    def as_image(self) -> Array:
        """RGBA image ``[rows, cols, 4]`` in 0..1 with rows indexed by y."""

        side = self.cells_per_side
        image = np.zeros((side, side, 4), dtype=np.float32)
        for (x, y), (r, g, b, a) in zip(self.pixels, self.colors):
            image[int(y) // self.resolution, int(x) // self.resolution] = (r / 255, g / 255, b / 255, a)
        return image


def _placeholder(canvas_size: int, resolution: int, pixels: Array, error: str | None) -> BoundaryGrid:
    colors = [placeholder_color(float(x), float(y), canvas_size) for x, y in pixels]
    return BoundaryGrid(
        canvas_size=canvas_size,
        resolution=resolution,
        pixels=pixels,
        values=None,
        colors=colors,
        tier=None,
        placeholder=True,
        error=error,
    )


def compute_boundary(
    engine: InferenceEngine,
    model: FeedForwardModel | None,
    canvas_size: int = DEFAULT_CANVAS_SIZE,
    resolution: int = DEFAULT_RESOLUTION,
) -> BoundaryGrid:
    """Predict every grid cell; fall back to a gradient when prediction is impossible."""

    pixels = grid_pixels(canvas_size, resolution)
    if model is None:
        return _placeholder(canvas_size, resolution, pixels, "no model")
    prediction = engine.predict_with_tier(model, pixel_to_feature(pixels.astype(np.float32), canvas_size))
    if prediction.tier is PredictionTier.ZEROS:
        error = "; ".join(prediction.errors) or None
        logger.warning("Decision boundary degraded to placeholder: {}", error)
        return _placeholder(canvas_size, resolution, pixels, error)
    try:
        values = prediction.values[:, 0]
        colors = [prediction_color(v) for v in values]
    except Exception as exc:
        return _placeholder(canvas_size, resolution, pixels, describe_error(exc))
    return BoundaryGrid(
        canvas_size=canvas_size,
        resolution=resolution,
        pixels=pixels,
        values=values,
        colors=colors,
        tier=prediction.tier,
    )


def should_refresh_boundary(completed_epochs: int, is_training: bool, every: int = REFRESH_EVERY) -> bool:
    """Redraw every ``every`` epochs while training, and once training has ended."""

    if completed_epochs <= 0:
        return False
    if is_training:
        return completed_epochs % every == 0
    return True


__all__ = [
    "BoundaryGrid",
    "DEFAULT_CANVAS_SIZE",
    "DEFAULT_RESOLUTION",
    "compute_boundary",
    "feature_to_pixel",
    "grid_pixels",
    "grid_points",
    "pixel_to_feature",
    "placeholder_color",
    "prediction_color",
    "should_refresh_boundary",
]
