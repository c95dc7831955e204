"""Prediction with fallbacks and the decision-boundary grid."""

from .boundary import (
    DEFAULT_CANVAS_SIZE,
    DEFAULT_RESOLUTION,
    BoundaryGrid,
    compute_boundary,
    grid_points,
    pixel_to_feature,
    prediction_color,
    should_refresh_boundary,
)
from .engine import InferenceEngine, Prediction, PredictionTier

__all__ = [
    "BoundaryGrid",
    "DEFAULT_CANVAS_SIZE",
    "DEFAULT_RESOLUTION",
    "InferenceEngine",
    "Prediction",
    "PredictionTier",
    "compute_boundary",
    "grid_points",
    "pixel_to_feature",
    "prediction_color",
    "should_refresh_boundary",
]
