"""Prediction with tiered fallbacks.

``InferenceEngine.predict`` always returns an array of shape
``[batch_size, output_width]``.  Fidelity degrades tier by tier:

1. the full model, after checking the feature width;
2. only the first and last layers applied back to back;
3. zeros, so a consumer can still draw something.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np
from loguru import logger

from ..core.errors import ConfigurationError, describe_error
from ..core.runtime import NumericRuntime, Tensor
from ..core.types import Array
from ..training.model import FeedForwardModel


class PredictionTier(IntEnum):
    FULL = 1
    LAYER_PAIR = 2
    ZEROS = 3


@dataclass(frozen=True)
class Prediction:
    values: Array
    tier: PredictionTier
    errors: tuple[str, ...] = ()

    @property
    def degraded(self) -> bool:
        return self.tier is not PredictionTier.FULL


class InferenceEngine:
    """Run predictions for a runtime without leaking intermediate buffers."""

    def __init__(self, runtime: NumericRuntime) -> None:
        self.runtime = runtime

    def predict(self, model: FeedForwardModel, batch) -> Array:
        return self.predict_with_tier(model, batch).values

    def predict_with_tier(self, model: FeedForwardModel, batch) -> Prediction:
        rows = _batch_rows(batch)
        errors: list[str] = []
        with self.runtime.scope():
            try:
                inputs = batch if isinstance(batch, Tensor) else self.runtime.tensor(batch, name="batch")
            except Exception as exc:
                errors.append(describe_error(exc))
                logger.error("Could not stage prediction batch: {}", errors[-1])
            else:
                try:
                    return Prediction(self._full(model, inputs), PredictionTier.FULL)
                except Exception as exc:
                    errors.append(describe_error(exc))
                    logger.warning("Full-model prediction failed ({}); trying layer pair", errors[-1])
                try:
                    return Prediction(self._layer_pair(model, inputs), PredictionTier.LAYER_PAIR, tuple(errors))
                except Exception as exc:
                    errors.append(describe_error(exc))
                    logger.error("All prediction methods failed: {}", errors[-1])
        return Prediction(self._zeros(model, rows), PredictionTier.ZEROS, tuple(errors))

    # ------------------------------------------------------------------
    # Tiers

    @staticmethod
    def _full(model: FeedForwardModel, inputs: Tensor) -> Array:
        shape = inputs.shape
        if len(shape) != 2 or shape[1] != model.input_width:
            raise ConfigurationError(
                f"Input shape mismatch: model expects width {model.input_width}, got {shape}"
            )
        return model.predict(inputs).numpy()

    @staticmethod
    def _layer_pair(model: FeedForwardModel, inputs: Tensor) -> Array:
        first, last = model.layers[0], model.layers[-1]
        features = first.apply(inputs)
        try:
            prediction = last.apply(features) if last is not first else features
            return prediction.numpy()
        finally:
            features.dispose()

    @staticmethod
    def _zeros(model: FeedForwardModel, rows: int) -> Array:
        return np.zeros((rows, model.output_width), dtype=np.float32)


def _batch_rows(batch) -> int:
    if isinstance(batch, Tensor):
        return int(batch.shape[0]) if batch.shape else 0
    try:
        return len(batch)
    except TypeError:
        return 0


__all__ = ["InferenceEngine", "Prediction", "PredictionTier"]
