"""netplayground: a small neural-network playground core.

Build a feed-forward network from :class:`NetworkParameters`, train it on a
synthetic task in cooperative chunks, and query predictions and a decision
boundary grid while it learns.
"""

from .core.errors import (
    ConfigurationError,
    NetPlaygroundError,
    RuntimeFault,
    TrainingFailedError,
    TrainingInProgressError,
)
from .core.parameters import NetworkParameters
from .core.runtime import NumericRuntime, Tensor
from .core.types import Dataset, EpochMetrics, RunResult, RunStatus, TaskFamily, TerminalEvent
from .data import available_datasets, generate
from .inference import BoundaryGrid, InferenceEngine, PredictionTier, compute_boundary, should_refresh_boundary
from .training.driver import DriverConfig, DriverState, TrainingDriver
from .training.events import MetricsChannel
from .training.model import FeedForwardModel, build_model
from .training.session import TrainingSession

__version__ = "0.1.0"

__all__ = [
    "BoundaryGrid",
    "ConfigurationError",
    "Dataset",
    "DriverConfig",
    "DriverState",
    "EpochMetrics",
    "FeedForwardModel",
    "InferenceEngine",
    "MetricsChannel",
    "NetPlaygroundError",
    "NetworkParameters",
    "NumericRuntime",
    "PredictionTier",
    "RunResult",
    "RunStatus",
    "RuntimeFault",
    "TaskFamily",
    "Tensor",
    "TerminalEvent",
    "TrainingDriver",
    "TrainingFailedError",
    "TrainingInProgressError",
    "TrainingSession",
    "available_datasets",
    "build_model",
    "compute_boundary",
    "generate",
    "should_refresh_boundary",
]
