"""Core typing contracts for netplayground."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

import numpy as np

Array = np.ndarray


class TaskFamily(str, Enum):
    """Kind of head and loss a model is built with."""

    BINARY = "binary"
    REGRESSION = "regression"
    MULTICLASS = "multiclass"


@dataclass(frozen=True)
class Dataset:
    """Aligned inputs and outputs for one training run.

    Both arrays are marked read-only on construction; a dataset is recreated
    for every run rather than mutated.
    """

    name: str
    inputs: Array
    outputs: Array
    task_family: TaskFamily

    def __post_init__(self) -> None:
        if self.inputs.ndim != 2 or self.outputs.ndim != 2:
            raise ValueError("Dataset inputs and outputs must be 2-D")
        if self.inputs.shape[0] != self.outputs.shape[0]:
            raise ValueError(
                f"Dataset {self.name!r} has {self.inputs.shape[0]} inputs "
                f"but {self.outputs.shape[0]} outputs"
            )
        self.inputs.setflags(write=False)
        self.outputs.setflags(write=False)

    def __len__(self) -> int:
        return int(self.inputs.shape[0])

    @property
    def input_width(self) -> int:
        return int(self.inputs.shape[1])

    @property
    def output_width(self) -> int:
        return int(self.outputs.shape[1])


@dataclass(frozen=True)
class EpochMetrics:
    """Normalised per-epoch record forwarded to observers."""

    loss: float
    accuracy: float

    def as_dict(self) -> dict[str, float]:
        return {"loss": self.loss, "accuracy": self.accuracy}


class RunStatus(str, Enum):
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass(frozen=True)
class TerminalEvent:
    """Final event of a training run."""

    status: RunStatus
    epochs_completed: int
    reason: str | None = None


@dataclass(frozen=True)
class ModelDescription:
    """Description of the feed-forward network architecture."""

    layer_dims: List[int]
    activations: List[str] = field(default_factory=list)
    parameter_count: int = 0


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`netplayground.training.pipelines.run_pipeline`."""

    status: str
    epochs: int
    metrics_path: str
    manifest_path: str
    final_loss: float | None = None
    final_accuracy: float | None = None


__all__ = [
    "Array",
    "Dataset",
    "EpochMetrics",
    "ModelDescription",
    "RunResult",
    "RunStatus",
    "TaskFamily",
    "TerminalEvent",
]
