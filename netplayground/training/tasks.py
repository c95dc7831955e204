"""Per-task strategies plugged into the single chunked training algorithm."""

from __future__ import annotations

from dataclasses import dataclass

from .. import data
from ..core.parameters import NetworkParameters
from ..core.runtime import NumericRuntime
from ..core.types import Dataset, TaskFamily
from .model import FeedForwardModel, build_model


@dataclass(frozen=True)
class TaskStrategy:
    """Everything that differs between XOR, circle, regression and the image task."""

    task: str
    family: TaskFamily
    input_width: int
    two_dimensional: bool

    def dataset(self, sample_count: int | None = None, *, seed: int | None = None) -> Dataset:
        return data.generate(self.task, sample_count, seed=seed)

    def build(
        self,
        parameters: NetworkParameters,
        runtime: NumericRuntime,
        *,
        seed: int | None = None,
    ) -> FeedForwardModel:
        return build_model(
            parameters,
            self.family,
            runtime,
            input_width=self.input_width,
            seed=seed,
        )


def strategy_for(task: str | None) -> TaskStrategy:
    """Return the strategy for ``task``; unknown keys resolve to ``xor``."""

    spec = data.task_spec(task)
    return TaskStrategy(
        task=spec.name,
        family=spec.family,
        input_width=spec.input_width,
        two_dimensional=spec.two_dimensional,
    )


__all__ = ["TaskStrategy", "strategy_for"]
