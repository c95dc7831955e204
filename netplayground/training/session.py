"""Caller-owned training session tying the runtime, driver and engine together."""

from __future__ import annotations

import asyncio
from typing import Tuple

from loguru import logger

from ..core.errors import NetPlaygroundError, TrainingInProgressError
from ..core.parameters import NetworkParameters
from ..core.runtime import NumericRuntime
from ..core.types import Array, Dataset, ModelDescription, TerminalEvent
from ..inference.boundary import (
    DEFAULT_CANVAS_SIZE,
    DEFAULT_RESOLUTION,
    BoundaryGrid,
    compute_boundary,
)
from ..inference.engine import InferenceEngine, Prediction
from .driver import CompleteFn, DriverConfig, DriverState, EpochEndFn, TrainingDriver
from .events import MetricsChannel
from .model import FeedForwardModel
from .tasks import TaskStrategy, strategy_for


class TrainingSession:
    """One model at a time, trained and queried through a single runtime.

    ``start`` regenerates the dataset and rebuilds the model from the given
    parameters, releasing the previous model first.  A session refuses to
    start while a run is active unless ``preempt=True``, in which case the
    active run is asked to stop and awaited.
    """

    def __init__(
        self,
        runtime: NumericRuntime | None = None,
        *,
        config: DriverConfig | None = None,
        seed: int | None = None,
    ) -> None:
        self.runtime = runtime or NumericRuntime()
        self.channel = MetricsChannel()
        self.driver = TrainingDriver(self.runtime, config, self.channel)
        self.engine = InferenceEngine(self.runtime)
        self.seed = seed
        self.model: FeedForwardModel | None = None
        self.dataset: Dataset | None = None
        self.parameters: NetworkParameters | None = None
        self.strategy: TaskStrategy | None = None
        self._run_done: asyncio.Event | None = None

    # ------------------------------------------------------------------
    # State passthrough

    @property
    def state(self) -> DriverState:
        return self.driver.state

    @property
    def is_training(self) -> bool:
        return self.driver.is_training

    @property
    def current_epoch(self) -> int:
        return self.driver.current_epoch

    @property
    def loss_history(self) -> Tuple[float, ...]:
        return self.driver.loss_history

    @property
    def accuracy_history(self) -> Tuple[float, ...]:
        return self.driver.accuracy_history

    @property
    def task(self) -> str | None:
        return self.strategy.task if self.strategy is not None else None

    def subscribe(self, observer: object) -> None:
        self.channel.subscribe(observer)

    def unsubscribe(self, observer: object) -> None:
        self.channel.unsubscribe(observer)

    # ------------------------------------------------------------------
    # Model lifecycle

    def build(self, parameters: NetworkParameters, task: str | None = "xor") -> FeedForwardModel:
        if self.driver.is_training:
            raise TrainingInProgressError("Cannot rebuild the model while training")
        strategy = strategy_for(task)
        self._release_model()
        self.model = strategy.build(parameters, self.runtime, seed=self.seed)
        self.parameters = parameters
        self.strategy = strategy
        return self.model

    def describe(self) -> ModelDescription | None:
        if self.model is None:
            return None
        return self.model.describe()

    def _release_model(self) -> None:
        if self.model is not None:
            self.model.dispose()
            self.model = None

    # ------------------------------------------------------------------
    # Training

    async def start(
        self,
        parameters: NetworkParameters | None = None,
        task: str | None = "xor",
        on_epoch_end: EpochEndFn | None = None,
        on_complete: CompleteFn | None = None,
        *,
        sample_count: int | None = None,
        preempt: bool = False,
    ) -> TerminalEvent:
        """Generate data, rebuild the model and train it to a terminal event."""

        parameters = parameters or NetworkParameters()
        if self.driver.is_training:
            if not preempt:
                raise TrainingInProgressError("A training run is already active")
            logger.info("Preempting active run at epoch {}", self.driver.current_epoch)
            self.driver.request_stop()
            await self._wait_until_idle()

        strategy = strategy_for(task)
        self.dataset = strategy.dataset(sample_count, seed=self.seed)
        model = self.build(parameters, strategy.task)
        done = asyncio.Event()
        self._run_done = done
        try:
            return await self.driver.train(
                model,
                self.dataset,
                parameters,
                on_epoch_end,
                on_complete,
                seed=self.seed,
            )
        finally:
            done.set()

    async def _wait_until_idle(self) -> None:
        while self.driver.is_training:
            if self._run_done is None:
                await asyncio.sleep(0)
            else:
                await self._run_done.wait()

    def request_stop(self) -> None:
        self.driver.request_stop()

    # ------------------------------------------------------------------
    # Inference

    def predict(self, batch) -> Array:
        return self.predict_with_tier(batch).values

    def predict_with_tier(self, batch) -> Prediction:
        if self.model is None:
            raise NetPlaygroundError("No model has been built yet")
        return self.engine.predict_with_tier(self.model, batch)

    def predict_grid(
        self,
        canvas_size: int = DEFAULT_CANVAS_SIZE,
        resolution: int = DEFAULT_RESOLUTION,
    ) -> BoundaryGrid:
        return compute_boundary(self.engine, self.model, canvas_size, resolution)

    # ------------------------------------------------------------------
    # Teardown

    def close(self) -> None:
        if self.driver.is_training:
            raise TrainingInProgressError("Stop the active run before closing the session")
        self._release_model()
        logger.debug("Session closed; {} tensor(s) still live", self.runtime.num_tensors)

    def __enter__(self) -> "TrainingSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["TrainingSession"]
