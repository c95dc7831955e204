"""Chunked, cooperatively scheduled training driver.

The fit loop is never asked for the full epoch count at once.  Epochs are
split into chunks of ``DriverConfig.chunk_size``; each chunk runs inside its
own runtime scope on fresh clones of the dataset buffers, and the driver
yields to the event loop between chunks so rendering and input handling can
interleave with training.  Cancellation is cooperative: ``request_stop`` sets
a flag that is honoured at the next epoch boundary.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Tuple

from loguru import logger

from ..core.errors import (
    ConfigurationError,
    TrainingFailedError,
    TrainingInProgressError,
    describe_error,
)
from ..core.parameters import NetworkParameters
from ..core.runtime import NumericRuntime, Tensor
from ..core.types import Dataset, EpochMetrics, RunStatus, TerminalEvent
from .events import MetricsChannel
from .metrics import LogAdapter
from .model import FeedForwardModel
from .trainer import Trainer

EpochEndFn = Callable[[int, EpochMetrics], object]
CompleteFn = Callable[[], object]


class DriverState(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"


_TERMINAL = {
    RunStatus.COMPLETED: DriverState.COMPLETED,
    RunStatus.STOPPED: DriverState.STOPPED,
    RunStatus.FAILED: DriverState.FAILED,
}


@dataclass(frozen=True)
class DriverConfig:
    """Scheduling knobs for :class:`TrainingDriver`.

    ``chunk_size`` is the number of epochs per fit call; ``yield_seconds`` is
    the pause handed to the event loop between chunks (``0`` is a bare tick).
    """

    chunk_size: int = 5
    yield_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ConfigurationError("chunk_size must be >= 1")
        if self.yield_seconds < 0:
            raise ConfigurationError("yield_seconds must be >= 0")


class TrainingDriver:
    """Own the transient state of training runs for one runtime."""

    def __init__(
        self,
        runtime: NumericRuntime,
        config: DriverConfig | None = None,
        channel: MetricsChannel | None = None,
    ) -> None:
        self.runtime = runtime
        self.config = config or DriverConfig()
        self.channel = channel or MetricsChannel()
        self._state = DriverState.IDLE
        self._active = False
        self._cancel_requested = False
        self._current_epoch = 0
        self._loss_history: List[float] = []
        self._accuracy_history: List[float] = []

    # ------------------------------------------------------------------
    # Read-only session state

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def is_training(self) -> bool:
        return self._active

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    @property
    def current_epoch(self) -> int:
        """Number of epochs completed in the current (or last) run."""

        return self._current_epoch

    @property
    def loss_history(self) -> Tuple[float, ...]:
        return tuple(self._loss_history)

    @property
    def accuracy_history(self) -> Tuple[float, ...]:
        return tuple(self._accuracy_history)

    def request_stop(self) -> None:
        if self._active:
            logger.info("Stop requested at epoch {}", self._current_epoch)
            self._cancel_requested = True

    # ------------------------------------------------------------------
    # Training

    async def train(
        self,
        model: FeedForwardModel,
        dataset: Dataset,
        parameters: NetworkParameters,
        on_epoch_end: EpochEndFn | None = None,
        on_complete: CompleteFn | None = None,
        *,
        seed: int | None = None,
    ) -> TerminalEvent:
        """Train ``model`` on ``dataset`` for ``parameters.epochs`` epochs.

        Returns the terminal event for ``completed`` and ``stopped`` runs and
        raises :class:`TrainingFailedError` for failed ones.
        """

        if self._active:
            raise TrainingInProgressError("A training run is already active on this driver")
        self._active = True
        try:
            return await self._run(model, dataset, parameters, on_epoch_end, on_complete, seed)
        finally:
            self._active = False

    async def _run(
        self,
        model: FeedForwardModel,
        dataset: Dataset,
        parameters: NetworkParameters,
        on_epoch_end: EpochEndFn | None,
        on_complete: CompleteFn | None,
        seed: int | None,
    ) -> TerminalEvent:
        self._state = DriverState.PREPARING
        self._cancel_requested = False
        self._current_epoch = 0
        self._loss_history = []
        self._accuracy_history = []
        self.channel.begin_run()

        chunk_size = self.config.chunk_size
        epochs = parameters.epochs
        run_tensors: List[Tensor] = []
        try:
            if dataset.input_width != model.input_width:
                raise ConfigurationError(
                    f"Dataset {dataset.name!r} has width {dataset.input_width}; "
                    f"model expects {model.input_width}"
                )
            inputs = self.runtime.tensor(dataset.inputs, name="dataset/inputs")
            run_tensors.append(inputs)
            outputs = self.runtime.tensor(dataset.outputs, name="dataset/outputs")
            run_tensors.append(outputs)
            trainer = Trainer(model, seed=seed)
            adapter = LogAdapter(model.family)

            self._state = DriverState.RUNNING
            logger.info(
                "Training on {} for {} epoch(s) in chunks of {} (batch size {})",
                dataset.name,
                epochs,
                chunk_size,
                parameters.batch_size,
            )
            chunk_index = 0
            while not self._cancel_requested:
                remaining = min(chunk_size, epochs - chunk_index * chunk_size)
                if remaining <= 0:
                    break
                self._run_chunk(
                    trainer,
                    inputs,
                    outputs,
                    chunk_index=chunk_index,
                    epochs=remaining,
                    batch_size=parameters.batch_size,
                    adapter=adapter,
                    on_epoch_end=on_epoch_end,
                )
                chunk_index += 1
                await asyncio.sleep(self.config.yield_seconds)
        except asyncio.CancelledError:
            self._finish(RunStatus.STOPPED, reason="cancelled")
            raise
        except Exception as exc:
            reason = describe_error(exc)
            logger.error("Training failed after {} epoch(s): {}", self._current_epoch, reason)
            self._finish(RunStatus.FAILED, reason=reason)
            raise TrainingFailedError(reason, epoch=self._current_epoch) from exc
        finally:
            self.runtime.dispose_all(run_tensors)

        status = RunStatus.STOPPED if self._cancel_requested else RunStatus.COMPLETED
        event = self._finish(status)
        logger.info("Training {} after {} epoch(s)", status.value, self._current_epoch)
        if on_complete is not None:
            on_complete()
        return event

    def _run_chunk(
        self,
        trainer: Trainer,
        inputs: Tensor,
        outputs: Tensor,
        *,
        chunk_index: int,
        epochs: int,
        batch_size: int,
        adapter: LogAdapter,
        on_epoch_end: EpochEndFn | None,
    ) -> None:
        offset = chunk_index * self.config.chunk_size
        model = trainer.model

        def _on_epoch(local_epoch: int, logs) -> None:
            metrics = adapter(logs)
            global_epoch = offset + local_epoch
            self._loss_history.append(metrics.loss)
            self._accuracy_history.append(metrics.accuracy)
            self._current_epoch = global_epoch + 1
            if on_epoch_end is not None:
                on_epoch_end(global_epoch, metrics)
            self.channel.emit_epoch(global_epoch, metrics)
            if self._cancel_requested:
                model.stop_training = True

        logger.debug("Chunk {}: epochs {}..{}", chunk_index, offset, offset + epochs - 1)
        with self.runtime.scope():
            chunk_inputs = inputs.clone()
            chunk_outputs = outputs.clone()
            try:
                trainer.fit(
                    chunk_inputs,
                    chunk_outputs,
                    epochs=epochs,
                    batch_size=batch_size,
                    callbacks=[_on_epoch],
                )
            finally:
                chunk_inputs.dispose()
                chunk_outputs.dispose()

    def _finish(self, status: RunStatus, reason: str | None = None) -> TerminalEvent:
        self._state = _TERMINAL[status]
        event = TerminalEvent(status=status, epochs_completed=self._current_epoch, reason=reason)
        if self.channel.run_open:
            self.channel.emit_terminal(event)
        return event


__all__ = ["DriverConfig", "DriverState", "TrainingDriver"]
