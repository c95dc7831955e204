import asyncio

import numpy as np
import pytest

from netplayground.core.errors import NetPlaygroundError, TrainingInProgressError
from netplayground.core.parameters import NetworkParameters
from netplayground.core.types import RunStatus
from netplayground.training.driver import DriverConfig
from netplayground.training.session import TrainingSession


def test_start_trains_and_predicts():
    session = TrainingSession(seed=0)
    event = asyncio.run(session.start(NetworkParameters(epochs=5, batch_size=8), "circle", sample_count=40))
    assert event.status is RunStatus.COMPLETED
    assert session.task == "circle"
    assert session.describe().layer_dims == [2, 8, 8, 1]
    assert session.predict(np.zeros((3, 2))).shape == (3, 1)
    assert not session.predict_grid(canvas_size=100, resolution=25).placeholder
    assert session.runtime.num_tensors == session.model.num_tensors
    session.close()
    assert session.runtime.num_tensors == 0


def test_restart_releases_previous_model():
    session = TrainingSession(seed=1)
    asyncio.run(session.start(NetworkParameters(epochs=2, batch_size=8), "xor"))
    first = session.model
    asyncio.run(session.start(NetworkParameters(layer_count=1, neurons_per_layer=(4,), epochs=2, batch_size=8), "xor"))
    assert first.disposed
    assert session.model is not first
    assert session.runtime.num_tensors == session.model.num_tensors


def test_unknown_task_trains_xor():
    session = TrainingSession(seed=0)
    asyncio.run(session.start(NetworkParameters(epochs=1, batch_size=8), "spiral"))
    assert session.task == "xor"
    assert session.dataset.name == "xor"


def test_second_start_needs_preempt():
    session = TrainingSession(config=DriverConfig(chunk_size=5), seed=0)
    long_run = NetworkParameters(epochs=50, batch_size=8)
    short_run = NetworkParameters(epochs=5, batch_size=8)

    async def scenario():
        first = asyncio.create_task(session.start(long_run, "circle", sample_count=40))
        while session.current_epoch < 5:
            await asyncio.sleep(0)
        with pytest.raises(TrainingInProgressError):
            await session.start(short_run, "xor")
        with pytest.raises(TrainingInProgressError):
            session.build(short_run, "xor")
        second = await session.start(short_run, "xor", preempt=True)
        return await first, second

    first_event, second_event = asyncio.run(scenario())
    assert first_event.status is RunStatus.STOPPED
    assert first_event.epochs_completed < 50
    assert second_event.status is RunStatus.COMPLETED
    assert session.task == "xor"
    assert len(session.loss_history) == 5
    assert session.runtime.num_tensors == session.model.num_tensors


def test_predict_without_model_raises_but_grid_is_placeholder():
    session = TrainingSession()
    with pytest.raises(NetPlaygroundError):
        session.predict(np.zeros((1, 2)))
    assert session.predict_grid(canvas_size=40, resolution=10).placeholder
    assert session.describe() is None


def test_context_manager_closes_session():
    with TrainingSession(seed=0) as session:
        asyncio.run(session.start(NetworkParameters(epochs=1, batch_size=8), "regression", sample_count=16))
        runtime = session.runtime
    assert runtime.num_tensors == 0
    assert session.model is None
