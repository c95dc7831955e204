import asyncio

import numpy as np

from netplayground.core.parameters import NetworkParameters
from netplayground.core.types import RunStatus
from netplayground.inference.boundary import should_refresh_boundary
from netplayground.training.session import TrainingSession


def test_xor_converges():
    params = NetworkParameters(
        layer_count=2,
        neurons_per_layer=(8, 8),
        learning_rate=0.05,
        epochs=400,
        batch_size=1,
        activation="tanh",
    )
    refreshes = []

    with TrainingSession(seed=0) as session:

        def _on_epoch(epoch, metrics):
            if should_refresh_boundary(epoch + 1, session.is_training):
                refreshes.append(session.predict_grid(canvas_size=40, resolution=10))

        event = asyncio.run(session.start(params, "xor", on_epoch_end=_on_epoch))
        refreshes.append(session.predict_grid(canvas_size=40, resolution=10))
        predictions = session.predict(np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=np.float32))

        assert event.status is RunStatus.COMPLETED
        assert session.accuracy_history[-1] == 1.0
        assert session.loss_history[-1] < session.loss_history[0]
        assert session.runtime.num_tensors == session.model.num_tensors

    np.testing.assert_array_equal(np.round(predictions[:, 0]), [0, 1, 1, 0])
    assert len(refreshes) == 400 // 5 + 1
