import numpy as np
import pytest

from netplayground.core.errors import ConfigurationError
from netplayground.core.parameters import NetworkParameters
from netplayground.core.runtime import NumericRuntime
from netplayground.core.types import TaskFamily
from netplayground.training.model import build_model
from netplayground.training.tasks import strategy_for
from netplayground.training.trainer import Trainer


def test_build_stacks_hidden_layers_plus_head():
    rt = NumericRuntime()
    params = NetworkParameters(layer_count=3, neurons_per_layer=(4, 6, 2))
    model = build_model(params, TaskFamily.BINARY, rt, seed=0)
    assert len(model.layers) == params.layer_count + 1
    assert [layer.units for layer in model.layers] == [4, 6, 2, 1]
    assert [layer.activation for layer in model.layers] == ["relu", "relu", "relu", "sigmoid"]


def test_describe_reports_dims_and_parameter_count():
    rt = NumericRuntime()
    params = NetworkParameters(layer_count=3, neurons_per_layer=(4, 6, 2))
    description = build_model(params, TaskFamily.BINARY, rt, seed=0).describe()
    assert description.layer_dims == [2, 4, 6, 2, 1]
    assert description.parameter_count == (2 * 4 + 4) + (4 * 6 + 6) + (6 * 2 + 2) + (2 * 1 + 1)


def test_model_owns_parameters_and_adam_slots():
    rt = NumericRuntime()
    model = build_model(NetworkParameters(), TaskFamily.BINARY, rt, seed=0)
    assert model.num_tensors == 3 * 2 * 3
    assert rt.num_tensors == model.num_tensors
    model.dispose()
    assert rt.num_tensors == 0
    assert model.disposed
    assert model.output_width == 1


@pytest.mark.parametrize(
    "task, width, head",
    [("xor", 2, (1, "sigmoid")), ("regression", 1, (1, "linear")), ("mnist", 784, (10, "softmax"))],
)
def test_task_strategy_picks_width_and_head(task, width, head):
    rt = NumericRuntime()
    model = strategy_for(task).build(NetworkParameters(), rt, seed=0)
    assert model.input_width == width
    assert (model.layers[-1].units, model.layers[-1].activation) == head


def test_same_seed_gives_same_weights():
    first = build_model(NetworkParameters(), TaskFamily.BINARY, NumericRuntime(), seed=3)
    second = build_model(NetworkParameters(), TaskFamily.BINARY, NumericRuntime(), seed=3)
    for a, b in zip(first.parameters(), second.parameters()):
        np.testing.assert_array_equal(a.numpy(), b.numpy())


def test_predict_rejects_wrong_width():
    rt = NumericRuntime()
    model = build_model(NetworkParameters(), TaskFamily.BINARY, rt, seed=0)
    with pytest.raises(ConfigurationError):
        model.predict(rt.tensor(np.zeros((3, 5))))


def test_trainer_reports_family_metric_and_decreases_loss():
    rt = NumericRuntime()
    params = NetworkParameters(neurons_per_layer=(16, 16), learning_rate=0.02, activation="tanh")
    model = build_model(params, TaskFamily.REGRESSION, rt, seed=0)
    x = np.linspace(-1, 1, 64).reshape(-1, 1)
    inputs = rt.tensor(x)
    targets = rt.tensor(x**3)
    history = Trainer(model, seed=0).fit(inputs, targets, epochs=30, batch_size=16)
    assert len(history) == 30
    assert set(history.logs[0]) == {"loss", "mse"}
    assert history.logs[-1]["loss"] < history.logs[0]["loss"]


def test_trainer_stops_when_flag_is_set():
    rt = NumericRuntime()
    model = build_model(NetworkParameters(), TaskFamily.BINARY, rt, seed=0)
    inputs = rt.tensor(np.zeros((4, 2)))
    targets = rt.tensor(np.zeros((4, 1)))

    def _stop_after_two(epoch, logs):
        if epoch == 1:
            model.stop_training = True

    history = Trainer(model).fit(inputs, targets, epochs=10, batch_size=8, callbacks=[_stop_after_two])
    assert history.epochs == [0, 1]


def test_sgd_optimizer_has_no_slots():
    rt = NumericRuntime()
    model = build_model(NetworkParameters(), TaskFamily.BINARY, rt, optimizer="sgd", seed=0)
    assert model.num_tensors == 6
    before = model.layers[-1].bias.numpy()
    model.train_step(np.ones((2, 2), dtype=np.float32), np.ones((2, 1), dtype=np.float32))
    assert not np.array_equal(before, model.layers[-1].bias.numpy())
    assert rt.num_tensors == 6
