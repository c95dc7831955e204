import pytest

from netplayground.core.errors import ConfigurationError
from netplayground.core.parameters import NetworkParameters, resize_neurons


def test_defaults_match_initial_controls():
    params = NetworkParameters()
    assert params.layer_count == 2
    assert params.neurons_per_layer == (8, 8)
    assert params.learning_rate == pytest.approx(0.01)
    assert params.epochs == 50
    assert params.batch_size == 32
    assert params.activation == "relu"


def test_shrinking_layer_count_keeps_leading_entries():
    params = NetworkParameters(layer_count=3, neurons_per_layer=(4, 16, 2))
    shrunk = params.with_layer_count(1)
    assert shrunk.layer_count == 1
    assert shrunk.neurons_per_layer == (4,)


def test_growing_layer_count_pads_with_eight():
    params = NetworkParameters(layer_count=1, neurons_per_layer=(5,))
    grown = params.with_layer_count(3)
    assert grown.neurons_per_layer == (5, 8, 8)


def test_replace_resizes_neurons_with_layer_count():
    params = NetworkParameters().replace(layer_count=3, learning_rate=0.1)
    assert params.neurons_per_layer == (8, 8, 8)
    assert params.learning_rate == pytest.approx(0.1)


def test_with_neurons_updates_single_layer():
    params = NetworkParameters().with_neurons(1, 20)
    assert params.neurons_per_layer == (8, 20)
    with pytest.raises(ConfigurationError):
        params.with_neurons(2, 4)


@pytest.mark.parametrize(
    "changes",
    [
        {"layer_count": 0, "neurons_per_layer": ()},
        {"neurons_per_layer": (8,)},
        {"neurons_per_layer": (8, 64)},
        {"learning_rate": 0.0},
        {"epochs": 0},
        {"batch_size": 3},
        {"activation": "gelu"},
    ],
)
def test_invalid_parameters_are_rejected(changes):
    with pytest.raises(ConfigurationError):
        NetworkParameters(**changes)


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        NetworkParameters(batch_size=7)


def test_from_mapping_accepts_config_aliases():
    params = NetworkParameters.from_mapping(
        {"layers": 2, "hidden": [4, 6], "lr": 0.05, "epochs": 10, "batch_size": 8, "activation": "tanh"}
    )
    assert params.neurons_per_layer == (4, 6)
    assert params.learning_rate == pytest.approx(0.05)
    assert params.to_dict()["neurons_per_layer"] == [4, 6]


def test_from_mapping_fills_missing_neurons():
    params = NetworkParameters.from_mapping({"layer_count": 3})
    assert params.neurons_per_layer == (8, 8, 8)


def test_resize_neurons_rejects_zero_layers():
    with pytest.raises(ConfigurationError):
        resize_neurons((8,), 0)
