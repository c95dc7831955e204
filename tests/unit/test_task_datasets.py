import numpy as np
import pytest

from netplayground import data
from netplayground.core.types import TaskFamily
from netplayground.data.loaders import image_standin
from netplayground.data.loaders.toy import circle_labels


def test_xor_is_the_four_corners():
    dataset = data.generate("xor")
    np.testing.assert_array_equal(dataset.inputs, [[0, 0], [0, 1], [1, 0], [1, 1]])
    np.testing.assert_array_equal(dataset.outputs[:, 0], [0, 1, 1, 0])
    assert dataset.task_family is TaskFamily.BINARY


def test_unknown_task_falls_back_to_xor():
    assert data.resolve_task("spiral") == "xor"
    assert data.resolve_task(None) == "xor"
    assert data.generate("spiral").name == "xor"


def test_available_datasets_lists_every_task():
    assert set(data.available_datasets()) == {"circle", "mnist", "regression", "xor"}


@pytest.mark.parametrize("seed, count", [(seed, 1 + (seed * 37) % 300) for seed in range(25)])
def test_circle_label_is_one_inside_radius(seed, count):
    dataset = data.generate("circle", count, seed=seed)
    assert dataset.inputs.shape == (count, 2)
    assert np.all(np.abs(dataset.inputs) <= 1.0)
    points = dataset.inputs.astype(np.float64)
    distance = np.sqrt(points[:, 0] ** 2 + points[:, 1] ** 2)
    clear = np.abs(distance - 0.5) > 1e-5
    expected = (distance < 0.5).astype(np.float32)
    np.testing.assert_array_equal(dataset.outputs[clear, 0], expected[clear])


def test_circle_labels_on_known_points():
    points = np.array([[0.0, 0.0], [0.3, 0.3], [0.4, 0.4], [-0.9, 0.1]])
    np.testing.assert_array_equal(circle_labels(points)[:, 0], [1, 1, 0, 0])


def test_regression_is_noisy_cubic():
    dataset = data.generate("regression", 200, seed=1)
    x = dataset.inputs[:, 0]
    residual = dataset.outputs[:, 0] - x**3
    assert dataset.inputs.shape == (200, 1)
    assert np.all(np.abs(residual) <= 0.1 + 1e-6)


def test_seed_makes_generation_reproducible():
    first = data.generate("circle", 50, seed=7)
    second = data.generate("circle", 50, seed=7)
    np.testing.assert_array_equal(first.inputs, second.inputs)


def test_image_standin_shapes_and_ranges():
    dataset = data.generate("mnist", 12, seed=0)
    assert dataset.inputs.shape == (12, 784)
    assert dataset.outputs.shape == (12, 10)
    assert dataset.inputs.min() >= 0.0 and dataset.inputs.max() <= 0.5
    np.testing.assert_array_equal(dataset.outputs.sum(axis=1), np.ones(12))


def test_image_standin_falls_back_to_blank_images(monkeypatch):
    def _broken(rng, count):
        raise MemoryError("no room")

    monkeypatch.setattr(image_standin, "_pixels", _broken)
    dataset = data.generate("mnist", 5, seed=0)
    assert dataset.inputs.shape == (5, 784)
    assert not dataset.inputs.any()
    np.testing.assert_array_equal(dataset.outputs.sum(axis=1), np.ones(5))


def test_dataset_arrays_are_read_only():
    dataset = data.generate("xor")
    with pytest.raises(ValueError):
        dataset.inputs[0, 0] = 5.0


def test_non_positive_sample_count_is_rejected():
    with pytest.raises(ValueError):
        data.generate("circle", 0)
