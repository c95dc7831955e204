import json
from pathlib import Path

import pytest

from netplayground.training import pipelines


def _config(run_dir, seed=5):
    return {
        "data": {"name": "regression", "options": {"samples": 48}},
        "model": {"layers": 2, "hidden": [6, 6], "activation": "tanh"},
        "train": {
            "epochs": 7,
            "batch_size": 16,
            "lr": 0.02,
            "seed": seed,
            "chunk_size": 3,
            "run_dir": str(run_dir),
            "enable_plots": False,
        },
    }


def test_pipeline_produces_run_result(tmp_path):
    result = pipelines.run_pipeline(_config(tmp_path / "run"))
    assert result.status == "completed"
    assert result.epochs == 7
    assert Path(result.metrics_path).exists()
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["dataset"] == {"name": "regression", "samples": 48, "seed": 5}
    assert manifest["config"]["resolved_parameters"]["neurons_per_layer"] == [6, 6]
    assert (tmp_path / "run" / "config.json").exists()
    assert not (tmp_path / "run" / "curves.png").exists()


def test_pipeline_is_deterministic_for_a_seed(tmp_path):
    first = pipelines.run_pipeline(_config(tmp_path / "a"))
    second = pipelines.run_pipeline(_config(tmp_path / "b"))
    assert first.final_loss == pytest.approx(second.final_loss)
    assert first.final_accuracy == pytest.approx(second.final_accuracy)


def test_presets_are_complete_and_copied():
    for name, preset in pipelines.presets().items():
        assert {"data", "model", "train"} <= set(preset), name
    loaded = pipelines.load_preset("xor")
    loaded["train"]["epochs"] = 1
    assert pipelines.load_preset("xor")["train"]["epochs"] == 200


def test_yaml_preset_is_loaded():
    preset = pipelines.load_preset("circle-tanh")
    params = pipelines.parameters_from_config(preset)
    assert params.neurons_per_layer == (12, 8, 4)
    assert params.activation == "tanh"


def test_unknown_preset_raises():
    with pytest.raises(KeyError):
        pipelines.load_preset("nope")
