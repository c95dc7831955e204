import json
from pathlib import Path

import pytest

from cli.main import main


def test_cli_circle_run_writes_artifacts(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(
        [
            "--preset",
            "circle",
            "--epochs",
            "6",
            "--samples",
            "60",
            "--run-dir",
            "out",
            "--enable-plots",
            "--log-level",
            "WARNING",
        ]
    )
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["status"] == "completed"
    assert payload["epochs"] == 6

    run_dir = Path("out")
    lines = [json.loads(line) for line in (run_dir / "metrics.jsonl").read_text().splitlines() if line]
    assert [line["epoch"] for line in lines[:-1]] == list(range(6))
    assert lines[-1]["status"] == "completed"
    assert {"loss", "accuracy", "sha", "seed", "task"} <= set(lines[0])
    assert (run_dir / "metrics.csv").read_text().splitlines()[0] == "accuracy,epoch,loss"
    assert (run_dir / "curves.png").exists()
    assert (run_dir / "boundary.png").exists()
    manifest = json.loads((run_dir / "manifest.json").read_text())
    assert manifest["outcome"]["architecture"] == [2, 8, 8, 1]
    assert manifest["config"]["train"]["epochs"] == 6


def test_cli_lists_presets_including_files(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--list-presets"])
    assert excinfo.value.code == 0
    names = capsys.readouterr().out.split()
    assert {"xor", "circle", "regression", "mnist", "circle-tanh"} <= set(names)


def test_cli_config_override_and_dump(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"model": {"layers": 1, "hidden": [4]}, "train": {"epochs": 2}}))
    main(
        [
            "--preset",
            "regression",
            "--config",
            str(override),
            "--run-dir",
            "reg",
            "--dump-config",
            "resolved.json",
            "--log-level",
            "ERROR",
        ]
    )
    resolved = json.loads(Path("resolved.json").read_text())
    assert resolved["model"]["hidden"] == [4]
    assert resolved["train"]["batch_size"] == 16
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["epochs"] == 2
