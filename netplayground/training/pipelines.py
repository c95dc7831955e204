"""Preset-driven runs: config -> session -> metrics, plots and manifest."""

from __future__ import annotations

import asyncio
import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Mapping

from loguru import logger

from .. import data
from ..core.errors import TrainingFailedError
from ..core.parameters import NetworkParameters
from ..core.types import RunResult, RunStatus
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, HistoryCapture, JsonlSink
from ..reporting.plots import PlotAdapter, save_boundary
from .driver import DriverConfig
from .session import TrainingSession

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "data": {"name": "xor", "options": {}},
        "model": {"layers": 2, "hidden": [8, 8], "activation": "tanh"},
        "train": {
            "epochs": 200,
            "batch_size": 1,
            "lr": 0.05,
            "seed": 0,
            "chunk_size": 5,
            "run_dir": "runs/xor",
            "enable_plots": False,
        },
    },
    "circle": {
        "data": {"name": "circle", "options": {"samples": 500}},
        "model": {"layers": 2, "hidden": [8, 8], "activation": "relu"},
        "train": {
            "epochs": 50,
            "batch_size": 32,
            "lr": 0.01,
            "seed": 0,
            "chunk_size": 5,
            "run_dir": "runs/circle",
            "enable_plots": False,
        },
    },
    "regression": {
        "data": {"name": "regression", "options": {"samples": 200}},
        "model": {"layers": 2, "hidden": [16, 16], "activation": "tanh"},
        "train": {
            "epochs": 50,
            "batch_size": 16,
            "lr": 0.01,
            "seed": 0,
            "chunk_size": 5,
            "run_dir": "runs/regression",
            "enable_plots": False,
        },
    },
    "mnist": {
        "data": {"name": "mnist", "options": {"samples": 100}},
        "model": {"layers": 1, "hidden": [32], "activation": "relu"},
        "train": {
            "epochs": 10,
            "batch_size": 16,
            "lr": 0.01,
            "seed": 0,
            "chunk_size": 5,
            "run_dir": "runs/mnist",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None
_REQUIRED_SECTIONS = {"data", "model", "train"}


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        loaded = yaml.safe_load(text) or {}
    elif suffix == ".json":
        loaded = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(loaded, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    missing = _REQUIRED_SECTIONS - set(loaded)
    if missing:
        raise KeyError(f"Preset {path.name} is missing required sections: {', '.join(sorted(missing))}")
    return loaded


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                found[file.stem] = json.loads(json.dumps(_read_preset_file(file)))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def parameters_from_config(config: Mapping[str, object]) -> NetworkParameters:
    """Merge the ``model`` and ``train`` sections into one parameter record."""

    merged = dict(config.get("model", {}))
    train_cfg = config.get("train", {})
    for key in ("epochs", "batch_size", "lr", "learning_rate"):
        if key in train_cfg:
            merged[key] = train_cfg[key]
    return NetworkParameters.from_mapping(merged)


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train one model as described by ``config`` and write its artifacts."""

    data_cfg = dict(config.get("data", {}))
    train_cfg = dict(config.get("train", {}))
    options = dict(data_cfg.get("options", {}))

    task = data.resolve_task(data_cfg.get("name"))
    parameters = parameters_from_config(config)
    seed = train_cfg.get("seed")
    seed = int(seed) if seed is not None else None
    sample_count = options.get("samples")
    driver_config = DriverConfig(
        chunk_size=int(train_cfg.get("chunk_size", DriverConfig.chunk_size)),
        yield_seconds=float(train_cfg.get("yield_seconds", DriverConfig.yield_seconds)),
    )
    run_dir = _resolve_run_dir(train_cfg, task)
    run_dir.mkdir(parents=True, exist_ok=True)
    enable_plots = bool(train_cfg.get("enable_plots", False))

    logger.info(
        "Run {}: task={} layers={} neurons={} lr={} epochs={} batch={} activation={}",
        run_dir,
        task,
        parameters.layer_count,
        list(parameters.neurons_per_layer),
        parameters.learning_rate,
        parameters.epochs,
        parameters.batch_size,
        parameters.activation,
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", task=task, seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    capture = HistoryCapture()
    plots = PlotAdapter(run_dir, enable_plots=enable_plots)

    with TrainingSession(config=driver_config, seed=seed) as session:
        for observer in (jsonl, csv_sink, capture, plots):
            session.subscribe(observer)
        try:
            asyncio.run(session.start(parameters, task, sample_count=sample_count))
        except TrainingFailedError as exc:
            logger.error("Run {} failed: {}", run_dir, exc.reason)
        description = session.describe()
        if enable_plots:
            plots.close()
            if session.strategy is not None and session.strategy.two_dimensional:
                dataset = session.dataset
                save_boundary(
                    session.predict_grid(),
                    run_dir / "boundary.png",
                    points=dataset.inputs if dataset is not None else None,
                    labels=dataset.outputs[:, 0] if dataset is not None else None,
                )

    terminal = capture.terminal
    status = terminal.status.value if terminal is not None else RunStatus.FAILED.value
    last = capture.last
    outcome = {
        "status": status,
        "epochs_completed": terminal.epochs_completed if terminal is not None else 0,
        "reason": terminal.reason if terminal is not None else None,
        "architecture": description.layer_dims if description is not None else None,
        "parameter_count": description.parameter_count if description is not None else None,
    }
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=_safe_config(config, parameters),
        dataset={"name": task, "samples": sample_count, "seed": seed},
        outcome=outcome,
    )
    (run_dir / "config.json").write_text(json.dumps(_safe_config(config, parameters), indent=2))

    return RunResult(
        status=status,
        epochs=len(capture.history),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        final_loss=last.loss if last is not None else None,
        final_accuracy=last.accuracy if last is not None else None,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], task: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / task


def _safe_config(config: Mapping[str, object], parameters: NetworkParameters) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config))
    copied["resolved_parameters"] = parameters.to_dict()
    return copied


__all__ = ["load_preset", "parameters_from_config", "presets", "run_pipeline"]
