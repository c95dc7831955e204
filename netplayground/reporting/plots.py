"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from ..core.types import EpochMetrics
from ..inference.boundary import BoundaryGrid


def _pyplot():
    import matplotlib

    matplotlib.use("Agg", force=True)
    import matplotlib.pyplot as plt  # imported lazily for headless safety

    return plt


class PlotAdapter:
    """Collect epoch metrics and, when enabled, draw loss and accuracy curves."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: EpochMetrics) -> None:
        if not self.enable_plots:
            return
        self._history.append((epoch, metrics.loss, metrics.accuracy))

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        plt = _pyplot()
        epochs, losses, accuracies = zip(*self._history)
        fig, (loss_ax, acc_ax) = plt.subplots(1, 2, figsize=(10, 4))
        loss_ax.plot(epochs, losses, color="tab:red")
        loss_ax.set_xlabel("Epoch")
        loss_ax.set_ylabel("Loss")
        loss_ax.set_title("Training Loss")
        acc_ax.plot(epochs, accuracies, color="tab:green")
        acc_ax.set_xlabel("Epoch")
        acc_ax.set_ylabel("Accuracy")
        acc_ax.set_title("Training Accuracy")
        fig.tight_layout()
        plot_path = self.run_dir / "curves.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path


def save_boundary(grid: BoundaryGrid, path: str | Path, *, points=None, labels=None) -> Path:
    """Render a boundary grid, optionally with the training points on top."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    plt = _pyplot()
    fig, ax = plt.subplots(figsize=(5, 5))
    ax.imshow(grid.as_image(), origin="upper", extent=(-1, 1, 1, -1), interpolation="nearest")
    if points is not None:
        colors = None if labels is None else ["tab:green" if v >= 0.5 else "tab:red" for v in labels]
        ax.scatter(points[:, 0], points[:, 1], c=colors, edgecolors="black", s=18)
    ax.set_xlim(-1, 1)
    ax.set_ylim(1, -1)
    ax.set_title("Decision boundary" + (" (placeholder)" if grid.placeholder else ""))
    fig.savefig(path)
    plt.close(fig)
    return path


__all__ = ["PlotAdapter", "save_boundary"]
