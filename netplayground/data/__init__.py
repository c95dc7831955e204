"""Dataset provider for netplayground."""

from . import loaders  # noqa: F401  (populates the registry)
from .registry import (
    DEFAULT_TASK,
    TaskSpec,
    available_datasets,
    generate,
    resolve_task,
    task_spec,
)

__all__ = [
    "DEFAULT_TASK",
    "TaskSpec",
    "available_datasets",
    "generate",
    "resolve_task",
    "task_spec",
]
