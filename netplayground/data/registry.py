"""Dataset registry keyed by task identifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, MutableMapping

from loguru import logger

from ..core.types import Dataset, TaskFamily

DEFAULT_TASK = "xor"

DatasetFactory = Callable[..., Dataset]


@dataclass(frozen=True)
class TaskSpec:
    """Structural information about a task.

    Attributes
    ----------
    name:
        Task key, e.g. ``"circle"``.
    family:
        Head/loss family used when building a model for the task.
    input_width:
        Feature width of every input vector.
    default_samples:
        Sample count used when the caller does not pass one.
    two_dimensional:
        ``True`` when inputs live in the plane and a decision boundary can be
        drawn.
    """

    name: str
    family: TaskFamily
    input_width: int
    default_samples: int
    two_dimensional: bool = False


_REGISTRY: MutableMapping[str, tuple[TaskSpec, DatasetFactory]] = {}


def register_dataset(
    spec: TaskSpec,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory for ``spec``.

    Usable as a decorator::

        @register_dataset(TaskSpec("xor", TaskFamily.BINARY, 2, 4))
        def make_xor(sample_count, rng):
            ...

    or directly with ``register_dataset(spec, make_xor)``.
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[spec.name] = (spec, func)
        return func

    if factory is not None:
        return _decorator(factory)
    return _decorator


def resolve_task(name: str | None) -> str:
    """Return ``name`` if registered, else the ``xor`` fallback."""

    key = (name or "").strip().lower()
    if key in _REGISTRY:
        return key
    logger.warning("Unknown dataset {!r}; falling back to {!r}", name, DEFAULT_TASK)
    return DEFAULT_TASK


def task_spec(name: str | None) -> TaskSpec:
    return _REGISTRY[resolve_task(name)][0]


def generate(
    task: str | None,
    sample_count: int | None = None,
    *,
    seed: int | None = None,
    **options: Any,
) -> Dataset:
    """Return a fresh :class:`Dataset` for ``task``.

    ``seed`` makes sampled tasks reproducible; without it every call draws
    new points.
    """

    spec, factory = _REGISTRY[resolve_task(task)]
    count = spec.default_samples if sample_count is None else int(sample_count)
    if count < 1:
        raise ValueError("sample_count must be >= 1")
    dataset = factory(count, seed=seed, **options)
    _validate(spec, dataset)
    return dataset


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available task identifiers."""

    return sorted(_REGISTRY)


def _validate(spec: TaskSpec, dataset: Dataset) -> None:
    if dataset.input_width != spec.input_width:
        raise ValueError(
            f"Dataset {spec.name!r} produced width {dataset.input_width}, "
            f"expected {spec.input_width}"
        )
    if dataset.task_family is not spec.family:
        raise ValueError(f"Dataset {spec.name!r} produced family {dataset.task_family}")


__all__ = [
    "DEFAULT_TASK",
    "TaskSpec",
    "available_datasets",
    "generate",
    "register_dataset",
    "resolve_task",
    "task_spec",
]
