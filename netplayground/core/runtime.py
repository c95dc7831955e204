"""Tracked numeric buffers with scoped release.

Every array that outlives a single numpy expression is allocated through a
:class:`NumericRuntime` as a :class:`Tensor`.  The runtime counts live tensors
so leaks across repeated train/predict cycles are observable, and
:meth:`NumericRuntime.scope` releases everything allocated inside it unless
the tensor was explicitly kept.
"""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Set, TypeVar

import numpy as np
from loguru import logger

from .errors import RuntimeFault
from .types import Array

T = TypeVar("T")


class Tensor:
    """Handle on a runtime-owned array."""

    __slots__ = ("_runtime", "_data", "_shape", "id", "name")

    def __init__(self, runtime: "NumericRuntime", data: Array, tensor_id: int, name: str = "") -> None:
        self._runtime = runtime
        self._data: Array | None = data
        self._shape = tuple(data.shape)
        self.id = tensor_id
        self.name = name

    @property
    def disposed(self) -> bool:
        return self._data is None

    @property
    def data(self) -> Array:
        if self._data is None:
            raise RuntimeFault(f"Tensor {self.id} ({self.name or 'unnamed'}) has been disposed")
        return self._data

    @property
    def shape(self) -> tuple[int, ...]:
        # Shape stays readable after release.
        return self._shape

    def numpy(self) -> Array:
        """Return a copy that stays valid after the tensor is released."""

        return self.data.copy()

    def assign(self, value: Array) -> None:
        if value.shape != self.data.shape:
            raise RuntimeFault(
                f"Cannot assign shape {value.shape} to tensor of shape {self.data.shape}"
            )
        self._data = np.asarray(value, dtype=self.data.dtype)

    @property
    def runtime(self) -> "NumericRuntime":
        return self._runtime

    def clone(self) -> "Tensor":
        return self._runtime.tensor(self.data.copy(), name=self.name)

    def dispose(self) -> None:
        self._runtime.dispose(self)

    def _release(self) -> None:
        self._data = None

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else f"shape={self.shape}"
        return f"Tensor(id={self.id}, name={self.name!r}, {state})"


class NumericRuntime:
    """Allocator and lifetime tracker for :class:`Tensor` buffers."""

    def __init__(self, dtype: type = np.float32) -> None:
        self.dtype = dtype
        self._ids = itertools.count()
        self._live: Dict[int, Tensor] = {}
        self._scopes: List[List[int]] = []
        self._kept: Set[int] = set()

    @property
    def num_tensors(self) -> int:
        return len(self._live)

    @property
    def scope_depth(self) -> int:
        return len(self._scopes)

    def tensor(self, values: Array, *, name: str = "") -> Tensor:
        data = np.array(values, dtype=self.dtype, copy=True)
        tensor = Tensor(self, data, next(self._ids), name)
        self._live[tensor.id] = tensor
        if self._scopes:
            self._scopes[-1].append(tensor.id)
        return tensor

    def zeros(self, shape: tuple[int, ...], *, name: str = "") -> Tensor:
        return self.tensor(np.zeros(shape, dtype=self.dtype), name=name)

    def keep(self, tensor: Tensor) -> Tensor:
        """Exempt ``tensor`` from release by any scope; only ``dispose`` frees it."""

        self._kept.add(tensor.id)
        return tensor

    def dispose(self, tensor: Tensor) -> None:
        if tensor.disposed:
            return
        self._live.pop(tensor.id, None)
        self._kept.discard(tensor.id)
        tensor._release()

    def dispose_all(self, tensors: List[Tensor]) -> None:
        for tensor in tensors:
            self.dispose(tensor)

    def start_scope(self) -> None:
        self._scopes.append([])

    def end_scope(self, *, survivors: tuple[Tensor, ...] = ()) -> int:
        """Release the innermost scope's tensors; return how many were freed.

        ``survivors`` move to the parent scope instead of being released.
        """

        if not self._scopes:
            raise RuntimeFault("end_scope called without a matching start_scope")
        ids = self._scopes.pop()
        moving = {tensor.id for tensor in survivors}
        released = 0
        for tensor_id in ids:
            if tensor_id in self._kept:
                continue
            if tensor_id in moving:
                if self._scopes:
                    self._scopes[-1].append(tensor_id)
                continue
            tensor = self._live.get(tensor_id)
            if tensor is not None:
                self.dispose(tensor)
                released += 1
        if released:
            logger.debug("Scope released {} tensor(s); {} live", released, self.num_tensors)
        return released

    @contextmanager
    def scope(self) -> Iterator["NumericRuntime"]:
        self.start_scope()
        try:
            yield self
        finally:
            self.end_scope()

    def tidy(self, fn: Callable[[], T]) -> T:
        """Run ``fn`` in a scope; a returned tensor survives into the parent scope."""

        self.start_scope()
        result: object = None
        try:
            result = fn()
            return result  # type: ignore[return-value]
        finally:
            survivors = (result,) if isinstance(result, Tensor) else ()
            self.end_scope(survivors=survivors)


__all__ = ["NumericRuntime", "Tensor"]
