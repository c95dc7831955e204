"""Core numerical primitives for netplayground."""

from . import activations, errors, parameters, runtime, types

__all__ = ["activations", "errors", "parameters", "runtime", "types"]
