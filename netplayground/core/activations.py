"""Activation utilities for netplayground."""

from __future__ import annotations

from typing import Callable, Dict, Tuple

import numpy as np

from .types import Array

ActivationFn = Callable[[Array], Array]


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def relu_deriv(z: Array) -> Array:
    return (z > 0).astype(z.dtype)


def sigmoid(x: Array) -> Array:
    """Numerically stable logistic function."""

    out = np.empty_like(x)
    pos = x >= 0
    out[pos] = 1.0 / (1.0 + np.exp(-x[pos]))
    exp_x = np.exp(x[~pos])
    out[~pos] = exp_x / (1.0 + exp_x)
    return out


def sigmoid_deriv(z: Array) -> Array:
    s = sigmoid(z)
    return s * (1.0 - s)


def tanh(x: Array) -> Array:
    return np.tanh(x)


def tanh_deriv(z: Array) -> Array:
    return 1.0 - np.tanh(z) ** 2


def linear(x: Array) -> Array:
    return x


def linear_deriv(z: Array) -> Array:
    return np.ones_like(z)


def softmax(z: Array) -> Array:
    shifted = z - np.max(z, axis=1, keepdims=True)
    exp = np.exp(shifted)
    return exp / np.sum(exp, axis=1, keepdims=True)


# Head activations (sigmoid, softmax, linear) are paired with a loss whose
# gradient is already taken with respect to the pre-activation, so the
# derivative registered for softmax is never evaluated.
_REGISTRY: Dict[str, Tuple[ActivationFn, ActivationFn]] = {
    "relu": (relu, relu_deriv),
    "sigmoid": (sigmoid, sigmoid_deriv),
    "tanh": (tanh, tanh_deriv),
    "linear": (linear, linear_deriv),
    "softmax": (softmax, linear_deriv),
}


def get(name: str) -> Tuple[ActivationFn, ActivationFn]:
    """Return ``(activation, derivative)`` for ``name``."""

    try:
        return _REGISTRY[name]
    except KeyError as exc:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown activation {name!r}. Available: {available}") from exc


__all__ = [
    "get",
    "linear",
    "relu",
    "relu_deriv",
    "sigmoid",
    "sigmoid_deriv",
    "softmax",
    "tanh",
    "tanh_deriv",
]
