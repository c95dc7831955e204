"""Feed-forward model and the builder that stacks it from parameters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
from loguru import logger

from ..core import activations
from ..core.errors import ConfigurationError
from ..core.parameters import NetworkParameters
from ..core.runtime import NumericRuntime, Tensor
from ..core.types import Array, ModelDescription, TaskFamily
from .losses import REGISTRY as LOSS_REGISTRY
from .losses import Loss
from .optimizers import make_optimizer

INPUT_WIDTHS = {
    TaskFamily.BINARY: 2,
    TaskFamily.REGRESSION: 1,
    TaskFamily.MULTICLASS: 784,
}

HEADS = {
    TaskFamily.BINARY: (1, "sigmoid"),
    TaskFamily.REGRESSION: (1, "linear"),
    TaskFamily.MULTICLASS: (10, "softmax"),
}


@dataclass
class DenseLayer:
    """Fully connected layer ``activation(x @ kernel + bias)``."""

    name: str
    kernel: Tensor
    bias: Tensor
    activation: str

    @property
    def input_width(self) -> int:
        return self.kernel.shape[0]

    @property
    def units(self) -> int:
        return self.kernel.shape[1]

    def pre_activation(self, x: Array) -> Array:
        if x.ndim != 2 or x.shape[1] != self.input_width:
            raise ConfigurationError(
                f"Layer {self.name} expects width {self.input_width}, got shape {x.shape}"
            )
        return x @ self.kernel.data + self.bias.data

    def activate(self, z: Array) -> Array:
        fn, _ = activations.get(self.activation)
        return fn(z)

    def derivative(self, z: Array) -> Array:
        _, deriv = activations.get(self.activation)
        return deriv(z)

    def apply(self, x: Tensor) -> Tensor:
        """Run this layer alone on ``x``; the result is a new runtime tensor."""

        return x.runtime.tensor(self.activate(self.pre_activation(x.data)), name=f"{self.name}/out")

    def tensors(self) -> List[Tensor]:
        return [self.kernel, self.bias]


class FeedForwardModel:
    """Sequential stack of dense layers with an attached loss and optimizer."""

    def __init__(
        self,
        runtime: NumericRuntime,
        layers: Sequence[DenseLayer],
        family: TaskFamily,
        loss: Loss,
        optimizer,
    ) -> None:
        if not layers:
            raise ConfigurationError("A model needs at least one layer")
        self.runtime = runtime
        self.layers = list(layers)
        self.family = family
        self.loss = loss
        self.optimizer = optimizer
        self.stop_training = False
        self._disposed = False
        self.optimizer.init(runtime, self.parameters())

    # ------------------------------------------------------------------
    # Introspection

    @property
    def input_width(self) -> int:
        return self.layers[0].input_width

    @property
    def output_width(self) -> int:
        return self.layers[-1].units

    @property
    def disposed(self) -> bool:
        return self._disposed

    def parameters(self) -> List[Tensor]:
        return [t for layer in self.layers for t in layer.tensors()]

    @property
    def num_tensors(self) -> int:
        """Tensors owned for the model's lifetime (parameters and optimizer slots)."""

        return len(self.parameters()) + len(self.optimizer.state())

    def parameter_count(self) -> int:
        return int(sum(int(np.prod(t.shape)) for t in self.parameters()))

    def describe(self) -> ModelDescription:
        dims = [self.input_width] + [layer.units for layer in self.layers]
        return ModelDescription(
            layer_dims=dims,
            activations=[layer.activation for layer in self.layers],
            parameter_count=self.parameter_count(),
        )

    # ------------------------------------------------------------------
    # Numerics

    def forward(self, inputs: Array) -> tuple[Array, list[tuple[Array, Array]]]:
        cache: list[tuple[Array, Array]] = []
        x = inputs
        for layer in self.layers:
            z = layer.pre_activation(x)
            cache.append((x, z))
            x = layer.activate(z)
        return x, cache

    def predict(self, inputs: Tensor) -> Tensor:
        outputs, _ = self.forward(inputs.data)
        return self.runtime.tensor(outputs, name="predictions")

    def train_step(self, inputs: Array, targets: Array) -> tuple[float, Array]:
        """One optimizer update on a mini-batch; returns the loss and the outputs."""

        outputs, cache = self.forward(inputs)
        loss_value, delta = self.loss(outputs, targets)
        batch = inputs.shape[0]
        grads: list[Array] = []
        last_idx = len(self.layers) - 1
        for idx in range(last_idx, -1, -1):
            layer = self.layers[idx]
            layer_input, z = cache[idx]
            if idx != last_idx:
                delta = delta * layer.derivative(z)
            grads.append(delta.sum(axis=0) / batch)
            grads.append(layer_input.T @ delta / batch)
            if idx > 0:
                delta = delta @ layer.kernel.data.T
        grads.reverse()
        self.optimizer.step(self.parameters(), grads)
        return loss_value, outputs

    # ------------------------------------------------------------------
    # Lifetime

    def dispose(self) -> None:
        if self._disposed:
            return
        self.optimizer.dispose()
        for tensor in self.parameters():
            tensor.dispose()
        self._disposed = True
        logger.debug("Disposed model; {} tensor(s) still live", self.runtime.num_tensors)


def _glorot_uniform(rng: np.random.Generator, fan_in: int, fan_out: int) -> Array:
    limit = np.sqrt(6.0 / (fan_in + fan_out))
    return rng.uniform(-limit, limit, size=(fan_in, fan_out))


def build_model(
    parameters: NetworkParameters,
    family: TaskFamily,
    runtime: NumericRuntime,
    *,
    input_width: int | None = None,
    optimizer: str = "adam",
    loss: str = "auto",
    seed: int | None = None,
) -> FeedForwardModel:
    """Stack ``parameters.layer_count`` hidden layers plus the family's head."""

    rng = np.random.default_rng(seed)
    width = INPUT_WIDTHS[family] if input_width is None else int(input_width)
    head_units, head_activation = HEADS[family]
    widths = list(parameters.neurons_per_layer) + [head_units]
    layer_activations = [parameters.activation] * parameters.layer_count + [head_activation]

    layers: list[DenseLayer] = []
    fan_in = width
    for idx, (units, activation) in enumerate(zip(widths, layer_activations)):
        name = f"dense_{idx}" if idx < parameters.layer_count else "head"
        kernel = runtime.keep(runtime.tensor(_glorot_uniform(rng, fan_in, units), name=f"{name}/kernel"))
        bias = runtime.keep(runtime.zeros((units,), name=f"{name}/bias"))
        layers.append(DenseLayer(name=name, kernel=kernel, bias=bias, activation=activation))
        fan_in = units

    model = FeedForwardModel(
        runtime,
        layers,
        family,
        LOSS_REGISTRY.resolve(loss, family=family),
        make_optimizer(optimizer, parameters.learning_rate),
    )
    logger.debug(
        "Built {} model with dims {} ({} parameters)",
        family.value,
        model.describe().layer_dims,
        model.parameter_count(),
    )
    return model


__all__ = ["DenseLayer", "FeedForwardModel", "HEADS", "INPUT_WIDTHS", "build_model"]
