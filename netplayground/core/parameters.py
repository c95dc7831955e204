"""Network parameter records handed to the core by the controls."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

from .errors import ConfigurationError

DEFAULT_NEURONS = 8
MAX_NEURONS = 32
BATCH_SIZES = (1, 8, 16, 32, 64)
ACTIVATIONS = ("relu", "sigmoid", "tanh")


@dataclass(frozen=True)
class NetworkParameters:
    """Immutable configuration snapshot.

    ``neurons_per_layer`` always has exactly ``layer_count`` entries; use
    :meth:`with_layer_count` to change depth so the list is resized with it.
    """

    layer_count: int = 2
    neurons_per_layer: Tuple[int, ...] = field(default=(8, 8))
    learning_rate: float = 0.01
    epochs: int = 50
    batch_size: int = 32
    activation: str = "relu"

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "neurons_per_layer", tuple(int(n) for n in self.neurons_per_layer)
        )
        validate(self)

    def with_layer_count(self, layer_count: int) -> "NetworkParameters":
        """Return a copy with ``layer_count`` layers, truncating or padding with 8."""

        neurons = resize_neurons(self.neurons_per_layer, layer_count)
        return dataclasses.replace(
            self, layer_count=layer_count, neurons_per_layer=neurons
        )

    def with_neurons(self, layer_index: int, neurons: int) -> "NetworkParameters":
        if not 0 <= layer_index < self.layer_count:
            raise ConfigurationError(
                f"Layer index {layer_index} outside 0..{self.layer_count - 1}"
            )
        updated = list(self.neurons_per_layer)
        updated[layer_index] = neurons
        return dataclasses.replace(self, neurons_per_layer=tuple(updated))

    def replace(self, **changes: Any) -> "NetworkParameters":
        if "layer_count" in changes and "neurons_per_layer" not in changes:
            resized = self.with_layer_count(int(changes.pop("layer_count")))
            return dataclasses.replace(resized, **changes)
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        payload = dataclasses.asdict(self)
        payload["neurons_per_layer"] = list(self.neurons_per_layer)
        return payload

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "NetworkParameters":
        """Build parameters from a config section, tolerating a missing neuron list."""

        defaults = cls()
        layer_count = int(config.get("layer_count", config.get("layers", defaults.layer_count)))
        neurons = config.get("neurons_per_layer", config.get("hidden"))
        if neurons is None:
            neurons = resize_neurons(defaults.neurons_per_layer, layer_count)
        return cls(
            layer_count=layer_count,
            neurons_per_layer=tuple(int(n) for n in neurons),
            learning_rate=float(config.get("learning_rate", config.get("lr", defaults.learning_rate))),
            epochs=int(config.get("epochs", defaults.epochs)),
            batch_size=int(config.get("batch_size", defaults.batch_size)),
            activation=str(config.get("activation", defaults.activation)),
        )


def resize_neurons(neurons: Tuple[int, ...], layer_count: int) -> Tuple[int, ...]:
    if layer_count < 1:
        raise ConfigurationError("layer_count must be >= 1")
    current = list(neurons[:layer_count])
    current.extend(DEFAULT_NEURONS for _ in range(layer_count - len(current)))
    return tuple(current)


def validate(params: NetworkParameters) -> None:
    if params.layer_count < 1:
        raise ConfigurationError("layer_count must be >= 1")
    if len(params.neurons_per_layer) != params.layer_count:
        raise ConfigurationError(
            f"neurons_per_layer has {len(params.neurons_per_layer)} entries "
            f"for {params.layer_count} layers"
        )
    for idx, neurons in enumerate(params.neurons_per_layer):
        if not 1 <= neurons <= MAX_NEURONS:
            raise ConfigurationError(
                f"Layer {idx} has {neurons} neurons; expected 1..{MAX_NEURONS}"
            )
    if not 0.0 < params.learning_rate <= 1.0:
        raise ConfigurationError("learning_rate must be in (0, 1]")
    if params.epochs < 1:
        raise ConfigurationError("epochs must be >= 1")
    if params.batch_size not in BATCH_SIZES:
        raise ConfigurationError(
            f"batch_size must be one of {BATCH_SIZES}, got {params.batch_size}"
        )
    if params.activation not in ACTIVATIONS:
        raise ConfigurationError(
            f"Unknown activation {params.activation!r}. Available: {', '.join(ACTIVATIONS)}"
        )


__all__ = [
    "ACTIVATIONS",
    "BATCH_SIZES",
    "DEFAULT_NEURONS",
    "NetworkParameters",
    "resize_neurons",
    "validate",
]
