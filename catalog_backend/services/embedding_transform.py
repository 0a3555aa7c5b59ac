# Fixed dense projection stack applied to feature vectors
import logging
from typing import List, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# (input width, output width, activation) per layer
DEFAULT_LAYERS: List[Tuple[int, int, str]] = [
    (256, 512, "relu"),
    (512, 256, "relu"),
    (256, 128, "sigmoid"),
]


def _relu(x: np.ndarray) -> np.ndarray:
    return np.maximum(x, 0.0)


def _sigmoid(x: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-x))


_ACTIVATIONS = {"relu": _relu, "sigmoid": _sigmoid}


class EmbeddingTransform:
    """
    Untrained stack of affine + nonlinearity layers (256 -> 512 -> 256 -> 128).

    Weights are Glorot-uniform constants drawn once from a seeded legacy
    RandomState, whose stream is stable across numpy releases, so the same
    seed yields the same embeddings in every deployment. Biases are zero.
    There is no training step; the arrays are read-only after construction.
    """

    def __init__(self, layers: Sequence[Tuple[int, int, str]] = DEFAULT_LAYERS, seed: int = 42):
        if not layers:
            raise ValueError("EmbeddingTransform needs at least one layer")

        rng = np.random.RandomState(seed)
        weights = []
        biases = []
        activations = []
        previous_out = None

        for fan_in, fan_out, activation in layers:
            if activation not in _ACTIVATIONS:
                raise ValueError(f"Unsupported activation: {activation}")
            if previous_out is not None and previous_out != fan_in:
                raise ValueError(f"Layer input {fan_in} does not match previous output {previous_out}")

            limit = np.sqrt(6.0 / (fan_in + fan_out))
            weight = rng.uniform(-limit, limit, size=(fan_in, fan_out))
            bias = np.zeros(fan_out)
            weight.setflags(write=False)
            bias.setflags(write=False)

            weights.append(weight)
            biases.append(bias)
            activations.append(activation)
            previous_out = fan_out

        self._weights = tuple(weights)
        self._biases = tuple(biases)
        self._activations = tuple(activations)
        self.seed = seed
        self.input_width = layers[0][0]
        self.output_width = layers[-1][1]

        logger.info(f"EmbeddingTransform ready: {self.input_width} -> {self.output_width} "
                    f"({len(self._weights)} layers, seed={seed})")

    def apply(self, features: np.ndarray) -> np.ndarray:
        """
        Project one feature vector or a (n, input_width) batch.

        Rows are projected one at a time so a record's embedding never depends
        on which batch it was computed in. All-zero rows map to all-zero rows
        instead of sigmoid(0) = 0.5.
        """
        x = np.asarray(features, dtype=np.float64)
        if x.ndim == 1:
            return self._forward(x)
        if x.ndim != 2:
            raise ValueError(f"Expected a vector or a 2-D batch, got {x.ndim} dimensions")
        if x.shape[0] == 0:
            return np.zeros((0, self.output_width))
        return np.vstack([self._forward(row) for row in x])

    def _forward(self, vector: np.ndarray) -> np.ndarray:
        if vector.shape[0] != self.input_width:
            raise ValueError(f"Expected feature width {self.input_width}, got {vector.shape[0]}")
        if not np.any(vector):
            return np.zeros(self.output_width)

        out = vector
        for weight, bias, activation in zip(self._weights, self._biases, self._activations):
            out = _ACTIVATIONS[activation](out @ weight + bias)
        return out
