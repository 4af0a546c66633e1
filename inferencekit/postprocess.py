"""Turn raw model outputs into labelled classifications."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .labels import onnx_labels, tflite_labels
from .tensors import (
    Classification,
    InferenceOutput,
    InvalidParameterError,
    RpcError,
    bytes_to_f32,
)

ONNX_CLASSES = 1000
TFLITE_CLASSES = 1001
TOP_MATCHES = 5


def softmax(values: Sequence[float]) -> list[float]:
    """Return the softmax of ``values``, computed in 32-bit floats."""
    array = np.asarray(values, dtype=np.float32)
    if array.size == 0:
        return []
    exps = np.exp(array - array.max())
    return (exps / exps.sum(dtype=np.float32)).astype(np.float32).tolist()


def _ranked(values: Sequence[float]) -> list[tuple[int, float]]:
    if any(math.isnan(value) for value in values):
        raise RpcError("cannot rank probabilities that contain NaN")
    return sorted(enumerate(values), key=lambda pair: pair[1], reverse=True)


def _require_length(raw_result: Sequence[float], expected: int) -> None:
    if len(raw_result) != expected:
        raise InvalidParameterError(
            f"expected {expected} output values, got {len(raw_result)}"
        )


def get_onnx_probabilities(raw_result: Sequence[float]) -> list[tuple[int, float]]:
    """Apply softmax to 1000 ONNX logits and rank them, most likely first."""
    _require_length(raw_result, ONNX_CLASSES)
    return _ranked(softmax(raw_result))


def get_tflite_probabilities(raw_result: Sequence[float]) -> list[tuple[int, float]]:
    """Rank 1001 TFLite scores as they are, most likely first."""
    _require_length(raw_result, TFLITE_CLASSES)
    return _ranked([float(value) for value in raw_result])


def max_by_index(values: Sequence[float]) -> int | None:
    """Return the index of the largest value, the last one on ties.

    Values that cannot be compared count as equal. Returns None when empty.
    """
    best_index: int | None = None
    best_value = 0.0
    for index, value in enumerate(values):
        if best_index is None or not best_value > value:
            best_index, best_value = index, value
    return best_index


class ImagenetPostprocessor:
    """Maps MobileNet outputs (ONNX or TFLite) to the five best ImageNet labels."""

    def postprocess(self, output: InferenceOutput) -> list[Classification]:
        if output.result.error is not None:
            raise InvalidParameterError(
                "Invalid input at imagenet postprocessing, due to "
                f"{output.result.error!r}"
            )

        raw_result = bytes_to_f32(output.tensor.data)

        if len(raw_result) == ONNX_CLASSES:
            labels = onnx_labels()
            probabilities = get_onnx_probabilities(raw_result)
        elif len(raw_result) == TFLITE_CLASSES:
            labels = tflite_labels()
            probabilities = get_tflite_probabilities(raw_result)
        else:
            raise RpcError(
                f"unsupported output size {len(raw_result)}: expected "
                f"{ONNX_CLASSES} or {TFLITE_CLASSES} values"
            )

        return [
            Classification(label=labels[index], probability=float(probability))
            for index, probability in probabilities[:TOP_MATCHES]
        ]


class MnistPostprocessor:
    """Maps MNIST model outputs to the single most likely digit."""

    def postprocess(self, output: InferenceOutput) -> list[Classification]:
        values = bytes_to_f32(output.tensor.data)

        if output.result.error is not None:
            raise InvalidParameterError(
                "Invalid input at postprocessing of mnist data due to "
                f"{output.result.error!r}"
            )

        index = max_by_index(values)
        if index is None:
            raise RpcError("the output tensor holds no values")

        return [Classification(label=str(index), probability=float(values[index]))]