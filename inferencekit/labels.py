"""ImageNet label lines for the ONNX and TFLite MobileNet models."""

from __future__ import annotations

from .labels_high import high_labels
from .labels_low import low_labels

_BACKGROUND = "0  background"

_ONNX_LABELS: tuple[str, ...] = low_labels() + high_labels()
_TFLITE_LABELS: tuple[str, ...] = (_BACKGROUND,) + _ONNX_LABELS


def onnx_labels() -> tuple[str, ...]:
    """Return the 1000 ImageNet labels, numbered 1 to 1000, as ``"N  name"``."""
    return _ONNX_LABELS


def tflite_labels() -> tuple[str, ...]:
    """Return the 1001 labels of the quantized model, with ``background`` as 0."""
    return _TFLITE_LABELS