"""Image preprocessing, request routing and result postprocessing for image classifiers."""

__version__ = "0.1.0"

__all__ = [
    "api",
    "labels",
    "labels_high",
    "labels_low",
    "postprocess",
    "preprocess",
    "tensors",
]