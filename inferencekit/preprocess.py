"""Image preprocessing into model input tensors."""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image

from .tensors import (
    ConversionOutput,
    DeserializationError,
    Status,
    Tensor,
    ValueType,
    f32_to_bytes,
)

_log = logging.getLogger(__name__)

_MEAN = np.array([0.485, 0.456, 0.406], dtype=np.float32)
_STD = np.array([0.229, 0.224, 0.225], dtype=np.float32)

# Modes whose decoded bytes are kept as they are; others are expanded.
_NATIVE_MODES = {"L", "LA", "RGB", "RGBA", "I;16"}


def _load_image(raw_data: bytes) -> Image.Image:
    """Decode an image from memory, raising DeserializationError on failure."""
    try:
        image = Image.open(io.BytesIO(bytes(raw_data)))
        image.load()
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise DeserializationError(str(exc)) from exc
    return image


def _native(image: Image.Image) -> Image.Image:
    """Expand palette, bilevel and other modes into plain luma or colour."""
    if image.mode in _NATIVE_MODES:
        return image
    if image.mode == "1":
        return image.convert("L")
    if image.mode == "P" and "transparency" in image.info:
        return image.convert("RGBA")
    return image.convert("RGB")


def _resize(image: Image.Image, height: int, width: int) -> Image.Image:
    return image.resize((width, height), Image.Resampling.BILINEAR)


def preprocess_imagenet(raw_data: bytes, height: int, width: int) -> bytes:
    """Resize to ``width`` x ``height`` and normalise into NCHW f32 bytes.

    Pixel values are scaled to [0, 1] and each channel is normalised with the
    ImageNet mean and standard deviation.
    """
    image = _resize(_load_image(raw_data).convert("RGBA"), height, width)
    pixels = np.asarray(image, dtype=np.float32)[:, :, :3] / 255.0
    normalised = (pixels - _MEAN) / _STD
    chw = np.transpose(normalised, (2, 0, 1)).astype(np.float32)
    return f32_to_bytes(np.ascontiguousarray(chw).reshape(-1))


def preprocess_rgb8(raw_data: bytes, height: int, width: int) -> bytes:
    """Resize to ``width`` x ``height`` and return interleaved RGB8 bytes."""
    _log.debug("preprocess() - entry point")
    image = _resize(_load_image(raw_data).convert("RGB"), height, width)
    return image.tobytes()


def preprocess_mnist(raw_data: bytes, height: int, width: int) -> bytes:
    """Decode the image and return its pixel bytes at the original size.

    A resized copy is made only to report its dimensions.
    """
    _log.debug("preprocess() - entry point")
    image = _native(_load_image(raw_data))
    _log.debug("raw_image color type: %s", image.mode)
    resized = _resize(image, height, width)
    _log.debug("resized image: %s", resized.size)
    return image.tobytes()


class ImagenetPreprocessor:
    """Turns encoded images into normalised 1x3x224x224 f32 tensors."""

    height = 224
    width = 224
    channels = 3

    def convert(self, data: bytes) -> ConversionOutput:
        converted = preprocess_imagenet(data, self.height, self.width)
        tensor = Tensor(
            value_types=[ValueType.VALUE_F32],
            dimensions=[1, self.channels, self.height, self.width],
            data=converted,
            flags=0,
        )
        return ConversionOutput(result=Status(), tensor=tensor)


class Rgb8Preprocessor:
    """Turns encoded images into 224x224 RGB8 tensors for quantized models."""

    height = 224
    width = 224
    channels = 3

    def convert(self, data: bytes) -> ConversionOutput:
        _log.debug("convert() - BEFORE conversion")
        converted = preprocess_rgb8(data, self.height, self.width)
        _log.debug("convert() - AFTER conversion")
        tensor = Tensor(
            value_types=[ValueType.VALUE_F32],
            dimensions=[1, self.channels, self.height, self.width],
            data=converted,
            flags=0,
        )
        return ConversionOutput(result=Status(), tensor=tensor)


class MnistPreprocessor:
    """Turns encoded digit images into tensors for an MNIST model."""

    resize_height = 28
    resize_width = 28
    dimensions = (1, 1, 224, 224)

    def convert(self, data: bytes) -> ConversionOutput:
        _log.debug("convert() - BEFORE conversion")
        converted = preprocess_mnist(data, self.resize_height, self.resize_width)
        _log.debug("convert() - AFTER conversion")
        tensor = Tensor(
            value_types=[ValueType.VALUE_F32],
            dimensions=list(self.dimensions),
            data=converted,
            flags=0,
        )
        return ConversionOutput(result=Status(), tensor=tensor)