import io

import numpy as np
import pytest
from PIL import Image

from inferencekit.preprocess import (
    ImagenetPreprocessor,
    MnistPreprocessor,
    Rgb8Preprocessor,
    preprocess_imagenet,
    preprocess_mnist,
    preprocess_rgb8,
)
from inferencekit.tensors import DeserializationError, ValueType, bytes_to_f32


def _png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _solid(color, size=(8, 8), mode="RGB") -> bytes:
    return _png(Image.new(mode, size, color))


def _channels(data: bytes, height: int, width: int) -> np.ndarray:
    return np.array(bytes_to_f32(data), dtype=np.float32).reshape(3, height, width)


def test_imagenet_output_length():
    data = preprocess_imagenet(_solid((0, 0, 0)), 5, 7)
    assert len(data) == 3 * 5 * 7 * 4


def test_imagenet_black_pixel_is_normalised():
    chans = _channels(preprocess_imagenet(_solid((0, 0, 0)), 4, 4), 4, 4)
    assert chans[0, 0, 0] == pytest.approx(-2.1179, abs=1e-3)


def test_imagenet_uniform_image_gives_uniform_channels():
    chans = _channels(preprocess_imagenet(_solid((200, 100, 50)), 6, 6), 6, 6)
    for channel in chans:
        assert np.allclose(channel, channel[0, 0])


def test_imagenet_channels_are_planar_rgb():
    black = _channels(preprocess_imagenet(_solid((0, 0, 0)), 3, 3), 3, 3)
    red = _channels(preprocess_imagenet(_solid((255, 0, 0)), 3, 3), 3, 3)
    assert red[0, 0, 0] > black[0, 0, 0]
    assert red[1, 0, 0] == pytest.approx(black[1, 0, 0])
    assert red[2, 0, 0] == pytest.approx(black[2, 0, 0])


def test_imagenet_brighter_is_larger():
    dark = _channels(preprocess_imagenet(_solid((50, 50, 50)), 2, 2), 2, 2)
    bright = _channels(preprocess_imagenet(_solid((150, 150, 150)), 2, 2), 2, 2)
    assert dark.shape == (3, 2, 2)
    assert bright.shape == (3, 2, 2)
    for bright_value, dark_value in zip(bright.ravel().tolist(), dark.ravel().tolist()):
        assert bright_value > dark_value
    assert float(bright.min()) > float(dark.min())


def test_rgb8_uniform_image():
    data = preprocess_rgb8(_solid((10, 20, 30)), 2, 3)
    assert data == bytes([10, 20, 30]) * 6


def test_rgb8_converts_grayscale_to_rgb():
    data = preprocess_rgb8(_solid(77, mode="L"), 2, 2)
    assert data == bytes([77]) * 12


def test_mnist_returns_original_pixels():
    pixels = np.arange(28 * 28, dtype=np.uint8).reshape(28, 28)
    raw = _png(Image.fromarray(pixels, mode="L"))
    assert preprocess_mnist(raw, 28, 28) == pixels.tobytes()


def test_mnist_keeps_original_size():
    raw = _solid(5, size=(10, 6), mode="L")
    assert len(preprocess_mnist(raw, 28, 28)) == 60


@pytest.mark.parametrize("func", [preprocess_imagenet, preprocess_rgb8, preprocess_mnist])
def test_invalid_data_raises(func):
    with pytest.raises(DeserializationError):
        func(b"not an image", 4, 4)


def test_imagenet_preprocessor_convert():
    output = ImagenetPreprocessor().convert(_solid((1, 2, 3)))
    assert output.result.succeeded
    assert output.tensor.dimensions == [1, 3, 224, 224]
    assert output.tensor.value_types == [ValueType.VALUE_F32]
    assert len(output.tensor.data) == 3 * 224 * 224 * 4


def test_rgb8_preprocessor_convert():
    output = Rgb8Preprocessor().convert(_solid((9, 8, 7)))
    assert output.tensor.dimensions == [1, 3, 224, 224]
    assert output.tensor.data == bytes([9, 8, 7]) * (224 * 224)
    assert output.tensor.flags == 0


def test_mnist_preprocessor_convert():
    raw = _solid(42, size=(28, 28), mode="L")
    output = MnistPreprocessor().convert(raw)
    assert output.result.succeeded
    assert output.tensor.dimensions == [1, 1, 224, 224]
    assert output.tensor.data == bytes([42]) * (28 * 28)


def test_preprocessor_convert_rejects_garbage():
    with pytest.raises(DeserializationError):
        ImagenetPreprocessor().convert(b"\x00\x01\x02")