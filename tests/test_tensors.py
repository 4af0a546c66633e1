import numpy as np
import pytest

from inferencekit.tensors import (
    Classification,
    ConversionOutput,
    DeserializationError,
    InferenceOutput,
    InvalidParameterError,
    RpcError,
    Status,
    Tensor,
    ValueType,
    bytes_to_f32,
    f32_to_bytes,
)


def test_one_encodes_as_ieee_little_endian():
    assert f32_to_bytes([1.0]) == b"\x00\x00\x80\x3f"


def test_round_trip_exact_values():
    values = [0.0, 1.5, -2.25, 0.5, 1024.0]
    assert bytes_to_f32(f32_to_bytes(values)) == values


def test_encoded_length_is_four_per_value():
    values = [0.25] * 7
    assert len(f32_to_bytes(values)) == 4 * len(values)


def test_accepts_numpy_array_and_generator():
    arr = np.array([1.0, 2.0, 3.0], dtype=np.float64)
    assert f32_to_bytes(arr) == f32_to_bytes(x for x in [1.0, 2.0, 3.0])


def test_empty_data_decodes_to_empty_list():
    assert bytes_to_f32(b"") == []
    assert f32_to_bytes([]) == b""


def test_trailing_bytes_raise():
    with pytest.raises(RpcError, match="data conversion error at offset"):
        bytes_to_f32(f32_to_bytes([1.0]) + b"\x01")


def test_decode_accepts_bytearray():
    payload = bytearray(f32_to_bytes([2.0, -4.0]))
    assert bytes_to_f32(payload) == [2.0, -4.0]


def test_error_hierarchy():
    assert issubclass(InvalidParameterError, RpcError)
    assert issubclass(DeserializationError, RpcError)
    assert str(InvalidParameterError("bad parameter")) == "bad parameter"
    assert str(DeserializationError("bad payload")) == "bad payload"


def test_status_success_and_error():
    assert Status().succeeded is True
    failed = Status(error="boom")
    assert failed.succeeded is False
    assert failed.error == "boom"


def test_tensor_defaults_and_outputs():
    tensor = Tensor(value_types=[ValueType.VALUE_F32], dimensions=[1, 3, 2, 2],
                    data=f32_to_bytes([0.5] * 12))
    assert tensor.flags == 0
    conv = ConversionOutput(result=Status(), tensor=tensor)
    out = InferenceOutput(result=Status(), tensor=conv.tensor)
    assert bytes_to_f32(out.tensor.data) == [0.5] * 12
    assert out.tensor.dimensions == [1, 3, 2, 2]


def test_classification_fields():
    c = Classification(label="7", probability=0.75)
    assert (c.label, c.probability) == ("7", 0.75)