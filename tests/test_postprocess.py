import math

import pytest

from inferencekit.labels import onnx_labels, tflite_labels
from inferencekit.postprocess import (
    ImagenetPostprocessor,
    MnistPostprocessor,
    get_onnx_probabilities,
    get_tflite_probabilities,
    max_by_index,
    softmax,
)
from inferencekit.tensors import (
    InferenceOutput,
    InvalidParameterError,
    RpcError,
    Status,
    Tensor,
    f32_to_bytes,
)


def _output(values, error=None):
    return InferenceOutput(result=Status(error), tensor=Tensor(data=f32_to_bytes(values)))


def _scores(size, peaks):
    values = [0.0] * size
    for index, value in peaks.items():
        values[index] = value
    return values


def test_softmax_sums_to_one_and_keeps_order():
    result = softmax([1.0, 2.0, 3.0, 0.5])
    assert math.isclose(sum(result), 1.0, rel_tol=1e-5)
    assert result[2] > result[1] > result[0] > result[3]


def test_softmax_of_equal_values_is_uniform():
    result = softmax([2.0] * 4)
    assert result == pytest.approx([1 / 4] * 4)


def test_onnx_probabilities_sorted_descending():
    ranked = get_onnx_probabilities(_scores(1000, {7: 5.0, 3: 4.0}))
    assert len(ranked) == 1000
    assert [index for index, _ in ranked[:2]] == [7, 3]
    probs = [p for _, p in ranked]
    assert probs == sorted(probs, reverse=True)
    assert math.isclose(sum(probs), 1.0, rel_tol=1e-4)


def test_tflite_probabilities_keep_raw_values():
    ranked = get_tflite_probabilities(_scores(1001, {10: 0.75, 20: 0.25}))
    assert ranked[0] == (10, 0.75)
    assert ranked[1] == (20, 0.25)


def test_probabilities_reject_wrong_length():
    with pytest.raises(InvalidParameterError):
        get_onnx_probabilities([0.0] * 1001)
    with pytest.raises(InvalidParameterError):
        get_tflite_probabilities([0.0] * 1000)


def test_max_by_index_prefers_last_on_ties():
    assert max_by_index([1.0, 3.0, 3.0]) == 2


def test_max_by_index_empty():
    assert max_by_index([]) is None


def test_imagenet_onnx_top_five():
    values = _scores(1000, {5: 9.0, 1: 8.0, 2: 7.0, 3: 6.0, 4: 5.0})
    matches = ImagenetPostprocessor().postprocess(_output(values))
    labels = onnx_labels()
    assert [m.label for m in matches] == [labels[i] for i in (5, 1, 2, 3, 4)]
    assert matches[0].label.startswith("6  electric ray")
    probs = [m.probability for m in matches]
    assert probs == sorted(probs, reverse=True)
    assert all(0.0 < p < 1.0 for p in probs)


def test_imagenet_tflite_top_match():
    values = _scores(1001, {3: 0.5, 0: 0.25})
    matches = ImagenetPostprocessor().postprocess(_output(values))
    assert len(matches) == 5
    assert matches[0].label == tflite_labels()[3]
    assert matches[0].label.startswith("3  great white shark")
    assert matches[0].probability == 0.5
    assert matches[1].label == "0  background"


def test_imagenet_rejects_error_status_before_decoding():
    output = InferenceOutput(result=Status("model failed"), tensor=Tensor(data=b"\x00\x01"))
    with pytest.raises(InvalidParameterError, match="model failed"):
        ImagenetPostprocessor().postprocess(output)


def test_imagenet_rejects_unsupported_size():
    with pytest.raises(RpcError, match="unsupported output size"):
        ImagenetPostprocessor().postprocess(_output([0.1] * 10))


def test_imagenet_rejects_misaligned_data():
    output = InferenceOutput(result=Status(), tensor=Tensor(data=b"\x00" * 4001))
    with pytest.raises(RpcError):
        ImagenetPostprocessor().postprocess(output)


def test_mnist_picks_best_digit():
    matches = MnistPostprocessor().postprocess(_output([0.1, 0.9, 0.3]))
    assert len(matches) == 1
    assert matches[0].label == "1"
    assert matches[0].probability == pytest.approx(0.9)


def test_mnist_error_status():
    with pytest.raises(InvalidParameterError, match="boom"):
        MnistPostprocessor().postprocess(_output([0.5], error="boom"))


def test_mnist_decodes_before_checking_status():
    output = InferenceOutput(result=Status("boom"), tensor=Tensor(data=b"\x00" * 5))
    with pytest.raises(RpcError) as excinfo:
        MnistPostprocessor().postprocess(output)
    assert type(excinfo.value) is RpcError


def test_mnist_empty_tensor():
    with pytest.raises(RpcError, match="no values"):
        MnistPostprocessor().postprocess(_output([]))