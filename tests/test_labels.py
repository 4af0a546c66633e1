import pytest

from inferencekit.labels import onnx_labels, tflite_labels


def test_onnx_label_count():
    assert len(onnx_labels()) == 1000


def test_tflite_label_count():
    assert len(tflite_labels()) == 1001


def test_onnx_first_and_last():
    labels = onnx_labels()
    assert labels[0] == "1  tench, Tinca tinca"
    assert labels[-1] == "1000  toilet tissue, toilet paper, bathroom tissue"


def test_tflite_starts_with_background():
    assert tflite_labels()[0] == "0  background"


def test_tflite_rest_matches_onnx():
    assert tflite_labels()[1:] == onnx_labels()


@pytest.mark.parametrize("labels, start", [(onnx_labels(), 1), (tflite_labels(), 0)])
def test_lines_are_numbered_in_order(labels, start):
    numbers = [int(line.split("  ", 1)[0]) for line in labels]
    assert numbers == list(range(start, start + len(labels)))


def test_every_line_has_a_name():
    for line in tflite_labels():
        number, name = line.split("  ", 1)
        assert number.isdigit()
        assert name.strip() == name
        assert name


def test_boundary_between_halves():
    labels = onnx_labels()
    assert labels[499] == "500  cleaver, meat cleaver, chopper"
    assert labels[500] == "501  cliff dwelling"


def test_labels_are_stable_between_calls():
    first_onnx = onnx_labels()
    second_onnx = onnx_labels()
    assert list(second_onnx) == list(first_onnx)
    assert second_onnx[0] == "1  tench, Tinca tinca"
    assert len(second_onnx) == 1000

    first_tflite = tflite_labels()
    second_tflite = tflite_labels()
    assert list(second_tflite) == list(first_tflite)
    assert second_tflite[0] == "0  background"
    assert len(second_tflite) == 1001