# inferencekit

Building blocks for an image-classification pipeline: turn uploaded images
into model input tensors, route HTTP-style requests to a model you supply,
and turn raw model output into ranked, labelled matches.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `inferencekit.tensors` – the data model shared by every stage:
  `Tensor` (`value_types`, `dimensions`, `data`, `flags`), `ValueType`,
  `Status` (with `error` and `succeeded`), `ConversionOutput`,
  `InferenceOutput`, `Classification`; the errors `RpcError`,
  `InvalidParameterError` and `DeserializationError`; and the
  little-endian float32 helpers `f32_to_bytes` and `bytes_to_f32`
  (the latter raises `RpcError` when the byte count is not a multiple of
  four).
- `inferencekit.preprocess` – image decoding (via Pillow) and resizing
  with bilinear filtering:
  - `ImagenetPreprocessor` / `preprocess_imagenet`: resized to 224×224,
    scaled to `[0, 1]` and normalised per channel with the ImageNet mean
    `(0.485, 0.456, 0.406)` and standard deviation `(0.229, 0.224, 0.225)`,
    laid out channel-first as `1×3×224×224` float32 bytes.
  - `Rgb8Preprocessor` / `preprocess_rgb8`: resized to 224×224 and returned
    as interleaved 8-bit RGB bytes, for quantized models.
  - `MnistPreprocessor` / `preprocess_mnist`: the decoded image's pixel
    bytes at its original size; the tensor is labelled with dimensions
    `[1, 1, 224, 224]`.

  Every `convert(data)` returns a `ConversionOutput` with a successful
  `Status`. Undecodable input raises `DeserializationError`.
- `inferencekit.postprocess` – from model output to matches:
  - `ImagenetPostprocessor.postprocess(output)`: 1000 values are treated as
    ONNX logits (softmax applied, labels `1`–`1000`); 1001 values as TFLite
    scores (used as they are, label `0` is `background`). Returns the five
    best `Classification`s. Any other size raises `RpcError`.
  - `MnistPostprocessor.postprocess(output)`: returns one `Classification`
    whose label is the index of the largest value.
  - helpers `softmax`, `get_onnx_probabilities`, `get_tflite_probabilities`
    and `max_by_index`.

  An `output` whose `Status` carries an error raises `InvalidParameterError`.
- `inferencekit.labels` – `onnx_labels()` (1000 lines) and
  `tflite_labels()` (1001 lines), each line in the form `"N  name"`.
  `inferencekit.labels_low` and `inferencekit.labels_high` hold the two
  halves of the list.
- `inferencekit.api` – `InferenceApi`, `HttpRequest`, `HttpResponse`,
  `InferenceInput`, `choose_model_and_link` and `validate`.

## Example

```python
from inferencekit.preprocess import ImagenetPreprocessor
from inferencekit.postprocess import ImagenetPostprocessor

with open("cat.jpg", "rb") as fh:
    converted = ImagenetPreprocessor().convert(fh.read())

print(converted.tensor.dimensions)   # [1, 3, 224, 224]

# Feed converted.tensor to your model, wrap its result in an
# InferenceOutput, then:
# matches = ImagenetPostprocessor().postprocess(output)
# for match in matches:
#     print(match.label, match.probability)
```

## Request routing

`InferenceApi(predictor, preprocessors=None, postprocessors=None)` takes a
`predictor` callable, called as `predictor(link_name, InferenceInput)` and
returning an `InferenceOutput`. Without explicit mappings the built-in
ImageNet, RGB8 and MNIST handlers are used. `handle_request(HttpRequest)`
splits the path on `/` and serves:

| Method       | Path                       | Pipeline                                     |
|--------------|----------------------------|----------------------------------------------|
| POST or PUT  | `/<hint>`                  | JSON tensor body → predict                   |
| PUT          | `/<hint>/preprocess`       | ImageNet preprocessing → predict             |
| PUT          | `/<model>/preprocess/rgb8` | RGB8 preprocessing → predict                 |
| PUT          | `/<hint>/matches`          | ImageNet preprocessing → predict → top five  |
| PUT          | `/<model>/matches/rgb8`    | RGB8 preprocessing → predict → top five      |
| PUT          | `/<model>/mnist/matches`   | MNIST preprocessing → predict → best digit   |

A JSON tensor body is an object with `valueTypes` (e.g. `["ValueF32"]`),
`dimensions`, `data` (a list of byte values) and `flags`. Successful
responses are JSON with status 200; a prediction whose status carries an
error gives a 500 response with `compute_output: ...`; any other route
gives a 500 response with body `----N/A-----`. Bad input is raised as an
`RpcError` subclass rather than turned into a response.

`choose_model_and_link` maps hints onto models: `"privacy"`, `"latency"`
and `"default"` select `mobilenetv27`, `"accuracy"` selects
`resnet152v27`, and any other value is taken as a model name as it stands.
Every choice uses the `"default"` link. `validate` raises
`InvalidParameterError` for an empty model name, empty tensor data or
empty dimensions.

## What this package does not do

It runs no models: inference is whatever `predictor` callable you pass to
`InferenceApi`. It also starts no HTTP server and has no command-line
program; `InferenceApi.handle_request` works on `HttpRequest` objects you
build, so plugging it into a web framework is left to you.