"""HTTP front end that routes inference requests through pre- and post-processing."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from .postprocess import ImagenetPostprocessor, MnistPostprocessor
from .preprocess import ImagenetPreprocessor, MnistPreprocessor, Rgb8Preprocessor
from .tensors import (
    Classification,
    ConversionOutput,
    DeserializationError,
    InferenceOutput,
    InvalidParameterError,
    RpcError,
    Status,
    Tensor,
    ValueType,
)

_log = logging.getLogger(__name__)

IMAGENET_PREPROCESS_ACTOR = "mlinference/imagenetpreprocessor"
IMAGENET_PREPROCRGB8_ACTOR = "mlinference/imagenetpreprocrgb8"
IMAGENET_POSTPROCESS_ACTOR = "mlinference/imagenetpostprocessor"
MNIST_PREPROCESS_ACTOR = "mlinference/mnistpreprocessor"
MNIST_POSTPROCESS_ACTOR = "mlinference/mnistpostprocessor"
DEFAULT_LINK = "default"

LOCAL_FAST = "mobilenetv27"
SERVER_ACCURATE = "resnet152v27"

NOT_AVAILABLE = "----N/A-----"


class Preprocessor(Protocol):
    def convert(self, data: bytes) -> ConversionOutput: ...


class Postprocessor(Protocol):
    def postprocess(self, output: InferenceOutput) -> list[Classification]: ...


@dataclass
class InferenceInput:
    """A tensor addressed to a named model."""

    model: str
    tensor: Tensor
    index: int = 0


Predictor = Callable[[str, InferenceInput], InferenceOutput]


@dataclass
class HttpRequest:
    """An incoming HTTP request."""

    method: str
    path: str
    body: bytes = b""
    query_string: str = ""
    header: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class HttpResponse:
    """An outgoing HTTP response."""

    status_code: int = 200
    body: bytes = b""
    header: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def internal_server_error(cls, message: str) -> HttpResponse:
        return cls(status_code=500, body=message.encode("utf-8"))

    @classmethod
    def json(cls, payload: Any, status_code: int = 200) -> HttpResponse:
        body = json.dumps(_to_jsonable(payload)).encode("utf-8")
        return cls(
            status_code=status_code,
            body=body,
            header={"content-type": ["application/json"]},
        )


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Status):
        return "Success" if value.succeeded else {"Error": value.error}
    if isinstance(value, ValueType):
        return value.value
    if isinstance(value, Tensor):
        return {
            "valueTypes": [_to_jsonable(v) for v in value.value_types],
            "dimensions": list(value.dimensions),
            "data": list(value.data),
            "flags": value.flags,
        }
    if isinstance(value, (InferenceOutput, ConversionOutput)):
        return {"result": _to_jsonable(value.result), "tensor": _to_jsonable(value.tensor)}
    if isinstance(value, Classification):
        return {"label": value.label, "probability": value.probability}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    return value


def _parse_tensor(body: bytes) -> Tensor:
    """Decode a JSON tensor body, raising DeserializationError when malformed."""
    try:
        obj = json.loads(bytes(body))
    except (ValueError, UnicodeDecodeError) as exc:
        raise DeserializationError(str(exc)) from exc
    if not isinstance(obj, dict):
        raise DeserializationError("expected a JSON object describing a tensor")
    try:
        value_types = [ValueType(v) for v in obj.get("valueTypes", [])]
        dimensions = [int(d) for d in obj.get("dimensions", [])]
        data = bytes(obj.get("data", []))
        flags = int(obj.get("flags", 0))
    except (TypeError, ValueError) as exc:
        raise DeserializationError(str(exc)) from exc
    if any(d < 0 for d in dimensions):
        raise DeserializationError("tensor dimensions must not be negative")
    return Tensor(value_types=value_types, dimensions=dimensions, data=data, flags=flags)


def choose_model_and_link(model_hint: str) -> tuple[str, str]:
    """Map a user preference label to a model name and link name."""
    match model_hint:
        case "privacy" | "latency" | "default":
            return LOCAL_FAST, DEFAULT_LINK
        case "accuracy":
            return SERVER_ACCURATE, DEFAULT_LINK
        case _:
            return model_hint, DEFAULT_LINK


def validate(model_name: str, tensor: Tensor) -> None:
    """Raise InvalidParameterError unless the model and tensor are usable."""
    if not model_name:
        raise InvalidParameterError("The name of a model MUST be provided!")
    if not tensor.data:
        raise InvalidParameterError("The input tensor MUST NOT be empty!")
    if not tensor.dimensions:
        raise InvalidParameterError("Tensor dimensions MUST be provided!")


class InferenceApi:
    """Routes HTTP requests to preprocessors, a predictor and postprocessors.

    ``predictor`` is called with a link name and an InferenceInput.
    ``preprocessors`` and ``postprocessors`` map actor names to handlers;
    when omitted the built-in ImageNet and MNIST handlers are used.
    """

    def __init__(
        self,
        predictor: Predictor,
        preprocessors: Mapping[str, Preprocessor] | None = None,
        postprocessors: Mapping[str, Postprocessor] | None = None,
    ) -> None:
        self._predictor = predictor
        self._preprocessors: dict[str, Preprocessor] = (
            dict(preprocessors)
            if preprocessors is not None
            else {
                IMAGENET_PREPROCESS_ACTOR: ImagenetPreprocessor(),
                IMAGENET_PREPROCRGB8_ACTOR: Rgb8Preprocessor(),
                MNIST_PREPROCESS_ACTOR: MnistPreprocessor(),
            }
        )
        self._postprocessors: dict[str, Postprocessor] = (
            dict(postprocessors)
            if postprocessors is not None
            else {
                IMAGENET_POSTPROCESS_ACTOR: ImagenetPostprocessor(),
                MNIST_POSTPROCESS_ACTOR: MnistPostprocessor(),
            }
        )

    def _preprocess(self, actor: str, data: bytes) -> ConversionOutput:
        try:
            handler = self._preprocessors[actor]
        except KeyError:
            raise RpcError(f"no preprocessor linked as {actor}") from None
        return handler.convert(data)

    def _postprocess(self, actor: str, output: InferenceOutput) -> list[Classification]:
        try:
            handler = self._postprocessors[actor]
        except KeyError:
            raise RpcError(f"no postprocessor linked as {actor}") from None
        return handler.postprocess(output)

    def _predict(self, model_name: str, link_name: str, tensor: Tensor) -> InferenceOutput:
        return self._predictor(link_name, InferenceInput(model=model_name, tensor=tensor))

    @staticmethod
    def _respond(prediction: InferenceOutput, payload: Any) -> HttpResponse:
        if not prediction.result.succeeded:
            return HttpResponse.internal_server_error(
                f"compute_output: {prediction.result.error!r}"
            )
        return HttpResponse.json(payload, 200)

    def _tensor_route(self, model_hint: str, body: bytes) -> HttpResponse:
        tensor = _parse_tensor(body)
        model_name, link_name = choose_model_and_link(model_hint)
        validate(model_name, tensor)
        prediction = self._predict(model_name, link_name, tensor)
        return self._respond(prediction, prediction)

    def _preprocessed_route(
        self, preprocessor: str, model_name: str, link_name: str, body: bytes
    ) -> HttpResponse:
        preprocessed = self._preprocess(preprocessor, body)
        validate(model_name, preprocessed.tensor)
        prediction = self._predict(model_name, link_name, preprocessed.tensor)
        return self._respond(prediction, prediction)

    def _matches_route(
        self,
        preprocessor: str,
        postprocessor: str,
        model_name: str,
        link_name: str,
        body: bytes,
    ) -> HttpResponse:
        preprocessed = self._preprocess(preprocessor, body)
        validate(model_name, preprocessed.tensor)
        prediction = self._predict(model_name, link_name, preprocessed.tensor)
        matches = self._postprocess(postprocessor, prediction)
        return self._respond(prediction, matches)

    def handle_request(self, request: HttpRequest) -> HttpResponse:
        """Serve one request; failures are raised as RpcError subclasses."""
        segments = request.path.strip("/").split("/")
        _log.warning("request %s %r", request.method, segments)
        body = bytes(request.body)

        match (request.method, segments):
            case ("POST" | "PUT", [model_hint]):
                _log.debug("receiving %s(model) ..", request.method)
                return self._tensor_route(model_hint, body)
            case ("PUT", [model_hint, "preprocess"]):
                model_name, link_name = choose_model_and_link(model_hint)
                return self._preprocessed_route(
                    IMAGENET_PREPROCESS_ACTOR, model_name, link_name, body
                )
            case ("PUT", [model_name, "preprocess", "rgb8"]):
                return self._preprocessed_route(
                    IMAGENET_PREPROCRGB8_ACTOR, model_name, DEFAULT_LINK, body
                )
            case ("PUT", [model_hint, "matches"]):
                model_name, link_name = choose_model_and_link(model_hint)
                return self._matches_route(
                    IMAGENET_PREPROCESS_ACTOR,
                    IMAGENET_POSTPROCESS_ACTOR,
                    model_name,
                    link_name,
                    body,
                )
            case ("PUT", [model_name, "matches", "rgb8"]):
                return self._matches_route(
                    IMAGENET_PREPROCRGB8_ACTOR,
                    IMAGENET_POSTPROCESS_ACTOR,
                    model_name,
                    DEFAULT_LINK,
                    body,
                )
            case ("PUT", [model_name, "mnist", "matches"]):
                return self._matches_route(
                    MNIST_PREPROCESS_ACTOR,
                    MNIST_POSTPROCESS_ACTOR,
                    model_name,
                    DEFAULT_LINK,
                    body,
                )
            case _:
                _log.debug("API request: %r", request)
                return HttpResponse.internal_server_error(NOT_AVAILABLE)