"""Tensor data types, RPC errors and little-endian f32 conversion."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np


class RpcError(Exception):
    """Base error for failures while handling a request."""


class InvalidParameterError(RpcError):
    """A request carried an argument that cannot be used."""


class DeserializationError(RpcError):
    """Input data could not be decoded."""


class ValueType(enum.Enum):
    """Element type of the values held in a tensor."""

    VALUE_F32 = "ValueF32"


@dataclass(frozen=True)
class Status:
    """Outcome of an operation; ``error`` is set when it failed."""

    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class Tensor:
    """Raw tensor bytes with their element types and dimensions."""

    value_types: list[ValueType] = field(default_factory=list)
    dimensions: list[int] = field(default_factory=list)
    data: bytes = b""
    flags: int = 0


@dataclass
class ConversionOutput:
    """Result of converting raw input into a tensor."""

    result: Status
    tensor: Tensor


@dataclass
class InferenceOutput:
    """Result of running a model on a tensor."""

    result: Status
    tensor: Tensor


@dataclass
class Classification:
    """One labelled match with its probability."""

    label: str
    probability: float


def f32_to_bytes(values: Iterable[float]) -> bytes:
    """Encode values as consecutive little-endian 32-bit floats."""
    return np.asarray(list(values) if not isinstance(values, np.ndarray) else values,
                      dtype="<f4").tobytes()


def bytes_to_f32(data: bytes) -> list[float]:
    """Decode consecutive little-endian 32-bit floats.

    Raises RpcError when the length is not a multiple of four.
    """
    raw = bytes(data)
    whole = len(raw) // 4
    if whole * 4 < len(raw):
        raise RpcError(f"data conversion error at offset {whole >> 2}")
    return np.frombuffer(raw, dtype="<f4").tolist()