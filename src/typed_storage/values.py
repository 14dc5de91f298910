"""Primitive value kinds and the explicit wrappers that select them.

Python has a single ``int`` and a single ``float``, so the storage width of a
plain number cannot be read off the value.  Plain values therefore map to the
wide kinds (``int`` → INT64, ``float`` → FLOAT64) and the narrow kinds are
only ever chosen explicitly::

    storage.put("retries", Int32(3))
    storage.get("retries", Int32(0))   # -> Int32(value=3)

Widths are never inferred from magnitude: an ``int`` that does not fit in 64
bits is rejected at encode time instead of being truncated.  ``Float32`` rounds
its value to single precision on construction, so it reads back unchanged.

"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1


class ValueKind(str, Enum):
    """The natively encodable primitive kinds."""

    TEXT = "text"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOL = "bool"


def _check_int(value: Any, low: int, high: int, kind: ValueKind) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{kind.value} requires an int, got {type(value).__name__}")
    if not low <= value <= high:
        raise ValueError(f"{value} is out of range for {kind.value} [{low}, {high}]")


@dataclass(frozen=True)
class Text:
    value: str
    kind: ClassVar[ValueKind] = ValueKind.TEXT

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(f"text requires a str, got {type(self.value).__name__}")


@dataclass(frozen=True)
class Int32:
    value: int
    kind: ClassVar[ValueKind] = ValueKind.INT32

    def __post_init__(self) -> None:
        _check_int(self.value, INT32_MIN, INT32_MAX, self.kind)


@dataclass(frozen=True)
class Int64:
    value: int
    kind: ClassVar[ValueKind] = ValueKind.INT64

    def __post_init__(self) -> None:
        _check_int(self.value, INT64_MIN, INT64_MAX, self.kind)


@dataclass(frozen=True)
class Float32:
    value: float
    kind: ClassVar[ValueKind] = ValueKind.FLOAT32

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int | float):
            raise TypeError(f"float32 requires a number, got {type(self.value).__name__}")
        try:
            single = struct.unpack("<f", struct.pack("<f", self.value))[0]
        except OverflowError as e:
            raise ValueError(f"{self.value} is out of range for float32") from e
        object.__setattr__(self, "value", single)


@dataclass(frozen=True)
class Float64:
    value: float
    kind: ClassVar[ValueKind] = ValueKind.FLOAT64

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int | float):
            raise TypeError(f"float64 requires a number, got {type(self.value).__name__}")
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class Bool:
    value: bool
    kind: ClassVar[ValueKind] = ValueKind.BOOL

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise TypeError(f"bool requires a bool, got {type(self.value).__name__}")


TaggedValue = Text | Int32 | Int64 | Float32 | Float64 | Bool

_WRAPPERS: dict[ValueKind, type[TaggedValue]] = {
    ValueKind.TEXT: Text,
    ValueKind.INT32: Int32,
    ValueKind.INT64: Int64,
    ValueKind.FLOAT32: Float32,
    ValueKind.FLOAT64: Float64,
    ValueKind.BOOL: Bool,
}


def is_tagged(value: Any) -> bool:
    return isinstance(value, Text | Int32 | Int64 | Float32 | Float64 | Bool)


def classify(value: Any) -> ValueKind | None:
    """Return the primitive kind of *value*, or ``None`` for a structured object.

    ``bool`` is tested before ``int`` because it is a subclass of it.
    """
    if is_tagged(value):
        return value.kind
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT64
    if isinstance(value, float):
        return ValueKind.FLOAT64
    return None


def unwrap(value: Any) -> Any:
    """Strip a wrapper, leaving plain values untouched."""
    return value.value if is_tagged(value) else value


def wrap(kind: ValueKind, raw: Any) -> TaggedValue:
    return _WRAPPERS[kind](raw)
