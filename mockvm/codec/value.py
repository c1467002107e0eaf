"""
Scalar value records.

ValueType is a tagged union holding exactly one scalar:

    kind     python type   range
    -------  ------------  -----------------------
    INT32    int           [-2^31, 2^31 - 1]
    UINT64   int           [0, 2^64 - 1]
    BYTES    bytes         any length
    BOOL     bool          -
    STRING   str           valid UTF-8

ListType is an ordered sequence of ValueType.

Wire shapes (CBOR, see mockvm.codec.encoding):
  ValueType -> [tag, payload]
  ListType  -> [[tag, payload], ...]
"""

from __future__ import annotations

from collections.abc import Mapping, Set as AbstractSet
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterable, Iterator, List, Tuple, Union

from ..errors import DecodeError, EncodeError

INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1
UINT64_MAX = (1 << 64) - 1

Scalar = Union[int, bytes, bool, str]


class ValueKind(IntEnum):
    INT32 = 1
    UINT64 = 2
    BYTES = 3
    BOOL = 4
    STRING = 5


def _check_scalar(kind: ValueKind, value: Any) -> Scalar:
    if kind is ValueKind.BOOL:
        if not isinstance(value, bool):
            raise EncodeError("bool value expected", context={"kind": kind.name})
        return value
    if kind in (ValueKind.INT32, ValueKind.UINT64):
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError("int value expected", context={"kind": kind.name})
        lo, hi = (INT32_MIN, INT32_MAX) if kind is ValueKind.INT32 else (0, UINT64_MAX)
        if not lo <= value <= hi:
            raise EncodeError(
                f"{kind.name.lower()} out of range",
                context={"kind": kind.name, "value": value},
            )
        return value
    if kind is ValueKind.BYTES:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise EncodeError("bytes value expected", context={"kind": kind.name})
        return bytes(value)
    if not isinstance(value, str):
        raise EncodeError("str value expected", context={"kind": kind.name})
    return value


@dataclass(frozen=True)
class ValueType:
    kind: ValueKind
    value: Scalar

    def __post_init__(self) -> None:
        try:
            kind = ValueKind(self.kind)
        except ValueError:
            raise EncodeError(f"unknown value kind {self.kind!r}", context={"kind": repr(self.kind)}) from None
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", _check_scalar(kind, self.value))

    # Constructors mirroring the setter names of the host records.

    @classmethod
    def int32(cls, v: int) -> "ValueType":
        return cls(ValueKind.INT32, v)

    @classmethod
    def uint64(cls, v: int) -> "ValueType":
        return cls(ValueKind.UINT64, v)

    @classmethod
    def bytes_(cls, v: bytes) -> "ValueType":
        return cls(ValueKind.BYTES, v)

    @classmethod
    def bool_(cls, v: bool) -> "ValueType":
        return cls(ValueKind.BOOL, v)

    @classmethod
    def string(cls, v: str) -> "ValueType":
        return cls(ValueKind.STRING, v)

    def to_cbor(self) -> List[Any]:
        return [int(self.kind), self.value]

    @classmethod
    def from_cbor(cls, obj: Any) -> "ValueType":
        if not isinstance(obj, list) or len(obj) != 2:
            raise DecodeError("value record must be a 2-element array")
        tag, payload = obj
        if isinstance(tag, bool) or not isinstance(tag, int):
            raise DecodeError("value tag must be an integer")
        try:
            kind = ValueKind(tag)
        except ValueError:
            raise DecodeError(f"unknown value tag {tag}", context={"tag": tag}) from None
        try:
            return cls(kind, payload)
        except EncodeError as e:
            raise DecodeError(e.message, context=e.context) from e


@dataclass(frozen=True)
class ListType:
    values: Tuple[ValueType, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if isinstance(self.values, (AbstractSet, Mapping)):
            raise EncodeError("list values must be an ordered sequence")
        vals = tuple(self.values)
        for v in vals:
            if not isinstance(v, ValueType):
                raise EncodeError(
                    "list elements must be ValueType",
                    context={"py_type": type(v).__name__},
                )
        object.__setattr__(self, "values", vals)

    @classmethod
    def of(cls, kind: ValueKind, items: Iterable[Any]) -> "ListType":
        if isinstance(items, (AbstractSet, Mapping)):
            raise EncodeError("list items must be an ordered sequence")
        return cls(tuple(ValueType(kind, x) for x in items))

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[ValueType]:
        return iter(self.values)

    def append(self, v: ValueType) -> "ListType":
        return ListType(self.values + (v,))

    def to_cbor(self) -> List[Any]:
        return [v.to_cbor() for v in self.values]

    @classmethod
    def from_cbor(cls, obj: Any) -> "ListType":
        if not isinstance(obj, list):
            raise DecodeError("list record must be an array")
        return cls(tuple(ValueType.from_cbor(x) for x in obj))


def scalars_of_kind(lst: ListType, kind: ValueKind, *, where: str) -> List[Any]:
    """Return the payloads of `lst`, requiring every element to be `kind`."""
    out: List[Any] = []
    for idx, v in enumerate(lst.values):
        if v.kind is not kind:
            raise DecodeError(
                f"{where}: element {idx} is {v.kind.name}, expected {kind.name}",
                context={"where": where, "index": idx},
            )
        out.append(v.value)
    return out


__all__ = [
    "INT32_MIN",
    "INT32_MAX",
    "UINT64_MAX",
    "Scalar",
    "ValueKind",
    "ValueType",
    "ListType",
    "scalars_of_kind",
]
