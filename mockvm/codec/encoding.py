"""
Canonical record encoding for the simulated host.

encode(record) -> bytes
    Deterministic CBOR (RFC 8949 §4.2) of `record.to_cbor()` via cbor2 with
    canonical=True: shortest integer forms, definite lengths, sorted map keys.

decode(data, record_type) -> record
    Inverse of encode. Raises DecodeError when:
      - `data` is not a single well-formed CBOR item (truncated, trailing bytes)
      - the decoded item does not match `record_type`'s shape
      - strict mode is on and `data` is not the canonical encoding of the
        decoded record (so every accepted input re-encodes byte-for-byte)

Strict mode defaults to MOCKVM_STRICT_DECODE (see mockvm.config).

`record_type` is any class exposing `from_cbor(obj)` and instances exposing
`to_cbor()`: ValueType, ListType and the records in mockvm.codec.records.
"""

from __future__ import annotations

import io
from typing import Any, Callable, Optional, Protocol, Type, TypeVar

import cbor2

from ..config import load_config
from ..errors import DecodeError, EncodeError

T = TypeVar("T")


class Encodable(Protocol):
    def to_cbor(self) -> Any: ...


EncodeFn = Callable[[Any], bytes]


def encode(record: Encodable) -> bytes:
    to_cbor = getattr(record, "to_cbor", None)
    if not callable(to_cbor):
        raise EncodeError(
            "record has no to_cbor()", context={"py_type": type(record).__name__}
        )
    try:
        return cbor2.dumps(to_cbor(), canonical=True)
    except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
        raise EncodeError(
            f"cannot encode {type(record).__name__}: {e}",
            context={"py_type": type(record).__name__},
        ) from e


def _loads_single(buf: bytes) -> Any:
    fp = io.BytesIO(buf)
    try:
        obj = cbor2.CBORDecoder(fp).decode()
    except (cbor2.CBORDecodeError, ValueError, TypeError, EOFError, RecursionError) as e:
        raise DecodeError(f"malformed CBOR: {e}", context={"len": len(buf)}) from e
    if fp.tell() != len(buf):
        raise DecodeError(
            "trailing bytes after CBOR item",
            context={"len": len(buf), "consumed": fp.tell()},
        )
    return obj


def decode(data: bytes, record_type: Type[T], *, strict: Optional[bool] = None) -> T:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DecodeError("decode input must be bytes", context={"py_type": type(data).__name__})
    buf = bytes(data)
    if not buf:
        raise DecodeError(f"empty input for {record_type.__name__}")

    obj = _loads_single(buf)
    record = record_type.from_cbor(obj)  # type: ignore[attr-defined]

    if strict is None:
        strict = load_config().strict_decode
    if strict and encode(record) != buf:
        raise DecodeError(
            f"non-canonical encoding of {record_type.__name__}",
            context={"record": record_type.__name__},
        )
    return record


__all__ = ["Encodable", "EncodeFn", "encode", "decode"]
