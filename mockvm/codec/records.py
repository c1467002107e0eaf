"""
Structured host records (head info, caller, transaction, block, authorities,
events).

Every record is a frozen dataclass whose fields carry a `kind` in their
metadata. The kind drives validation on construction and the CBOR shape:

    kind              python value         CBOR
    ----------------  -------------------  -------------------------
    BYTES             bytes                byte string
    UINT              int in [0, 2^64)     unsigned int
    STR               str                  text string
    BOOL              bool                 true/false
    IntEnum subclass  enum member          unsigned int
    Record subclass   record               map
    Seq(inner)        tuple                array

A record encodes to a CBOR map keyed by field name. Decoding requires exactly
the declared keys; missing or extra keys are a DecodeError.
"""

from __future__ import annotations

from collections.abc import Mapping, Set as AbstractSet
from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from ..errors import DecodeError, EncodeError
from .value import UINT64_MAX, ValueKind, ValueType

R = TypeVar("R", bound="Record")

BYTES = "bytes"
UINT = "uint"
STR = "str"
BOOL = "bool"


@dataclass(frozen=True)
class Seq:
    inner: Any


def _f(kind: Any, default: Any = None, *, factory: Any = None) -> Any:
    if factory is not None:
        return field(default_factory=factory, metadata={"kind": kind})
    return field(default=default, metadata={"kind": kind})


def _is_record_kind(kind: Any) -> bool:
    return isinstance(kind, type) and issubclass(kind, Record)


def _is_enum_kind(kind: Any) -> bool:
    return isinstance(kind, type) and issubclass(kind, IntEnum)


def _check(kind: Any, value: Any, where: str) -> Any:
    """Validate/normalize `value` for `kind`; raises EncodeError."""
    if kind == BYTES:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise EncodeError(f"{where}: bytes expected", context={"where": where})
        return bytes(value)
    if kind == UINT:
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError(f"{where}: int expected", context={"where": where})
        if not 0 <= value <= UINT64_MAX:
            raise EncodeError(f"{where}: uint64 out of range", context={"where": where})
        return value
    if kind == STR:
        if not isinstance(value, str):
            raise EncodeError(f"{where}: str expected", context={"where": where})
        return value
    if kind == BOOL:
        if not isinstance(value, bool):
            raise EncodeError(f"{where}: bool expected", context={"where": where})
        return value
    if _is_enum_kind(kind):
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError(f"{where}: {kind.__name__} expected", context={"where": where})
        try:
            return kind(value)
        except ValueError:
            raise EncodeError(
                f"{where}: {value} is not a valid {kind.__name__}",
                context={"where": where, "value": int(value)},
            ) from None
    if _is_record_kind(kind):
        if not isinstance(value, kind):
            raise EncodeError(f"{where}: {kind.__name__} expected", context={"where": where})
        return value
    if isinstance(kind, Seq):
        if isinstance(value, (str, bytes, bytearray, AbstractSet, Mapping)) or not hasattr(value, "__iter__"):
            raise EncodeError(f"{where}: ordered sequence expected", context={"where": where})
        return tuple(_check(kind.inner, v, f"{where}[{i}]") for i, v in enumerate(value))
    raise EncodeError(f"{where}: unsupported field kind {kind!r}")


def _to_plain(kind: Any, value: Any) -> Any:
    if _is_enum_kind(kind):
        return int(value)
    if _is_record_kind(kind):
        return value.to_cbor()
    if isinstance(kind, Seq):
        return [_to_plain(kind.inner, v) for v in value]
    return value


def _from_plain(kind: Any, obj: Any, where: str) -> Any:
    if _is_record_kind(kind):
        return kind.from_cbor(obj)
    if isinstance(kind, Seq):
        if not isinstance(obj, list):
            raise DecodeError(f"{where}: array expected", context={"where": where})
        return tuple(_from_plain(kind.inner, v, f"{where}[{i}]") for i, v in enumerate(obj))
    try:
        return _check(kind, obj, where)
    except EncodeError as e:
        raise DecodeError(e.message, context=e.context) from e


@dataclass(frozen=True)
class Record:
    """Base for structured host records."""

    def __post_init__(self) -> None:
        for f in fields(self):
            where = f"{type(self).__name__}.{f.name}"
            object.__setattr__(self, f.name, _check(f.metadata["kind"], getattr(self, f.name), where))

    def to_cbor(self) -> Dict[str, Any]:
        return {f.name: _to_plain(f.metadata["kind"], getattr(self, f.name)) for f in fields(self)}

    @classmethod
    def from_cbor(cls: Type[R], obj: Any) -> R:
        name = cls.__name__
        if not isinstance(obj, dict):
            raise DecodeError(f"{name}: map expected", context={"record": name})
        declared = {f.name for f in fields(cls)}
        got = set(obj)
        if got != declared:
            raise DecodeError(
                f"{name}: field mismatch",
                context={
                    "record": name,
                    "missing": sorted(declared - got),
                    "unexpected": sorted(str(k) for k in got - declared),
                },
            )
        kwargs = {
            f.name: _from_plain(f.metadata["kind"], obj[f.name], f"{name}.{f.name}")
            for f in fields(cls)
        }
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Chain records
# ---------------------------------------------------------------------------


class Privilege(IntEnum):
    KERNEL_MODE = 0
    USER_MODE = 1


class AuthorizationType(IntEnum):
    CONTRACT_CALL = 0
    TRANSACTION_APPLICATION = 1
    CONTRACT_UPLOAD = 2


@dataclass(frozen=True)
class BlockTopology(Record):
    id: bytes = _f(BYTES, b"")
    height: int = _f(UINT, 0)
    previous: bytes = _f(BYTES, b"")


@dataclass(frozen=True)
class HeadInfo(Record):
    head_topology: BlockTopology = _f(BlockTopology, factory=BlockTopology)
    head_block_time: int = _f(UINT, 0)
    last_irreversible_block: int = _f(UINT, 0)
    head_state_merkle_root: bytes = _f(BYTES, b"")


@dataclass(frozen=True)
class CallerData(Record):
    caller: bytes = _f(BYTES, b"")
    caller_privilege: Privilege = _f(Privilege, Privilege.USER_MODE)


@dataclass(frozen=True)
class TransactionHeader(Record):
    chain_id: bytes = _f(BYTES, b"")
    rc_limit: int = _f(UINT, 0)
    nonce: bytes = _f(BYTES, b"")
    operation_merkle_root: bytes = _f(BYTES, b"")
    payer: bytes = _f(BYTES, b"")
    payee: bytes = _f(BYTES, b"")


@dataclass(frozen=True)
class Transaction(Record):
    id: bytes = _f(BYTES, b"")
    header: TransactionHeader = _f(TransactionHeader, factory=TransactionHeader)
    operations: Tuple[bytes, ...] = _f(Seq(BYTES), factory=tuple)
    signatures: Tuple[bytes, ...] = _f(Seq(BYTES), factory=tuple)


@dataclass(frozen=True)
class BlockHeader(Record):
    previous: bytes = _f(BYTES, b"")
    height: int = _f(UINT, 0)
    timestamp: int = _f(UINT, 0)
    previous_state_merkle_root: bytes = _f(BYTES, b"")
    transaction_merkle_root: bytes = _f(BYTES, b"")
    signer: bytes = _f(BYTES, b"")


@dataclass(frozen=True)
class Block(Record):
    id: bytes = _f(BYTES, b"")
    header: BlockHeader = _f(BlockHeader, factory=BlockHeader)
    transactions: Tuple[Transaction, ...] = _f(Seq(Transaction), factory=tuple)
    signature: bytes = _f(BYTES, b"")


@dataclass(frozen=True)
class Authority(Record):
    authorization_type: AuthorizationType = _f(AuthorizationType, AuthorizationType.CONTRACT_CALL)
    account: bytes = _f(BYTES, b"")
    authorized: bool = _f(BOOL, False)


@dataclass(frozen=True)
class AuthorityList(Record):
    authorities: Tuple[Authority, ...] = _f(Seq(Authority), factory=tuple)


@dataclass(frozen=True)
class EventData(Record):
    sequence: int = _f(UINT, 0)
    source: bytes = _f(BYTES, b"")
    name: str = _f(STR, "")
    data: bytes = _f(BYTES, b"")
    impacted: Tuple[bytes, ...] = _f(Seq(BYTES), factory=tuple)


# ---------------------------------------------------------------------------
# Field access by dotted path
# ---------------------------------------------------------------------------

_KIND_TO_VALUE = {
    BYTES: ValueKind.BYTES,
    UINT: ValueKind.UINT64,
    STR: ValueKind.STRING,
    BOOL: ValueKind.BOOL,
}


def field_value(record: Record, path: str) -> Optional[ValueType]:
    """
    Resolve a dotted field path ("header.payer") to a scalar ValueType.

    Returns None when the path names no field or ends on a non-scalar
    (nested record or sequence). Enum fields come back as INT32.
    """
    cur: Any = record
    kind: Any = type(record)
    for part in path.split("."):
        if not _is_record_kind(kind):
            return None
        match = [f for f in fields(cur) if f.name == part]
        if not match:
            return None
        kind = match[0].metadata["kind"]
        cur = getattr(cur, part)

    if _is_enum_kind(kind):
        return ValueType.int32(int(cur))
    vk = _KIND_TO_VALUE.get(kind) if isinstance(kind, str) else None
    if vk is None:
        return None
    return ValueType(vk, cur)


__all__ = [
    "Record",
    "Seq",
    "Privilege",
    "AuthorizationType",
    "BlockTopology",
    "HeadInfo",
    "CallerData",
    "TransactionHeader",
    "Transaction",
    "BlockHeader",
    "Block",
    "Authority",
    "AuthorityList",
    "EventData",
    "field_value",
]
