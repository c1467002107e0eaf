from __future__ import annotations

import cbor2
import pytest

from mockvm.codec.encoding import decode, encode
from mockvm.codec.value import (INT32_MAX, INT32_MIN, UINT64_MAX, ListType,
                                ValueKind, ValueType, scalars_of_kind)
from mockvm.errors import DecodeError, EncodeError


@pytest.mark.parametrize(
    "v",
    [
        ValueType.int32(INT32_MIN),
        ValueType.int32(INT32_MAX),
        ValueType.int32(0),
        ValueType.uint64(UINT64_MAX),
        ValueType.bytes_(b""),
        ValueType.bytes_(b"\x00\xff"),
        ValueType.bool_(True),
        ValueType.string(""),
        ValueType.string("héllo"),
    ],
)
def test_value_roundtrip(v: ValueType) -> None:
    assert decode(encode(v), ValueType) == v


def test_value_wire_shape() -> None:
    assert cbor2.loads(encode(ValueType.uint64(5))) == [int(ValueKind.UINT64), 5]
    assert cbor2.loads(encode(ValueType.bytes_(b"ab"))) == [3, b"ab"]


def test_list_roundtrip_preserves_order() -> None:
    lst = ListType.of(ValueKind.STRING, ["c", "a", "b"])
    out = decode(encode(lst), ListType)
    assert out == lst
    assert [v.value for v in out] == ["c", "a", "b"]


def test_empty_list_roundtrip() -> None:
    assert decode(encode(ListType()), ListType) == ListType()


def test_encoding_is_deterministic() -> None:
    a = ListType.of(ValueKind.BYTES, [b"x", b"y"])
    b = ListType.of(ValueKind.BYTES, [b"x", b"y"])
    assert encode(a) == encode(b)


@pytest.mark.parametrize(
    "kind,value",
    [
        (ValueKind.INT32, INT32_MAX + 1),
        (ValueKind.INT32, INT32_MIN - 1),
        (ValueKind.UINT64, -1),
        (ValueKind.UINT64, UINT64_MAX + 1),
        (ValueKind.UINT64, True),
        (ValueKind.BOOL, 1),
        (ValueKind.BYTES, "str"),
        (ValueKind.STRING, b"bytes"),
    ],
)
def test_out_of_range_or_wrong_type_rejected(kind: ValueKind, value) -> None:
    with pytest.raises(EncodeError) as ei:
        ValueType(kind, value)
    assert ei.value.code == "encode_error"


def test_unknown_kind_is_an_encode_error() -> None:
    with pytest.raises(EncodeError) as ei:
        ValueType(99, 1)  # type: ignore[arg-type]
    assert ei.value.code == "encode_error"
    with pytest.raises(EncodeError):
        ValueType("uint64", 1)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "raw",
    [
        b"\xff\x00",  # stray break
        b"\x82\x01",  # truncated array
        cbor2.dumps([9, 1]),  # unknown tag
        cbor2.dumps([1, 1 << 31]),  # int32 overflow
        cbor2.dumps([4, 1]),  # bool payload not bool
        cbor2.dumps([1]),  # wrong arity
        cbor2.dumps({"kind": 1}),  # not an array
    ],
)
def test_malformed_value_bytes_raise(raw: bytes) -> None:
    with pytest.raises(DecodeError) as ei:
        decode(raw, ValueType)
    assert ei.value.code == "decode_error"


def test_trailing_bytes_rejected() -> None:
    with pytest.raises(DecodeError):
        decode(encode(ValueType.uint64(1)) + b"\x00", ValueType)


def test_empty_and_non_bytes_input_rejected() -> None:
    with pytest.raises(DecodeError):
        decode(b"", ValueType)
    with pytest.raises(DecodeError):
        decode("not bytes", ValueType)  # type: ignore[arg-type]


def test_wrong_record_type_rejected() -> None:
    with pytest.raises(DecodeError):
        decode(encode(ValueType.uint64(5)), ListType)


def test_non_canonical_encoding_strict_vs_lenient() -> None:
    # uint 1 written with a one-byte argument instead of inline
    raw = b"\x82\x02\x18\x01"
    with pytest.raises(DecodeError):
        decode(raw, ValueType, strict=True)
    assert decode(raw, ValueType, strict=False) == ValueType.uint64(1)


def test_strict_default_follows_env(monkeypatch: pytest.MonkeyPatch) -> None:
    from mockvm.config import load_config

    raw = b"\x82\x02\x18\x01"
    monkeypatch.setenv("MOCKVM_STRICT_DECODE", "0")
    load_config.cache_clear()
    assert decode(raw, ValueType) == ValueType.uint64(1)


def test_encode_rejects_non_record() -> None:
    with pytest.raises(EncodeError):
        encode(object())  # type: ignore[arg-type]


def test_scalars_of_kind_checks_every_element() -> None:
    mixed = ListType((ValueType.bytes_(b"a"), ValueType.string("b")))
    with pytest.raises(DecodeError):
        scalars_of_kind(mixed, ValueKind.BYTES, where="events")


def test_list_rejects_non_value_elements() -> None:
    with pytest.raises(EncodeError):
        ListType((b"raw",))  # type: ignore[arg-type]


def test_list_rejects_unordered_collections() -> None:
    with pytest.raises(EncodeError):
        ListType.of(ValueKind.BYTES, {b"a", b"b"})
    with pytest.raises(EncodeError):
        ListType(frozenset({ValueType.uint64(1)}))  # type: ignore[arg-type]


def test_list_append_returns_new_list() -> None:
    a = ListType.of(ValueKind.UINT64, [1])
    b = a.append(ValueType.uint64(2))
    assert len(a) == 1
    assert [v.value for v in b] == [1, 2]
