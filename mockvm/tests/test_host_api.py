from __future__ import annotations

import pytest

from mockvm.codec.encoding import decode, encode
from mockvm.codec.records import (Authority, AuthorityList, AuthorizationType,
                                  CallerData, EventData, HeadInfo, Privilege,
                                  Transaction, TransactionHeader)
from mockvm.codec.value import ListType, ValueKind, ValueType
from mockvm.errors import AuthorityError, DecodeError
from mockvm.runtime.host_api import HostApi
from mockvm.runtime.session import (AUTHORITY_KEY, BEGIN_TRANSACTION_KEY,
                                    CALL_CONTRACT_RESULTS_KEY,
                                    COMMIT_TRANSACTION_KEY, CONTRACT_ID_KEY,
                                    CONTROL_MARKERS, ENTRY_POINT_KEY,
                                    LAST_IRREVERSIBLE_BLOCK_KEY, RESET_KEY,
                                    ROLLBACK_TRANSACTION_KEY, TRANSACTION_KEY,
                                    Session)
from mockvm.runtime.store import METADATA_SPACE, ObjectSpace

CONTRACT_SPACE = ObjectSpace(system=False, zone=b"\x01" * 20, id=0)


def test_raw_bytes_roundtrip(host: HostApi) -> None:
    host.put_bytes(CONTRACT_SPACE, "balance", b"\x10")
    assert host.get_bytes(CONTRACT_SPACE, "balance") == b"\x10"
    host.remove(CONTRACT_SPACE, "balance")
    assert host.get_bytes(CONTRACT_SPACE, "balance") is None


def test_object_roundtrip_and_absence(host: HostApi) -> None:
    assert host.get_object(CONTRACT_SPACE, "v", ValueType) is None
    host.put_object(CONTRACT_SPACE, "v", ValueType.string("hi"))
    assert host.get_object(CONTRACT_SPACE, "v", ValueType) == ValueType.string("hi")


def test_put_object_uses_custom_encode_fn(host: HostApi) -> None:
    host.put_object(CONTRACT_SPACE, "v", ValueType.uint64(1), encode_fn=lambda r: b"custom")
    assert host.get_bytes(CONTRACT_SPACE, "v") == b"custom"


def test_get_object_propagates_decode_error(host: HostApi) -> None:
    host.put_bytes(CONTRACT_SPACE, "v", b"\xff\xff")
    with pytest.raises(DecodeError):
        host.get_object(CONTRACT_SPACE, "v", ValueType)


@pytest.mark.parametrize("marker", sorted(CONTROL_MARKERS))
def test_control_markers_are_never_stored(session: Session, host: HostApi, marker: str) -> None:
    host.put_bytes(METADATA_SPACE, marker, b"anything")
    assert host.get_bytes(METADATA_SPACE, marker) is None


def test_marker_names_outside_metadata_space_are_plain_keys(host: HostApi) -> None:
    host.put_bytes(CONTRACT_SPACE, RESET_KEY, b"1")
    assert host.get_bytes(CONTRACT_SPACE, RESET_KEY) == b"1"


def test_markers_drive_transaction_transitions(session: Session, host: HostApi) -> None:
    host.put_bytes(CONTRACT_SPACE, "x", b"1")
    host.put_bytes(METADATA_SPACE, BEGIN_TRANSACTION_KEY, b"")
    assert session.snapshots.active
    host.put_bytes(CONTRACT_SPACE, "x", b"2")
    host.put_bytes(METADATA_SPACE, ROLLBACK_TRANSACTION_KEY, b"")
    assert host.get_bytes(CONTRACT_SPACE, "x") == b"1"

    host.put_bytes(METADATA_SPACE, BEGIN_TRANSACTION_KEY, b"")
    host.put_bytes(CONTRACT_SPACE, "x", b"3")
    host.put_bytes(METADATA_SPACE, COMMIT_TRANSACTION_KEY, b"")
    host.put_bytes(METADATA_SPACE, ROLLBACK_TRANSACTION_KEY, b"")
    assert host.get_bytes(CONTRACT_SPACE, "x") == b"3"


def test_reset_marker_clears_store_and_snapshot(session: Session, host: HostApi) -> None:
    host.put_bytes(CONTRACT_SPACE, "x", b"1")
    host.put_bytes(METADATA_SPACE, BEGIN_TRANSACTION_KEY, b"")
    host.put_bytes(METADATA_SPACE, RESET_KEY, b"")
    assert len(session.store) == 0
    assert not session.snapshots.active


def test_getters_return_none_when_unset(host: HostApi) -> None:
    assert host.get_entry_point() is None
    assert host.get_contract_arguments() is None
    assert host.get_contract_id() is None
    assert host.get_head_info() is None
    assert host.get_last_irreversible_block() is None
    assert host.get_caller() is None
    assert host.get_transaction() is None
    assert host.get_transaction_field("header.payer") is None
    assert host.get_block() is None
    assert host.get_block_field("header.height") is None


def test_entry_point_read_as_uint32(host: HostApi) -> None:
    host.put_object(METADATA_SPACE, ENTRY_POINT_KEY, ValueType.int32(-1))
    assert host.get_entry_point() == 0xFFFFFFFF


def test_scalar_getter_rejects_wrong_kind(host: HostApi) -> None:
    host.put_object(METADATA_SPACE, LAST_IRREVERSIBLE_BLOCK_KEY, ValueType.string("ten"))
    with pytest.raises(DecodeError):
        host.get_last_irreversible_block()


def test_structured_getters(host: HostApi) -> None:
    caller = CallerData(caller=b"\x07" * 25, caller_privilege=Privilege.KERNEL_MODE)
    host.put_object(METADATA_SPACE, "caller", caller)
    assert host.get_caller() == caller

    tx = Transaction(id=b"\x01", header=TransactionHeader(payer=b"payer", rc_limit=10))
    host.put_object(METADATA_SPACE, TRANSACTION_KEY, tx)
    assert host.get_transaction() == tx
    assert host.get_transaction_field("header.payer") == ValueType.bytes_(b"payer")
    assert host.get_transaction_field("header.missing") is None

    head = HeadInfo(head_block_time=99)
    host.put_object(METADATA_SPACE, "head_info", head)
    assert host.get_head_info() == head


def test_check_authority(host: HostApi) -> None:
    assert not host.check_authority(AuthorizationType.CONTRACT_CALL, b"alice")
    host.put_object(
        METADATA_SPACE,
        AUTHORITY_KEY,
        AuthorityList(
            (
                Authority(AuthorizationType.CONTRACT_CALL, b"alice", True),
                Authority(AuthorizationType.CONTRACT_UPLOAD, b"alice", False),
                Authority(AuthorizationType.CONTRACT_CALL, b"alice", False),
            )
        ),
    )
    assert host.check_authority(AuthorizationType.CONTRACT_CALL, b"alice")
    assert not host.check_authority(AuthorizationType.CONTRACT_UPLOAD, b"alice")
    assert not host.check_authority(AuthorizationType.CONTRACT_CALL, b"bob")


def test_require_authority_raises(host: HostApi) -> None:
    with pytest.raises(AuthorityError) as ei:
        host.require_authority(AuthorizationType.TRANSACTION_APPLICATION, b"\xab")
    d = ei.value.to_dict()
    assert d["code"] == "authority_denied"
    assert d["context"] == {"authorization_type": "TRANSACTION_APPLICATION", "account": "ab"}


def test_call_contract_drains_queue(host: HostApi) -> None:
    host.put_object(
        METADATA_SPACE,
        CALL_CONTRACT_RESULTS_KEY,
        ListType.of(ValueKind.BYTES, [b"r1", b"r2"]),
    )
    assert host.call_contract(b"other", 1, b"") == b"r1"
    assert host.call_contract(b"other", 2, b"args") == b"r2"
    assert host.call_contract(b"other", 3, b"") is None


def test_log_appends_in_order(session: Session, host: HostApi) -> None:
    host.log("one")
    host.log("two")
    assert session.logs.read_all() == ["one", "two"]


def test_event_records_sequence_and_source(session: Session, host: HostApi) -> None:
    host.put_bytes(METADATA_SPACE, CONTRACT_ID_KEY, b"\xc0")
    host.event("transfer", b"\x01", [b"alice", b"bob"])
    host.event("burn", b"\x02")
    raw = session.events.read_all()
    assert len(raw) == 2
    first, second = (decode(r, EventData) for r in raw)
    assert first == EventData(
        sequence=0, source=b"\xc0", name="transfer", data=b"\x01", impacted=(b"alice", b"bob")
    )
    assert second.sequence == 1
    assert second.name == "burn"
    assert raw[0] == encode(first)


def test_logs_grow_past_one_mebibyte(session: Session, host: HostApi) -> None:
    line = "x" * 400_000
    for _ in range(3):
        host.log(line)
    assert len(session.logs) == 3
    assert session.logs.read_all() == [line] * 3
    assert len(host.get_bytes(METADATA_SPACE, "logs")) > 1 << 20


def test_large_call_result_is_queued(host: HostApi) -> None:
    blob = b"\x00" * ((1 << 20) + 1)
    host.put_object(METADATA_SPACE, CALL_CONTRACT_RESULTS_KEY, ListType.of(ValueKind.BYTES, [blob]))
    assert host.call_contract(b"other", 0, b"") == blob


def test_long_and_empty_keys_are_stored(host: HostApi) -> None:
    long_key = "k" * 300
    host.put_bytes(METADATA_SPACE, long_key, b"v")
    host.put_bytes("meta", "", b"e")
    assert host.get_bytes(METADATA_SPACE, long_key) == b"v"
    assert host.get_bytes("meta", "") == b"e"
