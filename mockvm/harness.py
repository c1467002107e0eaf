"""
mockvm.harness — test-setup façade over the host API.

MockVM is what a test uses to stage the world a contract will observe:

    with open_session() as sess:
        vm = MockVM.for_session(sess)
        vm.set_contract_id(b"\\x01" * 20)
        vm.set_call_contract_results([b"ok"])
        ...run contract code against HostApi(sess)...
        assert vm.get_logs() == ["hello"]

Every setter writes through HostApi.put_bytes / put_object into
METADATA_SPACE, so contract-side reads see exactly what was staged. The
transaction helpers and reset() write an empty value to the matching control
marker key rather than calling the session directly.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from .codec.records import (Authority, AuthorityList, Block, CallerData,
                            HeadInfo, Transaction)
from .codec.value import ListType, ValueKind, ValueType, scalars_of_kind
from .errors import EncodeError
from .runtime.host_api import HostApi
from .runtime.session import (AUTHORITY_KEY, BEGIN_TRANSACTION_KEY, BLOCK_KEY,
                              CALL_CONTRACT_RESULTS_KEY, CALLER_KEY,
                              COMMIT_TRANSACTION_KEY, CONTRACT_ARGUMENTS_KEY,
                              CONTRACT_ID_KEY, ENTRY_POINT_KEY, EVENTS_KEY,
                              HEAD_INFO_KEY, LAST_IRREVERSIBLE_BLOCK_KEY,
                              LOGS_KEY, RESET_KEY, ROLLBACK_TRANSACTION_KEY,
                              TRANSACTION_KEY, Session)
from .runtime.store import METADATA_SPACE

U32_MAX = 0xFFFFFFFF

# Name used by harness code for the set_authorities() entries.
MockAuthority = Authority


def _u32_to_i32(v: int) -> int:
    """Reinterpret an unsigned 32-bit selector as the signed int32 it is stored as."""
    if isinstance(v, bool) or not isinstance(v, int) or not 0 <= v <= U32_MAX:
        raise EncodeError("entry point must be a uint32", context={"value": repr(v)})
    return v - (1 << 32) if v > 0x7FFFFFFF else v


class MockVM:
    def __init__(self, host: HostApi) -> None:
        self.host = host

    @classmethod
    def for_session(cls, session: Session) -> "MockVM":
        return cls(HostApi(session))

    # --- setters ------------------------------------------------------------

    def set_entry_point(self, entry_point: int) -> None:
        self.host.put_object(METADATA_SPACE, ENTRY_POINT_KEY, ValueType.int32(_u32_to_i32(entry_point)))

    def set_contract_arguments(self, args: bytes) -> None:
        self.host.put_bytes(METADATA_SPACE, CONTRACT_ARGUMENTS_KEY, args)

    def set_contract_id(self, contract_id: bytes) -> None:
        self.host.put_bytes(METADATA_SPACE, CONTRACT_ID_KEY, contract_id)

    def set_head_info(self, head_info: HeadInfo) -> None:
        self.host.put_object(METADATA_SPACE, HEAD_INFO_KEY, head_info)

    def set_last_irreversible_block(self, height: int) -> None:
        self.host.put_object(METADATA_SPACE, LAST_IRREVERSIBLE_BLOCK_KEY, ValueType.uint64(height))

    def set_caller(self, caller: CallerData) -> None:
        self.host.put_object(METADATA_SPACE, CALLER_KEY, caller)

    def set_transaction(self, transaction: Transaction) -> None:
        self.host.put_object(METADATA_SPACE, TRANSACTION_KEY, transaction)

    def set_block(self, block: Block) -> None:
        self.host.put_object(METADATA_SPACE, BLOCK_KEY, block)

    def set_authorities(self, authorities: Iterable[Authority]) -> None:
        self.host.put_object(METADATA_SPACE, AUTHORITY_KEY, AuthorityList(tuple(authorities)))

    def set_call_contract_results(self, results: Iterable[bytes]) -> None:
        """Replace the queue of results handed out by successive call_contract()."""
        self.host.put_object(
            METADATA_SPACE, CALL_CONTRACT_RESULTS_KEY, ListType.of(ValueKind.BYTES, results)
        )

    # --- readers ------------------------------------------------------------

    def get_logs(self) -> List[str]:
        return self._read_list(LOGS_KEY, ValueKind.STRING)

    def get_events(self) -> List[bytes]:
        """Encoded EventData records in emission order (decode with EventData)."""
        return self._read_list(EVENTS_KEY, ValueKind.BYTES)

    def _read_list(self, key: str, kind: ValueKind) -> list:
        lst: Optional[ListType] = self.host.get_object(METADATA_SPACE, key, ListType)
        if lst is None:
            return []
        return scalars_of_kind(lst, kind, where=key)

    # --- control markers ----------------------------------------------------

    def reset(self) -> None:
        self.host.put_bytes(METADATA_SPACE, RESET_KEY, b"")

    def begin_transaction(self) -> None:
        self.host.put_bytes(METADATA_SPACE, BEGIN_TRANSACTION_KEY, b"")

    def rollback_transaction(self) -> None:
        self.host.put_bytes(METADATA_SPACE, ROLLBACK_TRANSACTION_KEY, b"")

    def commit_transaction(self) -> None:
        self.host.put_bytes(METADATA_SPACE, COMMIT_TRANSACTION_KEY, b"")


__all__ = ["MockVM", "MockAuthority", "U32_MAX"]
