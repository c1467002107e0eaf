"""
mockvm.runtime.host_api — the host surface contract code talks to.

HostApi wraps a Session and offers the read/write primitives a contract
runtime exposes, plus the contract-facing getters that read the simulation
metadata the harness wrote.

Primitives
----------
- put_bytes(ns, key, value) / get_bytes(ns, key) / remove(ns, key)
- put_object(ns, key, record, encode_fn=encode)
- get_object(ns, key, record_type) -> record | None

Writing to a control marker key in METADATA_SPACE (reset, begin_transaction,
rollback_transaction, commit_transaction) runs the matching session transition
instead of storing anything; the value written is ignored.

Contract-facing helpers
-----------------------
get_entry_point, get_contract_arguments, get_contract_id, get_head_info,
get_last_irreversible_block, get_caller, get_transaction(_field),
get_block(_field), check_authority / require_authority, call_contract,
log, event.

Every getter returns None when the metadata was never set. Stored bytes that
do not decode as the expected record raise DecodeError.
"""

from __future__ import annotations

from typing import Iterable, Optional, Type, TypeVar

from ..codec.encoding import EncodeFn, decode, encode
from ..codec.records import (AuthorityList, AuthorizationType, Block,
                             CallerData, EventData, HeadInfo, Record,
                             Transaction, field_value)
from ..codec.value import ValueKind, ValueType
from ..errors import AuthorityError, DecodeError
from ..logging import get_logger, with_fields
from .session import (AUTHORITY_KEY, BLOCK_KEY, CALLER_KEY,
                      CONTRACT_ARGUMENTS_KEY, CONTRACT_ID_KEY,
                      CONTROL_MARKERS, ENTRY_POINT_KEY, HEAD_INFO_KEY,
                      LAST_IRREVERSIBLE_BLOCK_KEY, TRANSACTION_KEY, Session)
from .store import METADATA_SPACE, Namespace, namespace_bytes

T = TypeVar("T")

log = with_fields(get_logger(__name__), component="host_api")

_METADATA_NS = namespace_bytes(METADATA_SPACE)


def _is_metadata(ns: Namespace) -> bool:
    return namespace_bytes(ns) == _METADATA_NS


class HostApi:
    def __init__(self, session: Session) -> None:
        self.session = session

    # --- primitives ---------------------------------------------------------

    def put_bytes(self, namespace: Namespace, key: str, value: bytes) -> None:
        if key in CONTROL_MARKERS and _is_metadata(namespace):
            self.session.apply_control(key)
            return
        self.session.store.put(namespace, key, value)

    def get_bytes(self, namespace: Namespace, key: str) -> Optional[bytes]:
        return self.session.store.get(namespace, key)

    def remove(self, namespace: Namespace, key: str) -> None:
        self.session.store.delete(namespace, key)

    def put_object(
        self,
        namespace: Namespace,
        key: str,
        record: object,
        encode_fn: EncodeFn = encode,
    ) -> None:
        self.put_bytes(namespace, key, encode_fn(record))

    def get_object(self, namespace: Namespace, key: str, record_type: Type[T]) -> Optional[T]:
        raw = self.get_bytes(namespace, key)
        if raw is None:
            return None
        return decode(raw, record_type)

    # --- metadata getters ---------------------------------------------------

    def _scalar(self, key: str, kind: ValueKind) -> Optional[ValueType]:
        v = self.get_object(METADATA_SPACE, key, ValueType)
        if v is not None and v.kind is not kind:
            raise DecodeError(
                f"{key}: stored {v.kind.name}, expected {kind.name}",
                context={"key": key},
            )
        return v

    def get_entry_point(self) -> Optional[int]:
        """Entry point as an unsigned 32-bit selector."""
        v = self._scalar(ENTRY_POINT_KEY, ValueKind.INT32)
        return None if v is None else int(v.value) & 0xFFFFFFFF

    def get_contract_arguments(self) -> Optional[bytes]:
        return self.get_bytes(METADATA_SPACE, CONTRACT_ARGUMENTS_KEY)

    def get_contract_id(self) -> Optional[bytes]:
        return self.get_bytes(METADATA_SPACE, CONTRACT_ID_KEY)

    def get_head_info(self) -> Optional[HeadInfo]:
        return self.get_object(METADATA_SPACE, HEAD_INFO_KEY, HeadInfo)

    def get_last_irreversible_block(self) -> Optional[int]:
        v = self._scalar(LAST_IRREVERSIBLE_BLOCK_KEY, ValueKind.UINT64)
        return None if v is None else int(v.value)

    def get_caller(self) -> Optional[CallerData]:
        return self.get_object(METADATA_SPACE, CALLER_KEY, CallerData)

    def get_transaction(self) -> Optional[Transaction]:
        return self.get_object(METADATA_SPACE, TRANSACTION_KEY, Transaction)

    def get_transaction_field(self, path: str) -> Optional[ValueType]:
        return self._field(self.get_transaction(), path)

    def get_block(self) -> Optional[Block]:
        return self.get_object(METADATA_SPACE, BLOCK_KEY, Block)

    def get_block_field(self, path: str) -> Optional[ValueType]:
        return self._field(self.get_block(), path)

    @staticmethod
    def _field(record: Optional[Record], path: str) -> Optional[ValueType]:
        if record is None:
            return None
        return field_value(record, path)

    # --- authority ----------------------------------------------------------

    def check_authority(self, authorization_type: AuthorizationType, account: bytes) -> bool:
        """
        Look up (type, account) in the authority list; the first matching
        entry decides. Unlisted pairs are not authorized.
        """
        auths = self.get_object(METADATA_SPACE, AUTHORITY_KEY, AuthorityList)
        if auths is None:
            return False
        account = bytes(account)
        for a in auths.authorities:
            if a.authorization_type == authorization_type and a.account == account:
                return a.authorized
        return False

    def require_authority(self, authorization_type: AuthorizationType, account: bytes) -> None:
        if not self.check_authority(authorization_type, account):
            raise AuthorityError(
                "account not authorized",
                context={
                    "authorization_type": AuthorizationType(authorization_type).name,
                    "account": bytes(account).hex(),
                },
            )

    # --- calls, logs, events ------------------------------------------------

    def call_contract(self, contract_id: bytes, entry_point: int, args: bytes) -> Optional[bytes]:
        """Return the next injected call result (None once the queue is exhausted)."""
        res = self.session.call_results.consume_next()
        log.debug(
            "call_contract",
            extra={
                "contract_id": bytes(contract_id).hex(),
                "entry_point": entry_point,
                "args_len": len(args),
                "hit": res is not None,
            },
        )
        return res

    def log(self, message: str) -> None:
        self.session.logs.append(message)

    def event(self, name: str, data: bytes, impacted: Iterable[bytes] = ()) -> None:
        ev = EventData(
            sequence=len(self.session.events),
            source=self.get_contract_id() or b"",
            name=name,
            data=data,
            impacted=tuple(impacted),
        )
        self.session.events.append(encode(ev))


__all__ = ["HostApi"]
