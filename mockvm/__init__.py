"""
mockvm — simulated contract host for unit tests.

A tiny, stable façade over the simulated state store so test suites can stage
the world a contract sees and inspect what it did:

- open_session() -> Session
    Fresh namespaced store with snapshot/rollback and a FIFO result queue;
    reset on exit.
- HostApi(session)
    Contract-facing surface: raw/object storage, metadata getters, authority
    checks, call_contract, log and event.
- MockVM(host) / MockVM.for_session(session)
    Test-facing setters for entry point, arguments, caller, transaction,
    block, authorities and injected call results; log/event readers;
    reset and transaction control.
- encode(record) / decode(data, record_type)
    Canonical CBOR codec for value, list and structured records.
"""

from __future__ import annotations

from .codec import (Authority, AuthorityList, AuthorizationType, Block,
                    BlockHeader, BlockTopology, CallerData, EventData,
                    HeadInfo, ListType, Privilege, Transaction,
                    TransactionHeader, ValueKind, ValueType, decode, encode)
from .config import MockVmConfig, load_config
from .errors import (AuthorityError, DecodeError, EncodeError, MockVmError,
                     StoreError)
from .harness import MockAuthority, MockVM
from .runtime import (METADATA_SPACE, HostApi, NamespacedStore, ObjectSpace,
                      Session, open_session)
from .version import __version__


__all__ = [
    "__version__",
    # session & host
    "Session",
    "open_session",
    "HostApi",
    "MockVM",
    "MockAuthority",
    "NamespacedStore",
    "ObjectSpace",
    "METADATA_SPACE",
    # codec
    "encode",
    "decode",
    "ValueKind",
    "ValueType",
    "ListType",
    "BlockTopology",
    "HeadInfo",
    "Privilege",
    "CallerData",
    "TransactionHeader",
    "Transaction",
    "BlockHeader",
    "Block",
    "AuthorizationType",
    "Authority",
    "AuthorityList",
    "EventData",
    # errors & config
    "MockVmError",
    "DecodeError",
    "EncodeError",
    "StoreError",
    "AuthorityError",
    "MockVmConfig",
    "load_config",
]
