"""
mockvm.runtime.session — one simulation session's mutable state.

A Session owns:
  - store        NamespacedStore holding every entry
  - snapshots    SnapshotManager over that store
  - call_results ResultQueue under METADATA_SPACE/"call_contract_results"
  - logs         AppendList of str under METADATA_SPACE/"logs"
  - events       AppendList of bytes under METADATA_SPACE/"events"

Lifecycle is tied to a test: construct (or `open_session()`), mutate freely,
and `reset()` on teardown. Using the Session as a context manager, or
`open_session()`, guarantees the reset even if the body raises.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from ..codec.value import ValueKind
from ..config import MockVmConfig
from ..logging import get_logger, session_scope, short_uuid
from .result_queue import AppendList, ResultQueue
from .snapshots import SnapshotManager
from .store import METADATA_SPACE, NamespacedStore, StoreBackend

log = get_logger(__name__)

# Reserved keys in METADATA_SPACE.
ENTRY_POINT_KEY = "entry_point"
CONTRACT_ARGUMENTS_KEY = "contract_arguments"
CONTRACT_ID_KEY = "contract_id"
HEAD_INFO_KEY = "head_info"
AUTHORITY_KEY = "authority"
LAST_IRREVERSIBLE_BLOCK_KEY = "last_irreversible_block"
CALLER_KEY = "caller"
TRANSACTION_KEY = "transaction"
BLOCK_KEY = "block"
CALL_CONTRACT_RESULTS_KEY = "call_contract_results"
LOGS_KEY = "logs"
EVENTS_KEY = "events"

# Control markers: writing any value under one of these triggers the
# transition; nothing is stored.
RESET_KEY = "reset"
BEGIN_TRANSACTION_KEY = "begin_transaction"
ROLLBACK_TRANSACTION_KEY = "rollback_transaction"
COMMIT_TRANSACTION_KEY = "commit_transaction"

CONTROL_MARKERS = frozenset(
    (RESET_KEY, BEGIN_TRANSACTION_KEY, ROLLBACK_TRANSACTION_KEY, COMMIT_TRANSACTION_KEY)
)


class Session:
    def __init__(
        self,
        backend: Optional[StoreBackend] = None,
        *,
        config: Optional[MockVmConfig] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id or short_uuid()
        self.store = NamespacedStore(backend, config=config)
        self.snapshots = SnapshotManager(self.store)
        self.call_results = ResultQueue(self.store, METADATA_SPACE, CALL_CONTRACT_RESULTS_KEY)
        self.logs = AppendList(self.store, METADATA_SPACE, LOGS_KEY, ValueKind.STRING)
        self.events = AppendList(self.store, METADATA_SPACE, EVENTS_KEY, ValueKind.BYTES)

    # --- transitions --------------------------------------------------------

    def reset(self) -> None:
        """Empty every namespace, queue and accumulator; drop any snapshot."""
        self.snapshots.discard()
        self.store.clear()

    def begin_transaction(self) -> None:
        self.snapshots.begin_transaction()

    def rollback_transaction(self) -> None:
        self.snapshots.rollback_transaction()

    def commit_transaction(self) -> None:
        self.snapshots.commit_transaction()

    def apply_control(self, key: str) -> bool:
        """
        Run the transition for a control marker key. Returns False if `key`
        is not a control marker.
        """
        if key not in CONTROL_MARKERS:
            return False
        log.debug("control marker", extra={"key": key})
        if key == RESET_KEY:
            self.reset()
        elif key == BEGIN_TRANSACTION_KEY:
            self.begin_transaction()
        elif key == ROLLBACK_TRANSACTION_KEY:
            self.rollback_transaction()
        else:
            self.commit_transaction()
        return True

    # --- context management -------------------------------------------------

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.reset()


@contextmanager
def open_session(
    backend: Optional[StoreBackend] = None,
    *,
    config: Optional[MockVmConfig] = None,
    session_id: Optional[str] = None,
) -> Iterator[Session]:
    """Yield a fresh Session with session_id bound for logging; reset on exit."""
    sess = Session(backend, config=config, session_id=session_id)
    with session_scope(sess.session_id):
        with sess:
            yield sess


__all__ = [
    "Session",
    "open_session",
    "CONTROL_MARKERS",
    "ENTRY_POINT_KEY",
    "CONTRACT_ARGUMENTS_KEY",
    "CONTRACT_ID_KEY",
    "HEAD_INFO_KEY",
    "AUTHORITY_KEY",
    "LAST_IRREVERSIBLE_BLOCK_KEY",
    "CALLER_KEY",
    "TRANSACTION_KEY",
    "BLOCK_KEY",
    "CALL_CONTRACT_RESULTS_KEY",
    "LOGS_KEY",
    "EVENTS_KEY",
    "RESET_KEY",
    "BEGIN_TRANSACTION_KEY",
    "ROLLBACK_TRANSACTION_KEY",
    "COMMIT_TRANSACTION_KEY",
]
