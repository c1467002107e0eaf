"""
mockvm.runtime.snapshots — single-slot transaction snapshots.

A snapshot is a full copy of the store's flat map taken at
`begin_transaction()`. There is at most one: beginning again replaces it
(no nesting).

    NO_SNAPSHOT --begin--> SNAPSHOT_ACTIVE
    SNAPSHOT_ACTIVE --begin--> SNAPSHOT_ACTIVE     (snapshot replaced)
    SNAPSHOT_ACTIVE --rollback--> NO_SNAPSHOT      (store restored)
    SNAPSHOT_ACTIVE --commit--> NO_SNAPSHOT        (snapshot dropped)
    NO_SNAPSHOT --rollback|commit--> NO_SNAPSHOT   (no-op)

Values are immutable bytes, so copying the map is enough for the snapshot
to be unaffected by later writes.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from ..logging import get_logger
from .store import NamespacedStore

log = get_logger(__name__)


class SnapshotState(str, Enum):
    NO_SNAPSHOT = "no_snapshot"
    SNAPSHOT_ACTIVE = "snapshot_active"


class SnapshotManager:
    def __init__(self, store: NamespacedStore) -> None:
        self._store = store
        self._snapshot: Optional[Mapping[bytes, bytes]] = None

    @property
    def state(self) -> SnapshotState:
        return SnapshotState.NO_SNAPSHOT if self._snapshot is None else SnapshotState.SNAPSHOT_ACTIVE

    @property
    def active(self) -> bool:
        return self._snapshot is not None

    def begin_transaction(self) -> None:
        replaced = self._snapshot is not None
        self._snapshot = MappingProxyType(self._store.export())
        log.debug(
            "snapshot captured",
            extra={"entries": len(self._snapshot), "replaced": replaced},
        )

    def rollback_transaction(self) -> None:
        if self._snapshot is None:
            log.debug("rollback without active snapshot ignored")
            return
        snap, self._snapshot = self._snapshot, None
        self._store.restore(snap)
        log.debug("snapshot restored", extra={"entries": len(snap)})

    def commit_transaction(self) -> None:
        if self._snapshot is None:
            log.debug("commit without active snapshot ignored")
            return
        self._snapshot = None
        log.debug("snapshot committed")

    def discard(self) -> None:
        """Drop any held snapshot without touching the store."""
        self._snapshot = None


__all__ = ["SnapshotState", "SnapshotManager"]
