"""
mockvm.runtime — simulated host state and the APIs that touch it.

Convenience re-exports live here so callers can do:

    from mockvm.runtime import Session, HostApi, open_session
    from mockvm.runtime import store, snapshots  # module namespaces

Notes
-----
- All state lives in one NamespacedStore per Session; queues, logs and events
  included, so snapshot rollback and reset cover them too.
- Nothing here touches the network or the filesystem.
"""

from __future__ import annotations

from ..version import __version__  # re-export
from . import result_queue as result_queue
from . import snapshots as snapshots
from . import store as store
from .host_api import HostApi
from .result_queue import AppendList, ResultQueue
from .session import CONTROL_MARKERS, Session, open_session
from .snapshots import SnapshotManager, SnapshotState
from .store import METADATA_SPACE, MemoryBackend, NamespacedStore, ObjectSpace, StoreBackend

__all__ = [
    "__version__",
    # Core classes
    "Session",
    "open_session",
    "HostApi",
    "NamespacedStore",
    "StoreBackend",
    "MemoryBackend",
    "ObjectSpace",
    "METADATA_SPACE",
    "SnapshotManager",
    "SnapshotState",
    "ResultQueue",
    "AppendList",
    "CONTROL_MARKERS",
    # Namespaces (modules)
    "store",
    "snapshots",
    "result_queue",
]
