"""
mockvm.runtime.result_queue — ordered lists stored as single entries.

Both classes keep their whole sequence as one encoded ListType under a
reserved (namespace, key), so they share the store's lifecycle: a snapshot
rollback brings back consumed results and dropped log lines, and clearing
the store empties them.

ResultQueue (consume mode)
    set_results([A, B])   replace the queue
    consume_next() -> A   pop from the front and write the rest back
    consume_next() -> B
    consume_next() -> None

AppendList (append mode)
    append(x)             add one element at the end
    read_all()            full sequence, nothing removed
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from ..codec.encoding import decode, encode
from ..codec.value import ListType, ValueKind, ValueType, scalars_of_kind
from ..errors import DecodeError
from ..logging import get_logger
from .store import Namespace, NamespacedStore

log = get_logger(__name__)


class _StoredList:
    def __init__(self, store: NamespacedStore, namespace: Namespace, key: str, kind: ValueKind) -> None:
        self._store = store
        self._namespace = namespace
        self._key = key
        self._kind = kind

    @property
    def key(self) -> str:
        return self._key

    def _load(self) -> ListType:
        raw = self._store.get(self._namespace, self._key)
        if raw is None:
            return ListType()
        return decode(raw, ListType)

    def _save(self, lst: ListType) -> None:
        self._store.put(self._namespace, self._key, encode(lst))

    def read_all(self) -> List[Any]:
        return scalars_of_kind(self._load(), self._kind, where=self._key)

    def __len__(self) -> int:
        return len(self._load())


class ResultQueue(_StoredList):
    """FIFO of byte strings handed out one per consume_next()."""

    def __init__(self, store: NamespacedStore, namespace: Namespace, key: str) -> None:
        super().__init__(store, namespace, key, ValueKind.BYTES)

    def set_results(self, results: Iterable[bytes]) -> None:
        lst = ListType.of(ValueKind.BYTES, results)
        self._save(lst)
        log.debug("result queue set", extra={"key": self._key, "count": len(lst)})

    def consume_next(self) -> Optional[bytes]:
        lst = self._load()
        if not lst.values:
            return None
        head = lst.values[0]
        if head.kind is not ValueKind.BYTES:
            raise DecodeError(
                f"{self._key}: queued result is {head.kind.name}, expected BYTES",
                context={"key": self._key},
            )
        self._save(ListType(lst.values[1:]))
        log.debug("result consumed", extra={"key": self._key, "remaining": len(lst) - 1})
        return head.value  # type: ignore[return-value]


class AppendList(_StoredList):
    """Append-only accumulator (emitted logs, emitted events)."""

    def append(self, item: Any) -> None:
        self._save(self._load().append(ValueType(self._kind, item)))


__all__ = ["ResultQueue", "AppendList"]
