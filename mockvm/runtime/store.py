"""
mockvm.runtime.store — namespaced key/value storage over one flat map.

Entries are addressed by (namespace, key) and held in a single backing map
under a composite key:

    uvarint(len(ns)) || ns || utf8(key)

where `ns` is the byte form of the namespace. The length prefix keeps
namespaces from bleeding into each other (b"ab"+"c" vs b"a"+"bc").

Namespaces
----------
- ObjectSpace(system, zone, id): a logical partition as seen by contracts.
  METADATA_SPACE = ObjectSpace(system=True, zone=b"", id=0) is the reserved
  partition the harness and host API use for simulation metadata.
- bytes / str: accepted as raw partition identifiers.

Absence vs empty
----------------
`get` returns None for a key that was never set (or was deleted) and b"" for
a key explicitly set to an empty value.
The empty string is a valid key.

Size caps
---------
Keys and values are unbounded unless MOCKVM_MAX_KEY_BYTES /
MOCKVM_MAX_VALUE_BYTES are set (see mockvm.config).

Backend
-------
The flat map sits behind a tiny StoreBackend protocol; the default is an
in-memory dict. Iteration follows insertion order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (Dict, Iterator, Mapping, Optional, Protocol, Tuple, Union,
                    runtime_checkable)

from ..config import MockVmConfig, load_config
from ..errors import StoreError
from ..logging import get_logger

log = get_logger(__name__)


def _uvarint(n: int) -> bytes:
    """Unsigned LEB128."""
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(0x80 | b)
        else:
            out.append(b)
            return bytes(out)


def _uvarint_decode(buf: bytes, offset: int = 0) -> Tuple[int, int]:
    n = 0
    shift = 0
    i = offset
    while i < len(buf):
        b = buf[i]
        i += 1
        n |= (b & 0x7F) << shift
        if not b & 0x80:
            return n, i
        shift += 7
    raise StoreError("truncated composite key")


# ---------------------------------------------------------------------------
# Namespaces
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ObjectSpace:
    """Logical storage partition: (system flag, zone, id)."""

    system: bool = False
    zone: bytes = b""
    id: int = 0

    def to_bytes(self) -> bytes:
        if self.id < 0:
            raise StoreError("object space id must be non-negative", context={"id": self.id})
        zone = bytes(self.zone)
        return (b"\x01" if self.system else b"\x00") + _uvarint(len(zone)) + zone + _uvarint(self.id)


METADATA_SPACE = ObjectSpace(system=True, zone=b"", id=0)

Namespace = Union[ObjectSpace, bytes, bytearray, str]


def namespace_bytes(ns: Namespace) -> bytes:
    if isinstance(ns, ObjectSpace):
        return ns.to_bytes()
    if isinstance(ns, (bytes, bytearray)):
        return bytes(ns)
    if isinstance(ns, str):
        return ns.encode("utf-8")
    raise StoreError("unsupported namespace type", context={"py_type": type(ns).__name__})


def composite_key(ns: Namespace, key: str) -> bytes:
    nsb = namespace_bytes(ns)
    return _uvarint(len(nsb)) + nsb + key.encode("utf-8")


def split_composite_key(ck: bytes) -> Tuple[bytes, str]:
    n, i = _uvarint_decode(ck)
    if i + n > len(ck):
        raise StoreError("truncated composite key")
    return ck[i : i + n], ck[i + n :].decode("utf-8")


# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------


@runtime_checkable
class StoreBackend(Protocol):
    """Flat map the namespaced store writes through."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def exists(self, key: bytes) -> bool: ...
    def clear(self) -> None: ...
    def items(self) -> Iterator[Tuple[bytes, bytes]]: ...
    def __len__(self) -> int: ...


class MemoryBackend:
    """In-memory backend (insertion-ordered dict)."""

    def __init__(self) -> None:
        self._store: Dict[bytes, bytes] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        self._store[key] = value

    def delete(self, key: bytes) -> None:
        self._store.pop(key, None)

    def exists(self, key: bytes) -> bool:
        return key in self._store

    def clear(self) -> None:
        self._store.clear()

    def items(self) -> Iterator[Tuple[bytes, bytes]]:
        return iter(list(self._store.items()))

    def __len__(self) -> int:
        return len(self._store)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class NamespacedStore:
    """get/put/delete over (namespace, key) -> bytes."""

    def __init__(
        self,
        backend: Optional[StoreBackend] = None,
        *,
        config: Optional[MockVmConfig] = None,
    ) -> None:
        if backend is not None:
            for attr in ("get", "set", "delete", "exists", "clear", "items"):
                if not callable(getattr(backend, attr, None)):
                    raise StoreError(f"backend missing method: {attr}")
        self._backend: StoreBackend = backend if backend is not None else MemoryBackend()
        self._cfg = config or load_config()

    # --- validation ---------------------------------------------------------

    def _key(self, namespace: Namespace, key: str) -> bytes:
        if not isinstance(key, str):
            raise StoreError("store key must be str", context={"py_type": type(key).__name__})
        ck = composite_key(namespace, key)
        cap = self._cfg.max_key_bytes
        if cap is not None and len(ck) > cap:
            raise StoreError(
                f"store key too long (>{cap} bytes)",
                context={"key": key, "len": len(ck)},
            )
        return ck

    def _value(self, value: bytes) -> bytes:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise StoreError("store value must be bytes", context={"py_type": type(value).__name__})
        b = bytes(value)
        cap = self._cfg.max_value_bytes
        if cap is not None and len(b) > cap:
            raise StoreError(
                f"store value too large (>{cap} bytes)",
                context={"len": len(b)},
            )
        return b

    # --- public API ---------------------------------------------------------

    def put(self, namespace: Namespace, key: str, value: bytes) -> None:
        """Insert or overwrite the entry."""
        self._backend.set(self._key(namespace, key), self._value(value))

    def get(self, namespace: Namespace, key: str) -> Optional[bytes]:
        """Return the current value, or None if never set / deleted."""
        return self._backend.get(self._key(namespace, key))

    def delete(self, namespace: Namespace, key: str) -> None:
        """Remove the entry if present (no-op otherwise)."""
        self._backend.delete(self._key(namespace, key))

    def exists(self, namespace: Namespace, key: str) -> bool:
        return self._backend.exists(self._key(namespace, key))

    def items(self, namespace: Namespace) -> Iterator[Tuple[str, bytes]]:
        """Iterate (key, value) pairs of one namespace in insertion order."""
        nsb = namespace_bytes(namespace)
        for ck, v in self._backend.items():
            ns, key = split_composite_key(ck)
            if ns == nsb:
                yield key, v

    def clear(self) -> None:
        n = len(self._backend)
        self._backend.clear()
        log.debug("store cleared", extra={"entries": n})

    def export(self) -> Dict[bytes, bytes]:
        """Copy of the flat map (composite key -> value)."""
        return dict(self._backend.items())

    def restore(self, entries: Mapping[bytes, bytes]) -> None:
        """Replace every entry with `entries` (as returned by export())."""
        self._backend.clear()
        for ck, v in entries.items():
            self._backend.set(ck, v)

    def __len__(self) -> int:
        return len(self._backend)


__all__ = [
    "ObjectSpace",
    "METADATA_SPACE",
    "Namespace",
    "namespace_bytes",
    "composite_key",
    "split_composite_key",
    "StoreBackend",
    "MemoryBackend",
    "NamespacedStore",
]
