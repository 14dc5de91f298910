"""InMemoryEngine — zero-config, dict-backed engine for development and testing."""

from __future__ import annotations

import threading

from typed_storage.engine.base import Engine, Handle
from typed_storage.values import ValueKind


class InMemoryHandle(Handle):
    """Handle over one namespace dict.  Data is lost on process exit."""

    def __init__(
        self,
        namespace: str,
        data: dict[str, tuple[str, bytes]],
        lock: threading.RLock,
    ) -> None:
        super().__init__(namespace)
        self._data = data
        self._lock = lock

    def write_raw(self, key: str, kind: ValueKind, payload: bytes) -> None:
        with self._lock:
            self._data[key] = (kind.value, payload)

    def read_raw(self, key: str) -> tuple[str, bytes] | None:
        with self._lock:
            return self._data.get(key)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def clear_all(self) -> None:
        with self._lock:
            self._data.clear()

    def all_keys(self) -> list[str]:
        with self._lock:
            return list(self._data.keys())


class InMemoryEngine(Engine):
    """In-memory engine using nested dicts.

    Handles opened for the same namespace share one dict, so two registries
    built on the same engine see each other's writes, much like two processes
    sharing an on-disk namespace.
    """

    name = "memory"

    def __init__(self, *, kdf_iterations: int = 390_000) -> None:
        super().__init__(kdf_iterations=kdf_iterations)
        self._namespaces: dict[str, dict[str, tuple[str, bytes]]] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _open(self, namespace: str) -> Handle:
        with self._guard:
            data = self._namespaces.setdefault(namespace, {})
            lock = self._locks.setdefault(namespace, threading.RLock())
        return InMemoryHandle(namespace, data, lock)
