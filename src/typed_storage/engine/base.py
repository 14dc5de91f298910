"""Engine and Handle — the narrow interface to the embedded key-value engine."""

from __future__ import annotations

import struct
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar

from typed_storage.exceptions import (
    DecodeError,
    EncodeError,
    EngineNotInitializedError,
    KindMismatchError,
)
from typed_storage.values import ValueKind

# Native payload layouts, one per fixed-width kind.
_FORMATS: dict[ValueKind, struct.Struct] = {
    ValueKind.INT32: struct.Struct("<i"),
    ValueKind.INT64: struct.Struct("<q"),
    ValueKind.FLOAT32: struct.Struct("<f"),
    ValueKind.FLOAT64: struct.Struct("<d"),
    ValueKind.BOOL: struct.Struct("<?"),
}


class Handle(ABC):
    """An open connection to one namespace of the engine.

    Subclasses only implement raw access to ``(kind, payload)`` rows; the
    per-kind ``encode_*`` / ``decode_*`` natives are shared.  Every entry
    carries the kind it was written with, so a read with a different kind is
    detected instead of reinterpreting the bytes.

    ``decode_*`` return *default* verbatim when the key is absent.
    """

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace

    # ── raw access ───────────────────────────────────────────

    @abstractmethod
    def write_raw(self, key: str, kind: ValueKind, payload: bytes) -> None:
        """Create or overwrite the entry for *key*."""
        ...

    @abstractmethod
    def read_raw(self, key: str) -> tuple[str, bytes] | None:
        """Return ``(kind, payload)`` for *key*, or ``None`` if absent."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete *key*.  No-op if the key does not exist."""
        ...

    @abstractmethod
    def contains(self, key: str) -> bool: ...

    @abstractmethod
    def clear_all(self) -> None:
        """Delete every key in the namespace."""
        ...

    @abstractmethod
    def all_keys(self) -> list[str]:
        """Return every key in the namespace, in no particular order."""
        ...

    def close(self) -> None:
        """Release engine resources.  The default implementation does nothing."""

    # ── natives ──────────────────────────────────────────────

    def encode_text(self, key: str, value: str) -> bool:
        return self._encode(key, ValueKind.TEXT, value)

    def encode_int(self, key: str, value: int) -> bool:
        return self._encode(key, ValueKind.INT32, value)

    def encode_long(self, key: str, value: int) -> bool:
        return self._encode(key, ValueKind.INT64, value)

    def encode_float(self, key: str, value: float) -> bool:
        return self._encode(key, ValueKind.FLOAT32, value)

    def encode_double(self, key: str, value: float) -> bool:
        return self._encode(key, ValueKind.FLOAT64, value)

    def encode_bool(self, key: str, value: bool) -> bool:
        return self._encode(key, ValueKind.BOOL, value)

    def decode_text(self, key: str, default: str) -> str:
        return self._decode(key, ValueKind.TEXT, default)

    def decode_int(self, key: str, default: int) -> int:
        return self._decode(key, ValueKind.INT32, default)

    def decode_long(self, key: str, default: int) -> int:
        return self._decode(key, ValueKind.INT64, default)

    def decode_float(self, key: str, default: float) -> float:
        return self._decode(key, ValueKind.FLOAT32, default)

    def decode_double(self, key: str, default: float) -> float:
        return self._decode(key, ValueKind.FLOAT64, default)

    def decode_bool(self, key: str, default: bool) -> bool:
        return self._decode(key, ValueKind.BOOL, default)

    def _encode(self, key: str, kind: ValueKind, value: Any) -> bool:
        try:
            if kind is ValueKind.TEXT:
                payload = value.encode("utf-8")
            else:
                payload = _FORMATS[kind].pack(value)
        except (struct.error, OverflowError, UnicodeEncodeError, AttributeError) as exc:
            raise EncodeError(f"Cannot encode {value!r} as {kind.value}: {exc}") from exc
        self.write_raw(key, kind, payload)
        return True

    def _decode(self, key: str, kind: ValueKind, default: Any) -> Any:
        row = self.read_raw(key)
        if row is None:
            return default
        stored_kind, payload = row
        if stored_kind != kind.value:
            raise KindMismatchError(key, kind, stored_kind)
        try:
            if kind is ValueKind.TEXT:
                return payload.decode("utf-8")
            return _FORMATS[kind].unpack(payload)[0]
        except (struct.error, UnicodeDecodeError) as exc:
            raise DecodeError(f"Corrupt {kind.value} payload for '{key}': {exc}") from exc


class Engine(ABC):
    """Process-wide engine state plus a factory for namespace handles.

    ``initialize`` must be called once before ``open``; opening before that
    raises :class:`EngineNotInitializedError`.

    Parameters:
        kdf_iterations: PBKDF2 rounds used to turn an encryption passphrase
                        into a cipher key for encrypted namespaces.
    """

    name: ClassVar[str] = "base"

    def __init__(self, *, kdf_iterations: int = 390_000) -> None:
        self.kdf_iterations = kdf_iterations
        self._root_dir: Path | None = None
        self._initialized = False
        self._init_lock = threading.Lock()

    def initialize(self, root_dir: str | Path | None = None) -> None:
        with self._init_lock:
            if root_dir is not None:
                self._root_dir = Path(root_dir).expanduser()
            self._setup()
            self._initialized = True

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def root_dir(self) -> Path | None:
        return self._root_dir

    def open(self, namespace: str, *, crypt_key: str | None = None) -> Handle:
        """Open *namespace*, encrypting payloads at rest when *crypt_key* is given."""
        if not self._initialized:
            raise EngineNotInitializedError(self.name)
        handle = self._open(namespace)
        if crypt_key is None:
            return handle

        from typed_storage.engine.crypto import EncryptedHandle

        return EncryptedHandle(handle, crypt_key, iterations=self.kdf_iterations)

    def _setup(self) -> None:
        """Prepare process-wide state.  Called by ``initialize``."""

    @abstractmethod
    def _open(self, namespace: str) -> Handle: ...
