"""EncryptedHandle — encrypts entry payloads at rest with Fernet."""

from __future__ import annotations

import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from typed_storage.engine.base import Handle
from typed_storage.exceptions import DecodeError
from typed_storage.values import ValueKind

_SALT_PREFIX = b"typed_storage:"


def derive_key(passphrase: str, namespace: str, *, iterations: int) -> bytes:
    """Derive a Fernet key from *passphrase*, salted by the namespace.

    The salt is deterministic so every process opening the namespace with the
    same passphrase arrives at the same key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_SALT_PREFIX + namespace.encode("utf-8"),
        iterations=iterations,
    )
    return base64.urlsafe_b64encode(kdf.derive(passphrase.encode("utf-8")))


class EncryptedHandle(Handle):
    """Wraps another handle, encrypting payloads on write and decrypting on read.

    Keys and kind tags stay in the clear; only payloads are encrypted.  A
    payload that fails authentication (wrong passphrase, tampering) raises
    :class:`DecodeError`.
    """

    def __init__(self, inner: Handle, passphrase: str, *, iterations: int) -> None:
        super().__init__(inner.namespace)
        self._inner = inner
        self._fernet = Fernet(derive_key(passphrase, inner.namespace, iterations=iterations))

    def write_raw(self, key: str, kind: ValueKind, payload: bytes) -> None:
        self._inner.write_raw(key, kind, self._fernet.encrypt(payload))

    def read_raw(self, key: str) -> tuple[str, bytes] | None:
        row = self._inner.read_raw(key)
        if row is None:
            return None
        kind, token = row
        try:
            return kind, self._fernet.decrypt(token)
        except InvalidToken as exc:
            raise DecodeError(
                f"Cannot decrypt '{key}' in '{self.namespace}': wrong key or corrupt data"
            ) from exc

    def remove(self, key: str) -> None:
        self._inner.remove(key)

    def contains(self, key: str) -> bool:
        return self._inner.contains(key)

    def clear_all(self) -> None:
        self._inner.clear_all()

    def all_keys(self) -> list[str]:
        return self._inner.all_keys()

    def close(self) -> None:
        self._inner.close()
