"""Custom exceptions for the typed_storage package."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typed_storage.domains import StorageDomain
    from typed_storage.values import ValueKind


class StorageError(Exception):
    """Base exception for all storage-related errors."""


class ConfigError(StorageError):
    """Raised when storage settings cannot be read or are invalid."""


class NotInitializedError(StorageError):
    """Raised when the process-wide storage is used before ``init()``."""

    def __init__(self) -> None:
        super().__init__("typed_storage.init() must be called before get_storage()")


class EngineNotInitializedError(StorageError):
    """Raised when an engine is asked to open a namespace before ``initialize()``."""

    def __init__(self, engine_name: str) -> None:
        self.engine_name = engine_name
        super().__init__(f"Engine '{engine_name}' is not initialized; call initialize() first")


class EngineError(StorageError):
    """Raised when an engine operation on an open handle fails."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        msg = f"Engine error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class DomainOpenError(StorageError):
    """Raised when the handle for a domain cannot be opened.

    This is the only failure that is allowed to surface from the registry:
    without a handle no operation against the domain can mean anything.
    """

    def __init__(self, domain: StorageDomain, detail: str = "") -> None:
        self.domain = domain
        msg = f"Cannot open storage domain '{domain.name}' ({domain.namespace})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class CodecError(StorageError):
    """Base for failures while converting a value to or from stored bytes."""


class EncodeError(CodecError):
    """Raised when a value cannot be encoded for storage."""


class DecodeError(CodecError):
    """Raised when stored bytes cannot be decoded into the requested kind."""


class SerializationError(CodecError):
    """Raised when a structured object cannot be serialized or deserialized."""


class KindMismatchError(CodecError):
    """Raised when a key is read with a different primitive kind than it was written with."""

    def __init__(self, key: str, expected: ValueKind, actual: str) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Key '{key}' holds a '{actual}' value but was read as '{expected.value}'"
        )
