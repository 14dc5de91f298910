"""typed_storage — typed key-value persistence over isolated storage domains.

Primitives are stored natively, anything else as JSON.  The caller's default
value decides how an entry is read back, and no storage failure ever escapes
an operation: it turns into the default, ``False`` or an empty set.
"""

from typed_storage.codec import TypeCodec
from typed_storage.config import StorageSettings, load_settings
from typed_storage.domains import StorageDomain
from typed_storage.exceptions import (
    CodecError,
    ConfigError,
    DecodeError,
    DomainOpenError,
    EncodeError,
    EngineError,
    EngineNotInitializedError,
    KindMismatchError,
    NotInitializedError,
    SerializationError,
    StorageError,
)
from typed_storage.facade import DataStorage, get_storage, init, shutdown
from typed_storage.registry import DomainRegistry
from typed_storage.result import ErrorCause, OperationResult
from typed_storage.values import Bool, Float32, Float64, Int32, Int64, Text, ValueKind

__all__ = [
    "Bool",
    "CodecError",
    "ConfigError",
    "DataStorage",
    "DecodeError",
    "DomainOpenError",
    "DomainRegistry",
    "EncodeError",
    "EngineError",
    "EngineNotInitializedError",
    "ErrorCause",
    "Float32",
    "Float64",
    "Int32",
    "Int64",
    "KindMismatchError",
    "NotInitializedError",
    "OperationResult",
    "SerializationError",
    "StorageDomain",
    "StorageError",
    "StorageSettings",
    "Text",
    "TypeCodec",
    "ValueKind",
    "get_storage",
    "init",
    "load_settings",
    "shutdown",
]
