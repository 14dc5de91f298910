"""TypeCodec — picks the native or the serialized path for every value.

Encoding looks at the value itself.  Decoding never looks at stored data to
choose a path: the caller's *default* is the type witness.  A primitive
default selects the native decoder of the same kind; anything else means
"this key holds serialized text, parse it into this shape".
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from typed_storage.serializer import JsonSerializer, ObjectSerializer
from typed_storage.values import ValueKind, classify, is_tagged, unwrap, wrap

if TYPE_CHECKING:
    from typed_storage.engine.base import Handle


def describe_kind(value: Any) -> str:
    """Short label for log records: the primitive kind or ``object:<type>``."""
    kind = classify(value)
    if kind is not None:
        return kind.value
    return f"object:{type(value).__name__}"


class TypeCodec:
    """Stateless dispatcher between values and a handle's natives.

    Parameters:
        serializer: Generic object serializer.  Defaults to
                    :class:`JsonSerializer`.
    """

    def __init__(self, serializer: ObjectSerializer | None = None) -> None:
        self._serializer: ObjectSerializer = serializer or JsonSerializer()

    @property
    def serializer(self) -> ObjectSerializer:
        return self._serializer

    def encode(self, handle: Handle, key: str, value: Any) -> bool:
        """Write *value* under *key*; return whether the engine accepted it.

        Raises:
            EncodeError: The value does not fit its kind (e.g. an ``int``
                beyond 64 bits).
            SerializationError: A structured value cannot be serialized.
        """
        kind = classify(value)
        raw = unwrap(value)
        match kind:
            case ValueKind.TEXT:
                return handle.encode_text(key, raw)
            case ValueKind.INT32:
                return handle.encode_int(key, raw)
            case ValueKind.INT64:
                return handle.encode_long(key, raw)
            case ValueKind.FLOAT32:
                return handle.encode_float(key, raw)
            case ValueKind.FLOAT64:
                return handle.encode_double(key, raw)
            case ValueKind.BOOL:
                return handle.encode_bool(key, raw)
            case None:
                return handle.encode_text(key, self._serializer.dumps(value))

    def decode(self, handle: Handle, key: str, default: Any, shape: Any = None) -> Any:
        """Read *key* using *default* as the type witness.

        Args:
            handle: Open handle of the domain.
            key: Entry key.
            default: Returned when the key is absent; its kind selects the
                decode path.  A wrapper default (``Int32(0)``) yields a
                wrapped result.
            shape: Explicit target type for structured values, for when the
                default alone is not specific enough (``list[Profile]``).

        Raises:
            KindMismatchError: The key was written with another kind.
            DecodeError: Stored bytes are corrupt or cannot be decrypted.
            SerializationError: Stored text does not parse into the shape.
        """
        kind = classify(default)
        if kind is not None:
            raw_default = unwrap(default)
            match kind:
                case ValueKind.TEXT:
                    result = handle.decode_text(key, raw_default)
                case ValueKind.INT32:
                    result = handle.decode_int(key, raw_default)
                case ValueKind.INT64:
                    result = handle.decode_long(key, raw_default)
                case ValueKind.FLOAT32:
                    result = handle.decode_float(key, raw_default)
                case ValueKind.FLOAT64:
                    result = handle.decode_double(key, raw_default)
                case ValueKind.BOOL:
                    result = handle.decode_bool(key, raw_default)
            if is_tagged(default):
                return wrap(kind, result)
            return result

        text = handle.decode_text(key, "")
        if not text:
            return default
        if shape is None:
            shape = Any if default is None else type(default)
        return self._serializer.loads(text, shape)
