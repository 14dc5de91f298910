"""Generic object serializer used for every non-primitive value."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Protocol

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from typed_storage.exceptions import SerializationError


class ObjectSerializer(Protocol):
    """Protocol for turning structured objects into text and back.  Inject a fake in tests."""

    def dumps(self, value: Any) -> str: ...

    def loads(self, text: str, shape: Any) -> Any: ...


@lru_cache(maxsize=256)
def _adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


_FIELDS: TypeAdapter[dict[str, Any]] = TypeAdapter(dict[str, Any])


def _object_fields(value: Any) -> Any:
    # Plain objects are written field by field, like a dataclass.
    if hasattr(value, "__dict__"):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    raise TypeError(f"Object of type {type(value).__name__} is not serializable")


def _load_object(text: str, shape: Any) -> Any:
    """Rebuild a plain object from the fields :func:`_object_fields` wrote.

    ``__init__`` is not called.  Nested plain objects come back as dicts.
    """
    if not isinstance(shape, type):
        raise SerializationError(f"Cannot deserialize into {shape!r}: unsupported shape")
    try:
        fields = _FIELDS.validate_json(text)
        obj = shape.__new__(shape)
        vars(obj).update(fields)
    except (ValidationError, TypeError) as exc:
        raise SerializationError(f"Cannot deserialize into {shape!r}: {exc}") from exc
    return obj


class JsonSerializer:
    """JSON serializer backed by pydantic.

    Anything pydantic can dump (dicts, lists, sets, models, dataclasses,
    datetimes, ...) is written as JSON; other objects are written from their
    public attributes.  Loading validates the text against *shape*, which may
    be any type pydantic understands: ``dict``, ``list[Profile]``, a model
    class, a dataclass, ``Any``.  A plain class pydantic has no schema for is
    rebuilt from its attributes, mirroring how it was written.
    """

    def dumps(self, value: Any) -> str:
        try:
            return to_json(value, fallback=_object_fields).decode("utf-8")
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            raise SerializationError(
                f"Cannot serialize {type(value).__name__}: {exc}"
            ) from exc

    def loads(self, text: str, shape: Any) -> Any:
        try:
            adapter = _adapter(shape)
        except PydanticSchemaGenerationError:
            return _load_object(text, shape)
        except TypeError as exc:
            raise SerializationError(f"Cannot deserialize into {shape!r}: {exc}") from exc
        try:
            return adapter.validate_json(text)
        except (ValidationError, TypeError, ValueError) as exc:
            raise SerializationError(f"Cannot deserialize into {shape!r}: {exc}") from exc
