"""DataStorage — the typed key-value facade over the storage domains."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from typed_storage.codec import TypeCodec, describe_kind
from typed_storage.config import StorageSettings
from typed_storage.domains import StorageDomain
from typed_storage.engine import create_engine
from typed_storage.exceptions import NotInitializedError, StorageError
from typed_storage.registry import DomainRegistry
from typed_storage.result import ErrorCause, OperationResult

if TYPE_CHECKING:
    from typed_storage.serializer import ObjectSerializer

logger = logging.getLogger(__name__)

# Expected fallbacks on read, logged below ERROR.
_QUIET_CAUSES = {ErrorCause.KIND_MISMATCH, ErrorCause.SERIALIZATION}


class DataStorage:
    """Store and read typed values per domain without ever raising.

    Every operation resolves the domain's handle through the registry, runs
    the codec, and turns any failure into a safe value: the caller's default,
    ``False``, or an empty set.  The failure is logged with the key, domain
    and attempted kind.

    Each operation has a ``try_*`` twin returning an :class:`OperationResult`
    carrying the same value plus the failure cause, for callers (and tests)
    that need to know *why* a default came back.

    Parameters:
        registry: Registry owning the domain handles.
        codec:    Type codec.  Defaults to a :class:`TypeCodec` with the JSON
                  serializer.
    """

    def __init__(self, registry: DomainRegistry, codec: TypeCodec | None = None) -> None:
        self._registry = registry
        self._codec = codec or TypeCodec()

    @classmethod
    def from_settings(
        cls,
        settings: StorageSettings,
        serializer: ObjectSerializer | None = None,
    ) -> DataStorage:
        """Build an initialized engine, registry and facade from *settings*."""
        engine = create_engine(settings)
        registry = DomainRegistry(engine, encryption_key=settings.passphrase())
        return cls(registry, TypeCodec(serializer))

    @property
    def registry(self) -> DomainRegistry:
        return self._registry

    def open_domain(self, domain: StorageDomain) -> None:
        """Open *domain* now instead of on first use.

        Unlike every other operation this one raises :class:`DomainOpenError`.
        """
        self._registry.resolve(domain)

    def close(self) -> None:
        self._registry.close()

    # ── reporting operations ─────────────────────────────────

    def try_put(
        self, key: str, value: Any, domain: StorageDomain = StorageDomain.GENERAL
    ) -> OperationResult:
        try:
            handle = self._registry.resolve(domain)
            accepted = self._codec.encode(handle, key, value)
        except Exception as e:
            return self._failed(
                "put", False, e, key=key, domain=domain, kind=describe_kind(value)
            )
        if not accepted:
            return self._failed(
                "put",
                False,
                None,
                key=key,
                domain=domain,
                kind=describe_kind(value),
                detail="engine rejected the write",
            )
        return OperationResult.success("put", True, key=key, domain=domain)

    def try_get(
        self,
        key: str,
        default: Any,
        domain: StorageDomain = StorageDomain.GENERAL,
        *,
        shape: Any = None,
    ) -> OperationResult:
        try:
            handle = self._registry.resolve(domain)
            value = self._codec.decode(handle, key, default, shape)
        except Exception as e:
            return self._failed(
                "get", default, e, key=key, domain=domain, kind=describe_kind(default)
            )
        return OperationResult.success("get", value, key=key, domain=domain)

    def try_delete(
        self, key: str, domain: StorageDomain = StorageDomain.GENERAL
    ) -> OperationResult:
        try:
            self._registry.resolve(domain).remove(key)
        except Exception as e:
            return self._failed("delete", False, e, key=key, domain=domain)
        return OperationResult.success("delete", True, key=key, domain=domain)

    def try_contains(
        self, key: str, domain: StorageDomain = StorageDomain.GENERAL
    ) -> OperationResult:
        try:
            found = self._registry.resolve(domain).contains(key)
        except Exception as e:
            return self._failed("contains", False, e, key=key, domain=domain)
        return OperationResult.success("contains", found, key=key, domain=domain)

    def try_clear_all(self, domain: StorageDomain = StorageDomain.GENERAL) -> OperationResult:
        try:
            self._registry.resolve(domain).clear_all()
        except Exception as e:
            return self._failed("clear_all", None, e, domain=domain)
        return OperationResult.success("clear_all", None, domain=domain)

    def try_list_keys(self, domain: StorageDomain = StorageDomain.GENERAL) -> OperationResult:
        try:
            keys = set(self._registry.resolve(domain).all_keys())
        except Exception as e:
            return self._failed("list_keys", set(), e, domain=domain)
        return OperationResult.success("list_keys", keys, domain=domain)

    # ── plain operations ─────────────────────────────────────

    def put(self, key: str, value: Any, domain: StorageDomain = StorageDomain.GENERAL) -> bool:
        """Store *value* under *key*.  Returns whether the engine accepted the write."""
        return self.try_put(key, value, domain).value

    def get(
        self,
        key: str,
        default: Any,
        domain: StorageDomain = StorageDomain.GENERAL,
        *,
        shape: Any = None,
    ) -> Any:
        """Read *key*, returning *default* when absent or on any failure.

        *default* decides how the entry is decoded: pass ``0`` for a key
        written as an ``int``, ``""`` for text, ``{}`` or a model instance for
        a structured object.  *shape* names the structured target type
        explicitly (``list[Profile]``).
        """
        return self.try_get(key, default, domain, shape=shape).value

    def delete(self, key: str, domain: StorageDomain = StorageDomain.GENERAL) -> bool:
        """Remove *key*.  Removing a missing key succeeds."""
        return self.try_delete(key, domain).value

    def contains(self, key: str, domain: StorageDomain = StorageDomain.GENERAL) -> bool:
        return self.try_contains(key, domain).value

    def clear_all(self, domain: StorageDomain = StorageDomain.GENERAL) -> None:
        """Remove every key in *domain*.  Failures are only visible in the log."""
        self.try_clear_all(domain)

    def list_keys(self, domain: StorageDomain = StorageDomain.GENERAL) -> set[str]:
        return self.try_list_keys(domain).value

    # ── internals ────────────────────────────────────────────

    def _failed(
        self,
        operation: str,
        fallback: Any,
        exc: Exception | None,
        *,
        domain: StorageDomain,
        key: str | None = None,
        kind: str | None = None,
        detail: str = "",
    ) -> OperationResult:
        cause = ErrorCause.from_exception(exc) if exc is not None else ErrorCause.ENGINE
        detail = detail or str(exc)
        level = logging.WARNING if cause in _QUIET_CAUSES else logging.ERROR
        logger.log(
            level,
            "%s data error: key=%s, domain=%s, kind=%s, cause=%s: %s",
            operation,
            key,
            getattr(domain, "name", domain),
            kind,
            cause.value,
            detail,
            exc_info=exc is not None and not isinstance(exc, StorageError),
        )
        return OperationResult.failure(operation, fallback, cause, detail, key=key, domain=domain)


# ── process-wide default ─────────────────────────────────────

_default: DataStorage | None = None
_default_lock = threading.Lock()


def init(settings: StorageSettings | None = None) -> DataStorage:
    """Initialize the engine and make a :class:`DataStorage` the process default.

    Must run before :func:`get_storage`.  Calling it again replaces the
    default and closes the handles of the previous one.

    Args:
        settings: Runtime context.  Read from the environment when omitted.
    """
    global _default
    storage = DataStorage.from_settings(settings or StorageSettings())
    with _default_lock:
        previous, _default = _default, storage
    if previous is not None:
        previous.close()
    return storage


def get_storage() -> DataStorage:
    """Return the storage set up by :func:`init`.

    Raises:
        NotInitializedError: If :func:`init` has not been called.
    """
    with _default_lock:
        if _default is None:
            raise NotInitializedError()
        return _default


def shutdown() -> None:
    """Close and forget the process default, if any."""
    global _default
    with _default_lock:
        previous, _default = _default, None
    if previous is not None:
        previous.close()
