"""OperationResult — the outcome of a single storage operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from typed_storage.exceptions import (
    DecodeError,
    DomainOpenError,
    EncodeError,
    KindMismatchError,
    SerializationError,
)

if TYPE_CHECKING:
    from typed_storage.domains import StorageDomain


class ErrorCause(str, Enum):
    """Why an operation fell back to its default."""

    HANDLE_OPEN = "handle_open"
    ENCODE = "encode"
    DECODE = "decode"
    SERIALIZATION = "serialization"
    KIND_MISMATCH = "kind_mismatch"
    ENGINE = "engine"

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorCause:
        if isinstance(exc, DomainOpenError):
            return cls.HANDLE_OPEN
        if isinstance(exc, KindMismatchError):
            return cls.KIND_MISMATCH
        if isinstance(exc, SerializationError):
            return cls.SERIALIZATION
        if isinstance(exc, EncodeError):
            return cls.ENCODE
        if isinstance(exc, DecodeError):
            return cls.DECODE
        return cls.ENGINE


@dataclass(frozen=True)
class OperationResult:
    """Immutable result returned by the ``try_*`` operations of :class:`DataStorage`.

    Attributes:
        ok:        ``True`` if the operation completed without falling back.
        value:     What the plain operation returns: the decoded value or the
                   default, ``True``/``False``, a key set, or ``None``.
        operation: Operation name (``"put"``, ``"get"``, ...).
        key:       Entry key, for key-level operations.
        domain:    Domain the operation targeted.
        cause:     Failure category when ``ok`` is ``False``.
        detail:    Human-readable failure explanation.
    """

    ok: bool
    value: Any = None
    operation: str = ""
    key: str | None = None
    domain: StorageDomain | None = None
    cause: ErrorCause | None = None
    detail: str = ""

    # ── Factory helpers ──────────────────────────────────────

    @staticmethod
    def success(
        operation: str,
        value: Any,
        *,
        key: str | None = None,
        domain: StorageDomain | None = None,
    ) -> OperationResult:
        return OperationResult(ok=True, value=value, operation=operation, key=key, domain=domain)

    @staticmethod
    def failure(
        operation: str,
        value: Any,
        cause: ErrorCause,
        detail: str = "",
        *,
        key: str | None = None,
        domain: StorageDomain | None = None,
    ) -> OperationResult:
        return OperationResult(
            ok=False,
            value=value,
            operation=operation,
            key=key,
            domain=domain,
            cause=cause,
            detail=detail,
        )
