# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Data transfer objects for runner input/output.

These Pydantic models define the JSON contract of
``python -m typed_storage.runner``.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from typed_storage.domains import StorageDomain
from typed_storage.values import ValueKind

OperationName = Literal["put", "get", "delete", "contains", "clear_all", "list_keys"]


class OperationSchema(BaseModel):
    """Single storage operation.

    Attributes:
        op: Operation name
        key: Entry key (ignored by clear_all and list_keys)
        value: Value to store (put)
        default: Default and type witness (get)
        kind: Explicit primitive kind for ``value`` / ``default``, e.g.
              ``"int32"``; omitted, JSON numbers map to int64 / float64
        domain: Target domain, by name ("user") or namespace ("user_storage")
    """

    op: OperationName
    key: str = ""
    value: Any = None
    default: Any = None
    kind: ValueKind | None = None
    domain: StorageDomain = StorageDomain.GENERAL

    @field_validator("domain", mode="before")
    @classmethod
    def parse_domain(cls, v: Any) -> Any:
        if isinstance(v, str):
            return StorageDomain.parse(v)
        return v


class RunnerInput(BaseModel):
    """Complete input read from stdin.

    Attributes:
        config_path: Optional TOML settings file
        settings: Settings overrides (see ``StorageSettings``)
        operations: Operations to apply, in order
    """

    config_path: str | None = None
    settings: dict[str, Any] = Field(default_factory=dict)
    operations: list[OperationSchema] = Field(default_factory=list)


class OperationResultSchema(BaseModel):
    """Outcome of one operation.

    Attributes:
        op: Operation name
        ok: Whether the operation completed without falling back
        key: Entry key, when the operation has one
        domain: Domain name
        value: Returned value (the default on failure)
        cause: Failure category (on failure)
        detail: Failure explanation (on failure)
    """

    op: str
    ok: bool
    key: str | None = None
    domain: str = ""
    value: Any = None
    cause: str = ""
    detail: str = ""


class RunnerOutput(BaseModel):
    """Complete output written to stdout.

    The runner always outputs valid JSON matching this schema,
    even on errors.

    Attributes:
        success: Whether every operation succeeded
        results: Per-operation results, in input order
        error: Error message (when the run itself failed)
        error_type: Error class name (when the run itself failed)
    """

    success: bool
    results: list[OperationResultSchema] = Field(default_factory=list)
    error: str = ""
    error_type: str = ""
