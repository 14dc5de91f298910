# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Executor for applying batches of storage operations.

Orchestrates the full execution flow:
1. Load settings from file and overrides
2. Build the storage facade
3. Apply each operation through its reporting twin
4. Return structured results
"""

from __future__ import annotations

from typing import Any

from typed_storage.config import load_settings
from typed_storage.exceptions import ConfigError
from typed_storage.facade import DataStorage
from typed_storage.result import ErrorCause, OperationResult
from typed_storage.values import unwrap, wrap

from .schema import OperationResultSchema, OperationSchema, RunnerInput, RunnerOutput


class Executor:
    """Applies operations from a :class:`RunnerInput` to a storage facade.

    The executor is designed for dependency injection to support testing.
    Pass a storage to the constructor to override creation from settings.

    Example:
        executor = Executor()
        output = executor.execute(input_data)

        # For testing with an in-memory engine:
        executor = Executor(storage=DataStorage.from_settings(
            StorageSettings(engine="memory")
        ))
    """

    def __init__(self, storage: DataStorage | None = None) -> None:
        self._injected_storage = storage

    def execute(self, input_data: RunnerInput) -> RunnerOutput:
        """Apply every operation and report the outcome.

        Note:
            This method catches all exceptions and returns them as
            RunnerOutput errors, ensuring valid JSON is always returned.
        """
        try:
            return self._execute_internal(input_data)
        except ConfigError as e:
            return RunnerOutput(success=False, error=str(e), error_type="ConfigError")
        except Exception as e:
            return RunnerOutput(success=False, error=str(e), error_type=type(e).__name__)

    def _execute_internal(self, input_data: RunnerInput) -> RunnerOutput:
        storage = self._injected_storage or DataStorage.from_settings(
            load_settings(input_data.config_path, input_data.settings)
        )
        owns_storage = self._injected_storage is None

        try:
            results = [self._apply(storage, op) for op in input_data.operations]
        finally:
            if owns_storage:
                storage.close()

        return RunnerOutput(success=all(r.ok for r in results), results=results)

    def _apply(self, storage: DataStorage, op: OperationSchema) -> OperationResultSchema:
        result: OperationResult
        try:
            if op.op == "put":
                value = self._typed(op, op.value)
            elif op.op == "get":
                default = self._typed(op, op.default)
        except (TypeError, ValueError) as e:
            fallback = False if op.op == "put" else op.default
            result = OperationResult.failure(
                op.op, fallback, ErrorCause.ENCODE, str(e), key=op.key, domain=op.domain
            )
            return self._to_schema(op, result)

        match op.op:
            case "put":
                result = storage.try_put(op.key, value, op.domain)
            case "get":
                result = storage.try_get(op.key, default, op.domain)
            case "delete":
                result = storage.try_delete(op.key, op.domain)
            case "contains":
                result = storage.try_contains(op.key, op.domain)
            case "clear_all":
                result = storage.try_clear_all(op.domain)
            case "list_keys":
                result = storage.try_list_keys(op.domain)
        return self._to_schema(op, result)

    def _typed(self, op: OperationSchema, raw: Any) -> Any:
        """Apply the explicit kind of *op* to a JSON value."""
        if op.kind is None:
            return raw
        return wrap(op.kind, raw)

    def _to_schema(self, op: OperationSchema, result: OperationResult) -> OperationResultSchema:
        value = result.value
        if isinstance(value, set):
            value = sorted(value)
        return OperationResultSchema(
            op=op.op,
            ok=result.ok,
            key=result.key,
            domain=op.domain.name.lower(),
            value=unwrap(value),
            cause=result.cause.value if result.cause else "",
            detail=result.detail,
        )
