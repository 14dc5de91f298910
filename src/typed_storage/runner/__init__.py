# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Runner submodule for applying storage operations from JSON.

This module lets tooling and other processes inspect or seed the storage
domains without importing the facade.

Usage:
    python -m typed_storage.runner < input.json > output.json

Exports:
    Executor: Applies a batch of operations to a storage facade
    RunnerInput: Input schema
    RunnerOutput: Output schema
"""

from .executor import Executor
from .schema import (
    OperationResultSchema,
    OperationSchema,
    RunnerInput,
    RunnerOutput,
)

__all__ = [
    "Executor",
    "OperationResultSchema",
    "OperationSchema",
    "RunnerInput",
    "RunnerOutput",
]
