"""Embedded key-value engines backing the storage domains."""

from __future__ import annotations

from typing import TYPE_CHECKING

from typed_storage.engine.base import Engine, Handle
from typed_storage.engine.memory import InMemoryEngine
from typed_storage.engine.sqlite import SQLiteEngine

if TYPE_CHECKING:
    from typed_storage.config import StorageSettings


def create_engine(settings: StorageSettings) -> Engine:
    """Build and initialize the engine described by *settings*."""
    engine: Engine
    if settings.engine == "memory":
        engine = InMemoryEngine(kdf_iterations=settings.kdf_iterations)
    else:
        engine = SQLiteEngine(
            busy_timeout_ms=settings.busy_timeout_ms,
            kdf_iterations=settings.kdf_iterations,
        )
    engine.initialize(settings.root_dir)
    return engine


__all__ = ["Engine", "Handle", "InMemoryEngine", "SQLiteEngine", "create_engine"]
