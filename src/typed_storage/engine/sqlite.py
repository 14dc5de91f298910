"""SQLiteEngine — durable, multi-process-safe engine with one file per namespace."""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

from typed_storage.engine.base import Engine, Handle
from typed_storage.exceptions import EngineError
from typed_storage.values import ValueKind

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS kv (
    key   TEXT PRIMARY KEY,
    kind  TEXT NOT NULL,
    value BLOB NOT NULL
)
"""


class SQLiteHandle(Handle):
    """Handle over a single SQLite file.

    The connection runs in autocommit mode with WAL journaling, so every write
    is durable when the call returns and other processes opening the same file
    see it on their next read.  Calls from several threads are serialized on
    the connection.

    Parameters:
        namespace:       Namespace this handle serves.
        path:            SQLite database file.
        busy_timeout_ms: How long to wait on a lock held by another process.
    """

    def __init__(self, namespace: str, path: Path, *, busy_timeout_ms: int = 5_000) -> None:
        super().__init__(namespace)
        self._path = path
        self._lock = threading.RLock()
        try:
            self._db: sqlite3.Connection | None = sqlite3.connect(
                str(path),
                timeout=busy_timeout_ms / 1000,
                isolation_level=None,
                check_same_thread=False,
            )
            self._db.execute("PRAGMA journal_mode=WAL")
            self._db.execute("PRAGMA synchronous=NORMAL")
            self._db.execute(_CREATE_TABLE)
        except sqlite3.Error as e:
            raise EngineError("open", f"{path}: {e}") from e

    @property
    def path(self) -> Path:
        return self._path

    def _conn(self) -> sqlite3.Connection:
        if self._db is None:
            raise EngineError("access", f"handle for '{self.namespace}' is closed")
        return self._db

    def write_raw(self, key: str, kind: ValueKind, payload: bytes) -> None:
        with self._lock:
            try:
                self._conn().execute(
                    """
                    INSERT INTO kv (key, kind, value) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET kind = excluded.kind, value = excluded.value
                    """,
                    (key, kind.value, payload),
                )
            except sqlite3.Error as e:
                raise EngineError("write", f"key '{key}': {e}") from e

    def read_raw(self, key: str) -> tuple[str, bytes] | None:
        with self._lock:
            try:
                row = self._conn().execute(
                    "SELECT kind, value FROM kv WHERE key = ?", (key,)
                ).fetchone()
            except sqlite3.Error as e:
                raise EngineError("read", f"key '{key}': {e}") from e
        if row is None:
            return None
        return row[0], bytes(row[1])

    def remove(self, key: str) -> None:
        with self._lock:
            try:
                self._conn().execute("DELETE FROM kv WHERE key = ?", (key,))
            except sqlite3.Error as e:
                raise EngineError("remove", f"key '{key}': {e}") from e

    def contains(self, key: str) -> bool:
        with self._lock:
            try:
                row = self._conn().execute("SELECT 1 FROM kv WHERE key = ?", (key,)).fetchone()
            except sqlite3.Error as e:
                raise EngineError("contains", f"key '{key}': {e}") from e
        return row is not None

    def clear_all(self) -> None:
        with self._lock:
            try:
                self._conn().execute("DELETE FROM kv")
            except sqlite3.Error as e:
                raise EngineError("clear_all", str(e)) from e

    def all_keys(self) -> list[str]:
        with self._lock:
            try:
                rows = self._conn().execute("SELECT key FROM kv").fetchall()
            except sqlite3.Error as e:
                raise EngineError("all_keys", str(e)) from e
        return [row[0] for row in rows]

    def close(self) -> None:
        with self._lock:
            if self._db is not None:
                self._db.close()
                self._db = None


class SQLiteEngine(Engine):
    """Engine storing each namespace in ``<root_dir>/<namespace>.sqlite3``.

    Parameters:
        busy_timeout_ms: Lock wait applied to every handle opened by this engine.
        kdf_iterations:  See :class:`Engine`.
    """

    name = "sqlite"

    def __init__(self, *, busy_timeout_ms: int = 5_000, kdf_iterations: int = 390_000) -> None:
        super().__init__(kdf_iterations=kdf_iterations)
        self.busy_timeout_ms = busy_timeout_ms

    def _setup(self) -> None:
        if self._root_dir is None:
            raise EngineError("initialize", "SQLiteEngine requires a root directory")
        try:
            self._root_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise EngineError("initialize", f"{self._root_dir}: {e}") from e
        logger.debug("SQLite engine initialized at %s", self._root_dir)

    def _open(self, namespace: str) -> Handle:
        if self._root_dir is None:
            raise EngineError("open", "SQLiteEngine has no root directory")
        path = self._root_dir / f"{namespace}.sqlite3"
        return SQLiteHandle(namespace, path, busy_timeout_ms=self.busy_timeout_ms)
