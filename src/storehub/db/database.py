# durable key/value store beneath the repositories
import os
import sqlite3
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Protocol

from storehub.config import DEFAULT_DB_PATH, DEFAULT_QUOTA_BYTES
from storehub.errors import StorageError
from storehub.utils.logger import get_logger

_logger = get_logger(__name__)

DB_INIT_SCRIPT = """
CREATE TABLE IF NOT EXISTS kv_store (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class DurableStore(Protocol):
    """
    Synchronous key/value persistence.
    A missing key reads as None. write/delete return False on medium failure.
    """

    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> bool: ...

    def delete(self, key: str) -> bool: ...


class MemoryStore:
    """Dict backed store, used in tests and when no file should be touched."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    def delete(self, key: str) -> bool:
        self.data.pop(key, None)
        return True


class SqliteStore:
    """
    One sqlite table of (key, value) rows.

    After the first medium failure (sqlite error, quota exceeded) the store goes
    memory-only: reads still work, writes and deletes are refused without touching
    the file. The repositories keep the live state in memory either way.
    """

    def __init__(
        self, path: str = DEFAULT_DB_PATH, quota_bytes: int = DEFAULT_QUOTA_BYTES
    ):
        self.path = path
        self.quota_bytes = quota_bytes
        self.memory_only = False
        self._initialized = False

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection, creating the file and table on first use."""
        if not self._initialized:
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            if not self._initialized:
                _logger.info(f"Initializing key/value store at {self.path}...")
                conn.executescript(DB_INIT_SCRIPT)
                conn.commit()
                self._initialized = True
            yield conn
        finally:
            conn.close()

    def _fail(self, op: str, key: str, err: Exception) -> None:
        if not self.memory_only:
            _logger.error(
                f"Store {op} failed for '{key}': {err}. Continuing in memory only."
            )
        self.memory_only = True

    def read(self, key: str) -> Optional[str]:
        try:
            with self.connect() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?;", (key,)
                ).fetchone()
        except (sqlite3.Error, OSError) as e:
            # stop writing so defaults never clobber unreadable data
            self._fail("read", key, e)
            return None
        return row["value"] if row else None

    def _check_quota(self, conn: sqlite3.Connection, key: str, value: str) -> None:
        used = conn.execute(
            "SELECT COALESCE(SUM(LENGTH(CAST(value AS BLOB))), 0) "
            "FROM kv_store WHERE key != ?;",
            (key,),
        ).fetchone()[0]
        # UTF-8 bytes, the same encoding SQLite stores TEXT in
        total = used + len(value.encode("utf-8"))
        if total > self.quota_bytes:
            raise StorageError(f"quota exceeded ({total} > {self.quota_bytes} bytes)")

    def write(self, key: str, value: str) -> bool:
        if self.memory_only:
            return False
        try:
            with self.connect() as conn:
                self._check_quota(conn, key, value)
                conn.execute(
                    "INSERT OR REPLACE INTO kv_store(key, value) VALUES (?, ?);",
                    (key, value),
                )
                conn.commit()
        except (sqlite3.Error, OSError, StorageError) as e:
            self._fail("write", key, e)
            return False
        return True

    def delete(self, key: str) -> bool:
        if self.memory_only:
            return False
        try:
            with self.connect() as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?;", (key,))
                conn.commit()
        except (sqlite3.Error, OSError) as e:
            self._fail("delete", key, e)
            return False
        return True
