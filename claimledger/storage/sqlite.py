# claimledger/storage/sqlite.py
import os
import sqlite3
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from . import StorageBackend

logger = logging.getLogger(__name__)


class SQLiteStorage(StorageBackend):
    """SQLite persistent storage for runtime state."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            env_path = os.environ.get("CLAIMLEDGER_DB_PATH")
            db_path = env_path if env_path else Path.cwd() / "claimledger-state.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = self.db_path.resolve()

        self._conn: Optional[sqlite3.Connection] = None
        self._depth = 0
        self._connect()

    def _connect(self):
        # autocommit; explicit BEGIN/COMMIT in transaction()
        self._conn = sqlite3.connect(str(self.db_path), isolation_level=None)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._create_schema()
        logger.debug("Opened state database %s", self.db_path)

    def _create_schema(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS storage (
                item    TEXT NOT NULL,
                key     TEXT NOT NULL,
                value   TEXT NOT NULL,
                PRIMARY KEY (item, key)
            )
        """)

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Storage connection is closed")
        return self._conn

    def get(self, item: str, key: str) -> Optional[str]:
        row = self.conn.execute(
            "SELECT value FROM storage WHERE item = ? AND key = ?",
            (item, key),
        ).fetchone()
        return row[0] if row else None

    def insert(self, item: str, key: str, value: str) -> None:
        self.conn.execute(
            "INSERT OR REPLACE INTO storage (item, key, value) VALUES (?, ?, ?)",
            (item, key, value),
        )

    def remove(self, item: str, key: str) -> None:
        self.conn.execute("DELETE FROM storage WHERE item = ? AND key = ?", (item, key))

    def iter_prefix(self, item: str) -> Iterator[Tuple[str, str]]:
        # materialized so callers may write while iterating
        rows: List[Tuple[str, str]] = self.conn.execute(
            "SELECT key, value FROM storage WHERE item = ? ORDER BY key ASC",
            (item,),
        ).fetchall()
        return iter(rows)

    def clear_prefix(self, item: str) -> None:
        self.conn.execute("DELETE FROM storage WHERE item = ?", (item,))

    @contextmanager
    def transaction(self) -> Iterator[None]:
        outermost = self._depth == 0
        if outermost:
            self.conn.execute("BEGIN")
        self._depth += 1
        try:
            yield
        except BaseException:
            self._depth -= 1
            if outermost:
                logger.debug("Rolling back transaction on %s", self.db_path)
                self.conn.execute("ROLLBACK")
            raise
        else:
            self._depth -= 1
            if outermost:
                self.conn.execute("COMMIT")

    def snapshot(self) -> Dict[Tuple[str, str], str]:
        cursor = self.conn.execute("SELECT item, key, value FROM storage")
        return {(item, key): value for item, key, value in cursor.fetchall()}

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None
