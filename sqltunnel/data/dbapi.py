"""DatabaseDriver implementation over a PEP 249 (DB-API 2.0) connection.

This is the real database handle the remote executor dispatches onto. Writes
are committed as soon as they run; there is no transaction support.
"""

import logging
import sqlite3
import threading
from typing import Any, ContextManager, List, Mapping, Optional, Sequence, Union

from .database import Bindings, DatabaseDriver, Row

logger = logging.getLogger(__name__)


def _params(bindings: Optional[Bindings]) -> Union[tuple, Mapping[str, Any]]:
    if bindings is None:
        return ()
    if isinstance(bindings, Mapping):
        return bindings
    return tuple(bindings)


def _rows(cursor: Any, rows: Sequence[Sequence[Any]]) -> List[Row]:
    columns = [desc[0] for desc in cursor.description or ()]
    return [dict(zip(columns, row)) for row in rows]


class DbApiConnection(DatabaseDriver):
    """Adapt a DB-API connection to the :class:`DatabaseDriver` interface.

    Every call holds a re-entrant lock, so one handle may serve the server's
    worker threads. :meth:`session` exposes the same lock to the executor,
    which keeps a write and its last-insert-id read together.

    Args:
        connection: An open DB-API connection
        database_name: Name reported by :meth:`get_database_name`
    """

    def __init__(self, connection: Any, database_name: str = "") -> None:
        self._connection = connection
        self._database_name = database_name
        self._last_insert_id: Any = None
        self._lock = threading.RLock()

    @property
    def connection(self) -> Any:
        return self._connection

    def session(self) -> ContextManager[Any]:
        return self._lock

    def select_one(self, query: str, bindings: Bindings = (), use_read_pdo: bool = True) -> Optional[Row]:
        with self._lock:
            cursor = self._connection.cursor()
            try:
                cursor.execute(query, _params(bindings))
                row = cursor.fetchone()
                if row is None:
                    return None
                return _rows(cursor, [row])[0]
            finally:
                cursor.close()

    def select(self, query: str, bindings: Bindings = (), use_read_pdo: bool = True) -> List[Row]:
        with self._lock:
            cursor = self._connection.cursor()
            try:
                cursor.execute(query, _params(bindings))
                return _rows(cursor, cursor.fetchall())
            finally:
                cursor.close()

    def insert(self, query: str, bindings: Bindings = ()) -> bool:
        return self.statement(query, bindings)

    def update(self, query: str, bindings: Bindings = ()) -> int:
        return self.affecting_statement(query, bindings)

    def delete(self, query: str, bindings: Bindings = ()) -> int:
        return self.affecting_statement(query, bindings)

    def statement(self, query: str, bindings: Bindings = ()) -> bool:
        self._write(query, bindings)
        return True

    def affecting_statement(self, query: str, bindings: Bindings = ()) -> int:
        return max(self._write(query, bindings), 0)

    def unprepared(self, query: str) -> bool:
        executescript = getattr(self._connection, "executescript", None)
        if executescript is None:
            self._write(query, None)
            return True

        with self._lock:
            executescript(query)
            self._connection.commit()
        return True

    def get_database_name(self) -> str:
        return self._database_name

    def last_insert_id(self) -> Any:
        with self._lock:
            return self._last_insert_id

    def close(self) -> None:
        with self._lock:
            self._connection.close()

    def _write(self, query: str, bindings: Optional[Bindings]) -> int:
        """Execute a write, commit it, and return the cursor's row count."""
        with self._lock:
            cursor = self._connection.cursor()
            try:
                if bindings is None:
                    cursor.execute(query)
                else:
                    cursor.execute(query, _params(bindings))
                self._connection.commit()
            except Exception:
                self._connection.rollback()
                raise
            else:
                if cursor.lastrowid:
                    self._last_insert_id = cursor.lastrowid
                return cursor.rowcount
            finally:
                cursor.close()


class SqliteConnection(DbApiConnection):
    """DbApiConnection over the standard library sqlite3 driver.

    The auto-increment id is read from sqlite itself, so ids produced by
    ``unprepared`` scripts are reported too.
    """

    @classmethod
    def from_path(cls, path: str, database_name: Optional[str] = None) -> "SqliteConnection":
        """Open a sqlite database file, or an in-memory one for ``:memory:``.

        The handle may be used from the server's worker threads. Calls are
        serialized by the connection lock, not by sqlite3.
        """
        connection = sqlite3.connect(path, check_same_thread=False)
        logger.debug(f"Opened sqlite database {path}")
        return cls(connection, database_name if database_name is not None else path)

    def last_insert_id(self) -> Any:
        with self._lock:
            cursor = self._connection.execute("select last_insert_rowid()")
            try:
                (rowid,) = cursor.fetchone()
            finally:
                cursor.close()
        return rowid or None
