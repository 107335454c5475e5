"""Database driver capability interface.

Both ends of the tunnel speak this interface: :class:`~sqltunnel.client.ProxyConnection`
implements it over HTTP, and the remote executor dispatches onto a local
implementation such as :class:`~sqltunnel.data.dbapi.DbApiConnection`.
Host frameworks adapt it to their own connection classes.
"""

from abc import ABC, abstractmethod
from contextlib import nullcontext
from typing import Any, ContextManager, Dict, List, Mapping, Optional, Sequence, Union

Row = Dict[str, Any]
Bindings = Union[Sequence[Any], Mapping[str, Any]]


class DatabaseDriver(ABC):
    """The synchronous call surface of a SQL connection."""

    @abstractmethod
    def select_one(self, query: str, bindings: Bindings = (), use_read_pdo: bool = True) -> Optional[Row]:
        """Run a select and return the first row, or None."""
        pass

    @abstractmethod
    def select(self, query: str, bindings: Bindings = (), use_read_pdo: bool = True) -> List[Row]:
        """Run a select and return all rows in order."""
        pass

    @abstractmethod
    def insert(self, query: str, bindings: Bindings = ()) -> bool:
        pass

    @abstractmethod
    def update(self, query: str, bindings: Bindings = ()) -> int:
        """Run an update and return the number of affected rows."""
        pass

    @abstractmethod
    def delete(self, query: str, bindings: Bindings = ()) -> int:
        """Run a delete and return the number of affected rows."""
        pass

    @abstractmethod
    def statement(self, query: str, bindings: Bindings = ()) -> bool:
        pass

    @abstractmethod
    def affecting_statement(self, query: str, bindings: Bindings = ()) -> int:
        """Run a statement and return the number of affected rows."""
        pass

    @abstractmethod
    def unprepared(self, query: str) -> bool:
        """Run raw SQL without bindings."""
        pass

    @abstractmethod
    def get_database_name(self) -> str:
        pass

    @abstractmethod
    def last_insert_id(self) -> Any:
        """Return the most recent auto-increment id, or None if there is none."""
        pass

    def session(self) -> ContextManager[Any]:
        """Hold the handle for one call plus its last-insert-id read.

        Handles shared between threads return a lock here so that the id
        reported for a call is the one that call produced.
        """
        return nullcontext()
