"""Database driver interface and the real-connection adapters behind the executor."""

from .database import DatabaseDriver, Row, Bindings
from .dbapi import DbApiConnection, SqliteConnection

__all__ = [
    "DatabaseDriver",
    "Row",
    "Bindings",
    "DbApiConnection",
    "SqliteConnection",
]
