"""Client side of the tunnel."""

from .connection import LastInsertIdCell, ProxyConnection
from .factory import create_connection

__all__ = [
    "LastInsertIdCell",
    "ProxyConnection",
    "create_connection",
]
