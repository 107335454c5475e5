"""sqltunnel: run SQL against a database you cannot reach, one HTTP request per call.

A :class:`ProxyConnection` presents the usual driver surface (select, insert,
update, delete, raw statements) and forwards each call as JSON to a
:class:`RemoteExecutor`, which runs it on a real connection and reports the
result, any error and the auto-increment id.
"""

__version__ = "0.1.0"

from .core import (
    SqlTunnelError,
    ConfigError,
    TransportError,
    MalformedResponseError,
    ConnectionError,
    UnsupportedOperationError,
    AuthorizationError,
    ProtocolError,
    UnknownOperationError,
    InvalidParamsError,
    init_logging,
    DriverFamily,
    ProxyConfig,
    ServerConfig,
)
from .protocol import Operation, Request, Response, ErrorInfo
from .data import DatabaseDriver, DbApiConnection, SqliteConnection
from .client import LastInsertIdCell, ProxyConnection, create_connection
from .server import RemoteExecutor

__all__ = [
    "__version__",
    # Errors
    "SqlTunnelError",
    "ConfigError",
    "TransportError",
    "MalformedResponseError",
    "ConnectionError",
    "UnsupportedOperationError",
    "AuthorizationError",
    "ProtocolError",
    "UnknownOperationError",
    "InvalidParamsError",
    # Logging and configuration
    "init_logging",
    "DriverFamily",
    "ProxyConfig",
    "ServerConfig",
    # Wire protocol
    "Operation",
    "Request",
    "Response",
    "ErrorInfo",
    # Drivers
    "DatabaseDriver",
    "DbApiConnection",
    "SqliteConnection",
    # Client
    "LastInsertIdCell",
    "ProxyConnection",
    "create_connection",
    # Server
    "RemoteExecutor",
]
