"""Core sqltunnel components.

- Error taxonomy shared by client and server
- Configuration models
- Structured logging with secret redaction
"""

from .error import (
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
    format_error_chain,
)
from .logging import init_logging, safe_log, register_secret_for_redaction
from .config import DriverFamily, ProxyConfig, ServerConfig

__all__ = [
    # Error handling
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
    "format_error_chain",
    # Logging
    "init_logging",
    "safe_log",
    "register_secret_for_redaction",
    # Configuration
    "DriverFamily",
    "ProxyConfig",
    "ServerConfig",
]
