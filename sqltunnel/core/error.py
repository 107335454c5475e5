"""Unified error handling for sqltunnel.

Every error raised by the package derives from :class:`SqlTunnelError`, which
keeps the original exception as ``cause`` so the chain survives wrapping.

Errors fall into three groups:

- client-side errors raised to the caller of a proxied connection
  (:class:`ConnectionError`, :class:`TransportError`,
  :class:`MalformedResponseError`, :class:`UnsupportedOperationError`)
- server-side faults that never leave the executor as exceptions but are
  folded into the ``error`` envelope of a wire response
  (:class:`AuthorizationError`, :class:`ProtocolError` and its subclasses)
- configuration errors (:class:`ConfigError`)
"""

from typing import Any, Optional


class SqlTunnelError(Exception):
    """Base exception for all sqltunnel errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __repr__(self) -> str:
        if self.cause:
            return f"{self.__class__.__name__}('{self.message}', cause={self.cause!r})"
        return f"{self.__class__.__name__}('{self.message}')"


class ConfigError(SqlTunnelError):
    """Error that occurs due to configuration issues.

    Raised when configuration validation fails, a required value is missing,
    or loading configuration from the environment fails.

    Examples:
        ```python
        try:
            config = ProxyConfig.from_env()
        except ConfigError as e:
            print(f"cannot start: {e}")
        ```
    """

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"configuration error: {message}", cause)

    @classmethod
    def missing_env_var(cls, var_name: str) -> "ConfigError":
        """Create a ConfigError for a missing environment variable."""
        return cls(f"missing environment variable: {var_name}")

    @classmethod
    def invalid_config(cls, message: str) -> "ConfigError":
        """Create a ConfigError for invalid configuration."""
        return cls(f"invalid configuration: {message}")


class TransportError(SqlTunnelError):
    """Error that occurs while moving a request or response over HTTP.

    Raised when the remote endpoint cannot be reached, the request times out,
    or the server answers with a non-success status. It never carries a
    remote ``error`` envelope: the reply body is not consulted.

    Examples:
        ```python
        try:
            rows = connection.select("select * from users")
        except TransportError as e:
            if e.status_code is None:
                print("endpoint unreachable")
        ```
    """

    def __init__(self, message: str, status_code: Optional[int] = None, cause: Optional[Exception] = None) -> None:
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"transport error (HTTP {status_code}): {message}", cause)
        else:
            super().__init__(f"transport error: {message}", cause)


class MalformedResponseError(TransportError):
    """The reply body is not a valid wire response."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"malformed response: {message}", cause=cause)


class ConnectionError(SqlTunnelError):
    """A remote database operation failed.

    Raised by the client whenever the wire response carries an ``error``
    envelope, whatever the server-side cause (bad token, unknown method,
    driver failure). The original fault kind is kept as a string in ``name``.

    Examples:
        ```python
        try:
            connection.statement("drop table missing")
        except ConnectionError as e:
            print(e.name, e.remote_message)
        ```
    """

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        self.remote_message = message
        super().__init__(f"{name}: {message}")


class UnsupportedOperationError(SqlTunnelError):
    """The operation cannot run over a stateless HTTP transport."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"unsupported operation over this transport: {operation}")


class AuthorizationError(SqlTunnelError):
    """The bearer credential is missing or does not match the server token."""

    wire_name = "AuthorizationException"

    def __init__(self, message: str = "Bad authorization token") -> None:
        super().__init__(message)


class ProtocolError(SqlTunnelError):
    """The request does not follow the wire protocol."""


class UnknownOperationError(ProtocolError):
    """The request names a method outside the fixed operation set."""

    def __init__(self, method: Any) -> None:
        self.method = method
        super().__init__(f'Method: "{method}" does not exist.')


class InvalidParamsError(ProtocolError):
    """The params list does not fit the operation's argument shape."""

    def __init__(self, method: str, expected: str, given: int) -> None:
        self.method = method
        super().__init__(f"{method} expects {expected} params, {given} given")


def error_name(error: BaseException) -> str:
    """Return the name a fault travels under in the wire ``error`` envelope."""
    return getattr(error, "wire_name", None) or type(error).__name__


def format_error_chain(error: BaseException) -> str:
    """Format an error with its full chain of causes.

    Args:
        error: The exception to format

    Returns:
        A formatted string representing the error chain
    """
    lines = []
    current: Optional[BaseException] = error

    while current is not None:
        lines.append(f"  {type(current).__name__}: {current}")

        if getattr(current, "cause", None) is not None:
            current = current.cause
        elif current.__cause__ is not None:
            current = current.__cause__
        else:
            current = None

    return "\n".join(lines)
