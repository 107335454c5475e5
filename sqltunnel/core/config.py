"""Configuration management for sqltunnel.

Both sides are configured through explicit pydantic models handed to the
factory or app constructor by the host's own setup code. ``from_env`` reads
``SQLTUNNEL_*`` variables, loading a ``.env`` file first when one exists.
"""

import os
from enum import Enum
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .error import ConfigError
from .logging import register_secret_for_redaction


class DriverFamily(str, Enum):
    """SQL dialect spoken by the database behind the proxy."""
    MYSQL = "mysql"
    SQLITE = "sqlite"
    PGSQL = "pgsql"
    SQLSRV = "sqlsrv"
    DEFAULT = "default"


class ProxyConfig(BaseModel):
    """Client-side configuration for a proxied connection.

    The endpoint is either given whole as ``url`` or assembled from
    ``scheme``, ``host``, ``port`` and ``database`` as
    ``scheme://host[:port][/database]``.
    """

    model_config = ConfigDict(frozen=True)

    url: Optional[str] = Field(default=None, description="Full endpoint URL")
    scheme: str = Field(default="http", description="http or https")
    host: Optional[str] = Field(default=None, description="Endpoint host")
    port: Optional[int] = Field(default=None, description="Endpoint port")
    database: Optional[str] = Field(default=None, description="Path segment naming the remote database")

    token: Optional[str] = Field(default=None, description="Shared bearer token")
    proxy_driver: DriverFamily = Field(default=DriverFamily.DEFAULT, description="Remote SQL dialect")

    timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Proxy URL must start with http:// or https://")
        return v

    @field_validator("scheme", mode="before")
    @classmethod
    def validate_scheme(cls, v):
        v = str(v).lower()
        if v not in ("http", "https"):
            raise ValueError(f"unsupported scheme: {v}")
        return v

    @field_validator("proxy_driver", mode="before")
    @classmethod
    def normalize_proxy_driver(cls, v):
        """Map unknown or empty dialect names to the generic family."""
        if isinstance(v, DriverFamily):
            return v
        name = str(v or "").lower()
        if name in {family.value for family in DriverFamily}:
            return name
        return DriverFamily.DEFAULT

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @model_validator(mode="after")
    def check_endpoint(self):
        if not self.url and not self.host:
            raise ValueError("either url or host must be set")
        return self

    def model_post_init(self, __context: Any) -> None:
        register_secret_for_redaction(self.token)

    def endpoint_url(self) -> str:
        """Return the single URL every request is POSTed to."""
        if self.url:
            return self.url

        url = f"{self.scheme}://{self.host}"
        if self.port is not None:
            url += f":{self.port}"
        if self.database:
            url += f"/{self.database}"
        return url

    def headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token is not None:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProxyConfig":
        """Create configuration from a dictionary.

        Raises:
            ConfigError: If the values do not validate
        """
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError.invalid_config(_summarize(e)) from e

    @classmethod
    def from_env(cls, prefix: str = "SQLTUNNEL_") -> "ProxyConfig":
        """Create configuration from ``{prefix}URL``, ``{prefix}HOST`` and friends."""
        load_dotenv()
        data = _collect_env(prefix, ("url", "scheme", "host", "port", "database", "token", "proxy_driver", "timeout"))
        if os.getenv(f"{prefix}VERIFY_SSL") is not None:
            data["verify_ssl"] = get_env_bool(f"{prefix}VERIFY_SSL", True)
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class ServerConfig(BaseModel):
    """Server-side configuration for the HTTP endpoint."""

    model_config = ConfigDict(frozen=True)

    token: Optional[str] = Field(default=None, description="Required bearer token, if any")
    host: str = Field(default="127.0.0.1", description="Listen address")
    port: int = Field(default=8080, description="Listen port")
    path: str = Field(default="/", description="Route the endpoint is mounted on")
    database: str = Field(default=":memory:", description="sqlite database path")
    database_name: Optional[str] = Field(default=None, description="Name reported by getDatabaseName")

    @field_validator("path")
    @classmethod
    def validate_path(cls, v):
        if not v.startswith("/"):
            raise ValueError("path must start with /")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        if not 0 < v < 65536:
            raise ValueError(f"invalid port: {v}")
        return v

    def model_post_init(self, __context: Any) -> None:
        register_secret_for_redaction(self.token)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerConfig":
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError.invalid_config(_summarize(e)) from e

    @classmethod
    def from_env(cls, prefix: str = "SQLTUNNEL_SERVER_") -> "ServerConfig":
        load_dotenv()
        return cls.from_dict(_collect_env(prefix, ("token", "host", "port", "path", "database", "database_name")))


def _collect_env(prefix: str, names) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for name in names:
        value = get_env_var(f"{prefix}{name.upper()}")
        if value is not None:
            data[name] = value
    return data


def _summarize(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or 'config'}: {item['msg']}"
        for item in error.errors()
    )


def get_env_var(name: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """Get environment variable with optional default and required validation.

    Args:
        name: Environment variable name
        default: Default value if not found
        required: Whether the variable is required

    Returns:
        Environment variable value or default

    Raises:
        ConfigError: If a required variable is not set
    """
    value = os.getenv(name, default)

    if required and value is None:
        raise ConfigError.missing_env_var(name)

    return value


def get_env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default

    return value.lower() in ("true", "1", "yes", "on")
