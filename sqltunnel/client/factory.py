"""Configuration-driven construction of proxied connections.

Hosts call :func:`create_connection` from their own setup code; there is no
process-wide registry mapping URL schemes to connection factories.
"""

import logging
from typing import Any, Dict, Optional, Union

import httpx

from ..core.config import ProxyConfig
from .connection import ProxyConnection

logger = logging.getLogger(__name__)


def create_connection(
    config: Union[ProxyConfig, Dict[str, Any], None] = None,
    http_client: Optional[httpx.Client] = None,
) -> ProxyConnection:
    """Build a :class:`ProxyConnection`.

    Args:
        config: A ``ProxyConfig``, a dict of its fields, or None to read
            ``SQLTUNNEL_*`` environment variables
        http_client: Optional ``httpx.Client`` to send requests with

    Returns:
        A connection bound to the configured endpoint

    Raises:
        ConfigError: If the configuration does not validate
    """
    if config is None:
        config = ProxyConfig.from_env()
    elif isinstance(config, dict):
        config = ProxyConfig.from_dict(config)

    connection = ProxyConnection(config, http_client=http_client)
    logger.debug(f"Created {config.proxy_driver.value} proxy connection to {connection.endpoint}")
    return connection
