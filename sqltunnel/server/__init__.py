"""Server side of the tunnel.

The FastAPI app lives in :mod:`sqltunnel.server.app` and is imported from
there directly, so the executor can be used without the ``server`` extra.
"""

from .executor import DISPATCH_TABLE, RemoteExecutor

__all__ = [
    "DISPATCH_TABLE",
    "RemoteExecutor",
]
