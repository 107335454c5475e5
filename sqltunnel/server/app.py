"""FastAPI integration for the remote executor.

One POST route carries every operation. Protocol outcomes, including
authorization failures, are always answered with HTTP 200 and the wire
response in the body.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.concurrency import run_in_threadpool

from ..core.config import ServerConfig
from ..data.dbapi import SqliteConnection
from .executor import RemoteExecutor

logger = logging.getLogger(__name__)


def create_app(executor: RemoteExecutor, path: str = "/") -> FastAPI:
    """Create the FastAPI application serving ``executor`` on ``path``."""
    app = FastAPI(title="sqltunnel", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.executor = executor

    @app.post(path)
    async def execute(request: Request) -> JSONResponse:
        body = await request.body()
        # Driver calls block, so they run in the worker thread pool.
        response = await run_in_threadpool(executor.handle, body, request.headers.get("authorization"))
        return JSONResponse(status_code=200, content=response.to_dict())

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    logger.debug(f"Created sqltunnel app on POST {path}")
    return app


def create_sqlite_app(config: ServerConfig, connection: Optional[SqliteConnection] = None) -> FastAPI:
    """Serve a sqlite database described by ``config``."""
    if connection is None:
        connection = SqliteConnection.from_path(config.database, config.database_name)
    executor = RemoteExecutor(connection, token=config.token)
    logger.info(f"Serving {config.database} on POST {config.path} (token required: {executor.requires_token})")
    return create_app(executor, path=config.path)
