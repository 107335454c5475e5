"""Shared fixtures for sqltunnel tests."""

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest
from unittest.mock import MagicMock

from sqltunnel.client.connection import ProxyConnection
from sqltunnel.core.config import ProxyConfig
from sqltunnel.core.logging import clear_secret_registry
from sqltunnel.data.database import DatabaseDriver
from sqltunnel.data.dbapi import SqliteConnection


USERS_TABLE = (
    "create table users ("
    "id integer primary key autoincrement, "
    "name text not null unique, "
    "active integer not null default 1)"
)


@pytest.fixture(autouse=True)
def _clear_secrets():
    clear_secret_registry()
    yield
    clear_secret_registry()


@pytest.fixture
def sqlite_db():
    """In-memory sqlite database with an empty users table."""
    db = SqliteConnection.from_path(":memory:", "testing")
    db.statement(USERS_TABLE)
    yield db
    db.close()


@pytest.fixture
def spy_driver():
    """A driver handle that records every call and reports no insert id."""
    driver = MagicMock(spec=DatabaseDriver)
    driver.last_insert_id.return_value = None
    return driver


class RecordingTransport:
    """Serves canned wire responses and records every request sent."""

    def __init__(self, replies: List[Any]):
        self.replies = list(replies)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    def payloads(self) -> List[Dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture
def make_connection() -> Callable[..., ProxyConnection]:
    """Build a ProxyConnection whose HTTP client is backed by canned replies.

    Returns the connection; its transport is available as ``connection.transport``.
    """
    created = []

    def factory(*replies: Any, **config: Any) -> ProxyConnection:
        transport = RecordingTransport(list(replies))
        config.setdefault("url", "http://db.test/proxy")
        client = httpx.Client(transport=httpx.MockTransport(transport))
        connection = ProxyConnection(ProxyConfig(**config), http_client=client)
        connection.transport = transport
        created.append(client)
        return connection

    yield factory

    for client in created:
        client.close()
