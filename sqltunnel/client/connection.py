"""Client side of the tunnel: a database connection that lives behind HTTP.

Each driver call becomes exactly one POST to the configured endpoint. The
wire response is turned back into a driver-typed value, or into a raised
:class:`~sqltunnel.core.error.ConnectionError` when it carries an error
envelope. Transport problems raise :class:`~sqltunnel.core.error.TransportError`
instead, and the body is not consulted.
"""

import logging
import time
from typing import Any, Callable, List, Mapping, Optional

import httpx

from ..core.config import DriverFamily, ProxyConfig
from ..core.error import ConnectionError, MalformedResponseError, TransportError, UnsupportedOperationError
from ..data.database import Bindings, DatabaseDriver, Row
from ..protocol.message import Request, decode_response
from ..protocol.operations import Operation

logger = logging.getLogger(__name__)


class LastInsertIdCell:
    """Holds the auto-increment id reported by the last successful call.

    Starts out as ``False``, the same sentinel the server sends when it has
    no id to report.
    """

    def __init__(self, value: Any = False) -> None:
        self._value = value

    def get(self) -> Any:
        return self._value

    def set(self, value: Any) -> None:
        self._value = value

    def __repr__(self) -> str:
        return f"LastInsertIdCell({self._value!r})"


def _as_int(operation: Operation, data: Any) -> int:
    if data is None:
        return 0
    try:
        return int(data)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(f"{operation.value} returned non-integer data {data!r}", cause=e)


def _wire_bindings(bindings: Bindings) -> Any:
    if isinstance(bindings, Mapping):
        return dict(bindings)
    return list(bindings)


def _numeric_id(value: Any) -> Any:
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return value


class ProxyConnection(DatabaseDriver):
    """A :class:`DatabaseDriver` that forwards every call to a remote executor.

    Transactions, cursors and dry-run execution need state pinned to one
    connection across requests, which stateless HTTP cannot provide; those
    calls raise :class:`UnsupportedOperationError` without touching the
    network.

    Args:
        config: Endpoint, token, timeout and driver family
        http_client: Optional preconfigured ``httpx.Client``. The connection
            only closes clients it created itself.

    Examples:
        ```python
        config = ProxyConfig(url="https://db.internal/proxy", token="secret")
        with ProxyConnection(config) as db:
            db.insert("insert into users (name) values (?)", ["ada"])
            user_id = db.last_insert_id()
        ```
    """

    def __init__(self, config: ProxyConfig, http_client: Optional[httpx.Client] = None) -> None:
        self._config = config
        self._endpoint = config.endpoint_url()
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=config.timeout, verify=config.verify_ssl)
        self._last_insert_id = LastInsertIdCell()

    @property
    def config(self) -> ProxyConfig:
        return self._config

    @property
    def driver_family(self) -> DriverFamily:
        return self._config.proxy_driver

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def last_insert_id(self) -> Any:
        return self._last_insert_id.get()

    def select_one(self, query: str, bindings: Bindings = (), use_read_pdo: bool = True) -> Optional[Row]:
        data = self._request(Operation.SELECT_ONE, query, _wire_bindings(bindings), use_read_pdo)
        if data is not None and not isinstance(data, dict):
            raise MalformedResponseError(f"selectOne returned {type(data).__name__}, expected a row or null")
        return data

    def select(self, query: str, bindings: Bindings = (), use_read_pdo: bool = True) -> List[Row]:
        data = self._request(Operation.SELECT, query, _wire_bindings(bindings), use_read_pdo)
        if data is None:
            return []
        if not isinstance(data, list):
            raise MalformedResponseError(f"select returned {type(data).__name__}, expected a list of rows")
        return data

    def insert(self, query: str, bindings: Bindings = ()) -> bool:
        return bool(self._request(Operation.INSERT, query, _wire_bindings(bindings)))

    def update(self, query: str, bindings: Bindings = ()) -> int:
        return _as_int(Operation.UPDATE, self._request(Operation.UPDATE, query, _wire_bindings(bindings)))

    def delete(self, query: str, bindings: Bindings = ()) -> int:
        return _as_int(Operation.DELETE, self._request(Operation.DELETE, query, _wire_bindings(bindings)))

    def statement(self, query: str, bindings: Bindings = ()) -> bool:
        return self._request(Operation.STATEMENT, query, _wire_bindings(bindings)) is True

    def affecting_statement(self, query: str, bindings: Bindings = ()) -> int:
        data = self._request(Operation.AFFECTING_STATEMENT, query, _wire_bindings(bindings))
        return _as_int(Operation.AFFECTING_STATEMENT, data)

    def unprepared(self, query: str) -> bool:
        return self._request(Operation.UNPREPARED, query) is True

    def get_database_name(self) -> str:
        data = self._request(Operation.GET_DATABASE_NAME)
        return "" if data is None else str(data)

    def insert_get_id(self, query: str, bindings: Bindings = (), sequence: Optional[str] = None) -> Any:
        """Run an insert and return the id of the new row.

        PostgreSQL reports ids through ``RETURNING``, so for the ``pgsql``
        family the query is run as a select and the ``sequence`` column
        (default ``id``) of the returned row is used. Every other family runs
        a plain insert and reads the id the server reported with it.
        """
        if self.driver_family is DriverFamily.PGSQL:
            row = self.select_one(query, bindings, False)
            if not row:
                return None
            return _numeric_id(row.get(sequence or "id"))

        self.insert(query, bindings)
        return _numeric_id(self.last_insert_id())

    def begin_transaction(self) -> None:
        raise UnsupportedOperationError("begin_transaction")

    def commit(self) -> None:
        raise UnsupportedOperationError("commit")

    def roll_back(self, to_level: Optional[int] = None) -> None:
        raise UnsupportedOperationError("roll_back")

    def transaction(self, callback: Callable[["ProxyConnection"], Any], attempts: int = 1) -> Any:
        raise UnsupportedOperationError("transaction")

    def transaction_level(self) -> int:
        raise UnsupportedOperationError("transaction_level")

    def pretend(self, callback: Callable[["ProxyConnection"], Any]) -> List[Any]:
        raise UnsupportedOperationError("pretend")

    def cursor(self, query: str, bindings: Bindings = (), use_read_pdo: bool = True):
        raise UnsupportedOperationError("cursor")

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "ProxyConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _request(self, operation: Operation, *params: Any) -> Any:
        """Send one operation and return the response ``data``.

        Raises:
            TransportError: If the endpoint cannot be reached, times out or
                answers with a non-success status
            MalformedResponseError: If the body is not a wire response
            ConnectionError: If the response carries an error envelope
        """
        request = Request.for_operation(operation, *params)
        start_time = time.time()

        try:
            http_response = self._http.post(
                self._endpoint,
                json=request.to_dict(),
                headers=self._config.headers(),
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{operation.value} timed out after {self._config.timeout}s")
            raise TransportError(f"{operation.value} timed out", cause=e) from e
        except httpx.RequestError as e:
            logger.warning(f"{operation.value} could not reach {self._endpoint}: {e}")
            raise TransportError(f"{operation.value} failed to reach {self._endpoint}", cause=e) from e

        if not http_response.is_success:
            logger.warning(f"{operation.value} got HTTP {http_response.status_code}")
            raise TransportError(f"unexpected response to {operation.value}", status_code=http_response.status_code)

        response = decode_response(http_response.content)
        logger.debug(f"{operation.value} round trip took {(time.time() - start_time) * 1000:.1f}ms")

        if response.error is not None:
            raise ConnectionError(response.error.name, response.error.message)

        if response.last_insert_id is not None and response.last_insert_id is not False:
            self._last_insert_id.set(response.last_insert_id)

        return response.data
