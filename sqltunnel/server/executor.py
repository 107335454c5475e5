"""Remote side of the tunnel: authenticate, dispatch, execute, report.

The executor is stateless across requests. Every fault, whether a bad token,
an unknown method or a driver failure, is folded into the ``error`` envelope
of the wire response; nothing is raised to the hosting web framework.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Union

from ..core.error import AuthorizationError
from ..core.logging import safe_log
from ..data.database import DatabaseDriver
from ..protocol.message import NO_LAST_INSERT_ID, Request, Response, decode_request
from ..protocol.operations import Operation

logger = logging.getLogger(__name__)

Handler = Callable[[DatabaseDriver, List[Any]], Any]
ConnectionResolver = Callable[[], DatabaseDriver]

DISPATCH_TABLE: Dict[Operation, Handler] = {
    Operation.SELECT_ONE: lambda db, params: db.select_one(*params),
    Operation.SELECT: lambda db, params: db.select(*params),
    Operation.INSERT: lambda db, params: db.insert(*params),
    Operation.UPDATE: lambda db, params: db.update(*params),
    Operation.DELETE: lambda db, params: db.delete(*params),
    Operation.STATEMENT: lambda db, params: db.statement(*params),
    Operation.AFFECTING_STATEMENT: lambda db, params: db.affecting_statement(*params),
    Operation.UNPREPARED: lambda db, params: db.unprepared(*params),
    Operation.GET_DATABASE_NAME: lambda db, params: db.get_database_name(),
}


class RemoteExecutor:
    """Run wire requests against a real database connection.

    Args:
        resolver: Returns the database handle to use for one request. Its
            ``session()`` is held for the call and its last-insert-id read.
        token: Shared bearer token. When set, every request must carry it.
    """

    def __init__(self, resolver: Union[ConnectionResolver, DatabaseDriver], token: Optional[str] = None) -> None:
        if isinstance(resolver, DatabaseDriver):
            connection = resolver
            resolver = lambda: connection
        self._resolver = resolver
        self._token = token

    @property
    def requires_token(self) -> bool:
        return self._token is not None

    def authenticate(self, authorization: Optional[str]) -> bool:
        """Check the ``Authorization`` header against the configured token."""
        if self._token is None:
            return True

        given = (authorization or "").replace("Bearer ", "")
        return given == self._token

    def handle(self, body: Union[bytes, str], authorization: Optional[str] = None) -> Response:
        """Authenticate, decode and execute one raw HTTP request body."""
        if not self.authenticate(authorization):
            logger.warning("Rejected request with bad authorization token")
            return Response.failure(AuthorizationError(), NO_LAST_INSERT_ID)

        try:
            request = decode_request(body)
        except Exception as e:
            logger.info(f"Undecodable request: {e}")
            return Response.failure(e, NO_LAST_INSERT_ID)

        return self.execute(request)

    def execute(self, request: Request) -> Response:
        """Resolve and run an already-authenticated request."""
        start_time = time.time()
        try:
            connection = self._resolver()
        except Exception as e:
            self._log_failure(request, e)
            return Response.failure(e, NO_LAST_INSERT_ID)

        # The id read must stay paired with this request's own call.
        with connection.session():
            try:
                operation = Operation.resolve(request.method)
                params = operation.bind(request.params)
                data = self.dispatch(connection, operation, params)
                response = Response.success(data, self._read_last_insert_id(connection))
            except Exception as e:
                self._log_failure(request, e)
                return Response.failure(e, self._read_last_insert_id(connection))

        logger.debug(f"Executed {request.method} in {(time.time() - start_time) * 1000:.1f}ms")
        return response

    def dispatch(self, connection: DatabaseDriver, operation: Operation, params: List[Any]) -> Any:
        return DISPATCH_TABLE[operation](connection, params)

    def _log_failure(self, request: Request, error: Exception) -> None:
        safe_log(
            "info",
            f"Operation {request.method!r} failed",
            logger=logger,
            error_type=type(error).__name__,
            error=str(error),
        )

    def _read_last_insert_id(self, connection: DatabaseDriver) -> Any:
        """Best-effort read of the connection's auto-increment id."""
        try:
            value = connection.last_insert_id()
        except Exception as e:
            logger.debug(f"Could not read last insert id: {e}")
            return NO_LAST_INSERT_ID

        if value is None:
            return NO_LAST_INSERT_ID
        if not isinstance(value, (bool, int, float, str)):
            return str(value)
        return value
