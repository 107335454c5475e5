"""The fixed set of operations carried by the wire protocol.

Client and server share this table. Each operation has a wire name and a
positional argument shape; a request whose params do not fit the shape is a
protocol fault.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Sequence, Tuple

from ..core.error import InvalidParamsError, UnknownOperationError


@dataclass(frozen=True)
class ParamSpec:
    """One positional argument of an operation."""
    name: str
    required: bool = True
    default: Any = None


_QUERY = ParamSpec("query")
_BINDINGS = ParamSpec("bindings", required=False, default=())
_USE_READ_PDO = ParamSpec("useReadPdo", required=False, default=True)


class Operation(str, Enum):
    """Operations a proxied connection may ask the remote side to run."""
    SELECT_ONE = "selectOne"
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    STATEMENT = "statement"
    AFFECTING_STATEMENT = "affectingStatement"
    UNPREPARED = "unprepared"
    GET_DATABASE_NAME = "getDatabaseName"

    @property
    def params(self) -> Tuple[ParamSpec, ...]:
        return OPERATION_PARAMS[self]

    @classmethod
    def resolve(cls, method: Any) -> "Operation":
        """Look up an operation by wire name.

        Raises:
            UnknownOperationError: If ``method`` is not in the fixed set
        """
        if isinstance(method, cls):
            return method
        try:
            return cls(method)
        except (ValueError, TypeError):
            raise UnknownOperationError(method) from None

    def bind(self, params: Sequence[Any]) -> List[Any]:
        """Check ``params`` against the argument shape and fill in defaults.

        Raises:
            InvalidParamsError: If too few or too many params are given
        """
        shape = self.params
        required = sum(1 for spec in shape if spec.required)
        if not required <= len(params) <= len(shape):
            expected = str(len(shape)) if required == len(shape) else f"{required} to {len(shape)}"
            raise InvalidParamsError(self.value, expected, len(params))

        bound = list(params)
        for spec in shape[len(params):]:
            bound.append(list(spec.default) if isinstance(spec.default, tuple) else spec.default)
        return bound


OPERATION_PARAMS = {
    Operation.SELECT_ONE: (_QUERY, _BINDINGS, _USE_READ_PDO),
    Operation.SELECT: (_QUERY, _BINDINGS, _USE_READ_PDO),
    Operation.INSERT: (_QUERY, _BINDINGS),
    Operation.UPDATE: (_QUERY, _BINDINGS),
    Operation.DELETE: (_QUERY, _BINDINGS),
    Operation.STATEMENT: (_QUERY, _BINDINGS),
    Operation.AFFECTING_STATEMENT: (_QUERY, _BINDINGS),
    Operation.UNPREPARED: (_QUERY,),
    Operation.GET_DATABASE_NAME: (),
}
