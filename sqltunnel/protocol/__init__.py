"""Wire protocol shared by the proxied connection and the remote executor."""

from .operations import Operation, ParamSpec, OPERATION_PARAMS
from .message import (
    NO_LAST_INSERT_ID,
    ErrorInfo,
    Request,
    Response,
    decode_request,
    decode_response,
)

__all__ = [
    "Operation",
    "ParamSpec",
    "OPERATION_PARAMS",
    "NO_LAST_INSERT_ID",
    "ErrorInfo",
    "Request",
    "Response",
    "decode_request",
    "decode_response",
]
