"""Wire messages exchanged once per proxied database call.

A request is ``{"method": ..., "params": [...]}`` and a response is
``{"data": ..., "error": {"name": ..., "message": ...} | null,
"lastInsertId": ...}``. Both travel as JSON in the body of a single HTTP
POST; the HTTP status is 200 for every protocol outcome.
"""

import json
import math
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator
from pydantic_core import to_jsonable_python

from ..core.error import MalformedResponseError, ProtocolError, error_name
from .operations import Operation


# Sentinel sent when the auto-increment id cannot be read.
NO_LAST_INSERT_ID = False


def _finite(value: Any) -> Any:
    """Replace inf and nan, which JSON cannot carry, with their string forms."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_finite(item) for item in value]
    if isinstance(value, dict):
        return {key: _finite(item) for key, item in value.items()}
    return value


class ErrorInfo(BaseModel):
    """The ``error`` envelope: fault kind and description, both strings."""

    model_config = ConfigDict(frozen=True)

    name: StrictStr
    message: StrictStr

    @classmethod
    def from_exception(cls, error: BaseException) -> "ErrorInfo":
        return cls(name=error_name(error), message=str(error))


class Request(BaseModel):
    """A single operation invocation."""

    model_config = ConfigDict(frozen=True)

    method: StrictStr = ""
    params: List[Any] = Field(default_factory=list)

    @classmethod
    def for_operation(cls, operation: Operation, *params: Any) -> "Request":
        return cls(method=operation.value, params=list(params))

    def to_dict(self) -> Dict[str, Any]:
        return {"method": self.method, "params": to_jsonable_python(self.params, fallback=str)}


class Response(BaseModel):
    """Outcome of one operation plus the connection's auto-increment id.

    ``data`` and ``error`` must both be present in the body. ``error`` is
    strictly null on success; ``lastInsertId`` may be missing, null, the
    ``false`` sentinel or a scalar id.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data: Any
    error: Optional[ErrorInfo]
    last_insert_id: Union[None, bool, int, float, str] = Field(default=None, alias="lastInsertId")

    @field_validator("last_insert_id", mode="before")
    @classmethod
    def check_scalar(cls, v):
        if isinstance(v, (dict, list)):
            raise ValueError("lastInsertId must be a scalar")
        return v

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any, last_insert_id: Any = NO_LAST_INSERT_ID) -> "Response":
        data = to_jsonable_python(_finite(data), bytes_mode="base64", fallback=str)
        return cls(data=data, error=None, last_insert_id=last_insert_id)

    @classmethod
    def failure(cls, error: Union[BaseException, ErrorInfo], last_insert_id: Any = NO_LAST_INSERT_ID) -> "Response":
        if isinstance(error, BaseException):
            error = ErrorInfo.from_exception(error)
        return cls(data=None, error=error, last_insert_id=last_insert_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            "error": self.error.model_dump() if self.error is not None else None,
            "lastInsertId": self.last_insert_id,
        }


def decode_request(body: Union[bytes, str]) -> Request:
    """Parse an HTTP request body into a :class:`Request`.

    Raises:
        ProtocolError: If the body is not JSON or not a request object
    """
    try:
        payload = json.loads(body or b"{}")
    except (ValueError, UnicodeDecodeError) as e:
        raise ProtocolError("request body is not valid JSON", cause=e)

    if not isinstance(payload, dict):
        raise ProtocolError("request body must be a JSON object")

    try:
        return Request.model_validate(payload)
    except ValidationError as e:
        raise ProtocolError("request does not match the wire shape", cause=e)


def decode_response(body: Union[bytes, str]) -> Response:
    """Parse an HTTP response body into a :class:`Response`.

    Raises:
        MalformedResponseError: If the body is not JSON or not a response object
    """
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedResponseError("body is not valid JSON", cause=e)

    if not isinstance(payload, dict):
        raise MalformedResponseError(f"expected a JSON object, got {type(payload).__name__}")

    try:
        return Response.model_validate(payload)
    except ValidationError as e:
        raise MalformedResponseError("body does not match the response shape", cause=e)
