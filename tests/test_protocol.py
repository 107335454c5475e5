"""Tests for the wire protocol."""

import base64
import json
from datetime import datetime
from decimal import Decimal

import pytest

from sqltunnel.core.error import InvalidParamsError, MalformedResponseError, ProtocolError, UnknownOperationError
from sqltunnel.protocol import (
    OPERATION_PARAMS,
    ErrorInfo,
    Operation,
    Request,
    Response,
    decode_request,
    decode_response,
)


class TestOperation:
    """Test the fixed operation table."""

    def test_wire_names(self):
        assert {op.value for op in Operation} == {
            "selectOne", "select", "insert", "update", "delete",
            "statement", "affectingStatement", "unprepared", "getDatabaseName",
        }

    def test_every_operation_has_a_shape(self):
        assert set(OPERATION_PARAMS) == set(Operation)

    def test_resolve(self):
        assert Operation.resolve("affectingStatement") is Operation.AFFECTING_STATEMENT
        assert Operation.resolve(Operation.SELECT) is Operation.SELECT

    @pytest.mark.parametrize("method", ["drop", "", None, ["select"], "SELECT"])
    def test_resolve_unknown(self, method):
        with pytest.raises(UnknownOperationError):
            Operation.resolve(method)

    def test_bind_fills_defaults(self):
        """Test optional params get their defaults."""
        assert Operation.SELECT.bind(["select 1"]) == ["select 1", [], True]
        assert Operation.INSERT.bind(["insert", [1]]) == ["insert", [1]]
        assert Operation.GET_DATABASE_NAME.bind([]) == []

    def test_bind_defaults_are_fresh(self):
        first = Operation.UPDATE.bind(["update"])
        first[1].append("mutated")
        assert Operation.UPDATE.bind(["update"]) == ["update", []]

    def test_bind_too_many(self):
        with pytest.raises(InvalidParamsError) as exc_info:
            Operation.GET_DATABASE_NAME.bind(["extra"])
        assert str(exc_info.value) == "getDatabaseName expects 0 params, 1 given"

    def test_bind_too_few(self):
        with pytest.raises(InvalidParamsError) as exc_info:
            Operation.SELECT_ONE.bind([])
        assert "1 to 3" in str(exc_info.value)


class TestRequest:
    """Test request encoding and decoding."""

    def test_for_operation(self):
        request = Request.for_operation(Operation.SELECT, "select * from t where id = ?", [5], True)
        assert request.to_dict() == {
            "method": "select",
            "params": ["select * from t where id = ?", [5], True],
        }

    def test_bindings_made_json_safe(self):
        request = Request.for_operation(Operation.INSERT, "insert", [datetime(2024, 1, 2, 3, 4, 5)])
        assert request.to_dict()["params"][1] == ["2024-01-02T03:04:05"]

    def test_decode(self):
        request = decode_request(b'{"method": "unprepared", "params": ["vacuum"]}')
        assert request.method == "unprepared"
        assert request.params == ["vacuum"]

    def test_decode_defaults(self):
        """Test a missing method and params fall back to empty values."""
        request = decode_request(b"{}")
        assert request.method == ""
        assert request.params == []

    @pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'{"method": 5}', b'{"method": "select", "params": "x"}'])
    def test_decode_invalid(self, body):
        with pytest.raises(ProtocolError):
            decode_request(body)


class TestResponse:
    """Test response encoding and decoding."""

    def test_success_to_dict(self):
        response = Response.success([{"id": 1}], 12)
        assert response.ok
        assert response.to_dict() == {"data": [{"id": 1}], "error": None, "lastInsertId": 12}

    def test_failure_from_exception(self):
        response = Response.failure(RuntimeError("boom"))
        assert not response.ok
        assert response.to_dict() == {
            "data": None,
            "error": {"name": "RuntimeError", "message": "boom"},
            "lastInsertId": False,
        }

    def test_success_coerces_driver_values(self):
        """Test decimals, dates and bytes become JSON-safe values."""
        response = Response.success({"price": Decimal("1.50"), "at": datetime(2024, 1, 2), "raw": b"abc"})
        assert response.data == {"price": "1.50", "at": "2024-01-02T00:00:00", "raw": "YWJj"}
        json.dumps(response.to_dict())

    def test_success_keeps_non_utf8_bytes(self):
        response = Response.success([{"blob": b"\xff\x00"}])
        encoded = response.data[0]["blob"]
        assert base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4)) == b"\xff\x00"

    def test_success_stringifies_non_finite_floats(self):
        response = Response.success([(float("inf"), float("-inf"), float("nan"), 1.5)])
        assert response.data == [["inf", "-inf", "nan", 1.5]]
        json.dumps(response.to_dict(), allow_nan=False)

    def test_decode(self):
        response = decode_response(b'{"data": true, "error": null, "lastInsertId": "42"}')
        assert response.data is True
        assert response.error is None
        assert response.last_insert_id == "42"

    def test_decode_false_sentinel(self):
        response = decode_response(b'{"data": 3, "error": null, "lastInsertId": false}')
        assert response.last_insert_id is False

    def test_decode_missing_last_insert_id(self):
        response = decode_response(b'{"data": 3, "error": null}')
        assert response.last_insert_id is None

    def test_decode_error(self):
        response = decode_response(b'{"data": null, "error": {"name": "E", "message": "m"}, "lastInsertId": false}')
        assert response.error == ErrorInfo(name="E", message="m")

    @pytest.mark.parametrize("body", [
        b"<html>Bad Gateway</html>",
        b"",
        b"[]",
        b'{"data": 1}',
        b'{"error": null}',
        b'{"data": null, "error": {}}',
        b'{"data": null, "error": {"name": "E"}}',
        b'{"data": null, "error": {"name": 1, "message": "m"}}',
        b'{"data": null, "error": null, "lastInsertId": [1]}',
    ])
    def test_decode_malformed(self, body):
        with pytest.raises(MalformedResponseError):
            decode_response(body)
