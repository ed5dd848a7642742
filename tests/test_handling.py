"""Tests for body decoding and response-handling policies."""

import pytest

from httpill import ConnError, Decoded, Outcome, Raw, Request, Response, ResponseHandling, Result
from httpill.handling import accepts_of, decode_body, wrap, wrap_error


def response(status=200, body=b""):
    return Response(status_code=status, body=Raw(body))


class TestDecodeBody:
    """Test JSON decoding driven by the Accepts header."""

    def test_decodes_json(self):
        decoded = decode_body(response(body=b'{"a": [1, 2]}'), "application/json")
        assert decoded.body == Decoded({"a": [1, 2]})

    def test_no_accepts(self):
        original = response(body=b'{"a": 1}')
        assert decode_body(original, None) is original

    def test_accepts_without_json(self):
        original = response(body=b'{"a": 1}')
        assert decode_body(original, "text/plain") is original

    def test_invalid_json_keeps_raw_body(self):
        original = response(body=b"not json")
        assert decode_body(original, "application/json").body == Raw(b"not json")

    def test_accepts_of_request(self):
        request = Request.new("get", "h", headers={"Accepts": "application/json"})
        assert accepts_of(request) == "application/json"
        assert accepts_of(Request.new("get", "h", headers={"Accept": "x"})) is None
        assert accepts_of(None) is None


class TestPolicies:
    """Test wrapping of results under each policy."""

    def test_conn_error_policy(self):
        assert wrap(response(500), "conn_error") == Result(Outcome.OK, response(500))
        error = ConnError("econnrefused")
        assert wrap_error(error, ResponseHandling.CONN_ERROR) == ("error", error)

    @pytest.mark.parametrize("status,outcome", [(200, "ok"), (399, "ok"), (400, "status_error"), (503, "status_error")])
    def test_status_error_policy(self, status, outcome):
        result = wrap(response(status), "status_error")
        assert result.outcome == outcome
        assert result.value == response(status)

    def test_no_tuple_policy(self):
        value = response(404)
        error = ConnError("timeout")
        assert wrap(value, "no_tuple") is value
        assert wrap_error(error, "no_tuple") is error

    def test_result_compares_to_tuple(self):
        result = wrap("handle", "conn_error")
        assert result == ("ok", "handle")
        assert result.ok

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            wrap(response(), "explode")
