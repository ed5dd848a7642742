"""Tests for the request preparation pipeline."""

import math

import pytest

from httpill import Config, Form, Request
from httpill.preparation import (
    JSON_CONTENT_TYPE,
    attach_params,
    encode_body,
    prepare,
    resolve_headers,
    resolve_url,
)


class TestAttachParams:
    """Test query string handling."""

    def test_no_params(self):
        assert attach_params("localhost", None) == "localhost"
        assert attach_params("localhost", {}) == "localhost"

    def test_mapping(self):
        assert attach_params("localhost/get", {"foo": 3, "bar": 4}) == "localhost/get?foo=3&bar=4"

    def test_existing_query_string(self):
        assert attach_params("localhost/get?a=1", {"b": 2}) == "localhost/get?a=1&b=2"

    def test_repeated_keys(self):
        assert attach_params("h", [("a", 1), ("a", 2)]) == "h?a=1&a=2"
        assert attach_params("h", {"a": [1, 2]}) == "h?a=1&a=2"

    def test_values_are_escaped(self):
        assert attach_params("h", {"q": "a b&c"}) == "h?q=a+b%26c"


class TestResolveUrl:
    """Test base URL and default scheme handling."""

    @pytest.mark.parametrize(
        "url",
        ["http://localhost", "https://localhost", "HTTPS://localhost", "http+unix://%2Fsock/x"],
    )
    def test_known_scheme_is_kept(self, url):
        assert resolve_url(url) == url

    def test_default_scheme(self):
        assert resolve_url("localhost:8080/get") == "http://localhost:8080/get"

    def test_base_url(self):
        assert resolve_url("get", "https://api.example.com") == "https://api.example.com/get"
        assert resolve_url("get", "api.example.com") == "http://api.example.com/get"

    def test_empty_base_url_is_ignored(self):
        assert resolve_url("localhost/get", "") == "http://localhost/get"

    def test_base_url_is_joined_with_a_slash(self):
        assert resolve_url("/get", "http://h") == "http://h//get"


class TestHeadersAndBody:
    """Test header resolution and body encoding."""

    def test_json_content_type_for_mapping_body(self):
        resolved = resolve_headers([("Accept", "x")], {"a": 1})
        assert resolved == [("Content-Type", JSON_CONTENT_TYPE), ("Accept", "x")]

    def test_no_content_type_for_bytes_body(self):
        assert resolve_headers({"Accept": "x"}, b"data") == [("Accept", "x")]

    def test_extra_headers_follow_caller_headers(self):
        resolved = resolve_headers([("A", "1")], b"", [("B", "2")])
        assert resolved == [("A", "1"), ("B", "2")]

    def test_encode_mapping_as_json(self):
        assert encode_body({"a": 1}, [("Content-Type", JSON_CONTENT_TYPE)]) == '{"a":1}'

    def test_mapping_without_json_content_type_is_untouched(self):
        body = {"a": 1}
        assert encode_body(body, [("Content-Type", "text/plain")]) is body
        assert encode_body(body, []) is body

    def test_unencodable_body_is_untouched(self):
        body = {"a": object()}
        assert encode_body(body, [("Content-Type", JSON_CONTENT_TYPE)]) is body

    @pytest.mark.parametrize("number", [math.nan, math.inf, -math.inf])
    def test_non_finite_numbers_are_not_encoded(self, number):
        body = {"a": number}
        assert encode_body(body, [("Content-Type", JSON_CONTENT_TYPE)]) is body

    def test_other_bodies_are_untouched(self):
        form = Form({"a": "1"})
        assert encode_body(form, [("Content-Type", JSON_CONTENT_TYPE)]) is form


def test_prepare_runs_every_stage():
    config = Config(base_url="localhost:4000", request_headers=[("X-Client", "test")])
    request = Request.new("post", "items", body={"name": "pill"}, params={"page": 2})

    prepared = prepare(request, config)

    assert prepared.url == "http://localhost:4000/items?page=2"
    assert prepared.headers == [("Content-Type", JSON_CONTENT_TYPE), ("X-Client", "test")]
    assert prepared.body == '{"name":"pill"}'
    assert request.url == "items"
