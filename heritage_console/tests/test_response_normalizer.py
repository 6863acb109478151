"""
Unit tests for payload and error normalization.
"""

import json
import pytest
import httpx

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from heritage_console.app.normalization import (
    ERROR_MESSAGES,
    classify_error,
    create_error_response,
    create_success_response,
    extract_content,
    is_paginated_response,
    normalize_error,
    normalize_page,
    user_message,
)
from shared.errors import ApiRequestError, ErrorKind, NormalizedError
from shared.test_helpers import TestDataFactory


class _UnprintableError(Exception):
    def __str__(self):
        raise ValueError("no text")


def _http_error(status_code, body=None, content=None, method="GET", path="/api/heritage-sites"):
    request = httpx.Request(method, f"http://console.test{path}")
    if body is not None:
        response = httpx.Response(status_code, json=body, request=request)
    else:
        response = httpx.Response(status_code, content=content or b"", request=request)
    return httpx.HTTPStatusError(f"status {status_code}", request=request, response=response)


class TestNormalizePage:
    """Test cases for normalize_page()."""

    def test_content_envelope_gets_items_alias(self):
        result = normalize_page({"content": [1, 2], "totalElements": 2})

        assert result["content"] == [1, 2]
        assert result["items"] == [1, 2]
        assert result["totalElements"] == 2

    def test_legacy_items_envelope_gets_content_alias(self):
        result = normalize_page({"items": [1, 2]})

        assert result["content"] == [1, 2]
        assert result["items"] == [1, 2]

    def test_bare_list_is_wrapped_in_single_page(self):
        result = normalize_page([1, 2])

        assert result == {
            "content": [1, 2],
            "items": [1, 2],
            "page": 0,
            "size": 2,
            "totalElements": 2,
            "totalPages": 1,
            "first": True,
            "last": True,
            "empty": False,
            "numberOfElements": 2,
        }

    def test_empty_list_is_an_empty_page(self):
        result = normalize_page([])

        assert result["empty"] is True
        assert result["totalElements"] == 0
        assert result["totalPages"] == 1

    @pytest.mark.parametrize("payload", [
        {"content": [1, 2]},
        {"items": [1, 2]},
        [1, 2],
        TestDataFactory.create_paged_response(TestDataFactory.create_test_sites(), legacy=True),
    ])
    def test_normalization_is_idempotent(self, payload):
        once = normalize_page(payload)

        assert normalize_page(once) == once

    @pytest.mark.parametrize("payload", [{"id": 7, "nameEn": "Nyanza"}, "text", 42, None])
    def test_other_shapes_pass_through(self, payload):
        assert normalize_page(payload) == payload

    def test_input_is_not_mutated(self):
        payload = {"content": [1]}

        normalize_page(payload)

        assert payload == {"content": [1]}


class TestPageHelpers:
    """Test cases for the remaining response helpers."""

    def test_is_paginated_response(self):
        assert is_paginated_response({"content": []})
        assert is_paginated_response({"items": []})
        assert is_paginated_response({"page": 0, "totalElements": 3})
        assert not is_paginated_response({"page": 0})
        assert not is_paginated_response([1, 2])

    def test_extract_content(self):
        assert extract_content({"content": [1]}) == [1]
        assert extract_content({"items": [2]}) == [2]
        assert extract_content({"page": 0, "totalElements": 0}) == []
        assert extract_content({"id": 1}) == {"id": 1}
        assert extract_content(None) is None

    def test_success_envelope(self):
        envelope = create_success_response({"id": 1}, "Saved")

        assert envelope["success"] is True
        assert envelope["message"] == "Saved"
        assert envelope["data"] == {"id": 1}
        assert envelope["timestamp"]

    def test_error_envelope(self):
        envelope = create_error_response("Could not save", _http_error(409, {"message": "duplicate"}))

        assert envelope["success"] is False
        assert envelope["error"]["status"] == 409
        assert envelope["error"]["message"] == ERROR_MESSAGES[409]
        assert create_error_response("No detail")["error"] is None


class TestNormalizeError:
    """Test cases for normalize_error()."""

    def test_http_error_with_body(self):
        body = TestDataFactory.create_error_body(
            422, "nameEn must not be blank", error="Unprocessable Entity",
            field_errors=[{"field": "nameEn", "message": "must not be blank"}]
        )

        result = normalize_error(_http_error(422, body, method="POST"))

        assert result.status == 422
        assert result.error == "Unprocessable Entity"
        assert result.details == [{"field": "nameEn", "message": "must not be blank"}]
        assert result.path == "/api/heritage-sites"
        assert result.kind == ErrorKind.HTTP_STATUS
        # Raw backend text is kept for logs but never used as the message
        assert result.server_message == "nameEn must not be blank"
        assert result.message == ERROR_MESSAGES[422]

    def test_details_preferred_over_field_errors(self):
        body = {"message": "bad", "details": ["a"], "fieldErrors": ["b"]}

        assert normalize_error(_http_error(400, body)).details == ["a"]

    def test_field_error_mapping_is_wrapped(self):
        body = {"message": "bad", "fieldErrors": {"nameEn": "required"}}

        assert normalize_error(_http_error(400, body)).details == [{"nameEn": "required"}]

    def test_http_error_without_body(self):
        result = normalize_error(_http_error(404))

        assert result.status == 404
        assert result.error == "Unknown Error"
        assert result.details == []
        assert result.message == ERROR_MESSAGES[404]

    def test_malformed_json_body(self):
        result = normalize_error(_http_error(502, content=b"<html>Bad Gateway</html>"))

        assert result.status == 502
        assert result.server_message == "<html>Bad Gateway</html>"
        assert result.message == ERROR_MESSAGES[502]

    def test_connect_error(self):
        request = httpx.Request("GET", "http://console.test/api/languages")
        result = normalize_error(httpx.ConnectError("Connection refused", request=request))

        assert result.kind == ErrorKind.NETWORK_UNREACHABLE
        assert result.status == 500
        assert result.path == "/api/languages"
        assert result.message == ERROR_MESSAGES["NETWORK_ERROR"]

    def test_timeout_without_request(self):
        result = normalize_error(httpx.ReadTimeout("timed out"), path="/api/testimonials")

        assert result.kind == ErrorKind.TIMEOUT
        assert result.path == "/api/testimonials"
        assert result.message == ERROR_MESSAGES["TIMEOUT_ERROR"]

    def test_already_normalized_error_is_returned_as_is(self):
        normalized = normalize_error(_http_error(403))
        wrapped = ApiRequestError(normalized)

        assert normalize_error(wrapped) is normalized

    def test_unprintable_exception(self):
        result = normalize_error(_UnprintableError())

        assert result.kind == ErrorKind.UNKNOWN
        assert result.server_message == "_UnprintableError"
        assert result.message == ERROR_MESSAGES["UNKNOWN_ERROR"]

    def test_unprintable_transport_error(self):
        class UnprintableConnectError(httpx.ConnectError):
            def __str__(self):
                raise ValueError("no text")

        result = normalize_error(UnprintableConnectError("down"))

        assert result.kind == ErrorKind.NETWORK_UNREACHABLE
        assert result.server_message == "UnprintableConnectError"

    def test_undecodable_body(self):
        request = httpx.Request("GET", "http://console.test/api/heritage-sites")
        response = httpx.Response(
            500, content=b"\xff\xfe\xfa", headers={"Content-Type": "text/plain; charset=not-a-charset"},
            request=request
        )
        error = httpx.HTTPStatusError("status 500", request=request, response=response)

        result = normalize_error(error)

        assert result.status == 500
        assert result.message

    @pytest.mark.parametrize("raw", [
        ValueError("boom"),
        json.JSONDecodeError("Expecting value", "", 0),
        "a string",
        None,
        {"message": "a dict"},
        _http_error(500, body=["not", "a", "dict"]),
        _http_error(400, body={"status": "not-a-number", "error": None}),
    ])
    def test_total_for_any_input(self, raw):
        result = normalize_error(raw)

        assert isinstance(result, NormalizedError)
        assert result.message
        assert result.status is not None
        assert result.timestamp


class TestErrorClassifier:
    """Test cases for user-facing messages."""

    @pytest.mark.parametrize("status_code", [400, 403, 404, 409, 422, 429, 502, 503, 504])
    def test_status_table(self, status_code):
        assert user_message(_http_error(status_code, {"message": "raw"})) == ERROR_MESSAGES[status_code]

    def test_500_with_detail_body(self):
        assert user_message(_http_error(500, {"message": "NPE"})) == ERROR_MESSAGES[500]

    def test_500_without_body_means_server_down(self):
        assert user_message(_http_error(500)) == ERROR_MESSAGES["SERVER_DOWN"]
        assert user_message(_http_error(500, content=b"Internal Server Error")) == ERROR_MESSAGES["SERVER_DOWN"]

    def test_401_variants(self):
        assert user_message(_http_error(401)) == ERROR_MESSAGES[401]
        assert user_message(_http_error(401, method="POST", path="/api/auth/login")) == ERROR_MESSAGES["LOGIN_FAILED"]
        assert user_message(_http_error(401, method="POST", path="/api/auth/register")) == ERROR_MESSAGES["AUTH_FAILED"]

    def test_unlisted_status_and_unknown_errors(self):
        assert user_message(_http_error(418)) == ERROR_MESSAGES["UNKNOWN_ERROR"]
        assert user_message(RuntimeError("boom")) == ERROR_MESSAGES["UNKNOWN_ERROR"]

    def test_classify_error(self):
        assert classify_error(httpx.ConnectTimeout("slow")) == ErrorKind.TIMEOUT
        assert classify_error(httpx.ConnectError("down")) == ErrorKind.NETWORK_UNREACHABLE
        assert classify_error(_http_error(404)) == ErrorKind.HTTP_STATUS
        assert classify_error(KeyError("x")) == ErrorKind.UNKNOWN
