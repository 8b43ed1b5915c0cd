"""Tests for the network collaborator."""

from __future__ import annotations

import base64
import json
from typing import Any

import httpx
import pytest

from authbox.exceptions import NotFoundError, WebAPIError
from authbox.web_api import WebAPI, decode_jwt_payload


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _jwt(payload: dict[str, Any]) -> str:
    body = base64.urlsafe_b64encode(json.dumps(payload).encode()).rstrip(b"=").decode()
    return f"eyJhbGciOiJSUzI1NiJ9.{body}.signature"


def _api(handler, domain: str = "example.auth0.com") -> WebAPI:
    api = WebAPI(transport=httpx.MockTransport(handler))
    api.register("authbox-1", "my-client", domain)
    return api


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegistration:
    def test_base_url_adds_scheme(self) -> None:
        api = WebAPI()
        api.register("authbox-1", "c", "example.auth0.com/")
        assert api.base_url("authbox-1") == "https://example.auth0.com"

    def test_base_url_keeps_scheme(self) -> None:
        api = WebAPI()
        api.register("authbox-1", "c", "http://localhost:3000")
        assert api.base_url("authbox-1") == "http://localhost:3000"

    def test_unknown_instance(self) -> None:
        api = WebAPI()
        with pytest.raises(NotFoundError):
            api.base_url("authbox-404")

    def test_unregister(self) -> None:
        api = WebAPI()
        api.register("authbox-1", "c", "d")
        api.unregister("authbox-1")
        api.unregister("authbox-1")
        with pytest.raises(NotFoundError):
            api.parse_hash("authbox-1", "")


# ---------------------------------------------------------------------------
# get_profile
# ---------------------------------------------------------------------------


class TestGetProfile:
    def test_sends_bearer_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"sub": "auth0|1", "name": "Jane"})

        profile = _api(handler).get_profile("authbox-1", "access-123")
        assert profile == {"sub": "auth0|1", "name": "Jane"}
        assert str(seen[0].url) == "https://example.auth0.com/userinfo"
        assert seen[0].headers["Authorization"] == "Bearer access-123"

    def test_error_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401, json={"error": "invalid_token", "error_description": "Token expired"}
            )

        with pytest.raises(WebAPIError, match="Token expired") as exc_info:
            _api(handler).get_profile("authbox-1", "stale")
        assert exc_info.value.code == "invalid_token"
        assert exc_info.value.status_code == 401

    def test_error_response_without_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(WebAPIError, match="HTTP 502") as exc_info:
            _api(handler).get_profile("authbox-1", "t")
        assert exc_info.value.code is None

    def test_connection_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(WebAPIError, match="failed") as exc_info:
            _api(handler).get_profile("authbox-1", "t")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


# ---------------------------------------------------------------------------
# logout
# ---------------------------------------------------------------------------


class TestLogout:
    def test_logout_includes_client_and_query(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="OK")

        url = _api(handler).logout("authbox-1", {"returnTo": "https://app.example.com"})
        params = seen[0].url.params
        assert seen[0].url.path == "/v2/logout"
        assert params["client_id"] == "my-client"
        assert params["returnTo"] == "https://app.example.com"
        assert url == str(seen[0].url)


# ---------------------------------------------------------------------------
# parse_hash
# ---------------------------------------------------------------------------


class TestParseHash:
    def test_tokens(self) -> None:
        api = _api(lambda request: httpx.Response(500))
        id_token = _jwt({"sub": "auth0|1", "email": "jane@example.com"})

        result = api.parse_hash(
            "authbox-1",
            f"#access_token=abc&id_token={id_token}&token_type=Bearer&expires_in=7200&state=xyz",
        )
        assert result == {
            "access_token": "abc",
            "id_token": id_token,
            "token_type": "Bearer",
            "state": "xyz",
            "expires_in": 7200,
            "id_token_payload": {"sub": "auth0|1", "email": "jane@example.com"},
        }

    def test_no_result(self) -> None:
        api = _api(lambda request: httpx.Response(500))
        assert api.parse_hash("authbox-1", "#state=xyz") is None
        assert api.parse_hash("authbox-1", None) is None

    def test_error_fragment(self) -> None:
        api = _api(lambda request: httpx.Response(500))
        with pytest.raises(WebAPIError, match="User cancelled") as exc_info:
            api.parse_hash(
                "authbox-1", "#error=access_denied&error_description=User%20cancelled"
            )
        assert exc_info.value.code == "access_denied"

    def test_invalid_expires_in(self) -> None:
        api = _api(lambda request: httpx.Response(500))
        with pytest.raises(WebAPIError, match="expires_in"):
            api.parse_hash("authbox-1", "#access_token=abc&expires_in=soon")


class TestDecodeJwtPayload:
    def test_decodes_payload(self) -> None:
        assert decode_jwt_payload(_jwt({"aud": "my-client"})) == {"aud": "my-client"}

    @pytest.mark.parametrize("token", ["not-a-jwt", "a.!!!.c", "a.bnVsbA.c"])
    def test_malformed(self, token: str) -> None:
        with pytest.raises(WebAPIError):
            decode_jwt_payload(token)
