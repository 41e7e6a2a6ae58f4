"""Testes da chamada ao endpoint de token (app/infra/auth/authorize.py)."""

from __future__ import annotations

import json

import httpx
import pytest

from app.infra.auth import fetch_access_token
from config.settings import UimSettings
from utils.errors import AuthenticationFailedError, ClientError, NetworkError

TOKEN_ENDPOINT = "https://auth.example.com/oauth/token"


def _settings() -> UimSettings:
    return UimSettings(
        client_id="cid",
        client_secret="csecret",
        client_audience="https://api.example.com",
        token_endpoint=TOKEN_ENDPOINT,
    )


class TestFetchAccessToken:
    """client_credentials via POST JSON."""

    def test_success(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 7200})

        token, expires_in = fetch_access_token(
            _settings(), transport=httpx.MockTransport(handler)
        )

        assert token == "tok"
        assert expires_in == 7200
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == TOKEN_ENDPOINT
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {
            "client_id": "cid",
            "client_secret": "csecret",
            "audience": "https://api.example.com",
            "grant_type": "client_credentials",
        }

    def test_rejected_credentials(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "access_denied"})

        with pytest.raises(AuthenticationFailedError) as exc_info:
            fetch_access_token(_settings(), transport=httpx.MockTransport(handler))

        assert exc_info.value.error_code == "SDK.AuthenticationFailed"
        assert exc_info.value.http_status == 400

    def test_malformed_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"token": "missing fields"})

        with pytest.raises(ClientError) as exc_info:
            fetch_access_token(_settings(), transport=httpx.MockTransport(handler))

        assert exc_info.value.error_code == "SDK.JsonUnmarshalError"

    def test_transport_error_is_classified(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused")

        with pytest.raises(NetworkError):
            fetch_access_token(_settings(), transport=httpx.MockTransport(handler))

    def test_secret_not_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403)

        with pytest.raises(AuthenticationFailedError):
            fetch_access_token(_settings(), transport=httpx.MockTransport(handler))

        assert "csecret" not in caplog.text
