"""Testes da decodificação de respostas (app/infra/http/response.py)."""

from __future__ import annotations

import json

import httpx
import pytest

from app.infra.http import JSON, RAW, unmarshal_response
from utils.errors import ClientError, ServerError


class TestUnmarshalResponse:
    """Classificação por status e decodificação."""

    def test_success_without_result_type(self) -> None:
        response = unmarshal_response(httpx.Response(200, json={"ok": True}), JSON)

        assert response.is_success is True
        assert response.decoded is False
        assert response.data is None
        assert json.loads(response.text) == {"ok": True}

    def test_success_decodes_dict(self) -> None:
        response = unmarshal_response(
            httpx.Response(201, json={"ok": True}), JSON, dict[str, bool]
        )
        assert response.data == {"ok": True}
        assert response.decoded is True

    def test_non_json_accept_skips_decoding(self) -> None:
        response = unmarshal_response(httpx.Response(200, content=b"\x00\x01"), RAW, dict)
        assert response.decoded is False
        assert response.content == b"\x00\x01"

    def test_empty_body_skips_decoding(self) -> None:
        response = unmarshal_response(httpx.Response(204), JSON, dict)
        assert response.decoded is False

    def test_failure_envelope(self) -> None:
        body = {
            "code": "InvalidAccount",
            "message": "account disabled",
            "request_id": "req-1",
            "host_id": "h-1",
            "recommend": "https://docs.example.com",
        }

        with pytest.raises(ServerError) as exc_info:
            unmarshal_response(httpx.Response(400, json=body), JSON, dict)

        error = exc_info.value
        assert error.http_status == 400
        assert error.error_code == "InvalidAccount"
        assert error.message == "account disabled"
        assert error.request_id == "req-1"
        assert error.host_id == "h-1"
        assert error.recommend == "https://docs.example.com"
        assert error.response.status == 400

    def test_failure_without_envelope(self) -> None:
        with pytest.raises(ServerError) as exc_info:
            unmarshal_response(httpx.Response(502, text="Bad Gateway"), JSON)

        assert exc_info.value.error_code == ""
        assert exc_info.value.message == "HTTP 502: Bad Gateway"

    def test_body_type_mismatch(self) -> None:
        with pytest.raises(ClientError) as exc_info:
            unmarshal_response(httpx.Response(200, json=[1, 2]), JSON, dict)

        assert exc_info.value.error_code == "SDK.JsonUnmarshalError"
        assert exc_info.value.response.status == 200
        assert exc_info.value.origin_error is not None
