"""Verificação e parse do webhook UIM (sem PII nos erros)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from app.infra.crypto import check_signature

from ..models import CloudEvent

if TYPE_CHECKING:
    from collections.abc import Mapping

APP_KEY_HEADER = "X-UIM-Key"
SIGNATURE_HEADER = "X-UIM-Signature"


class WebhookRequestError(ValueError):
    """Erro base para falhas de webhook."""


class InvalidSignatureError(WebhookRequestError):
    """Chave de app ou assinatura inválida."""


class InvalidJsonError(WebhookRequestError):
    """Corpo não é um CloudEvent JSON válido."""


def verify_webhook_request(
    raw_body: bytes,
    headers: Mapping[str, str] | httpx.Headers,
    app_id: str,
    secret: str,
) -> bool:
    """True se algum X-UIM-Key casa com o app e a assinatura confere."""
    if not app_id:
        return False
    request_headers = httpx.Headers(headers)
    signature = request_headers.get(SIGNATURE_HEADER, "")
    return any(
        key == app_id and check_signature(signature, secret, raw_body)
        for key in request_headers.get_list(APP_KEY_HEADER)
    )


def parse_webhook_request(
    raw_body: bytes,
    headers: Mapping[str, str] | httpx.Headers,
    app_id: str,
    secret: str,
) -> CloudEvent:
    """Valida chave e assinatura e parseia o CloudEvent.

    Args:
        raw_body: Corpo bruto do request
        headers: Headers recebidos (X-UIM-Key pode se repetir)
        app_id: ID esperado em X-UIM-Key
        secret: Secret HMAC do webhook

    Raises:
        InvalidSignatureError: chave ou assinatura inválida
        InvalidJsonError: JSON inválido ou fora do formato CloudEvent
    """
    if not verify_webhook_request(raw_body, headers, app_id, secret):
        raise InvalidSignatureError("invalid_webhook")

    try:
        return CloudEvent.model_validate_json(raw_body or b"{}")
    except ValidationError as exc:
        raise InvalidJsonError("invalid_event") from exc
