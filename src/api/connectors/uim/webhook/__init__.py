"""Webhook UIM: chave do app, assinatura HMAC e parse do CloudEvent."""

from .receive import (
    APP_KEY_HEADER,
    SIGNATURE_HEADER,
    InvalidJsonError,
    InvalidSignatureError,
    WebhookRequestError,
    parse_webhook_request,
    verify_webhook_request,
)

__all__ = [
    "APP_KEY_HEADER",
    "SIGNATURE_HEADER",
    "InvalidJsonError",
    "InvalidSignatureError",
    "WebhookRequestError",
    "parse_webhook_request",
    "verify_webhook_request",
]
