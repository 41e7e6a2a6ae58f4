"""Assinatura HMAC-SHA256 de webhooks (header X-UIM-Signature)."""

from __future__ import annotations

import binascii
import hashlib
import hmac


def compute_signature(body: bytes, secret: str) -> str:
    """Retorna o HMAC-SHA256 de `body` em hex minúsculo."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def check_signature(signature: str, secret: str, body: bytes) -> bool:
    """Valida assinatura hex do webhook.

    Args:
        signature: Valor hex do header X-UIM-Signature
        secret: Secret compartilhado com a plataforma
        body: Corpo bruto da requisição

    Returns:
        True se assinatura válida. Hex malformado conta como inválido.
    """
    try:
        received = binascii.unhexlify(signature)
    except ValueError:
        return False

    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return hmac.compare_digest(expected, received)
