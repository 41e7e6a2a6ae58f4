"""Verificação de assinatura dos webhooks UIM."""

from .signature import check_signature, compute_signature

__all__ = [
    "check_signature",
    "compute_signature",
]
