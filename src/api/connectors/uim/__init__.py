"""Conector UIM - SDK do provider para a plataforma UIM.

Responsabilidades:
- Cliente HTTP com retry, timeouts, proxy e TLS por chamada
- Bearer token client_credentials com cache
- Envio de CloudEvents e comandos
- Webhook (chave do app, assinatura HMAC, despacho por tipo)
- Chamadas da plataforma autenticadas por JWT (JWKS do issuer)
- Fila assíncrona de tarefas
"""

from .client import EventHandler, EventRequest, UimClient
from .models import CloudEvent, new_event
from .webhook import InvalidJsonError, InvalidSignatureError, WebhookRequestError

__all__ = [
    "CloudEvent",
    "EventHandler",
    "EventRequest",
    "InvalidJsonError",
    "InvalidSignatureError",
    "UimClient",
    "WebhookRequestError",
    "new_event",
]
