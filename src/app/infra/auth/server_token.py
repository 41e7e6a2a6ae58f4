"""Validação dos JWTs que a plataforma UIM envia ao provider.

Chamadas de entrada trazem `Authorization: Bearer <jwt>` assinado em RS256
pelo issuer da plataforma. As chaves vêm do JWKS do issuer, com cache.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import httpx
import jwt

from utils.errors import ServerError
from utils.errors.exceptions import (
    UNAUTHORIZED_CODE,
    UNAUTHORIZED_MESSAGE,
    UNAUTHORIZED_STATUS,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer "
SERVER_TOKEN_ALGORITHM = "RS256"
DEFAULT_JWKS_CACHE_SECONDS = 300
JWKS_PATH = "/.well-known/jwks.json"


class SigningKeySource(Protocol):
    """Fonte de chaves de assinatura (PyJWKClient ou equivalente)."""

    def get_signing_key_from_jwt(self, token: str) -> Any: ...


def jwks_url(issuer: str) -> str:
    """URL do JWKS publicado pelo issuer."""
    return issuer.rstrip("/") + JWKS_PATH


def unauthorized(origin_error: BaseException | None = None) -> ServerError:
    return ServerError(
        UNAUTHORIZED_STATUS,
        UNAUTHORIZED_CODE,
        UNAUTHORIZED_MESSAGE,
        origin_error=origin_error,
    )


def extract_bearer_token(headers: Mapping[str, str] | httpx.Headers) -> str:
    """Extrai o token do header Authorization.

    Raises:
        ServerError: 401 sem header ou fora do formato `Bearer <token>`
    """
    value = httpx.Headers(headers).get(AUTHORIZATION_HEADER, "")
    if not value.startswith(BEARER_PREFIX):
        raise unauthorized()
    token = value[len(BEARER_PREFIX) :].strip()
    if not token:
        raise unauthorized()
    return token


class ServerTokenValidator:
    """Valida assinatura, issuer, audience e expiração do JWT.

    Args:
        issuer: Issuer esperado (claim `iss`) e base do JWKS
        audience: Audience exigida; vazio desliga a checagem de `aud`
        key_source: Fonte de chaves injetada (padrão: PyJWKClient do issuer)
        cache_seconds: Tempo de vida do JWKS em cache
    """

    def __init__(
        self,
        issuer: str,
        audience: str = "",
        *,
        key_source: SigningKeySource | None = None,
        cache_seconds: int = DEFAULT_JWKS_CACHE_SECONDS,
    ) -> None:
        self._issuer = issuer
        self._audience = audience
        self._key_source = key_source or jwt.PyJWKClient(
            jwks_url(issuer),
            cache_jwk_set=True,
            lifespan=cache_seconds,
        )

    def validate(self, token: str) -> dict[str, Any]:
        """Retorna as claims do token válido.

        Raises:
            ServerError: 401 para qualquer falha de chave ou de claims
        """
        try:
            signing_key = self._key_source.get_signing_key_from_jwt(token)
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=[SERVER_TOKEN_ALGORITHM],
                issuer=self._issuer,
                audience=self._audience or None,
                options={"verify_aud": bool(self._audience)},
            )
        except jwt.PyJWTError as exc:
            logger.warning(
                "server_token_rejected",
                extra={"issuer": self._issuer, "error_type": type(exc).__name__},
            )
            raise unauthorized(exc) from exc
