"""Chamada ao endpoint OAuth de token (client_credentials)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from app.infra.http.executor import classify_transport_error
from app.infra.http.request import BaseRequest
from app.infra.http.transport import resolve_transport_policy
from utils.errors import AuthenticationFailedError, ClientError
from utils.errors.exceptions import (
    AUTHENTICATION_FAILED_MESSAGE,
    JSON_UNMARSHAL_ERROR_CODE,
    JSON_UNMARSHAL_ERROR_MESSAGE,
)

if TYPE_CHECKING:
    from config.settings.uim import UimSettings

logger = logging.getLogger(__name__)

GRANT_TYPE = "client_credentials"


class TokenResponse(BaseModel):
    """Corpo de sucesso do endpoint de token."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    expires_in: float


class TokenRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str
    audience: str
    grant_type: str = GRANT_TYPE


def fetch_access_token(
    settings: UimSettings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> tuple[str, float]:
    """Troca as credenciais do cliente por um access token.

    Returns:
        (access_token, expires_in em segundos)

    Raises:
        AuthenticationFailedError: status fora de [200, 300)
        ClientError: SDK.JsonUnmarshalError com corpo inválido
        NetworkError / RequestTimeoutError / CertificateError: falha de transporte
    """
    payload = TokenRequest(
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        audience=settings.client_audience,
    )
    policy = resolve_transport_policy(BaseRequest(), settings, settings.token_endpoint)

    client_kwargs: dict[str, Any] = {
        "timeout": policy.httpx_timeout(),
        "verify": policy.verify,
        "trust_env": False,
    }
    if transport is not None:
        client_kwargs["transport"] = transport
    elif policy.proxy:
        client_kwargs["proxy"] = policy.proxy

    client = httpx.Client(**client_kwargs)
    try:
        response = client.post(
            settings.token_endpoint,
            content=payload.model_dump_json().encode("utf-8"),
            headers={"content-type": "application/json"},
        )
    except httpx.TransportError as exc:
        logger.warning(
            "token_request_failed",
            extra={"token_endpoint": settings.token_endpoint, "error_type": type(exc).__name__},
        )
        raise classify_transport_error(exc, 1) from exc
    finally:
        if transport is None:
            client.close()

    if not response.is_success:
        logger.warning(
            "token_request_rejected",
            extra={"token_endpoint": settings.token_endpoint, "status_code": response.status_code},
        )
        raise AuthenticationFailedError(AUTHENTICATION_FAILED_MESSAGE, response=response)

    try:
        token = TokenResponse.model_validate_json(response.content)
    except ValidationError as exc:
        raise ClientError(
            JSON_UNMARSHAL_ERROR_MESSAGE,
            error_code=JSON_UNMARSHAL_ERROR_CODE,
            origin_error=exc,
            response=response,
        ) from exc

    return token.access_token, token.expires_in

