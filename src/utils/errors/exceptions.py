"""Exceções do SDK UIM.

Dois tipos de topo:
- ClientError: falha local (config, serialização, async desabilitado,
  autenticação, transporte classificado).
- ServerError: rejeição remota (status, code, message).

Todos expõem o mesmo contrato (http_status, error_code, message,
origin_error) para que o chamador decida sem conhecer o transporte.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_CLIENT_ERROR_STATUS = 400
DEFAULT_CLIENT_ERROR_CODE = "SDK.ClientError"

UNSUPPORTED_PARAM_POSITION_CODE = "SDK.UnsupportedParamPosition"
UNSUPPORTED_PARAM_POSITION_MESSAGE = (
    "Specified param position (%s) is not supported, please upgrade sdk and retry"
)

ASYNC_NOT_ENABLED_CODE = "SDK.AsyncFunctionNotEnabled"
ASYNC_NOT_ENABLED_MESSAGE = (
    "Async function is not enabled in client, please invoke 'client.enable_async'"
)

JSON_MARSHAL_ERROR_CODE = "SDK.JsonMarshalError"
JSON_MARSHAL_ERROR_MESSAGE = "Failed to marshal request"

JSON_UNMARSHAL_ERROR_CODE = "SDK.JsonUnmarshalError"
JSON_UNMARSHAL_ERROR_MESSAGE = (
    "Failed to unmarshal response, but you can get the data via "
    "error.response.status and error.response.text"
)

TIMEOUT_ERROR_CODE = "SDK.TimeoutError"
TIMEOUT_ERROR_MESSAGE = (
    "The request timed out %s times(%s for retry), "
    "perhaps we should have the threshold raised a little?"
)

NETWORK_ERROR_CODE = "SDK.NetworkError"
NETWORK_ERROR_MESSAGE = "Network error while sending request"

CERTIFICATE_ERROR_CODE = "SDK.CertificateError"
CERTIFICATE_ERROR_MESSAGE = "TLS certificate verification failed"

AUTHENTICATION_FAILED_CODE = "SDK.AuthenticationFailed"
AUTHENTICATION_FAILED_MESSAGE = "Failed to obtain access token with client credentials"

UNSUPPORTED_EVENT_TYPE_STATUS = 400
UNSUPPORTED_EVENT_TYPE_CODE = "UnsupportedEventType"
UNSUPPORTED_EVENT_TYPE_MESSAGE = "Unsupported event type: %s"

UNAUTHORIZED_STATUS = 401
UNAUTHORIZED_CODE = "Unauthorized"
UNAUTHORIZED_MESSAGE = "Missing or invalid bearer token"

INVALID_EVENT_FORMAT_STATUS = 400
INVALID_EVENT_FORMAT_CODE = "InvalidEventFormat"
INVALID_EVENT_FORMAT_MESSAGE = "Request body is not a valid CloudEvent"


class SdkError(Exception):
    """Base de todos os erros do SDK."""

    def __init__(
        self,
        message: str,
        *,
        error_code: str = "",
        http_status: int = 0,
        origin_error: BaseException | None = None,
        response: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.http_status = http_status
        self.origin_error = origin_error
        self.response = response


class ClientError(SdkError):
    """Falha local, antes ou fora do processamento remoto."""

    default_code = DEFAULT_CLIENT_ERROR_CODE

    def __init__(
        self,
        message: str,
        *,
        error_code: str = "",
        origin_error: BaseException | None = None,
        response: Any = None,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code or self.default_code,
            http_status=DEFAULT_CLIENT_ERROR_STATUS,
            origin_error=origin_error,
            response=response,
        )

    def __str__(self) -> str:
        text = f"[{self.error_code}] {self.message}"
        if self.origin_error is not None:
            return f"{text}\ncaused by:\n{self.origin_error}"
        return text


class RequestTimeoutError(ClientError):
    """Timeout de leitura ou conexão após esgotar as tentativas."""

    default_code = TIMEOUT_ERROR_CODE


class NetworkError(ClientError):
    """Falha de rede/transporte não relacionada a timeout."""

    default_code = NETWORK_ERROR_CODE


class CertificateError(ClientError):
    """Cadeia de confiança TLS rejeitada. Nunca é retentado."""

    default_code = CERTIFICATE_ERROR_CODE


class AuthenticationFailedError(ClientError):
    """Endpoint de token recusou as credenciais do cliente."""

    default_code = AUTHENTICATION_FAILED_CODE


class AsyncNotEnabledError(ClientError):
    """Fila assíncrona não habilitada ou já encerrada."""

    default_code = ASYNC_NOT_ENABLED_CODE


class ServerError(SdkError):
    """Rejeição remota com envelope {code, message}."""

    def __init__(
        self,
        http_status: int,
        error_code: str = "",
        message: str = "",
        *,
        request_id: str = "",
        host_id: str = "",
        recommend: str = "",
        comment: str = "",
        origin_error: BaseException | None = None,
        response: Any = None,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code,
            http_status=http_status,
            origin_error=origin_error,
            response=response,
        )
        self.request_id = request_id
        self.host_id = host_id
        self.recommend = recommend
        self.comment = comment
        self.resp_headers: Mapping[str, str] = {}
        self.string_to_sign = ""

    @classmethod
    def from_content(
        cls,
        http_status: int,
        content: str,
        comment: str = "",
    ) -> ServerError:
        """Monta o erro a partir do corpo da resposta.

        Se o corpo não for um envelope JSON, usa mensagem genérica
        com o corpo bruto.
        """
        try:
            data = json.loads(content) if content else None
        except ValueError:
            data = None

        if not isinstance(data, dict):
            message = f"HTTP {http_status}"
            if content:
                message = f"{message}: {content}"
            return cls(http_status, message=message, comment=comment)

        return cls(
            http_status,
            error_code=_as_text(data.get("code")),
            message=_as_text(data.get("message")),
            request_id=_as_text(data.get("request_id")),
            host_id=_as_text(data.get("host_id")),
            recommend=_as_text(data.get("recommend")),
            comment=comment,
        )

    def __str__(self) -> str:
        return (
            "SDK.ServerError\n"
            f"HttpStatus: {self.http_status}\n"
            f"ErrorCode: {self.error_code}\n"
            f"Recommend: {self.comment}{self.recommend}\n"
            f"RequestId: {self.request_id}\n"
            f"HostId: {self.host_id}\n"
            f"Message: {self.message}"
        )


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
