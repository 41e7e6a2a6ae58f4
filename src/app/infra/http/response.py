"""Decodificação de respostas HTTP.

Sucesso := 200 <= status < 300. Em falha o corpo é lido como envelope
{code, message} e vira ServerError; o tipo do chamador nunca é
decodificado nesse caso.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from app.infra.http.request import JSON
from utils.errors import ClientError, ServerError
from utils.errors.exceptions import JSON_UNMARSHAL_ERROR_CODE, JSON_UNMARSHAL_ERROR_MESSAGE

if TYPE_CHECKING:
    import httpx


@dataclass
class HttpResponse:
    """Resposta bufferizada.

    Attributes:
        status: Status HTTP
        headers: Headers da resposta
        content: Corpo bruto
        decoded: True se `data` foi decodificado no tipo do chamador
        data: Resultado decodificado (None se não houver)
    """

    status: int = 0
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""
    decoded: bool = False
    data: Any = None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> HttpResponse:
        return cls(
            status=response.status_code,
            headers=dict(response.headers),
            content=response.read(),
        )


def unmarshal_response(
    http_response: httpx.Response,
    accept_format: str,
    result_type: Any = None,
) -> HttpResponse:
    """Bufferiza, classifica e decodifica a resposta.

    Raises:
        ServerError: status fora de [200, 300)
        ClientError: SDK.JsonUnmarshalError se o corpo não casar com result_type
    """
    response = HttpResponse.from_httpx(http_response)

    if not response.is_success:
        error = ServerError.from_content(response.status, response.text)
        error.response = response
        raise error

    if not response.content or result_type is None:
        return response

    if accept_format == JSON:
        try:
            response.data = TypeAdapter(result_type).validate_json(response.content)
        except ValidationError as exc:
            raise ClientError(
                JSON_UNMARSHAL_ERROR_MESSAGE,
                error_code=JSON_UNMARSHAL_ERROR_CODE,
                origin_error=exc,
                response=response,
            ) from exc
        response.decoded = True
    return response
