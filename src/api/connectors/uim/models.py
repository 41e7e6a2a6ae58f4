"""Envelope CloudEvents 1.0 trafegado entre provider e plataforma UIM."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from utils.errors import ClientError
from utils.errors.exceptions import JSON_UNMARSHAL_ERROR_CODE, JSON_UNMARSHAL_ERROR_MESSAGE

SPEC_VERSION = "1.0"
APPLICATION_JSON = "application/json"

T = TypeVar("T")


class CloudEvent(BaseModel):
    """Evento no formato estruturado JSON.

    Atributos de extensão desconhecidos são preservados.
    """

    model_config = ConfigDict(extra="allow")

    specversion: str = SPEC_VERSION
    id: str = Field(..., min_length=1, description="ID único do evento.")
    source: str = Field(default="", description="Origem do evento (provider).")
    type: str = Field(..., min_length=1, description="Tipo do evento.")
    datacontenttype: str | None = APPLICATION_JSON
    time: datetime | None = None
    subject: str | None = None
    data: Any = None

    def data_as(self, data_type: type[T]) -> T:
        """Decodifica `data` no tipo informado.

        Raises:
            ClientError: SDK.JsonUnmarshalError se `data` não casar com o tipo
        """
        try:
            return TypeAdapter(data_type).validate_python(self.data)
        except ValidationError as exc:
            raise ClientError(
                JSON_UNMARSHAL_ERROR_MESSAGE,
                error_code=JSON_UNMARSHAL_ERROR_CODE,
                origin_error=exc,
            ) from exc


def new_event(event_type: str, data: Any = None, source: str = "") -> CloudEvent:
    """Cria evento com ID aleatório e timestamp UTC."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", exclude_none=True)
    return CloudEvent(
        id=uuid.uuid4().hex,
        source=source,
        type=event_type,
        time=datetime.now(UTC),
        data=data,
    )
