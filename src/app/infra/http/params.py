"""Flattening de parâmetros a partir de descritores explícitos por tipo.

Cada tipo de request (e cada objeto aninhado) declara uma tabela
`FIELDS: tuple[FieldSpec, ...]` com nome, posição (header/query/path/body)
e forma (scalar/struct/map/repeated/json). O flattener percorre essa
tabela e produz um ParamSet endereçado por posição.

Regras de chave:
- repeated: name.1, name.2, ... na ordem de entrada
- struct:   name.<campo>
- map:      name.#<len>#<chave> (len em bytes UTF-8 da chave)

Valores vazios nunca entram em nenhum mapa.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, StrEnum
from typing import Any

from pydantic import BaseModel

from utils.errors import ClientError
from utils.errors.exceptions import (
    JSON_MARSHAL_ERROR_CODE,
    JSON_MARSHAL_ERROR_MESSAGE,
    UNSUPPORTED_PARAM_POSITION_CODE,
    UNSUPPORTED_PARAM_POSITION_MESSAGE,
)


class Placement(StrEnum):
    """Parte do request HTTP onde o valor é escrito."""

    HEADER = "header"
    QUERY = "query"
    PATH = "path"
    BODY = "body"


class Shape(StrEnum):
    """Estrutura do valor para fins de flattening."""

    SCALAR = "scalar"
    STRUCT = "struct"
    MAP = "map"
    REPEATED = "repeated"
    JSON = "json"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Descritor de um campo serializável.

    Attributes:
        attr: Nome do atributo Python no objeto
        name: Nome do parâmetro no wire
        placement: Posição no request. Vazio herda a posição do pai
            (obrigatório no nível de topo)
        shape: Forma do valor
    """

    attr: str
    name: str
    placement: str = ""
    shape: Shape = Shape.SCALAR


@dataclass
class ParamSet:
    """Parâmetros achatados, separados por posição."""

    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    path: dict[str, str] = field(default_factory=dict)
    form: dict[str, str] = field(default_factory=dict)

    def add(self, placement: str, key: str, value: str) -> None:
        """Adiciona um parâmetro; valores vazios são descartados."""
        if not value:
            return
        targets = {
            Placement.HEADER: self.headers,
            Placement.QUERY: self.query,
            Placement.PATH: self.path,
            Placement.BODY: self.form,
        }
        target = targets.get(placement)
        if target is None:
            raise ClientError(
                UNSUPPORTED_PARAM_POSITION_MESSAGE % placement,
                error_code=UNSUPPORTED_PARAM_POSITION_CODE,
            )
        target[key] = value


def flatten_params(obj: object) -> ParamSet:
    """Achata `obj` segundo sua tabela FIELDS.

    Raises:
        ClientError: posição não suportada ou falha de serialização JSON.
    """
    params = ParamSet()
    _flatten_object(obj, params, placement="", prefix="")
    return params


def dump_json(value: Any) -> str:
    """Serializa `value` em JSON compacto.

    Raises:
        ClientError: SDK.JsonMarshalError com a causa encadeada.
    """
    try:
        if isinstance(value, BaseModel):
            return value.model_dump_json(exclude_none=True)
        return json.dumps(
            value,
            ensure_ascii=False,
            separators=(",", ":"),
            default=_json_default,
        )
    except (TypeError, ValueError) as exc:
        raise ClientError(
            JSON_MARSHAL_ERROR_MESSAGE,
            error_code=JSON_MARSHAL_ERROR_CODE,
            origin_error=exc,
        ) from exc


def has_fields(value: object) -> bool:
    """True se o objeto declara uma tabela FIELDS."""
    return isinstance(getattr(type(value), "FIELDS", None), tuple)


def _flatten_object(obj: object, params: ParamSet, placement: str, prefix: str) -> None:
    for spec in type(obj).FIELDS:
        value = getattr(obj, spec.attr, None)
        field_placement = placement or spec.placement
        key = prefix + spec.name
        _SHAPE_HANDLERS[spec.shape](params, field_placement, key, value)


def _flatten_scalar(params: ParamSet, placement: str, key: str, value: Any) -> None:
    params.add(placement, key, _scalar_text(value))


def _flatten_struct(params: ParamSet, placement: str, key: str, value: Any) -> None:
    if value is None:
        return
    _flatten_object(value, params, placement, key + ".")


def _flatten_repeated(params: ParamSet, placement: str, key: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, str):
        params.add(placement, key, value)
        return
    for index, element in enumerate(value, start=1):
        _flatten_element(params, placement, f"{key}.{index}", element)


def _flatten_map(params: ParamSet, placement: str, key: str, value: Any) -> None:
    if value is None:
        return
    for map_key, item in value.items():
        text_key = str(map_key)
        entry_key = f"{key}.#{len(text_key.encode('utf-8'))}#{text_key}"
        if isinstance(item, list | tuple):
            _flatten_repeated(params, placement, entry_key, item)
        else:
            _flatten_element(params, placement, entry_key, item)


def _flatten_json(params: ParamSet, placement: str, key: str, value: Any) -> None:
    if value is None:
        return
    params.add(placement, key, dump_json(value))


def _flatten_element(params: ParamSet, placement: str, key: str, element: Any) -> None:
    if element is None:
        return
    if has_fields(element):
        _flatten_object(element, params, placement, key + ".")
    else:
        params.add(placement, key, _scalar_text(element))


_SHAPE_HANDLERS = {
    Shape.SCALAR: _flatten_scalar,
    Shape.STRUCT: _flatten_struct,
    Shape.MAP: _flatten_map,
    Shape.REPEATED: _flatten_repeated,
    Shape.JSON: _flatten_json,
}


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return _scalar_text(value.value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return dump_json(dict(value))
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, set | frozenset):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
