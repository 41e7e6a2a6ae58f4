"""Descritores de request.

BaseRequest é o *template* de uma chamada lógica: campos declarados
via FIELDS, overrides por chamada (endpoint, timeouts, TLS) e corpo
opcional. A cada tentativa o assembler gera um PreparedRequest novo;
o template nunca é alterado pela montagem.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar
from urllib.parse import urlsplit

from app.infra.http.params import FieldSpec

HTTP = "HTTP"
HTTPS = "HTTPS"

JSON = "application/json"
XML = "application/xml"
RAW = "application/octet-stream"
FORM = "application/x-www-form-urlencoded"

CONTENT_TYPE_HEADER = "Content-Type"

# Tags de User-Agent reservadas ao próprio SDK
_RESERVED_USER_AGENT_TAGS = frozenset({"core", "python"})


def _default_headers() -> dict[str, str]:
    return {
        "x-sdk-client": "python/1.0.0",
        "x-sdk-invoke-type": "normal",
        "Accept-Encoding": "identity",
        CONTENT_TYPE_HEADER: JSON,
    }


@dataclass(kw_only=True)
class BaseRequest:
    """Template de request.

    Subclasses declaram seus campos de wire em FIELDS e, quando enviam
    corpo JSON, sobrescrevem body_payload().
    """

    FIELDS: ClassVar[tuple[FieldSpec, ...]] = ()

    method: str = "POST"
    scheme: str = ""
    domain: str = ""
    port: int = 0
    path: str = ""
    base_path: str = ""
    headers: dict[str, str] = field(default_factory=_default_headers)
    query_params: dict[str, str] = field(default_factory=dict)
    form_params: dict[str, str] = field(default_factory=dict)
    path_params: dict[str, str] = field(default_factory=dict)
    content: bytes | None = None
    accept_format: str = JSON
    read_timeout: float | None = None
    connect_timeout: float | None = None
    https_insecure: bool | None = None
    version: str = ""
    user_agent: dict[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str | None:
        return self.headers.get(CONTENT_TYPE_HEADER)

    def set_content_type(self, content_type: str) -> None:
        self.headers[CONTENT_TYPE_HEADER] = content_type

    def append_user_agent(self, key: str, value: str) -> None:
        """Adiciona tag `key/value` ao User-Agent (tags do SDK são ignoradas)."""
        if key.lower() in _RESERVED_USER_AGENT_TAGS:
            return
        self.user_agent[key] = value

    def body_payload(self) -> Any:
        """Payload serializado como JSON quando `content` não foi definido."""
        return None


@dataclass(frozen=True, slots=True)
class PreparedRequest:
    """Request pronto para o wire, gerado a cada tentativa."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None
    nonce: str
    string_to_sign: str


RequestOption = Callable[[BaseRequest], None]


def with_request_base_url(base_url: str) -> RequestOption:
    """Override de scheme/domain/port/base_path para uma chamada."""
    parsed = urlsplit(base_url)

    def apply(request: BaseRequest) -> None:
        request.scheme = parsed.scheme.upper()
        request.domain = parsed.hostname or ""
        request.port = parsed.port or 0
        request.base_path = parsed.path.rstrip("/")

    return apply


def with_request_timeout(
    read_timeout: float | None = None,
    connect_timeout: float | None = None,
) -> RequestOption:
    """Override de timeouts (segundos) para uma chamada."""

    def apply(request: BaseRequest) -> None:
        if read_timeout is not None:
            request.read_timeout = read_timeout
        if connect_timeout is not None:
            request.connect_timeout = connect_timeout

    return apply


def with_request_insecure(insecure: bool) -> RequestOption:
    """Override da verificação TLS para uma chamada."""

    def apply(request: BaseRequest) -> None:
        request.https_insecure = insecure

    return apply


def with_request_header(key: str, value: str) -> RequestOption:
    def apply(request: BaseRequest) -> None:
        request.headers[key] = value

    return apply
