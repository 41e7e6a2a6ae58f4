"""Resolução da política de transporte por tentativa.

Timeouts (read e connect, independentes):
    por chamada -> por cliente -> transporte -> padrão fixo
Proxy:
    valor do cliente por scheme -> HTTPS_PROXY/HTTP_PROXY (case-insensitive) -> nenhum
    hosts em NO_PROXY ignoram o proxy; entradas com `*` inicial são globs de sufixo
TLS:
    override por chamada -> padrão do cliente

O resultado é imutável e aplicado a um httpx.Client novo; nenhum estado
compartilhado do cliente é reescrito por chamada.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from utils.errors import ClientError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from app.infra.http.request import BaseRequest
    from config.settings.uim import UimSettings

DEFAULT_READ_TIMEOUT_SECONDS = 10.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 5.0

INVALID_PARAM_ERROR_CODE = "SDK.InvalidParam"


@dataclass(frozen=True, slots=True)
class TransportPolicy:
    """Política efetiva de uma tentativa."""

    read_timeout: float
    connect_timeout: float
    proxy: str | None
    verify: bool

    def httpx_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.read_timeout, connect=self.connect_timeout)


def resolve_timeouts(request: BaseRequest, settings: UimSettings) -> tuple[float, float]:
    """Retorna (read_timeout, connect_timeout) em segundos."""
    read_timeout = _first_positive(
        request.read_timeout,
        settings.read_timeout_seconds,
        settings.transport_timeout_seconds,
        DEFAULT_READ_TIMEOUT_SECONDS,
    )
    connect_timeout = _first_positive(
        request.connect_timeout,
        settings.connect_timeout_seconds,
        settings.transport_timeout_seconds,
        DEFAULT_CONNECT_TIMEOUT_SECONDS,
    )
    return read_timeout, connect_timeout


def resolve_proxy(
    scheme: str,
    settings: UimSettings,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Proxy para o scheme de destino, ou None.

    Raises:
        ClientError: URL de proxy inválida.
    """
    env = os.environ if environ is None else environ
    if scheme.lower() == "https":
        raw = settings.https_proxy or _getenv_ci("HTTPS_PROXY", env)
    else:
        raw = settings.http_proxy or _getenv_ci("HTTP_PROXY", env)
    if not raw:
        return None

    if "://" not in raw:
        raw = f"http://{raw}"
    try:
        httpx.URL(raw)
    except httpx.InvalidURL as exc:
        raise ClientError(
            f"Invalid proxy url: {raw}",
            error_code=INVALID_PARAM_ERROR_CODE,
            origin_error=exc,
        ) from exc
    return raw


def resolve_no_proxy(
    settings: UimSettings,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    env = os.environ if environ is None else environ
    raw = settings.no_proxy or _getenv_ci("NO_PROXY", env)
    return [entry.strip() for entry in raw.split(",") if entry.strip()]


def compile_no_proxy_entry(entry: str) -> re.Pattern[str]:
    """Compila uma entrada de NO_PROXY em regex ancorada no host.

    `*.example.com` casa qualquer subdomínio de example.com.
    `example.com` casa o próprio host e seus subdomínios.
    `*` casa qualquer host.
    """
    entry = entry.strip().lower()
    if entry.startswith("*"):
        suffix = entry.lstrip("*")
        return re.compile(".*" + re.escape(suffix))
    return re.compile(r"(?:.*\.)?" + re.escape(entry.lstrip(".")))


def bypasses_proxy(host: str, entries: list[str]) -> bool:
    host = host.lower().rstrip(".")
    return any(compile_no_proxy_entry(entry).fullmatch(host) for entry in entries)


def resolve_verify(request: BaseRequest, settings: UimSettings) -> bool:
    """True se o certificado TLS deve ser verificado."""
    if request.https_insecure is not None:
        return not request.https_insecure
    return not settings.is_insecure


def resolve_transport_policy(
    request: BaseRequest,
    settings: UimSettings,
    url: str,
    environ: Mapping[str, str] | None = None,
) -> TransportPolicy:
    target = httpx.URL(url)
    read_timeout, connect_timeout = resolve_timeouts(request, settings)

    proxy = resolve_proxy(target.scheme, settings, environ)
    if proxy and bypasses_proxy(target.host, resolve_no_proxy(settings, environ)):
        proxy = None

    return TransportPolicy(
        read_timeout=read_timeout,
        connect_timeout=connect_timeout,
        proxy=proxy,
        verify=resolve_verify(request, settings),
    )


def _first_positive(*values: float | None) -> float:
    return next(value for value in values if value is not None and value > 0)


def _getenv_ci(name: str, environ: Mapping[str, str]) -> str:
    for candidate in (name.upper(), name.lower()):
        value = environ.get(candidate)
        if value:
            return value
    for key, value in environ.items():
        if key.upper() == name.upper() and value:
            return value
    return ""
