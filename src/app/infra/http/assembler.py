"""Montagem de requests HTTP a partir do template.

Ordem:
1. headers do template + x-sdk-core-version
2. bearer token (se o cliente exige autorização)
3. accept
4. endpoint: por chamada -> por cliente -> padrão da biblioteca
5. flattening dos FIELDS
6. negociação de corpo (apenas se `content` não foi definido)
7. URL final (path params, query string)
8. User-Agent, nonce e string-to-sign
"""

from __future__ import annotations

import platform
import uuid
from typing import TYPE_CHECKING
from urllib.parse import quote, urlencode

from app.infra.http.params import dump_json, flatten_params
from app.infra.http.request import CONTENT_TYPE_HEADER, FORM, JSON, PreparedRequest
from config.settings.uim import UIM_DEFAULT_DOMAIN, UIM_DEFAULT_SCHEME
from config.version import SDK_CORE_VERSION
from utils.errors import ClientError

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.infra.http.request import BaseRequest
    from config.settings.uim import UimSettings

DEFAULT_USER_AGENT = (
    f"UIMKit ({platform.system()}; {platform.machine()}) "
    f"Python/{platform.python_version()} Core/{SDK_CORE_VERSION}"
)

CORE_VERSION_HEADER = "x-sdk-core-version"
AUTHORIZATION_HEADER = "authorization"
ACCEPT_HEADER = "accept"
USER_AGENT_HEADER = "User-Agent"


class RequestAssembler:
    """Gera um PreparedRequest novo a cada chamada de assemble()."""

    def __init__(
        self,
        settings: UimSettings,
        token_provider: Callable[[], str] | None = None,
    ) -> None:
        self._settings = settings
        self._token_provider = token_provider

    def assemble(self, request: BaseRequest) -> PreparedRequest:
        headers = _non_empty(request.headers)
        headers[CORE_VERSION_HEADER] = SDK_CORE_VERSION

        if self._settings.enable_authorization:
            headers[AUTHORIZATION_HEADER] = f"Bearer {self._access_token()}"

        if request.accept_format:
            headers[ACCEPT_HEADER] = request.accept_format

        scheme = _first_non_empty(request.scheme, self._settings.scheme, UIM_DEFAULT_SCHEME)
        domain = _first_non_empty(request.domain, self._settings.domain, UIM_DEFAULT_DOMAIN)
        port = request.port or self._settings.port
        base_path = _first_non_empty(request.base_path, self._settings.base_path)

        params = flatten_params(request)
        headers.update(params.headers)
        query = {**_non_empty(request.query_params), **params.query}
        form = {**_non_empty(request.form_params), **params.form}
        path_params = {**_non_empty(request.path_params), **params.path}

        body = _negotiate_body(request, headers, form)
        url = build_url(scheme, domain, port, base_path + request.path, path_params, query)
        headers[USER_AGENT_HEADER] = self._user_agent(request)

        nonce = uuid.uuid4().hex
        return PreparedRequest(
            method=request.method.upper(),
            url=url,
            headers=headers,
            body=body,
            nonce=nonce,
            string_to_sign=f"{request.method.upper()}\n{url}\n{nonce}",
        )

    def _access_token(self) -> str:
        if self._token_provider is None:
            raise ClientError("Authorization is enabled but no token provider is configured")
        return self._token_provider()

    def _user_agent(self, request: BaseRequest) -> str:
        parts = [DEFAULT_USER_AGENT]
        parts.extend(f"{key}/{value}" for key, value in request.user_agent.items())
        if self._settings.user_agent:
            parts.append(f"Extra/{self._settings.user_agent}")
        return " ".join(parts)


def build_url(
    scheme: str,
    domain: str,
    port: int,
    path: str,
    path_params: dict[str, str],
    query: dict[str, str],
) -> str:
    """Substitui `:nome` no path e anexa a query string (sem ordem garantida)."""
    for key, value in path_params.items():
        path = path.replace(f":{key}", quote(value, safe=""), 1)

    url = f"{scheme.lower()}://{domain}"
    if port > 0:
        url = f"{url}:{port}"
    url = f"{url}{path}"

    querystring = urlencode({key: value for key, value in query.items() if value})
    if querystring:
        url = f"{url}?{querystring}"
    return url


def _negotiate_body(
    request: BaseRequest,
    headers: dict[str, str],
    form: dict[str, str],
) -> bytes | None:
    # Corpo explícito nunca é sobrescrito
    if request.content is not None:
        return request.content

    if form:
        headers[CONTENT_TYPE_HEADER] = FORM
        return urlencode(form).encode("utf-8")

    if headers.get(CONTENT_TYPE_HEADER) == JSON:
        payload = request.body_payload()
        if payload is not None:
            return dump_json(payload).encode("utf-8")
    return None


def _first_non_empty(*values: str) -> str:
    return next((value for value in values if value), "")


def _non_empty(source: dict[str, str]) -> dict[str, str]:
    return {key: value for key, value in source.items() if value}
