"""Executor HTTP resiliente.

Máquina de estados por tentativa:
    Build -> Send -> Classify -> {Sucesso | Retentável -> Build | Terminal}

- tentativas 0..max_retry_time (max + 1 no total)
- cada tentativa remonta o request (nonce e flattening novos)
- erro de transporte: retentável se auto_retry; na última tentativa vira
  RequestTimeoutError (read/connect) ou NetworkError
- falha de cadeia TLS: CertificateError, nunca retentada
- status >= 500: retentável se auto_retry; qualquer outro status encerra
- um registro de log estruturado por tentativa
"""

from __future__ import annotations

import logging
import ssl
import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import httpx

from app.infra.http.http_logging import (
    log_attempt,
    log_failed_build,
    log_wire_request,
    log_wire_response,
    utc_now,
)
from app.infra.http.response import HttpResponse, unmarshal_response
from app.infra.http.transport import TransportPolicy, resolve_transport_policy
from utils.errors import (
    CertificateError,
    ClientError,
    NetworkError,
    RequestTimeoutError,
    SdkError,
    ServerError,
)
from utils.errors.exceptions import (
    CERTIFICATE_ERROR_MESSAGE,
    NETWORK_ERROR_MESSAGE,
    TIMEOUT_ERROR_MESSAGE,
)

if TYPE_CHECKING:
    from app.infra.http.assembler import RequestAssembler
    from app.infra.http.request import BaseRequest, PreparedRequest
    from config.settings.uim import UimSettings

_CERTIFICATE_MARKERS = (
    "CERTIFICATE_VERIFY_FAILED",
    "certificate signed by unknown authority",
)


class ResilientExecutor:
    """Envia requests com retry sequencial e classificação de falhas.

    Args:
        settings: Política de retry/timeout/proxy/TLS do cliente
        assembler: Gera o PreparedRequest de cada tentativa
        transport: Transporte httpx injetado (testes, pools customizados)
        logger: Logger injetado; padrão é o logger do módulo
        environ: Ambiente para fallback de proxy (padrão os.environ)
        sleep: Função de espera do backoff
    """

    def __init__(
        self,
        settings: UimSettings,
        assembler: RequestAssembler,
        *,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
        environ: Mapping[str, str] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings
        self._assembler = assembler
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)
        self._environ = environ
        self._sleep = sleep

    def execute(self, request: BaseRequest, result_type: Any = None) -> HttpResponse:
        """Executa o request e decodifica a última resposta.

        Raises:
            ClientError: falha local ou de transporte (já classificada)
            ServerError: status fora de [200, 300) na última resposta
        """
        max_retry = max(self._settings.max_retry_time, 0)
        auto_retry = self._settings.auto_retry

        for attempt in range(max_retry + 1):
            try:
                prepared = self._assembler.assemble(request)
            except SdkError as exc:
                log_failed_build(self._logger, request.method, attempt, utc_now(), exc)
                raise
            policy = resolve_transport_policy(
                request, self._settings, prepared.url, self._environ
            )
            if self._settings.debug:
                log_wire_request(self._logger, prepared, attempt)

            started_at = utc_now()
            started = time.perf_counter()
            try:
                http_response = self._send(prepared, policy)
            except httpx.TransportError as exc:
                elapsed_ms = (time.perf_counter() - started) * 1000
                log_attempt(self._logger, prepared, attempt, started_at, elapsed_ms, error=exc)
                error = classify_transport_error(exc, attempt + 1)
                if isinstance(error, CertificateError):
                    raise error from exc
                if not auto_retry or attempt >= max_retry:
                    raise error from exc
                self._backoff(attempt)
                continue

            elapsed_ms = (time.perf_counter() - started) * 1000
            log_attempt(
                self._logger, prepared, attempt, started_at, elapsed_ms, response=http_response
            )
            if self._settings.debug:
                log_wire_response(self._logger, http_response)

            if auto_retry and _is_server_error(http_response) and attempt < max_retry:
                self._backoff(attempt)
                continue
            break

        return self._decode(request, prepared, http_response, result_type)

    def _send(self, prepared: PreparedRequest, policy: TransportPolicy) -> httpx.Response:
        client_kwargs: dict[str, Any] = {
            "timeout": policy.httpx_timeout(),
            "verify": policy.verify,
            "trust_env": False,
        }
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        elif policy.proxy:
            client_kwargs["proxy"] = policy.proxy

        client = httpx.Client(**client_kwargs)
        try:
            response = client.request(
                prepared.method,
                prepared.url,
                headers=_encode_headers(prepared.headers),
                content=prepared.body,
            )
            response.read()
            return response
        finally:
            # Transporte injetado pertence ao chamador
            if self._transport is None:
                client.close()

    def _decode(
        self,
        request: BaseRequest,
        prepared: PreparedRequest,
        http_response: httpx.Response,
        result_type: Any,
    ) -> HttpResponse:
        try:
            return unmarshal_response(http_response, request.accept_format, result_type)
        except ServerError as exc:
            exc.resp_headers = dict(http_response.headers)
            exc.string_to_sign = prepared.string_to_sign
            raise

    def _backoff(self, attempt: int) -> None:
        base = self._settings.backoff_base_seconds
        if base <= 0:
            return
        delay = min((2**attempt) * base, self._settings.backoff_max_seconds)
        self._logger.info("http_backoff", extra={"backoff_seconds": delay, "attempt": attempt})
        self._sleep(delay)


def classify_transport_error(exc: httpx.TransportError, attempts: int) -> ClientError:
    """Converte erro de transporte em ClientError do SDK.

    Args:
        exc: Erro do httpx
        attempts: Total de tentativas realizadas (para a mensagem de timeout)
    """
    if is_certificate_error(exc):
        return CertificateError(CERTIFICATE_ERROR_MESSAGE, origin_error=exc)

    if isinstance(exc, httpx.TimeoutException):
        times = str(attempts)
        message = TIMEOUT_ERROR_MESSAGE % (times, times)
        if isinstance(exc, httpx.ConnectTimeout):
            message += " Connect timeout. Please set a valid connect timeout."
        else:
            message += " Read timeout. Please set a valid read timeout."
        return RequestTimeoutError(message, origin_error=exc)

    return NetworkError(NETWORK_ERROR_MESSAGE, origin_error=exc)


def is_certificate_error(exc: BaseException) -> bool:
    """True se a cadeia de causas indica falha de verificação do certificado."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLCertVerificationError):
            return True
        if any(marker in str(current) for marker in _CERTIFICATE_MARKERS):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def _is_server_error(response: httpx.Response) -> bool:
    return response.status_code >= 500


def _encode_headers(headers: dict[str, str]) -> dict[str, bytes]:
    # httpx codifica str como ASCII; valores vão em UTF-8 cru
    return {key: value.encode("utf-8") for key, value in headers.items()}
