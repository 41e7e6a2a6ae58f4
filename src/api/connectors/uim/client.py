"""Cliente UIM: fachada sobre montagem, execução, token, eventos e webhook.

Fluxo de uma chamada:
    template (BaseRequest) + opções por chamada
      -> ResilientExecutor (retry, timeout, proxy, TLS por tentativa)
         -> RequestAssembler (bearer via TokenCache, flattening, corpo)
      -> HttpResponse decodificado ou SdkError
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from app.infra.auth import (
    ServerTokenValidator,
    TokenCache,
    extract_bearer_token,
    fetch_access_token,
)
from app.infra.http import BaseRequest, RequestAssembler, ResilientExecutor
from app.infra.tasks import AsyncDispatchQueue
from config.settings.uim import get_uim_settings
from utils.errors import AsyncNotEnabledError, ServerError
from utils.errors.exceptions import (
    ASYNC_NOT_ENABLED_MESSAGE,
    INVALID_EVENT_FORMAT_CODE,
    INVALID_EVENT_FORMAT_MESSAGE,
    INVALID_EVENT_FORMAT_STATUS,
    UNSUPPORTED_EVENT_TYPE_CODE,
    UNSUPPORTED_EVENT_TYPE_MESSAGE,
    UNSUPPORTED_EVENT_TYPE_STATUS,
)

from .models import CloudEvent, new_event
from .webhook import parse_webhook_request

if TYPE_CHECKING:
    import httpx

    from app.infra.http import HttpResponse, RequestOption
    from config.settings.uim import UimSettings

EventHandler = Callable[[CloudEvent], Any]

DEFAULT_LOGGER_NAME = "api.connectors.uim"


@dataclass(kw_only=True)
class EventRequest(BaseRequest):
    """Request que envia um CloudEvent como corpo JSON."""

    path: str = "/"
    event: CloudEvent | None = None

    def body_payload(self) -> Any:
        return self.event


class UimClient:
    """Cliente de um provider conectado à plataforma UIM.

    Args:
        settings: Configuração do cliente (padrão: variáveis de ambiente)
        transport: Transporte httpx injetado (testes, pools customizados)
        logger: Logger injetado
        environ: Ambiente para fallback de proxy
        sleep: Função de espera do backoff
        token_validator: Validador dos JWTs de entrada (padrão: JWKS do issuer)
    """

    def __init__(
        self,
        settings: UimSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
        environ: Mapping[str, str] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        token_validator: ServerTokenValidator | None = None,
    ) -> None:
        self.settings = settings or get_uim_settings()
        self._transport = transport
        self._logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)

        self._token_cache = TokenCache(
            self.authorize,
            safety_margin_seconds=self.settings.token_safety_margin_seconds,
        )
        self._assembler = RequestAssembler(self.settings, self._token_cache.get_token)
        self._executor = ResilientExecutor(
            self.settings,
            self._assembler,
            transport=transport,
            logger=self._logger,
            environ=environ,
            sleep=sleep,
        )

        self._async_lock = threading.Lock()
        self._async_queue: AsyncDispatchQueue | None = None

        self._handlers_lock = threading.Lock()
        self._handlers: dict[str, EventHandler] = {}

        self._token_validator = token_validator
        self._validator_lock = threading.Lock()

        if self.settings.enable_async:
            self.enable_async()

    def __enter__(self) -> UimClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    # Requests

    def do_action(
        self,
        request: BaseRequest,
        result_type: Any = None,
        *options: RequestOption,
    ) -> HttpResponse:
        """Executa o request com a política de retry do cliente.

        Opções por chamada são aplicadas a uma cópia do template.

        Raises:
            ClientError: falha local ou de transporte
            ServerError: resposta fora de [200, 300)
        """
        if options:
            request = copy.deepcopy(request)
            for option in options:
                option(request)
        return self._executor.execute(request, result_type)

    # Autenticação

    def authorize(self) -> tuple[str, float]:
        """Busca um token novo no endpoint OAuth (sem cache)."""
        return fetch_access_token(self.settings, transport=self._transport)

    def get_access_token(self) -> str:
        """Token em cache, renovado antes da margem de segurança."""
        return self._token_cache.get_token()

    # Eventos

    def new_event(self, event_type: str, data: Any = None) -> CloudEvent:
        return new_event(event_type, data, source=self.settings.event_source)

    def send_event(self, event: CloudEvent, *options: RequestOption) -> HttpResponse:
        """Publica um CloudEvent na plataforma."""
        response = self.do_action(EventRequest(event=event), None, *options)
        self._logger.info(
            "uim_event_sent",
            extra={"event_type": event.type, "event_id": event.id, "status_code": response.status},
        )
        return response

    def invoke(
        self,
        command_type: str,
        data: Any = None,
        result_type: Any = None,
        *options: RequestOption,
    ) -> HttpResponse:
        """Envia um comando como CloudEvent e decodifica a resposta em result_type."""
        command = self.new_event(command_type, data)
        return self.do_action(EventRequest(event=command), result_type, *options)

    # Fila assíncrona

    def enable_async(
        self,
        worker_pool_size: int | None = None,
        max_task_queue_size: int | None = None,
    ) -> None:
        """Inicia a fila assíncrona; chamada repetida é ignorada com warning."""
        with self._async_lock:
            if self._async_queue is None or not self._async_queue.is_enabled:
                self._async_queue = AsyncDispatchQueue(
                    max_task_queue_size or self.settings.max_task_queue_size,
                    worker_pool_size or self.settings.worker_pool_size,
                    logger=self._logger,
                )
            async_queue = self._async_queue
        async_queue.enable()

    def add_async_task(self, task: Callable[[], object]) -> None:
        """Enfileira uma tarefa sem argumentos.

        Raises:
            AsyncNotEnabledError: fila não habilitada ou encerrada
        """
        with self._async_lock:
            async_queue = self._async_queue
        if async_queue is None:
            raise AsyncNotEnabledError(ASYNC_NOT_ENABLED_MESSAGE)
        async_queue.submit(task)

    def send_event_async(self, event: CloudEvent, *options: RequestOption) -> None:
        """Publica o evento em background; falhas são logadas pela fila."""
        self.add_async_task(lambda: self.send_event(event, *options))

    def shutdown(self, wait: bool = True) -> None:
        """Encerra a fila assíncrona após drenar as tarefas pendentes."""
        with self._async_lock:
            async_queue = self._async_queue
        if async_queue is not None:
            async_queue.shutdown(wait=wait)

    # Webhook

    def on_event(self, event_type: str, handler: EventHandler) -> None:
        """Registra o handler de um tipo de evento (substitui o anterior)."""
        with self._handlers_lock:
            self._handlers[event_type] = handler

    def webhook(
        self,
        headers: Mapping[str, str] | httpx.Headers,
        body: bytes,
    ) -> CloudEvent:
        """Verifica chave e assinatura e retorna o CloudEvent recebido.

        Raises:
            InvalidSignatureError: chave ou assinatura inválida
            InvalidJsonError: corpo não é um CloudEvent
        """
        return parse_webhook_request(
            body, headers, self.settings.app_id, self.settings.webhook_secret
        )

    def handle_webhook(
        self,
        headers: Mapping[str, str] | httpx.Headers,
        body: bytes,
    ) -> Any:
        """Verifica, parseia e despacha o evento ao handler registrado.

        Raises:
            ServerError: 400 UnsupportedEventType sem handler para o tipo
        """
        return self._dispatch(self.webhook(headers, body))

    def validate_token(self, token: str) -> dict[str, Any]:
        """Valida o JWT de uma chamada da plataforma e retorna as claims.

        Raises:
            ServerError: 401 Unauthorized com token inválido
        """
        return self._get_token_validator().validate(token)

    def handle_event(
        self,
        headers: Mapping[str, str] | httpx.Headers,
        body: bytes,
    ) -> Any:
        """Autentica a chamada por bearer JWT e despacha o CloudEvent.

        Raises:
            ServerError: 401 Unauthorized sem token válido,
                400 InvalidEventFormat com corpo inválido,
                400 UnsupportedEventType sem handler para o tipo
        """
        self.validate_token(extract_bearer_token(headers))

        try:
            event = CloudEvent.model_validate_json(body or b"{}")
        except ValidationError as exc:
            raise ServerError(
                INVALID_EVENT_FORMAT_STATUS,
                INVALID_EVENT_FORMAT_CODE,
                INVALID_EVENT_FORMAT_MESSAGE,
                origin_error=exc,
            ) from exc
        return self._dispatch(event)

    def _get_token_validator(self) -> ServerTokenValidator:
        with self._validator_lock:
            if self._token_validator is None:
                self._token_validator = ServerTokenValidator(
                    self.settings.server_issuer,
                    self.settings.server_audience,
                )
            return self._token_validator

    def _dispatch(self, event: CloudEvent) -> Any:
        with self._handlers_lock:
            handler = self._handlers.get(event.type)

        if handler is None:
            self._logger.warning(
                "uim_event_unsupported",
                extra={"event_type": event.type, "event_id": event.id},
            )
            raise ServerError(
                UNSUPPORTED_EVENT_TYPE_STATUS,
                UNSUPPORTED_EVENT_TYPE_CODE,
                UNSUPPORTED_EVENT_TYPE_MESSAGE % event.type,
            )

        self._logger.info(
            "uim_event_received",
            extra={"event_type": event.type, "event_id": event.id},
        )
        return handler(event)
