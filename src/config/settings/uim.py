"""Settings do SDK UIM.

Credenciais, endpoint, política de transporte (timeouts, proxy, TLS),
retry e fila assíncrona. Cada cliente recebe uma instância imutável.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache
from urllib.parse import urlsplit

from config.logging import is_debug_enabled

# Padrões da plataforma
UIM_DEFAULT_SCHEME: str = "HTTPS"
UIM_DEFAULT_DOMAIN: str = "api.uimkit.chat"
UIM_DEFAULT_TOKEN_ENDPOINT: str = "https://uim.cn.authok.cn/oauth/token"
UIM_DEFAULT_SERVER_ISSUER: str = "https://uim.cn.authok.cn/"

# Flag do allow-list DEBUG que habilita logs de wire
SDK_DEBUG_FLAG: str = "sdk"


@dataclass(frozen=True)
class UimSettings:
    """Configurações de um cliente UIM.

    Attributes:
        client_id: ID do cliente (client_credentials)
        client_secret: Secret do cliente
        client_audience: Audience solicitada ao endpoint de token
        token_endpoint: URL do endpoint OAuth de token
        enable_authorization: Anexa bearer token às requisições
        token_safety_margin_seconds: Antecedência da renovação do token
        server_issuer: Issuer dos JWTs das chamadas da plataforma (JWKS)
        server_audience: Audience exigida nesses JWTs (vazio = não verifica)
        app_id: ID esperado no header X-UIM-Key dos webhooks
        webhook_secret: Secret HMAC dos webhooks
        event_source: Campo source dos CloudEvents emitidos
        scheme/domain/port/base_path: Endpoint padrão do cliente
        is_insecure: Desliga verificação TLS (padrão do cliente)
        http_proxy/https_proxy/no_proxy: Proxy explícito do cliente
        auto_retry: Liga retry de falhas de rede e 5xx
        max_retry_time: Máximo de novas tentativas (total = max + 1)
        backoff_base_seconds: Base do backoff exponencial (0 desliga)
        backoff_max_seconds: Teto do backoff
        read_timeout_seconds/connect_timeout_seconds: Timeouts do cliente (0 = não definido)
        transport_timeout_seconds: Timeout do transporte (0 = não definido)
        enable_async: Inicia a fila assíncrona na construção
        max_task_queue_size: Capacidade da fila
        worker_pool_size: Quantidade de workers
        user_agent: Sufixo Extra/<valor> do User-Agent
        debug: Logs de wire habilitados
    """

    # Credenciais
    client_id: str = ""
    client_secret: str = ""
    client_audience: str = ""
    token_endpoint: str = UIM_DEFAULT_TOKEN_ENDPOINT
    enable_authorization: bool = True
    token_safety_margin_seconds: float = 300.0
    server_issuer: str = UIM_DEFAULT_SERVER_ISSUER
    server_audience: str = ""

    # Webhook / eventos
    app_id: str = ""
    webhook_secret: str = ""
    event_source: str = ""

    # Endpoint
    scheme: str = UIM_DEFAULT_SCHEME
    domain: str = UIM_DEFAULT_DOMAIN
    port: int = 0
    base_path: str = ""

    # Transporte
    is_insecure: bool = False
    http_proxy: str = ""
    https_proxy: str = ""
    no_proxy: str = ""

    # Retry
    auto_retry: bool = False
    max_retry_time: int = 3
    backoff_base_seconds: float = 0.0
    backoff_max_seconds: float = 30.0

    # Timeouts
    read_timeout_seconds: float = 30.0
    connect_timeout_seconds: float = 10.0
    transport_timeout_seconds: float = 0.0

    # Fila assíncrona
    enable_async: bool = False
    max_task_queue_size: int = 1000
    worker_pool_size: int = 5

    user_agent: str = ""
    debug: bool = False

    def validate(self) -> list[str]:
        """Valida configurações mínimas.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if self.enable_authorization and not self.client_id:
            errors.append("UIM_CLIENT_ID não configurado")

        if self.enable_authorization and not self.token_endpoint:
            errors.append("UIM_TOKEN_ENDPOINT não configurado")

        if self.scheme.upper() not in ("HTTP", "HTTPS"):
            errors.append("UIM_SCHEME deve ser 'HTTP' ou 'HTTPS'")

        if not self.domain:
            errors.append("UIM_DOMAIN não configurado")

        if self.max_retry_time < 0:
            errors.append("UIM_MAX_RETRY_TIME deve ser >= 0")

        if self.read_timeout_seconds < 0 or self.connect_timeout_seconds < 0:
            errors.append("Timeouts devem ser >= 0")

        if self.enable_async and (
            self.max_task_queue_size <= 0 or self.worker_pool_size <= 0
        ):
            errors.append(
                "UIM_MAX_TASK_QUEUE_SIZE e UIM_WORKER_POOL_SIZE devem ser > 0"
            )

        return errors


def with_base_url(settings: UimSettings, base_url: str) -> UimSettings:
    """Retorna cópia com scheme/domain/port/base_path extraídos da URL.

    Exemplo:
        with_base_url(settings, "http://127.0.0.1:9000/providers/v1")
    """
    parsed = urlsplit(base_url)
    return replace(
        settings,
        scheme=parsed.scheme.upper(),
        domain=parsed.hostname or "",
        port=parsed.port or 0,
        base_path=parsed.path.rstrip("/"),
    )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _load_from_env() -> UimSettings:
    """Carrega UimSettings a partir de variáveis de ambiente."""
    settings = UimSettings(
        client_id=os.getenv("UIM_CLIENT_ID", ""),
        client_secret=os.getenv("UIM_CLIENT_SECRET", ""),
        client_audience=os.getenv("UIM_CLIENT_AUDIENCE", ""),
        token_endpoint=os.getenv("UIM_TOKEN_ENDPOINT", UIM_DEFAULT_TOKEN_ENDPOINT),
        enable_authorization=_env_bool("UIM_ENABLE_AUTHORIZATION", True),
        token_safety_margin_seconds=float(
            os.getenv("UIM_TOKEN_SAFETY_MARGIN_SECONDS", "300")
        ),
        server_issuer=os.getenv("UIM_SERVER_ISSUER", UIM_DEFAULT_SERVER_ISSUER),
        server_audience=os.getenv("UIM_SERVER_AUDIENCE", ""),
        app_id=os.getenv("UIM_APP_ID", ""),
        webhook_secret=os.getenv("UIM_WEBHOOK_SECRET", ""),
        event_source=os.getenv("UIM_EVENT_SOURCE", ""),
        scheme=os.getenv("UIM_SCHEME", UIM_DEFAULT_SCHEME).upper(),
        domain=os.getenv("UIM_DOMAIN", UIM_DEFAULT_DOMAIN),
        port=int(os.getenv("UIM_PORT", "0")),
        base_path=os.getenv("UIM_BASE_PATH", ""),
        is_insecure=_env_bool("UIM_INSECURE", False),
        http_proxy=os.getenv("UIM_HTTP_PROXY", ""),
        https_proxy=os.getenv("UIM_HTTPS_PROXY", ""),
        no_proxy=os.getenv("UIM_NO_PROXY", ""),
        auto_retry=_env_bool("UIM_AUTO_RETRY", False),
        max_retry_time=int(os.getenv("UIM_MAX_RETRY_TIME", "3")),
        backoff_base_seconds=float(os.getenv("UIM_BACKOFF_BASE_SECONDS", "0")),
        backoff_max_seconds=float(os.getenv("UIM_BACKOFF_MAX_SECONDS", "30")),
        read_timeout_seconds=float(os.getenv("UIM_READ_TIMEOUT_SECONDS", "30")),
        connect_timeout_seconds=float(
            os.getenv("UIM_CONNECT_TIMEOUT_SECONDS", "10")
        ),
        transport_timeout_seconds=float(
            os.getenv("UIM_TRANSPORT_TIMEOUT_SECONDS", "0")
        ),
        enable_async=_env_bool("UIM_ENABLE_ASYNC", False),
        max_task_queue_size=int(os.getenv("UIM_MAX_TASK_QUEUE_SIZE", "1000")),
        worker_pool_size=int(os.getenv("UIM_WORKER_POOL_SIZE", "5")),
        user_agent=os.getenv("UIM_USER_AGENT", ""),
        debug=is_debug_enabled(SDK_DEBUG_FLAG, os.getenv("DEBUG", "")),
    )

    base_url = os.getenv("UIM_BASE_URL", "")
    if base_url:
        settings = with_base_url(settings, base_url)
    return settings


@lru_cache(maxsize=1)
def get_uim_settings() -> UimSettings:
    """Retorna instância cacheada de UimSettings.

    A cache garante singleton para múltiplas injeções.
    """
    return _load_from_env()
