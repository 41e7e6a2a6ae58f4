"""Configuração centralizada de logging.

Funções para configurar logging estruturado JSON com:
- Campos obrigatórios (correlation_id, service, level, logger, message)
- Formatação padronizada
- Allow-list DEBUG para logs de wire do SDK

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização da aplicação que usa o SDK
    configure_logging(level="INFO", service_name="uim_sdk")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("Operação concluída", extra={"latency_ms": 42})

Logs estruturados, sem tokens nem secrets.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

# Níveis de log válidos
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# Nome padrão do serviço
DEFAULT_SERVICE_NAME = "uim_sdk"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado.

    Deve ser chamada uma vez pela aplicação hospedeira. O SDK nunca
    configura handlers sozinho.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função opcional que retorna o correlation_id
            do contexto atual (ex: de ContextVar).

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    formatter = create_json_formatter()

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado.

    Args:
        name: Nome do logger (geralmente __name__).

    Returns:
        Logger configurado.
    """
    return logging.getLogger(name)


def is_debug_enabled(flag: str, debug_env: str) -> bool:
    """Verifica se `flag` está no allow-list DEBUG (separado por vírgula).

    Exemplo:
        is_debug_enabled("sdk", "http,sdk")  # True
        is_debug_enabled("sdk", "sdkx")      # False
    """
    return any(part.strip() == flag for part in debug_env.split(","))
