"""Filters de logging para injeção de contexto.

Campos injetados:
- correlation_id: ID de rastreamento da chamada
- service: Nome do serviço (ex: uim_sdk)
- sdk_version: Versão do core do SDK

Nunca adicionar tokens, secrets ou payloads brutos nos logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.version import SDK_CORE_VERSION

if TYPE_CHECKING:
    from collections.abc import Callable


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id, service e sdk_version em cada record.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia como fallback.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record; nunca filtra.

        Se correlation_id já foi passado via `extra`, preserva o valor.
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        record.sdk_version = SDK_CORE_VERSION
        return True
