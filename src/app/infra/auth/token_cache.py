"""Cache de bearer token com lock e leitura dupla.

Leitura rápida sem lock; em cache vazio ou expirado, adquire o lock,
confere de novo e só então busca um token novo. O token nunca é servido
dentro da margem de segurança antes da expiração real.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_SAFETY_MARGIN_SECONDS = 300.0

TokenFetcher = Callable[[], tuple[str, float]]


@dataclass(frozen=True, slots=True)
class _CachedToken:
    token: str
    expires_at: float


class TokenCache:
    """Cache de um único token por cliente.

    Args:
        fetcher: Retorna (access_token, expires_in_segundos)
        safety_margin_seconds: Antecedência da renovação
        clock: Relógio monotônico (injetável em testes)
    """

    def __init__(
        self,
        fetcher: TokenFetcher,
        safety_margin_seconds: float = DEFAULT_SAFETY_MARGIN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._safety_margin = safety_margin_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: _CachedToken | None = None

    def get_token(self) -> str:
        """Retorna token válido, buscando um novo se necessário.

        Raises:
            ClientError: erro do fetcher (autenticação ou transporte)
        """
        entry = self._entry
        if self._is_fresh(entry):
            return entry.token

        with self._lock:
            entry = self._entry
            if self._is_fresh(entry):
                return entry.token

            token, expires_in = self._fetcher()
            self._entry = _CachedToken(
                token=token,
                expires_at=self._clock() + expires_in - self._safety_margin,
            )
            logger.info(
                "access_token_refreshed",
                extra={"expires_in": expires_in, "safety_margin": self._safety_margin},
            )
            return token

    def invalidate(self) -> None:
        """Descarta o token atual; a próxima leitura busca outro."""
        with self._lock:
            self._entry = None

    def _is_fresh(self, entry: _CachedToken | None) -> bool:
        return entry is not None and bool(entry.token) and entry.expires_at > self._clock()
