"""Testes do cache de token (app/infra/auth/token_cache.py)."""

from __future__ import annotations

import threading
import time

import pytest

from app.infra.auth import TokenCache
from utils.errors import AuthenticationFailedError


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestTokenCache:
    """Leitura dupla, margem de segurança e invalidação."""

    def test_fetches_once_and_reuses(self) -> None:
        calls: list[int] = []

        def fetcher() -> tuple[str, float]:
            calls.append(1)
            return f"tok-{len(calls)}", 3600

        cache = TokenCache(fetcher, clock=FakeClock())

        assert cache.get_token() == "tok-1"
        assert cache.get_token() == "tok-1"
        assert len(calls) == 1

    def test_refreshes_within_safety_margin(self) -> None:
        clock = FakeClock()
        calls: list[int] = []

        def fetcher() -> tuple[str, float]:
            calls.append(1)
            return f"tok-{len(calls)}", 3600

        cache = TokenCache(fetcher, safety_margin_seconds=300, clock=clock)
        assert cache.get_token() == "tok-1"

        clock.now += 3600 - 300 - 1
        assert cache.get_token() == "tok-1"

        clock.now += 1
        assert cache.get_token() == "tok-2"

    def test_short_lived_token_is_never_served_twice(self) -> None:
        """expires_in menor que a margem: cada leitura busca um token novo."""
        calls: list[int] = []

        def fetcher() -> tuple[str, float]:
            calls.append(1)
            return "tok", 100

        cache = TokenCache(fetcher, safety_margin_seconds=300, clock=FakeClock())
        cache.get_token()
        cache.get_token()

        assert len(calls) == 2

    def test_invalidate(self) -> None:
        calls: list[int] = []

        def fetcher() -> tuple[str, float]:
            calls.append(1)
            return f"tok-{len(calls)}", 3600

        cache = TokenCache(fetcher, clock=FakeClock())
        cache.get_token()
        cache.invalidate()

        assert cache.get_token() == "tok-2"

    def test_fetch_error_propagates_and_keeps_cache_empty(self) -> None:
        outcomes = [AuthenticationFailedError("denied"), ("tok", 3600)]

        def fetcher() -> tuple[str, float]:
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        cache = TokenCache(fetcher, clock=FakeClock())

        with pytest.raises(AuthenticationFailedError):
            cache.get_token()
        assert cache.get_token() == "tok"

    def test_concurrent_readers_trigger_single_fetch(self) -> None:
        calls: list[int] = []
        calls_lock = threading.Lock()
        start = threading.Barrier(8)

        def fetcher() -> tuple[str, float]:
            with calls_lock:
                calls.append(1)
            time.sleep(0.05)
            return "tok", 3600

        cache = TokenCache(fetcher)
        results: list[str] = []

        def reader() -> None:
            start.wait()
            results.append(cache.get_token())

        threads = [threading.Thread(target=reader) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert results == ["tok"] * 8
