"""Testes da política de transporte (app/infra/http/transport.py)."""

from __future__ import annotations

import pytest

from app.infra.http import BaseRequest, bypasses_proxy, resolve_transport_policy
from app.infra.http.transport import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_READ_TIMEOUT_SECONDS,
    resolve_proxy,
    resolve_timeouts,
)
from config.settings import UimSettings
from utils.errors import ClientError

URL = "https://api.example.com/events"


class TestTimeouts:
    """Precedência: chamada -> cliente -> transporte -> padrão."""

    def test_client_values(self) -> None:
        assert resolve_timeouts(BaseRequest(), UimSettings()) == (30.0, 10.0)

    def test_per_call_wins_independently(self) -> None:
        request = BaseRequest(read_timeout=1.5)
        assert resolve_timeouts(request, UimSettings()) == (1.5, 10.0)

    def test_transport_timeout_fallback(self) -> None:
        settings = UimSettings(
            read_timeout_seconds=0,
            connect_timeout_seconds=0,
            transport_timeout_seconds=7.0,
        )
        assert resolve_timeouts(BaseRequest(), settings) == (7.0, 7.0)

    def test_library_defaults(self) -> None:
        settings = UimSettings(read_timeout_seconds=0, connect_timeout_seconds=0)
        assert resolve_timeouts(BaseRequest(), settings) == (
            DEFAULT_READ_TIMEOUT_SECONDS,
            DEFAULT_CONNECT_TIMEOUT_SECONDS,
        )


class TestProxy:
    """Proxy do cliente, fallback de ambiente e NO_PROXY."""

    def test_client_proxy_by_scheme(self) -> None:
        settings = UimSettings(https_proxy="http://proxy:3128", http_proxy="http://plain:80")

        assert resolve_proxy("https", settings, {}) == "http://proxy:3128"
        assert resolve_proxy("http", settings, {}) == "http://plain:80"

    def test_env_fallback_case_insensitive(self) -> None:
        env = {"https_proxy": "proxy.local:8080"}
        assert resolve_proxy("https", UimSettings(), env) == "http://proxy.local:8080"

    def test_env_upper_case(self) -> None:
        env = {"HTTP_PROXY": "http://upper:1"}
        assert resolve_proxy("http", UimSettings(), env) == "http://upper:1"

    def test_no_proxy_configured(self) -> None:
        assert resolve_proxy("https", UimSettings(), {}) is None

    def test_invalid_proxy_url(self) -> None:
        settings = UimSettings(https_proxy="http://bad host:xx")
        with pytest.raises(ClientError) as exc_info:
            resolve_proxy("https", settings, {})
        assert exc_info.value.error_code == "SDK.InvalidParam"

    def test_wildcard_no_proxy(self) -> None:
        entries = ["*.example.com"]
        assert bypasses_proxy("api.example.com", entries) is True
        assert bypasses_proxy("api.other.com", entries) is False
        assert bypasses_proxy("example.com.evil.io", entries) is False

    def test_plain_no_proxy_matches_host_and_subdomains(self) -> None:
        entries = ["internal.local"]
        assert bypasses_proxy("internal.local", entries) is True
        assert bypasses_proxy("svc.internal.local", entries) is True
        assert bypasses_proxy("notinternal.local", entries) is False

    def test_policy_drops_proxy_for_bypassed_host(self) -> None:
        settings = UimSettings(https_proxy="http://proxy:3128", no_proxy="*.example.com")
        policy = resolve_transport_policy(BaseRequest(), settings, URL, {})
        assert policy.proxy is None

    def test_policy_keeps_proxy_for_other_host(self) -> None:
        settings = UimSettings(https_proxy="http://proxy:3128", no_proxy="*.example.com")
        policy = resolve_transport_policy(BaseRequest(), settings, "https://api.other.com/", {})
        assert policy.proxy == "http://proxy:3128"

    def test_env_no_proxy(self) -> None:
        env = {"HTTPS_PROXY": "http://proxy:3128", "no_proxy": "api.example.com"}
        policy = resolve_transport_policy(BaseRequest(), UimSettings(), URL, env)
        assert policy.proxy is None


class TestVerify:
    """TLS: override por chamada -> padrão do cliente."""

    def test_client_default(self) -> None:
        assert resolve_transport_policy(BaseRequest(), UimSettings(), URL, {}).verify is True
        insecure = UimSettings(is_insecure=True)
        assert resolve_transport_policy(BaseRequest(), insecure, URL, {}).verify is False

    def test_per_call_override(self) -> None:
        request = BaseRequest(https_insecure=False)
        policy = resolve_transport_policy(request, UimSettings(is_insecure=True), URL, {})
        assert policy.verify is True

    def test_policy_is_immutable(self) -> None:
        policy = resolve_transport_policy(BaseRequest(), UimSettings(), URL, {})
        with pytest.raises(AttributeError):
            policy.verify = False  # type: ignore[misc]
