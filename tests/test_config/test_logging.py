"""Testes para config.logging.

Cobre: configure_logging, get_logger, is_debug_enabled,
CorrelationIdFilter, create_json_formatter.
"""

from __future__ import annotations

import json
import logging

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    CorrelationIdFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
    is_debug_enabled,
)
from config.logging.config import DEFAULT_SERVICE_NAME, VALID_LOG_LEVELS
from config.version import SDK_CORE_VERSION


def _record(msg: str = "msg", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestConfigureLogging:
    """Testes para configure_logging."""

    def test_configure_logging_default_level(self) -> None:
        """Configura logging com nível padrão INFO."""
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_case_insensitive(self) -> None:
        """Nível é case insensitive."""
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_configure_logging_invalid_level_raises(self) -> None:
        """Nível inválido levanta ValueError."""
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="INVALID")

    def test_configure_logging_replaces_handlers(self) -> None:
        """Configure_logging substitui handlers existentes."""
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]
        configure_logging()
        assert len(root.handlers) == 1
        assert any(isinstance(f, CorrelationIdFilter) for f in root.handlers[0].filters)

    def test_constants(self) -> None:
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS
        assert DEFAULT_SERVICE_NAME == "uim_sdk"


class TestGetLogger:
    """Testes para get_logger."""

    def test_get_logger_same_name_returns_same_instance(self) -> None:
        """Mesmo nome retorna mesma instância."""
        logger = get_logger("same.module")
        assert isinstance(logger, logging.Logger)
        assert logger is get_logger("same.module")


class TestIsDebugEnabled:
    """Allow-list DEBUG separado por vírgula."""

    @pytest.mark.parametrize(
        ("debug_env", "expected"),
        [
            ("sdk", True),
            ("http, sdk", True),
            ("", False),
            ("sdkx", False),
            ("http", False),
        ],
    )
    def test_flag_lookup(self, debug_env: str, expected: bool) -> None:
        assert is_debug_enabled("sdk", debug_env) is expected


class TestCorrelationIdFilter:
    """Testes para CorrelationIdFilter."""

    def test_filter_adds_context_fields(self) -> None:
        """Filter adiciona correlation_id, service e sdk_version."""
        filter_ = CorrelationIdFilter("my_service", lambda: "corr-123")
        record = _record()
        assert filter_.filter(record) is True
        assert record.correlation_id == "corr-123"
        assert record.service == "my_service"
        assert record.sdk_version == SDK_CORE_VERSION

    def test_filter_preserves_explicit_correlation_id(self) -> None:
        """Filter preserva correlation_id passado via extra."""
        filter_ = CorrelationIdFilter("svc", lambda: "from-getter")
        record = _record()
        record.correlation_id = "explicit-id"
        filter_.filter(record)
        assert record.correlation_id == "explicit-id"

    def test_filter_uses_empty_string_when_no_getter(self) -> None:
        filter_ = CorrelationIdFilter("service_name")
        record = _record()
        filter_.filter(record)
        assert record.correlation_id == ""


class TestCreateJsonFormatter:
    """Testes para create_json_formatter e constantes."""

    def test_required_log_fields_content(self) -> None:
        assert REQUIRED_LOG_FIELDS == (
            "asctime",
            "levelname",
            "name",
            "message",
            "correlation_id",
            "service",
            "sdk_version",
        )
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}

    def test_json_formatter_renames_and_keeps_extra(self) -> None:
        """Output é JSON com campos renomeados e extras anexados."""
        formatter = create_json_formatter()
        record = _record("http_attempt")
        CorrelationIdFilter("svc", lambda: "abc-123").filter(record)
        record.attempt = 2
        record.status_code = 503

        data = json.loads(formatter.format(record))

        assert data["message"] == "http_attempt"
        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["correlation_id"] == "abc-123"
        assert data["sdk_version"] == SDK_CORE_VERSION
        assert data["attempt"] == 2
        assert data["status_code"] == 503

    def test_json_formatter_keeps_non_ascii(self) -> None:
        formatter = create_json_formatter()
        output = formatter.format(_record("mensagem não ascii"))
        assert "não" in output
