"""Formatter de logging estruturado JSON.

Campos obrigatórios em todo log: asctime, level, logger, message,
correlation_id, service, sdk_version. Campos de `extra` (ex: os do
log por tentativa HTTP) são anexados pelo JsonFormatter.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# Campos obrigatórios em todo log estruturado (ordem preservada no output)
REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
    "sdk_version",
)

# Mapeamento de nomes de campos para formato padrão
FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {"asctime": "...", "level": "INFO", "logger": "app.infra.http.executor",
         "message": "http_attempt", "correlation_id": "", "service": "uim_sdk",
         "sdk_version": "0.1.0", "attempt": 0, "status_code": 200}
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)

    return JsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
        json_ensure_ascii=False,
    )
