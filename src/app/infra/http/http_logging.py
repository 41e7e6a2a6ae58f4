"""Helpers de logging por tentativa HTTP (sem tokens)."""

from __future__ import annotations

import logging
import os
import socket
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from app.infra.http.request import PreparedRequest

# Corpos maiores são truncados no log
MAX_LOGGED_BODY_CHARS = 4096

_MASKED_HEADERS = frozenset({"authorization", "proxy-authorization"})


def mask_headers(headers: dict[str, str]) -> dict[str, str]:
    """Mascara credenciais mantendo o esquema (ex: 'Bearer ***')."""
    masked: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in _MASKED_HEADERS:
            scheme = value.split(" ", 1)[0] if " " in value else ""
            masked[key] = f"{scheme} ***".strip()
        else:
            masked[key] = value
    return masked


def log_attempt(
    logger: logging.Logger,
    prepared: PreparedRequest,
    attempt: int,
    started_at: datetime,
    elapsed_ms: float,
    response: httpx.Response | None = None,
    error: BaseException | None = None,
) -> None:
    """Emite um registro estruturado por tentativa, com ou sem sucesso."""
    extra: dict[str, object] = {
        "attempt": attempt,
        "method": prepared.method,
        "url": prepared.url,
        "start_time": started_at.isoformat(),
        "elapsed_ms": round(elapsed_ms, 3),
        "pid": os.getpid(),
        "hostname": socket.gethostname(),
        "req_headers": mask_headers(prepared.headers),
        "req_body": _body_text(prepared.body),
    }
    if response is not None:
        extra["status_code"] = response.status_code
        extra["res_headers"] = dict(response.headers)
        extra["res_body"] = _body_text(response.content)
    if error is not None:
        extra["error"] = f"{type(error).__name__}: {error}"

    level = logging.WARNING if error is not None else logging.INFO
    logger.log(level, "http_attempt", extra=extra)


def log_failed_build(
    logger: logging.Logger,
    method: str,
    attempt: int,
    started_at: datetime,
    error: BaseException,
) -> None:
    """Registro da tentativa cuja montagem falhou (ex: token indisponível)."""
    logger.warning(
        "http_attempt",
        extra={
            "attempt": attempt,
            "method": method.upper(),
            "start_time": started_at.isoformat(),
            "pid": os.getpid(),
            "hostname": socket.gethostname(),
            "error": f"{type(error).__name__}: {error}",
        },
    )


def log_wire_request(logger: logging.Logger, prepared: PreparedRequest, attempt: int) -> None:
    """Dump de wire do request (apenas com DEBUG=sdk)."""
    lines = [f"> {prepared.method} {prepared.url}"]
    lines.extend(f"> {key}: {value}" for key, value in mask_headers(prepared.headers).items())
    lines.append(f"> Retry Times: {attempt}.")
    logger.debug("\n".join(lines))


def log_wire_response(logger: logging.Logger, response: httpx.Response) -> None:
    lines = [f"< {response.http_version} {response.status_code} {response.reason_phrase}"]
    lines.extend(f"< {key}: {value}" for key, value in response.headers.items())
    lines.append(_body_text(response.content))
    logger.debug("\n".join(lines))


def utc_now() -> datetime:
    return datetime.now(UTC)


def _body_text(body: bytes | None) -> str:
    if not body:
        return ""
    text = body.decode("utf-8", errors="replace")
    if len(text) > MAX_LOGGED_BODY_CHARS:
        return text[:MAX_LOGGED_BODY_CHARS] + "...(truncated)"
    return text
