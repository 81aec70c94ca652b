"""Structured logging utilities."""

from __future__ import annotations

import logging
import os
import sys
import time
import uuid
from contextvars import ContextVar

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

_FMT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default="-")

_logger.configure(extra={"correlation_id": "-"})


def _log_file_path() -> str | None:
    return os.getenv("LOG_FILE") or None


class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)
        _logger.opt(depth=6, exception=record.exc_info).log(
            level,
            record.getMessage(),
            correlation_id=_CORRELATION_ID.get(),
        )


class ContextualLogger:
    """Proxy for loguru that injects correlation ids via ContextVar."""

    def __getattr__(self, name):  # pragma: no cover
        bound = _logger.bind(correlation_id=_CORRELATION_ID.get())
        return getattr(bound, name)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or "-")


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


def clear_correlation_id() -> None:
    _CORRELATION_ID.set("-")


def setup_logging(level: str | None = None, *, debug_mode: bool = False) -> None:
    if debug_mode and level is None:
        level = "DEBUG"
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()

    _logger.remove()
    _logger.add(
        sys.stderr,
        level=level,
        format=_FMT,
        colorize=True,
        backtrace=False,
        diagnose=False,
        filter=sanitize_record,
    )

    log_file = _log_file_path()
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        _logger.add(
            log_file,
            level=level,
            format=_FMT,
            colorize=False,
            backtrace=False,
            diagnose=False,
            enqueue=True,
            rotation=os.getenv("LOG_ROTATION", "10 MB"),
            retention=os.getenv("LOG_RETENTION", "14 days"),
            encoding="utf-8",
            filter=sanitize_record,
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    logging.getLogger("werkzeug").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def bind_flask(app) -> None:
    from flask import g, request

    @app.before_request
    def _start_timer() -> None:
        g._t0 = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        g._correlation_id = request_id
        set_correlation_id(request_id)

    @app.after_request
    def _log_response(resp):
        dt = (time.perf_counter() - getattr(g, "_t0", time.perf_counter())) * 1000.0
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)
        state = getattr(g, "remember_me_state", None)
        auth = f" remember_me={state.value}" if state is not None else ""
        logger.info(
            f"{request.method} {request.path} -> {resp.status_code} in {dt:.1f} ms "
            f"from {ip}{auth}"
        )
        resp.headers.setdefault("X-Request-ID", g.get("_correlation_id", "-"))
        return resp

    @app.teardown_request
    def _teardown(_exc):
        clear_correlation_id()


logger = ContextualLogger()

__all__ = [
    "logger",
    "setup_logging",
    "bind_flask",
    "set_correlation_id",
    "clear_correlation_id",
    "get_correlation_id",
]
