"""
Structured logging for the REST API and the WebSocket gateway.

Production emits one JSON object per line; development gets a colored,
human-readable line. Keyword arguments passed to a logger call become
structured fields:

    logger.info("Order advanced", order_id=12, status="ready")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings


def _request_id(record: logging.LogRecord) -> str | None:
    request_id = getattr(record, "request_id", None)
    if request_id and request_id != "-":
        return request_id
    return None


class StructuredFormatter(logging.Formatter):
    """JSON formatter for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = _request_id(record)
        if request_id:
            payload["request_id"] = request_id

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            payload["data"] = extra_data

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        if settings.debug:
            payload["source"] = f"{record.filename}:{record.lineno} ({record.funcName})"

        return json.dumps(payload, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Colored single-line formatter for local runs."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        stamp = datetime.now().strftime("%H:%M:%S")

        request_id = _request_id(record)
        rid = f"{self.DIM}[{request_id[:8]}]{self.RESET} " if request_id else ""

        line = (
            f"{color}[{stamp}] {record.levelname:8}{self.RESET} "
            f"{rid}{record.name}: {record.getMessage()}"
        )

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            line += " (" + " | ".join(f"{k}={v}" for k, v in extra_data.items()) + ")"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class StructuredLogger(logging.Logger):
    """Logger whose keyword arguments are attached as structured data."""

    def _log_with_data(
        self,
        level: int,
        msg: str,
        args: tuple,
        exc_info: Any = None,
        extra: dict | None = None,
        **fields: Any,
    ) -> None:
        if not self.isEnabledFor(level):
            return
        extra = dict(extra or {})
        extra["extra_data"] = fields or None
        super()._log(level, msg, args, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.DEBUG, msg, args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.INFO, msg, args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.WARNING, msg, args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        exc_info = kwargs.pop("exc_info", None)
        self._log_with_data(logging.ERROR, msg, args, exc_info=exc_info, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        exc_info = kwargs.pop("exc_info", None)
        self._log_with_data(logging.CRITICAL, msg, args, exc_info=exc_info, **kwargs)


logging.setLoggerClass(StructuredLogger)


def setup_logging() -> None:
    """Configure the root logger. Call once per process at startup."""
    from shared.infrastructure.correlation import CorrelationIdFilter

    level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    if settings.environment == "production":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for noisy in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger.

        logger = get_logger(__name__)
        logger.info("Staff created", staff_id=3, email=mask_email(email))
    """
    return logging.getLogger(name)  # type: ignore[return-value]


def mask_email(email: str | None) -> str:
    """Mask an email for logs: "maria@example.com" -> "ma***@example.com"."""
    if not email:
        return "<no-email>"
    local, sep, domain = email.partition("@")
    if not sep:
        return "***@invalid"
    return f"{local[:2] if len(local) > 2 else local[:1]}***@{domain}"


api_logger = get_logger("rest_api")
auth_logger = get_logger("rest_api.auth")
order_logger = get_logger("rest_api.orders")
kitchen_logger = get_logger("rest_api.kitchen")
event_logger = get_logger("shared.events")
ws_logger = get_logger("ws_gateway")
