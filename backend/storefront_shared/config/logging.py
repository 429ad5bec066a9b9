"""
Structured logging for the admin API and the CLI.

Context is passed as keyword arguments and rendered as JSON in
production or as ``key=value`` pairs on a coloured line otherwise:

    logger.warning("Skipping entity type in trash listing", entity_type="order", error=str(e))
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from storefront_shared.config.settings import settings

SERVICE_NAME = "storefront-admin-api"

# Third-party loggers and the level they are capped at
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "httpx": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, "context", None) or {}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = _context(record)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if settings.debug:
            payload["source"] = f"{record.pathname}:{record.lineno}"
        return json.dumps(payload, default=str)


class ConsoleFormatter(logging.Formatter):
    """Readable single-line output for local development."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}{stamp} {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        context = _context(record)
        if context:
            line += "  " + " ".join(f"{key}={value}" for key, value in context.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """
    Logger whose methods accept arbitrary keyword context.

    Standard keywords (exc_info, extra, stack_info, stacklevel) keep their
    meaning; everything else ends up in ``record.context``.
    """

    def _log(
        self,
        level: int,
        msg: object,
        args: Any,
        exc_info: Any = None,
        extra: dict[str, Any] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **context: Any,
    ) -> None:
        extra = dict(extra or {})
        extra["context"] = context
        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=extra,
            stack_info=stack_info,
            stacklevel=stacklevel,
        )


logging.setLoggerClass(StructuredLogger)


def setup_logging() -> None:
    """
    Install the stdout handler on the root logger.
    Called once from the API lifespan and from each CLI command.
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if settings.environment == "production" else ConsoleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name, cap in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(cap)


def get_logger(name: str) -> StructuredLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("Brand created", entity_id=brand.id, actor=mask_email(email))
    """
    logger = logging.getLogger(name)
    if not isinstance(logger, StructuredLogger):
        # Created before setLoggerClass ran (e.g. by a library at import time)
        logger.__class__ = StructuredLogger
    return logger  # type: ignore[return-value]


def mask_email(email: str | None) -> str:
    """
    "manager@shop.test" -> "ma***@shop.test". Values without "@" (such as
    the "system" actor) are returned unchanged.
    """
    if not email:
        return "<no-email>"
    local, sep, domain = email.partition("@")
    if not sep:
        return email
    return f"{local[:2]}***@{domain}"


api_logger = get_logger("storefront_api")
trash_logger = get_logger("storefront_api.trash")
sweeper_logger = get_logger("storefront_api.sweeper")
