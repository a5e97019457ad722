"""
Centralized Logging Configuration for the Product Catalog

Provides:
- Consistent log format across all handlers and services
- Structured JSON logging for production
- Request ID injection into log records
- Request/response/validation helpers used by the handlers

Usage:
    from product_catalog.core.logging_config import setup_logging, log_request

    # Once per process (the handlers do this on import)
    setup_logging()

    # In modules
    logger = logging.getLogger(__name__)
    log_request(logger, "POST", "/product", body)
"""

import sys
import json
import logging
from datetime import datetime, timezone
from typing import Optional, Any, List
from contextvars import ContextVar

from product_catalog.core.config import settings

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    "setup_logging",
    "set_request_id",
    "get_request_id",
    "log_request",
    "log_response",
    "log_validation",
    "RequestIdFilter",
    "JsonFormatter",
    "LOG_LEVELS",
]

# Context variable for request ID
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# LogRecord attributes that are not "extra" context
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "request_id", "taskName",
))

_configured = False


def set_request_id(request_id: Optional[str]) -> None:
    """Set the current request ID for logging context"""
    request_id_var.set(request_id)


def get_request_id() -> Optional[str]:
    """Get the current request ID from logging context"""
    return request_id_var.get()


class RequestIdFilter(logging.Filter):
    """
    Logging filter that adds request_id to all log records.
    Uses a context variable so concurrent requests keep their own id.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging in production.
    Outputs one object per line, ready for CloudWatch Logs Insights.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """
    Standard text formatter with request ID for development.
    """

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] [%(request_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )


def setup_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configure logging for the process.

    Lambda containers are reused between invocations, so repeated calls are
    no-ops unless ``force`` is set.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "text")
        force: Reconfigure even if logging was already set up
    """
    global _configured
    if _configured and not force:
        return

    level = level or settings.LOG_LEVEL or ("INFO" if settings.is_production else "DEBUG")
    log_format = log_format or settings.LOG_FORMAT or ("json" if settings.is_production else "text")

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(RequestIdFilter())

    if log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(StandardFormatter())

    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    _configured = True
    logging.getLogger(__name__).info(
        f"Logging configured: level={level}, format={log_format}, env={settings.ENVIRONMENT}"
    )


def log_request(logger: logging.Logger, method: str, path: str, data: Any = None) -> None:
    """Log an inbound API request"""
    logger.info(f"{method} {path}", extra={"http_method": method, "path": path, "payload": data})


def log_response(
    logger: logging.Logger,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
) -> None:
    """Log an API response with its latency"""
    logger.info(
        f"{method} {path} - {status_code} ({duration_ms:.0f}ms)",
        extra={"status_code": status_code, "duration_ms": round(duration_ms, 2)},
    )


def log_validation(logger: logging.Logger, context: str, errors: List[Any]) -> None:
    """Warn about a rejected payload together with its field errors"""
    if errors:
        logger.warning(
            f"Validation failed: {context}",
            extra={"errors": [getattr(e, "to_dict", lambda: e)() for e in errors]},
        )
