"""Logging configuration: filters, formatters and root logger set-up."""

import json
import logging
import sys
from datetime import date, datetime, timezone
from typing import Any, Dict, Literal

from jobfeed.utils.masking import mask_ip, mask_secret, mask_url, mask_user_agent

from .context import get_log_context

LogFormat = Literal["json", "key-value"]

SERVICE_NAME = "job-feed-importer"

# LogRecord attributes that are never rendered as structured fields
_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName", "levelname",
        "levelno", "lineno", "module", "msecs", "message", "pathname", "process",
        "processName", "relativeCreated", "thread", "threadName", "asctime",
        "exc_info", "exc_text", "stack_info", "taskName",
    }
)


class ContextualFilter(logging.Filter):
    """Adds service/environment labels and the active log_context() fields to records.

    Fields passed explicitly through ``extra`` win over context fields.
    """

    def __init__(self, service: str = SERVICE_NAME, environment: str = "local"):
        super().__init__()
        self.service = service
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        record.environment = self.environment
        for key, value in get_log_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class SensitiveDataFilter(logging.Filter):
    """Masks caller identity and credentials carried in structured fields.

    Providers already log masked values; this filter guarantees that a raw
    IP, user agent or credential passed in ``extra`` by mistake is masked
    before any handler formats it.
    """

    IP_FIELDS = ("user_ip", "client_ip")
    USER_AGENT_FIELDS = ("user_agent", "client_user_agent")
    URL_FIELDS = ("url", "request_url", "api_url")
    SECRET_FIELDS = ("publisher_id", "publisher", "api_key")

    def filter(self, record: logging.LogRecord) -> bool:
        for field in self.IP_FIELDS:
            value = getattr(record, field, None)
            if isinstance(value, str) and "xxx" not in value:
                setattr(record, field, mask_ip(value))
        for field in self.USER_AGENT_FIELDS:
            value = getattr(record, field, None)
            if isinstance(value, str):
                setattr(record, field, mask_user_agent(value))
        for field in self.URL_FIELDS:
            value = getattr(record, field, None)
            if isinstance(value, str):
                setattr(record, field, mask_url(value))
        for field in self.SECRET_FIELDS:
            value = getattr(record, field, None)
            if isinstance(value, str) and not value.endswith("***"):
                setattr(record, field, mask_secret(value))
        if isinstance(getattr(record, "auth", None), dict):
            record.auth = {key: "***" for key in record.auth}
        return True


def _structured_fields(record: logging.LogRecord, skip: frozenset = frozenset()) -> Dict[str, Any]:
    """Collect the non-standard attributes of a record."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and key not in skip and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """Renders each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in _structured_fields(record).items():
            payload[key] = self._jsonable(value)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)

    @staticmethod
    def _jsonable(value: Any) -> Any:
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, (str, int, float, bool, list, dict, type(None))):
            return value
        return str(value)


class KeyValueFormatter(logging.Formatter):
    """Human-readable format: ``timestamp [LEVEL] logger: message key=value ...``."""

    HIDDEN_FIELDS = frozenset({"service", "environment"})

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _structured_fields(record, skip=self.HIDDEN_FIELDS)
        if not fields:
            return line
        rendered = " ".join(f"{key}={self._render(value)}" for key, value in sorted(fields.items()))
        return f"{line} {rendered}"

    @staticmethod
    def _render(value: Any) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        text = str(value)
        if any(char in text for char in ' =,"'):
            return json.dumps(text, ensure_ascii=False)
        return text


def configure_logging(
    level: str = "INFO",
    format_type: LogFormat = "key-value",
    environment: str = "local",
) -> None:
    """Configure the root logger with one stdout handler.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'json' or 'key-value'
        environment: Environment label attached to every record

    Raises:
        ValueError: If level or format_type is invalid
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    if format_type == "json":
        formatter: logging.Formatter = JSONFormatter()
    elif format_type == "key-value":
        formatter = KeyValueFormatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        raise ValueError(f"Invalid log format: {format_type}. Must be 'json' or 'key-value'")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(ContextualFilter(environment=environment))
    handler.addFilter(SensitiveDataFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "event": "logging.configured",
            "component": "logging",
            "log_level": level.upper(),
            "log_format": format_type,
        },
    )
