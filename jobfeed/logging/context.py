"""Scoped context fields for structured logging.

Fields bound with log_context() are attached to every log record emitted
inside the scope (run id, feed id, provider id, ...). Context lives in a
ContextVar, so nested scopes restore the outer fields on exit.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator

_log_context: ContextVar[Dict[str, Any]] = ContextVar("jobfeed_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields bound in the current scope."""
    return dict(_log_context.get())


def clear_log_context() -> None:
    """Drop every bound field. Mostly useful in tests."""
    _log_context.set({})


@contextmanager
def log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """Bind fields to all log records emitted within the block.

    Example:
        >>> with log_context(run_id="abc123", feed_id=7):
        ...     logger.info("Importing feed")  # record carries run_id and feed_id
    """
    merged = {**_log_context.get(), **fields}
    token = _log_context.set(merged)
    try:
        yield merged
    finally:
        _log_context.reset(token)
