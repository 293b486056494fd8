"""Structured logging helpers.

Every module logs through get_logger(__name__, component=...) and passes an
``event`` name plus structured fields via ``extra``:

    logger.info("Feed imported", extra={"event": "import.feed.completed", "imported": 5})
"""

import logging
from typing import Optional, Union


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that tags records with a component and keeps per-call extras."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Get a logger, optionally tagging every record with ``component``.

    Args:
        name: Logger name (typically __name__)
        component: Component identifier such as "importer" or "provider"

    Returns:
        Plain logger, or a ComponentLoggerAdapter when component is given
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger
