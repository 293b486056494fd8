"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List

LARGE_IMPORT_LIMIT = 500


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    feeds = config_dict.get("feeds") or []
    for feed in feeds:
        if isinstance(feed, dict) and not feed.get("active", True):
            name = feed.get("name", "Unknown")
            warning_messages.append(f"Feed '{name}' is inactive and will be skipped")

    importer = config_dict.get("importer") or {}
    if isinstance(importer, dict):
        import_limit = importer.get("import_limit", 50)
        if isinstance(import_limit, int) and import_limit > LARGE_IMPORT_LIMIT:
            warning_messages.append(
                f"Large import_limit ({import_limit}) may create many listings per run"
            )

        if importer.get("deduplication_enabled", True) is False:
            warning_messages.append(
                "deduplication_enabled is false; repeated runs will import the same jobs again"
            )

        active_feeds = [
            feed for feed in feeds if isinstance(feed, dict) and feed.get("active", True)
        ]
        if len(active_feeds) > 1 and not importer.get("request_delay"):
            warning_messages.append(
                "Several active feeds with no request_delay; providers may rate-limit back-to-back requests"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message as a UserWarning."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
