"""Masking helpers for values that must never reach logs in full.

Provider requests carry the caller's IP address and user agent as query
parameters. These helpers produce diagnostic copies with the sensitive parts
hidden; the original values are never modified.
"""

from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

MASKED_IP = "xxx.xxx.xxx.xxx"
USER_AGENT_VISIBLE_CHARS = 20

# Query parameters rewritten by mask_url()
IP_PARAMS = ("user_ip", "client_ip")
USER_AGENT_PARAMS = ("user_agent",)
SECRET_PARAMS = ("publisher", "publisher_id", "api_key", "token")


def mask_ip(ip: Optional[str]) -> str:
    """Hide the two rightmost octets of an IPv4 address.

    Args:
        ip: IP address string

    Returns:
        ``"a.b.xxx.xxx"`` for a 4-part address, ``"xxx.xxx.xxx.xxx"`` otherwise

    Example:
        >>> mask_ip("34.12.56.78")
        '34.12.xxx.xxx'
    """
    if not ip:
        return MASKED_IP

    parts = ip.strip().split(".")
    if len(parts) == 4:
        return f"{parts[0]}.{parts[1]}.xxx.xxx"
    return MASKED_IP


def mask_user_agent(user_agent: Optional[str]) -> str:
    """Truncate a user agent to its first 20 characters."""
    if not user_agent:
        return ""
    if len(user_agent) <= USER_AGENT_VISIBLE_CHARS:
        return user_agent
    return user_agent[:USER_AGENT_VISIBLE_CHARS] + "..."


def mask_secret(value: Optional[str]) -> str:
    """Keep only the first two characters of a credential."""
    if not value:
        return ""
    return value[:2] + "***"


def mask_url(url: str) -> str:
    """Return a copy of url with IP, user-agent and credential parameters masked.

    URLs without a query string are returned unchanged.

    Args:
        url: Fully built request URL

    Returns:
        URL safe for logging
    """
    if not url:
        return url

    parts = urlsplit(url)
    if not parts.query:
        return url

    masked = []
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key in IP_PARAMS:
            value = mask_ip(value)
        elif key in USER_AGENT_PARAMS:
            value = mask_user_agent(value)
        elif key in SECRET_PARAMS:
            value = mask_secret(value)
        masked.append((key, value))

    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(masked), parts.fragment))


def redact_database_url(url: str) -> str:
    """Hide the password portion of a database URL.

    SQLite URLs carry no credentials and are returned as-is.
    """
    if not url or url.startswith("sqlite"):
        return url

    parts = urlsplit(url)
    if parts.password is None:
        return url

    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
