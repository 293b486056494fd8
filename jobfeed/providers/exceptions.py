"""Custom exceptions for feed providers."""

from typing import List, Optional


class ProviderError(Exception):
    """Base exception for all provider errors.

    Any ProviderError raised while fetching or parsing a feed is fatal for
    that feed only: the importer records it on the feed's result and moves
    on to the next feed.
    """

    pass


class ProviderConfigurationError(ProviderError):
    """Invalid provider configuration.

    Raised when a feed references an unknown provider, lacks required
    credentials (e.g., a WhatJobs publisher ID) or has no URL to fetch.
    """

    pass


class TransportError(ProviderError):
    """The HTTP request could not be completed (DNS, TLS, connection, timeout)."""

    def __init__(self, message: str, url: str) -> None:
        """Initialize transport error with the (masked) URL.

        Args:
            message: Human-readable error message
            url: URL that failed, safe for logging
        """
        super().__init__(message)
        self.url = url


class HttpStatusError(ProviderError):
    """The feed answered with a status other than 200."""

    def __init__(self, message: str, status_code: int, url: str) -> None:
        """Initialize HTTP status error.

        Args:
            message: Human-readable error message
            status_code: HTTP status code returned by the feed
            url: URL that failed, safe for logging
        """
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class EmptyResponseError(ProviderError):
    """The feed answered 200 with an empty body."""

    pass


class XmlParseError(ProviderError):
    """The response body is not well-formed XML.

    Attributes:
        diagnostics: Parser messages describing where parsing failed
    """

    def __init__(self, message: str, diagnostics: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])

    def __str__(self) -> str:
        base = super().__str__()
        if not self.diagnostics:
            return base
        return f"{base}: {'; '.join(self.diagnostics)}"
