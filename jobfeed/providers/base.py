"""Base provider class with shared functionality for all feed providers.

This module provides the abstract base class that every provider implements,
the request objects passed between the importer and a provider, and the
shared HTTP and XML handling that maps failures onto the provider error
taxonomy.
"""

import ipaddress
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

import requests

from jobfeed import __version__
from jobfeed.domain.models import FeedConfig, RawJobRecord
from jobfeed.logging import get_logger
from jobfeed.normalization.formatting import html_to_text
from jobfeed.utils.masking import mask_url

from .exceptions import (
    EmptyResponseError,
    HttpStatusError,
    ProviderConfigurationError,
    TransportError,
    XmlParseError,
)

logger = get_logger(__name__, component="provider")

DEFAULT_TIMEOUT = 20
DEFAULT_USER_AGENT = f"JobFeedImporter/{__version__}"
DEFAULT_DESCRIPTION_MIN_LENGTH = 100

# Client IP headers, most trusted first
CLIENT_IP_HEADERS = ("CF-Connecting-IP", "X-Real-IP", "X-Forwarded-For", "REMOTE_ADDR")


def _is_public_ip(value: str) -> bool:
    try:
        return ipaddress.ip_address(value.strip()).is_global
    except ValueError:
        return False


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller on whose behalf a feed is fetched.

    Scheduled runs have no caller; providers then fall back to a loopback
    address and a synthetic user agent.
    """

    client_ip: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RequestContext":
        """Derive the caller identity from inbound request headers.

        Headers are checked in CLIENT_IP_HEADERS order and only public
        addresses are accepted. For X-Forwarded-For the first entry is used.
        """
        normalized = {key.lower().replace("_", "-"): value for key, value in headers.items()}

        client_ip = None
        for header in CLIENT_IP_HEADERS:
            value = normalized.get(header.lower().replace("_", "-"))
            if not value:
                continue
            if header == "X-Forwarded-For":
                value = value.split(",")[0]
            if _is_public_ip(value):
                client_ip = value.strip()
                break

        user_agent = (normalized.get("user-agent") or "").strip() or None
        return cls(client_ip=client_ip, user_agent=user_agent)


@dataclass
class FeedRequest:
    """A fully prepared feed request.

    Attributes:
        url: Base URL
        params: Query parameters, sent verbatim
        headers: Extra request headers
        only_today: Drop jobs not posted today (when the provider supports it)
        description_min_length: Minimum plain-text description length
    """

    url: str
    params: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    only_today: bool = False
    description_min_length: int = DEFAULT_DESCRIPTION_MIN_LENGTH

    def full_url(self) -> str:
        """URL with the query string exactly as it goes on the wire."""
        try:
            return requests.Request("GET", self.url, params=self.params).prepare().url
        except requests.exceptions.RequestException:
            return self.url

    def display_url(self) -> str:
        """URL safe for logs: caller IP, user agent and credentials masked."""
        return mask_url(self.full_url())


class BaseProvider(ABC):
    """Base class for all feed providers.

    Provides shared HTTP fetching, XML parsing and text helpers. Subclasses
    implement prepare_request() and fetch_and_parse().

    Attributes:
        timeout: HTTP request timeout in seconds
        user_agent: User-Agent header for HTTP requests
        description_min_length: Default minimum description length
    """

    PROVIDER_ID = ""
    ACCEPT = "application/xml"

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        description_min_length: int = DEFAULT_DESCRIPTION_MIN_LENGTH,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize provider with configuration.

        Args:
            timeout: HTTP request timeout in seconds (range 5-300)
            user_agent: User-Agent header for requests
            description_min_length: Default minimum description length
            session: Optional pre-configured requests session

        Raises:
            ProviderConfigurationError: If timeout is out of range or user_agent is empty
        """
        if not 5 <= timeout <= 300:
            raise ProviderConfigurationError(
                f"Timeout must be between 5 and 300 seconds, got: {timeout}"
            )
        if not user_agent or not user_agent.strip():
            raise ProviderConfigurationError("user_agent cannot be empty")

        self.timeout = timeout
        self.user_agent = user_agent.strip()
        self.description_min_length = description_min_length

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    @abstractmethod
    def prepare_request(
        self, feed: FeedConfig, context: Optional[RequestContext] = None
    ) -> FeedRequest:
        """Build the request for a configured feed.

        Raises:
            ProviderConfigurationError: If the feed lacks what the provider needs
        """

    @abstractmethod
    def fetch_and_parse(self, request: FeedRequest) -> List[RawJobRecord]:
        """Fetch the feed and map it to raw job records.

        Raises:
            TransportError: On DNS/TLS/connection failures and timeouts
            HttpStatusError: On any status other than 200
            EmptyResponseError: On an empty body
            XmlParseError: On malformed XML
        """

    def _fetch(self, request: FeedRequest) -> bytes:
        """GET the request and return the raw body.

        Returns:
            Response body bytes (never empty)
        """
        display_url = request.display_url()
        headers = {"Accept": self.ACCEPT, **request.headers}

        logger.debug(
            f"HTTP GET {display_url}",
            extra={
                "event": "provider.fetch.request",
                "provider_id": self.PROVIDER_ID,
                "url": display_url,
                "timeout": self.timeout,
            },
        )

        try:
            response = self._session.get(
                request.url,
                params=request.params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request timed out after {self.timeout} seconds",
                extra={
                    "event": "provider.fetch.timeout",
                    "provider_id": self.PROVIDER_ID,
                    "url": display_url,
                    "timeout": self.timeout,
                },
            )
            raise TransportError(
                f"Request to {display_url} timed out after {self.timeout} seconds",
                url=display_url,
            ) from e
        except requests.exceptions.RequestException as e:
            logger.warning(
                f"Request failed: {type(e).__name__}",
                extra={
                    "event": "provider.fetch.transport_error",
                    "provider_id": self.PROVIDER_ID,
                    "url": display_url,
                    "error_type": type(e).__name__,
                },
            )
            # str(e) from urllib3 repeats the unmasked request URL
            raise TransportError(
                f"Request to {display_url} failed: {type(e).__name__}", url=display_url
            ) from e

        if response.status_code != 200:
            logger.warning(
                f"HTTP {response.status_code} from feed",
                extra={
                    "event": "provider.fetch.http_error",
                    "provider_id": self.PROVIDER_ID,
                    "url": display_url,
                    "status_code": response.status_code,
                },
            )
            raise HttpStatusError(
                f"HTTP {response.status_code} from {self.PROVIDER_ID or 'feed'}",
                status_code=response.status_code,
                url=display_url,
            )

        content = response.content or b""
        if not content.strip():
            raise EmptyResponseError(f"Empty response from {display_url}")

        logger.debug(
            "HTTP request succeeded",
            extra={
                "event": "provider.fetch.succeeded",
                "provider_id": self.PROVIDER_ID,
                "response_length": len(content),
            },
        )
        return content

    def _parse_document(self, content: bytes) -> ET.Element:
        """Parse an XML document and return its root element."""
        try:
            return ET.fromstring(content.strip())
        except ET.ParseError as e:
            line, column = getattr(e, "position", (0, 0))
            message = str(e).split(":")[0]
            diagnostics = [f"line {line}, column {column}: {message}"]
            logger.warning(
                "Failed to parse XML response",
                extra={
                    "event": "provider.parse.error",
                    "provider_id": self.PROVIDER_ID,
                    "diagnostics": diagnostics,
                },
            )
            raise XmlParseError("Failed to parse XML response", diagnostics=diagnostics) from e

    @staticmethod
    def _child_text(element: ET.Element, tag: str) -> str:
        """Return the text of a direct child element, or "" when absent."""
        child = element.find(tag)
        if child is None:
            return ""
        return "".join(child.itertext()).strip()

    @staticmethod
    def _clean_html(html_text: str) -> str:
        """Plain-text rendering of an HTML fragment."""
        return html_to_text(html_text)
