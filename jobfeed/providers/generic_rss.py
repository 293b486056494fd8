"""Generic RSS provider.

Reads any RSS 2.0 feed (``<rss><channel><item>``) or a bare list of
``<item>`` elements under the document root. RSS carries no structured
company, location or salary fields, so they are extracted heuristically
from the item description and title.
"""

import re
from typing import List, Optional

from jobfeed.domain.models import FeedConfig, RawJobRecord
from jobfeed.logging import get_logger
from jobfeed.normalization.formatting import format_description
from jobfeed.utils.timestamps import parse_datetime

from .base import BaseProvider, FeedRequest, RequestContext
from .exceptions import ProviderConfigurationError

logger = get_logger(__name__, component="provider")

COMPANY_LABEL_RE = re.compile(r"(?:company|empresa):\s*([^\n\r]+)", re.IGNORECASE)
LOCATION_LABEL_RE = re.compile(r"(?:location|local|localização):\s*([^\n\r]+)", re.IGNORECASE)
SALARY_LABEL_RE = re.compile(r"(?:salary|salário):\s*([^\n\r]+)", re.IGNORECASE)
CURRENCY_RE = re.compile(r"R\$\s*[\d.,]+", re.IGNORECASE)

# "<role> - <company>" with an optional " em <location>" suffix
TITLE_COMPANY_RE = re.compile(r"(.+?)\s+-\s+(.+?)(?:\s+em\s|$)", re.IGNORECASE)
TITLE_LOCATION_RE = re.compile(r"\sem\s(.+)$", re.IGNORECASE)


def extract_company(title: str, text: str) -> str:
    """Company from a ``company:``/``empresa:`` label, else from ``"<role> - <company>"``."""
    match = COMPANY_LABEL_RE.search(text)
    if match:
        return match.group(1).strip()
    match = TITLE_COMPANY_RE.search(title)
    if match:
        return match.group(2).strip()
    return ""


def extract_location(title: str, text: str) -> str:
    """Location from a label, else from a trailing ``" em <location>"`` in the title."""
    match = LOCATION_LABEL_RE.search(text)
    if match:
        return match.group(1).strip()
    match = TITLE_LOCATION_RE.search(title)
    if match:
        return match.group(1).strip()
    return ""


def extract_salary(text: str) -> str:
    """Salary from a label, else the first ``R$`` amount in the text."""
    match = SALARY_LABEL_RE.search(text)
    if match:
        return match.group(1).strip()
    match = CURRENCY_RE.search(text)
    if match:
        return match.group(0).strip()
    return ""


class GenericRssProvider(BaseProvider):
    """Provider for arbitrary RSS job feeds."""

    PROVIDER_ID = "generic_rss"
    PROVIDER_NAME = "Generic RSS"
    ACCEPT = "application/rss+xml, application/xml, text/xml"

    def prepare_request(
        self, feed: FeedConfig, context: Optional[RequestContext] = None
    ) -> FeedRequest:
        """Request the feed's stored URL; RSS feeds need no credentials."""
        if not feed.url:
            raise ProviderConfigurationError(f"Feed '{feed.name}' has no URL configured")
        return FeedRequest(url=feed.url)

    def fetch_and_parse(self, request: FeedRequest) -> List[RawJobRecord]:
        """Fetch the feed and map every item. No item is filtered out."""
        content = self._fetch(request)
        root = self._parse_document(content)

        channel = root.find("channel")
        items = channel.findall("item") if channel is not None else []
        if not items:
            items = root.findall("item")

        jobs = [self._parse_item(item) for item in items]

        logger.info(
            f"Parsed {len(jobs)} RSS items",
            extra={
                "event": "provider.parse.completed",
                "provider_id": self.PROVIDER_ID,
                "jobs_in_response": len(items),
                "jobs_kept": len(jobs),
            },
        )
        return jobs

    def _parse_item(self, item) -> RawJobRecord:
        """Map one <item> element to a RawJobRecord."""
        title = self._child_text(item, "title")
        description = self._child_text(item, "description")
        pub_date = self._child_text(item, "pubDate")
        text = self._clean_html(description)

        return RawJobRecord(
            title=title,
            description=format_description(description),
            url=self._child_text(item, "link"),
            date=pub_date,
            posted_at=parse_datetime(pub_date),
            company=extract_company(title, text),
            location=extract_location(title, text),
            salary=extract_salary(text),
        )
