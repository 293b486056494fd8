"""WhatJobs XML API provider.

Fetches jobs from the WhatJobs publisher API. API docs:
https://www.whatjobs.com/affiliates

Response structure:
<data>
  <job>
    <title>...</title>
    <company>...</company>
    <snippet>...</snippet>
    <age_days>0</age_days>
    ...
  </job>
</data>
"""

from typing import Any, Dict, List, Mapping, Optional

from jobfeed import __version__
from jobfeed.domain.models import FeedConfig, RawJobRecord
from jobfeed.logging import get_logger
from jobfeed.normalization.formatting import format_description, strip_tags, sanitize_text
from jobfeed.utils.masking import mask_ip

from .base import BaseProvider, FeedRequest, RequestContext
from .exceptions import ProviderConfigurationError

logger = get_logger(__name__, component="provider")

LOOPBACK_IP = "127.0.0.1"

# Sent when no caller is available, i.e. scheduled runs
SCHEDULER_USER_AGENT = f"JobFeedImporter/{__version__} (scheduled import)"

# <job> children copied verbatim into RawJobRecord
TEXT_FIELDS = (
    "title",
    "company",
    "location",
    "snippet",
    "url",
    "job_type",
    "salary",
    "postcode",
    "logo",
    "age",
    "site",
    "category",
    "subcategory",
    "country",
    "state",
    "city",
)

MAX_LIMIT = 100


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class WhatJobsProvider(BaseProvider):
    """Provider for the WhatJobs publisher XML API."""

    PROVIDER_ID = "whatjobs"
    PROVIDER_NAME = "WhatJobs"
    API_BASE_URL = "https://api.whatjobs.com/api/v1/jobs.xml"
    ACCEPT = "application/xml"

    def build_request(
        self,
        credentials: Mapping[str, str],
        args: Optional[Mapping[str, Any]] = None,
        context: Optional[RequestContext] = None,
    ) -> FeedRequest:
        """Build the API request for a publisher.

        Args:
            credentials: Must contain ``publisher_id``
            args: Optional keyword, location, limit, page, description_min_length
            context: Caller identity; loopback/synthetic values are used without one

        Returns:
            FeedRequest restricted to jobs posted today

        Raises:
            ProviderConfigurationError: If the publisher ID is missing
        """
        args = args or {}
        publisher_id = str(credentials.get("publisher_id") or "").strip()
        if not publisher_id:
            raise ProviderConfigurationError("Publisher ID is required for WhatJobs API")

        user_ip = (context.client_ip if context else None) or LOOPBACK_IP
        user_agent = (context.user_agent if context else None) or SCHEDULER_USER_AGENT

        params: Dict[str, str] = {
            "publisher": publisher_id,
            "user_ip": user_ip,
            "user_agent": user_agent,
            "snippet": "full",
            "age_days": "0",
        }

        keyword = sanitize_text(str(args.get("keyword") or ""))
        if keyword:
            params["keyword"] = keyword

        location = sanitize_text(str(args.get("location") or ""))
        if location:
            params["location"] = location

        limit = _as_int(args.get("limit")) if args.get("limit") else None
        if limit:
            params["limit"] = str(min(MAX_LIMIT, max(1, limit)))

        page = _as_int(args.get("page")) if args.get("page") else None
        if page:
            params["page"] = str(max(1, page))

        min_length = _as_int(args.get("description_min_length"))
        if min_length is None:
            min_length = self.description_min_length

        request = FeedRequest(
            url=self.API_BASE_URL,
            params=params,
            headers={"Accept": self.ACCEPT, "User-Agent": user_agent},
            only_today=True,
            description_min_length=min_length,
        )

        logger.debug(
            "Built WhatJobs request",
            extra={
                "event": "provider.request.built",
                "provider_id": self.PROVIDER_ID,
                "url": request.display_url(),
                "user_ip": mask_ip(user_ip),
            },
        )
        return request

    def prepare_request(
        self, feed: FeedConfig, context: Optional[RequestContext] = None
    ) -> FeedRequest:
        return self.build_request(feed.auth, feed.args, context)

    def fetch_and_parse(self, request: FeedRequest) -> List[RawJobRecord]:
        """Fetch the API response and return the jobs that pass the filters.

        Jobs without a title, with a description shorter than the request's
        minimum, or (for today-only requests) not posted today are dropped.
        """
        content = self._fetch(request)
        root = self._parse_document(content)

        elements = root.findall("job")
        jobs: List[RawJobRecord] = []
        for element in elements:
            job = self._parse_job(element)
            if self._should_include(job, request):
                jobs.append(job)

        logger.info(
            f"Parsed {len(jobs)} of {len(elements)} WhatJobs jobs",
            extra={
                "event": "provider.parse.completed",
                "provider_id": self.PROVIDER_ID,
                "jobs_in_response": len(elements),
                "jobs_kept": len(jobs),
            },
        )
        return jobs

    def _parse_job(self, element) -> RawJobRecord:
        """Map one <job> element to a RawJobRecord."""
        fields = {name: self._child_text(element, name) for name in TEXT_FIELDS}

        age_days = _as_int(self._child_text(element, "age_days"))
        fields["age_days"] = 999 if age_days is None else age_days
        fields["description"] = format_description(fields["snippet"])

        return RawJobRecord(**fields)

    @staticmethod
    def _should_include(job: RawJobRecord, request: FeedRequest) -> bool:
        if not job.title:
            return False
        if len(strip_tags(job.description)) < request.description_min_length:
            return False
        if request.only_today and job.age_days != 0:
            return False
        return True
