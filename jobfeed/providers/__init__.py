"""Feed providers and the provider registry.

Built-in providers:
- WhatJobs XML API: whatjobs.WhatJobsProvider
- Generic RSS: generic_rss.GenericRssProvider

Build a registry once and pass it to the importer:
    from jobfeed.providers import create_default_registry
    registry = create_default_registry()
    provider = registry.resolve_by_id("whatjobs").create(timeout=20)

Exception handling:
    from jobfeed.providers.exceptions import ProviderError, TransportError, HttpStatusError
"""

from .base import BaseProvider, FeedRequest, RequestContext
from .exceptions import (
    EmptyResponseError,
    HttpStatusError,
    ProviderConfigurationError,
    ProviderError,
    TransportError,
    XmlParseError,
)
from .generic_rss import GenericRssProvider
from .registry import (
    FALLBACK_PROVIDER_ID,
    ProviderCategory,
    ProviderDescriptor,
    ProviderRegistry,
    create_default_registry,
)
from .whatjobs import WhatJobsProvider

__all__ = [
    # Base and registry
    "BaseProvider",
    "FeedRequest",
    "RequestContext",
    "ProviderRegistry",
    "ProviderDescriptor",
    "ProviderCategory",
    "FALLBACK_PROVIDER_ID",
    "create_default_registry",
    # Providers
    "WhatJobsProvider",
    "GenericRssProvider",
    # Exceptions
    "ProviderError",
    "ProviderConfigurationError",
    "TransportError",
    "HttpStatusError",
    "EmptyResponseError",
    "XmlParseError",
]
