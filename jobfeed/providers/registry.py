"""Provider registry: maps provider ids to implementations and detects providers from URLs."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlsplit

from jobfeed.logging import get_logger

from .base import BaseProvider
from .generic_rss import GenericRssProvider
from .whatjobs import WhatJobsProvider

logger = get_logger(__name__, component="registry")

FALLBACK_PROVIDER_ID = "generic_rss"


class ProviderCategory(str, Enum):
    """Kind of source a provider talks to."""

    API = "api"
    RSS = "rss"


@dataclass(frozen=True)
class ProviderDescriptor:
    """Registry entry for a provider.

    Attributes:
        id: Stable provider id stored on feeds (e.g., "whatjobs")
        name: Display name
        factory: Callable returning a configured provider instance
        patterns: URL regexes tested in order; the first match wins
        category: API or RSS
    """

    id: str
    name: str
    factory: Callable[..., BaseProvider] = field(compare=False)
    patterns: Tuple[str, ...] = ()
    category: ProviderCategory = ProviderCategory.RSS

    def create(self, **options: Any) -> BaseProvider:
        """Instantiate the provider with the given options (timeout, user_agent, ...)."""
        return self.factory(**options)

    def matches(self, target: str) -> bool:
        return any(re.search(pattern, target, re.IGNORECASE) for pattern in self.patterns)


class ProviderRegistry:
    """Explicit provider registry.

    One registry is built at start-up and handed to the importer; nothing in
    the package keeps a module-level registry.

    Example:
        >>> registry = create_default_registry()
        >>> registry.resolve_by_url("https://api.whatjobs.com/api/v1/jobs.xml")
        'whatjobs'
    """

    def __init__(self, fallback_id: str = FALLBACK_PROVIDER_ID) -> None:
        self.fallback_id = fallback_id
        self._providers: Dict[str, ProviderDescriptor] = {}

    def register(self, descriptor: ProviderDescriptor) -> None:
        """Add a provider, replacing any provider registered under the same id."""
        replaced = descriptor.id in self._providers
        self._providers[descriptor.id] = descriptor
        logger.debug(
            "Provider registered",
            extra={
                "event": "provider.registered",
                "provider_id": descriptor.id,
                "replaced": replaced,
            },
        )

    def resolve_by_id(self, provider_id: str) -> Optional[ProviderDescriptor]:
        return self._providers.get(provider_id)

    def resolve_by_url(self, url: Optional[str]) -> str:
        """Detect the provider for a feed URL.

        Only host and path are matched, never the query string. Providers are
        tried in registration order and the fallback provider's own patterns
        are never tested.

        Args:
            url: Feed URL (may be empty)

        Returns:
            Id of the first matching provider, or the fallback id
        """
        if not url or not url.strip():
            return self.fallback_id

        parts = urlsplit(url.strip())
        target = f"{parts.hostname or ''}{parts.path}"

        detected = self.fallback_id
        for descriptor in self._providers.values():
            if descriptor.id == self.fallback_id:
                continue
            if descriptor.matches(target):
                detected = descriptor.id
                break

        logger.info(
            f"Detected provider '{detected}'",
            extra={
                "event": "provider.detection",
                "target": target,
                "detected_provider": detected,
            },
        )
        return detected

    def list_all(self) -> List[ProviderDescriptor]:
        """Registered providers in registration order."""
        return list(self._providers.values())

    def __contains__(self, provider_id: str) -> bool:
        return provider_id in self._providers

    def __len__(self) -> int:
        return len(self._providers)


def create_default_registry() -> ProviderRegistry:
    """Build a registry holding the built-in providers."""
    registry = ProviderRegistry(fallback_id=GenericRssProvider.PROVIDER_ID)
    registry.register(
        ProviderDescriptor(
            id=WhatJobsProvider.PROVIDER_ID,
            name=WhatJobsProvider.PROVIDER_NAME,
            factory=WhatJobsProvider,
            patterns=(r"api\.whatjobs\.com", r"whatjobs\.com.*/api"),
            category=ProviderCategory.API,
        )
    )
    registry.register(
        ProviderDescriptor(
            id=GenericRssProvider.PROVIDER_ID,
            name=GenericRssProvider.PROVIDER_NAME,
            factory=GenericRssProvider,
            patterns=(r".*rss.*", r".*"),
            category=ProviderCategory.RSS,
        )
    )
    return registry
