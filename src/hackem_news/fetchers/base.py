"""Base class for source adapters."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from ..cache import TTLCache
from ..logger import get_logger
from ..models import Article


class SourceFetchError(Exception):
    """Raised when a whole source is unavailable."""
    pass


class SourceAdapter(ABC):
    """
    Fetches candidate items from one external feed and normalizes them.

    Subclasses decide which upstream items count as valid candidates; a
    malformed item is skipped, never raised.
    """

    name: str = ""

    def __init__(self, cache: TTLCache, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize source adapter.

        Args:
            cache: Cache for raw upstream responses and candidate lists
            transport: Optional httpx transport (used by tests)
        """
        self.cache = cache
        self.transport = transport
        self.logger = get_logger()

    @abstractmethod
    async def fetch_candidates(self) -> List[Article]:
        """
        Fetch the current candidate articles from this source.

        Returns:
            Deduplicated Articles with `source` set and a non-empty `url`

        Raises:
            SourceFetchError: If the source is unreachable as a whole
        """
        pass

    @abstractmethod
    async def fetch_by_id(self, item_id: str) -> Optional[Article]:
        """
        Fetch a single article by its source-scoped id.

        Returns:
            Article, or None if the item does not exist or is not a valid candidate
        """
        pass

    async def _get_json(self, url: str, timeout: float = 10.0, headers: Dict[str, str] = None) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            httpx.HTTPError: If the request fails
            ValueError: If the body is not JSON
        """
        async with httpx.AsyncClient(timeout=timeout, headers=headers, transport=self.transport) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()

    @staticmethod
    def _dedupe(articles: List[Article]) -> List[Article]:
        """Drop repeated ids, keeping the first occurrence."""
        seen = set()
        unique = []
        for article in articles:
            if article.id in seen:
                continue
            seen.add(article.id)
            unique.append(article)
        return unique
