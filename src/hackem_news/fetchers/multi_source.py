"""Multi-source coordinator for fetching candidates from all enabled sources."""

import asyncio
from typing import Dict, List

from ..cache import TTLCache
from ..config import Config
from ..logger import get_logger
from ..models import Article
from .base import SourceAdapter
from .hacker_news import HackerNewsAdapter
from .reddit import RedditAdapter


def build_adapters(config: Config, cache: TTLCache) -> Dict[str, SourceAdapter]:
    """
    Create one adapter per enabled source, in configured order.

    Args:
        config: Application configuration
        cache: Shared source cache

    Returns:
        Dictionary mapping source names to adapters
    """
    factories = {
        HackerNewsAdapter.name: lambda: HackerNewsAdapter(config.hacker_news, cache),
        RedditAdapter.name: lambda: RedditAdapter(config.reddit, cache, timeout=config.requests.timeout),
    }
    return {name: factories[name]() for name in config.sources.enabled if name in factories}


class MultiSourceFetcher:
    """Fetches from every adapter concurrently; one failing source never aborts the others."""

    def __init__(self, adapters: Dict[str, SourceAdapter]):
        self.adapters = adapters
        self.logger = get_logger()

    async def fetch_all(self) -> List[Article]:
        """
        Fetch candidates from all adapters in parallel.

        Returns:
            Combined list of Articles, in adapter order
        """
        self.logger.info(f"Enabled sources: {', '.join(self.adapters)}")

        results = await asyncio.gather(*[
            self._safe_fetch(name, adapter) for name, adapter in self.adapters.items()
        ])

        all_articles = []
        for articles in results:
            all_articles.extend(articles)

        self.logger.info(
            f"Combined {len(all_articles)} total articles from {len(self.adapters)} sources"
        )
        return all_articles

    async def _safe_fetch(self, source_name: str, adapter: SourceAdapter) -> List[Article]:
        """
        Run one adapter, converting any failure into an empty contribution.

        Returns:
            List of articles or empty list if the fetch fails
        """
        try:
            articles = await adapter.fetch_candidates()
        except Exception as e:
            self.logger.error(f"{source_name}: fetch failed - {e}", exc_info=True)
            return []

        valid = [a for a in articles if a.url and a.source]
        self.logger.info(f"{source_name}: fetched {len(valid)} articles")
        return valid
