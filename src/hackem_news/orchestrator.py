"""Pipeline orchestrator: sources -> relevance filter -> capped result set."""

import asyncio
import time
from typing import Dict, List, Optional

from .cache import CacheSet
from .config import Config
from .extractor import ContentExtractor
from .fetchers.base import SourceAdapter
from .fetchers.multi_source import MultiSourceFetcher, build_adapters
from .logger import get_logger
from .models import Article
from .processing.relevance_filter import RelevanceFilter
from .providers.client import ReasoningClient
from .providers.registry import ProviderRegistry
from .summarizer import Summarizer


class UnknownSourceError(KeyError):
    """Raised when a request names a source that is not enabled."""
    pass


class AggregationOrchestrator:
    """Orchestrates fetching, filtering and summarizing articles."""

    def __init__(
        self,
        caches: CacheSet,
        adapters: Dict[str, SourceAdapter],
        relevance_filter: RelevanceFilter,
        summarizer: Summarizer,
        max_results: int,
        client: Optional[ReasoningClient] = None
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            caches: Named caches flushed together by clear_caches()
            adapters: Source adapters keyed by source name
            relevance_filter: Two-stage relevance filter
            summarizer: Per-article summarizer
            max_results: Maximum number of articles published
            client: Reasoning client, used for usage reporting
        """
        self.caches = caches
        self.adapters = adapters
        self.fetcher = MultiSourceFetcher(adapters)
        self.relevance_filter = relevance_filter
        self.summarizer = summarizer
        self.max_results = max_results
        self.client = client
        self.logger = get_logger()

    @classmethod
    def from_config(cls, config: Config) -> 'AggregationOrchestrator':
        """Build the full component graph from configuration."""
        caches = CacheSet(ttl_seconds=config.cache.ttl)
        client = ReasoningClient(ProviderRegistry(config.providers))
        extractor = ContentExtractor(config.requests, caches.content)

        return cls(
            caches=caches,
            adapters=build_adapters(config, caches.sources),
            relevance_filter=RelevanceFilter(
                client, extractor, caches.pipeline, config.articles, config.audience
            ),
            summarizer=Summarizer(client, extractor, caches.summaries, config.audience),
            max_results=config.articles.max_results,
            client=client
        )

    @property
    def cache_key(self) -> str:
        return f"top_articles:{','.join(sorted(self.adapters))}"

    async def get_top_articles(self) -> List[Article]:
        """
        Run the full pipeline: fetch -> filter -> cap.

        Returns:
            Scored articles relevant to the target audience, at most max_results
        """
        cached = self.caches.pipeline.get(self.cache_key)
        if cached is not None:
            return cached

        start_time = time.time()
        self.logger.info("Stage 1: Fetching candidate articles")
        candidates = await self.fetcher.fetch_all()

        self.logger.info("Stage 2: Filtering articles for relevance")
        result = await self.relevance_filter.filter(candidates)
        articles = result.articles[:self.max_results]

        self.logger.info(
            f"Pipeline complete in {time.time() - start_time:.1f}s: {len(articles)} articles "
            f"({result.mode}) by source {self._source_counts(articles)}"
        )
        if self.client:
            self.client.log_usage_summary()

        # Error fallbacks are served but not cached so the next call retries the judge
        if not result.degraded:
            self.caches.pipeline.set(self.cache_key, articles)
        return articles

    async def get_top_stories(self) -> List[Article]:
        """
        Top articles with summaries attached.

        Returns:
            Copies of the top articles carrying `summary`, at most max_results
        """
        articles = await self.get_top_articles()
        self.logger.info(f"Retrieved {len(articles)} articles, generating summaries")

        summaries = await asyncio.gather(*[self.summarizer.summarize(a) for a in articles])
        stories = [a.with_summary(s) for a, s in zip(articles, summaries)]
        return stories[:self.max_results]

    async def get_article(self, item_id: str, source: Optional[str] = None) -> Optional[Article]:
        """
        Look up one article by id.

        The cached pipeline result is searched first; otherwise the named
        source (default: the first enabled one, preferring hackernews) is
        asked directly.

        Raises:
            UnknownSourceError: If `source` names a source that is not enabled
        """
        item_id = str(item_id)
        for article in self.caches.pipeline.get(self.cache_key) or []:
            if article.id == item_id and (source is None or article.source == source):
                return article

        adapter = self._adapter(source or self._default_source())
        return await adapter.fetch_by_id(item_id)

    async def summarize_article(self, item_id: str, source: Optional[str] = None) -> Optional[str]:
        """Summary for one article, or None when the article cannot be found."""
        article = await self.get_article(item_id, source)
        if article is None:
            return None
        return await self.summarizer.summarize(article)

    async def get_source_posts(self, source: str) -> List[Article]:
        """Raw adapter output for one source, bypassing relevance filtering."""
        return await self._adapter(source).fetch_candidates()

    def clear_caches(self) -> Dict[str, int]:
        """Flush every cache; returns evicted key counts by cache name."""
        stats = self.caches.flush_all()
        self.logger.info(f"Cache cleared: {stats}")
        return stats

    def _adapter(self, source: str) -> SourceAdapter:
        if source not in self.adapters:
            raise UnknownSourceError(source)
        return self.adapters[source]

    def _default_source(self) -> str:
        if 'hackernews' in self.adapters:
            return 'hackernews'
        return next(iter(self.adapters), '')

    @staticmethod
    def _source_counts(articles: List[Article]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for article in articles:
            counts[article.source] = counts.get(article.source, 0) + 1
        return counts
