"""Hacker News API adapter for top stories."""

import asyncio
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import httpx

from ..cache import TTLCache
from ..config import HackerNewsConfig
from ..models import Article, normalize_id
from .base import SourceAdapter, SourceFetchError


class HackerNewsAdapter(SourceAdapter):
    """
    Fetches top stories from Hacker News.

    Only items of type "story" that link to an external URL are candidates;
    Ask HN posts, jobs, polls and deleted items are skipped.
    """

    name = "hackernews"

    def __init__(
        self,
        config: HackerNewsConfig,
        cache: TTLCache,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize Hacker News adapter.

        Args:
            config: HackerNewsConfig with endpoint, item cap and recency window
            cache: Cache for story ids and items
            transport: Optional httpx transport (used by tests)
        """
        super().__init__(cache, transport)
        self.config = config
        self.base_url = config.base_url.rstrip('/')

    async def fetch_candidates(self) -> List[Article]:
        """
        Fetch top stories with external links.

        Returns:
            List of Article objects from Hacker News

        Raises:
            SourceFetchError: If the top story list cannot be fetched
        """
        story_ids = await self._fetch_top_story_ids()
        story_ids = story_ids[:self.config.max_items]
        self.logger.info(f"Got {len(story_ids)} top story IDs from Hacker News")

        # Limit concurrent item requests
        semaphore = asyncio.Semaphore(10)
        stories = await asyncio.gather(*[self._fetch_item(story_id, semaphore) for story_id in story_ids])

        cutoff_time = None
        if self.config.max_age_hours:
            cutoff_time = datetime.now() - timedelta(hours=self.config.max_age_hours)

        articles = []
        for story in stories:
            if story is None:
                continue
            article = self._parse_story(story, cutoff_time)
            if article:
                articles.append(article)

        articles = self._dedupe(articles)
        self.logger.info(f"Found {len(articles)} valid Hacker News stories with URLs")
        return articles

    async def fetch_by_id(self, item_id: str) -> Optional[Article]:
        story = await self._fetch_item(item_id, asyncio.Semaphore(1))
        if story is None:
            return None
        return self._parse_story(story)

    async def _fetch_top_story_ids(self) -> List[int]:
        cache_key = "hackernews:top_stories"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            story_ids = await self._get_json(f"{self.base_url}/topstories.json")
        except (httpx.HTTPError, ValueError) as e:
            raise SourceFetchError(f"Failed to fetch top story IDs from Hacker News: {e}") from e

        if not isinstance(story_ids, list):
            raise SourceFetchError(
                f"Unexpected top stories payload from Hacker News: {type(story_ids).__name__}"
            )

        self.cache.set(cache_key, story_ids)
        return story_ids

    async def _fetch_item(self, item_id, semaphore: asyncio.Semaphore) -> Optional[Dict]:
        """
        Fetch details for a single item.

        Returns:
            Item dictionary or None if the fetch fails
        """
        item_id = normalize_id(item_id)
        cache_key = f"hackernews:item:{item_id}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        async with semaphore:
            try:
                item = await self._get_json(f"{self.base_url}/item/{item_id}.json", timeout=5.0)
            except (httpx.HTTPError, ValueError) as e:
                self.logger.debug(f"Failed to fetch Hacker News item {item_id}: {e}")
                return None

        if not isinstance(item, dict):
            return None

        self.cache.set(cache_key, item)
        return item

    def _parse_story(self, story: Dict, cutoff_time: datetime = None) -> Optional[Article]:
        """
        Parse a Hacker News item into an Article.

        Returns:
            Article object or None if the item is not a valid candidate
        """
        if story.get('type') != 'story' or story.get('dead') or story.get('deleted'):
            return None

        url = story.get('url')
        title = story.get('title')
        item_id = story.get('id')
        if not isinstance(url, str) or not url or not title or item_id is None:
            return None

        timestamp = story.get('time')
        if cutoff_time and isinstance(timestamp, (int, float)):
            try:
                published = datetime.fromtimestamp(timestamp)
            except (OverflowError, ValueError, OSError):
                self.logger.debug(f"Story {item_id} filtered out: invalid time {timestamp!r}")
                return None
            if published < cutoff_time:
                return None

        return Article(
            id=item_id,
            title=title,
            url=url,
            source=self.name,
            extra={
                'score': story.get('score', 0),
                'by': story.get('by'),
                'time': timestamp,
                'descendants': story.get('descendants', 0),
                'type': story.get('type')
            }
        )
