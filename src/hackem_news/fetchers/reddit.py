"""Reddit adapter for top posts of configured subreddits."""

from typing import Dict, List, Optional

import httpx

from ..cache import TTLCache
from ..config import RedditConfig
from ..models import Article
from .base import SourceAdapter, SourceFetchError


# Reddit blocks default client user agents
REDDIT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
                  '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'application/json,text/html;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Cache-Control': 'max-age=0'
}

MEDIA_HOSTS = ('i.redd.it', 'v.redd.it')


class RedditAdapter(SourceAdapter):
    """
    Fetches top posts from each configured subreddit.

    Posts linking directly to Reddit-hosted images or videos are skipped.
    Self posts are kept and point at their discussion permalink.
    """

    name = "reddit"

    def __init__(
        self,
        config: RedditConfig,
        cache: TTLCache,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize Reddit adapter.

        Args:
            config: RedditConfig with subreddits, item cap and time range
            cache: Cache for the fetched post list
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        super().__init__(cache, transport)
        self.config = config
        self.timeout = timeout
        self.base_url = config.base_url.rstrip('/')

    async def fetch_candidates(self) -> List[Article]:
        """
        Fetch top posts from all configured subreddits.

        Returns:
            List of Article objects from Reddit

        Raises:
            SourceFetchError: If every subreddit request fails
        """
        cache_key = "reddit:top_posts"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        posts = []
        failures = []

        for subreddit in self.config.subreddits:
            url = (
                f"{self.base_url}/r/{subreddit}/top/.json"
                f"?limit={self.config.max_items}&t={self.config.time_range}&raw_json=1"
            )
            self.logger.info(f"Fetching Reddit posts from: {url}")

            try:
                payload = await self._get_json(url, timeout=self.timeout, headers=REDDIT_HEADERS)
            except (httpx.HTTPError, ValueError) as e:
                self.logger.error(f"Error fetching posts from r/{subreddit}: {e}")
                failures.append(subreddit)
                continue

            children = self._children(payload)
            if children is None:
                self.logger.error(f"Invalid Reddit API response format for r/{subreddit}")
                failures.append(subreddit)
                continue

            self.logger.info(f"Fetched {len(children)} raw posts from r/{subreddit}")
            for child in children:
                article = self._parse_post(child, subreddit)
                if article:
                    posts.append(article)

        if self.config.subreddits and len(failures) == len(self.config.subreddits):
            raise SourceFetchError(f"All subreddit requests failed: {', '.join(failures)}")

        posts = self._dedupe(posts)
        self.logger.info(f"Found {len(posts)} valid Reddit posts")

        self.cache.set(cache_key, posts)
        return posts

    async def fetch_by_id(self, item_id: str) -> Optional[Article]:
        url = f"{self.base_url}/by_id/t3_{item_id}.json?raw_json=1"
        try:
            payload = await self._get_json(url, timeout=self.timeout, headers=REDDIT_HEADERS)
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Error fetching Reddit post {item_id}: {e}")
            return None

        for child in self._children(payload) or []:
            article = self._parse_post(child)
            if article:
                return article
        return None

    @staticmethod
    def _children(payload) -> Optional[List]:
        """Extract the post list from a Reddit listing, or None if malformed."""
        if not isinstance(payload, dict):
            return None
        data = payload.get('data')
        if not isinstance(data, dict) or not isinstance(data.get('children'), list):
            return None
        return data['children']

    def _parse_post(self, child: Dict, subreddit: str = None) -> Optional[Article]:
        """
        Parse one listing child into an Article.

        Returns:
            Article object or None if the post is malformed or filtered out
        """
        post = child.get('data') if isinstance(child, dict) else None
        if not isinstance(post, dict):
            return None

        post_id = post.get('id')
        title = post.get('title')
        if not post_id or not title:
            return None

        permalink = f"https://www.reddit.com{post['permalink']}" if post.get('permalink') else None
        url = post.get('url') or permalink
        if not isinstance(url, str) or not url:
            self.logger.debug(f"Post {post_id} filtered out: missing URL")
            return None

        if any(host in url for host in MEDIA_HOSTS):
            self.logger.debug(f"Post {post_id} filtered out: direct image/video URL ({url})")
            return None

        return Article(
            id=post_id,
            title=title,
            url=url,
            source=self.name,
            extra={
                'score': post.get('score', 0),
                'by': post.get('author'),
                'time': post.get('created_utc'),
                'subreddit': subreddit or post.get('subreddit'),
                'permalink': permalink,
                'num_comments': post.get('num_comments', 0)
            }
        )
