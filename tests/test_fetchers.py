"""Unit tests for source adapters and the multi-source fetcher."""

import time
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from hackem_news.cache import TTLCache
from hackem_news.config import HackerNewsConfig, RedditConfig
from hackem_news.fetchers.base import SourceAdapter, SourceFetchError
from hackem_news.fetchers.hacker_news import HackerNewsAdapter
from hackem_news.fetchers.multi_source import MultiSourceFetcher
from hackem_news.fetchers.reddit import RedditAdapter
from hackem_news.models import Article


def hn_transport(top_ids, items, failing_ids=()):
    """Serve topstories.json and item/<id>.json from in-memory data."""
    calls = []

    def handler(request):
        calls.append(request.url.path)
        path = request.url.path
        if path.endswith('/topstories.json'):
            return httpx.Response(200, json=top_ids)
        item_id = path.rsplit('/', 1)[-1][:-len('.json')]
        if item_id in failing_ids:
            return httpx.Response(500)
        if item_id not in items:
            return httpx.Response(200, content=b'null')
        return httpx.Response(200, json=items[item_id])

    transport = httpx.MockTransport(handler)
    transport.calls = calls
    return transport


def story(item_id, **overrides):
    data = {
        'id': item_id,
        'type': 'story',
        'title': f'Story {item_id}',
        'url': f'https://example.com/{item_id}',
        'score': 100,
        'by': 'someone',
        'time': 1700000000,
        'descendants': 12
    }
    data.update(overrides)
    return data


def reddit_listing(*posts):
    return {'kind': 'Listing', 'data': {'children': [{'kind': 't3', 'data': p} for p in posts]}}


def reddit_post(post_id, **overrides):
    data = {
        'id': post_id,
        'title': f'Post {post_id}',
        'url': f'https://blog.example.com/{post_id}',
        'permalink': f'/r/EngineeringManagers/comments/{post_id}/post/',
        'score': 42,
        'author': 'em_person',
        'created_utc': 1700000000,
        'num_comments': 7
    }
    data.update(overrides)
    return data


class TestHackerNewsAdapter:
    """Test the Hacker News adapter."""

    @pytest.fixture
    def cache(self):
        return TTLCache("sources", ttl_seconds=3600)

    @pytest.mark.asyncio
    async def test_keeps_only_linked_stories(self, cache):
        items = {
            '1': story(1),
            '2': story(2, type='job'),
            '3': story(3, url=None),
            '4': story(4, dead=True),
            '5': story(5)
        }
        adapter = HackerNewsAdapter(HackerNewsConfig(), cache, transport=hn_transport([1, 2, 3, 4, 5], items))

        articles = await adapter.fetch_candidates()

        assert [a.id for a in articles] == ['1', '5']
        assert all(a.source == 'hackernews' for a in articles)
        assert articles[0].extra['score'] == 100
        assert articles[0].extra['by'] == 'someone'

    @pytest.mark.asyncio
    async def test_failed_items_are_skipped(self, cache):
        items = {'1': story(1), '2': story(2)}
        transport = hn_transport([1, 2, 3], items, failing_ids=('2',))
        adapter = HackerNewsAdapter(HackerNewsConfig(), cache, transport=transport)

        articles = await adapter.fetch_candidates()

        assert [a.id for a in articles] == ['1']

    @pytest.mark.asyncio
    async def test_respects_max_items(self, cache):
        items = {str(i): story(i) for i in range(1, 6)}
        adapter = HackerNewsAdapter(
            HackerNewsConfig(max_items=2), cache, transport=hn_transport([1, 2, 3, 4, 5], items)
        )

        articles = await adapter.fetch_candidates()

        assert [a.id for a in articles] == ['1', '2']

    @pytest.mark.asyncio
    async def test_top_stories_failure_raises(self, cache):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        adapter = HackerNewsAdapter(HackerNewsConfig(), cache, transport=transport)

        with pytest.raises(SourceFetchError):
            await adapter.fetch_candidates()

    @pytest.mark.asyncio
    async def test_duplicate_ids_are_dropped(self, cache):
        items = {'1': story(1)}
        adapter = HackerNewsAdapter(HackerNewsConfig(), cache, transport=hn_transport([1, 1], items))

        articles = await adapter.fetch_candidates()

        assert len(articles) == 1

    @pytest.mark.asyncio
    async def test_responses_are_cached(self, cache):
        items = {'1': story(1)}
        transport = hn_transport([1], items)
        adapter = HackerNewsAdapter(HackerNewsConfig(), cache, transport=transport)

        await adapter.fetch_candidates()
        await adapter.fetch_candidates()

        assert len(transport.calls) == 2
        assert cache.has("hackernews:top_stories")
        assert cache.has("hackernews:item:1")

    @pytest.mark.asyncio
    async def test_fetch_by_id(self, cache):
        items = {'7': story(7), '8': story(8, type='poll')}
        adapter = HackerNewsAdapter(HackerNewsConfig(), cache, transport=hn_transport([], items))

        article = await adapter.fetch_by_id('7')

        assert article.id == '7'
        assert article.url == 'https://example.com/7'
        assert await adapter.fetch_by_id('8') is None
        assert await adapter.fetch_by_id('9') is None

    @pytest.mark.asyncio
    async def test_out_of_range_time_skips_only_that_story(self, cache):
        now = int(time.time())
        items = {'1': story(1, time=now), '2': story(2, time=10 ** 20), '3': story(3, time=now)}
        adapter = HackerNewsAdapter(
            HackerNewsConfig(max_age_hours=24), cache, transport=hn_transport([1, 2, 3], items)
        )

        articles = await adapter.fetch_candidates()

        assert [a.id for a in articles] == ['1', '3']

    @pytest.mark.asyncio
    async def test_stale_and_non_string_url_stories_are_skipped(self, cache):
        now = int(time.time())
        items = {
            '1': story(1, time=now),
            '2': story(2, time=now - 3 * 86400),
            '3': story(3, time=now, url=12345)
        }
        adapter = HackerNewsAdapter(
            HackerNewsConfig(max_age_hours=24), cache, transport=hn_transport([1, 2, 3], items)
        )

        articles = await adapter.fetch_candidates()

        assert [a.id for a in articles] == ['1']


class TestRedditAdapter:
    """Test the Reddit adapter."""

    @pytest.fixture
    def cache(self):
        return TTLCache("sources", ttl_seconds=3600)

    @pytest.mark.asyncio
    async def test_filters_media_posts(self, cache):
        listing = reddit_listing(
            reddit_post('a'),
            reddit_post('b', url='https://i.redd.it/cat.png'),
            reddit_post('c', url='https://v.redd.it/clip'),
            reddit_post('d', url='')
        )
        adapter = RedditAdapter(RedditConfig(), cache)
        adapter._get_json = AsyncMock(return_value=listing)

        posts = await adapter.fetch_candidates()

        assert [p.id for p in posts] == ['a', 'd']
        # Self posts without a url point at their discussion
        assert posts[1].url == 'https://www.reddit.com/r/EngineeringManagers/comments/d/post/'
        assert posts[0].extra['subreddit'] == 'EngineeringManagers'
        assert posts[0].extra['by'] == 'em_person'

    @pytest.mark.asyncio
    async def test_builds_listing_url(self, cache):
        config = RedditConfig(subreddits=['ExperiencedDevs'], max_items=25, time_range='day')
        adapter = RedditAdapter(config, cache)
        adapter._get_json = AsyncMock(return_value=reddit_listing())

        await adapter.fetch_candidates()

        url = adapter._get_json.call_args[0][0]
        assert url == 'https://www.reddit.com/r/ExperiencedDevs/top/.json?limit=25&t=day&raw_json=1'

    @pytest.mark.asyncio
    async def test_one_subreddit_failing_keeps_the_others(self, cache):
        config = RedditConfig(subreddits=['EngineeringManagers', 'ExperiencedDevs'])
        adapter = RedditAdapter(config, cache)
        adapter._get_json = AsyncMock(side_effect=[
            httpx.ConnectError("connection refused"),
            reddit_listing(reddit_post('x'))
        ])

        posts = await adapter.fetch_candidates()

        assert [p.id for p in posts] == ['x']
        assert posts[0].extra['subreddit'] == 'ExperiencedDevs'

    @pytest.mark.asyncio
    async def test_all_subreddits_failing_raises(self, cache):
        adapter = RedditAdapter(RedditConfig(), cache)
        adapter._get_json = AsyncMock(return_value={'error': 429})

        with pytest.raises(SourceFetchError):
            await adapter.fetch_candidates()

        assert not cache.has("reddit:top_posts")

    @pytest.mark.asyncio
    async def test_result_is_cached(self, cache):
        adapter = RedditAdapter(RedditConfig(), cache)
        adapter._get_json = AsyncMock(return_value=reddit_listing(reddit_post('a')))

        first = await adapter.fetch_candidates()
        second = await adapter.fetch_candidates()

        assert first == second
        assert adapter._get_json.call_count == 1

    @pytest.mark.asyncio
    async def test_over_http_with_mock_transport(self, cache):
        def handler(request):
            assert request.headers['User-Agent'].startswith('Mozilla/5.0')
            return httpx.Response(200, json=reddit_listing(reddit_post('z')))

        adapter = RedditAdapter(RedditConfig(), cache, transport=httpx.MockTransport(handler))

        posts = await adapter.fetch_candidates()

        assert [p.key for p in posts] == ['reddit:z']

    @pytest.mark.asyncio
    async def test_fetch_by_id(self, cache):
        adapter = RedditAdapter(RedditConfig(), cache)
        adapter._get_json = AsyncMock(return_value=reddit_listing(reddit_post('q1', subreddit='EngineeringManagers')))

        article = await adapter.fetch_by_id('q1')

        assert article.id == 'q1'
        assert article.extra['subreddit'] == 'EngineeringManagers'
        assert adapter._get_json.call_args[0][0] == 'https://www.reddit.com/by_id/t3_q1.json?raw_json=1'

    @pytest.mark.asyncio
    async def test_wrongly_typed_url_skips_only_that_post(self, cache):
        adapter = RedditAdapter(RedditConfig(), cache)
        adapter._get_json = AsyncMock(return_value=reddit_listing(
            reddit_post('a', url='https://x.example/a'),
            reddit_post('b', url=12345, permalink=None),
            reddit_post('c', url=['https://x.example/c'], permalink=None)
        ))

        posts = await MultiSourceFetcher({'reddit': adapter}).fetch_all()

        assert [p.id for p in posts] == ['a']


class TestMultiSourceFetcher:
    """Test combining adapters."""

    def _adapter(self, name, articles=None, error=None):
        adapter = Mock(spec=SourceAdapter)
        adapter.name = name
        adapter.fetch_candidates = AsyncMock(return_value=articles or [], side_effect=error)
        return adapter

    @pytest.mark.asyncio
    async def test_combines_in_adapter_order(self):
        hn = [Article(id='1', title='A', url='https://a', source='hackernews')]
        rd = [Article(id='x', title='B', url='https://b', source='reddit')]
        fetcher = MultiSourceFetcher({
            'reddit': self._adapter('reddit', rd),
            'hackernews': self._adapter('hackernews', hn)
        })

        articles = await fetcher.fetch_all()

        assert [a.key for a in articles] == ['reddit:x', 'hackernews:1']

    @pytest.mark.asyncio
    async def test_failing_source_contributes_nothing(self):
        hn = [Article(id=str(i), title=f'T{i}', url=f'https://a/{i}', source='hackernews') for i in range(4)]
        fetcher = MultiSourceFetcher({
            'hackernews': self._adapter('hackernews', hn),
            'reddit': self._adapter('reddit', error=SourceFetchError("unreachable"))
        })

        articles = await fetcher.fetch_all()

        assert len(articles) == 4
        assert all(a.source == 'hackernews' for a in articles)

    @pytest.mark.asyncio
    async def test_drops_articles_without_url(self):
        articles = [
            Article(id='1', title='A', url='https://a', source='hackernews'),
            Article(id='2', title='B', url='', source='hackernews')
        ]
        fetcher = MultiSourceFetcher({'hackernews': self._adapter('hackernews', articles)})

        assert [a.id for a in await fetcher.fetch_all()] == ['1']
