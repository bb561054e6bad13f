"""Source adapters for candidate articles."""

from .base import SourceAdapter, SourceFetchError
from .hacker_news import HackerNewsAdapter
from .reddit import RedditAdapter
from .multi_source import MultiSourceFetcher, build_adapters

__all__ = [
    'SourceAdapter',
    'SourceFetchError',
    'HackerNewsAdapter',
    'RedditAdapter',
    'MultiSourceFetcher',
    'build_adapters'
]
