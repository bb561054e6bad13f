"""Processing package for relevance filtering and source balancing."""

from .balancer import balance_sources
from .relevance_filter import RelevanceFilter

__all__ = ['balance_sources', 'RelevanceFilter']
