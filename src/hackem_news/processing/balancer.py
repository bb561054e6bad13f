"""Round-robin balancing of articles across sources."""

from collections import OrderedDict
from typing import Dict, List

from ..logger import get_logger
from ..models import Article


logger = get_logger()


def _score(article: Article) -> float:
    return article.relevance_score or 0.0


def _count_by_source(articles: List[Article]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for article in articles:
        counts[article.source] = counts.get(article.source, 0) + 1
    return counts


def balance_sources(articles: List[Article], max_results: int) -> List[Article]:
    """
    Interleave articles so that no single source dominates the result.

    Sources take turns in order of first appearance, each contributing its
    most relevant remaining article, until `max_results` articles are picked
    or every source is exhausted. The picks are then re-sorted by relevance;
    equal scores keep their pick order.

    Args:
        articles: Scored articles from one or more sources
        max_results: Maximum number of articles to select

    Returns:
        Balanced list of articles
    """
    groups: "OrderedDict[str, List[Article]]" = OrderedDict()
    for article in articles:
        groups.setdefault(article.source, []).append(article)

    logger.info(
        "Article count by source: "
        + ', '.join(f"{source}: {len(group)}" for source, group in groups.items())
    )

    if len(groups) <= 1:
        logger.info("Only one source found, skipping balancing")
        return list(articles)

    queues = [sorted(group, key=_score, reverse=True) for group in groups.values()]
    positions = [0] * len(queues)

    balanced: List[Article] = []
    while len(balanced) < max_results:
        picked_this_round = False
        for index, queue in enumerate(queues):
            if len(balanced) >= max_results:
                break
            if positions[index] >= len(queue):
                continue
            balanced.append(queue[positions[index]])
            positions[index] += 1
            picked_this_round = True
        if not picked_this_round:
            break

    balanced.sort(key=_score, reverse=True)

    logger.info(
        "Final balanced articles by source: "
        + ', '.join(f"{source}: {count}" for source, count in _count_by_source(balanced).items())
    )
    return balanced
