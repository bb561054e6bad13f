"""Unit tests for source balancing."""

from hackem_news.models import Article
from hackem_news.processing import balance_sources


def scored(source, item_id, score):
    return Article(id=item_id, title=f"{source} {item_id}", url=f"https://{source}/{item_id}",
                   source=source, relevance_score=score)


class TestBalanceSources:
    """Test round-robin balancing across sources."""

    def test_single_source_is_returned_unchanged(self):
        articles = [scored('hackernews', str(i), s) for i, s in enumerate([0.6, 0.9, 0.7])]

        assert balance_sources(articles, max_results=2) == articles

    def test_dominant_source_is_interleaved(self):
        articles = [scored('hackernews', str(i), 0.9 - i * 0.01) for i in range(8)]
        articles.append(scored('reddit', 'a', 0.55))
        articles.append(scored('reddit', 'b', 0.52))

        balanced = balance_sources(articles, max_results=4)

        assert len(balanced) == 4
        assert [a.source for a in balanced].count('reddit') == 2
        assert [a.key for a in balanced] == ['hackernews:0', 'hackernews:1', 'reddit:a', 'reddit:b']

    def test_result_is_sorted_by_relevance(self):
        articles = [
            scored('hackernews', '1', 0.9),
            scored('hackernews', '2', 0.7),
            scored('reddit', 'a', 0.8),
            scored('reddit', 'b', 0.6)
        ]

        balanced = balance_sources(articles, max_results=3)

        assert [a.relevance_score for a in balanced] == [0.9, 0.8, 0.7]

    def test_exhausted_source_lets_others_fill(self):
        articles = [scored('reddit', 'a', 0.9)] + [scored('hackernews', str(i), 0.6) for i in range(5)]

        balanced = balance_sources(articles, max_results=4)

        assert len(balanced) == 4
        assert balanced[0].key == 'reddit:a'

    def test_fewer_articles_than_cap(self):
        articles = [scored('hackernews', '1', 0.7), scored('reddit', 'a', 0.8)]

        assert len(balance_sources(articles, max_results=10)) == 2

    def test_equal_scores_keep_pick_order(self):
        articles = [
            scored('reddit', 'a', 0.7),
            scored('hackernews', '1', 0.7),
            scored('reddit', 'b', 0.7)
        ]

        balanced = balance_sources(articles, max_results=3)

        # Sources take turns in order of first appearance
        assert [a.key for a in balanced] == ['reddit:a', 'hackernews:1', 'reddit:b']

    def test_empty_input(self):
        assert balance_sources([], max_results=5) == []
