"""Two-stage relevance filtering with a language-model judge."""

import asyncio
import hashlib
import json
import math
from collections import defaultdict
from typing import Any, Dict, List, Optional

from ..cache import TTLCache
from ..config import ArticlesConfig, AudienceConfig
from ..extractor import ContentExtractor
from ..logger import get_logger
from ..models import Article, FilterResult, normalize_id
from ..providers.client import ReasoningClient
from .balancer import balance_sources


TRIAGE_INSTRUCTIONS = """You are an assistant that helps identify articles that might be relevant to {audience}.
{audience_prompt}

Return a JSON object with an "articles" array containing the IDs of articles that could be relevant to {audience} based on their titles.

Include articles about:
- Leadership and team management
- Technical decision making and architecture
- Engineering processes and methodologies
- Career development for engineers
- Communication and soft skills
- Managing technical projects
- Engineering culture and team dynamics

Be thorough but selective - include all potentially relevant articles but filter out those clearly unrelated to {audience}.

Return valid JSON that can be parsed, with no other text."""

SCORING_INSTRUCTIONS = """You are an assistant that helps filter and rank articles based on their relevance to {audience}.
{audience_prompt}
Return a JSON object with an "articles" array containing objects with "id" and "relevanceScore" properties.
The relevanceScore should be a number between 0 and 1 indicating how relevant the article is to {audience}.
Only include articles that are at least somewhat relevant to {audience}.
Rank the articles by relevanceScore, with the most relevant first.
Return valid JSON that can be parsed, with no other text."""


def candidate_fingerprint(articles: List[Article]) -> str:
    """Stable digest of a candidate set, independent of ordering."""
    digest = hashlib.sha1('\n'.join(sorted(a.key for a in articles)).encode('utf-8'))
    return digest.hexdigest()


def coerce_score(value: Any) -> Optional[float]:
    """Return the score as a float in [0, 1], or None if it is not one."""
    if isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(score) or not (0.0 <= score <= 1.0):
        return None
    return score


class CandidateIndex:
    """
    Resolves ids echoed back by the judge to the candidate articles.

    Ids are sent as "<source>:<id>". A reply may drop the prefix or turn a
    numeric id into a number; a bare id is only accepted when exactly one
    source has it.
    """

    def __init__(self, articles: List[Article]):
        self.by_key: Dict[str, Article] = {}
        self.by_id: Dict[str, List[Article]] = defaultdict(list)
        for article in articles:
            if article.key in self.by_key:
                continue
            self.by_key[article.key] = article
            self.by_id[article.id].append(article)

    def resolve(self, raw_id: Any) -> Optional[Article]:
        if raw_id is None or isinstance(raw_id, (dict, list)):
            return None
        ref = normalize_id(raw_id)
        if ref in self.by_key:
            return self.by_key[ref]
        matches = self.by_id.get(ref, [])
        if len(matches) == 1:
            return matches[0]
        return None


class RelevanceFilter:
    """Triage by title, score with content previews, threshold, then balance sources."""

    def __init__(
        self,
        client: ReasoningClient,
        extractor: ContentExtractor,
        cache: TTLCache,
        articles_config: ArticlesConfig,
        audience: AudienceConfig
    ):
        """
        Initialize relevance filter.

        Args:
            client: Reasoning service client
            extractor: Content extractor for the scoring stage
            cache: Cache for filter results keyed by candidate set
            articles_config: Result cap, threshold and fallback score
            audience: Target audience description
        """
        self.client = client
        self.extractor = extractor
        self.cache = cache
        self.config = articles_config
        self.audience = audience
        self.logger = get_logger()

    async def filter(self, articles: List[Article]) -> FilterResult:
        """
        Select the articles most relevant to the target audience.

        Args:
            articles: Unfiltered candidates pooled across all sources

        Returns:
            FilterResult with scored, thresholded and balanced articles, or a
            fallback slice of the input when the judge is unusable
        """
        if not articles:
            return FilterResult([], FilterResult.NO_INPUT)

        cache_key = f"filtered:{candidate_fingerprint(articles)}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            self.logger.info(f"Using cached filter result ({cached.mode})")
            return cached

        self.logger.info(f"Processing {len(articles)} articles for {self.audience.name} relevance")
        index = CandidateIndex(articles)

        # Stage 1: title triage
        triage = await self.client.complete_json(
            self._system_prompt(TRIAGE_INSTRUCTIONS),
            "Here's a list of articles. Please identify which ones might be relevant "
            f"to {self.audience.name} based on their titles:\n"
            + json.dumps([self._basic_payload(a) for a in articles], indent=2)
        )
        triage_ids = triage.articles()
        if triage_ids is None:
            return self._error_fallback(articles, triage.error or "missing 'articles' list in triage response")

        self.logger.info(f"Initial filtering identified {len(triage_ids)} potential candidates")
        if not triage_ids:
            result = FilterResult([], FilterResult.TRIAGE_EMPTY)
            self.cache.set(cache_key, result)
            return result

        candidates = self._resolve_candidates(index, triage_ids)
        if not candidates:
            self.logger.warning("None of the triage ids matched a known article")
            return self._unscored_fallback(articles, cache_key)

        # Stage 2: content-aware scoring
        previews = await asyncio.gather(*[self._preview_payload(a) for a in candidates])
        scoring = await self.client.complete_json(
            self._system_prompt(SCORING_INSTRUCTIONS),
            "Here's a list of articles with their content previews. Please filter and rank "
            f"them based on their relevance to {self.audience.name}:\n"
            + json.dumps(previews, indent=2)
        )
        scored_items = scoring.articles()
        if scored_items is None:
            return self._error_fallback(articles, scoring.error or "missing 'articles' list in scoring response")

        relevant = self._apply_scores(index, scored_items)
        self.logger.info(
            f"Found {len(relevant)} articles with relevance score >= {self.config.min_relevance_score}"
        )

        if not relevant:
            return self._unscored_fallback(articles, cache_key)

        balanced = balance_sources(relevant, self.config.max_results)
        self.logger.info(f"After balancing sources, selected {len(balanced)} articles")

        result = FilterResult(balanced, FilterResult.SCORED)
        self.cache.set(cache_key, result)
        return result

    def _system_prompt(self, template: str) -> str:
        return template.format(audience=self.audience.name, audience_prompt=self.audience.prompt.strip())

    @staticmethod
    def _basic_payload(article: Article) -> Dict[str, str]:
        return {'id': article.key, 'title': article.title, 'url': article.url}

    async def _preview_payload(self, article: Article) -> Dict[str, str]:
        extracted = await self.extractor.extract(article.url)
        payload = self._basic_payload(article)
        payload['contentPreview'] = extracted.content[:self.config.preview_chars]
        return payload

    def _resolve_candidates(self, index: CandidateIndex, raw_ids: List[Any]) -> List[Article]:
        candidates = []
        seen = set()
        for raw_id in raw_ids:
            # Some replies wrap ids as {"id": ...}
            if isinstance(raw_id, dict):
                raw_id = raw_id.get('id')
            article = index.resolve(raw_id)
            if article is None:
                self.logger.info(f"No matching article found for triage id={raw_id!r}")
                continue
            if article.key not in seen:
                seen.add(article.key)
                candidates.append(article)
        return candidates

    def _apply_scores(self, index: CandidateIndex, items: List[Any]) -> List[Article]:
        relevant = []
        seen = set()
        for item in items:
            if not isinstance(item, dict):
                self.logger.debug(f"Skipping malformed scoring entry: {item!r}")
                continue

            article = index.resolve(item.get('id'))
            if article is None:
                self.logger.info(f"No matching article found for id={item.get('id')!r}")
                continue

            score = coerce_score(item.get('relevanceScore'))
            if score is None:
                self.logger.debug(f"Skipping {article.key}: invalid relevanceScore {item.get('relevanceScore')!r}")
                continue

            # The first valid score for an article wins
            if article.key in seen:
                continue
            seen.add(article.key)
            if score < self.config.min_relevance_score:
                continue
            relevant.append(article.with_score(score))
        return relevant

    def _fallback_slice(self, articles: List[Article]) -> List[Article]:
        return [a.with_score(self.config.fallback_score) for a in articles[:self.config.max_results]]

    def _unscored_fallback(self, articles: List[Article], cache_key: str) -> FilterResult:
        # Policy: an over-strict judge still yields a result set
        self.logger.warning(
            f"No relevant articles found, using first {self.config.max_results} as fallback"
        )
        result = FilterResult(self._fallback_slice(articles), FilterResult.FALLBACK_UNSCORED)
        self.cache.set(cache_key, result)
        return result

    def _error_fallback(self, articles: List[Article], reason: str) -> FilterResult:
        self.logger.error(
            f"Relevance filtering failed ({reason}); returning first "
            f"{self.config.max_results} articles unfiltered"
        )
        return FilterResult(self._fallback_slice(articles), FilterResult.FALLBACK_ERROR)
