"""Audience-targeted article summaries."""

from .cache import TTLCache
from .config import AudienceConfig
from .extractor import ContentExtractor
from .logger import get_logger
from .models import Article
from .providers.client import ReasoningClient
from .providers.exceptions import ProviderAPIError


SUMMARY_INSTRUCTIONS = """You are an assistant that generates concise summaries of articles for {audience} readers.
{audience_prompt}

Create a 2-3 sentence summary that explains the key points of this article and their relevance to {audience}.

If the article contains information genuinely relevant to {audience}, highlight these points specifically.

If the article has no clear relevance to {audience} after careful review, summarize it objectively without trying to force a connection."""

MAX_CONTENT_CHARS = 10000
HEAD_CHARS = 5000
TAIL_CHARS = 2000
TRUNCATION_MARKER = "\n\n[...Content truncated...]\n\n"


def truncate_middle(content: str, max_chars: int = MAX_CONTENT_CHARS) -> str:
    """Keep the lede and the conclusion of long bodies."""
    if len(content) <= max_chars:
        return content
    return content[:HEAD_CHARS] + TRUNCATION_MARKER + content[-TAIL_CHARS:]


class Summarizer:
    """Generates short summaries with the reasoning service."""

    def __init__(
        self,
        client: ReasoningClient,
        extractor: ContentExtractor,
        cache: TTLCache,
        audience: AudienceConfig,
        max_tokens: int = 150,
        temperature: float = 0.5
    ):
        """
        Initialize summarizer.

        Args:
            client: Reasoning service client
            extractor: Content extractor (its cache is shared with the relevance filter)
            cache: Per-article summary cache
            audience: Target audience description
            max_tokens: Maximum tokens per summary
            temperature: Sampling temperature
        """
        self.client = client
        self.extractor = extractor
        self.cache = cache
        self.audience = audience
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.logger = get_logger()

    def fallback_summary(self, article: Article) -> str:
        return (
            f'Summary for "{article.title}" is unavailable. This article may be relevant '
            f'to {self.audience.name} based on its title.'
        )

    async def summarize(self, article: Article) -> str:
        """
        Summarize one article. Never raises.

        Args:
            article: Article to summarize

        Returns:
            Summary text, or a fallback sentence naming the article title
        """
        cache_key = f"summary:{article.key}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        self.logger.info(f"Generating summary for article: {article.title}")

        extracted = await self.extractor.extract(article.url)
        if not extracted.ok:
            self.logger.warning(f"Failed to extract content for {article.url}: {extracted.error}")
            return self.fallback_summary(article)

        title = article.title
        if extracted.title and len(extracted.title) > len(title):
            title = extracted.title

        system_prompt = SUMMARY_INSTRUCTIONS.format(
            audience=self.audience.name,
            audience_prompt=self.audience.prompt.strip()
        )
        user_prompt = (
            f"Please summarize this article and explain why it's relevant to {self.audience.name}:\n"
            f"Title: {title}\n"
            f"URL: {article.url}\n\n"
            f"Article Content:\n{truncate_middle(extracted.content or 'No content available')}"
        )

        try:
            summary = await self.client.complete_text(
                system_prompt,
                user_prompt,
                max_tokens=self.max_tokens,
                temperature=self.temperature
            )
        except ProviderAPIError as e:
            self.logger.error(f"Error generating summary for article {article.key}: {e}")
            return self.fallback_summary(article)
        except Exception as e:
            self.logger.error(f"Unexpected error summarizing {article.key}: {e}", exc_info=True)
            return self.fallback_summary(article)

        self.logger.debug(f"Generated summary for \"{article.title}\": {summary[:40]}...")
        self.cache.set(cache_key, summary)
        return summary
