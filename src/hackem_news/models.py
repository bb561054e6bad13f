"""Data models for HackEM News."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


# Keys owned by the core; adapter extras may never shadow them on the wire
CORE_FIELDS = ('id', 'title', 'url', 'source', 'relevanceScore', 'summary')


def normalize_id(raw_id: Any) -> str:
    """
    Coerce an item id to its canonical string form.

    Hacker News ids are integers, Reddit ids are base36 strings and the
    reasoning service may echo either back as a number or a string.
    """
    if isinstance(raw_id, bool):
        return str(raw_id)
    if isinstance(raw_id, float) and raw_id.is_integer():
        raw_id = int(raw_id)
    return str(raw_id).strip()


@dataclass
class Article:
    """A candidate article produced by a source adapter."""
    id: str
    title: str
    url: str
    source: str
    relevance_score: Optional[float] = None
    summary: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.id = normalize_id(self.id)

    @property
    def key(self) -> str:
        """Identity of the article across all sources."""
        return f"{self.source}:{self.id}"

    def with_score(self, score: float) -> 'Article':
        """Return a copy carrying a relevance score."""
        return replace(self, relevance_score=score, extra=dict(self.extra))

    def with_summary(self, summary: str) -> 'Article':
        """Return a copy carrying a summary."""
        return replace(self, summary=summary, extra=dict(self.extra))

    def to_dict(self) -> dict:
        """Convert article to the JSON shape served by the API."""
        data = {k: v for k, v in self.extra.items() if k not in CORE_FIELDS}
        data.update({
            'id': self.id,
            'title': self.title,
            'url': self.url,
            'source': self.source,
        })
        if self.relevance_score is not None:
            data['relevanceScore'] = self.relevance_score
        if self.summary is not None:
            data['summary'] = self.summary
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Article':
        """Create Article from its API dictionary."""
        extra = {k: v for k, v in data.items() if k not in CORE_FIELDS}
        return cls(
            id=data['id'],
            title=data.get('title', ''),
            url=data['url'],
            source=data['source'],
            relevance_score=data.get('relevanceScore'),
            summary=data.get('summary'),
            extra=extra
        )


@dataclass
class ExtractedContent:
    """Plain-text rendition of a web page."""
    title: str
    content: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, reason: str) -> 'ExtractedContent':
        """Sentinel returned when a page cannot be fetched or parsed."""
        return cls(title='', content=f"Failed to extract content: {reason}", error=reason)


@dataclass
class FilterResult:
    """Output of the relevance filter and how it was produced."""
    articles: List[Article]
    mode: str  # "scored", "triage_empty", "fallback_unscored", "fallback_error", "no_input"

    SCORED = "scored"
    TRIAGE_EMPTY = "triage_empty"
    FALLBACK_UNSCORED = "fallback_unscored"
    FALLBACK_ERROR = "fallback_error"
    NO_INPUT = "no_input"

    @property
    def degraded(self) -> bool:
        """True when the reasoning service could not be consulted."""
        return self.mode == self.FALLBACK_ERROR
