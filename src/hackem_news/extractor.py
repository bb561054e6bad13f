"""Article page download and plain-text extraction."""

import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from .cache import TTLCache
from .config import RequestsConfig
from .logger import get_logger
from .models import ExtractedContent


# Headers to mimic a browser request
BROWSER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
                  '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Cache-Control': 'max-age=0'
}

NON_CONTENT_SELECTORS = (
    'script, style, nav, footer, iframe, svg, form, button, input, noscript, '
    'img, picture, video, audio, [role="banner"], [role="navigation"]'
)

BLOCK_TAGS = ('p', 'div', 'br', 'li', 'tr', 'section', 'article', 'blockquote', 'pre',
              'h1', 'h2', 'h3', 'h4', 'h5', 'h6')

_BLANK_RUNS = re.compile(r'\n\s*\n+')
_SPACES = re.compile(r'[ \t\xa0]+')


class ContentTooLargeError(Exception):
    """Raised when a page body exceeds the configured byte limit."""
    pass


class ContentExtractor:
    """Downloads pages and reduces them to title plus plain text."""

    def __init__(
        self,
        config: RequestsConfig,
        cache: TTLCache,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize content extractor.

        Args:
            config: Download timeout and size limits
            cache: Per-URL cache for successful extractions
            transport: Optional httpx transport (used by tests)
        """
        self.config = config
        self.cache = cache
        self.transport = transport
        self.logger = get_logger()

    async def extract(self, url: str) -> ExtractedContent:
        """
        Extract the readable text of a page. Never raises.

        Args:
            url: Page URL

        Returns:
            ExtractedContent; on failure a sentinel with an empty title and
            the failure reason in `content`
        """
        cache_key = f"content:{url}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            self.logger.debug(f"Downloading content from: {url}")
            html = await self._download(url)
            result = self._parse(html)
        except Exception as e:
            self.logger.warning(f"Error extracting content from {url}: {e}")
            return ExtractedContent.failed(str(e) or type(e).__name__)

        self.cache.set(cache_key, result)
        self.logger.debug(f"Extracted {len(result.content)} chars of content from {url}")
        return result

    async def _download(self, url: str) -> str:
        """
        Stream the page body, aborting once it exceeds the byte limit.

        Raises:
            httpx.HTTPError: If the request fails or returns a non-2xx status
            ContentTooLargeError: If the body is larger than allowed
        """
        limit = self.config.max_content_length

        async with httpx.AsyncClient(
            timeout=self.config.timeout,
            headers=BROWSER_HEADERS,
            follow_redirects=True,
            transport=self.transport
        ) as client:
            async with client.stream('GET', url) as response:
                response.raise_for_status()

                declared = response.headers.get('content-length')
                if declared and declared.isdigit() and int(declared) > limit:
                    raise ContentTooLargeError(f"content length {declared} exceeds {limit} bytes")

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > limit:
                        raise ContentTooLargeError(f"content exceeds {limit} bytes")

                encoding = response.encoding or 'utf-8'

        return body.decode(encoding, errors='replace')

    def _parse(self, html: str) -> ExtractedContent:
        soup = BeautifulSoup(html, 'html.parser')

        title = soup.title.get_text(strip=True) if soup.title else ''

        for element in soup.select(NON_CONTENT_SELECTORS):
            element.decompose()

        root = soup.body or soup
        for block in root.find_all(BLOCK_TAGS):
            block.insert_after('\n')
        text = root.get_text()

        lines = [_SPACES.sub(' ', line).strip() for line in text.splitlines()]
        text = _BLANK_RUNS.sub('\n\n', '\n'.join(lines)).strip()

        # Bounds downstream token usage (roughly 3000 tokens)
        return ExtractedContent(title=title, content=text[:self.config.content_char_limit])
