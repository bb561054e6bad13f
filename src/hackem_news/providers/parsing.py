"""Tolerant parsing of reasoning service responses."""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


@dataclass
class ParsedResponse:
    """Either a decoded JSON object or the reason it could not be decoded."""
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def articles(self) -> Optional[List[Any]]:
        """The `articles` list, or None when absent or not a list."""
        if not self.ok:
            return None
        value = self.data.get("articles")
        return value if isinstance(value, list) else None


def parse_json_response(raw: Optional[str]) -> ParsedResponse:
    """
    Decode a JSON object from raw model output without raising.

    Markdown code fences around the object are tolerated; anything else that
    is not a JSON object is reported as an error.
    """
    if raw is None or not raw.strip():
        return ParsedResponse(error="empty response")

    text = raw.strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except ValueError as e:
        return ParsedResponse(error=f"invalid JSON: {e}")

    if not isinstance(data, dict):
        return ParsedResponse(error=f"expected a JSON object, got {type(data).__name__}")

    return ParsedResponse(data=data)
