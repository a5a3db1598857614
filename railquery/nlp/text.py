"""Input normalization for the extractor."""

from __future__ import annotations

import re
import unicodedata
from typing import Any

from ..domain.models import RawQuery

MAX_QUERY_LENGTH = 500

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_WHITESPACE = re.compile(r"\s+")


def normalize_query(text: Any, max_length: int = MAX_QUERY_LENGTH) -> RawQuery:
    """Build the RawQuery used by every rule.

    Non-text input yields an empty query. Full-width digits and
    punctuation are folded by NFKC, so "８：３０" reads as "8:30".

    Parameters
    ----------
    text:
        Whatever the caller received.
    max_length:
        Bound on the normalized length; longer text is truncated.
    """
    if not isinstance(text, str):
        return RawQuery(original="", normalized="")

    cleaned = unicodedata.normalize("NFKC", text)
    # Whitespace controls (tab, newline) separate words; the rest are dropped
    cleaned = _WHITESPACE.sub(" ", cleaned)
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()

    truncated = len(cleaned) > max_length
    if truncated:
        cleaned = cleaned[:max_length]

    return RawQuery(original=text, normalized=cleaned, truncated=truncated)
