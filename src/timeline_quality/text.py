"""
Small text helpers shared by the extractors and the conflict detector.
"""

import re
from typing import Iterable, Optional

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s")


def normalize_whitespace(value: str) -> str:
    """Collapse runs of whitespace and trim."""
    return _WHITESPACE_RE.sub(" ", value).strip()


def first_sentence(text: Optional[str]) -> str:
    """
    Return the first sentence of ``text``.

    A sentence ends at the first '.', '!' or '?' that is followed by
    whitespace. Text without such a boundary is returned whole.
    """
    if not text:
        return ""
    normalized = normalize_whitespace(text)
    if not normalized:
        return ""
    return _SENTENCE_SPLIT_RE.split(normalized, maxsplit=1)[0].strip()


def normalize_text(value: str) -> str:
    """Lower-case, replace non-alphanumerics with spaces, collapse whitespace."""
    return normalize_whitespace(_NON_ALNUM_RE.sub(" ", value.lower()))


def join_non_blank(values: Iterable[Optional[str]], sep: str = " ") -> str:
    return sep.join(v for v in values if isinstance(v, str) and v.strip())


def evidence_snippet(text: str, token: str) -> str:
    """
    Cut a short window of ``text`` around the first occurrence of ``token``.

    Keeps 30 characters before and 80 after the match. Falls back to the
    first 200 characters when the token is empty or not found.
    """
    if not token:
        return text[:200]
    index = text.lower().find(token.lower())
    if index == -1:
        return text[:200]
    start = max(0, index - 30)
    end = min(len(text), index + len(token) + 80)
    return text[start:end].strip()
