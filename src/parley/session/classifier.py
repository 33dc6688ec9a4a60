"""Response classification.

Splits raw completion text into plain text or an embedded code sample.
Only the first fenced block counts; prose around it is dropped from the
classified content.
"""

import re
from dataclasses import dataclass

from .models import ContentType

FENCED_BLOCK = re.compile(r"```(\w+)?\n([\s\S]*?)```")

# Order matters: the first matching language wins.
LANGUAGE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("python", re.compile(r"\b(def|import|class|print)\b")),
    ("javascript", re.compile(r"\b(function|const|let|var|console)\b")),
    ("html", re.compile(r"<[^>]*>")),
    ("css", re.compile(r"\{[^}]*\}")),
    ("sql", re.compile(r"\b(SELECT|INSERT|UPDATE|DELETE|FROM|WHERE)\b", re.IGNORECASE)),
]

FALLBACK_LANGUAGE = "text"


@dataclass(frozen=True)
class Classification:
    """Result of classifying one completion."""

    content_type: ContentType
    content: str
    language: str | None = None


def detect_language(code: str) -> str:
    """Guess the language of an untagged code block."""
    for language, pattern in LANGUAGE_PATTERNS:
        if pattern.search(code):
            return language
    return FALLBACK_LANGUAGE


def classify(raw: str) -> Classification:
    """Classify raw completion text.

    Args:
        raw: Text exactly as returned by the completion API

    Returns:
        Code classification with the first block's trimmed body and its
        language, or a text classification carrying ``raw`` unchanged
    """
    match = FENCED_BLOCK.search(raw)
    if match is None:
        return Classification(content_type=ContentType.TEXT, content=raw)

    tag, body = match.group(1), match.group(2)
    return Classification(
        content_type=ContentType.CODE,
        content=body.strip(),
        language=tag or detect_language(body),
    )
