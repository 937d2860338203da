"""
Overlap reconciliation between a suggestion and the text around the caret.

Models often echo the end of what the user already typed, or the start of
what follows the caret. These functions cut that duplicated text so that
before + suggestion + after reads naturally.

All searches are greedy: the longest possible overlap is tried first and the
first match wins.
"""

import re
from typing import Literal, Optional

_TRAILING_SPACE = re.compile(r"[\s\u00a0]+$")


def remove_overlap(source: str, target: str, direction: Literal["start", "end"]) -> str:
    """
    Drop the longest span of `source` that duplicates the start of `target`.

    direction="start" compares the head of source, "end" compares its tail.
    """
    for overlap in range(min(len(source), len(target)), 0, -1):
        source_slice = source[len(source) - overlap:] if direction == "end" else source[:overlap]
        if source_slice == target[:overlap]:
            return source[:len(source) - overlap] if direction == "end" else source[overlap:]
    return source


def trim_suggestion_overlap(prefix: str, suggestion: str, suffix: Optional[str] = None) -> str:
    """
    Reconcile one suggestion against the text before and after the caret.

    Examples:
        >>> trim_suggestion_overlap("次に実行結果を見て", "実行結果を見てみます")
        'みます'
        >>> trim_suggestion_overlap("We will ", "test this soon", "test this soon after launch")
        ''
    """
    if not suggestion:
        return suggestion

    trimmed = suggestion
    for overlap in range(min(len(prefix), len(suggestion)), 0, -1):
        if prefix[len(prefix) - overlap:] == suggestion[:overlap]:
            trimmed = suggestion[overlap:]
            break

    if not trimmed or not suffix:
        return trimmed

    without_leading = remove_overlap(trimmed, suffix, "start")
    if not without_leading:
        return without_leading
    return remove_overlap(without_leading, suffix, "end")


def sanitize_suggestion_text(text: str) -> str:
    """Strip trailing whitespace (including NBSP); whitespace-only becomes ''."""
    if not text:
        return ""
    without_trailing = _TRAILING_SPACE.sub("", text)
    if not without_trailing.strip():
        return ""
    return without_trailing


def trim_suggestions(prefix: str, suggestions: list[str], suffix: str = "") -> list[str]:
    """
    Reconcile and sanitize a batch of candidates.

    If reconciliation would remove every candidate, the sanitized originals
    are returned instead: a suggestion with a small duplication beats none.
    """
    trimmed = [
        cleaned
        for cleaned in (
            sanitize_suggestion_text(trim_suggestion_overlap(prefix, s, suffix))
            for s in suggestions
        )
        if cleaned
    ]
    if trimmed:
        return trimmed
    return [cleaned for cleaned in map(sanitize_suggestion_text, suggestions) if cleaned]
