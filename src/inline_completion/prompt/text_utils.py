"""
Text processing utilities for prompt assembly.

Sentence/paragraph extraction around the caret, whitespace normalization and
length control for page context before it reaches the model.
"""

import math
import re

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?。！？])")
_WHITESPACE = re.compile(r"\s+")
# CJK terminators need no trailing space
_SENTENCE_END = re.compile(r"[.!?](?:\s|$)|[。！？]")


def normalize_whitespace(value: str) -> str:
    """Collapse runs of whitespace to one space and trim."""
    return _WHITESPACE.sub(" ", value).strip()


def split_sentences(text: str) -> list[str]:
    """
    Split after sentence-ending punctuation (Latin and CJK).

    Examples:
        >>> split_sentences("Hi there. How are you?")
        ['Hi there.', 'How are you?']
        >>> split_sentences("今日は晴れ。明日は雨？")
        ['今日は晴れ。', '明日は雨？']
    """
    trimmed = text.strip()
    if not trimmed:
        return []
    return [part.strip() for part in _SENTENCE_SPLIT.split(trimmed) if part.strip()]


def extract_sentence(text: str, caret: int) -> str:
    """
    Sentence containing the caret.

    Starts after the last period before the caret (ignoring one directly at
    the caret) or at the last newline; ends at the next period or newline.
    """
    before = text[:caret]
    after = text[caret:]
    start = before.rfind(".", 0, max(0, len(before) - 2) + 1)
    period = after.find(".")
    end_rel = period + 1 if period >= 0 else 0
    start_idx = start + 1 if start >= 0 else max(0, before.rfind("\n"))
    if end_rel > 0:
        end_idx = caret + end_rel
    else:
        newline = after.find("\n")
        end_idx = caret + (newline if newline >= 0 else 0)
    return text[start_idx:end_idx if end_idx > start_idx else caret].strip()


def extract_paragraph(text: str, caret: int) -> str:
    """Paragraph (blank-line delimited) containing the caret."""
    before = text[:caret]
    after = text[caret:]
    start_idx = max(0, before.rfind("\n\n"))
    end_rel = after.find("\n\n")
    end_idx = caret + end_rel if end_rel >= 0 else len(text)
    return text[start_idx:end_idx].strip()


def slice_context_around_caret(text: str, caret: int, window_size: int = 1000) -> str:
    """Up to window_size characters of text centred on the caret."""
    if not text:
        return ""
    half_window = window_size // 2
    start = max(0, caret - half_window)
    end = min(len(text), caret + half_window)
    return text[start:end]


def estimate_tokens(text: str) -> int:
    """Rough token estimate (~4 characters per token)."""
    return math.ceil(len(text) / 4)


def truncate_at_sentence_boundary(text: str, max_chars: int) -> str:
    """
    Truncate text at the nearest sentence boundary before max_chars.

    Falls back to the last word boundary when it keeps at least 80% of the
    limit, and to a hard cut otherwise.

    Examples:
        >>> truncate_at_sentence_boundary("Hello. World. Test.", 15)
        'Hello. World.'
    """
    if len(text) <= max_chars:
        return text

    segment = text[:max_chars]
    matches = list(_SENTENCE_END.finditer(segment))
    if matches:
        cutoff = matches[-1].end()
        if segment[cutoff - 1:cutoff].isspace():
            cutoff -= 1
        return text[:cutoff]

    last_space = segment.rfind(" ")
    if last_space > max_chars * 0.8:
        return text[:last_space]
    return segment
