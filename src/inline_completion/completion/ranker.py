"""Heuristic scoring of candidate suggestions."""

import re

from inline_completion.models.completion_models import CompletionSuggestion

_TERMINAL_PUNCTUATION = re.compile(r"[.!?]$")
_LEADING_UPPERCASE = re.compile(r"^[A-Z]")
_TRAILING_SPACE = re.compile(r"\s+$")


class SuggestionRanker:
    """
    Scores candidates and keeps the best ones.

    Leading whitespace is preserved; it can be needed for a natural insertion.
    """

    def __init__(self, limit: int = 3):
        self.limit = limit

    def rank(self, candidates: list[str]) -> list[CompletionSuggestion]:
        texts = [t for t in (_TRAILING_SPACE.sub("", c) for c in candidates) if t]
        scored = [CompletionSuggestion(text=t, confidence=self.score(t)) for t in texts]
        # sorted() is stable, so ties keep their input order
        scored = sorted(scored, key=lambda s: s.confidence, reverse=True)
        return scored[:self.limit]

    @staticmethod
    def score(text: str) -> float:
        score = 0.5
        if _TERMINAL_PUNCTUATION.search(text):
            score += 0.2
        if len(text) < 140:
            score += 0.1
        if _LEADING_UPPERCASE.match(text):
            score += 0.05
        return max(0.0, min(1.0, round(score, 4)))
