"""
Completion request lifecycle.

- orchestrator: CompletionOrchestrator (cache, admission, supersession)
- overlap: reconcile suggestions with the text around the caret
- ranker: heuristic scoring of candidates
- session_scope: page identity -> backend session scope
- prefetch: key presses that warrant a speculative request
"""

from inline_completion.completion.orchestrator import CompletionOrchestrator
from inline_completion.completion.overlap import (
    sanitize_suggestion_text,
    trim_suggestion_overlap,
    trim_suggestions,
)
from inline_completion.completion.prefetch import should_prefetch_for_key
from inline_completion.completion.ranker import SuggestionRanker
from inline_completion.completion.session_scope import derive_session_scope

__all__ = [
    "CompletionOrchestrator",
    "SuggestionRanker",
    "derive_session_scope",
    "sanitize_suggestion_text",
    "should_prefetch_for_key",
    "trim_suggestion_overlap",
    "trim_suggestions",
]
