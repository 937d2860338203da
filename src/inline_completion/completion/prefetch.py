"""Key-press heuristics for speculative completion prefetch."""

SIMPLE_PREFETCH_KEYS = frozenset({".", "/", "Enter", "("})


def should_prefetch_for_key(key: str, before_text: str) -> bool:
    """
    Whether a key press makes a completion request likely soon.

    Sentence ends, path separators, new lines and opening parentheses always
    qualify; ``>`` only when it completes an arrow (``=>``).
    """
    if not key:
        return False
    if key in SIMPLE_PREFETCH_KEYS:
        return True
    if key == ">":
        return before_text.rstrip().endswith("=>")
    return False
