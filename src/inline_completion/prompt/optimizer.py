"""Best-effort prompt compression for latency."""

import re

import structlog

from inline_completion.prompt.text_utils import estimate_tokens

logger = structlog.get_logger(__name__)

FALLBACK_TAIL_CHARS = 4000

_EXAMPLE_LINE = re.compile(r"^EXAMPLE(S)?[:\s]", re.IGNORECASE)
_EXAMPLE_SECTION = re.compile(r"EXAMPLE PATTERNS:", re.IGNORECASE)


class PromptOptimizer:
    """
    Shrinks prompts that exceed a token budget.

    Example lines go first; if that is not enough, only the tail of the
    prompt is kept, since the caret context and output rules live there.
    """

    def optimize_for_latency(self, prompt: str, max_tokens: int) -> str:
        if estimate_tokens(prompt) <= max_tokens:
            return prompt

        compact = "\n".join(
            line for line in prompt.split("\n")
            if not _EXAMPLE_LINE.search(line) and not _EXAMPLE_SECTION.search(line)
        )
        if estimate_tokens(compact) <= max_tokens:
            return compact

        logger.debug(
            "Prompt truncated to tail",
            estimated_tokens=estimate_tokens(compact),
            max_tokens=max_tokens,
        )
        return compact[-FALLBACK_TAIL_CHARS:]
