"""
Prompt assembly.

- prompt_builder: PromptBuilder / PromptBundle (Jinja2 template rendering)
- context_analyzer: writing style, intent, topics, context window, summary
- selector: domain detection and prompt selection
- optimizer: token-budget compression
- prompts: prompt texts
- text_utils: sentence/paragraph extraction and windowing
"""

from inline_completion.prompt.context_analyzer import ContextAnalysis, analyze_context
from inline_completion.prompt.optimizer import PromptOptimizer
from inline_completion.prompt.prompt_builder import PromptBuilder, PromptBundle
from inline_completion.prompt.prompts import SYSTEM_PROMPT
from inline_completion.prompt.selector import CompletionContext, PromptSelector, detect_domain_type

__all__ = [
    "CompletionContext",
    "ContextAnalysis",
    "PromptBuilder",
    "PromptBundle",
    "PromptOptimizer",
    "PromptSelector",
    "SYSTEM_PROMPT",
    "analyze_context",
    "detect_domain_type",
]
