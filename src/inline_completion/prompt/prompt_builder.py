"""
Prompt builder for completion requests.

Responsible for:
- Extracting text before/after the caret, the current sentence and paragraph
- Running context analysis and prompt selection
- Rendering the final prompt from a Jinja2 template
- Compressing the prompt to the token budget
- Deriving the backend session scope from the page identity
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog
from jinja2 import Environment, FileSystemLoader

from inline_completion.completion.session_scope import derive_session_scope
from inline_completion.models.completion_models import CompletionRequest
from inline_completion.prompt.context_analyzer import analyze_context
from inline_completion.prompt.optimizer import PromptOptimizer
from inline_completion.prompt.selector import CompletionContext, PromptSelector, detect_domain_type
from inline_completion.prompt.text_utils import (
    extract_paragraph,
    extract_sentence,
    slice_context_around_caret,
    truncate_at_sentence_boundary,
)

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates"


@dataclass(frozen=True)
class PromptBundle:
    """
    Output of prompt assembly.

    Attributes:
        prompt: Literal prompt text sent to the backend
        scope: Session scope for the page (``scope:<hex>``)
        context: The completion context the prompt was built from
    """

    prompt: str
    scope: str
    context: CompletionContext


class PromptBuilder:
    """
    Build prompts from CompletionRequest objects.

    The field text is windowed around the caret before analysis so very long
    documents do not blow up the prompt; the page context text is cut at a
    sentence boundary.
    """

    def __init__(
        self,
        templates_dir: Optional[Path] = None,
        max_tokens: int = 150,
        context_window_chars: int = 1000,
        max_context_chars: int = 4000,
        max_insertion_chars: int = 60,
    ):
        """
        Initialize prompt builder.

        Args:
            templates_dir: Directory containing completion_prompt.j2
                (defaults to the bundled templates)
            max_tokens: Token budget handed to the optimizer
            context_window_chars: Field text kept around the caret
            max_context_chars: Page context text kept for analysis
            max_insertion_chars: Length limit stated in the prompt
        """
        self.templates_dir = Path(templates_dir) if templates_dir else DEFAULT_TEMPLATES_DIR
        self.max_tokens = max_tokens
        self.context_window_chars = context_window_chars
        self.max_context_chars = max_context_chars
        self.max_insertion_chars = max_insertion_chars
        self.selector = PromptSelector()
        self.optimizer = PromptOptimizer()

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,  # Prompts, not HTML
            keep_trailing_newline=False,
        )
        try:
            self.template = self.jinja_env.get_template("completion_prompt.j2")
        except Exception as e:
            logger.error("Failed to load prompt template", error=str(e), templates_dir=str(self.templates_dir))
            raise

        logger.info(
            "PromptBuilder initialized",
            templates_dir=str(self.templates_dir),
            max_tokens=max_tokens,
            context_window_chars=context_window_chars,
        )

    def build_context(self, request: CompletionRequest) -> CompletionContext:
        """Analyze the request into a CompletionContext."""
        text = request.input_text
        caret = min(request.cursor_position, len(text))
        window_start = max(0, caret - self.context_window_chars // 2)
        window = slice_context_around_caret(text, caret, self.context_window_chars)
        local_caret = caret - window_start

        before = window[:local_caret]
        after = window[local_caret:]
        paragraph = extract_paragraph(window, local_caret)
        sentence = extract_sentence(window, local_caret)
        meta = request.context_metadata
        domain_type = detect_domain_type(meta.url)
        page_text = truncate_at_sentence_boundary(request.context_text or "", self.max_context_chars)

        analysis = analyze_context(
            request=request,
            domain_type=domain_type,
            text_before=before,
            text_after=after,
            current_paragraph=paragraph,
            context_text=page_text,
        )
        return CompletionContext(
            text_before=before,
            text_after=after,
            current_sentence=sentence,
            current_paragraph=paragraph,
            domain_type=domain_type,
            page_title=meta.page_title or "",
            form_context=analysis.form_context,
            writing_style=analysis.writing_style,
            preferred_length=analysis.preferred_length,
            recent_topics=analysis.recent_topics,
            context_window=analysis.context_window,
            page_summary=analysis.page_summary,
            detected_intent=analysis.detected_intent,
        )

    def build(self, request: CompletionRequest, max_suggestions: int = 3) -> PromptBundle:
        """
        Assemble the prompt and session scope for one request.

        Args:
            request: The completion request
            max_suggestions: Upper bound stated in the output instructions

        Returns:
            PromptBundle(prompt, scope, context)
        """
        context = self.build_context(request)
        rendered = self.template.render(
            assembled=self.selector.select_prompt(context),
            page_summary=context.page_summary,
            context_window=context.context_window,
            max_suggestions=max_suggestions,
            max_length=self.max_insertion_chars,
            text_before=context.text_before,
            text_after=context.text_after,
        )
        prompt = self.optimizer.optimize_for_latency(rendered, self.max_tokens)
        meta = request.context_metadata
        scope = derive_session_scope(meta.url, meta.page_title)

        logger.debug(
            "Built completion prompt",
            domain_type=context.domain_type.value,
            writing_style=context.writing_style.value,
            intent=context.detected_intent.value,
            prompt_chars=len(prompt),
            scope=scope,
        )
        return PromptBundle(prompt=prompt, scope=scope, context=context)
