"""
Heuristic analysis of the writing context around the caret.

Infers writing style, form context, preferred completion length, topic
keywords, a compact context window, a page summary and the user's intent.
Everything here is regex and word-count based; no model calls.
"""

import re
from collections import Counter
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from inline_completion.models.completion_models import CompletionRequest
from inline_completion.models.enums import DetectedIntent, DomainType, PreferredLength, WritingStyle
from inline_completion.prompt.text_utils import normalize_whitespace, split_sentences

EN_STOPWORDS = frozenset({
    "the", "and", "that", "with", "this", "have", "about", "your", "from",
    "into", "there", "their", "subject", "regards", "please", "thank",
    "thanks", "would", "could", "should", "also", "been", "were", "will",
    "very", "here", "just",
})

JA_STOPWORDS = frozenset({
    "こと", "もの", "よう", "ため", "これ", "それ", "ここ", "する", "さん", "ます", "です",
})

MAX_TOPICS = 5
WINDOW_BEFORE_CHARS = 200
WINDOW_AFTER_CHARS = 140
MAX_SUMMARY_CHARS = 240

_EN_TOKEN = re.compile(r"[A-Za-z][A-Za-z0-9_-]{2,}")
# Hiragana/Katakana runs (incl. the long-vowel mark), or CJK ideograph runs
_JA_TOKEN = re.compile(r"[\u3041-\u309f\u30a0-\u30ff]{2,}|[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]+")

_CODE_HINT = re.compile(r"```|function\b|class\b|interface\b|const\s+")
_FORMAL_HINT = re.compile(r"dear\s|regards|best,")
_CASUAL_HINT = re.compile(r"😊|😄|lol|haha|！")
_CASUAL_JA_HINT = re.compile(r"(よろしく|ありがとうございます)")
_CREATIVE_HINT = re.compile(r"story|once upon|imagine|描写")

_EMAIL_FORM = re.compile(r"subject:\s|dear|regards")
_REVIEW_FORM = re.compile(r"pull\s+request|issue\s+#|bug\s+report")
_REVIEW_TITLE = re.compile(r"pull request|issue")
_MEETING_FORM = re.compile(r"meeting notes|agenda|action items")
_TASK_FORM = re.compile(r"todo\s*:|steps\s*:|first,\s|next,\s")

_QUESTION = re.compile(r"\?\s*$")
_INSTRUCTION = re.compile(r"(please|let me know|could you|can you|お手数ですが)")
_NARRATIVE = re.compile(r"(once upon|story|reminded me|i remember|物語|ストーリー)")


class ContextAnalysis(BaseModel):
    """Derived writing context handed to prompt selection."""
    
    model_config = ConfigDict(frozen=True)
    
    writing_style: WritingStyle
    form_context: str
    preferred_length: PreferredLength
    recent_topics: list[str] = Field(default_factory=list)
    context_window: str
    page_summary: str
    detected_intent: DetectedIntent


def analyze_context(
    request: CompletionRequest,
    domain_type: DomainType,
    text_before: str,
    text_after: str,
    current_paragraph: str,
    context_text: Optional[str] = None,
) -> ContextAnalysis:
    """
    Analyze the text around the caret plus the page context.

    Args:
        request: The completion request (metadata: title, language)
        domain_type: Site family detected from the URL
        text_before: Field text before the caret
        text_after: Field text after the caret
        current_paragraph: Paragraph containing the caret
        context_text: Page text to use instead of request.context_text
    """
    meta = request.context_metadata
    page_title = meta.page_title or ""
    page_text = context_text if context_text is not None else (request.context_text or "")

    writing_style = infer_writing_style(domain_type, text_before, page_text, page_title)
    return ContextAnalysis(
        writing_style=writing_style,
        form_context=detect_form_context(domain_type, text_before, page_title),
        preferred_length=infer_preferred_length(current_paragraph, writing_style),
        recent_topics=extract_topics(f"{current_paragraph}\n{page_text}", meta.language or "en"),
        context_window=build_context_window(text_before, text_after),
        page_summary=summarize_context(page_text, page_title),
        detected_intent=detect_intent(text_before, current_paragraph),
    )


def infer_writing_style(
    domain_type: DomainType,
    text_before: str,
    context_text: str,
    page_title: str,
) -> WritingStyle:
    snippet = f"{text_before} {context_text} {page_title}".lower()
    if domain_type is DomainType.GITHUB or _CODE_HINT.search(text_before):
        return WritingStyle.TECHNICAL
    if domain_type is DomainType.GMAIL or _FORMAL_HINT.search(snippet):
        return WritingStyle.FORMAL
    if _CASUAL_HINT.search(text_before) or _CASUAL_JA_HINT.search(text_before):
        return WritingStyle.CASUAL
    if _CREATIVE_HINT.search(snippet):
        return WritingStyle.CREATIVE
    return WritingStyle.NEUTRAL


def detect_form_context(domain_type: DomainType, text_before: str, page_title: str) -> str:
    lower = text_before.lower()
    if domain_type is DomainType.GMAIL or _EMAIL_FORM.search(lower):
        return "email-compose"
    if (
        domain_type is DomainType.GITHUB
        or _REVIEW_FORM.search(lower)
        or _REVIEW_TITLE.search(page_title.lower())
    ):
        return "code-review"
    if _MEETING_FORM.search(lower):
        return "meeting-notes"
    if _TASK_FORM.search(lower):
        return "task-list"
    return "general"


def infer_preferred_length(current_paragraph: str, writing_style: WritingStyle) -> PreferredLength:
    """Short for terse paragraphs, long for wordy or technical ones."""
    sentences = split_sentences(current_paragraph)
    words = current_paragraph.split()
    avg_length = len(words) / max(len(sentences), 1)
    if avg_length < 8:
        return PreferredLength.SHORT
    if avg_length >= 18 or writing_style is WritingStyle.TECHNICAL:
        return PreferredLength.LONG
    return PreferredLength.MEDIUM


def extract_topics(text: str, language: str) -> list[str]:
    """
    Most frequent keywords, English and Japanese.

    Ties keep first-seen order. For Japanese pages with no countable topics
    the first raw Japanese tokens are used instead.
    """
    english = [t.lower() for t in _EN_TOKEN.findall(text)]
    japanese = [t.strip() for t in _JA_TOKEN.findall(text)]
    japanese = [t for t in japanese if t and t not in JA_STOPWORDS]

    counts = Counter(t for t in english if t not in EN_STOPWORDS)
    counts.update(japanese)
    topics = [word for word, _ in sorted(counts.items(), key=lambda item: item[1], reverse=True)]

    if not topics and language.lower().startswith("ja"):
        return japanese[:3]
    return topics[:MAX_TOPICS]


def build_context_window(before: str, after: str) -> str:
    """``…last 200 chars[CURSOR]first 140 chars…``, whitespace-normalized."""
    left = normalize_whitespace(before[-WINDOW_BEFORE_CHARS:] if before else "")
    right = normalize_whitespace(after[:WINDOW_AFTER_CHARS])
    return f"{left}[CURSOR]{right}".strip()


def summarize_context(context_text: str, page_title: str) -> str:
    """Page title plus the first two sentences of the page text."""
    normalized = normalize_whitespace(context_text)
    if not normalized:
        return page_title
    summary = " ".join(split_sentences(normalized)[:2])
    if not summary:
        return page_title
    combined = f"{page_title}: {summary}" if page_title else summary
    return combined[:MAX_SUMMARY_CHARS]


def detect_intent(text_before: str, current_paragraph: str) -> DetectedIntent:
    combined = f"{text_before}\n{current_paragraph}".lower()
    if _QUESTION.search(text_before):
        return DetectedIntent.QUESTION
    if _INSTRUCTION.search(combined):
        return DetectedIntent.INSTRUCTION
    if _NARRATIVE.search(combined):
        return DetectedIntent.NARRATIVE
    return DetectedIntent.STATEMENT
