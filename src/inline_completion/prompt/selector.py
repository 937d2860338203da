"""
Domain detection and prompt selection.
"""

import json
import re
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from inline_completion.models.enums import DetectedIntent, DomainType, PreferredLength, WritingStyle
from inline_completion.prompt.prompts import (
    BUSINESS_COMPLETION_PROMPT,
    CONTEXT_ANALYZER_PROMPT,
    CONTEXT_INTEGRATION_PROMPT,
    CREATIVE_COMPLETION_PROMPT,
    SAFETY_PROMPT,
    TECHNICAL_COMPLETION_PROMPT,
)

# First match wins; host substring match
DOMAIN_MATCHERS: tuple[tuple[DomainType, tuple[str, ...]], ...] = (
    (DomainType.GITHUB, ("github.com",)),
    (DomainType.GMAIL, ("gmail.com", "mail.google.com")),
    (DomainType.SOCIAL, ("x.com", "twitter.com", "facebook.com", "instagram.com")),
    (DomainType.DOCS, ("docs.google.com", "notion.so")),
)

_EMAIL_FORM = re.compile(r"email|件名|宛先", re.IGNORECASE)


class CompletionContext(BaseModel):
    """Everything prompt selection knows about the request."""
    
    model_config = ConfigDict(frozen=True)
    
    text_before: str
    text_after: str
    current_sentence: str
    current_paragraph: str
    domain_type: DomainType
    page_title: str = ""
    form_context: str = "general"
    writing_style: WritingStyle = WritingStyle.NEUTRAL
    preferred_length: PreferredLength = PreferredLength.MEDIUM
    recent_topics: list[str] = Field(default_factory=list)
    context_window: str = ""
    page_summary: str = ""
    detected_intent: DetectedIntent = DetectedIntent.STATEMENT


def detect_domain_type(url: Optional[str]) -> DomainType:
    """Site family from the page URL; GENERIC for anything unparseable."""
    if not url:
        return DomainType.GENERIC
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return DomainType.GENERIC
    if not host:
        return DomainType.GENERIC
    for domain_type, patterns in DOMAIN_MATCHERS:
        if any(pattern in host for pattern in patterns):
            return domain_type
    return DomainType.GENERIC


class PromptSelector:
    """Composes domain, analyzer, context and safety prompts."""

    def select_prompt(self, context: CompletionContext) -> str:
        context_json = json.dumps(context.model_dump(mode="json"), ensure_ascii=False)
        parts = [
            self.domain_prompt(context),
            CONTEXT_ANALYZER_PROMPT,
            CONTEXT_INTEGRATION_PROMPT.replace("{context}", context_json),
            SAFETY_PROMPT,
        ]
        return "\n\n".join(p for p in parts if p)

    @staticmethod
    def domain_prompt(context: CompletionContext) -> str:
        if context.domain_type is DomainType.GITHUB or "```" in context.text_before:
            return TECHNICAL_COMPLETION_PROMPT
        if context.domain_type is DomainType.GMAIL or _EMAIL_FORM.search(context.form_context):
            return BUSINESS_COMPLETION_PROMPT
        if context.domain_type is DomainType.SOCIAL or context.writing_style is WritingStyle.CASUAL:
            return CREATIVE_COMPLETION_PROMPT
        return ""
