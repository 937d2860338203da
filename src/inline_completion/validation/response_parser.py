"""
Tolerant parsing of backend output.

The backend is asked for {"suggestions": [{"text": "..."}]}, but local models
do not always comply. Anything that is not that shape is reported as
"unstructured" (None) so the caller can use the raw output as a single
candidate instead of failing the request.
"""

import json
from typing import Any, Optional

import structlog

from inline_completion.llm.exceptions import ResponseParseError
from inline_completion.monitoring.metrics import response_parse_fallbacks_total

logger = structlog.get_logger(__name__)


def decode_suggestions(raw: str) -> list[str]:
    """
    Strictly decode structured suggestions.

    Non-string and empty `text` values are dropped; the result may be empty.

    Raises:
        ResponseParseError: If raw is not JSON or not the expected shape
    """
    if not raw or not raw.strip():
        raise ResponseParseError("Backend output is empty", details={"error_type": "empty_content"})

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ResponseParseError(
            f"Backend output is not JSON: {e.msg}",
            details={"error_type": "json_decode_error", "position": e.pos},
        ) from e

    if not isinstance(parsed, dict):
        raise ResponseParseError(
            f"Expected JSON object, got {type(parsed).__name__}",
            details={"error_type": "not_json_object"},
        )

    items = parsed.get("suggestions")
    if not isinstance(items, list):
        raise ResponseParseError(
            "Missing 'suggestions' array",
            details={"error_type": "missing_suggestions"},
        )

    texts = []
    for item in items:
        text = item.get("text") if isinstance(item, dict) else None
        if isinstance(text, str) and text:
            texts.append(text)
    return texts


def parse_suggestions(raw: str) -> Optional[list[str]]:
    """
    Decode backend output into candidate strings.

    Returns:
        List of candidate texts (possibly empty), or None when the output is
        unstructured and should be treated as one raw candidate
    """
    try:
        return decode_suggestions(raw)
    except ResponseParseError as e:
        error_type = e.details.get("error_type", "unknown")
        response_parse_fallbacks_total.labels(error_type=error_type).inc()
        logger.debug("Unstructured backend output", error_type=error_type, raw_length=len(raw or ""))
        return None


def build_response_constraint(max_suggestions: int = 3) -> dict[str, Any]:
    """JSON Schema for the structured output requested from the backend."""
    return {
        "type": "object",
        "properties": {
            "suggestions": {
                "type": "array",
                "maxItems": max_suggestions,
                "items": {
                    "type": "object",
                    "properties": {"text": {"type": "string"}},
                    "required": ["text"],
                    "additionalProperties": False,
                },
            },
        },
        "required": ["suggestions"],
        "additionalProperties": False,
    }
