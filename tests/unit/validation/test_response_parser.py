"""Unit tests for backend output parsing."""

import json

import pytest

from inline_completion.llm.exceptions import ResponseParseError
from inline_completion.validation.response_parser import (
    build_response_constraint,
    decode_suggestions,
    parse_suggestions,
)


class TestDecodeSuggestions:
    """Strict decoding."""

    def test_valid(self):
        raw = json.dumps({"suggestions": [{"text": "one"}, {"text": " two"}]})
        assert decode_suggestions(raw) == ["one", " two"]

    def test_empty_list(self):
        assert decode_suggestions('{"suggestions": []}') == []

    def test_drops_invalid_items(self):
        raw = json.dumps({"suggestions": [{"text": ""}, {"text": 3}, "bare", {"other": "x"}, {"text": "ok"}]})
        assert decode_suggestions(raw) == ["ok"]

    @pytest.mark.parametrize(
        "raw,error_type",
        [
            ("", "empty_content"),
            ("   ", "empty_content"),
            ("Finish the sentence gracefully.", "json_decode_error"),
            ('["a", "b"]', "not_json_object"),
            ('"text"', "not_json_object"),
            ("{}", "missing_suggestions"),
            ('{"suggestions": "one"}', "missing_suggestions"),
        ],
    )
    def test_errors(self, raw, error_type):
        with pytest.raises(ResponseParseError) as exc_info:
            decode_suggestions(raw)
        assert exc_info.value.details["error_type"] == error_type


class TestParseSuggestions:
    """Tolerant parsing: None means 'use the raw output'."""

    def test_structured(self):
        assert parse_suggestions('{"suggestions": [{"text": "hi"}]}') == ["hi"]

    def test_plain_text_is_unstructured(self):
        assert parse_suggestions("Finish the sentence gracefully.") is None

    def test_empty_is_unstructured(self):
        assert parse_suggestions("") is None

    def test_structured_empty_list_is_not_unstructured(self):
        assert parse_suggestions('{"suggestions": []}') == []


class TestBuildResponseConstraint:

    def test_shape(self):
        schema = build_response_constraint(3)

        assert schema["type"] == "object"
        assert schema["required"] == ["suggestions"]
        assert schema["additionalProperties"] is False
        items = schema["properties"]["suggestions"]
        assert items["type"] == "array"
        assert items["maxItems"] == 3
        assert items["items"]["properties"]["text"] == {"type": "string"}
        assert items["items"]["required"] == ["text"]

    def test_max_items_follows_argument(self):
        assert build_response_constraint(1)["properties"]["suggestions"]["maxItems"] == 1

    def test_fresh_dict_each_call(self):
        first = build_response_constraint()
        first["type"] = "mutated"
        assert build_response_constraint()["type"] == "object"
