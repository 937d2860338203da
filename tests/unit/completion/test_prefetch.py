"""Unit tests for the prefetch key heuristic."""

import pytest

from inline_completion.completion.prefetch import should_prefetch_for_key


@pytest.mark.parametrize("key", [".", "/", "Enter", "("])
def test_simple_keys(key):
    assert should_prefetch_for_key(key, "anything") is True


def test_arrow_completes():
    assert should_prefetch_for_key(">", "const f = (x) =") is False
    assert should_prefetch_for_key(">", "const f = (x) =>") is True


def test_arrow_ignores_trailing_whitespace():
    assert should_prefetch_for_key(">", "items.map(x =>  ") is True


def test_plain_greater_than():
    assert should_prefetch_for_key(">", "if a >") is False


@pytest.mark.parametrize("key", ["", "a", " ", "Shift", ","])
def test_other_keys(key):
    assert should_prefetch_for_key(key, "text") is False
