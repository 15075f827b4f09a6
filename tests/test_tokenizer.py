"""
Tests for the tokenizer adapter.

Tests cover encoding resolution, fallback, token counting and truncation.
"""

import logging
from unittest.mock import patch

import pytest

from storybook_prompts.tokenizer import (
    FALLBACK_ENCODING,
    TRUNCATION_MARKER,
    TokenizerAdapter,
)
from conftest import WordEncoding


class TestEncodingResolution:
    """Test how the adapter picks an encoding."""

    def test_uses_model_specific_encoding(self):
        """Test that the model's own encoding is used when known."""
        encoding = WordEncoding()
        with patch('tiktoken.encoding_for_model', return_value=encoding) as for_model:
            adapter = TokenizerAdapter("gpt-4o")

        for_model.assert_called_once_with("gpt-4o")
        assert adapter.encoding is encoding

    def test_falls_back_to_generic_encoding(self, caplog):
        """Test that unknown models fall back to cl100k_base with a warning."""
        fallback = WordEncoding()
        with patch('tiktoken.encoding_for_model', side_effect=KeyError("unknown")):
            with patch('tiktoken.get_encoding', return_value=fallback) as get_encoding:
                with caplog.at_level(logging.WARNING):
                    adapter = TokenizerAdapter("my-custom-model")

        get_encoding.assert_called_once_with(FALLBACK_ENCODING)
        assert adapter.encoding is fallback
        assert "my-custom-model" in caplog.text

    def test_explicit_encoding_skips_lookup(self):
        """Test that an injected encoding is used as-is."""
        encoding = WordEncoding()
        with patch('tiktoken.encoding_for_model') as for_model:
            adapter = TokenizerAdapter("gpt-4", encoding=encoding)

        for_model.assert_not_called()
        assert adapter.model == "gpt-4"


class TestTokenCounting:
    """Test token counting."""

    def test_counts_tokens(self, word_tokenizer):
        assert word_tokenizer.count_tokens("once upon a time") == 4

    def test_empty_and_none_count_zero(self, word_tokenizer):
        assert word_tokenizer.count_tokens("") == 0
        assert word_tokenizer.count_tokens(None) == 0


class TestTruncation:
    """Test truncation to a token limit."""

    def test_text_within_limit_is_unchanged(self, word_tokenizer):
        text = "the fox ran home"
        assert word_tokenizer.truncate_to_token_limit(text, 4) == text
        assert word_tokenizer.truncate_to_token_limit(text, 10) == text

    def test_truncated_text_ends_with_marker(self, word_tokenizer, make_text):
        text = make_text(20)
        result = word_tokenizer.truncate_to_token_limit(text, 5)

        assert result.endswith(TRUNCATION_MARKER)
        assert result == "word0 word1 word2 word3" + TRUNCATION_MARKER

    def test_truncated_text_fits_limit(self, word_tokenizer, make_text):
        """Test that the marker is counted inside the limit."""
        text = make_text(100)
        for limit in (1, 2, 10, 50, 99):
            result = word_tokenizer.truncate_to_token_limit(text, limit)
            assert word_tokenizer.count_tokens(result) <= limit

    def test_zero_limit_yields_marker_only(self, word_tokenizer, make_text):
        result = word_tokenizer.truncate_to_token_limit(make_text(10), 0)
        assert result == TRUNCATION_MARKER

    def test_negative_limit_treated_as_zero(self, word_tokenizer, make_text):
        result = word_tokenizer.truncate_to_token_limit(make_text(10), -5)
        assert result == TRUNCATION_MARKER

    def test_empty_text_returns_empty(self, word_tokenizer):
        assert word_tokenizer.truncate_to_token_limit("", 5) == ""
        assert word_tokenizer.truncate_to_token_limit(None, 5) == ""

    @pytest.mark.parametrize("limit", [3, 7, 12])
    def test_prefix_preserved(self, word_tokenizer, make_text, limit):
        """Test that truncation keeps the start of the text."""
        text = make_text(30)
        result = word_tokenizer.truncate_to_token_limit(text, limit)
        kept = result[:-len(TRUNCATION_MARKER)]
        assert text.startswith(kept)


class TestByteLevelEncoding:
    """Test truncation with a real tiktoken Encoding (one token per byte)."""

    def test_counts_utf8_bytes(self, byte_tokenizer):
        assert byte_tokenizer.count_tokens("héllo") == 6

    def test_split_character_is_dropped(self, byte_tokenizer):
        """Test that a prefix ending mid-character does not overrun the limit."""
        # Marker is 12 bytes; one kept byte would decode to U+FFFD (3 bytes)
        result = byte_tokenizer.truncate_to_token_limit("é" * 40, 13)

        assert result == TRUNCATION_MARKER
        assert "\ufffd" not in result

    def test_whole_characters_kept(self, byte_tokenizer):
        result = byte_tokenizer.truncate_to_token_limit("é" * 40, 17)

        assert result == "éé" + TRUNCATION_MARKER
        assert byte_tokenizer.count_tokens(result) == 16

    @pytest.mark.parametrize("text", ["é" * 40, "日本語のおはなし" * 5, "Luna 🌙 and Pip 🐦 " * 4])
    def test_truncated_text_fits_limit(self, byte_tokenizer, text):
        marker_tokens = byte_tokenizer.count_tokens(TRUNCATION_MARKER)
        for limit in range(0, byte_tokenizer.count_tokens(text)):
            result = byte_tokenizer.truncate_to_token_limit(text, limit)

            assert result.endswith(TRUNCATION_MARKER)
            assert "\ufffd" not in result
            assert byte_tokenizer.count_tokens(result) <= max(limit, marker_tokens)
