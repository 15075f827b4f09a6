"""
Tokenizer adapter.

Wraps a tiktoken encoding so the rest of the package can count tokens and
truncate text to a token budget without caring which vocabulary is in use.
"""

import logging
from typing import Any, Optional

import tiktoken

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"

# Generic encoding used when the target model has no known tiktoken mapping
FALLBACK_ENCODING = "cl100k_base"

TRUNCATION_MARKER = " [truncated]"

# Emitted by decode() for a partial UTF-8 sequence
REPLACEMENT_CHARACTER = "\ufffd"


class TokenizerAdapter:
    """
    Counts and truncates text in the vocabulary of a target model.

    The encoding is resolved from the model name when possible and falls back
    to ``cl100k_base`` otherwise. Any object exposing ``encode(str)`` and
    ``decode(list)`` may be passed as ``encoding`` instead.
    """

    def __init__(self, model: str = DEFAULT_MODEL, encoding: Optional[Any] = None):
        self.model = model
        if encoding is None:
            encoding = self._resolve_encoding(model)
        self._encoding = encoding

    @staticmethod
    def _resolve_encoding(model: str):
        try:
            return tiktoken.encoding_for_model(model)
        except KeyError:
            logger.warning(
                f"Specific tokenizer for {model} not found, using {FALLBACK_ENCODING} instead."
            )
            return tiktoken.get_encoding(FALLBACK_ENCODING)

    @property
    def encoding(self):
        """The underlying encoding object."""
        return self._encoding

    def count_tokens(self, text: Optional[str]) -> int:
        """
        Count tokens in a string.

        Args:
            text: Text to tokenize (empty or None counts as zero)

        Returns:
            Number of tokens
        """
        if not text:
            return 0
        return len(self._encoding.encode(text))

    def truncate_to_token_limit(self, text: Optional[str], max_tokens: int) -> str:
        """
        Truncate text to fit within a token budget.

        Text that already fits is returned unchanged. Otherwise the kept prefix
        leaves room for TRUNCATION_MARKER, which is appended so consumers can
        see the text was cut. A budget smaller than the marker itself yields
        the marker alone.

        Decoding a token prefix can split a multi-byte character, and the
        replacement character (or a merge across the prefix/marker boundary)
        may re-encode to more tokens. The prefix is shortened until the
        result fits.

        Args:
            text: Text to truncate
            max_tokens: Maximum tokens allowed

        Returns:
            Original or truncated text
        """
        if not text:
            return ""

        max_tokens = max(0, max_tokens)
        tokens = self._encoding.encode(text)
        if len(tokens) <= max_tokens:
            return text

        marker_tokens = len(self._encoding.encode(TRUNCATION_MARKER))
        keep = max(0, max_tokens - marker_tokens)
        while keep > 0:
            prefix = self._encoding.decode(tokens[:keep]).rstrip(REPLACEMENT_CHARACTER)
            truncated = prefix + TRUNCATION_MARKER
            if self.count_tokens(truncated) <= max_tokens:
                return truncated
            keep -= 1
        return TRUNCATION_MARKER
