"""
Shared pytest fixtures for test suite.

Token counts in most tests come from WordEncoding, a whitespace tokenizer
that stands in for a tiktoken Encoding so budgets can be reasoned about in
words. Byte-level behaviour (multi-byte characters split across tokens) is
covered with a real tiktoken Encoding built from a byte rank table, which
needs no downloaded vocabulary.
"""

import json
import os
from typing import Dict, List
from unittest.mock import MagicMock, patch

import pytest
import tiktoken

from storybook_prompts.config import Settings
from storybook_prompts.tokenizer import TokenizerAdapter


class WordEncoding:
    """Encoding stand-in: one token per whitespace-separated word."""

    def __init__(self):
        self._ids: Dict[str, int] = {}
        self._words: List[str] = []

    def encode(self, text: str) -> List[int]:
        tokens = []
        for word in text.split():
            if word not in self._ids:
                self._ids[word] = len(self._words)
                self._words.append(word)
            tokens.append(self._ids[word])
        return tokens

    def decode(self, tokens: List[int]) -> str:
        return " ".join(self._words[t] for t in tokens)


def words(count: int, word: str = "word") -> str:
    """Text of exactly ``count`` tokens under WordEncoding."""
    return " ".join(f"{word}{i}" for i in range(count))


@pytest.fixture
def make_text():
    """Factory for texts of a known WordEncoding token count."""
    return words


@pytest.fixture
def word_tokenizer():
    """TokenizerAdapter that counts whitespace-separated words."""
    return TokenizerAdapter("gpt-4o", encoding=WordEncoding())


def byte_level_encoding() -> tiktoken.Encoding:
    """tiktoken Encoding with one token per UTF-8 byte."""
    return tiktoken.Encoding(
        name="byte_level",
        pat_str=r"\S+|\s+",
        mergeable_ranks={bytes([i]): i for i in range(256)},
        special_tokens={},
    )


@pytest.fixture
def byte_tokenizer():
    """TokenizerAdapter over a real tiktoken Encoding, counting UTF-8 bytes."""
    return TokenizerAdapter("gpt-4o", encoding=byte_level_encoding())


@pytest.fixture
def patched_tiktoken():
    """
    Patch tiktoken lookups so default-constructed adapters use WordEncoding.

    Usage:
        def test_something(patched_tiktoken):
            manager = PromptManager()  # counts words
    """
    with patch('tiktoken.encoding_for_model', return_value=WordEncoding()) as for_model:
        with patch('tiktoken.get_encoding', return_value=WordEncoding()):
            yield for_model


@pytest.fixture
def test_settings():
    """Settings for service tests; delays are recorded by a fake sleep."""
    return Settings(
        llm_provider="gemini",
        llm_model="gemini-2.5-flash",
        google_api_key="test_key",
        image_batch_size=2,
        image_batch_delay=4.0,
        image_max_retries=3,
        image_retry_delay=3.0,
    )


# Story fixtures
@pytest.fixture
def sample_paragraphs():
    """A ten-paragraph story with a clear arc and a recurring heroine."""
    return [
        "Luna lived in a small village at the edge of the Whispering Woods.",
        "Every morning Luna was curious about the old tower beyond the hill.",
        "One day she packed a lantern and walked into the forest with her dog Pip.",
        "Suddenly a storm burst over the trees and they ran quickly for shelter.",
        "Inside a hollow oak, Pip found a glowing map.",
        "The map led them across a quiet river where fireflies danced.",
        "At last they reached the tower and climbed the spiral stairs.",
        "To their surprise, the tower was full of lost stars! Luna gasped!",
        "Together they opened the windows and set the stars free.",
        "Luna and Pip walked home smiling, happy under a sky full of light.",
    ]


@pytest.fixture
def sample_story_payload(sample_paragraphs):
    """Story JSON as returned by the chat model."""
    return {
        "title": "Luna and the Tower of Stars",
        "theme": "adventure",
        "content": sample_paragraphs,
        "keyMoments": [
            {"paragraphIndex": 0, "description": "Luna at the edge of the woods"},
            {"paragraphIndex": 7, "description": "The tower full of stars", "emotionalTone": "amazed"},
        ],
    }


@pytest.fixture
def sample_story_json(sample_story_payload):
    return json.dumps(sample_story_payload)


# ============================================================================
# Standardized Mocking Utilities
# ============================================================================

@pytest.fixture
def mock_llm_client(sample_story_json):
    """
    Standardized fixture for a chat client returning the sample story.

    Usage:
        def test_something(mock_llm_client):
            service = StoryGenerationService(mock_llm_client)
    """
    client = MagicMock()
    client.model_name = "gemini-2.5-flash"
    client.generate_chat.return_value = sample_story_json
    return client


@pytest.fixture
def mock_genai():
    """
    Patch google.generativeai for GeminiProvider tests.

    Yields (mock_model_class, mock_model) with the model returning
    "Generated text".
    """
    with patch.dict(os.environ, {"GOOGLE_API_KEY": "test_key"}):
        with patch('google.generativeai.configure'):
            with patch('google.generativeai.GenerativeModel') as mock_model_class:
                mock_model = MagicMock()
                mock_response = MagicMock()
                mock_response.text = "Generated text"
                mock_model.generate_content.return_value = mock_response
                mock_model_class.return_value = mock_model
                yield mock_model_class, mock_model


@pytest.fixture
def mock_openai():
    """
    Patch openai.OpenAI for OpenAIImageGenerator tests.

    Yields the mock client; images.generate returns one image URL.
    """
    with patch.dict(os.environ, {"OPENAI_API_KEY": "test_openai_key"}):
        with patch('openai.OpenAI') as mock_client_class:
            mock_client = MagicMock()
            mock_image = MagicMock()
            mock_image.url = "https://images.example/generated.png"
            mock_client.images.generate.return_value = MagicMock(data=[mock_image])
            mock_client_class.return_value = mock_client
            yield mock_client
