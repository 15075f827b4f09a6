"""
Provider implementations.

Chat: Google Gemini via GeminiProvider.
Images: OpenAI DALL-E via OpenAIImageGenerator.
"""

from .base import BaseImageGenerator, BaseLLMClient
from .gemini import GeminiProvider
from .openai_images import OpenAIImageGenerator
from .factory import create_image_generator, create_provider

__all__ = [
    "BaseImageGenerator",
    "BaseLLMClient",
    "GeminiProvider",
    "OpenAIImageGenerator",
    "create_image_generator",
    "create_provider",
]
