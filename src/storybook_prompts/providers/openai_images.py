"""
OpenAI image provider.

All openai specific code is isolated here.
"""

import logging
import os
import time
from typing import Optional

import openai

from ..utils.errors import ServiceUnavailableError
from .base import BaseImageGenerator

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MODEL = "dall-e-3"
DEFAULT_IMAGE_SIZE = "1024x1024"
DEFAULT_IMAGE_STYLE = "vivid"


class OpenAIImageGenerator(BaseImageGenerator):
    """Image provider backed by OpenAI's DALL-E models."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_IMAGE_MODEL,
        size: str = DEFAULT_IMAGE_SIZE,
        style: str = DEFAULT_IMAGE_STYLE
    ):
        """
        Initialize OpenAI image provider.

        Args:
            api_key: OpenAI API key (if None, uses OPENAI_API_KEY env var)
            model_name: Image model (default: dall-e-3)
            size: Image size (default: 1024x1024)
            style: DALL-E 3 style, "vivid" or "natural"

        Raises:
            ServiceUnavailableError: If no API key is available
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ServiceUnavailableError(
                "openai", "OPENAI_API_KEY environment variable is required"
            )

        self._client = openai.OpenAI(api_key=self.api_key)
        self._model_name = model_name
        self.size = size
        self.style = style

        logger.info(f"Initialized OpenAIImageGenerator with model: {self._model_name}")

    @property
    def model_name(self) -> str:
        return self._model_name

    def generate_image(self, prompt: str) -> str:
        if not prompt or not prompt.strip():
            raise ValueError("Prompt is required")

        start_time = time.time()
        try:
            response = self._client.images.generate(
                model=self._model_name,
                prompt=prompt,
                n=1,
                size=self.size,
                style=self.style,
            )
        except openai.OpenAIError as e:
            logger.error(f"Error generating image with OpenAI: {e}", exc_info=True)
            raise ServiceUnavailableError("openai", f"Image request failed: {e}") from e

        url = response.data[0].url if response.data else None
        if not url:
            raise ServiceUnavailableError("openai", "Failed to generate image URL")

        logger.debug(f"OpenAI image generation took {time.time() - start_time:.2f}s")
        return url
