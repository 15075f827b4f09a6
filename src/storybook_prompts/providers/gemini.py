"""
Google Gemini provider.

All google.generativeai specific code is isolated here.
"""

import logging
import os
import time
from typing import List, Optional

import google.generativeai as genai

from ..utils.errors import ServiceUnavailableError
from .base import BaseLLMClient, ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

JSON_MIME_TYPE = "application/json"


class GeminiProvider(BaseLLMClient):
    """
    Chat provider backed by Google's Generative AI models.

    The system message becomes the model's system instruction; user
    messages are sent as the content.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_GEMINI_MODEL,
        temperature: float = 0.7
    ):
        """
        Initialize Gemini provider.

        Args:
            api_key: Google API key (if None, uses GOOGLE_API_KEY env var)
            model_name: Model name (default: gemini-2.5-flash)
            temperature: Generation temperature (default: 0.7)

        Raises:
            ServiceUnavailableError: If no API key is available
        """
        self.api_key = api_key or os.getenv("GOOGLE_API_KEY")
        if not self.api_key:
            raise ServiceUnavailableError(
                "gemini", "GOOGLE_API_KEY environment variable is required"
            )

        genai.configure(api_key=self.api_key)
        self._model_name = model_name.replace("models/", "")
        self.temperature = temperature

        logger.info(f"Initialized GeminiProvider with model: {self._model_name}")

    @property
    def model_name(self) -> str:
        return self._model_name

    def generate_chat(
        self,
        messages: List[ChatMessage],
        temperature: Optional[float] = None,
        json_response: bool = False,
    ) -> str:
        system_parts = [m["content"] for m in messages if m["role"] == "system"]
        contents = [m["content"] for m in messages if m["role"] != "system"]
        if not contents:
            raise ValueError("At least one non-system message is required")

        model = genai.GenerativeModel(
            self._model_name,
            system_instruction="\n\n".join(system_parts) or None,
        )
        generation_config = genai.GenerationConfig(
            temperature=temperature if temperature is not None else self.temperature,
            response_mime_type=JSON_MIME_TYPE if json_response else None,
        )

        start_time = time.time()
        try:
            response = model.generate_content(
                "\n\n".join(contents),
                generation_config=generation_config,
            )
        except (ConnectionError, TimeoutError, OSError) as e:
            logger.error(f"Network error generating content with Gemini: {e}", exc_info=True)
            raise ServiceUnavailableError("gemini", f"Gemini request failed: {e}") from e

        duration = time.time() - start_time
        text = (response.text or "").strip()
        if not text:
            logger.warning("Gemini generation finished without returning text")
        logger.debug(f"Gemini generation took {duration:.2f}s ({len(text)} chars)")
        return text
