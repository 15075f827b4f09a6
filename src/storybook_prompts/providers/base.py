"""
Provider-agnostic chat and image generation interfaces.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

ChatMessage = Dict[str, str]


class BaseLLMClient(ABC):
    """Interface every chat model provider implements."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Name of the model requests are sent to."""

    @abstractmethod
    def generate_chat(
        self,
        messages: List[ChatMessage],
        temperature: Optional[float] = None,
        json_response: bool = False,
    ) -> str:
        """
        Send chat messages and return the reply text.

        Args:
            messages: Ordered {"role", "content"} messages (system first)
            temperature: Sampling temperature (overrides the provider default)
            json_response: Ask the model for a JSON object reply

        Returns:
            Reply text
        """


class BaseImageGenerator(ABC):
    """
    Interface every image generation provider implements.

    Instances are callables taking a prompt and returning an image URL, so
    they can be passed straight to IllustrationService.
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Name of the image model requests are sent to."""

    @abstractmethod
    def generate_image(self, prompt: str) -> str:
        """
        Generate one image.

        Args:
            prompt: Final image prompt

        Returns:
            URL of the generated image
        """

    def __call__(self, prompt: str) -> str:
        return self.generate_image(prompt)
