"""
Provider Factory.

Builds chat and image provider instances from Settings. Callers own the
instance they create; there is no process-wide default provider.
"""

import logging
from typing import Optional

from ..config import Settings, load_settings
from .base import BaseImageGenerator, BaseLLMClient
from .gemini import DEFAULT_GEMINI_MODEL, GeminiProvider
from .openai_images import OpenAIImageGenerator

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("gemini",)
SUPPORTED_IMAGE_PROVIDERS = ("openai",)


def create_provider(settings: Optional[Settings] = None, **kwargs) -> BaseLLMClient:
    """
    Create an LLM provider instance.

    Args:
        settings: Runtime settings (loaded from the environment if None)
        **kwargs: Provider-specific overrides (api_key, model_name, temperature)

    Returns:
        BaseLLMClient instance

    Raises:
        ValueError: If the configured provider is unknown
    """
    settings = settings or load_settings()
    provider_name = settings.llm_provider

    if provider_name == "gemini":
        model_name = kwargs.get("model_name")
        if model_name is None:
            model_name = settings.llm_model
            if not model_name.startswith("gemini"):
                logger.warning(
                    f"LLM_MODEL {model_name} is not a Gemini model, "
                    f"using {DEFAULT_GEMINI_MODEL}"
                )
                model_name = DEFAULT_GEMINI_MODEL
        provider = GeminiProvider(
            api_key=kwargs.get("api_key", settings.google_api_key),
            model_name=model_name,
            temperature=kwargs.get("temperature", settings.llm_temperature),
        )
        logger.info(f"Created LLM provider: {type(provider).__name__}")
        return provider

    raise ValueError(
        f"Unknown LLM provider: {provider_name}. "
        f"Supported providers: {', '.join(SUPPORTED_PROVIDERS)}"
    )


def create_image_generator(settings: Optional[Settings] = None, **kwargs) -> BaseImageGenerator:
    """
    Create an image generation provider instance.

    Args:
        settings: Runtime settings (loaded from the environment if None)
        **kwargs: Provider-specific overrides (api_key, model_name, size, style)

    Returns:
        BaseImageGenerator instance, usable as IllustrationService's generator

    Raises:
        ValueError: If the configured image provider is unknown
    """
    settings = settings or load_settings()
    provider_name = settings.image_provider

    if provider_name == "openai":
        options = {key: kwargs[key] for key in ("size", "style") if key in kwargs}
        generator = OpenAIImageGenerator(
            api_key=kwargs.get("api_key", settings.openai_api_key),
            model_name=kwargs.get("model_name", settings.image_model),
            **options
        )
        logger.info(f"Created image provider: {type(generator).__name__}")
        return generator

    raise ValueError(
        f"Unknown image provider: {provider_name}. "
        f"Supported providers: {', '.join(SUPPORTED_IMAGE_PROVIDERS)}"
    )
