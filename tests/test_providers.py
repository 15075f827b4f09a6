"""
Tests for LLM providers and the provider factory.

google.generativeai and openai are mocked throughout; no network calls are made.
"""

import logging
import os
from unittest.mock import MagicMock, patch

import openai
import pytest

from storybook_prompts.config import Settings
from storybook_prompts.providers import (
    BaseImageGenerator,
    BaseLLMClient,
    GeminiProvider,
    OpenAIImageGenerator,
    create_image_generator,
    create_provider,
)
from storybook_prompts.providers.gemini import DEFAULT_GEMINI_MODEL, JSON_MIME_TYPE
from storybook_prompts.providers.openai_images import DEFAULT_IMAGE_MODEL
from storybook_prompts.services import IllustrationService, ImageStatus
from storybook_prompts.utils.errors import ServiceUnavailableError

MESSAGES = [
    {"role": "system", "content": "You write stories."},
    {"role": "user", "content": "Write a story about owls."},
]


class TestGeminiProvider:
    """Test the Gemini provider."""

    def test_requires_api_key(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ServiceUnavailableError) as exc_info:
                GeminiProvider()
        assert exc_info.value.details == {"service": "gemini"}

    def test_api_key_from_environment(self, mock_genai):
        provider = GeminiProvider()
        assert provider.api_key == "test_key"
        assert isinstance(provider, BaseLLMClient)

    def test_models_prefix_stripped(self, mock_genai):
        provider = GeminiProvider(model_name="models/gemini-1.5-pro")
        assert provider.model_name == "gemini-1.5-pro"

    def test_system_message_becomes_instruction(self, mock_genai):
        mock_model_class, mock_model = mock_genai
        provider = GeminiProvider(api_key="key")

        result = provider.generate_chat(MESSAGES)

        assert result == "Generated text"
        mock_model_class.assert_called_once_with(
            DEFAULT_GEMINI_MODEL, system_instruction="You write stories."
        )
        args, kwargs = mock_model.generate_content.call_args
        assert args[0] == "Write a story about owls."

    def test_json_response_and_temperature(self, mock_genai):
        _, mock_model = mock_genai
        provider = GeminiProvider(api_key="key", temperature=0.9)

        with patch('google.generativeai.GenerationConfig') as mock_config:
            provider.generate_chat(MESSAGES, temperature=0.1, json_response=True)

        mock_config.assert_called_once_with(temperature=0.1, response_mime_type=JSON_MIME_TYPE)
        _, kwargs = mock_model.generate_content.call_args
        assert kwargs["generation_config"] is mock_config.return_value

    def test_default_temperature_without_json(self, mock_genai):
        provider = GeminiProvider(api_key="key", temperature=0.9)

        with patch('google.generativeai.GenerationConfig') as mock_config:
            provider.generate_chat(MESSAGES)

        mock_config.assert_called_once_with(temperature=0.9, response_mime_type=None)

    def test_requires_user_message(self, mock_genai):
        provider = GeminiProvider(api_key="key")
        with pytest.raises(ValueError):
            provider.generate_chat([{"role": "system", "content": "only system"}])

    def test_network_error_is_service_unavailable(self, mock_genai):
        _, mock_model = mock_genai
        mock_model.generate_content.side_effect = ConnectionError("offline")
        provider = GeminiProvider(api_key="key")

        with pytest.raises(ServiceUnavailableError, match="offline"):
            provider.generate_chat(MESSAGES)


class TestCreateProvider:
    """Test the provider factory."""

    def test_creates_gemini(self, mock_genai, test_settings):
        provider = create_provider(test_settings)

        assert isinstance(provider, GeminiProvider)
        assert provider.model_name == DEFAULT_GEMINI_MODEL
        assert provider.temperature == test_settings.llm_temperature

    def test_gemini_model_from_settings(self, mock_genai):
        settings = Settings(llm_model="gemini-1.5-flash", google_api_key="key")
        assert create_provider(settings).model_name == "gemini-1.5-flash"

    def test_default_settings_use_gemini_model(self, mock_genai):
        settings = Settings(google_api_key="key")
        assert settings.llm_model == DEFAULT_GEMINI_MODEL
        assert create_provider(settings).model_name == DEFAULT_GEMINI_MODEL

    def test_non_gemini_model_falls_back(self, mock_genai, caplog):
        settings = Settings(llm_model="gpt-4", google_api_key="key")
        with caplog.at_level(logging.WARNING):
            provider = create_provider(settings)

        assert provider.model_name == DEFAULT_GEMINI_MODEL
        assert "gpt-4" in caplog.text

    def test_overrides(self, mock_genai, test_settings):
        provider = create_provider(test_settings, model_name="gemini-1.5-pro", temperature=0.3)
        assert provider.model_name == "gemini-1.5-pro"
        assert provider.temperature == 0.3

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            create_provider(Settings(llm_provider="carrier-pigeon"))

    def test_each_call_creates_new_instance(self, mock_genai, test_settings):
        assert create_provider(test_settings) is not create_provider(test_settings)


class TestOpenAIImageGenerator:
    """Test the OpenAI image provider."""

    def test_requires_api_key(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ServiceUnavailableError) as exc_info:
                OpenAIImageGenerator()
        assert exc_info.value.details == {"service": "openai"}

    def test_api_key_from_environment(self, mock_openai):
        generator = OpenAIImageGenerator()
        assert generator.api_key == "test_openai_key"
        assert generator.model_name == DEFAULT_IMAGE_MODEL
        assert isinstance(generator, BaseImageGenerator)

    def test_generate_image(self, mock_openai):
        generator = OpenAIImageGenerator(api_key="key")

        url = generator.generate_image("A fox in the snow")

        assert url == "https://images.example/generated.png"
        mock_openai.images.generate.assert_called_once_with(
            model="dall-e-3",
            prompt="A fox in the snow",
            n=1,
            size="1024x1024",
            style="vivid",
        )

    def test_callable(self, mock_openai):
        generator = OpenAIImageGenerator(api_key="key")
        assert generator("A fox") == "https://images.example/generated.png"

    def test_empty_prompt_rejected(self, mock_openai):
        generator = OpenAIImageGenerator(api_key="key")
        with pytest.raises(ValueError):
            generator.generate_image("   ")
        mock_openai.images.generate.assert_not_called()

    def test_missing_url(self, mock_openai):
        mock_openai.images.generate.return_value = MagicMock(data=[MagicMock(url=None)])
        generator = OpenAIImageGenerator(api_key="key")

        with pytest.raises(ServiceUnavailableError, match="image URL"):
            generator.generate_image("A fox")

    def test_api_error_is_service_unavailable(self, mock_openai):
        mock_openai.images.generate.side_effect = openai.OpenAIError("quota exceeded")
        generator = OpenAIImageGenerator(api_key="key")

        with pytest.raises(ServiceUnavailableError, match="quota exceeded"):
            generator.generate_image("A fox")

    def test_drives_illustration_service(self, mock_openai):
        sleeps = []
        service = IllustrationService(OpenAIImageGenerator(api_key="key"), sleep=sleeps.append)

        image = service.generate_image("A fox")

        assert image.status is ImageStatus.SUCCESS
        assert image.url == "https://images.example/generated.png"
        sent = mock_openai.images.generate.call_args.kwargs["prompt"]
        assert sent.startswith("Children's book illustration showing: A fox")

    def test_failures_fall_back_in_illustration_service(self, mock_openai):
        mock_openai.images.generate.side_effect = openai.OpenAIError("down")
        sleeps = []
        service = IllustrationService(OpenAIImageGenerator(api_key="key"), sleep=sleeps.append)

        image = service.generate_image("A fox", theme="space")

        assert image.is_fallback
        assert mock_openai.images.generate.call_count == 4
        assert sleeps == [3.0, 6.0, 9.0]


class TestCreateImageGenerator:
    """Test the image provider factory."""

    def test_creates_openai(self, mock_openai):
        generator = create_image_generator(Settings(openai_api_key="key"))

        assert isinstance(generator, OpenAIImageGenerator)
        assert generator.api_key == "key"
        assert generator.model_name == "dall-e-3"

    def test_settings_and_overrides(self, mock_openai):
        settings = Settings(image_model="dall-e-2", openai_api_key="key")
        generator = create_image_generator(settings, size="512x512", style="natural")

        assert generator.model_name == "dall-e-2"
        assert generator.size == "512x512"
        assert generator.style == "natural"

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown image provider"):
            create_image_generator(Settings(image_provider="crayons"))
