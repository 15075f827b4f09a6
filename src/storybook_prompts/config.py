"""
Configuration loaded from the environment.

Values come from environment variables, with a ``.env`` file loaded first
when present. Settings are plain objects passed to the services that need
them.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_LLM_PROVIDER = "gemini"
DEFAULT_LLM_MODEL = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_IMAGE_PROVIDER = "openai"
DEFAULT_IMAGE_MODEL = "dall-e-3"

# Image generation rate limiting
DEFAULT_IMAGE_BATCH_SIZE = 2
DEFAULT_IMAGE_BATCH_DELAY = 4.0  # seconds between batches
DEFAULT_IMAGE_MAX_RETRIES = 3
DEFAULT_IMAGE_RETRY_DELAY = 3.0  # seconds, multiplied by the attempt number


@dataclass(frozen=True)
class Settings:
    """Runtime settings."""
    llm_provider: str = DEFAULT_LLM_PROVIDER
    llm_model: str = DEFAULT_LLM_MODEL
    llm_temperature: float = DEFAULT_TEMPERATURE
    google_api_key: Optional[str] = None
    image_provider: str = DEFAULT_IMAGE_PROVIDER
    image_model: str = DEFAULT_IMAGE_MODEL
    openai_api_key: Optional[str] = None
    token_budget_total: Optional[int] = None
    token_budget_reserved: Optional[int] = None
    image_batch_size: int = DEFAULT_IMAGE_BATCH_SIZE
    image_batch_delay: float = DEFAULT_IMAGE_BATCH_DELAY
    image_max_retries: int = DEFAULT_IMAGE_MAX_RETRIES
    image_retry_delay: float = DEFAULT_IMAGE_RETRY_DELAY

    def __post_init__(self):
        if self.image_batch_size < 1:
            raise ValueError("image_batch_size must be at least 1")
        if self.image_max_retries < 0:
            raise ValueError("image_max_retries cannot be negative")

    def budget_overrides(self):
        """TokenBudget overrides for PromptManager."""
        return {
            "total": self.token_budget_total,
            "reserved": self.token_budget_reserved,
        }


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def load_settings(dotenv: bool = True) -> Settings:
    """
    Load settings from the environment.

    Args:
        dotenv: Load a .env file before reading variables

    Returns:
        Settings instance

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    if dotenv:
        load_dotenv()

    return Settings(
        llm_provider=os.getenv("LLM_PROVIDER", DEFAULT_LLM_PROVIDER).lower(),
        llm_model=os.getenv("LLM_MODEL", DEFAULT_LLM_MODEL),
        llm_temperature=_env_float("LLM_TEMPERATURE", DEFAULT_TEMPERATURE),
        google_api_key=os.getenv("GOOGLE_API_KEY"),
        image_provider=os.getenv("IMAGE_PROVIDER", DEFAULT_IMAGE_PROVIDER).lower(),
        image_model=os.getenv("IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        token_budget_total=_env_int("PROMPT_TOKEN_BUDGET_TOTAL", None),
        token_budget_reserved=_env_int("PROMPT_TOKEN_BUDGET_RESERVED", None),
        image_batch_size=_env_int("IMAGE_BATCH_SIZE", DEFAULT_IMAGE_BATCH_SIZE),
        image_batch_delay=_env_float("IMAGE_BATCH_DELAY", DEFAULT_IMAGE_BATCH_DELAY),
        image_max_retries=_env_int("IMAGE_MAX_RETRIES", DEFAULT_IMAGE_MAX_RETRIES),
        image_retry_delay=_env_float("IMAGE_RETRY_DELAY", DEFAULT_IMAGE_RETRY_DELAY),
    )
