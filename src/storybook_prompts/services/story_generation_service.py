"""
Story generation service.

Builds the budgeted story prompt, sends it to the chat model and turns the
reply into a validated story plus its illustration plan.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from ..config import Settings
from ..image_prompts import create_story_image_prompts
from ..models import StoryGenerationParams, StoryResponse, parse_story_response
from ..prompts.story_templates import create_story_prompt
from ..providers.base import BaseLLMClient
from ..tokenizer import TokenizerAdapter
from .illustration_service import IllustrationRequest

logger = logging.getLogger(__name__)

ParamsLike = Union[StoryGenerationParams, Mapping[str, Any]]


class StoryGenerationService:
    """Service for generating illustrated-story text with a chat model."""

    def __init__(
        self,
        llm_client: BaseLLMClient,
        settings: Optional[Settings] = None,
        tokenizer: Optional[TokenizerAdapter] = None
    ):
        """
        Initialize story generation service.

        Args:
            llm_client: Chat model provider
            settings: Model and budget settings (defaults if None)
            tokenizer: Tokenizer adapter override for prompt budgeting
        """
        self.llm_client = llm_client
        self.settings = settings or Settings()
        self._tokenizer = tokenizer

    def build_messages(self, params: ParamsLike) -> List[Dict[str, str]]:
        """
        Build chat messages for a story request.

        The prompt is budgeted and tokenized for the model the client sends
        requests to.

        Raises:
            ValidationError: If the parameters are invalid
        """
        manager = create_story_prompt(
            params,
            model=self.llm_client.model_name,
            tokenizer=self._tokenizer,
            **self.settings.budget_overrides()
        )
        return manager.create_chat_completion_messages()

    def generate_story(self, params: ParamsLike) -> StoryResponse:
        """
        Generate a story.

        Args:
            params: Story generation parameters

        Returns:
            Validated StoryResponse

        Raises:
            ValidationError: If the parameters are invalid
            StoryResponseError: If the model reply is not valid story JSON
        """
        messages = self.build_messages(params)
        logger.info(f"Requesting story from {self.llm_client.model_name}")

        raw = self.llm_client.generate_chat(
            messages,
            temperature=self.settings.llm_temperature,
            json_response=True,
        )
        story = parse_story_response(raw)

        logger.info(f"Generated story \"{story.title}\" with {len(story.content)} paragraphs")
        return story

    def plan_illustrations(self, story: StoryResponse) -> List[IllustrationRequest]:
        """Illustration prompts for the story's recommended paragraphs."""
        requests = [
            IllustrationRequest(paragraph_index=index, prompt=prompt)
            for index, prompt in create_story_image_prompts(story.title, story.content, story.theme)
        ]
        logger.debug(
            f"Planned {len(requests)} illustrations at paragraphs "
            f"{[r.paragraph_index for r in requests]}"
        )
        return requests
