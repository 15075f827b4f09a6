"""
Storybook Prompts

Token-budgeted prompt assembly, story content analysis and context-aware
illustration prompts for illustrated children's stories.
"""

from .tokenizer import TokenizerAdapter, TRUNCATION_MARKER
from .prompts import (
    ComponentType,
    PromptComponent,
    TokenBudget,
    PromptManager,
    PromptTemplate,
    BuiltPrompt,
    create_story_prompt,
    create_narrative_analysis_prompt,
)
from .models import StoryGenerationParams, StoryResponse, parse_story_response
from .analysis import StoryAnalysis, StoryContentAnalyzer, analyze_story_content
from .image_prompts import create_context_aware_image_prompt, create_story_image_prompts

__version__ = "0.1.0"

__all__ = [
    "TokenizerAdapter",
    "TRUNCATION_MARKER",
    "ComponentType",
    "PromptComponent",
    "TokenBudget",
    "PromptManager",
    "PromptTemplate",
    "BuiltPrompt",
    "create_story_prompt",
    "create_narrative_analysis_prompt",
    "StoryGenerationParams",
    "StoryResponse",
    "parse_story_response",
    "StoryAnalysis",
    "StoryContentAnalyzer",
    "analyze_story_content",
    "create_context_aware_image_prompt",
    "create_story_image_prompts",
]
