"""
Service layer.

Services orchestrate the prompt, analysis and provider modules and can be
used from the CLI or from an application's own request handlers.
"""

from .illustration_service import (
    GeneratedImage,
    IllustrationRequest,
    IllustrationService,
    ImageGenerationProgress,
    ImageStatus,
    ProgressStage,
    get_fallback_image_url,
)
from .story_generation_service import StoryGenerationService

__all__ = [
    'GeneratedImage',
    'IllustrationRequest',
    'IllustrationService',
    'ImageGenerationProgress',
    'ImageStatus',
    'ProgressStage',
    'StoryGenerationService',
    'get_fallback_image_url',
]
