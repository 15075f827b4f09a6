"""
Utility modules for Storybook Prompts.

Modules:
- errors: exception hierarchy and error rendering
"""

from .errors import (
    StoryPromptError,
    DuplicateComponentError,
    ValidationError,
    StoryResponseError,
    ServiceUnavailableError,
    error_to_dict,
)

__all__ = [
    'StoryPromptError',
    'DuplicateComponentError',
    'ValidationError',
    'StoryResponseError',
    'ServiceUnavailableError',
    'error_to_dict',
]
