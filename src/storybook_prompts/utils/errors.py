"""
Error handling utilities for Storybook Prompts.

Provides structured exception classes and a plain-dict rendering of errors
for callers that need to report them.
"""

import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class StoryPromptError(Exception):
    """Base exception for all Storybook Prompts errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "STORY_PROMPT_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class DuplicateComponentError(StoryPromptError):
    """Raised when a prompt component id is added twice to one manager."""

    def __init__(self, component_id: str):
        super().__init__(
            message=f'Component with ID "{component_id}" already exists',
            error_code="DUPLICATE_COMPONENT",
            details={"component_id": component_id}
        )
        self.component_id = component_id


class ValidationError(StoryPromptError):
    """Raised when story generation parameters fail validation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class StoryResponseError(StoryPromptError):
    """Raised when the LLM returns something other than the story JSON."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="INVALID_STORY_RESPONSE",
            details=details
        )


class ServiceUnavailableError(StoryPromptError):
    """Raised when an external service is unavailable."""

    def __init__(self, service: str, message: Optional[str] = None):
        error_message = message or f"Service '{service}' is currently unavailable."
        super().__init__(
            message=error_message,
            error_code="SERVICE_UNAVAILABLE",
            details={"service": service}
        )


def error_to_dict(error: Exception, include_type: bool = False) -> Dict[str, Any]:
    """
    Render an exception as a plain dictionary.

    Args:
        error: Exception instance
        include_type: Whether to include the exception class name

    Returns:
        Dict with "error", "error_code" and, when present, "details"
    """
    if isinstance(error, StoryPromptError):
        response: Dict[str, Any] = {
            "error": error.message,
            "error_code": error.error_code,
        }
        if error.details:
            response["details"] = error.details
    else:
        logger.error(f"Unexpected error: {type(error).__name__}: {error}")
        # Internal errors are not exposed verbatim
        response = {
            "error": "An unexpected error occurred.",
            "error_code": "INTERNAL_ERROR",
        }

    if include_type:
        response["error_type"] = type(error).__name__

    return response
