"""
Request and response models.

Pydantic models for the data exchanged with the outside world: the story
generation request parameters and the story JSON returned by the chat model.
"""

import json
import re
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from .utils.errors import StoryResponseError, ValidationError

StoryMode = Literal["template", "keywords"]
StoryLength = Literal["short", "medium", "long"]
ReadingLevel = Literal["easy", "moderate", "advanced"]

# Chat models sometimes wrap JSON in a Markdown fence despite instructions
_CODE_FENCE_PATTERN = re.compile(r"^\s*```(?:json)?\s*\n(.*?)\n\s*```\s*$", re.DOTALL)


class StoryOptions(BaseModel):
    """Optional story shaping parameters."""
    model_config = ConfigDict(populate_by_name=True)

    story_length: Optional[StoryLength] = Field(default=None, alias="storyLength")
    reading_level: Optional[ReadingLevel] = Field(default=None, alias="readingLevel")


class StoryGenerationParams(BaseModel):
    """
    Story generation request.

    ``template`` is required in template mode and ``keywords`` in keywords
    mode; blank values are rejected.
    """
    mode: StoryMode
    template: Optional[str] = None
    keywords: Optional[str] = None
    options: Optional[StoryOptions] = None

    @model_validator(mode="after")
    def check_mode_field(self) -> "StoryGenerationParams":
        value = self.template if self.mode == "template" else self.keywords
        if not value or not value.strip():
            field_name = "template" if self.mode == "template" else "keywords"
            raise ValueError(f'{field_name} is required when mode is "{self.mode}"')
        return self


class KeyMoment(BaseModel):
    """A visually important moment suggested by the chat model."""
    model_config = ConfigDict(populate_by_name=True)

    paragraph_index: int = Field(..., ge=0, alias="paragraphIndex")
    description: str
    emotional_tone: Optional[str] = Field(default=None, alias="emotionalTone")


class StoryResponse(BaseModel):
    """Story JSON returned by the chat model."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    content: List[str] = Field(..., min_length=1)
    theme: Optional[str] = None
    keywords: Optional[List[str]] = None
    key_moments: Optional[List[KeyMoment]] = Field(default=None, alias="keyMoments")

    @field_validator("content")
    @classmethod
    def strip_paragraphs(cls, v: List[str]) -> List[str]:
        return [p.strip() for p in v]

    @model_validator(mode="after")
    def drop_blank_paragraphs(self) -> "StoryResponse":
        """
        Remove blank paragraphs, keeping key moments on the same text.

        Key moments on a blank paragraph are dropped; later indices shift
        down by the number of blanks before them.
        """
        blanks = [i for i, p in enumerate(self.content) if not p]
        if len(blanks) == len(self.content):
            raise ValueError("content must contain at least one non-empty paragraph")
        if not blanks:
            return self

        self.content = [p for p in self.content if p]
        if self.key_moments:
            self.key_moments = [
                moment.model_copy(update={
                    "paragraph_index": moment.paragraph_index
                    - sum(1 for b in blanks if b < moment.paragraph_index)
                })
                for moment in self.key_moments
                if moment.paragraph_index not in blanks
            ]
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase JSON shape."""
        return self.model_dump(by_alias=True, exclude_none=True)


def parse_generation_params(data: Union[StoryGenerationParams, Mapping[str, Any]]) -> StoryGenerationParams:
    """
    Validate story generation parameters.

    Raises:
        ValidationError: If the parameters are invalid
    """
    if isinstance(data, StoryGenerationParams):
        return data
    try:
        return StoryGenerationParams.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid story generation parameters",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e


def parse_story_response(raw: Union[str, bytes, Mapping[str, Any]]) -> StoryResponse:
    """
    Parse the chat model's story output.

    Args:
        raw: JSON text (optionally fenced) or an already decoded mapping

    Returns:
        Validated StoryResponse

    Raises:
        StoryResponseError: If the output is not valid story JSON
    """
    if isinstance(raw, (str, bytes)):
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        fenced = _CODE_FENCE_PATTERN.match(text)
        if fenced:
            text = fenced.group(1)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoryResponseError(
                f"Story response is not valid JSON: {e.msg}",
                details={"position": e.pos},
            ) from e
    else:
        data = raw

    if not isinstance(data, Mapping):
        raise StoryResponseError("Story response must be a JSON object")

    try:
        return StoryResponse.model_validate(dict(data))
    except PydanticValidationError as e:
        raise StoryResponseError(
            "Story response does not match the expected format",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e
