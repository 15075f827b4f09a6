"""
Prompt component model.

A prompt is assembled from typed, prioritized components. Each component is
a discrete section of instructional text destined for either the system
prompt or the user prompt of a chat completion request.

Key Components:
- ComponentType: closed set of component kinds
- PromptComponent: one unit of prompt text
- TokenBudget: total and per-type token ceilings
- DEFAULT_TOKEN_BUDGETS: budgets for the supported chat models
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class ComponentType(str, Enum):
    """Kinds of prompt components."""
    SYSTEM = "system"
    INSTRUCTION = "instruction"
    CONTEXT = "context"
    EXAMPLE = "example"
    USER_INPUT = "user_input"
    FORMATTING = "formatting"

    @property
    def is_system(self) -> bool:
        """Whether components of this type belong to the system prompt."""
        return self is ComponentType.SYSTEM


@dataclass(frozen=True)
class PromptComponent:
    """
    A discrete section of a prompt.

    Attributes:
        id: Unique key within one PromptManager
        type: Component kind (a ComponentType or its string value)
        content: Raw text, may contain {{variable}} placeholders
        required: Must appear in the output, truncated if necessary
        max_tokens: Informational cap for this component
        priority: Higher values are packed first
    """
    id: str
    type: ComponentType
    content: str
    required: bool = False
    max_tokens: Optional[int] = None
    priority: int = 0

    def __post_init__(self):
        # Raises ValueError for unknown type strings
        object.__setattr__(self, "type", ComponentType(self.type))
        if self.priority is None:
            object.__setattr__(self, "priority", 0)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PromptComponent":
        """Create a component from a mapping, accepting camelCase maxTokens."""
        return cls(
            id=data["id"],
            type=data["type"],
            content=data.get("content", ""),
            required=bool(data.get("required", False)),
            max_tokens=data.get("max_tokens", data.get("maxTokens")),
            priority=data.get("priority") or 0,
        )


ComponentLike = Union[PromptComponent, Mapping[str, Any]]


def to_component(component: ComponentLike) -> PromptComponent:
    """Normalize a component or component mapping to a PromptComponent."""
    if isinstance(component, PromptComponent):
        return component
    return PromptComponent.from_dict(component)


@dataclass(frozen=True)
class TokenBudget:
    """
    Token budget configuration.

    ``total`` is the hard ceiling for system and user prompts together. The
    per-type fields are soft ceilings; unset means unlimited. ``reserved``
    tokens are withheld from the pool available to non-system components.
    """
    total: int
    system: Optional[int] = None
    instruction: Optional[int] = None
    context: Optional[int] = None
    example: Optional[int] = None
    user_input: Optional[int] = None
    formatting: Optional[int] = None
    reserved: int = 0

    def limit_for(self, component_type: ComponentType) -> float:
        """
        Get the per-type limit for a component type.

        Returns:
            The configured limit, or math.inf when the type has none
        """
        limits: Dict[ComponentType, Optional[int]] = {
            ComponentType.SYSTEM: self.system,
            ComponentType.INSTRUCTION: self.instruction,
            ComponentType.CONTEXT: self.context,
            ComponentType.EXAMPLE: self.example,
            ComponentType.USER_INPUT: self.user_input,
            ComponentType.FORMATTING: self.formatting,
        }
        limit = limits[ComponentType(component_type)]
        # A zero limit is treated as unset
        return limit if limit else math.inf

    def user_pool(self, system_tokens_used: int) -> int:
        """Tokens available to all non-system components."""
        return self.total - system_tokens_used - (self.reserved or 0)

    def with_overrides(self, **overrides: Optional[int]) -> "TokenBudget":
        """Return a copy with the given non-None fields replaced."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


DEFAULT_MODEL = "gpt-4o"

DEFAULT_TOKEN_BUDGETS: Dict[str, TokenBudget] = {
    "gpt-4o": TokenBudget(
        total=128000,
        system=1000,
        instruction=2000,
        context=100000,
        example=3000,
        user_input=10000,
        formatting=500,
        reserved=8000,
    ),
    "gpt-4-turbo": TokenBudget(
        total=128000,
        system=1000,
        instruction=2000,
        context=100000,
        example=3000,
        user_input=10000,
        formatting=500,
        reserved=8000,
    ),
    "gpt-4": TokenBudget(
        total=8192,
        system=800,
        instruction=1000,
        context=4000,
        example=1000,
        user_input=500,
        formatting=300,
        reserved=592,
    ),
    "gpt-3.5-turbo": TokenBudget(
        total=16385,
        system=500,
        instruction=800,
        context=10000,
        example=800,
        user_input=300,
        formatting=200,
        reserved=500,
    ),
}


def get_default_budget(model: str) -> TokenBudget:
    """
    Get the default token budget for a model.

    Unknown models get the gpt-4o budget.
    """
    return DEFAULT_TOKEN_BUDGETS.get(model, DEFAULT_TOKEN_BUDGETS[DEFAULT_MODEL])
