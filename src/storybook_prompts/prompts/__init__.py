"""
Prompt construction.

Modules:
- components: prompt component and token budget types
- manager: token-aware prompt assembly
- formatters: list/section/JSON formatting helpers
- story_templates: story generation and narrative analysis prompts
"""

from .components import (
    ComponentType,
    PromptComponent,
    TokenBudget,
    DEFAULT_TOKEN_BUDGETS,
    get_default_budget,
)
from .manager import BuiltPrompt, ComponentRecord, PromptManager, PromptTemplate
from .story_templates import (
    create_template_story_prompt,
    create_keywords_story_prompt,
    create_story_prompt,
    create_narrative_analysis_prompt,
)

__all__ = [
    "ComponentType",
    "PromptComponent",
    "TokenBudget",
    "DEFAULT_TOKEN_BUDGETS",
    "get_default_budget",
    "BuiltPrompt",
    "ComponentRecord",
    "PromptManager",
    "PromptTemplate",
    "create_template_story_prompt",
    "create_keywords_story_prompt",
    "create_story_prompt",
    "create_narrative_analysis_prompt",
]
