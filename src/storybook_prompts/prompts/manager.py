"""
Token-aware prompt assembly.

PromptManager collects prompt components, substitutes template variables and
packs the components into a system prompt and a user prompt under a token
budget. Required components are truncated rather than dropped; optional
components that do not fit are dropped whole.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..tokenizer import TokenizerAdapter
from ..utils.errors import DuplicateComponentError
from .components import (
    DEFAULT_MODEL,
    ComponentLike,
    ComponentType,
    PromptComponent,
    TokenBudget,
    get_default_budget,
    to_component,
)

logger = logging.getLogger(__name__)

TEMPLATE_VARIABLE_PATTERN = re.compile(r"\{\{(\w+)\}\}")

COMPONENT_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class ComponentRecord:
    """Audit entry for one candidate component of a built prompt."""
    id: str
    type: ComponentType
    tokens: int
    included: bool


@dataclass(frozen=True)
class BuiltPrompt:
    """Result of PromptManager.build_prompt()."""
    system_prompt: str
    user_prompt: str
    system_tokens: int
    user_tokens: int
    total_tokens: int
    components: Tuple[ComponentRecord, ...]

    @property
    def included_ids(self) -> List[str]:
        return [record.id for record in self.components if record.included]

    @property
    def dropped_ids(self) -> List[str]:
        return [record.id for record in self.components if not record.included]

    def record_for(self, component_id: str) -> Optional[ComponentRecord]:
        for record in self.components:
            if record.id == component_id:
                return record
        return None


class PromptManager:
    """
    Token-aware prompt construction.

    Components are packed in priority order (highest first, insertion order
    among equals). System components are limited by the budget's ``system``
    entry; all other components share ``total - system_used - reserved``.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        token_budget: Optional[TokenBudget] = None,
        tokenizer: Optional[TokenizerAdapter] = None,
        **budget_overrides: Optional[int]
    ):
        """
        Initialize a prompt manager.

        Args:
            model: Chat model the prompt is built for
            token_budget: Full budget (defaults to the model's default budget)
            tokenizer: Tokenizer adapter (defaults to one for ``model``)
            **budget_overrides: Individual TokenBudget fields to override
        """
        self.model = model
        budget = token_budget or get_default_budget(model)
        self.token_budget = budget.with_overrides(**budget_overrides)
        self.tokenizer = tokenizer or TokenizerAdapter(model)
        self._components: List[PromptComponent] = []
        self._template_variables: Dict[str, str] = {}

    @property
    def components(self) -> List[PromptComponent]:
        """Components in insertion order."""
        return list(self._components)

    @property
    def template_variables(self) -> Dict[str, str]:
        return dict(self._template_variables)

    def count_tokens(self, text: str) -> int:
        return self.tokenizer.count_tokens(text)

    def truncate_to_token_limit(self, text: str, max_tokens: int) -> str:
        return self.tokenizer.truncate_to_token_limit(text, max_tokens)

    def add_component(self, component: ComponentLike) -> "PromptManager":
        """
        Add a prompt component.

        Args:
            component: PromptComponent or mapping with the same keys

        Returns:
            The PromptManager instance (for chaining)

        Raises:
            DuplicateComponentError: If a component with the same id exists
        """
        component = to_component(component)
        if any(existing.id == component.id for existing in self._components):
            raise DuplicateComponentError(component.id)
        self._components.append(component)
        return self

    def add_components(self, components: Iterable[ComponentLike]) -> "PromptManager":
        for component in components:
            self.add_component(component)
        return self

    def remove_component(self, component_id: str) -> "PromptManager":
        self._components = [c for c in self._components if c.id != component_id]
        return self

    def set_template_variable(self, key: str, value: str) -> "PromptManager":
        self._template_variables[key] = value
        return self

    def set_template_variables(self, variables: Mapping[str, str]) -> "PromptManager":
        self._template_variables.update(variables)
        return self

    def apply_template_variables(self, text: str) -> str:
        """
        Replace {{variable}} placeholders with their values.

        Unknown or empty variables are left verbatim.
        """
        def substitute(match: "re.Match") -> str:
            value = self._template_variables.get(match.group(1))
            return str(value) if value else match.group(0)

        return TEMPLATE_VARIABLE_PATTERN.sub(substitute, text)

    def build_prompt(self) -> BuiltPrompt:
        """
        Build the final prompt from components under the token budget.

        Returns:
            BuiltPrompt with prompts, token counts and a per-component audit
        """
        budget = self.token_budget
        # sorted() is stable, so equal priorities keep insertion order
        ordered = sorted(self._components, key=lambda c: c.priority, reverse=True)

        system_parts: List[str] = []
        user_parts: List[str] = []
        records: List[ComponentRecord] = []
        system_tokens = 0
        user_tokens = 0

        for component in ordered:
            content = self.apply_template_variables(component.content)
            tokens = self.count_tokens(content)

            if component.type.is_system:
                limit = budget.limit_for(ComponentType.SYSTEM)
                used = system_tokens
            else:
                limit = budget.user_pool(system_tokens)
                used = user_tokens

            if used + tokens <= limit:
                included_content, included_tokens = content, tokens
            elif component.required:
                available = int(max(0, limit - used))
                included_content = self.truncate_to_token_limit(content, available)
                included_tokens = self.count_tokens(included_content)
                logger.info(
                    f"Truncated required component '{component.id}' "
                    f"from {tokens} to {included_tokens} tokens"
                )
            else:
                logger.debug(
                    f"Dropped component '{component.id}' ({tokens} tokens) - exceeds budget"
                )
                records.append(ComponentRecord(component.id, component.type, tokens, False))
                continue

            if component.type.is_system:
                system_parts.append(included_content)
                system_tokens += included_tokens
            else:
                user_parts.append(included_content)
                user_tokens += included_tokens
            records.append(
                ComponentRecord(component.id, component.type, included_tokens, True)
            )

        logger.debug(
            f"Built prompt for {self.model}: system={system_tokens}, user={user_tokens}, "
            f"components={len(records)}"
        )

        return BuiltPrompt(
            system_prompt=COMPONENT_SEPARATOR.join(system_parts),
            user_prompt=COMPONENT_SEPARATOR.join(user_parts),
            system_tokens=system_tokens,
            user_tokens=user_tokens,
            total_tokens=system_tokens + user_tokens,
            components=tuple(records),
        )

    def create_chat_completion_messages(self) -> List[Dict[str, str]]:
        """
        Create chat-completion message objects.

        Returns:
            A system message then a user message, each only when non-empty
        """
        built = self.build_prompt()
        messages = []
        if built.system_prompt:
            messages.append({"role": "system", "content": built.system_prompt})
        if built.user_prompt:
            messages.append({"role": "user", "content": built.user_prompt})
        return messages

    @staticmethod
    def create_template(name: str, components: Iterable[ComponentLike]) -> "PromptTemplate":
        """Create a reusable prompt template from a set of components."""
        return PromptTemplate(name, tuple(to_component(c) for c in components))


@dataclass(frozen=True)
class PromptTemplate:
    """A named, reusable set of prompt components."""
    name: str
    components: Tuple[PromptComponent, ...]

    def instantiate(
        self,
        model: str = DEFAULT_MODEL,
        variables: Optional[Mapping[str, str]] = None,
        tokenizer: Optional[TokenizerAdapter] = None,
        **budget_overrides: Optional[int]
    ) -> PromptManager:
        """Create a fresh PromptManager loaded with this template."""
        manager = PromptManager(model, tokenizer=tokenizer, **budget_overrides)
        manager.add_components(self.components)
        manager.set_template_variables(variables or {})
        return manager
