"""
Token-optimized prompt templates for children's story generation.

Builds PromptManager instances for the two story modes (template/theme based
and keyword based) and for narrative analysis of an existing story.
"""

from typing import Any, Dict, Mapping, Optional, Sequence, Union

from ..models import StoryGenerationParams, StoryOptions, parse_generation_params
from ..tokenizer import TokenizerAdapter
from ..utils.errors import ValidationError
from .components import DEFAULT_MODEL, ComponentType, PromptComponent
from .manager import PromptManager

STORY_SYSTEM_PROMPT = (
    "You are a creative children's storywriter. You write engaging, age-appropriate "
    "stories for children ages 4-10. Your stories are imaginative, positive, and "
    "teach good values. Your tone is warm and friendly."
)

STORY_SYSTEM_COMPONENT = PromptComponent(
    id="story_system",
    type=ComponentType.SYSTEM,
    content=STORY_SYSTEM_PROMPT,
    required=True,
    priority=10,
)

READING_LEVEL_INSTRUCTIONS: Dict[str, str] = {
    "easy": "Use simple vocabulary with short sentences suitable for very young readers (ages 4-6). Avoid complex words.",
    "moderate": "Use grade-appropriate vocabulary for children ages 7-8 with a mix of simple and moderately complex sentences.",
    "advanced": "Use rich vocabulary appropriate for confident readers (ages 9-10) with some challenging words and varied sentence structures.",
}

STORY_LENGTH_INSTRUCTIONS: Dict[str, str] = {
    "short": "4-6 paragraphs, perfect for a 2-3 minute read",
    "medium": "8-10 paragraphs, perfect for a 4-6 minute read",
    "long": "10-12 paragraphs, perfect for a 7-10 minute read",
}

VISUALIZATION_GUIDANCE = """Create a story with strong visual elements that can be illustrated effectively. Include:
• Character appearance: Specific details about how characters look, dress, and move
• Settings: Vivid descriptions of locations with distinctive visual features
• Action scenes: Dynamic moments that show character movement and interaction
• Emotional expressions: Clear facial expressions and body language that convey feelings
• Visual progression: Scene changes that show the journey through different environments"""

NARRATIVE_GUIDANCE = """Structure your story with a clear narrative arc:
• Beginning: Introduce main character(s) and establish the setting
• Challenge: Present a problem, quest, or challenge to overcome
• Journey: Take the character(s) through a sequence of events or discoveries
• Climax: Create a meaningful high point where the main challenge is addressed
• Resolution: Conclude with growth, learning, or positive change
• Emotional arc: Show how characters' feelings evolve through the story"""

KEY_MOMENTS_GUIDANCE = """For keyMoments, identify 4 important narrative moments that would make exceptional illustrations:
• Introduction: A moment that establishes character appearance and setting (paragraphIndex: early)
• Development: A moment showing character interaction or problem discovery (paragraphIndex: 1/3 into story)
• Climax: The most visually impactful moment in the story (paragraphIndex: 2/3 into story)
• Resolution: A satisfying final image that captures the story's conclusion (paragraphIndex: near end)

Each description should be detailed enough to create a compelling, child-friendly illustration that captures the essence of that story moment."""

_KEY_MOMENTS_EXAMPLE = """  "keyMoments": [
    { "paragraphIndex": 0, "description": "Description of a key visual moment in paragraph 1", "emotionalTone": "joyful/scared/curious/etc" },
    { "paragraphIndex": 3, "description": "Description of a key visual moment in paragraph 4", "emotionalTone": "joyful/scared/curious/etc" },
    { "paragraphIndex": 6, "description": "Description of a key visual moment in paragraph 7", "emotionalTone": "joyful/scared/curious/etc" },
    { "paragraphIndex": 9, "description": "Description of a key visual moment in paragraph 10", "emotionalTone": "joyful/scared/curious/etc" }
  ]"""

TEMPLATE_FORMAT_INSTRUCTIONS = f"""Return your response as a JSON object with this format:
{{
  "title": "The story title",
  "content": ["Paragraph 1", "Paragraph 2", "Paragraph 3", ...],
  "theme": "{{{{theme}}}}",
{_KEY_MOMENTS_EXAMPLE}
}}

The content array should contain paragraphs, each being 1-3 sentences that form a complete thought or scene."""

KEYWORDS_FORMAT_INSTRUCTIONS = f"""Return your response as a JSON object with this format:
{{
  "title": "The story title",
  "content": ["Paragraph 1", "Paragraph 2", "Paragraph 3", ...],
  "keywords": ["keyword1", "keyword2", ...],
{_KEY_MOMENTS_EXAMPLE}
}}

The keywords array should contain the specific keywords you used from the provided list.
The content array should contain paragraphs, each being 1-3 sentences that form a complete thought or scene."""

ANALYSIS_SYSTEM_PROMPT = (
    "You are a narrative analysis expert specializing in children's stories. Your task is "
    "to analyze stories to identify key moments, character attributes, emotional beats, "
    "and optimal illustration points."
)

ANALYSIS_TASKS = """Provide a comprehensive analysis focusing on visual storytelling:

1. Character Analysis: For each main character, identify:
   • Distinctive physical features and clothing
   • Recurring poses, expressions or actions
   • Character arc and how it might be shown visually
   • Age-appropriate styling for child audience

2. Setting Analysis: For each key location:
   • Distinctive architectural or natural elements
   • Color palette and atmosphere suggestions
   • Scale and perspective relative to characters
   • Transition points between different settings

3. Emotional Journey: Map how emotions evolve through the story:
   • Color schemes that match emotional states
   • Body language changes through narrative
   • Facial expression opportunities at key moments
   • Visual metaphors for emotional transitions

4. Illustration Opportunities: Identify 4-5 prime illustration moments:
   • Strong visual interest and narrative importance
   • Paragraphs that convey peak action or emotion
   • Scenes that represent different story stages
   • Moments that reveal character or setting details

5. Visual Consistency Recommendations:
   • Character design consistency across illustrations
   • Color palette and style guidelines
   • Visual motifs that could recur across images
   • Age-appropriate visualization considerations"""

ANALYSIS_OUTPUT_FORMAT = """Return your analysis as a detailed JSON object with this format:
{
  "mainCharacters": [
    {
      "name": "Character name",
      "description": "Detailed visual description including age, appearance, clothing, etc.",
      "attributes": ["distinctive feature 1", "distinctive feature 2", "distinctive feature 3"],
      "expressionRange": ["primary emotion 1", "primary emotion 2"]
    }
  ],
  "settings": [
    {
      "name": "Setting name",
      "description": "Detailed visual description including scale, colors, distinctive features",
      "attributes": ["visual element 1", "visual element 2", "visual element 3"],
      "colorPalette": ["primary color 1", "primary color 2", "accent color"]
    }
  ],
  "emotionalJourney": [
    {
      "stage": "beginning/middle/climax/resolution",
      "emotion": "primary emotion",
      "visualCues": ["body language", "facial expression", "environmental element"],
      "paragraphIndices": [0, 1, 2]
    }
  ],
  "recommendedImageParagraphs": [
    {
      "paragraphIndex": 0,
      "description": "Detailed description of what should be illustrated",
      "rationale": "Why this moment is visually impactful",
      "visualElements": ["key element 1", "key element 2"]
    }
  ],
  "visualConsistency": {
    "styleRecommendations": ["recommendation 1", "recommendation 2"],
    "colorPalette": ["primary color 1", "primary color 2", "accent color"],
    "recurringMotifs": ["motif 1", "motif 2"]
  },
  "storyStructure": {
    "introduction": [0, 1],
    "rising": [2, 3, 4],
    "climax": [5, 6],
    "resolution": [7, 8, 9],
    "visualPacing": "Recommendations for visual rhythm across illustrations"
  }
}"""

OptionsLike = Union[StoryOptions, Mapping[str, Any], None]


def _normalize_options(options: OptionsLike) -> StoryOptions:
    if options is None:
        return StoryOptions()
    if isinstance(options, StoryOptions):
        return options
    return StoryOptions.model_validate(dict(options))


def _build_story_prompt(
    instruction: str,
    format_instructions: str,
    options: OptionsLike,
    model: str,
    tokenizer: Optional[TokenizerAdapter],
    budget_overrides: Dict[str, Optional[int]],
) -> PromptManager:
    options = _normalize_options(options)
    manager = PromptManager(model, tokenizer=tokenizer, **budget_overrides)

    manager.add_component(STORY_SYSTEM_COMPONENT)
    manager.add_component(PromptComponent(
        id="story_instruction",
        type=ComponentType.INSTRUCTION,
        content=instruction,
        required=True,
        priority=9,
    ))

    if options.reading_level:
        manager.add_component(PromptComponent(
            id="reading_level",
            type=ComponentType.INSTRUCTION,
            content=READING_LEVEL_INSTRUCTIONS[options.reading_level],
            priority=8,
        ))

    if options.story_length:
        manager.add_component(PromptComponent(
            id="story_length",
            type=ComponentType.INSTRUCTION,
            content=f"The story should be {STORY_LENGTH_INSTRUCTIONS[options.story_length]}.",
            priority=7,
        ))

    manager.add_components([
        PromptComponent(
            id="visualization",
            type=ComponentType.INSTRUCTION,
            content=VISUALIZATION_GUIDANCE,
            priority=6,
        ),
        PromptComponent(
            id="narrative_guidance",
            type=ComponentType.INSTRUCTION,
            content=NARRATIVE_GUIDANCE,
            priority=6,
        ),
        PromptComponent(
            id="key_moments_guidance",
            type=ComponentType.INSTRUCTION,
            content=KEY_MOMENTS_GUIDANCE,
            priority=5,
        ),
        PromptComponent(
            id="format_instructions",
            type=ComponentType.FORMATTING,
            content=format_instructions,
            required=True,
            priority=4,
        ),
    ])
    return manager


def create_template_story_prompt(
    template: str,
    options: OptionsLike = None,
    model: str = DEFAULT_MODEL,
    tokenizer: Optional[TokenizerAdapter] = None,
    **budget_overrides: Optional[int]
) -> PromptManager:
    """
    Build a prompt for a story based on a theme/template.

    Args:
        template: Story theme, e.g. "space adventure"
        options: Story length and reading level
        model: Chat model the prompt targets
        tokenizer: Tokenizer adapter override
        **budget_overrides: TokenBudget fields to override

    Returns:
        PromptManager loaded with the story components
    """
    manager = _build_story_prompt(
        instruction=f'Create a children\'s story based on the theme: "{template}".',
        format_instructions=TEMPLATE_FORMAT_INSTRUCTIONS,
        options=options,
        model=model,
        tokenizer=tokenizer,
        budget_overrides=budget_overrides,
    )
    manager.set_template_variable("theme", template)
    return manager


def create_keywords_story_prompt(
    keywords: str,
    options: OptionsLike = None,
    model: str = DEFAULT_MODEL,
    tokenizer: Optional[TokenizerAdapter] = None,
    **budget_overrides: Optional[int]
) -> PromptManager:
    """Build a prompt for a story that uses the given keywords."""
    return _build_story_prompt(
        instruction=f"Create a children's story using these keywords: {keywords}.",
        format_instructions=KEYWORDS_FORMAT_INSTRUCTIONS,
        options=options,
        model=model,
        tokenizer=tokenizer,
        budget_overrides=budget_overrides,
    )


def create_story_prompt(
    params: Union[StoryGenerationParams, Mapping[str, Any]],
    model: str = DEFAULT_MODEL,
    tokenizer: Optional[TokenizerAdapter] = None,
    **budget_overrides: Optional[int]
) -> PromptManager:
    """
    Build a story prompt from generation parameters.

    Raises:
        ValidationError: If the parameters are invalid for their mode
    """
    params = parse_generation_params(params)

    if params.mode == "template" and params.template:
        return create_template_story_prompt(
            params.template, params.options, model, tokenizer, **budget_overrides
        )
    if params.mode == "keywords" and params.keywords:
        return create_keywords_story_prompt(
            params.keywords, params.options, model, tokenizer, **budget_overrides
        )

    raise ValidationError("Invalid story generation parameters")


def create_narrative_analysis_prompt(
    title: str,
    paragraphs: Sequence[str],
    theme: Optional[str] = None,
    model: str = DEFAULT_MODEL,
    tokenizer: Optional[TokenizerAdapter] = None,
    **budget_overrides: Optional[int]
) -> PromptManager:
    """Build a prompt asking a chat model for a visual narrative analysis."""
    manager = PromptManager(model, tokenizer=tokenizer, **budget_overrides)

    manager.add_component(PromptComponent(
        id="analysis_system",
        type=ComponentType.SYSTEM,
        content=ANALYSIS_SYSTEM_PROMPT,
        required=True,
        priority=10,
    ))
    manager.add_component(PromptComponent(
        id="analysis_instruction",
        type=ComponentType.INSTRUCTION,
        content=(
            f'Analyze the following children\'s story "{title}" and identify the optimal '
            "moments for illustrations, key character descriptions, emotional beats, "
            "and narrative structure."
        ),
        required=True,
        priority=9,
    ))
    manager.add_component(PromptComponent(
        id="story_content",
        type=ComponentType.CONTEXT,
        content="\n\n".join(paragraphs),
        required=True,
        priority=8,
    ))

    if theme:
        manager.add_component(PromptComponent(
            id="theme_info",
            type=ComponentType.CONTEXT,
            content=f"The story's theme is: {theme}",
            priority=7,
        ))

    manager.add_component(PromptComponent(
        id="analysis_tasks",
        type=ComponentType.INSTRUCTION,
        content=ANALYSIS_TASKS,
        required=True,
        priority=6,
    ))
    manager.add_component(PromptComponent(
        id="output_format",
        type=ComponentType.FORMATTING,
        content=ANALYSIS_OUTPUT_FORMAT,
        required=True,
        priority=5,
    ))
    return manager
