"""
Image prompt generation.

Turns analyzed story paragraphs into illustration prompts that carry the
narrative context (scene type, characters, setting, emotional tone), plus
style, cover and enhancement helpers for child-friendly illustrations.
All functions are pure string assembly.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from .analysis import NarrativeType, StoryAnalysis, analyze_story_content

IMAGE_SYSTEM_PROMPT = (
    "You are a children's book illustrator who creates age-appropriate, child-friendly "
    "illustrations with clear visuals and balanced compositions. Your illustrations "
    "should be engaging and support the story's narrative."
)

DEFAULT_SCENE_TYPE = "scene from a children's story"

# (scene type, narrative context) per beat
SCENE_DESCRIPTIONS: Dict[NarrativeType, Tuple[str, str]] = {
    NarrativeType.INTRODUCTION: (
        "establishing shot",
        "This scene introduces the story's main setting and character(s).",
    ),
    NarrativeType.ACTION: (
        "action scene",
        "This is an important moment showing characters in action.",
    ),
    NarrativeType.CLIMAX: (
        "climactic moment",
        "This is the emotional high point of the story.",
    ),
    NarrativeType.RESOLUTION: (
        "resolution scene",
        "This scene shows how the story concludes.",
    ),
}

ART_STYLES: Dict[str, str] = {
    "watercolor": "Use watercolor style with soft colors and gentle transitions.",
    "cartoon": "Use cartoon style with clean outlines and bright colors.",
    "papercraft": "Use layered paper craft style with a handmade feel.",
    "vintage": "Use vintage storybook style with a classic feel.",
    "digital": "Use modern digital illustration style with clean lines.",
    "storybook": "Use traditional children's storybook style with warm colors.",
}

DEFAULT_ART_STYLE = "storybook"

SCENE_COMPOSITIONS: Dict[str, str] = {
    "character_focused": "Focus on the characters in the center of the image.",
    "landscape": "Show a wider view of the environment with characters in it.",
    "action": "Show characters in motion with dynamic poses.",
    "intimate": "Create a close, personal view of the characters.",
    "dramatic": "Use interesting viewpoints to show the scene.",
}

LIGHTING_STYLES: Dict[str, str] = {
    "soft": "Use soft, gentle lighting.",
    "golden_hour": "Use warm sunlight lighting.",
    "moonlight": "Use cool, blue-tinted lighting.",
    "dramatic": "Use contrast between light and shadow.",
    "magical": "Use glowing, colorful lighting effects.",
}

THEME_STYLES: Dict[str, str] = {
    "adventure": "Use warm colors, outdoor lighting, and exploration elements.",
    "animals": "Use natural colors, gentle lighting, and accurate animal features.",
    "fantasy": "Use dreamy colors, magical lighting, and fantasy elements.",
    "space": "Use deep blues/purples, starlight, and cosmic elements.",
    "underwater": "Use blue/green colors, water effects, and marine life.",
    "dinosaurs": "Use earth tones, prehistoric plants, and dinosaur elements.",
    "pirates": "Use sea blues, wooden textures, and nautical elements.",
    "fairy": "Use soft pastels, glowing effects, and miniature perspective.",
}

COVER_THEME_GUIDANCE: Dict[str, str] = {
    "adventure": "Show exploration elements like paths or maps.",
    "animals": "Show the main animal character in their natural habitat.",
    "fantasy": "Include magical elements and fantastical scenery.",
    "space": "Show stars, planets, or spacecraft with cosmic colors.",
    "underwater": "Show underwater scene with marine life and water effects.",
    "pirates": "Include nautical elements like ships, maps, or treasure.",
    "fairy": "Show the tiny scale of fairy world among flowers or leaves.",
}


def create_context_aware_image_prompt(
    paragraph: str,
    analysis: StoryAnalysis,
    paragraph_index: int
) -> str:
    """
    Create a narrative-aware illustration prompt for one paragraph.

    Args:
        paragraph: Paragraph text to illustrate
        analysis: Analysis of the whole story
        paragraph_index: Index of the paragraph in the story

    Returns:
        Illustration prompt
    """
    element = analysis.element_at(paragraph_index)
    scene_type, narrative_context = DEFAULT_SCENE_TYPE, ""
    if element is not None:
        scene_type, narrative_context = SCENE_DESCRIPTIONS[element.type]

    lowered = paragraph.lower()

    characters_present = [
        character for character in analysis.main_characters
        if character.name.lower() in lowered
    ]
    character_context = ""
    if characters_present:
        character_context = "Including character(s): " + "; ".join(
            character.description for character in characters_present
        )

    setting_context = ""
    setting = next(
        (s for s in analysis.settings if s.name.lower() in lowered),
        None,
    )
    if setting is not None:
        setting_context = f"Setting: {setting.name}. "

    emotional_context = ""
    if element is not None and element.emotional_tone != "neutral":
        emotional_context = f"The emotional tone is {element.emotional_tone}. "

    return (
        f'Illustration for "{analysis.title}": A {scene_type} showing {paragraph} '
        f"{character_context} {setting_context}{emotional_context}{narrative_context}"
    ).strip()


def create_story_image_prompts(
    title: str,
    paragraphs: Sequence[str],
    theme: Optional[str] = None,
    analysis: Optional[StoryAnalysis] = None
) -> List[Tuple[int, str]]:
    """
    Create prompts for every recommended illustration paragraph.

    Returns:
        (paragraph index, prompt) pairs in story order
    """
    if analysis is None:
        analysis = analyze_story_content(title, paragraphs, theme)
    return [
        (index, create_context_aware_image_prompt(paragraphs[index], analysis, index))
        for index in analysis.recommended_image_paragraphs
    ]


def _art_style(art_style: Optional[str]) -> str:
    if art_style is None:
        return ART_STYLES[DEFAULT_ART_STYLE]
    if art_style not in ART_STYLES:
        raise ValueError(
            f"Unknown art style: {art_style}. Available styles: {', '.join(ART_STYLES)}"
        )
    return ART_STYLES[art_style]


def enhance_image_prompt(base_prompt: str, art_style: Optional[str] = None) -> str:
    """
    Wrap a prompt with style, composition and lighting guidance.

    Composition and lighting are chosen from words in the prompt.
    """
    style = _art_style(art_style)
    lowered = base_prompt.lower()

    composition = SCENE_COMPOSITIONS["character_focused"]
    if "action" in lowered or "running" in lowered:
        composition = SCENE_COMPOSITIONS["action"]
    elif "landscape" in lowered or "forest" in lowered:
        composition = SCENE_COMPOSITIONS["landscape"]

    lighting = LIGHTING_STYLES["soft"]
    if "night" in lowered or "dark" in lowered:
        lighting = LIGHTING_STYLES["moonlight"]
    elif "magic" in lowered or "sparkle" in lowered:
        lighting = LIGHTING_STYLES["magical"]
    elif "sunset" in lowered or "warm" in lowered:
        lighting = LIGHTING_STYLES["golden_hour"]

    return f"""Children's book illustration showing: {base_prompt}

Style: {style}
Composition: {composition}
Lighting: {lighting}

Make the illustration clear, age-appropriate for children 4-10, with a positive feeling."""


def create_style_prompt(
    title: str,
    theme: Optional[str] = None,
    art_style: Optional[str] = None
) -> str:
    """Style guidance that keeps a series of illustrations consistent."""
    style = f'Maintain consistent style across all illustrations for "{title}":'

    if theme and theme.lower() in THEME_STYLES:
        style += f" {THEME_STYLES[theme.lower()]}"

    if art_style is not None:
        style += f" {_art_style(art_style)}"

    return style


def create_cover_prompt(title: str, description: str, theme: Optional[str] = None) -> str:
    theme_guidance = ""
    if theme and theme.lower() in COVER_THEME_GUIDANCE:
        theme_guidance = f" {COVER_THEME_GUIDANCE[theme.lower()]}"

    return f"""Cover illustration for children's book "{title}".

Story summary: {description}

Create a clear, central illustration showing the main character(s) or setting.{theme_guidance}

Make the cover child-friendly, colorful, and inviting with space for the title text."""
