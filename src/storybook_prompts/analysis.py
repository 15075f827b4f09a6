"""
Story Content Analyzer

Analyzes generated story text to find the characters, settings and narrative
beats that make good illustrations, then recommends which paragraphs to
illustrate.

The analysis is purely lexical (regular expressions and keyword lists), so
it is deterministic for identical input. The keyword lists live in
AnalysisLexicon and can be tuned without touching the algorithm.
"""

import re
from collections import Counter
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

# Beat importance on a 1-10 scale
INTRODUCTION_IMPORTANCE = 9
ACTION_IMPORTANCE = 7
CLIMAX_IMPORTANCE = 10
RESOLUTION_IMPORTANCE = 8

MAX_MAIN_CHARACTERS = 3
MAX_ILLUSTRATIONS = 4
SETTING_SCAN_PARAGRAPHS = 5
MIN_CHARACTER_MENTIONS = 2

# Elements at or above this importance are never replaced by a character shot
PROTECTED_IMPORTANCE = 8

NEUTRAL_TONE = "neutral"

NAME_PATTERN = re.compile(r"\b[A-Z][a-z]+\b")


class NarrativeType(str, Enum):
    """Canonical narrative beats."""
    INTRODUCTION = "introduction"
    ACTION = "action"
    CLIMAX = "climax"
    RESOLUTION = "resolution"


@dataclass(frozen=True)
class AnalysisLexicon:
    """Keyword lists driving the heuristic analysis."""
    stop_words: Tuple[str, ...] = (
        "The", "A", "An", "It", "This", "That", "Then", "But", "And",
    )
    story_setting_indicators: Tuple[str, ...] = (
        "in the", "at the", "inside", "outside", "in a", "near the",
        "beneath", "within", "around", "village", "forest", "castle",
        "house", "room", "city", "town", "kingdom", "ocean", "sea", "school",
    )
    paragraph_setting_indicators: Tuple[str, ...] = (
        "in the", "at the", "inside", "outside", "in a", "near the",
    )
    action_words: Tuple[str, ...] = (
        "suddenly", "quickly", "raced", "jumped", "ran", "flew",
        "shouted", "exclaimed", "burst", "surprise", "discovery",
    )
    climax_indicators: Tuple[str, ...] = (
        "finally", "suddenly", "at last", "to their surprise",
        "amazing", "incredible", "astonished", "shocked", "realized",
        "discovered", "found", "revealed",
    )
    action_patterns: Tuple[str, ...] = (
        r"\b(ran|jumped|flew|swam|climbed|found|discovered|opened|closed|said|shouted|whispered)[^.!?]+",
        r"\b(looked|saw|heard|felt|touched|smelled|tasted)[^.!?]+",
        r"\b(went|came|moved|traveled|journeyed|walked)[^.!?]+",
    )
    tone_keywords: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
        ("happy", ("happy", "joy", "excited", "fun", "laugh", "smile", "delight")),
        ("sad", ("sad", "unhappy", "cry", "tear", "lonely", "sorrow", "upset")),
        ("scared", ("afraid", "fear", "scary", "terrified", "frightened", "nervous")),
        ("angry", ("angry", "mad", "furious", "rage", "yelled", "shouted")),
        ("peaceful", ("calm", "quiet", "peaceful", "gentle", "soft", "serene")),
        ("mysterious", ("mystery", "strange", "weird", "curious", "wonder", "magical")),
        ("adventurous", ("adventure", "explore", "discover", "journey", "quest", "exciting")),
    )
    climax_exclamation_bonus: int = 2


DEFAULT_LEXICON = AnalysisLexicon()


@dataclass(frozen=True)
class CharacterDescription:
    """A recurring character, for visual consistency across illustrations."""
    name: str
    description: str
    first_appearance: int
    importance: int


@dataclass(frozen=True)
class SettingDescription:
    """A location established early in the story."""
    name: str
    description: str
    first_appearance: int


@dataclass(frozen=True)
class NarrativeElement:
    """A key moment of the story."""
    paragraph_index: int
    type: NarrativeType
    importance: int
    characters: Tuple[str, ...]
    setting: str
    action: str
    description: str
    emotional_tone: str


@dataclass(frozen=True)
class StoryAnalysis:
    """Complete analysis of one story."""
    title: str
    theme: Optional[str] = None
    main_characters: Tuple[CharacterDescription, ...] = field(default_factory=tuple)
    settings: Tuple[SettingDescription, ...] = field(default_factory=tuple)
    narrative_elements: Tuple[NarrativeElement, ...] = field(default_factory=tuple)
    recommended_image_paragraphs: Tuple[int, ...] = field(default_factory=tuple)

    def element_at(self, paragraph_index: int) -> Optional[NarrativeElement]:
        """First narrative element located at a paragraph, if any."""
        for element in self.narrative_elements:
            if element.paragraph_index == paragraph_index:
                return element
        return None

    def to_dict(self) -> Dict:
        data = asdict(self)
        for element in data["narrative_elements"]:
            element["type"] = element["type"].value
        return data


def _count_keywords(text: str, keywords: Sequence[str]) -> int:
    """Count how many keywords occur in text (presence, not frequency)."""
    return sum(1 for keyword in keywords if keyword in text)


def _resolve_range(start: int, end: int) -> Tuple[int, int]:
    """Widen an empty half-open range to cover its start paragraph."""
    return start, max(end, start + 1)


class StoryContentAnalyzer:
    """Heuristic analyzer for story text."""

    def __init__(self, lexicon: AnalysisLexicon = DEFAULT_LEXICON):
        self.lexicon = lexicon
        self._stop_words = frozenset(lexicon.stop_words)
        self._action_patterns = [re.compile(p, re.IGNORECASE) for p in lexicon.action_patterns]

    def analyze(
        self,
        title: str,
        paragraphs: Sequence[str],
        theme: Optional[str] = None
    ) -> StoryAnalysis:
        """
        Analyze a story.

        Args:
            title: Story title
            paragraphs: Story paragraphs in order
            theme: Optional story theme

        Returns:
            StoryAnalysis with illustration recommendations
        """
        paragraphs = list(paragraphs)
        main_characters = self.build_main_characters(paragraphs)
        settings = self.extract_settings(paragraphs)
        elements = self.identify_narrative_elements(paragraphs)
        recommended = self.select_image_paragraphs(elements, main_characters)

        return StoryAnalysis(
            title=title,
            theme=theme,
            main_characters=tuple(main_characters),
            settings=tuple(settings),
            narrative_elements=tuple(elements),
            recommended_image_paragraphs=tuple(recommended),
        )

    def extract_characters(self, paragraphs: Sequence[str]) -> Dict[str, int]:
        """
        Find likely character names and count their mentions.

        Capitalized words outside the stop list that appear at least twice
        are treated as characters.

        Returns:
            Mapping of name to mention count, in order of first mention
        """
        full_text = " ".join(paragraphs)
        counts = Counter(
            name for name in NAME_PATTERN.findall(full_text)
            if name not in self._stop_words
        )
        return {
            name: count for name, count in counts.items()
            if count >= MIN_CHARACTER_MENTIONS
        }

    def build_main_characters(self, paragraphs: Sequence[str]) -> List[CharacterDescription]:
        """Top characters by importance (mentions / 2, clamped to 1-10)."""
        full_text = " ".join(paragraphs)
        characters = []

        for name, mentions in self.extract_characters(paragraphs).items():
            first_appearance = next(
                (i for i, p in enumerate(paragraphs) if name.lower() in p.lower()),
                0,
            )
            desc_match = re.search(
                rf"{re.escape(name)}[^.!?]*was[^.!?]*", full_text, re.IGNORECASE
            )
            characters.append(CharacterDescription(
                name=name,
                description=desc_match.group(0) if desc_match else f"Character named {name}",
                first_appearance=first_appearance,
                importance=min(10, max(1, -(-mentions // 2))),
            ))

        characters.sort(key=lambda c: c.importance, reverse=True)
        return characters[:MAX_MAIN_CHARACTERS]

    def extract_settings(self, paragraphs: Sequence[str]) -> List[SettingDescription]:
        """
        Extract at most one setting phrase from each of the first paragraphs.

        The phrase runs from the first matching indicator to the end of its
        sentence.
        """
        settings = []
        for index, paragraph in enumerate(paragraphs[:SETTING_SCAN_PARAGRAPHS]):
            phrase = self._extract_phrase(paragraph, self.lexicon.story_setting_indicators)
            if phrase is not None:
                settings.append(SettingDescription(
                    name=phrase,
                    description=paragraph,
                    first_appearance=index,
                ))
        return settings

    @staticmethod
    def _extract_phrase(paragraph: str, indicators: Sequence[str]) -> Optional[str]:
        lowered = paragraph.lower()
        for indicator in indicators:
            position = lowered.find(indicator)
            if position == -1:
                continue
            sentence_end = paragraph.find(".", position)
            end = sentence_end if sentence_end > position else len(paragraph)
            return paragraph[position:end].strip()
        return None

    def identify_narrative_elements(self, paragraphs: Sequence[str]) -> List[NarrativeElement]:
        """
        Identify the introduction, action, climax and resolution beats.

        Each beat is optional: action needs more than two paragraphs, climax
        more than three, resolution more than one.
        """
        total = len(paragraphs)
        elements = []

        if total > 0:
            elements.append(self._make_element(
                paragraphs, 0, NarrativeType.INTRODUCTION, INTRODUCTION_IMPORTANCE
            ))

        if total > 2:
            index = self.find_action_paragraph(paragraphs, 1, total * 6 // 10)
            elements.append(self._make_element(
                paragraphs, index, NarrativeType.ACTION, ACTION_IMPORTANCE
            ))

        if total > 3:
            index = self.find_climax_paragraph(paragraphs, total * 6 // 10, total * 9 // 10)
            elements.append(self._make_element(
                paragraphs, index, NarrativeType.CLIMAX, CLIMAX_IMPORTANCE
            ))

        if total > 1:
            elements.append(self._make_element(
                paragraphs, total - 1, NarrativeType.RESOLUTION, RESOLUTION_IMPORTANCE
            ))

        return elements

    def _make_element(
        self,
        paragraphs: Sequence[str],
        index: int,
        element_type: NarrativeType,
        importance: int
    ) -> NarrativeElement:
        paragraph = paragraphs[index]
        return NarrativeElement(
            paragraph_index=index,
            type=element_type,
            importance=importance,
            characters=tuple(self.extract_names(paragraph)),
            setting=self.extract_setting(paragraph),
            action=self.extract_action(paragraph),
            description=paragraph,
            emotional_tone=self.determine_emotional_tone(paragraph),
        )

    def find_action_paragraph(self, paragraphs: Sequence[str], start: int, end: int) -> int:
        """
        Highest scoring paragraph in [start, end) by action-word hits.

        Falls back to the middle of the range when nothing scores.
        """
        start, end = _resolve_range(start, min(end, len(paragraphs)))
        best_index, best_score = -1, 0

        for index in range(start, min(end, len(paragraphs))):
            score = _count_keywords(paragraphs[index].lower(), self.lexicon.action_words)
            if score > best_score:
                best_index, best_score = index, score

        if best_index == -1:
            return (start + end - 1) // 2
        return best_index

    def find_climax_paragraph(self, paragraphs: Sequence[str], start: int, end: int) -> int:
        """
        Highest scoring paragraph in [start, end) by climax indicators,
        with a bonus per exclamation mark.

        Falls back to the paragraph three quarters of the way through.
        """
        start, end = _resolve_range(start, min(end, len(paragraphs)))
        best_index, best_score = -1, 0

        for index in range(start, min(end, len(paragraphs))):
            paragraph = paragraphs[index].lower()
            score = _count_keywords(paragraph, self.lexicon.climax_indicators)
            score += paragraph.count("!") * self.lexicon.climax_exclamation_bonus
            if score > best_score:
                best_index, best_score = index, score

        if best_index == -1:
            return min(len(paragraphs) * 3 // 4, len(paragraphs) - 1)
        return best_index

    def extract_names(self, paragraph: str) -> List[str]:
        """Capitalized non-stop words in a paragraph, de-duplicated in order."""
        names = []
        for name in NAME_PATTERN.findall(paragraph):
            if name not in self._stop_words and name not in names:
                names.append(name)
        return names

    def extract_setting(self, paragraph: str) -> str:
        phrase = self._extract_phrase(paragraph, self.lexicon.paragraph_setting_indicators)
        return phrase or ""

    def extract_action(self, paragraph: str) -> str:
        """First verb-led phrase (motion, senses, speech) in a paragraph."""
        for pattern in self._action_patterns:
            match = pattern.search(paragraph)
            if match:
                return match.group(0).strip()
        return ""

    def determine_emotional_tone(self, paragraph: str) -> str:
        """Tone category with the most keyword hits; neutral when none hit."""
        lowered = paragraph.lower()
        best_tone, best_count = NEUTRAL_TONE, 0
        for tone, keywords in self.lexicon.tone_keywords:
            count = _count_keywords(lowered, keywords)
            if count > best_count:
                best_tone, best_count = tone, count
        return best_tone

    def select_image_paragraphs(
        self,
        elements: Sequence[NarrativeElement],
        characters: Sequence[CharacterDescription]
    ) -> List[int]:
        """
        Choose paragraphs to illustrate.

        Starts from the most important beats and makes room for the main
        character's first appearance, replacing the least important beat only
        when that beat is below PROTECTED_IMPORTANCE. Returned in story order.
        """
        ranked = sorted(elements, key=lambda e: e.importance, reverse=True)
        recommended = [e.paragraph_index for e in ranked[:MAX_ILLUSTRATIONS]]

        if characters and characters[0].first_appearance not in recommended:
            introduction = characters[0].first_appearance
            if len(recommended) < MAX_ILLUSTRATIONS:
                recommended.append(introduction)
            elif ranked[MAX_ILLUSTRATIONS - 1].importance < PROTECTED_IMPORTANCE:
                recommended[MAX_ILLUSTRATIONS - 1] = introduction

        return sorted(set(recommended))


def analyze_story_content(
    title: str,
    paragraphs: Sequence[str],
    theme: Optional[str] = None,
    lexicon: AnalysisLexicon = DEFAULT_LEXICON
) -> StoryAnalysis:
    """Analyze a story with a fresh StoryContentAnalyzer."""
    return StoryContentAnalyzer(lexicon).analyze(title, paragraphs, theme)
