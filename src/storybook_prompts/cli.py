"""
Command-line interface.

Provides commands for inspecting story prompts, analyzing generated stories
and counting tokens without calling a chat model.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from .analysis import analyze_story_content
from .config import load_settings
from .image_prompts import create_story_image_prompts
from .logging_config import configure_logging
from .models import parse_story_response
from .prompts.manager import BuiltPrompt
from .prompts.story_templates import create_story_prompt
from .tokenizer import TokenizerAdapter
from .utils.errors import StoryPromptError


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _echo_budget(built: BuiltPrompt) -> None:
    click.echo(f"\n{'Component':<24} {'Type':<12} {'Tokens':>8}  Status")
    click.echo("-" * 56)
    for record in built.components:
        status = "included" if record.included else "dropped"
        click.echo(f"{record.id:<24} {record.type.value:<12} {record.tokens:>8}  {status}")
    click.echo(
        f"\nSystem: {built.system_tokens} tokens | User: {built.user_tokens} tokens | "
        f"Total: {built.total_tokens} tokens"
    )
    if built.dropped_ids:
        click.echo(f"Dropped: {', '.join(built.dropped_ids)}")


@click.group()
@click.option('--log-level', default=None, help='Logging level (default: LOG_LEVEL or INFO)')
def cli(log_level: Optional[str]) -> None:
    """Storybook prompt tooling."""
    configure_logging(log_level)


@cli.command()
@click.option('--mode', type=click.Choice(['template', 'keywords']), required=True,
              help='Story generation mode')
@click.option('--template', type=str, help='Story theme (template mode)')
@click.option('--keywords', type=str, help='Comma-separated keywords (keywords mode)')
@click.option('--length', 'story_length', type=click.Choice(['short', 'medium', 'long']),
              help='Story length')
@click.option('--reading-level', type=click.Choice(['easy', 'moderate', 'advanced']),
              help='Reading level')
@click.option('--model', type=str,
              help='Target chat model (default: LLM_MODEL or gemini-2.5-flash)')
@click.option('--show-budget', is_flag=True, help='Show the per-component token audit')
def prompt(
    mode: str,
    template: Optional[str],
    keywords: Optional[str],
    story_length: Optional[str],
    reading_level: Optional[str],
    model: Optional[str],
    show_budget: bool
) -> None:
    """
    Print the chat messages for a story request as JSON.

    Exits with code 1 when the parameters are invalid for the mode.
    """
    try:
        settings = load_settings()
        params = {
            "mode": mode,
            "template": template,
            "keywords": keywords,
            "options": {"storyLength": story_length, "readingLevel": reading_level},
        }
        manager = create_story_prompt(
            params,
            model=model or settings.llm_model,
            **settings.budget_overrides()
        )
        built = manager.build_prompt()
        click.echo(json.dumps(manager.create_chat_completion_messages(), indent=2))
        if show_budget:
            _echo_budget(built)
    except (StoryPromptError, ValueError) as e:
        _fail(str(e))


@cli.command()
@click.argument('story_json', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', 'output_format', type=click.Choice(['json', 'simple']),
              default='simple', help='Output format (default: simple)')
def analyze(story_json: str, output_format: str) -> None:
    """
    Analyze a story JSON file and print its illustration prompts.

    The file uses the story response shape: title, content and optional
    theme.
    """
    try:
        story = parse_story_response(Path(story_json).read_text(encoding="utf-8"))
    except (StoryPromptError, OSError, UnicodeDecodeError) as e:
        _fail(str(e))
        return

    analysis = analyze_story_content(story.title, story.content, story.theme)
    image_prompts = create_story_image_prompts(
        story.title, story.content, story.theme, analysis=analysis
    )

    if output_format == 'json':
        click.echo(json.dumps({
            "analysis": analysis.to_dict(),
            "imagePrompts": [
                {"paragraphIndex": index, "prompt": text} for index, text in image_prompts
            ],
        }, indent=2))
        return

    click.echo(f"Story: {story.title} ({len(story.content)} paragraphs)")
    if analysis.main_characters:
        names = ", ".join(c.name for c in analysis.main_characters)
        click.echo(f"Main characters: {names}")
    else:
        click.echo("Main characters: none detected")
    if analysis.settings:
        click.echo(f"Setting: {analysis.settings[0].description}")

    click.echo("\nNarrative elements:")
    for element in analysis.narrative_elements:
        click.echo(
            f"  [{element.paragraph_index}] {element.type.value:<12} "
            f"importance {element.importance:<3} tone: {element.emotional_tone}"
        )

    click.echo("\nImage prompts:")
    for index, text in image_prompts:
        click.echo(f"  [{index}] {text}")


@cli.command('count-tokens')
@click.argument('text')
@click.option('--model', type=str, default=None, help='Model whose tokenizer to use')
def count_tokens(text: str, model: Optional[str]) -> None:
    """Count tokens in TEXT."""
    settings = load_settings()
    tokenizer = TokenizerAdapter(model or settings.llm_model)
    click.echo(str(tokenizer.count_tokens(text)))


if __name__ == '__main__':
    cli()
