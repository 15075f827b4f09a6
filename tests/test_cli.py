"""
Tests for the command-line interface.
"""

import json
import os
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from storybook_prompts.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_environment():
    with patch.dict(os.environ, {}, clear=True):
        with patch('storybook_prompts.config.load_dotenv'):
            yield


class TestPromptCommand:
    """Test the prompt command."""

    def test_template_prompt(self, runner, patched_tiktoken):
        result = runner.invoke(cli, ['prompt', '--mode', 'template', '--template', 'space'])

        assert result.exit_code == 0, result.output
        messages = json.loads(result.output)
        assert [m["role"] for m in messages] == ["system", "user"]
        assert '"theme": "space"' in messages[1]["content"]

    def test_options(self, runner, patched_tiktoken):
        result = runner.invoke(cli, [
            'prompt', '--mode', 'keywords', '--keywords', 'owl, moon',
            '--length', 'short', '--reading-level', 'easy',
        ])

        assert result.exit_code == 0, result.output
        user = json.loads(result.output)[1]["content"]
        assert "owl, moon" in user
        assert "4-6 paragraphs" in user

    def test_show_budget(self, runner, patched_tiktoken):
        result = runner.invoke(cli, [
            'prompt', '--mode', 'template', '--template', 'space', '--show-budget',
        ])

        assert result.exit_code == 0, result.output
        assert "story_instruction" in result.output
        assert "included" in result.output
        assert "Total:" in result.output

    def test_budget_from_environment(self, runner, patched_tiktoken):
        env = {"PROMPT_TOKEN_BUDGET_TOTAL": "60", "PROMPT_TOKEN_BUDGET_RESERVED": "0"}
        with patch.dict(os.environ, env):
            result = runner.invoke(cli, [
                'prompt', '--mode', 'template', '--template', 'space', '--show-budget',
            ])

        assert result.exit_code == 0, result.output
        assert "dropped" in result.output
        assert "Dropped: " in result.output

    def test_missing_mode_value(self, runner, patched_tiktoken):
        result = runner.invoke(cli, ['prompt', '--mode', 'template'])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_model_option(self, runner, patched_tiktoken):
        result = runner.invoke(cli, [
            'prompt', '--mode', 'keywords', '--keywords', 'owl', '--model', 'gpt-4',
        ])
        assert result.exit_code == 0, result.output
        patched_tiktoken.assert_called_with("gpt-4")


class TestAnalyzeCommand:
    """Test the analyze command."""

    def test_simple_output(self, runner, tmp_path, sample_story_json):
        story_file = tmp_path / "story.json"
        story_file.write_text(sample_story_json, encoding="utf-8")

        result = runner.invoke(cli, ['analyze', str(story_file)])

        assert result.exit_code == 0, result.output
        assert "Story: Luna and the Tower of Stars (10 paragraphs)" in result.output
        assert "Main characters: Luna, Pip" in result.output
        assert "[7] climax" in result.output
        assert "Image prompts:" in result.output

    def test_json_output(self, runner, tmp_path, sample_story_json):
        story_file = tmp_path / "story.json"
        story_file.write_text(sample_story_json, encoding="utf-8")

        result = runner.invoke(cli, ['analyze', str(story_file), '--format', 'json'])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["analysis"]["recommended_image_paragraphs"] == [0, 3, 7, 9]
        assert [p["paragraphIndex"] for p in data["imagePrompts"]] == [0, 3, 7, 9]

    def test_invalid_story_file(self, runner, tmp_path):
        story_file = tmp_path / "story.json"
        story_file.write_text('{"title": "No content"}', encoding="utf-8")

        result = runner.invoke(cli, ['analyze', str(story_file)])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ['analyze', str(tmp_path / "nope.json")])
        assert result.exit_code != 0

    def test_file_not_utf8(self, runner, tmp_path):
        story_file = tmp_path / "story.json"
        story_file.write_bytes(b'{"title": "\xff\xfe", "content": ["One."]}')

        result = runner.invoke(cli, ['analyze', str(story_file)])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert not isinstance(result.exception, UnicodeDecodeError)


class TestCountTokensCommand:
    """Test the count-tokens command."""

    def test_counts(self, runner, patched_tiktoken):
        result = runner.invoke(cli, ['count-tokens', 'one two three'])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "3"
