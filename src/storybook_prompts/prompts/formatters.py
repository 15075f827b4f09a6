"""
Common prompt formatting helpers.
"""

import json
from typing import Any, Iterable, Mapping


def format_list(items: Iterable[str], numbered: bool = False) -> str:
    """
    Format items as a numbered or bulleted list.

    Args:
        items: List items
        numbered: Use "1." style numbers instead of bullets

    Returns:
        Newline-separated list
    """
    lines = []
    for index, item in enumerate(items, start=1):
        lines.append(f"{index}. {item}" if numbered else f"• {item}")
    return "\n".join(lines)


def format_section(title: str, content: str) -> str:
    return f"## {title}\n\n{content}"


def format_key_value(data: Mapping[str, Any]) -> str:
    return "\n".join(f"{key}: {value}" for key, value in data.items())


def format_code(code: str, language: str = "") -> str:
    return f"```{language}\n{code}\n```"


def format_json(data: Mapping[str, Any]) -> str:
    """Format data as a fenced, 2-space indented JSON block."""
    return "```json\n" + json.dumps(data, indent=2, ensure_ascii=False) + "\n```"
