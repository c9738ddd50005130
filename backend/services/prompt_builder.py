"""
Prompt builder for the generation-service stages.

Prompts are mustache templates in backend/prompts/{name}.md, rendered with
chevron. Source code and JSON go through triple-brace tags so nothing is
HTML-escaped.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import chevron

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

# Cache loaded prompts in memory (they don't change at runtime)
_cache: dict[str, str] = {}


def _load(name: str) -> str:
    """Load and cache a prompt file."""
    if name not in _cache:
        path = PROMPTS_DIR / f"{name}.md"
        _cache[name] = path.read_text()
    return _cache[name]


def to_json(value: Any) -> str:
    """Pretty JSON for embedding in a prompt."""
    return json.dumps(value, indent=2, default=str, ensure_ascii=False)


def build_prompt(name: str, context: dict[str, Any]) -> str:
    """
    Render prompt template `name` with `context`.

    Args:
        name: Template file name without extension (e.g. "demo_props")
        context: Values for the template's tags

    Returns:
        The rendered prompt text

    Raises:
        FileNotFoundError: If the template does not exist
    """
    return chevron.render(_load(name), context).strip() + "\n"
