"""Tests for prompt template rendering."""

from __future__ import annotations

import pytest

from backend.services.prompt_builder import PROMPTS_DIR, build_prompt, to_json

TEMPLATES = [
    "demo_props",
    "transform_server",
    "transform_data",
    "transform_pure",
    "recovery",
    "verify",
    "style",
    "fallback",
]


@pytest.mark.parametrize("name", TEMPLATES)
def test_every_template_exists(name):
    assert (PROMPTS_DIR / f"{name}.md").exists()


def test_source_is_not_escaped():
    """JSX survives rendering verbatim."""
    source = 'export const A = () => <a href="/x">Tom & Jerry</a>;'
    prompt = build_prompt("verify", {"component_name": "A", "source": source, "markup": "<a>Tom &amp; Jerry</a>"})

    assert source in prompt
    assert "<a>Tom &amp; Jerry</a>" in prompt


def test_related_sections_repeat():
    prompt = build_prompt(
        "fallback",
        {
            "component_name": "Card",
            "source": "src",
            "related": [{"path": "lib/a.ts", "source": "A"}, {"path": "lib/b.ts", "source": "B"}],
        },
    )
    assert "`lib/a.ts`" in prompt
    assert "`lib/b.ts`" in prompt


def test_missing_template():
    with pytest.raises(FileNotFoundError):
        build_prompt("no_such_prompt", {})


def test_to_json_keeps_unicode():
    assert to_json({"name": "Zoë"}) == '{\n  "name": "Zoë"\n}'
