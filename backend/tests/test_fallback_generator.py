"""Tests for the Fallback Generator."""

from __future__ import annotations

import pytest

from backend.services.fallback_generator import FallbackGenerator, extract_markup
from engine.preview.errors import RenderError, ServiceError
from engine.preview.types import ComponentRecord

RECORD = ComponentRecord(file_path="components/globe.tsx", name="Globe")


def test_extract_markup_from_document():
    text = """```html
<!DOCTYPE html>
<html><head><title>x</title><style>.a{}</style></head>
<body><div><p>Earth</p></div><script>alert(1)</script></body></html>
```"""
    assert extract_markup(text) == "<div><p>Earth</p></div>"


def test_extract_markup_plain_fragment():
    assert extract_markup("  <section>Hi</section>\n") == "<section>Hi</section>"


def test_extract_markup_drops_scripts_from_fragment():
    """Scripts anywhere in a fragment are removed; attributes survive."""
    text = '<div data-x="1"><script>track()</script><p>Hi</p><noscript>enable js</noscript></div>'
    assert extract_markup(text) == '<div data-x="1"><p>Hi</p></div>'


def test_extract_markup_html_without_body():
    """A bare <html> wrapper is unwrapped."""
    assert extract_markup("<html><head><title>t</title></head><main>Map</main></html>") == "<main>Map</main>"


@pytest.mark.asyncio(loop_scope="session")
class TestGenerate:
    async def test_returns_markup(self, scripted, globe_source):
        scripted.queue("fallback", "<div><p>Earth, rotating</p></div>")

        html = await FallbackGenerator(scripted).generate(
            RECORD, globe_source, {"label": "Earth"}, {}, reason="unrenderable: 3D (react-three-fiber)"
        )

        assert html == "<div><p>Earth, rotating</p></div>"
        prompt = scripted.calls_for("fallback")[0]
        assert "3D (react-three-fiber)" in prompt
        assert '"label": "Earth"' in prompt

    async def test_service_failure_is_render_error(self, scripted, globe_source):
        scripted.queue("fallback", ServiceError("down"))
        with pytest.raises(RenderError):
            await FallbackGenerator(scripted).generate(RECORD, globe_source, {}, {})

    async def test_no_markup_is_render_error(self, scripted, globe_source):
        scripted.queue("fallback", "```html\n<script>x()</script>\n```")
        with pytest.raises(RenderError):
            await FallbackGenerator(scripted).generate(RECORD, globe_source, {}, {})
