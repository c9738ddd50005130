"""Tests for the utility table and the Style Normalizer."""

from __future__ import annotations

from bs4 import BeautifulSoup

from engine.preview.style_normalizer import (
    normalize_markup,
    parse_style,
    slugify,
    wrap_in_container,
)
from engine.preview.tailwind_table import resolve_color, space_between, utility_css

# ---------------------------------------------------------------------------
# Utility table
# ---------------------------------------------------------------------------


def test_spacing_and_sides() -> None:
    """Spacing utilities map onto the 0.25rem scale."""
    assert utility_css("p-4") == "padding: 1rem"
    assert utility_css("px-2") == "padding-left: 0.5rem; padding-right: 0.5rem"
    assert utility_css("-mt-1") == "margin-top: -0.25rem"
    assert utility_css("gap-6") == "gap: 1.5rem"


def test_typography_and_color() -> None:
    """Font size carries its line height; palette colors are Tailwind hex."""
    assert utility_css("text-sm") == "font-size: 0.875rem; line-height: 1.25rem"
    assert utility_css("text-white") == "color: #ffffff"
    assert utility_css("bg-blue-600") == "background-color: #2563eb"
    assert utility_css("font-semibold") == "font-weight: 600"


def test_arbitrary_values_and_alpha() -> None:
    """Bracketed values and /alpha suffixes resolve."""
    assert utility_css("w-[320px]") == "width: 320px"
    assert utility_css("bg-[#0a0a0a]") == "background-color: #0a0a0a"
    assert resolve_color("black/50") == "rgba(0, 0, 0, 0.5)"


def test_unknown_utilities() -> None:
    """Unknown classes return None and space-* is handled separately."""
    assert utility_css("btn-primary") is None
    assert utility_css("space-y-4") is None
    assert space_between("space-y-4") == ("margin-top", "1rem")
    assert space_between("space-x-2") == ("margin-left", "0.5rem")


# ---------------------------------------------------------------------------
# normalize_markup
# ---------------------------------------------------------------------------


def test_classes_become_inline_styles() -> None:
    """No class attribute survives; declarations land in style."""
    markup = '<div class="flex gap-4 p-4"><p class="text-sm font-semibold">Total</p></div>'
    out = normalize_markup(markup)
    assert "class=" not in out
    root = BeautifulSoup(out, "html.parser").div
    style = parse_style(root["style"])
    assert style["display"] == "flex"
    assert style["gap"] == "1rem"
    assert style["padding"] == "1rem"
    assert parse_style(root.p["style"])["font-weight"] == "600"


def test_classname_attribute_is_removed() -> None:
    """Unrendered JSX-style className attributes are treated like class."""
    out = normalize_markup('<div className="p-2">x</div>')
    assert "classname" not in out.lower()
    assert "padding: 0.5rem" in out


def test_single_root_gets_responsive_sizing() -> None:
    """A single root element receives width / max-width / box-sizing."""
    out = normalize_markup('<section class="p-2">Hi</section>')
    style = parse_style(BeautifulSoup(out, "html.parser").section["style"])
    assert style["width"] == "100%"
    assert style["max-width"] == "100%"
    assert style["box-sizing"] == "border-box"


def test_multiple_roots_wrapped() -> None:
    """Sibling roots are wrapped in one responsive container."""
    out = normalize_markup("<p>a</p><p>b</p>")
    assert out.startswith('<div data-preview-root="" style="width: 100%; max-width: 100%; box-sizing: border-box">')
    assert out.endswith("</div>")


def test_existing_inline_style_wins() -> None:
    """An author's inline declaration overrides the utility one."""
    out = normalize_markup('<p class="text-sm" style="font-size: 20px">x</p>')
    style = parse_style(BeautifulSoup(out, "html.parser").p["style"])
    assert style["font-size"] == "20px"
    assert style["line-height"] == "1.25rem"


def test_variants_and_unknown_classes_dropped() -> None:
    """hover:, md: and unknown utilities produce nothing."""
    out = normalize_markup('<a class="hover:underline md:p-8 text-blue-600 fancy" href="/x">Docs</a>')
    style = parse_style(BeautifulSoup(out, "html.parser").a["style"])
    assert style["color"] == "#2563eb"
    assert "padding" not in style
    assert 'href="/x"' in out


def test_space_between_children() -> None:
    """space-y applies a top margin to every child but the first."""
    out = normalize_markup('<ul class="space-y-2"><li>a</li><li>b</li><li>c</li></ul>')
    items = BeautifulSoup(out, "html.parser").find_all("li")
    assert items[0].get("style") is None
    assert parse_style(items[1]["style"])["margin-top"] == "0.5rem"
    assert parse_style(items[2]["style"])["margin-top"] == "0.5rem"


def test_interactive_tags_get_stable_test_ids() -> None:
    """Missing data-testid is synthesized from purpose and made unique."""
    markup = (
        "<form>"
        '<input name="email" placeholder="Email" type="email">'
        "<button>Save</button><button>Save</button>"
        '<button data-testid="custom">Other</button>'
        "</form>"
    )
    soup = BeautifulSoup(normalize_markup(markup), "html.parser")
    assert soup.input["data-testid"] == "input-email"
    assert soup.input["type"] == "email"
    assert [b["data-testid"] for b in soup.find_all("button")] == ["button-save", "button-save-2", "custom"]


def test_scripts_and_styles_removed() -> None:
    """Script and style blocks never reach the output."""
    out = normalize_markup("<div><script>alert(1)</script><style>.x{}</style><p>ok</p></div>")
    assert "<script" not in out and "<style" not in out
    assert "<p>ok</p>" in out


def test_helpers() -> None:
    """slugify and wrap_in_container."""
    assert slugify("  Save & Continue!  ") == "save-continue"
    assert wrap_in_container("<p>x</p>").startswith("<div data-preview-root")
