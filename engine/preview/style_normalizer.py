"""
Preview Kernel — Style Normalizer

Replaces every `class` attribute with an equivalent inline `style`,
using the utility table in tailwind_table.py. The output is portable:

- no `class` / `className` attributes remain
- variant-prefixed utilities (`hover:`, `md:`, `dark:`) and unknown
  utilities are dropped
- interactive tags keep their attributes; a missing `data-testid` is
  synthesized from the element's apparent purpose
- the root element carries a responsive sizing rule
- `<script>` and `<style>` blocks are removed
"""

from __future__ import annotations

import re
from collections import OrderedDict

from bs4 import BeautifulSoup, NavigableString, Tag

from engine.preview.tailwind_table import space_between, utility_css

INTERACTIVE_TAGS = frozenset({"button", "input", "select", "textarea", "a", "form", "label"})
ROOT_SIZING: tuple[tuple[str, str], ...] = (
    ("width", "100%"),
    ("max-width", "100%"),
    ("box-sizing", "border-box"),
)
CONTAINER_ATTR = "data-preview-root"
# html.parser lowercases attribute names
CLASS_ATTRS = ("class", "classname", "className")

_SLUG = re.compile(r"[^a-z0-9]+")


def parse_style(style: str | None) -> OrderedDict[str, str]:
    declarations: OrderedDict[str, str] = OrderedDict()
    for part in (style or "").split(";"):
        if ":" not in part:
            continue
        name, _, value = part.partition(":")
        name, value = name.strip().lower(), value.strip()
        if name and value:
            declarations[name] = value
    return declarations


def format_style(declarations: OrderedDict[str, str]) -> str:
    return "; ".join(f"{k}: {v}" for k, v in declarations.items())


def _utility_declarations(classes: list[str]) -> OrderedDict[str, str]:
    result: OrderedDict[str, str] = OrderedDict()
    for cls in classes:
        if ":" in cls:
            continue
        css = utility_css(cls.lstrip("!"))
        if css:
            result.update(parse_style(css))
    return result


def _class_list(tag: Tag) -> list[str]:
    classes: list[str] = []
    for attr in CLASS_ATTRS:
        value = tag.get(attr)
        if isinstance(value, list):
            classes.extend(value)
        elif isinstance(value, str):
            classes.extend(value.split())
    return classes


def slugify(text: str, limit: int = 32) -> str:
    slug = _SLUG.sub("-", text.lower()).strip("-")
    return slug[:limit].rstrip("-")


def _purpose(tag: Tag) -> str:
    for attr in ("aria-label", "name", "placeholder", "title"):
        value = tag.get(attr)
        if isinstance(value, str) and value.strip():
            return value
    text = tag.get_text(" ", strip=True)
    if text:
        return text
    value = tag.get("type")
    return value if isinstance(value, str) else ""


class _TestIds:
    def __init__(self, soup: BeautifulSoup) -> None:
        self.used = {t["data-testid"] for t in soup.find_all(attrs={"data-testid": True})}

    def make(self, tag: Tag) -> str:
        base = tag.name
        slug = slugify(_purpose(tag))
        if slug:
            base = f"{tag.name}-{slug}"
        candidate, n = base, 2
        while candidate in self.used:
            candidate = f"{base}-{n}"
            n += 1
        self.used.add(candidate)
        return candidate


def normalize_markup(markup: str) -> str:
    """Inline every utility class and enforce the portable-output contract."""
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(["script", "style"]):
        tag.decompose()

    test_ids = _TestIds(soup)
    for tag in soup.find_all(True):
        classes = _class_list(tag)
        if classes:
            inline = _utility_declarations(classes)
            inline.update(parse_style(tag.get("style")))
            if inline:
                tag["style"] = format_style(inline)
            for cls in classes:
                spacing = space_between(cls) if ":" not in cls else None
                if spacing is not None:
                    _space_children(tag, *spacing)
        for attr in CLASS_ATTRS:
            if attr in tag.attrs:
                del tag[attr]
        if tag.name in INTERACTIVE_TAGS and not tag.get("data-testid"):
            tag["data-testid"] = test_ids.make(tag)

    return _size_root(soup)


def _space_children(tag: Tag, prop: str, value: str) -> None:
    children = [c for c in tag.children if isinstance(c, Tag)]
    for child in children[1:]:
        style = parse_style(child.get("style"))
        style.setdefault(prop, value)
        child["style"] = format_style(style)


def _size_root(soup: BeautifulSoup) -> str:
    top = [c for c in soup.contents if isinstance(c, Tag)]
    stray_text = any(isinstance(c, NavigableString) and c.strip() for c in soup.contents if not isinstance(c, Tag))
    if len(top) == 1 and not stray_text:
        root = top[0]
        style = parse_style(root.get("style"))
        for name, value in ROOT_SIZING:
            style[name] = value
        root["style"] = format_style(style)
        return str(soup).strip()
    return wrap_in_container(str(soup).strip())


def wrap_in_container(markup: str) -> str:
    """Wrap markup in a minimal responsive container."""
    style = "; ".join(f"{k}: {v}" for k, v in ROOT_SIZING)
    return f'<div {CONTAINER_ATTR}="" style="{style}">{markup}</div>'
