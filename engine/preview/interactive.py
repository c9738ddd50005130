"""
Preview Kernel — Interactive Element Extraction

Lists the elements of final preview markup that a scripted cursor can
target, each with a stable selector, a human label and a suggested verb.
Derived read-only from the markup.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from engine.preview.types import InteractionVerb, InteractiveElement

TEXT_INPUT_TYPES = frozenset({"text", "email", "password", "search", "tel", "url", "number", "date", "time", ""})
CHECK_INPUT_TYPES = frozenset({"checkbox", "radio"})
CLICK_INPUT_TYPES = frozenset({"submit", "button", "reset", "image", "file"})
CHECK_ROLES = frozenset({"checkbox", "switch", "radio", "menuitemcheckbox"})
CLICK_ROLES = frozenset({"button", "link", "tab", "menuitem", "option", "combobox"})


def _attr(tag: Tag, name: str) -> str | None:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def _is_candidate(tag: Tag) -> bool:
    if tag.name in ("button", "select", "textarea", "summary"):
        return True
    if tag.name == "input":
        return (_attr(tag, "type") or "text").lower() != "hidden"
    if tag.name == "a":
        return tag.get("href") is not None or tag.get("data-testid") is not None
    role = (_attr(tag, "role") or "").lower()
    if role in CHECK_ROLES or role in CLICK_ROLES:
        return True
    return _attr(tag, "tabindex") not in (None, "-1")


def _action(tag: Tag) -> InteractionVerb:
    role = (_attr(tag, "role") or "").lower()
    if tag.name == "input":
        input_type = (_attr(tag, "type") or "text").lower()
        if input_type in CHECK_INPUT_TYPES:
            return "check"
        if input_type in CLICK_INPUT_TYPES:
            return "click"
        if input_type == "range":
            return "focus"
        return "type"
    if tag.name == "textarea":
        return "type"
    if tag.name == "select":
        return "select"
    if role in CHECK_ROLES:
        return "check"
    if tag.name in ("button", "a", "summary") or role in CLICK_ROLES:
        return "click"
    if _attr(tag, "title") or _attr(tag, "aria-describedby"):
        return "hover"
    return "focus"


def _label(tag: Tag) -> str:
    for name in ("aria-label", "title"):
        value = _attr(tag, name)
        if value and value.strip():
            return value.strip()
    text = tag.get_text(" ", strip=True)
    if text and tag.name != "select":
        return text[:80]
    for name in ("placeholder", "name", "value", "alt"):
        value = _attr(tag, name)
        if value and value.strip():
            return value.strip()
    image = tag.find("img")
    if isinstance(image, Tag) and _attr(image, "alt"):
        return _attr(image, "alt") or tag.name
    return tag.name


def _css_path(tag: Tag) -> str:
    parts: list[str] = []
    node: Tag | None = tag
    while isinstance(node, Tag) and node.name != "[document]":
        parent = node.parent
        siblings = [s for s in parent.find_all(node.name, recursive=False)] if isinstance(parent, Tag) else [node]
        index = next((i for i, s in enumerate(siblings) if s is node), 0) + 1
        parts.append(f"{node.name}:nth-of-type({index})")
        node = parent if isinstance(parent, Tag) else None
    return " > ".join(reversed(parts))


def _selector(tag: Tag) -> str:
    test_id = _attr(tag, "data-testid")
    if test_id:
        return f'[data-testid="{test_id}"]'
    element_id = _attr(tag, "id")
    if element_id:
        return f"#{element_id}"
    name = _attr(tag, "name")
    if name:
        return f'{tag.name}[name="{name}"]'
    return _css_path(tag)


def extract_interactive_elements(markup: str) -> list[InteractiveElement]:
    soup = BeautifulSoup(markup or "", "html.parser")
    elements: list[InteractiveElement] = []
    for tag in soup.find_all(True):
        if not _is_candidate(tag):
            continue
        elements.append(
            InteractiveElement(
                tag=tag.name,
                selector=_selector(tag),
                label=_label(tag),
                action=_action(tag),
                input_type=_attr(tag, "type") if tag.name == "input" else None,
                name=_attr(tag, "name"),
                placeholder=_attr(tag, "placeholder"),
                role=_attr(tag, "role"),
                test_id=_attr(tag, "data-testid"),
            )
        )
    return elements
