"""
Preview Kernel — Content Checks

Deterministic rejection rules applied to rendered markup before the
Content Verifier asks the generation service. Any hit rejects the
render even when the transport reported success.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from bs4 import BeautifulSoup

LOADING_CLASSES = ("animate-pulse", "animate-spin", "skeleton", "shimmer", "spinner")
# A loading phrase, up to three words of subject, optional ellipsis, nothing else
LOADING_TEXT = re.compile(
    r"^\s*(?:loading|please wait|fetching)\b(?:\s+[\w'-]+){0,3}\s*(?:\.+|…)?\s*$",
    re.IGNORECASE,
)
ERROR_TEXT = re.compile(
    r"something went wrong|failed to (?:load|fetch)|an error occurred|unexpected error|^\s*error:|"
    r"application error|cannot read propert|is not defined|is not a function",
    re.IGNORECASE | re.MULTILINE,
)
LOREM = re.compile(r"\blorem ipsum\b|\bdolor sit amet\b", re.IGNORECASE)
MEDIA_TAGS = ("img", "svg", "video", "canvas", "input", "textarea", "select", "button", "iframe", "picture")
MIN_VISIBLE_CHARS = 3


@dataclass
class ContentCheck:
    is_valid: bool
    reason: str = ""


def _visible_soup(markup: str) -> BeautifulSoup:
    soup = BeautifulSoup(markup or "", "html.parser")
    for tag in soup.find_all(["script", "style", "template"]):
        tag.decompose()
    return soup


def visible_text(markup: str) -> str:
    return _visible_soup(markup).get_text(" ", strip=True)


def loading_phrase(markup: str) -> str | None:
    """The first text node that is a loading placeholder, if any."""
    for node in _visible_soup(markup).find_all(string=True):
        text = str(node).strip()
        if text and LOADING_TEXT.match(text):
            return text
    return None


def check_markup(markup: str | None) -> ContentCheck:
    """Reject loading, empty, error and placeholder renders."""
    if not markup or not markup.strip():
        return ContentCheck(False, "empty markup")

    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(True):
        classes = tag.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        for cls in classes:
            base = cls.split(":")[-1]
            if base in LOADING_CLASSES or "skeleton" in base:
                return ContentCheck(False, f"loading marker: class {cls}")
        if tag.get("aria-busy") == "true":
            return ContentCheck(False, 'loading marker: aria-busy="true"')
        if tag.get("role") == "progressbar" and not tag.get("aria-valuenow"):
            return ContentCheck(False, "loading marker: indeterminate progressbar")

    placeholder = loading_phrase(markup)
    if placeholder:
        return ContentCheck(False, f"loading text: {placeholder[:40]!r}")
    text = visible_text(markup)
    if ERROR_TEXT.search(text):
        return ContentCheck(False, f"error UI: {ERROR_TEXT.search(text).group(0)!r}")
    if LOREM.search(text):
        return ContentCheck(False, "placeholder lorem ipsum text")

    has_media = soup.find(MEDIA_TAGS) is not None
    if len(text.replace(" ", "")) < MIN_VISIBLE_CHARS and not has_media:
        return ContentCheck(False, "near-empty output")
    return ContentCheck(True)
