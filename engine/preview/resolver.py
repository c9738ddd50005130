"""
Preview Kernel — Local Module Resolution

Resolves import specifiers against the repository source map: path-alias
expansion first, then the exact path, then extension variants, then index
files. Aliases come from tsconfig.json / jsconfig.json when present.
"""

from __future__ import annotations

import json
import logging
import posixpath
import re
from collections.abc import Mapping

from engine.preview.imports import is_relative_specifier

logger = logging.getLogger(__name__)

EXTENSIONS: tuple[str, ...] = (".tsx", ".ts", ".jsx", ".js")
INDEX_FILES: tuple[str, ...] = ("index.tsx", "index.ts", "index.jsx", "index.js")
CONFIG_FILES: tuple[str, ...] = ("tsconfig.json", "jsconfig.json")
DEFAULT_ALIASES: dict[str, list[str]] = {"@/*": ["./*", "./src/*"], "~/*": ["./*", "./src/*"]}

STYLE_EXTENSIONS: tuple[str, ...] = (".css", ".scss", ".sass", ".less")
IMAGE_EXTENSIONS: tuple[str, ...] = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".avif", ".ico", ".bmp")
FONT_EXTENSIONS: tuple[str, ...] = (".woff", ".woff2", ".ttf", ".otf", ".eot")

_LINE_COMMENT = re.compile(r"(?<![:\"'])//[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def normalize_path(path: str) -> str:
    path = path.replace("\\", "/")
    normalized = posixpath.normpath(path)
    if normalized == ".":
        return ""
    return normalized.lstrip("/").removeprefix("./")


def asset_kind(specifier: str) -> str | None:
    """Classify a specifier that points at a non-code asset."""
    path = specifier.split("?")[0].lower()
    if path.endswith(STYLE_EXTENSIONS):
        return "css-module" if re.search(r"\.module\.(css|scss|sass|less)$", path) else "css"
    if path.endswith(".svg"):
        return "svg"
    if path.endswith(IMAGE_EXTENSIONS):
        return "image"
    if path.endswith(FONT_EXTENSIONS):
        return "font"
    if path.endswith(".json"):
        return "json"
    return None


def read_tsconfig(text: str) -> dict:
    """Parse tsconfig-flavoured JSON (comments and trailing commas allowed)."""
    stripped = _BLOCK_COMMENT.sub("", text)
    stripped = _LINE_COMMENT.sub("", stripped)
    stripped = _TRAILING_COMMA.sub(r"\1", stripped)
    return json.loads(stripped)


class PathResolver:
    """Resolves local specifiers against a read-only source map."""

    def __init__(self, source_map: Mapping[str, str], aliases: dict[str, list[str]] | None = None) -> None:
        self._files = {normalize_path(p) for p in source_map}
        self.aliases = aliases if aliases is not None else dict(DEFAULT_ALIASES)

    @classmethod
    def from_source_map(cls, source_map: Mapping[str, str]) -> PathResolver:
        """Build a resolver, reading path aliases from the root tsconfig/jsconfig."""
        normalized = {normalize_path(p): text for p, text in source_map.items()}
        for name in CONFIG_FILES:
            if name not in normalized:
                continue
            try:
                config = read_tsconfig(normalized[name])
            except ValueError:
                logger.warning("resolver: could not parse %s, using default aliases", name)
                continue
            options = config.get("compilerOptions") or {}
            paths = options.get("paths") or {}
            base_url = options.get("baseUrl") or "."
            if not paths:
                continue
            aliases = {
                pattern: [posixpath.join(base_url, target) for target in targets]
                for pattern, targets in paths.items()
                if isinstance(targets, list)
            }
            return cls(source_map, aliases)
        return cls(source_map)

    def has(self, path: str) -> bool:
        return normalize_path(path) in self._files

    def is_alias(self, specifier: str) -> bool:
        return any(self._match_alias(pattern, specifier) is not None for pattern in self.aliases)

    def is_local(self, specifier: str) -> bool:
        return is_relative_specifier(specifier) or specifier.startswith("/") or self.is_alias(specifier)

    def expand_alias(self, specifier: str) -> list[str]:
        """Candidate base paths for an aliased specifier, most specific pattern first."""
        candidates: list[str] = []
        for pattern in sorted(self.aliases, key=len, reverse=True):
            captured = self._match_alias(pattern, specifier)
            if captured is None:
                continue
            for target in self.aliases[pattern]:
                candidates.append(normalize_path(target.replace("*", captured, 1)))
        return candidates

    def resolve(self, specifier: str, importer: str) -> str | None:
        """
        Resolve a local specifier to a source-map path.

        Returns None when nothing in the source map matches.
        """
        specifier = specifier.split("?")[0]
        if is_relative_specifier(specifier):
            base = normalize_path(posixpath.join(posixpath.dirname(normalize_path(importer)), specifier))
            bases = [base]
        elif specifier.startswith("/"):
            bases = [normalize_path(specifier)]
        else:
            bases = self.expand_alias(specifier)

        for base in bases:
            for candidate in self.candidates(base):
                if candidate in self._files:
                    return candidate
        return None

    @staticmethod
    def candidates(base: str) -> list[str]:
        """Exact path, then extension variants, then index-file variants."""
        options = [base]
        options.extend(base + ext for ext in EXTENSIONS)
        options.extend(posixpath.join(base, index) if base else index for index in INDEX_FILES)
        return options

    @staticmethod
    def _match_alias(pattern: str, specifier: str) -> str | None:
        if "*" not in pattern:
            return "" if specifier == pattern else None
        prefix, _, suffix = pattern.partition("*")
        if specifier.startswith(prefix) and specifier.endswith(suffix) and len(specifier) >= len(prefix) + len(suffix):
            return specifier[len(prefix) : len(specifier) - len(suffix)]
        return None
