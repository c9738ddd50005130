"""
Preview Kernel — the pure half of the component preview pipeline.

No network, no AI, no subprocess. Everything here is deterministic:

  analyzer        — prop schema + routing classification + relationships
  story_args      — author-declared example args from Storybook stories
  imports         — import scanning over the tree-sitter TSX tree
  resolver        — local specifier resolution (aliases, extensions, index)
  mock_registry   — substitute modules for third-party packages
  bundler         — links local modules and mocks into one artifact
  transform       — deterministic cleanup after a source rewrite
  static_render   — tree-to-markup evaluation for simple components
  style_normalizer, tailwind_table — utility classes to inline styles
  interactive     — cursor targets in final markup
  content_checks  — loading / empty / error markup rejection
"""

from engine.preview.analyzer import analyze_source, build_links, related_sources
from engine.preview.bundler import DependencyBundler, sanitize_setup_code, wrap_setup_code
from engine.preview.content_checks import ContentCheck, check_markup
from engine.preview.interactive import extract_interactive_elements
from engine.preview.mock_registry import MockPackage, MockRegistry, default_registry
from engine.preview.resolver import PathResolver
from engine.preview.static_render import render_static
from engine.preview.story_args import extract_story_args
from engine.preview.style_normalizer import normalize_markup, wrap_in_container
from engine.preview.transform import choose_branch, cleanup

__all__ = [
    "analyze_source",
    "build_links",
    "related_sources",
    "DependencyBundler",
    "sanitize_setup_code",
    "wrap_setup_code",
    "ContentCheck",
    "check_markup",
    "extract_interactive_elements",
    "MockPackage",
    "MockRegistry",
    "default_registry",
    "PathResolver",
    "render_static",
    "extract_story_args",
    "normalize_markup",
    "wrap_in_container",
    "choose_branch",
    "cleanup",
]
