"""
Preview Kernel — Storybook Args

Author-declared examples are the highest-confidence demo props. This
module finds the stories file next to a component and evaluates the
`args` object literals of its stories with tree-sitter:

    export default { args: {...} }                 meta args
    export const Primary: Story = { args: {...} }  CSF3
    Primary.args = {...}                            CSF2

Functions, identifiers and JSX inside args become null.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Any

from tree_sitter import Node

from engine.preview.resolver import normalize_path
from engine.preview.ts_parser import literal_value, node_text, parse, to_json_value

STORY_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js")
PREFERRED_STORIES = ("Default", "Primary")


@dataclass
class Story:
    name: str
    args: dict[str, Any]


@dataclass
class StoryExtraction:
    path: str | None = None
    stories: list[Story] = field(default_factory=list)
    meta_args: dict[str, Any] = field(default_factory=dict)

    @property
    def has_stories(self) -> bool:
        return self.path is not None

    @property
    def default_args(self) -> dict[str, Any] | None:
        """Args of `Default`, else `Primary`, else the first story, merged over meta args."""
        for preferred in PREFERRED_STORIES:
            for story in self.stories:
                if story.name == preferred:
                    return {**self.meta_args, **story.args}
        if self.stories:
            return {**self.meta_args, **self.stories[0].args}
        return dict(self.meta_args) if self.meta_args else None


def find_stories_file(component_path: str, source_map: dict[str, str]) -> str | None:
    """Locate `X.stories.*` beside the component, or under stories/ or __stories__/."""
    path = normalize_path(component_path)
    base, _ = posixpath.splitext(path)
    directory, stem = posixpath.split(base)
    files = {normalize_path(p): p for p in source_map}

    candidates = [base + ".stories" + ext for ext in STORY_EXTENSIONS]
    for folder in ("stories", "__stories__"):
        candidates += [posixpath.join(directory, folder, stem + ".stories" + ext) for ext in STORY_EXTENSIONS]
    for candidate in candidates:
        if candidate in files:
            return files[candidate]
    return None


def extract_story_args(component_path: str, source_map: dict[str, str]) -> StoryExtraction:
    stories_path = find_stories_file(component_path, source_map)
    if stories_path is None:
        return StoryExtraction()
    extraction = parse_stories(source_map[stories_path])
    extraction.path = stories_path
    return extraction


def parse_stories(source: str) -> StoryExtraction:
    """Collect meta args and per-story args from a stories module."""
    root = parse(source).root_node
    extraction = StoryExtraction()
    objects: dict[str, Node] = {}
    csf2: dict[str, dict[str, Any]] = {}
    order: list[str] = []

    for stmt in root.named_children:
        exported = stmt.type == "export_statement"
        decl = stmt.child_by_field_name("declaration") if exported else stmt
        is_default = exported and any(c.type == "default" for c in stmt.children)

        if is_default:
            value = stmt.child_by_field_name("value") or decl
            meta = _object_of(value, objects)
            if meta is not None:
                extraction.meta_args = _args_of(meta)
            continue

        if decl is not None and decl.type in ("lexical_declaration", "variable_declaration"):
            for declarator in decl.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = node_text(declarator.child_by_field_name("name"))
                obj = _object_of(declarator.child_by_field_name("value"), objects)
                if obj is not None:
                    objects[name] = obj
                if exported and name:
                    order.append(name)
        elif stmt.type == "expression_statement":
            _collect_csf2(stmt, csf2)

    for name in order:
        args: dict[str, Any] = {}
        if name in objects:
            args.update(_args_of(objects[name]))
        args.update(csf2.get(name, {}))
        if name in objects or name in csf2:
            extraction.stories.append(Story(name=name, args=args))
    return extraction


def _object_of(node: Node | None, objects: dict[str, Node]) -> Node | None:
    """Unwrap `satisfies` / `as` / parentheses down to an object literal or known binding."""
    while node is not None and node.type in ("satisfies_expression", "as_expression", "parenthesized_expression"):
        node = node.named_children[0] if node.named_children else None
    if node is None:
        return None
    if node.type == "object":
        return node
    if node.type == "identifier":
        return objects.get(node_text(node))
    return None


def _args_of(obj: Node) -> dict[str, Any]:
    for child in obj.named_children:
        if child.type != "pair":
            continue
        key = child.child_by_field_name("key")
        if key is not None and node_text(key).strip("'\"") == "args":
            value = to_json_value(literal_value(child.child_by_field_name("value")))
            return value if isinstance(value, dict) else {}
    return {}


def _collect_csf2(stmt: Node, csf2: dict[str, dict[str, Any]]) -> None:
    expr = stmt.named_children[0] if stmt.named_children else None
    if expr is None or expr.type != "assignment_expression":
        return
    left = expr.child_by_field_name("left")
    if left is None or left.type != "member_expression":
        return
    if node_text(left.child_by_field_name("property")) != "args":
        return
    story = node_text(left.child_by_field_name("object"))
    value = to_json_value(literal_value(expr.child_by_field_name("right")))
    if isinstance(value, dict):
        csf2.setdefault(story, {}).update(value)
