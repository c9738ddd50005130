"""
Preview Kernel — Transform Cleanup

Deterministic post-processing for rewritten component source. The
generation service does the actual rewrite (backend/services/transformer.py);
this module makes sure what comes back is self-contained:

- markdown code fences and `'use client'` / `'use server'` directives removed
- every import outside the rendering runtime removed
- `next/link` / `next/image` elements whose import was removed become
  plain `<a>` / `<img>`
- residual `await`, an `async` component, or a call into a removed
  import rejected with TransformError
"""

from __future__ import annotations

import re
from typing import Literal

from tree_sitter import Node

from engine.preview.errors import TransformError
from engine.preview.imports import ImportRecord, is_runtime_specifier, scan_imports
from engine.preview.ts_parser import is_async, locate_component, node_text, parse, walk
from engine.preview.types import SourceAnalysis

Branch = Literal["server", "data", "pure"]

_FENCE = re.compile(r"```[\w+-]*[ \t]*\n(.*?)```", re.DOTALL)
_DIRECTIVE = re.compile(r"^[ \t]*(['\"])use (?:client|server|strict)\1;?[ \t]*\r?\n?", re.MULTILINE)
_FUNCTION_NODES = {
    "function_declaration",
    "function_expression",
    "function",
    "arrow_function",
    "method_definition",
    "generator_function_declaration",
}

# Ecosystem elements with a plain HTML equivalent, keyed by package.
_PLAIN_ELEMENTS: dict[str, str] = {
    "next/link": "a",
    "next/image": "img",
    "next/legacy/image": "img",
}


def choose_branch(analysis: SourceAnalysis | None) -> Branch:
    """Server-only wins over data fetching; anything else is pure."""
    if analysis is None:
        return "pure"
    if analysis.is_server_only:
        return "server"
    if analysis.uses_data_fetching:
        return "data"
    return "pure"


def strip_code_fences(text: str) -> str:
    """Return the largest fenced block, or the text itself when unfenced."""
    blocks = _FENCE.findall(text)
    if blocks:
        return max(blocks, key=len).strip() + "\n"
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
    if stripped.endswith("```"):
        stripped = stripped[:-3]
    return stripped.strip() + "\n"


def strip_directives(source: str) -> str:
    return _DIRECTIVE.sub("", source)


def find_disallowed_imports(source: str) -> list[ImportRecord]:
    """Imports (static, re-export, require or dynamic) outside the rendering runtime."""
    return [r for r in scan_imports(source) if not is_runtime_specifier(r.specifier)]


def strip_disallowed_imports(source: str) -> tuple[str, list[ImportRecord]]:
    """
    Remove every non-runtime import statement.

    `require()` calls are removed together with the declaration or
    statement that holds them. Returns the new source and the removed
    records.
    """
    data = source.encode()
    tree = parse(source)
    spans: list[tuple[int, int]] = []
    removed: list[ImportRecord] = []

    records = {(r.start_byte, r.end_byte): r for r in find_disallowed_imports(source)}
    for node in walk(tree.root_node):
        record = records.get((node.start_byte, node.end_byte))
        if record is None:
            continue
        if node.type in ("import_statement", "export_statement"):
            spans.append((node.start_byte, node.end_byte))
            removed.append(record)
        elif node.type == "call_expression":
            holder = _statement_holding(node)
            if holder is not None:
                spans.append((holder.start_byte, holder.end_byte))
                removed.append(record)

    for start, end in sorted(spans, reverse=True):
        # swallow the newline that ended the statement
        if end < len(data) and data[end : end + 1] == b"\n":
            end += 1
        data = data[:start] + data[end:]
    return data.decode(), removed


def _statement_holding(call: Node) -> Node | None:
    parent = call.parent
    if parent is not None and parent.type == "expression_statement":
        return parent
    if parent is not None and parent.type == "variable_declarator":
        declaration = parent.parent
        if declaration is not None and len(declaration.named_children) == 1:
            return declaration
    if parent is not None and parent.type == "await_expression":
        return _statement_holding(parent)
    return None


def inline_plain_elements(source: str, removed: list[ImportRecord]) -> str:
    """Rewrite JSX that used a removed Link / Image import into plain tags."""
    for record in removed:
        tag = _PLAIN_ELEMENTS.get(record.specifier)
        if tag is None or record.default is None:
            continue
        name = re.escape(record.default)
        source = re.sub(rf"<{name}(?=[\s/>])", f"<{tag}", source)
        source = re.sub(rf"</{name}\s*>", f"</{tag}>", source)
    return source


# Node type -> field holding the name it declares
_DECLARING_FIELDS: dict[str, str] = {
    "variable_declarator": "name",
    "function_declaration": "name",
    "generator_function_declaration": "name",
    "class_declaration": "name",
    "required_parameter": "pattern",
    "optional_parameter": "pattern",
    "pair_pattern": "value",
    "assignment_pattern": "left",
}
_PATTERN_NODES = {"array_pattern", "object_pattern", "rest_pattern"}


def bound_names(records: list[ImportRecord]) -> set[str]:
    """Local names the given import statements introduced."""
    names: set[str] = set()
    for record in records:
        if record.type_only or record.reexport:
            continue
        names.update(record.named)
        if record.default is not None:
            names.add(record.default)
        if record.namespace is not None:
            names.add(record.namespace)
    return names


def _declares(node: Node) -> bool:
    parent = node.parent
    if parent is None:
        return False
    if parent.type in _PATTERN_NODES:
        return True
    field_name = _DECLARING_FIELDS.get(parent.type)
    return field_name is not None and parent.child_by_field_name(field_name) == node


def unbound_references(source: str, names: set[str]) -> list[str]:
    """
    Names from `names` the source still uses without declaring them.

    Identifiers in value position and JSX tag names count as uses; type
    annotations do not, since they are erased at compile time.
    """
    if not names:
        return []
    tree = parse(source)
    declared: set[str] = set()
    used: set[str] = set()
    for node in walk(tree.root_node):
        if node.type == "shorthand_property_identifier_pattern":
            declared.add(node_text(node))
            continue
        if node.type not in ("identifier", "shorthand_property_identifier"):
            continue
        text = node_text(node)
        if text not in names:
            continue
        if _declares(node):
            declared.add(text)
        else:
            used.add(text)
    return sorted(used - declared)


def residual_async(source: str, component_name: str | None = None) -> list[str]:
    """Describe every `await` outside an async function and an async component."""
    tree = parse(source)
    problems: list[str] = []
    for node in walk(tree.root_node):
        if node.type != "await_expression":
            continue
        scope = node.parent
        while scope is not None and scope.type not in _FUNCTION_NODES:
            scope = scope.parent
        if scope is None:
            problems.append(f"top-level await: {node_text(node)[:60]}")
        elif not is_async(scope):
            problems.append(f"await in non-async function: {node_text(node)[:60]}")

    location = locate_component(tree.root_node, component_name)
    if location is not None and is_async(location.function):
        problems.append(f"component {component_name or '<default>'} is still async")
    return problems


def cleanup(source: str, component_name: str | None = None) -> str:
    """
    Make rewritten source self-contained.

    Raises TransformError when disallowed imports or async constructs
    survive the cleanup, or when the code still uses a name that a
    removed import bound.
    """
    code = strip_code_fences(source)
    code = strip_directives(code)
    code, removed = strip_disallowed_imports(code)
    code = inline_plain_elements(code, removed)

    leftover = find_disallowed_imports(code)
    if leftover:
        specifiers = sorted({r.specifier for r in leftover})
        raise TransformError(f"Disallowed imports remain after cleanup: {', '.join(specifiers)}")

    unbound = unbound_references(code, bound_names(removed))
    if unbound:
        raise TransformError(f"Code still uses names from removed imports: {', '.join(unbound)}")

    problems = residual_async(code, component_name)
    if problems:
        raise TransformError("; ".join(problems))

    if not code.strip():
        raise TransformError("Rewrite produced empty source")
    return code
