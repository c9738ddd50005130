"""
Preview Kernel — TSX Source Parser

Uses tree-sitter (TSX grammar) to locate a component in a source file,
resolve its props type, and turn literal expressions into Python values.
Every other kernel module that needs syntax goes through here.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import tree_sitter_typescript as _ts_mod
from tree_sitter import Language, Node, Parser, Tree

from engine.preview.errors import AnalysisError
from engine.preview.types import PropSpec

_LANG = Language(_ts_mod.language_tsx())
_PARSER = Parser(_LANG)

_FUNCTION_TYPES = {"arrow_function", "function_expression", "function", "function_declaration"}
_COMPONENT_TYPE_WRAPPERS = {"FC", "FunctionComponent", "VFC", "React.FC", "React.FunctionComponent", "React.VFC"}
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


class Unevaluable:
    """Marker for literal positions that hold code rather than data."""

    __slots__ = ("text",)

    def __init__(self, text: str) -> None:
        self.text = text

    def __repr__(self) -> str:
        return f"Unevaluable({self.text[:40]!r})"


@dataclass
class ComponentLocation:
    """Where a component function lives and any type attached to its binding."""

    function: Node
    declared_type: Node | None = None  # e.g. React.FC<Props> on the variable
    wrapper_type_args: Node | None = None  # e.g. forwardRef<Ref, Props>


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


def parse(source: str) -> Tree:
    return _PARSER.parse(source.encode())


def node_text(node: Node | None) -> str:
    if node is None:
        return ""
    return node.text.decode() if node.text is not None else ""


def walk(node: Node) -> Iterator[Node]:
    """Yield the node and all of its descendants, depth first."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def string_value(node: Node) -> str:
    """Decode a `string` node into its Python value."""
    parts: list[str] = []
    for child in node.children:
        if child.type == "string_fragment":
            parts.append(node_text(child))
        elif child.type == "escape_sequence":
            parts.append(_decode_escape(node_text(child)))
    return "".join(parts)


def _decode_escape(seq: str) -> str:
    body = seq[1:]
    if body in _ESCAPES:
        return _ESCAPES[body]
    if body.startswith("u") and len(body) >= 5:
        try:
            return chr(int(body.strip("u{}"), 16))
        except ValueError:
            return body
    return body


def literal_value(node: Node | None) -> Any:
    """
    Evaluate a literal expression node into a JSON-compatible value.

    Functions, identifiers and calls become `Unevaluable` so callers can
    decide whether to drop them or substitute something inert.
    """
    if node is None:
        return None
    t = node.type
    if t == "string":
        return string_value(node)
    if t == "template_string":
        if any(c.type == "template_substitution" for c in node.children):
            return Unevaluable(node_text(node))
        return node_text(node)[1:-1]
    if t == "number":
        return _number(node_text(node))
    if t == "true":
        return True
    if t == "false":
        return False
    if t in ("null", "undefined"):
        return None
    if t in ("parenthesized_expression", "as_expression", "satisfies_expression", "non_null_expression"):
        inner = node.named_children[0] if node.named_children else None
        return literal_value(inner)
    if t == "unary_expression":
        operator = node.child_by_field_name("operator")
        arg = literal_value(node.child_by_field_name("argument"))
        op = node_text(operator)
        if op == "-" and isinstance(arg, int | float):
            return -arg
        if op == "!" and not isinstance(arg, Unevaluable):
            return not arg
        return Unevaluable(node_text(node))
    if t == "array":
        items: list[Any] = []
        for child in node.named_children:
            if child.type == "spread_element":
                spread = literal_value(child.named_children[0] if child.named_children else None)
                if isinstance(spread, list):
                    items.extend(spread)
                continue
            if child.type == "comment":
                continue
            items.append(literal_value(child))
        return items
    if t == "object":
        obj: dict[str, Any] = {}
        for child in node.named_children:
            if child.type == "pair":
                key = _property_key(child.child_by_field_name("key"))
                if key is not None:
                    obj[key] = literal_value(child.child_by_field_name("value"))
            elif child.type == "spread_element":
                spread = literal_value(child.named_children[0] if child.named_children else None)
                if isinstance(spread, dict):
                    obj.update(spread)
            elif child.type == "shorthand_property_identifier":
                obj[node_text(child)] = Unevaluable(node_text(child))
            elif child.type == "method_definition":
                key = _property_key(child.child_by_field_name("name"))
                if key is not None:
                    obj[key] = Unevaluable(node_text(child))
        return obj
    return Unevaluable(node_text(node))


def to_json_value(value: Any) -> Any:
    """Replace every Unevaluable inside a literal with None."""
    if isinstance(value, Unevaluable):
        return None
    if isinstance(value, list):
        return [to_json_value(v) for v in value]
    if isinstance(value, dict):
        return {k: to_json_value(v) for k, v in value.items()}
    return value


def _property_key(node: Node | None) -> str | None:
    if node is None:
        return None
    if node.type == "string":
        return string_value(node)
    if node.type in ("property_identifier", "identifier", "number", "private_property_identifier"):
        return node_text(node)
    return None


def _number(text: str) -> int | float:
    cleaned = text.replace("_", "")
    try:
        if cleaned.lower().startswith(("0x", "0o", "0b")):
            return int(cleaned, 0)
        if re.fullmatch(r"\d+", cleaned):
            return int(cleaned)
        return float(cleaned)
    except ValueError:
        return 0


# ---------------------------------------------------------------------------
# Component location
# ---------------------------------------------------------------------------


def unwrap_function(node: Node | None) -> tuple[Node | None, Node | None]:
    """
    Find the function inside a component initializer.

    Handles `memo(...)`, `forwardRef(...)`, `React.memo(forwardRef(...))`
    and parenthesized or `as`-cast expressions. Returns the function node
    and the type arguments of the innermost wrapper call, if any.
    """
    if node is None:
        return None, None
    if node.type in _FUNCTION_TYPES:
        return node, None
    if node.type in ("parenthesized_expression", "as_expression", "satisfies_expression"):
        return unwrap_function(node.named_children[0] if node.named_children else None)
    if node.type == "call_expression":
        args = node.child_by_field_name("arguments")
        type_args = node.child_by_field_name("type_arguments")
        for arg in args.named_children if args else []:
            fn, inner_args = unwrap_function(arg)
            if fn is not None:
                return fn, inner_args or type_args
    return None, None


def locate_component(root: Node, name: str | None = None) -> ComponentLocation | None:
    """
    Find the function that implements `name` at the top level of a module.

    Falls back to the default export when no binding matches the name.
    """
    found: ComponentLocation | None = None
    default_loc: ComponentLocation | None = None
    default_ref: str | None = None

    for stmt in root.named_children:
        decl = stmt
        is_default = False
        if stmt.type == "export_statement":
            is_default = any(c.type == "default" for c in stmt.children)
            decl = stmt.child_by_field_name("declaration") or stmt.child_by_field_name("value")
            if decl is None:
                continue

        if decl.type == "function_declaration":
            fn_name = node_text(decl.child_by_field_name("name"))
            loc = ComponentLocation(function=decl)
            if name and fn_name == name:
                found = loc
            if is_default:
                default_loc = loc
        elif decl.type in ("lexical_declaration", "variable_declaration"):
            for declarator in decl.named_children:
                if declarator.type != "variable_declarator":
                    continue
                var_name = node_text(declarator.child_by_field_name("name"))
                fn, type_args = unwrap_function(declarator.child_by_field_name("value"))
                if fn is None:
                    continue
                annotation = declarator.child_by_field_name("type")
                loc = ComponentLocation(
                    function=fn,
                    declared_type=annotation.named_children[0] if annotation and annotation.named_children else None,
                    wrapper_type_args=type_args,
                )
                if name and var_name == name:
                    found = loc
        elif is_default:
            if decl.type == "identifier":
                default_ref = node_text(decl)
            else:
                fn, type_args = unwrap_function(decl)
                if fn is not None:
                    default_loc = ComponentLocation(function=fn, wrapper_type_args=type_args)

        if found is not None:
            return found

    if default_ref and default_ref != name:
        return locate_component(root, default_ref)
    return default_loc


def function_params(fn: Node) -> list[Node]:
    """Return the parameter nodes of a function (single bare param included)."""
    params = fn.child_by_field_name("parameters")
    if params is not None:
        return [p for p in params.named_children if p.type != "comment"]
    single = fn.child_by_field_name("parameter")
    return [single] if single is not None else []


def param_pattern(param: Node) -> Node:
    """The binding pattern of a parameter (identifier, object_pattern, ...)."""
    if param.type in ("required_parameter", "optional_parameter"):
        return param.child_by_field_name("pattern") or param
    return param


def is_async(fn: Node) -> bool:
    return any(c.type == "async" for c in fn.children)


# ---------------------------------------------------------------------------
# Prop schema extraction
# ---------------------------------------------------------------------------


def extract_props(source: str, component_name: str | None = None) -> list[PropSpec]:
    """
    Extract the ordered prop schema of a component.

    Raises AnalysisError when the component cannot be located in a source
    that tree-sitter could not parse cleanly.
    """
    tree = parse(source)
    root = tree.root_node
    location = locate_component(root, component_name)
    if location is None:
        if root.has_error:
            raise AnalysisError(f"Could not parse component {component_name or '<default>'}")
        return []

    types = _collect_type_declarations(root)
    params = function_params(location.function)
    pattern = param_pattern(params[0]) if params else None
    defaults = _destructured_defaults(pattern)

    type_node = _props_type_node(params[0] if params else None, location, types, component_name)
    props: list[PropSpec] = []
    if type_node is not None:
        props = _members_of_type(type_node, types, depth=0)

    if not props and defaults:
        props = [PropSpec(name=n, type="unknown", required=False) for n in defaults]

    for prop in props:
        if prop.name in defaults and defaults[prop.name] is not None:
            prop.default = to_json_value(defaults[prop.name])
            prop.required = False
    return props


def _destructured_defaults(pattern: Node | None) -> dict[str, Any]:
    """Map destructured prop names to their default literals (None when absent)."""
    result: dict[str, Any] = {}
    if pattern is None or pattern.type != "object_pattern":
        return result
    for child in pattern.named_children:
        if child.type == "shorthand_property_identifier_pattern":
            result[node_text(child)] = None
        elif child.type == "object_assignment_pattern":
            left = child.child_by_field_name("left")
            result[node_text(left)] = literal_value(child.child_by_field_name("right"))
        elif child.type == "pair_pattern":
            key = _property_key(child.child_by_field_name("key"))
            value = child.child_by_field_name("value")
            if key is None:
                continue
            if value is not None and value.type == "assignment_pattern":
                result[key] = literal_value(value.child_by_field_name("right"))
            else:
                result[key] = None
    return result


def _collect_type_declarations(root: Node) -> dict[str, Node]:
    types: dict[str, Node] = {}
    for node in walk(root):
        if node.type in ("interface_declaration", "type_alias_declaration"):
            name = node_text(node.child_by_field_name("name"))
            if name:
                types[name] = node
    return types


def _props_type_node(
    param: Node | None,
    location: ComponentLocation,
    types: dict[str, Node],
    component_name: str | None,
) -> Node | None:
    if param is not None:
        annotation = param.child_by_field_name("type")
        if annotation is not None and annotation.named_children:
            return annotation.named_children[0]

    declared = location.declared_type
    if declared is not None and declared.type == "generic_type":
        wrapper = node_text(declared.child_by_field_name("name"))
        if wrapper in _COMPONENT_TYPE_WRAPPERS:
            args = _type_args(declared)
            if args:
                return args[0]

    if location.wrapper_type_args is not None:
        args = [a for a in location.wrapper_type_args.named_children if a.type != "comment"]
        if len(args) >= 2:
            return args[1]
        if len(args) == 1:
            return args[0]

    if component_name and f"{component_name}Props" in types:
        return types[f"{component_name}Props"]
    return None


def _type_args(node: Node) -> list[Node]:
    for child in node.children:
        if child.type == "type_arguments":
            return [a for a in child.named_children if a.type != "comment"]
    return []


def _members_of_type(node: Node, types: dict[str, Node], depth: int) -> list[PropSpec]:
    if depth > 8:
        return []
    t = node.type
    if t == "interface_declaration":
        members: list[PropSpec] = []
        for child in node.children:
            if child.type == "extends_type_clause":
                for base in child.named_children:
                    members.extend(_members_of_type(base, types, depth + 1))
        body = node.child_by_field_name("body")
        if body is not None:
            members.extend(_members_of_body(body))
        return _dedupe(members)
    if t == "type_alias_declaration":
        value = node.child_by_field_name("value")
        return _members_of_type(value, types, depth + 1) if value is not None else []
    if t in ("object_type", "interface_body"):
        return _members_of_body(node)
    if t == "type_identifier":
        target = types.get(node_text(node))
        return _members_of_type(target, types, depth + 1) if target is not None else []
    if t == "generic_type":
        name = node_text(node.child_by_field_name("name"))
        args = _type_args(node)
        if name in ("Readonly", "Partial", "Required") and args:
            members = _members_of_type(args[0], types, depth + 1)
            if name == "Partial":
                for m in members:
                    m.required = False
            return members
        target = types.get(name)
        return _members_of_type(target, types, depth + 1) if target is not None else []
    if t == "intersection_type":
        members = []
        for child in node.named_children:
            members.extend(_members_of_type(child, types, depth + 1))
        return _dedupe(members)
    if t in ("parenthesized_type", "type_annotation"):
        return _members_of_type(node.named_children[0], types, depth + 1) if node.named_children else []
    return []


def _members_of_body(body: Node) -> list[PropSpec]:
    members: list[PropSpec] = []
    for child in body.named_children:
        if child.type == "property_signature":
            name = _property_key(child.child_by_field_name("name"))
            annotation = child.child_by_field_name("type")
            if name is None:
                continue
            type_text = "unknown"
            if annotation and annotation.named_children:
                type_text = node_text(annotation.named_children[0])
            optional = any(c.type == "?" for c in child.children)
            members.append(
                PropSpec(name=name, type=type_text, required=not optional, description=_doc_comment(child))
            )
        elif child.type == "method_signature":
            name = _property_key(child.child_by_field_name("name"))
            if name is None:
                continue
            params = node_text(child.child_by_field_name("parameters")) or "()"
            ret = child.child_by_field_name("return_type")
            ret_text = node_text(ret.named_children[0]) if ret and ret.named_children else "void"
            optional = any(c.type == "?" for c in child.children)
            members.append(
                PropSpec(
                    name=name,
                    type=f"{params} => {ret_text}",
                    required=not optional,
                    description=_doc_comment(child),
                )
            )
    return members


def _doc_comment(node: Node) -> str | None:
    prev = node.prev_sibling
    while prev is not None and prev.type in (",", ";"):
        prev = prev.prev_sibling
    if prev is None or prev.type != "comment":
        return None
    text = node_text(prev)
    if not text.startswith("/**"):
        return None
    lines = [line.strip().lstrip("*").strip() for line in text[3:-2].splitlines()]
    description = " ".join(line for line in lines if line and not line.startswith("@"))
    return description or None


def _dedupe(members: list[PropSpec]) -> list[PropSpec]:
    seen: dict[str, PropSpec] = {}
    for m in members:
        seen[m.name] = m
    return list(seen.values())
