"""
Preview Kernel — Static Renderer

The fast tier: evaluates a component's JSX directly over the tree-sitter
syntax tree, with no bundle and no sandbox. Only simple, mostly
presentational source is viable. The evaluator understands:

- literals, template strings, member access and optional chaining
- logical, conditional, comparison and arithmetic operators
- array / string helpers (`map`, `filter`, `slice`, `join`, ...)
- state hooks with literal initial values, `useMemo`, `useRef`, `useId`
- class helpers (`cn`, `clsx`, `cx`, `twMerge`, `classNames`)
- early `if (...) return` guards, `switch` returns
- components defined in the same file

Anything else raises StaticRenderError and the tier is skipped.
"""

from __future__ import annotations

import html
import json
import logging
import math
import re
from collections.abc import Callable
from typing import Any

from tree_sitter import Node

from engine.preview.errors import StaticRenderError
from engine.preview.ts_parser import (
    function_params,
    locate_component,
    node_text,
    param_pattern,
    parse,
    string_value,
    unwrap_function,
    walk,
)

logger = logging.getLogger(__name__)

MAX_DEPTH = 40
MAX_STEPS = 200_000
# Longest string or array a single builtin may produce
MAX_ALLOCATION = 100_000

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)
SKIPPED_STATEMENTS = frozenset(
    {"comment", "empty_statement", "function_declaration", "type_alias_declaration", "interface_declaration"}
)
CLASS_HELPERS = frozenset({"cn", "clsx", "cx", "twMerge", "twJoin", "classNames", "classnames"})
IGNORED_HOOKS = frozenset(
    {"useEffect", "useLayoutEffect", "useInsertionEffect", "useImperativeHandle", "useDebugValue"}
)
UNITLESS_CSS = frozenset(
    {
        "opacity",
        "zIndex",
        "fontWeight",
        "lineHeight",
        "flex",
        "flexGrow",
        "flexShrink",
        "order",
        "zoom",
        "gridRow",
        "gridColumn",
        "columnCount",
        "scale",
        "aspectRatio",
    }
)
ATTRIBUTE_NAMES = {
    "className": "class",
    "htmlFor": "for",
    "tabIndex": "tabindex",
    "readOnly": "readonly",
    "autoComplete": "autocomplete",
    "autoFocus": "autofocus",
    "maxLength": "maxlength",
    "minLength": "minlength",
    "colSpan": "colspan",
    "rowSpan": "rowspan",
    "srcSet": "srcset",
    "crossOrigin": "crossorigin",
    "viewBox": "viewBox",
    "strokeWidth": "stroke-width",
    "strokeLinecap": "stroke-linecap",
    "strokeLinejoin": "stroke-linejoin",
    "fillRule": "fill-rule",
    "clipRule": "clip-rule",
}
DROPPED_ATTRIBUTES = frozenset({"key", "ref", "children", "dangerouslySetInnerHTML", "suppressHydrationWarning"})


class Markup(str):
    """Rendered HTML, never escaped again."""


class _Return(Exception):
    def __init__(self, value: Any) -> None:
        self.value = value


class Closure:
    """A JS function captured with its defining scope."""

    def __init__(self, node: Node, scope: Scope, name: str | None = None) -> None:
        self.node = node
        self.scope = scope
        self.name = name


class Scope:
    def __init__(self, parent: Scope | None = None) -> None:
        self.vars: dict[str, Any] = {}
        self.parent = parent

    def lookup(self, name: str) -> Any:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.vars:
                return scope.vars[name]
            scope = scope.parent
        raise StaticRenderError(f"Unbound identifier: {name}")

    def has(self, name: str) -> bool:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.vars:
                return True
            scope = scope.parent
        return False

    def assign(self, name: str, value: Any) -> None:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.vars:
                scope.vars[name] = value
                return
            scope = scope.parent
        raise StaticRenderError(f"Assignment to unbound identifier: {name}")


# ---------------------------------------------------------------------------
# JS value semantics
# ---------------------------------------------------------------------------


def js_truthy(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, int | float):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def js_str(value: Any) -> str:
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, list):
        return ",".join(js_str(v) for v in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def js_number(value: Any) -> int | float:
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int | float):
        return value
    if isinstance(value, str):
        try:
            return float(value) if "." in value or "e" in value.lower() else int(value.strip() or "0")
        except ValueError:
            return math.nan
    return math.nan


def js_parse_int(value: Any, *_: Any) -> int | float:
    match = re.match(r"\s*([+-]?\d+)", js_str(value))
    return int(match.group(1)) if match else math.nan


def _is_function(value: Any) -> bool:
    return isinstance(value, Closure | _Builtin | _BoundMethod)


def _json_ready(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, list):
        return [_json_ready(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _json_ready(v) for k, v in value.items() if not _is_function(v)}
    return value


def js_json(value: Any, _replacer: Any = None, space: Any = None) -> str | None:
    """JSON.stringify: compact separators unless an indent is given."""
    if value is None or _is_function(value):
        return None
    indent = min(int(space), 10) if isinstance(space, int | float) and space > 0 else (space or None)
    if indent is None:
        return json.dumps(_json_ready(value), separators=(",", ":"), ensure_ascii=False, default=str)
    return json.dumps(_json_ready(value), indent=indent, ensure_ascii=False, default=str)


def check_allocation(size: int, what: str) -> int:
    if size < 0:
        raise StaticRenderError(f"Invalid {what} length: {size}")
    if size > MAX_ALLOCATION:
        raise StaticRenderError(f"{what} of length {size} exceeds {MAX_ALLOCATION}")
    return size


def strict_equal(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, int | float) and isinstance(b, int | float):
        return a == b
    if isinstance(a, list | dict) or isinstance(b, list | dict):
        return a is b
    return type(a) is type(b) and a == b


def _class_names(*args: Any) -> str:
    classes: list[str] = []
    for arg in args:
        if isinstance(arg, str):
            classes.extend(arg.split())
        elif isinstance(arg, list):
            classes.extend(_class_names(*arg).split())
        elif isinstance(arg, dict):
            classes.extend(k for k, v in arg.items() if js_truthy(v))
        elif isinstance(arg, int | float) and not isinstance(arg, bool) and arg:
            classes.append(js_str(arg))
    return " ".join(dict.fromkeys(classes))


def _css_name(prop: str) -> str:
    if prop.startswith("--"):
        return prop
    name = re.sub(r"([A-Z])", lambda m: "-" + m.group(1).lower(), prop)
    if name.startswith(("webkit-", "moz-", "ms-")):
        name = "-" + name
    return name


def style_to_css(style: dict[str, Any]) -> str:
    parts = []
    for key, value in style.items():
        if value is None or value is False or value == "":
            continue
        if isinstance(value, int | float) and not isinstance(value, bool) and key not in UNITLESS_CSS and value != 0:
            text = f"{js_str(value)}px"
        else:
            text = js_str(value)
        parts.append(f"{_css_name(key)}: {text}")
    return "; ".join(parts)


def _jsx_text(raw: str) -> str:
    """Collapse JSX text the way the JSX compiler does."""
    lines = raw.replace("\t", " ").split("\n")
    if len(lines) == 1:
        return raw
    kept = []
    for i, line in enumerate(lines):
        if i != 0:
            line = line.lstrip()
        if i != len(lines) - 1:
            line = line.rstrip()
        if line:
            kept.append(line)
    return " ".join(kept)


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class StaticRenderer:
    """Renders one component of a source file to escaped HTML."""

    def __init__(self, source: str, component_name: str | None = None) -> None:
        self.source = source
        self.component_name = component_name
        self.root = parse(source).root_node
        self.module_scope = Scope(self._globals())
        self._depth = 0
        self._steps = 0
        self._ids = 0
        self._collect_module_bindings()

    def render(self, props: dict[str, Any] | None = None) -> str:
        """
        Render the component with `props`.

        Raises StaticRenderError when the source uses anything the evaluator
        does not support, or when it renders nothing.
        """
        location = locate_component(self.root, self.component_name)
        if location is None:
            raise StaticRenderError(f"Component {self.component_name or '<default>'} not found")
        if any(c.type == "async" for c in location.function.children):
            raise StaticRenderError("Async components cannot be rendered statically")

        closure = Closure(location.function, self.module_scope, self.component_name)
        try:
            output = self._render_value(self._call(closure, [dict(props or {})]))
        except RecursionError as e:
            raise StaticRenderError("Render recursion too deep") from e
        if not output.strip():
            raise StaticRenderError("Component rendered nothing")
        return output

    # -- module level -------------------------------------------------------

    def _collect_module_bindings(self) -> None:
        for stmt in self.root.named_children:
            decl = stmt
            if stmt.type == "export_statement":
                decl = stmt.child_by_field_name("declaration")
                if decl is None:
                    continue
            if decl.type == "function_declaration":
                name = node_text(decl.child_by_field_name("name"))
                self.module_scope.vars[name] = Closure(decl, self.module_scope, name)
            elif decl.type in ("lexical_declaration", "variable_declaration"):
                for declarator in decl.named_children:
                    if declarator.type != "variable_declarator":
                        continue
                    name_node = declarator.child_by_field_name("name")
                    value = declarator.child_by_field_name("value")
                    fn, _ = unwrap_function(value)
                    if fn is not None and name_node is not None and name_node.type == "identifier":
                        fn_name = node_text(name_node)
                        self.module_scope.vars[fn_name] = Closure(fn, self.module_scope, fn_name)
                        continue
                    if value is None or name_node is None:
                        continue
                    try:
                        self._bind(name_node, self._eval(value, self.module_scope), self.module_scope)
                    except StaticRenderError as e:
                        logger.debug("static: skipping module binding %s: %s", node_text(name_node), e)

    def _globals(self) -> Scope:
        scope = Scope()
        noop = _Builtin(lambda *a: None)
        for helper in CLASS_HELPERS:
            scope.vars[helper] = _Builtin(_class_names)
        scope.vars.update(
            {
                "undefined": None,
                "NaN": math.nan,
                "Infinity": math.inf,
                "String": _Builtin(lambda v="": js_str(v)),
                "Number": _Builtin(lambda v=0: js_number(v)),
                "Boolean": _Builtin(lambda v=None: js_truthy(v)),
                "parseInt": _Builtin(js_parse_int),
                "parseFloat": _Builtin(lambda v: float(js_number(v))),
                "console": {"log": noop, "warn": noop, "error": noop, "info": noop, "debug": noop},
                "Math": {
                    "min": _Builtin(lambda *a: min(js_number(x) for x in a) if a else math.inf),
                    "max": _Builtin(lambda *a: max(js_number(x) for x in a) if a else -math.inf),
                    "round": _Builtin(lambda v: math.floor(js_number(v) + 0.5)),
                    "floor": _Builtin(lambda v: math.floor(js_number(v))),
                    "ceil": _Builtin(lambda v: math.ceil(js_number(v))),
                    "abs": _Builtin(lambda v: abs(js_number(v))),
                    "PI": math.pi,
                },
                "JSON": {"stringify": _Builtin(js_json)},
                "Object": {
                    "keys": _Builtin(lambda o: list(o.keys()) if isinstance(o, dict) else []),
                    "values": _Builtin(lambda o: list(o.values()) if isinstance(o, dict) else []),
                    "entries": _Builtin(lambda o: [[k, v] for k, v in o.items()] if isinstance(o, dict) else []),
                    "assign": _Builtin(_object_assign),
                },
                "Array": {
                    "isArray": _Builtin(lambda v: isinstance(v, list)),
                    "from": _Builtin(self._array_from),
                },
            }
        )
        return scope

    # -- calls --------------------------------------------------------------

    def _call(self, fn: Any, args: list[Any]) -> Any:
        if isinstance(fn, _Builtin):
            return fn.fn(*args)
        if not isinstance(fn, Closure):
            raise StaticRenderError(f"Not callable: {js_str(fn)[:40]}")
        self._depth += 1
        if self._depth > MAX_DEPTH:
            raise StaticRenderError("Call depth exceeded")
        try:
            scope = Scope(fn.scope)
            params = function_params(fn.node)
            for i, param in enumerate(params):
                value = args[i] if i < len(args) else None
                default = None
                if param.type in ("required_parameter", "optional_parameter"):
                    default = param.child_by_field_name("value")
                if value is None and default is not None:
                    value = self._eval(default, scope)
                pattern = param_pattern(param)
                if pattern.type == "rest_pattern":
                    value = list(args[i:])
                    pattern = pattern.named_children[0]
                self._bind(pattern, value, scope)

            body = fn.node.child_by_field_name("body")
            if body is None:
                return None
            if body.type != "statement_block":
                return self._eval(body, scope)
            try:
                self._exec_block(body, scope)
            except _Return as r:
                return r.value
            return None
        finally:
            self._depth -= 1

    def _array_from(self, source: Any, mapper: Any = None) -> list[Any]:
        if isinstance(source, dict) and "length" in source:
            length = js_number(source["length"])
            length = int(length) if math.isfinite(length) else 0
            items: list[Any] = [None] * check_allocation(length, "Array")
        elif isinstance(source, list | str):
            items = list(source)
        else:
            items = []
        if mapper is None:
            return items
        return [self._call(mapper, [item, i]) for i, item in enumerate(items)]

    # -- statements ---------------------------------------------------------

    def _exec_block(self, block: Node, scope: Scope) -> None:
        # function declarations are hoisted
        for stmt in block.named_children:
            if stmt.type == "function_declaration":
                name = node_text(stmt.child_by_field_name("name"))
                scope.vars[name] = Closure(stmt, scope, name)
        for stmt in block.named_children:
            self._exec(stmt, scope)

    def _exec(self, stmt: Node, scope: Scope) -> None:
        self._tick()
        t = stmt.type
        if t in SKIPPED_STATEMENTS:
            return
        if t in ("lexical_declaration", "variable_declaration"):
            for declarator in stmt.named_children:
                if declarator.type != "variable_declarator":
                    continue
                value_node = declarator.child_by_field_name("value")
                value = self._eval(value_node, scope) if value_node is not None else None
                self._bind(declarator.child_by_field_name("name"), value, scope)
            return
        if t == "return_statement":
            value = stmt.named_children[0] if stmt.named_children else None
            raise _Return(self._eval(value, scope) if value is not None else None)
        if t == "if_statement":
            condition = stmt.child_by_field_name("condition")
            if js_truthy(self._eval(condition, scope)):
                self._exec_branch(stmt.child_by_field_name("consequence"), scope)
            else:
                alternative = stmt.child_by_field_name("alternative")
                if alternative is not None:
                    branch = alternative.named_children[0] if alternative.type == "else_clause" else alternative
                    self._exec_branch(branch, scope)
            return
        if t == "statement_block":
            self._exec_block(stmt, Scope(scope))
            return
        if t == "switch_statement":
            self._exec_switch(stmt, scope)
            return
        if t == "expression_statement":
            expr = stmt.named_children[0] if stmt.named_children else None
            if expr is None:
                return
            if expr.type == "assignment_expression":
                left = expr.child_by_field_name("left")
                if left is not None and left.type == "identifier":
                    scope.assign(node_text(left), self._eval(expr.child_by_field_name("right"), scope))
                return
            if expr.type == "call_expression" and self._callee_name(expr) in IGNORED_HOOKS:
                return
            # other statements only produce side effects the markup cannot see
            return
        raise StaticRenderError(f"Unsupported statement: {t}")

    def _exec_branch(self, node: Node | None, scope: Scope) -> None:
        if node is None:
            return
        if node.type == "statement_block":
            self._exec_block(node, Scope(scope))
        else:
            self._exec(node, scope)

    def _exec_switch(self, stmt: Node, scope: Scope) -> None:
        value = self._eval(stmt.child_by_field_name("value"), scope)
        body = stmt.child_by_field_name("body")
        matched = False
        for case in body.named_children if body is not None else []:
            if case.type == "switch_case":
                if not matched:
                    matched = strict_equal(value, self._eval(case.child_by_field_name("value"), scope))
            elif case.type == "switch_default":
                matched = True
            else:
                continue
            if matched:
                for child in case.named_children:
                    if child == case.child_by_field_name("value"):
                        continue
                    if child.type == "break_statement":
                        return
                    self._exec(child, scope)

    # -- binding ------------------------------------------------------------

    def _bind(self, pattern: Node | None, value: Any, scope: Scope) -> None:
        if pattern is None:
            return
        t = pattern.type
        if t == "identifier":
            scope.vars[node_text(pattern)] = value
        elif t == "object_pattern":
            source = value if isinstance(value, dict) else {}
            used: set[str] = set()
            for child in pattern.named_children:
                if child.type == "shorthand_property_identifier_pattern":
                    name = node_text(child)
                    used.add(name)
                    scope.vars[name] = source.get(name)
                elif child.type == "object_assignment_pattern":
                    left = child.child_by_field_name("left")
                    name = node_text(left)
                    used.add(name)
                    current = source.get(name)
                    if current is None:
                        current = self._eval(child.child_by_field_name("right"), scope)
                    scope.vars[name] = current
                elif child.type == "pair_pattern":
                    key_node = child.child_by_field_name("key")
                    key = self._property_key(key_node, scope)
                    used.add(key)
                    target = child.child_by_field_name("value")
                    current = source.get(key)
                    if target is not None and target.type == "assignment_pattern":
                        if current is None:
                            current = self._eval(target.child_by_field_name("right"), scope)
                        target = target.child_by_field_name("left")
                    self._bind(target, current, scope)
                elif child.type == "rest_pattern":
                    rest = {k: v for k, v in source.items() if k not in used}
                    self._bind(child.named_children[0], rest, scope)
        elif t == "array_pattern":
            items = list(value) if isinstance(value, list | str) else []
            index = 0
            for child in pattern.named_children:
                if child.type == "rest_pattern":
                    self._bind(child.named_children[0], items[index:], scope)
                    return
                current = items[index] if index < len(items) else None
                if child.type == "assignment_pattern":
                    if current is None:
                        current = self._eval(child.child_by_field_name("right"), scope)
                    self._bind(child.child_by_field_name("left"), current, scope)
                else:
                    self._bind(child, current, scope)
                index += 1
        elif t == "assignment_pattern":
            if value is None:
                value = self._eval(pattern.child_by_field_name("right"), scope)
            self._bind(pattern.child_by_field_name("left"), value, scope)
        else:
            raise StaticRenderError(f"Unsupported binding pattern: {t}")

    # -- expressions --------------------------------------------------------

    def _tick(self) -> None:
        self._steps += 1
        if self._steps > MAX_STEPS:
            raise StaticRenderError("Evaluation step budget exceeded")

    def _eval(self, node: Node | None, scope: Scope) -> Any:
        if node is None:
            return None
        self._tick()
        t = node.type
        if t == "string":
            return string_value(node)
        if t == "template_string":
            return self._template(node, scope)
        if t == "number":
            text = node_text(node).replace("_", "")
            try:
                return int(text, 0) if re.fullmatch(r"0[xob][\da-fA-F]+|\d+", text) else float(text)
            except ValueError:
                return math.nan
        if t == "true":
            return True
        if t == "false":
            return False
        if t in ("null", "undefined"):
            return None
        if t == "identifier":
            return scope.lookup(node_text(node))
        if t in ("parenthesized_expression", "as_expression", "satisfies_expression", "non_null_expression"):
            return self._eval(node.named_children[0] if node.named_children else None, scope)
        if t == "array":
            return self._array(node, scope)
        if t == "object":
            return self._object(node, scope)
        if t == "member_expression":
            return self._member(node, scope)
        if t == "subscript_expression":
            obj = self._eval(node.child_by_field_name("object"), scope)
            if obj is None and self._optional(node):
                return None
            key = self._eval(node.child_by_field_name("index"), scope)
            return self._get(obj, key)
        if t == "call_expression":
            return self._call_expression(node, scope)
        if t == "binary_expression":
            return self._binary(node, scope)
        if t == "unary_expression":
            return self._unary(node, scope)
        if t == "ternary_expression":
            condition = self._eval(node.child_by_field_name("condition"), scope)
            branch = "consequence" if js_truthy(condition) else "alternative"
            return self._eval(node.child_by_field_name(branch), scope)
        if t in ("arrow_function", "function_expression", "function"):
            return Closure(node, scope)
        if t in ("jsx_element", "jsx_self_closing_element"):
            return self._jsx(node, scope)
        if t == "jsx_expression":
            inner = [c for c in node.named_children if c.type != "comment"]
            return self._eval(inner[0], scope) if inner else None
        raise StaticRenderError(f"Unsupported expression: {t}")

    def _template(self, node: Node, scope: Scope) -> str:
        parts: list[str] = []
        for child in node.children:
            if child.type == "string_fragment":
                parts.append(node_text(child))
            elif child.type == "escape_sequence":
                parts.append(_template_escape(node_text(child)))
            elif child.type == "template_substitution":
                inner = child.named_children[0] if child.named_children else None
                parts.append(js_str(self._eval(inner, scope)))
        return "".join(parts)

    def _array(self, node: Node, scope: Scope) -> list[Any]:
        items: list[Any] = []
        for child in node.named_children:
            if child.type == "comment":
                continue
            if child.type == "spread_element":
                spread = self._eval(child.named_children[0], scope)
                if isinstance(spread, list | str):
                    items.extend(spread)
                continue
            items.append(self._eval(child, scope))
        return items

    def _object(self, node: Node, scope: Scope) -> dict[str, Any]:
        obj: dict[str, Any] = {}
        for child in node.named_children:
            if child.type == "pair":
                key = self._property_key(child.child_by_field_name("key"), scope)
                obj[key] = self._eval(child.child_by_field_name("value"), scope)
            elif child.type == "shorthand_property_identifier":
                obj[node_text(child)] = scope.lookup(node_text(child))
            elif child.type == "spread_element":
                spread = self._eval(child.named_children[0], scope)
                if isinstance(spread, dict):
                    obj.update(spread)
            elif child.type == "method_definition":
                key = self._property_key(child.child_by_field_name("name"), scope)
                obj[key] = Closure(child, scope, key)
        return obj

    def _property_key(self, node: Node | None, scope: Scope) -> str:
        if node is None:
            raise StaticRenderError("Missing property key")
        if node.type == "string":
            return string_value(node)
        if node.type == "computed_property_name":
            return js_str(self._eval(node.named_children[0], scope))
        return node_text(node)

    @staticmethod
    def _optional(node: Node) -> bool:
        return any(c.type == "optional_chain" for c in node.children)

    def _member(self, node: Node, scope: Scope) -> Any:
        obj = self._eval(node.child_by_field_name("object"), scope)
        prop = node_text(node.child_by_field_name("property"))
        if obj is None:
            if self._optional(node):
                return None
            raise StaticRenderError(f"Cannot read {prop!r} of undefined")
        return self._get(obj, prop)

    def _get(self, obj: Any, key: Any) -> Any:
        if obj is None:
            raise StaticRenderError(f"Cannot read {js_str(key)!r} of undefined")
        if isinstance(obj, dict):
            return obj.get(js_str(key))
        if isinstance(obj, list | str):
            if key == "length":
                return len(obj)
            index = _array_index(key)
            if index is not None:
                return obj[index] if index < len(obj) else None
            methods = LIST_METHODS if isinstance(obj, list) else STRING_METHODS
            return _BoundMethod(self, obj, key) if isinstance(key, str) and key in methods else None
        if isinstance(obj, int | float) and not isinstance(obj, bool):
            return _BoundMethod(self, obj, key) if isinstance(key, str) and key in NUMBER_METHODS else None
        if isinstance(obj, Closure | _Builtin):
            return None
        return None

    def _callee_name(self, node: Node) -> str:
        fn = node.child_by_field_name("function")
        if fn is None:
            return ""
        if fn.type == "member_expression":
            return node_text(fn.child_by_field_name("property"))
        return node_text(fn)

    def _call_expression(self, node: Node, scope: Scope) -> Any:
        fn_node = node.child_by_field_name("function")
        name = self._callee_name(node)
        args_node = node.child_by_field_name("arguments")
        raw_args = [a for a in (args_node.named_children if args_node else []) if a.type != "comment"]

        hook = self._hook(name, fn_node, raw_args, scope)
        if hook is not _NO_HOOK:
            return hook

        if fn_node is not None and fn_node.type == "member_expression":
            target = self._eval(fn_node.child_by_field_name("object"), scope)
            if target is None and (self._optional(fn_node) or self._optional(node)):
                return None
            callee = self._get(target, name) if target is not None else None
        else:
            callee = self._eval(fn_node, scope)
        if callee is None and self._optional(node):
            return None

        args: list[Any] = []
        for arg in raw_args:
            if arg.type == "spread_element":
                spread = self._eval(arg.named_children[0], scope)
                args.extend(spread if isinstance(spread, list) else [])
            else:
                args.append(self._eval(arg, scope))
        if isinstance(callee, _BoundMethod):
            return callee(args)
        return self._call(callee, args)

    def _hook(self, name: str, fn_node: Node | None, raw_args: list[Node], scope: Scope) -> Any:
        if fn_node is not None and fn_node.type == "member_expression":
            base = node_text(fn_node.child_by_field_name("object"))
            if base != "React":
                return _NO_HOOK
        if not name.startswith("use") or scope.has(name):
            return _NO_HOOK

        def arg(i: int) -> Any:
            return self._eval(raw_args[i], scope) if i < len(raw_args) else None

        noop = _Builtin(lambda *a: None)
        if name == "useState":
            initial = arg(0)
            if isinstance(initial, Closure | _Builtin):
                initial = self._call(initial, [])
            return [initial, noop]
        if name == "useReducer":
            initial = arg(1)
            if len(raw_args) > 2:
                initial = self._call(arg(2), [initial])
            return [initial, noop]
        if name == "useMemo":
            return self._call(arg(0), [])
        if name == "useCallback":
            return arg(0)
        if name == "useRef":
            return {"current": arg(0)}
        if name == "useId":
            self._ids += 1
            return f":r{self._ids}:"
        if name == "useTransition":
            return [False, noop]
        if name == "useDeferredValue":
            return arg(0)
        if name in IGNORED_HOOKS:
            return None
        raise StaticRenderError(f"Unsupported hook: {name}")

    def _binary(self, node: Node, scope: Scope) -> Any:
        op = node_text(node.child_by_field_name("operator"))
        left = self._eval(node.child_by_field_name("left"), scope)
        if op == "&&":
            return self._eval(node.child_by_field_name("right"), scope) if js_truthy(left) else left
        if op == "||":
            return left if js_truthy(left) else self._eval(node.child_by_field_name("right"), scope)
        if op == "??":
            return left if left is not None else self._eval(node.child_by_field_name("right"), scope)
        right = self._eval(node.child_by_field_name("right"), scope)
        if op == "===":
            return strict_equal(left, right)
        if op == "!==":
            return not strict_equal(left, right)
        if op == "==":
            return strict_equal(left, right) or (left is None and right is None)
        if op == "!=":
            return not (strict_equal(left, right) or (left is None and right is None))
        if op == "+":
            if isinstance(left, str) or isinstance(right, str) or isinstance(left, list) or isinstance(right, list):
                return js_str(left) + js_str(right)
            return js_number(left) + js_number(right)
        if op in ("<", ">", "<=", ">="):
            if isinstance(left, str) and isinstance(right, str):
                a, b = left, right
            else:
                a, b = js_number(left), js_number(right)
            return {"<": a < b, ">": a > b, "<=": a <= b, ">=": a >= b}[op]
        a, b = js_number(left), js_number(right)
        if op == "-":
            return a - b
        if op == "*":
            return a * b
        if op == "/":
            if b == 0:
                return math.inf if a > 0 else -math.inf if a < 0 else math.nan
            result = a / b
            return int(result) if result.is_integer() else result
        if op == "%":
            return math.fmod(a, b) if b else math.nan
        raise StaticRenderError(f"Unsupported operator: {op}")

    def _unary(self, node: Node, scope: Scope) -> Any:
        op = node_text(node.child_by_field_name("operator"))
        value = self._eval(node.child_by_field_name("argument"), scope)
        if op == "!":
            return not js_truthy(value)
        if op == "-":
            return -js_number(value)
        if op == "+":
            return js_number(value)
        if op == "typeof":
            if value is None:
                return "undefined"
            if isinstance(value, bool):
                return "boolean"
            if isinstance(value, int | float):
                return "number"
            if isinstance(value, str):
                return "string"
            if isinstance(value, Closure | _Builtin):
                return "function"
            return "object"
        if op == "void":
            return None
        raise StaticRenderError(f"Unsupported unary operator: {op}")

    # -- JSX ----------------------------------------------------------------

    def _jsx(self, node: Node, scope: Scope) -> Any:
        if node.type == "jsx_self_closing_element":
            opening = node
            children_nodes: list[Node] = []
        else:
            opening = node.child_by_field_name("open_tag")
            children_nodes = [
                c for c in node.named_children if c.type not in ("jsx_opening_element", "jsx_closing_element")
            ]

        name_node = opening.child_by_field_name("name") if opening is not None else None
        attrs = self._jsx_attributes(opening, scope) if opening is not None else {}
        children = self._jsx_children(children_nodes, scope)

        if name_node is None:
            return Markup("".join(self._render_value(c) for c in children))

        tag = node_text(name_node)
        if tag in ("Fragment", "React.Fragment"):
            return Markup("".join(self._render_value(c) for c in children))

        if tag[:1].islower() and "." not in tag:
            return self._element(tag, attrs, children)

        component = scope.lookup(tag) if "." not in tag else self._eval_member_tag(tag, scope)
        if not isinstance(component, Closure):
            raise StaticRenderError(f"Unknown component <{tag}>")
        props = dict(attrs)
        if children:
            props["children"] = children[0] if len(children) == 1 else children
        return Markup(self._render_value(self._call(component, [props])))

    def _eval_member_tag(self, tag: str, scope: Scope) -> Any:
        head, *rest = tag.split(".")
        value = scope.lookup(head)
        for part in rest:
            value = self._get(value, part) if value is not None else None
        return value

    def _jsx_attributes(self, opening: Node, scope: Scope) -> dict[str, Any]:
        attrs: dict[str, Any] = {}
        for child in opening.named_children:
            if child.type == "jsx_attribute":
                parts = child.named_children
                name = node_text(parts[0]) if parts else ""
                if len(parts) < 2:
                    attrs[name] = True
                    continue
                value_node = parts[1]
                if value_node.type == "string":
                    attrs[name] = html.unescape(node_text(value_node)[1:-1])
                else:
                    attrs[name] = self._eval(value_node, scope)
            elif child.type == "jsx_expression":
                spread = [c for c in child.named_children if c.type == "spread_element"]
                if spread:
                    value = self._eval(spread[0].named_children[0], scope)
                    if isinstance(value, dict):
                        attrs.update(value)
        return attrs

    def _jsx_children(self, nodes: list[Node], scope: Scope) -> list[Any]:
        children: list[Any] = []
        for child in nodes:
            if child.type == "jsx_text":
                text = _jsx_text(node_text(child))
                if text:
                    children.append(html.unescape(text))
            elif child.type == "html_character_reference":
                children.append(html.unescape(node_text(child)))
            elif child.type == "comment":
                continue
            else:
                value = self._eval(child, scope)
                if value is not None and value is not True and value is not False:
                    children.append(value)
        return children

    def _element(self, tag: str, attrs: dict[str, Any], children: list[Any]) -> Markup:
        parts = [f"<{tag}"]
        for name, value in attrs.items():
            if name in DROPPED_ATTRIBUTES or (name.startswith("on") and name[2:3].isupper()):
                continue
            if value is None or value is False or _is_function(value):
                continue
            attr = ATTRIBUTE_NAMES.get(name, name)
            if name == "style" and isinstance(value, dict):
                css = style_to_css(value)
                if css:
                    parts.append(f' style="{html.escape(css, quote=True)}"')
                continue
            if value is True:
                parts.append(f" {attr}" if not attr.startswith(("aria-", "data-")) else f' {attr}="true"')
                continue
            parts.append(f' {attr}="{html.escape(js_str(value), quote=True)}"')
        inner_html = attrs.get("dangerouslySetInnerHTML")
        if tag in VOID_ELEMENTS:
            return Markup("".join(parts) + ">")
        parts.append(">")
        if isinstance(inner_html, dict) and isinstance(inner_html.get("__html"), str):
            parts.append(inner_html["__html"])
        else:
            parts.extend(self._render_value(c) for c in children)
        parts.append(f"</{tag}>")
        return Markup("".join(parts))

    def _render_value(self, value: Any) -> str:
        if value is None or isinstance(value, bool):
            return ""
        if isinstance(value, Markup):
            return value
        if isinstance(value, list):
            return "".join(self._render_value(v) for v in value)
        if _is_function(value):
            return ""
        if isinstance(value, dict):
            raise StaticRenderError("Objects are not valid as a React child")
        return html.escape(js_str(value), quote=False)


# ---------------------------------------------------------------------------
# Builtins
# ---------------------------------------------------------------------------


class _Builtin:
    __slots__ = ("fn",)

    def __init__(self, fn: Callable[..., Any]) -> None:
        self.fn = fn


_NO_HOOK = object()

LIST_METHODS = frozenset(
    {
        "map", "filter", "find", "findIndex", "some", "every", "reduce", "forEach", "slice", "join",
        "includes", "indexOf", "concat", "reverse", "toReversed", "flat", "at",
    }
)
STRING_METHODS = frozenset(
    {
        "toUpperCase", "toLowerCase", "trim", "split", "slice", "substring", "charAt", "includes", "startsWith",
        "endsWith", "indexOf", "replace", "replaceAll", "repeat", "padStart", "padEnd", "toString",
    }
)
NUMBER_METHODS = frozenset({"toFixed", "toString", "toLocaleString"})


def _object_assign(target: Any, *sources: Any) -> Any:
    if not isinstance(target, dict):
        target = {}
    for source in sources:
        if isinstance(source, dict):
            target.update(source)
    return target


def _array_index(key: Any) -> int | None:
    """A non-negative integer index, as JS reads `xs[key]`; None for anything else."""
    if isinstance(key, bool):
        return None
    if isinstance(key, float) and key.is_integer():
        key = int(key)
    if isinstance(key, str) and key.isdigit():
        key = int(key)
    if isinstance(key, int) and key >= 0:
        return key
    return None


def _template_escape(seq: str) -> str:
    body = seq[1:]
    return {"n": "\n", "t": "\t", "`": "`", "$": "$", "\\": "\\"}.get(body, body)


class _BoundMethod:
    """A list / string / number method looked up for a call."""

    def __init__(self, renderer: StaticRenderer, target: Any, name: str) -> None:
        self.renderer = renderer
        self.target = target
        self.name = name

    def __call__(self, args: list[Any]) -> Any:
        target, name = self.target, self.name
        call = self.renderer._call
        arg0 = args[0] if args else None

        if isinstance(target, list):
            if name == "map":
                return [call(arg0, [item, i, target]) for i, item in enumerate(target)]
            if name == "filter":
                return [item for i, item in enumerate(target) if js_truthy(call(arg0, [item, i, target]))]
            if name == "find":
                return next((item for i, item in enumerate(target) if js_truthy(call(arg0, [item, i, target]))), None)
            if name == "findIndex":
                return next((i for i, item in enumerate(target) if js_truthy(call(arg0, [item, i, target]))), -1)
            if name == "some":
                return any(js_truthy(call(arg0, [item, i, target])) for i, item in enumerate(target))
            if name == "every":
                return all(js_truthy(call(arg0, [item, i, target])) for i, item in enumerate(target))
            if name == "reduce":
                items = list(enumerate(target))
                if len(args) > 1:
                    acc = args[1]
                elif items:
                    acc = items.pop(0)[1]
                else:
                    raise StaticRenderError("Reduce of empty array with no initial value")
                for i, item in items:
                    acc = call(arg0, [acc, item, i, target])
                return acc
            if name == "forEach":
                for i, item in enumerate(target):
                    call(arg0, [item, i, target])
                return None
            if name == "slice":
                return target[_slice(args, len(target))]
            if name == "join":
                sep = "," if arg0 is None else js_str(arg0)
                return sep.join(js_str(v) for v in target)
            if name == "includes":
                return any(strict_equal(v, arg0) for v in target)
            if name == "indexOf":
                return next((i for i, v in enumerate(target) if strict_equal(v, arg0)), -1)
            if name == "concat":
                result = list(target)
                for arg in args:
                    result.extend(arg if isinstance(arg, list) else [arg])
                return result
            if name in ("reverse", "toReversed"):
                return list(reversed(target))
            if name == "flat":
                return [x for item in target for x in (item if isinstance(item, list) else [item])]
            if name == "at":
                index = int(js_number(arg0))
                return target[index] if -len(target) <= index < len(target) else None

        if isinstance(target, str):
            if name == "toUpperCase":
                return target.upper()
            if name == "toLowerCase":
                return target.lower()
            if name == "trim":
                return target.strip()
            if name == "split":
                if arg0 is None:
                    return [target]
                sep = js_str(arg0)
                return list(target) if sep == "" else target.split(sep)
            if name in ("slice", "substring"):
                return target[_slice(args, len(target))]
            if name == "charAt":
                index = int(js_number(arg0))
                return target[index] if 0 <= index < len(target) else ""
            if name == "includes":
                return js_str(arg0) in target
            if name == "startsWith":
                return target.startswith(js_str(arg0))
            if name == "endsWith":
                return target.endswith(js_str(arg0))
            if name == "indexOf":
                return target.find(js_str(arg0))
            if name == "replace" and isinstance(arg0, str):
                return target.replace(arg0, js_str(args[1] if len(args) > 1 else ""), 1)
            if name == "replaceAll" and isinstance(arg0, str):
                return target.replace(arg0, js_str(args[1] if len(args) > 1 else ""))
            if name == "repeat":
                count = _int_arg(arg0)
                check_allocation(len(target) * count, "String")
                return target * count
            if name in ("padStart", "padEnd"):
                width = check_allocation(max(_int_arg(arg0), 0), "String")
                fill = js_str(args[1]) if len(args) > 1 and args[1] is not None else " "
                if width <= len(target) or not fill:
                    return target
                pad = (fill * (width // len(fill) + 1))[: width - len(target)]
                return pad + target if name == "padStart" else target + pad
            if name == "toString":
                return target

        if isinstance(target, int | float):
            if name == "toFixed":
                return f"{target:.{int(js_number(arg0) or 0)}f}"
            if name == "toString":
                return js_str(target)
            if name == "toLocaleString":
                return f"{target:,}" if isinstance(target, int) else f"{target:,.2f}"

        raise StaticRenderError(f"Unsupported method: {type(target).__name__}.{name}")


def _int_arg(value: Any) -> int:
    number = js_number(value)
    return int(number) if math.isfinite(number) else 0


def _slice(args: list[Any], length: int) -> slice:
    start = int(js_number(args[0])) if args and args[0] is not None else 0
    end = int(js_number(args[1])) if len(args) > 1 and args[1] is not None else length
    return slice(start, end)


def render_static(source: str, component_name: str | None, props: dict[str, Any] | None = None) -> str:
    """Convenience wrapper: render or raise StaticRenderError."""
    return StaticRenderer(source, component_name).render(props)


def has_unsupported_constructs(source: str) -> bool:
    """Cheap pre-check: class components and generators are never viable."""
    root = parse(source).root_node
    for node in walk(root):
        if node.type in ("class_declaration", "generator_function_declaration", "yield_expression"):
            return True
    return False
