"""
Preview Kernel — Import Scanner

Statically lists the imports of a module: default, named (alias-aware,
type-only skipped), namespace, side-effect, re-exports, `require()` and
dynamic `import()`. The bundler turns these into the per-package symbol
sets that the Mock Module Registry builds substitutes from.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from engine.preview.ts_parser import node_text, parse, string_value, walk

# The rendering runtime is provided by the sandbox page and never mocked.
RUNTIME_SPECIFIERS: frozenset[str] = frozenset(
    {
        "react",
        "react-dom",
        "react/jsx-runtime",
        "react/jsx-dev-runtime",
        "react-dom/client",
    }
)


@dataclass
class ImportRecord:
    """One import (or re-export) statement."""

    specifier: str
    default: str | None = None
    named: dict[str, str] = field(default_factory=dict)  # local name -> imported name
    namespace: str | None = None
    type_only: bool = False
    reexport: bool = False
    dynamic: bool = False
    start_byte: int = 0
    end_byte: int = 0

    @property
    def side_effect_only(self) -> bool:
        return self.default is None and not self.named and self.namespace is None and not self.reexport

    def imported_symbols(self) -> set[str]:
        """Symbols this statement pulls from the target module."""
        symbols = set(self.named.values())
        if self.default is not None:
            symbols.add("default")
        if self.namespace is not None:
            symbols.add("*")
        return symbols


def is_runtime_specifier(specifier: str) -> bool:
    return specifier in RUNTIME_SPECIFIERS


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith("./") or specifier.startswith("../") or specifier in (".", "..")


def package_name(specifier: str) -> str:
    """`@scope/pkg/sub` -> `@scope/pkg/sub`; subpaths stay distinct packages."""
    return specifier.split("?")[0]


def scan_imports(source: str) -> list[ImportRecord]:
    """Return every static and dynamic import of a module, in source order."""
    tree = parse(source)
    records: list[ImportRecord] = []

    for node in walk(tree.root_node):
        if node.type == "import_statement":
            record = _import_statement(node)
            if record is not None:
                records.append(record)
        elif node.type == "export_statement" and node.child_by_field_name("source") is not None:
            records.append(_reexport_statement(node))
        elif node.type == "call_expression":
            record = _call_import(node)
            if record is not None:
                records.append(record)

    records.sort(key=lambda r: r.start_byte)
    return records


def namespace_members(source: str, namespace: str) -> set[str]:
    """Member names accessed through a namespace binding, JSX tags included."""
    pattern = re.compile(rf"(?<![\w$.]){re.escape(namespace)}\s*\??\.\s*([A-Za-z_$][\w$]*)")
    return set(pattern.findall(source))


# ---------------------------------------------------------------------------
# Node handlers
# ---------------------------------------------------------------------------


def _import_statement(node) -> ImportRecord | None:
    source = node.child_by_field_name("source")
    if source is None:
        return None
    record = ImportRecord(
        specifier=string_value(source),
        start_byte=node.start_byte,
        end_byte=node.end_byte,
    )
    record.type_only = any(c.type == "type" for c in node.children)

    for child in node.named_children:
        if child.type != "import_clause":
            continue
        for part in child.named_children:
            if part.type == "identifier":
                record.default = node_text(part)
            elif part.type == "namespace_import":
                ident = [c for c in part.named_children if c.type == "identifier"]
                if ident:
                    record.namespace = node_text(ident[0])
            elif part.type == "named_imports":
                for spec in part.named_children:
                    if spec.type != "import_specifier":
                        continue
                    if any(c.type == "type" for c in spec.children):
                        continue
                    imported = node_text(spec.child_by_field_name("name"))
                    alias = spec.child_by_field_name("alias")
                    if spec.child_by_field_name("name").type == "string":
                        imported = string_value(spec.child_by_field_name("name"))
                    record.named[node_text(alias) if alias is not None else imported] = imported
    return record


def _reexport_statement(node) -> ImportRecord:
    source = node.child_by_field_name("source")
    record = ImportRecord(
        specifier=string_value(source),
        reexport=True,
        start_byte=node.start_byte,
        end_byte=node.end_byte,
    )
    record.type_only = any(c.type == "type" for c in node.children)
    for child in node.named_children:
        if child.type == "export_clause":
            for spec in child.named_children:
                if spec.type != "export_specifier":
                    continue
                if any(c.type == "type" for c in spec.children):
                    continue
                name = node_text(spec.child_by_field_name("name"))
                alias = spec.child_by_field_name("alias")
                record.named[node_text(alias) if alias is not None else name] = name
        elif child.type == "namespace_export":
            ident = child.named_children[0] if child.named_children else None
            record.namespace = node_text(ident) if ident is not None else "*"
    if not record.named and record.namespace is None:
        # export * from "x"
        record.namespace = "*"
    return record


def _call_import(node) -> ImportRecord | None:
    fn = node.child_by_field_name("function")
    args = node.child_by_field_name("arguments")
    if fn is None or args is None:
        return None
    callee = node_text(fn)
    if callee not in ("require", "import"):
        return None
    strings = [a for a in args.named_children if a.type == "string"]
    if len(strings) != 1:
        return None
    record = ImportRecord(
        specifier=string_value(strings[0]),
        namespace="*",
        dynamic=callee == "import",
        start_byte=node.start_byte,
        end_byte=node.end_byte,
    )
    # const { a, b } = require("x")
    parent = node.parent
    if callee == "require" and parent is not None and parent.type == "variable_declarator":
        pattern = parent.child_by_field_name("name")
        if pattern is not None and pattern.type == "object_pattern":
            record.namespace = None
            for child in pattern.named_children:
                if child.type == "shorthand_property_identifier_pattern":
                    record.named[node_text(child)] = node_text(child)
                elif child.type == "pair_pattern":
                    key = node_text(child.child_by_field_name("key"))
                    value = node_text(child.child_by_field_name("value"))
                    record.named[value] = key
        elif pattern is not None and pattern.type == "identifier":
            record.namespace = node_text(pattern)
    return record
