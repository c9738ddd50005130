"""
Preview Kernel — Dependency Bundler

Links a component and its local import graph into one self-contained
IIFE. Local specifiers resolve against the repository source map; every
external package is replaced by a module synthesized by the Mock Module
Registry from the symbols the graph actually references. The rendering
runtime (React / ReactDOM) is read from the sandbox page's globals.

Artifact layout:

    (function () {
      var React = window.React; ...
      <prelude: __mock helper table>
      <module table: __define(id, deps, factory) per module>
      <setup slot: recovery setup code, wrapped>
      <entry: require entry, publish window.__PREVIEW_COMPONENT__>
    })();

The module table is scoped to the artifact. Nothing is registered on a
process-wide loader, so two bundles never share mocks.

Compilation (TSX -> CommonJS) is injected as a callable so this module
stays free of subprocess work; see backend/services/compiler.py.
"""

from __future__ import annotations

import json
import logging
import re
from collections import deque
from collections.abc import Callable, Mapping

from engine.preview.errors import BundleError
from engine.preview.imports import (
    ImportRecord,
    is_relative_specifier,
    is_runtime_specifier,
    namespace_members,
    package_name,
    scan_imports,
)
from engine.preview.mock_registry import MockRegistry, default_registry, load_prelude
from engine.preview.resolver import PathResolver, asset_kind, normalize_path
from engine.preview.types import BundleArtifact, MockModuleEntry

logger = logging.getLogger(__name__)

CompileFn = Callable[[str, str], str]

MAX_MODULES = 250

# Setup code with these constructs is never injected.
_UNSAFE_SETUP = re.compile(r"\beval\s*\(|\bnew\s+Function\b|\bimport\s*\(")

# Globals hidden from injected setup code.
_SHADOWED_GLOBALS = ("fetch", "XMLHttpRequest", "WebSocket", "EventSource", "importScripts")


# ---------------------------------------------------------------------------
# Runtime and asset modules
# ---------------------------------------------------------------------------

_JSX_RUNTIME = """function jsx(type, props, key) {
  var p = Object.assign({}, props);
  if (key !== undefined) p.key = key;
  return React.createElement(type, p);
}
module.exports = { __esModule: true, jsx: jsx, jsxs: jsx, jsxDEV: jsx, Fragment: React.Fragment };"""

_RUNTIME_MODULES: dict[str, str] = {
    "react": "module.exports = React;",
    "react-dom": "module.exports = ReactDOM;",
    "react-dom/client": "module.exports = ReactDOM;",
    "react/jsx-runtime": _JSX_RUNTIME,
    "react/jsx-dev-runtime": _JSX_RUNTIME,
}

_MODULE_TABLE = """var __modules = {};
var __cache = {};
function __define(id, deps, factory) {
  __modules[id] = { deps: deps, factory: factory };
}
function __require(id) {
  if (__cache[id]) return __cache[id].exports;
  var record = __modules[id];
  if (!record) throw new Error("Module not bundled: " + id);
  var module = { exports: {} };
  __cache[id] = module;
  record.factory.call(module.exports, module, module.exports, function (spec) {
    var target = record.deps[spec];
    if (target === undefined) throw new Error("Cannot resolve '" + spec + "' from " + id);
    return __require(target);
  });
  return module.exports;
}
function __pick(mod, name) {
  if (mod && mod[name]) return mod[name];
  if (mod && mod["default"]) return mod["default"];
  if (typeof mod === "function") return mod;
  var keys = Object.keys(mod || {}).filter(function (k) { return k !== "__esModule"; });
  if (keys.length === 1) return mod[keys[0]];
  return null;
}"""


def _asset_module(kind: str, specifier: str, resolved: str | None, source_map: Mapping[str, str]) -> str:
    if kind == "css-module":
        return (
            "module.exports = new Proxy({}, { get: function (t, k) {"
            " return k === '__esModule' ? false : typeof k === 'string' ? k : undefined; } });"
        )
    if kind == "css":
        return "module.exports = {};"
    if kind == "svg":
        return (
            "var Svg = __mock.icon('Svg');"
            " module.exports = { __esModule: true, 'default': Svg, ReactComponent: Svg };"
        )
    if kind == "json":
        text = source_map.get(resolved) if resolved else None
        if text is not None:
            try:
                value = json.loads(text)
            except ValueError:
                logger.warning("bundler: invalid JSON in %s, substituting {}", resolved)
                value = {}
        else:
            value = {}
        return f"module.exports = {json.dumps(value)};"
    # image / font: the path itself
    path = "/" + resolved if resolved else specifier
    return f"module.exports = {json.dumps(path)};"


# ---------------------------------------------------------------------------
# Setup code
# ---------------------------------------------------------------------------


def sanitize_setup_code(code: str) -> str:
    """Return the code unchanged, or "" when it uses a forbidden construct."""
    if not code or not code.strip():
        return ""
    if _UNSAFE_SETUP.search(code):
        logger.warning("bundler: dropping setup code using eval / Function / dynamic import")
        return ""
    return code


def wrap_setup_code(code: str) -> str:
    """
    Isolate injected setup code.

    The code runs in its own function scope with network globals shadowed,
    and inside try/catch so its own failure cannot abort the render.
    """
    code = sanitize_setup_code(code)
    if not code:
        return ""
    params = ", ".join(_SHADOWED_GLOBALS)
    args = ", ".join("undefined" for _ in _SHADOWED_GLOBALS)
    return (
        f"\n;(function ({params}) {{\n"
        "  try {\n"
        f"{code}\n"
        "  } catch (e) {\n"
        '    console.warn("[preview] setup code failed: " + (e && e.message ? e.message : e));\n'
        "  }\n"
        f"}}).call(window, {args});\n"
    )


# ---------------------------------------------------------------------------
# Bundler
# ---------------------------------------------------------------------------


class DependencyBundler:
    """
    Builds one BundleArtifact per call.

    `source_map` is read-only. `compile_module(path, source)` must return
    CommonJS code or raise BundleError.
    """

    def __init__(
        self,
        source_map: Mapping[str, str],
        compile_module: CompileFn,
        registry: MockRegistry | None = None,
        resolver: PathResolver | None = None,
    ) -> None:
        self.source_map = {normalize_path(p): text for p, text in source_map.items()}
        self.compile_module = compile_module
        self.registry = registry or default_registry
        self.resolver = resolver or PathResolver.from_source_map(self.source_map)

    def bundle(self, entry_path: str, component_name: str, entry_source: str | None = None) -> BundleArtifact:
        """
        Link `entry_path` (or `entry_source` standing in for it) into an artifact.

        Raises BundleError on an unresolved relative import or a compile failure.
        """
        entry = normalize_path(entry_path)
        if entry_source is None:
            if entry not in self.source_map:
                raise BundleError(f"Entry module not in source map: {entry_path}")
            entry_source = self.source_map[entry]

        sources: dict[str, str] = {entry: entry_source}
        deps: dict[str, dict[str, str]] = {}
        records: dict[str, list[ImportRecord]] = {}
        assets: dict[str, str] = {}
        externals: dict[str, MockModuleEntry] = {}
        order: list[str] = []

        queue: deque[str] = deque([entry])
        seen = {entry}
        while queue:
            module_id = queue.popleft()
            order.append(module_id)
            if len(order) > MAX_MODULES:
                raise BundleError(f"Import graph exceeds {MAX_MODULES} modules")
            module_records = [r for r in scan_imports(sources[module_id]) if not r.type_only]
            records[module_id] = module_records
            links: dict[str, str] = {spec: spec for spec in _RUNTIME_MODULES}

            for record in module_records:
                spec = record.specifier
                if is_runtime_specifier(spec):
                    continue
                target = self._link(module_id, record, assets, externals)
                links[spec] = target
                if target in self.source_map and target not in seen:
                    seen.add(target)
                    sources[target] = self.source_map[target]
                    queue.append(target)
            deps[module_id] = links

        self._collect_symbols(records, deps, sources, externals)

        compiled: dict[str, str] = {}
        for module_id in order:
            try:
                compiled[module_id] = self.compile_module(module_id, sources[module_id])
            except BundleError:
                raise
            except Exception as e:
                raise BundleError(f"Compile failed for {module_id}: {e}") from e

        mock_bodies = self.registry.build_modules(externals)
        structural = sorted(p for p in externals if not self.registry.is_known(p))
        if structural:
            logger.info("bundler: %s structural mocks for %s", component_name, ", ".join(structural))
        prologue = self._prologue(order, compiled, deps, assets, externals, mock_bodies)
        epilogue = self._epilogue(entry, component_name)
        logger.info(
            "bundler: %s linked %d local modules, %d mocked packages",
            component_name,
            len(order),
            len(externals),
        )
        return BundleArtifact(
            component_name=component_name,
            entry_path=entry,
            prologue=prologue,
            epilogue=epilogue,
            modules=order,
            mocks=externals,
        )

    # -- linking ------------------------------------------------------------

    def _link(
        self,
        importer: str,
        record: ImportRecord,
        assets: dict[str, str],
        externals: dict[str, MockModuleEntry],
    ) -> str:
        """Return the module id a specifier links to, registering assets / mocks."""
        spec = record.specifier
        kind = asset_kind(spec)
        local = self.resolver.is_local(spec)
        resolved = self.resolver.resolve(spec, importer) if local else None

        if kind is not None and kind != "json":
            asset_id = f"asset:{resolved or spec}"
            assets[asset_id] = _asset_module(kind, spec, resolved, self.source_map)
            return asset_id
        if kind == "json" and (resolved or local):
            asset_id = f"asset:{resolved or spec}"
            assets[asset_id] = _asset_module(kind, spec, resolved, self.source_map)
            return asset_id

        if resolved is not None:
            return resolved
        if is_relative_specifier(spec) or spec.startswith("/"):
            raise BundleError(f"Unresolved local import {spec!r} in {importer}")

        # Bare package or unresolved alias: the registry stands in.
        package = package_name(spec)
        if package not in externals:
            externals[package] = MockModuleEntry(package=package)
        return f"mock:{package}"

    def _collect_symbols(
        self,
        records: dict[str, list[ImportRecord]],
        deps: dict[str, dict[str, str]],
        sources: dict[str, str],
        externals: dict[str, MockModuleEntry],
    ) -> None:
        """
        Compute per-package symbol sets over the whole graph.

        `export * from "pkg"` forwards whatever importers of the re-exporting
        module ask for, so demand is propagated to a fixpoint first.
        """
        demand: dict[str, set[str]] = {module_id: set() for module_id in records}
        star_edges: list[tuple[str, str]] = []

        for module_id, module_records in records.items():
            for record in module_records:
                target = deps[module_id].get(record.specifier)
                if target is None:
                    continue
                if record.reexport and record.namespace == "*":
                    star_edges.append((module_id, target))
                    continue
                symbols = record.imported_symbols()
                if record.namespace not in (None, "*"):
                    symbols |= namespace_members(sources[module_id], record.namespace)
                demand.setdefault(target, set()).update(symbols)

        changed = True
        while changed:
            changed = False
            for module_id, target in star_edges:
                wanted = demand.get(module_id, set()) - {"default", "*"}
                before = len(demand.setdefault(target, set()))
                demand[target] |= wanted
                if len(demand[target]) != before:
                    changed = True

        for package, entry in externals.items():
            entry.merge(demand.get(f"mock:{package}", set()))

    # -- emission -----------------------------------------------------------

    def _prologue(
        self,
        order: list[str],
        compiled: dict[str, str],
        deps: dict[str, dict[str, str]],
        assets: dict[str, str],
        externals: dict[str, MockModuleEntry],
        mock_bodies: dict[str, str],
    ) -> str:
        parts = [
            "(function () {",
            "var React = window.React;",
            "var ReactDOM = window.ReactDOM;",
            load_prelude(),
            _MODULE_TABLE,
        ]
        for spec, body in _RUNTIME_MODULES.items():
            parts.append(_define(spec, {}, body))
        for package in sorted(externals):
            parts.append(_define(f"mock:{package}", {}, mock_bodies[package]))
        for asset_id in sorted(assets):
            parts.append(_define(asset_id, {}, assets[asset_id]))
        for module_id in order:
            parts.append(_define(module_id, deps[module_id], compiled[module_id]))
        return "\n".join(parts) + "\n"

    @staticmethod
    def _epilogue(entry: str, component_name: str) -> str:
        entry_js = json.dumps(entry)
        name_js = json.dumps(component_name)
        return (
            f"var __entry = __require({entry_js});\n"
            f"var __component = __pick(__entry, {name_js});\n"
            "if (!__component) {\n"
            f'  throw new Error("Component " + {name_js} + " is not exported by " + {entry_js});\n'
            "}\n"
            "window.__PREVIEW_COMPONENT__ = __component;\n"
            f"window.__PREVIEW_COMPONENT_NAME__ = {name_js};\n"
            "})();\n"
        )


def _define(module_id: str, deps: Mapping[str, str], body: str) -> str:
    return (
        f"__define({json.dumps(module_id)}, {json.dumps(dict(deps), sort_keys=True)}, "
        f"function (module, exports, require) {{\n{body}\n}});"
    )
