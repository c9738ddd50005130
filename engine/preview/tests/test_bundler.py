"""Tests for the Dependency Bundler."""

from __future__ import annotations

import pytest

from engine.preview.bundler import DependencyBundler, sanitize_setup_code, wrap_setup_code
from engine.preview.errors import BundleError


def fake_compile(path: str, source: str) -> str:
    """Stand-in for esbuild: marks the module and exports nothing."""
    return f"/* compiled {path} */\nmodule.exports = {{}};"


# ---------------------------------------------------------------------------
# Linking
# ---------------------------------------------------------------------------


def test_links_local_graph_and_mocks_externals(source_map: dict[str, str]) -> None:
    """Local modules are linked through aliases; packages become mocks."""
    artifact = DependencyBundler(source_map, fake_compile).bundle("components/ui/button.tsx", "Button")

    assert artifact.modules == ["components/ui/button.tsx", "lib/utils.ts"]
    assert set(artifact.mocks) == {"lucide-react", "clsx", "tailwind-merge"}
    assert artifact.mocks["lucide-react"].symbols == {"Loader2"}
    assert artifact.mocks["clsx"].symbols == {"clsx"}
    assert artifact.mocks["tailwind-merge"].symbols == {"twMerge"}


def test_artifact_publishes_component(source_map: dict[str, str]) -> None:
    """The epilogue requires the entry and publishes the component on window."""
    code = DependencyBundler(source_map, fake_compile).bundle("components/ui/button.tsx", "Button").code

    assert code.startswith("(function () {")
    assert "window.__PREVIEW_COMPONENT__ = __component;" in code
    assert 'window.__PREVIEW_COMPONENT_NAME__ = "Button";' in code
    assert '__define("mock:lucide-react"' in code
    assert '"@/lib/utils": "lib/utils.ts"' in code
    assert "/* compiled lib/utils.ts */" in code


def test_runtime_is_never_mocked(source_map: dict[str, str]) -> None:
    """React comes from the page globals, not from the registry."""
    source_map["components/counter.tsx"] = (
        'import React, { useState } from "react";\n'
        "export function Counter() { const [n] = useState(0); return <b>{n}</b>; }"
    )
    artifact = DependencyBundler(source_map, fake_compile).bundle("components/counter.tsx", "Counter")
    assert "react" not in artifact.mocks
    assert "mock:react" not in artifact.code
    assert "var React = window.React;" in artifact.code


def test_entry_source_override(source_map: dict[str, str]) -> None:
    """A transformed source replaces the entry's original text."""
    seen: dict[str, str] = {}

    def recording_compile(path: str, source: str) -> str:
        seen[path] = source
        return "module.exports = {};"

    rewritten = "export function Button() { return <button>Hi</button>; }"
    artifact = DependencyBundler(source_map, recording_compile).bundle(
        "components/ui/button.tsx", "Button", entry_source=rewritten
    )
    assert artifact.modules == ["components/ui/button.tsx"]
    assert artifact.mocks == {}
    assert seen["components/ui/button.tsx"] == rewritten


def test_namespace_members_become_symbols() -> None:
    """`import * as Dialog` demands the members used through the namespace."""
    sources = {
        "modal.tsx": (
            'import * as Dialog from "@radix-ui/react-dialog";\n'
            "export function Modal() { return <Dialog.Root><Dialog.Content>x</Dialog.Content></Dialog.Root>; }"
        )
    }
    artifact = DependencyBundler(sources, fake_compile).bundle("modal.tsx", "Modal")
    assert artifact.mocks["@radix-ui/react-dialog"].symbols == {"*", "Root", "Content"}


def test_export_star_forwards_demand() -> None:
    """Symbols asked of a barrel reach the package it re-exports."""
    sources = {
        "ui/index.ts": 'export * from "@headlessui/react";',
        "menu.tsx": 'import { Menu, Transition } from "./ui";\nexport function Nav() { return <Menu />; }',
    }
    artifact = DependencyBundler(sources, fake_compile).bundle("menu.tsx", "Nav")
    assert artifact.modules == ["menu.tsx", "ui/index.ts"]
    assert artifact.mocks["@headlessui/react"].symbols == {"Menu", "Transition"}


def test_type_only_imports_are_ignored() -> None:
    """`import type` never produces a mock."""
    sources = {"a.tsx": 'import type { Session } from "next-auth";\nexport function A() { return null; }'}
    artifact = DependencyBundler(sources, fake_compile).bundle("a.tsx", "A")
    assert artifact.mocks == {}


def test_unresolved_relative_import_raises(source_map: dict[str, str]) -> None:
    """A relative import missing from the source map is a BundleError."""
    source_map["broken.tsx"] = 'import { Thing } from "./nowhere";\nexport function Broken() { return <Thing />; }'
    with pytest.raises(BundleError, match="nowhere"):
        DependencyBundler(source_map, fake_compile).bundle("broken.tsx", "Broken")


def test_unresolved_alias_falls_to_registry() -> None:
    """An alias that matches nothing is mocked instead of failing."""
    sources = {"a.tsx": 'import { Card } from "@/components/card";\nexport function A() { return <Card />; }'}
    artifact = DependencyBundler(sources, fake_compile).bundle("a.tsx", "A")
    assert artifact.mocks["@/components/card"].symbols == {"Card"}


def test_structural_mocks_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Packages outside the catalog are named in the log; catalogued ones are not."""
    sources = {
        "a.tsx": (
            'import { Star } from "lucide-react";\n'
            'import { Widget } from "acme-widgets";\n'
            "export function A() { return <Widget><Star /></Widget>; }"
        )
    }
    with caplog.at_level("INFO", logger="engine.preview.bundler"):
        DependencyBundler(sources, fake_compile).bundle("a.tsx", "A")

    lines = [r.getMessage() for r in caplog.records if "structural mocks" in r.getMessage()]
    assert lines == ["bundler: A structural mocks for acme-widgets"]


def test_compile_failure_raises_bundle_error(source_map: dict[str, str]) -> None:
    """Any compiler exception is reported as BundleError."""

    def failing_compile(path: str, source: str) -> str:
        raise ValueError("Unexpected token")

    with pytest.raises(BundleError, match="Unexpected token"):
        DependencyBundler(source_map, failing_compile).bundle("components/ui/button.tsx", "Button")


def test_missing_entry_raises() -> None:
    """An entry path absent from the map is a BundleError."""
    with pytest.raises(BundleError):
        DependencyBundler({}, fake_compile).bundle("nope.tsx", "Nope")


def test_asset_imports_become_modules() -> None:
    """CSS modules, SVGs and JSON resolve to asset modules."""
    sources = {
        "card.tsx": (
            'import styles from "./card.module.css";\n'
            'import Logo from "./logo.svg";\n'
            'import data from "./data.json";\n'
            "export function Card() { return <div className={styles.card}><Logo />{data.title}</div>; }"
        ),
        "data.json": '{"title": "Quarterly report"}',
    }
    code = DependencyBundler(sources, fake_compile).bundle("card.tsx", "Card").code
    assert '__define("asset:./card.module.css"' in code
    assert '__define("asset:./logo.svg"' in code
    assert '__define("asset:data.json"' in code
    assert 'module.exports = {"title": "Quarterly report"};' in code


# ---------------------------------------------------------------------------
# Setup code
# ---------------------------------------------------------------------------


def test_setup_code_wrapped_and_isolated() -> None:
    """Setup code runs in try/catch with network globals shadowed."""
    wrapped = wrap_setup_code("window.__flag = 1;")
    assert "try {" in wrapped and "catch (e)" in wrapped
    assert "(function (fetch, XMLHttpRequest, WebSocket, EventSource, importScripts)" in wrapped
    assert "window.__flag = 1;" in wrapped


def test_unsafe_setup_code_dropped() -> None:
    """eval, new Function and dynamic import() are never injected."""
    assert sanitize_setup_code("eval('1')") == ""
    assert sanitize_setup_code("var f = new Function('return 1');") == ""
    assert sanitize_setup_code("import('x')") == ""
    assert wrap_setup_code("eval('1')") == ""
    assert sanitize_setup_code("window.a = 1;") == "window.a = 1;"


def test_code_with_splices_setup_before_entry(source_map: dict[str, str]) -> None:
    """Setup code lands between the module table and the entry require."""
    artifact = DependencyBundler(source_map, fake_compile).bundle("components/ui/button.tsx", "Button")
    code = artifact.code_with("window.__flag = 1;")
    assert code.index("window.__flag = 1;") < code.index("var __entry = __require(")
    assert code.index('__define("lib/utils.ts"') < code.index("window.__flag = 1;")
