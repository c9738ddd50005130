"""Tests for the Mock Module Registry."""

from __future__ import annotations

import pytest

from engine.preview.mock_registry import MockPackage, MockRegistry, default_registry, load_prelude
from engine.preview.types import MockModuleEntry


def test_exact_lookup_beats_prefix() -> None:
    """`@radix-ui/react-slot` has its own entry ahead of the Radix prefix entry."""
    assert default_registry.lookup("@radix-ui/react-slot").name == "@radix-ui/react-slot"
    assert default_registry.lookup("@radix-ui/react-dialog").name == "@radix-ui/react-"


def test_unknown_package_is_not_known() -> None:
    """Packages outside the catalog fall to the structural fallback."""
    assert default_registry.lookup("totally-unknown-lib") is None
    assert not default_registry.is_known("totally-unknown-lib")
    assert default_registry.is_known("lucide-react")
    assert default_registry.is_known("react-icons/fa")


def test_every_requested_symbol_is_defined() -> None:
    """Each named symbol gets an assignment; none is left undefined."""
    body = default_registry.build_module(MockModuleEntry("lucide-react", {"Loader2", "ChevronDown"}))
    assert 'out["ChevronDown"] = M.icon("ChevronDown");' in body
    assert 'out["Loader2"] = M.icon("Loader2");' in body
    assert "undefined" not in body
    assert body.rstrip().endswith("module.exports = out;")


def test_hand_written_expression_used_when_known() -> None:
    """Known symbols use their catalog expression."""
    body = default_registry.build_module(MockModuleEntry("clsx", {"clsx", "default"}))
    assert 'out["clsx"] = M.classNames;' in body
    assert "out['default'] = M.classNames;" in body


def test_structural_fallback_for_unknown_package() -> None:
    """Unknown packages route every symbol and the default through M.structural."""
    body = default_registry.build_module(MockModuleEntry("@acme/widgets", {"Widget", "useWidget", "default"}))
    assert 'out["Widget"] = M.structural("Widget");' in body
    assert 'out["useWidget"] = M.structural("useWidget");' in body
    assert "out['default'] = M.structural(\"Widgets\");" in body


def test_namespace_import_also_gets_default() -> None:
    """A `*` import exports a default alongside the members it touched."""
    body = default_registry.build_module(MockModuleEntry("@radix-ui/react-dialog", {"*", "Root"}))
    assert 'out["Root"] = M.primitive("Root");' in body
    assert "out['default']" in body


def test_preamble_emitted_before_exports() -> None:
    """Packages with a preamble emit it before the export table."""
    body = default_registry.build_module(MockModuleEntry("zod", {"z"}))
    assert body.index("var z = {};") < body.index("var out")


def test_runtime_is_never_mocked() -> None:
    """The rendering runtime itself is refused."""
    with pytest.raises(ValueError):
        default_registry.build_module(MockModuleEntry("react", {"useState"}))


def test_register_extends_catalog() -> None:
    """New entries are data; longest prefix wins."""
    registry = MockRegistry([])
    registry.register(MockPackage("@acme/", fallback="M.fn", prefix=True))
    registry.register(MockPackage("@acme/ui-", fallback="M.element", prefix=True))
    assert registry.lookup("@acme/ui-button").name == "@acme/ui-"
    assert registry.lookup("@acme/core").name == "@acme/"


def test_build_modules_keyed_by_package() -> None:
    """build_modules returns one body per package."""
    bodies = default_registry.build_modules(
        {"clsx": MockModuleEntry("clsx", {"clsx"}), "sonner": MockModuleEntry("sonner", {"toast"})}
    )
    assert sorted(bodies) == ["clsx", "sonner"]


def test_prelude_defines_mock_table() -> None:
    """The prelude exposes the __mock helper table."""
    assert "var __mock" in load_prelude()
