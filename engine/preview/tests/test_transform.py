"""Tests for deterministic transform cleanup."""

from __future__ import annotations

import pytest

from engine.preview.errors import TransformError
from engine.preview.transform import (
    choose_branch,
    cleanup,
    residual_async,
    strip_code_fences,
    strip_directives,
    strip_disallowed_imports,
)
from engine.preview.types import SourceAnalysis

# ---------------------------------------------------------------------------
# Branch choice
# ---------------------------------------------------------------------------


def test_server_wins_over_data() -> None:
    """Server-only is checked before data fetching."""
    assert choose_branch(SourceAnalysis(is_server_only=True, uses_data_fetching=True)) == "server"
    assert choose_branch(SourceAnalysis(uses_data_fetching=True)) == "data"
    assert choose_branch(SourceAnalysis()) == "pure"
    assert choose_branch(None) == "pure"


# ---------------------------------------------------------------------------
# Text cleanup
# ---------------------------------------------------------------------------


def test_largest_fenced_block_kept() -> None:
    """Prose around a fenced answer is discarded."""
    text = "Here you go:\n```tsx\nconst a = 1;\nconst b = 2;\n```\nand a note:\n```\nx\n```"
    assert strip_code_fences(text) == "const a = 1;\nconst b = 2;\n"


def test_unfenced_text_passes_through() -> None:
    """Text without fences is only trimmed."""
    assert strip_code_fences("  const a = 1;  ") == "const a = 1;\n"


def test_directives_removed() -> None:
    """'use client' and "use server" lines disappear."""
    source = "'use client';\n\"use server\"\nconst a = 1;\n"
    assert strip_directives(source) == "const a = 1;\n"


def test_require_removed_with_its_declaration() -> None:
    """A require() call goes together with the declaration holding it."""
    code, removed = strip_disallowed_imports('const _ = require("lodash");\nconst a = 1;\n')
    assert "require" not in code
    assert "const a = 1;" in code
    assert [r.specifier for r in removed] == ["lodash"]


# ---------------------------------------------------------------------------
# cleanup
# ---------------------------------------------------------------------------


def test_cleanup_keeps_runtime_and_inlines_link() -> None:
    """Only runtime imports survive; a removed next/link becomes <a>."""
    source = """'use client';
import React from "react";
import Link from "next/link";
import { motion } from "framer-motion";
export default function Nav() {
  return <Link href="/a">Home</Link>;
}
"""
    code = cleanup(source, "Nav")
    assert "use client" not in code
    assert 'import React from "react";' in code
    assert "next/link" not in code and "framer-motion" not in code
    assert '<a href="/a">Home</a>' in code


def test_cleanup_inlines_next_image() -> None:
    """A removed next/image default import becomes <img>."""
    source = 'import Image from "next/image";\nexport function Hero() { return <Image src="/h.png" alt="" />; }\n'
    assert '<img src="/h.png" alt="" />' in cleanup(source, "Hero")


def test_unremovable_import_raises() -> None:
    """A dynamic import nested in an expression survives and is rejected."""
    source = 'const Chart = lazy(() => import("./chart"));\nexport function A() { return <Chart />; }\n'
    with pytest.raises(TransformError, match="./chart"):
        cleanup(source, "A")


def test_await_in_plain_function_raises() -> None:
    """An await left in a non-async component is rejected."""
    source = "export function A() { const d = await load(); return <div>{d}</div>; }\n"
    with pytest.raises(TransformError, match="await in non-async function"):
        cleanup(source, "A")


def test_async_component_raises() -> None:
    """A component still declared async is rejected."""
    with pytest.raises(TransformError, match="still async"):
        cleanup("export default async function Page() { return <div />; }\n", "Page")


def test_empty_rewrite_raises() -> None:
    """An empty fenced answer is a TransformError."""
    with pytest.raises(TransformError):
        cleanup("```tsx\n```")


def test_await_inside_async_helper_is_fine() -> None:
    """Awaits inside async handlers of a sync component are allowed."""
    source = "export function A() { async function go() { await save(); } return <button onClick={go}>Go</button>; }"
    assert residual_async(source, "A") == []


# ---------------------------------------------------------------------------
# Names bound by removed imports
# ---------------------------------------------------------------------------


def test_hook_left_in_place_raises() -> None:
    """A data rewrite that still calls the removed query hook is rejected."""
    source = """import { useQuery } from "@tanstack/react-query";
export function Users() {
  const { data } = useQuery({ queryKey: ["users"] });
  return <ul>{data.map((u) => <li key={u.id}>{u.name}</li>)}</ul>;
}
"""
    with pytest.raises(TransformError, match="useQuery"):
        cleanup(source, "Users")


def test_namespace_and_jsx_uses_raise() -> None:
    """A removed namespace used as a JSX tag is an unbound reference."""
    source = 'import * as Icons from "lucide-react";\nexport function A() { return <Icons.Star />; }\n'
    with pytest.raises(TransformError, match="Icons"):
        cleanup(source, "A")


def test_aliased_import_reported_by_local_name() -> None:
    """The local alias, not the imported name, is what must stay unused."""
    source = 'import { Button as Btn } from "@/components/ui/button";\nexport function A() { return <Btn>Go</Btn>; }\n'
    with pytest.raises(TransformError, match="Btn"):
        cleanup(source, "A")


def test_inline_replacement_for_removed_import_passes() -> None:
    """A rewrite that declares its own stand-in for a removed name is fine."""
    source = """import { cn } from "@/lib/utils";
const cn = (...parts) => parts.filter(Boolean).join(" ");
export function A({ active }) {
  return <div className={cn("p-2", active && "font-bold")}>A</div>;
}
"""
    code = cleanup(source, "A")
    assert "@/lib/utils" not in code
    assert "const cn =" in code


def test_type_only_use_of_removed_import_passes() -> None:
    """Types are erased, so using an imported type is not a reference."""
    source = (
        'import { User } from "@/types";\n'
        "export function A({ user }: { user: User }) { return <p>{user.name}</p>; }\n"
    )
    assert "@/types" not in cleanup(source, "A")


def test_property_named_like_removed_import_passes() -> None:
    """`obj.useQuery` is a property access, not the removed binding."""
    source = """import { useQuery } from "swr";
const api = { useQuery: () => [] };
export function A() { return <p>{api.useQuery().length}</p>; }
"""
    assert "swr" not in cleanup(source, "A")
