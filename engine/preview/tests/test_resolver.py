"""Tests for local module resolution."""

from __future__ import annotations

from engine.preview.resolver import PathResolver, asset_kind, normalize_path, read_tsconfig


def test_relative_with_extension_variants(source_map: dict[str, str]) -> None:
    """Relative specifiers try extensions after the exact path."""
    resolver = PathResolver(source_map)
    assert resolver.resolve("../../lib/utils", "components/ui/button.tsx") == "lib/utils.ts"


def test_index_variants() -> None:
    """A directory specifier resolves to its index file."""
    resolver = PathResolver({"components/card/index.tsx": "", "app.tsx": ""})
    assert resolver.resolve("./components/card", "app.tsx") == "components/card/index.tsx"


def test_default_alias(source_map: dict[str, str]) -> None:
    """`@/` maps to the repository root without a config file."""
    resolver = PathResolver.from_source_map(source_map)
    assert resolver.is_alias("@/lib/utils")
    assert resolver.resolve("@/lib/utils", "components/ui/button.tsx") == "lib/utils.ts"


def test_default_alias_falls_back_to_src() -> None:
    """`@/` also tries `src/` when the root has no match."""
    resolver = PathResolver({"src/lib/utils.ts": ""})
    assert resolver.resolve("@/lib/utils", "src/app.tsx") == "src/lib/utils.ts"


def test_tsconfig_paths_with_comments() -> None:
    """Aliases come from tsconfig paths; comments and trailing commas are tolerated."""
    tsconfig = """{
      // editor settings
      "compilerOptions": {
        "baseUrl": ".",
        "paths": { "#ui/*": ["./packages/ui/*"], },
      },
    }"""
    resolver = PathResolver.from_source_map({"tsconfig.json": tsconfig, "packages/ui/button.tsx": ""})
    assert resolver.resolve("#ui/button", "app/page.tsx") == "packages/ui/button.tsx"
    assert not resolver.is_alias("@/button")


def test_unresolved_returns_none(source_map: dict[str, str]) -> None:
    """Nothing in the source map means None."""
    resolver = PathResolver(source_map)
    assert resolver.resolve("./missing", "components/ui/button.tsx") is None


def test_read_tsconfig_keeps_urls() -> None:
    """`//` inside a string value is not treated as a comment."""
    assert read_tsconfig('{"$schema": "https://json.schemastore.org/tsconfig"}')["$schema"].startswith("https://")


def test_asset_kinds() -> None:
    """Asset specifiers are classified by extension."""
    assert asset_kind("./button.module.css") == "css-module"
    assert asset_kind("./globals.css") == "css"
    assert asset_kind("./logo.svg") == "svg"
    assert asset_kind("./hero.png?url") == "image"
    assert asset_kind("./data.json") == "json"
    assert asset_kind("./button") is None


def test_normalize_path() -> None:
    """Leading ./ and / are dropped and segments collapsed."""
    assert normalize_path("./a/../b/c.ts") == "b/c.ts"
    assert normalize_path("/src\\x.ts") == "src/x.ts"
