"""Tests for reading a repository checkout into a source map."""

from __future__ import annotations

import pytest

from preview_cli.repo import MAX_FILE_BYTES, read_source_map


def test_reads_sources_with_posix_paths(tmp_path):
    (tmp_path / "components" / "ui").mkdir(parents=True)
    (tmp_path / "components" / "ui" / "button.tsx").write_text("export function Button() {}")
    (tmp_path / "tsconfig.json").write_text("{}")
    (tmp_path / "app.css").write_text("body {}")
    (tmp_path / "README.md").write_text("# hi")

    source_map = read_source_map(tmp_path)

    assert source_map == {
        "app.css": "body {}",
        "components/ui/button.tsx": "export function Button() {}",
        "tsconfig.json": "{}",
    }


def test_skips_dependencies_and_build_output(tmp_path):
    for folder in ("node_modules/react", ".git", ".next/server", "dist"):
        (tmp_path / folder).mkdir(parents=True)
        (tmp_path / folder / "index.js").write_text("x")
    (tmp_path / "package-lock.json").write_text("{}")
    (tmp_path / "index.ts").write_text("export {}")

    assert list(read_source_map(tmp_path)) == ["index.ts"]


def test_skips_large_and_binary_files(tmp_path):
    (tmp_path / "big.js").write_text("x" * (MAX_FILE_BYTES + 1))
    (tmp_path / "bad.ts").write_bytes(b"\xff\xfe\x00")
    (tmp_path / "ok.ts").write_text("export {}")

    assert list(read_source_map(tmp_path)) == ["ok.ts"]


def test_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_source_map(tmp_path / "nope")
