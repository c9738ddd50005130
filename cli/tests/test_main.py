"""Tests for the CLI entry point."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from engine.preview.types import InteractiveElement, PreviewOutcome
from preview_cli.main import main, parse_args


def run_main(argv: list[str]) -> int:
    with patch("sys.argv", ["component-preview", *argv]), pytest.raises(SystemExit) as exc:
        main()
    return exc.value.code


@pytest.fixture
def repo(tmp_path):
    (tmp_path / "components").mkdir()
    (tmp_path / "components" / "date-picker.tsx").write_text("export function DatePicker() { return <input />; }")
    return tmp_path


@pytest.fixture
def pipeline():
    """Patch the pipeline the CLI builds."""
    outcome = PreviewOutcome(
        html='<div><input type="date"></div>',
        tier="static",
        verified=True,
        interactive_elements=[InteractiveElement(tag="input", selector="input", label="Date", action="type")],
    )
    instance = MagicMock()
    instance.generate_preview = AsyncMock(return_value=outcome)
    with patch("preview_cli.main.PreviewPipeline", return_value=instance):
        yield instance


class TestParseArgs:
    def test_render(self):
        args = parse_args(["render", "--repo", ".", "--file", "a.tsx", "--component", "A", "--out", "o.json"])
        assert args["command"] == "render"
        assert args["repo"] == "."
        assert args["file"] == "a.tsx"
        assert args["component"] == "A"
        assert args["out"] == "o.json"

    def test_flags(self):
        assert parse_args(["-h"])["show_help"]
        assert parse_args(["--version"])["show_version"]

    def test_missing_value_exits(self):
        with pytest.raises(SystemExit):
            parse_args(["render", "--repo"])

    def test_unknown_option_exits(self):
        with pytest.raises(SystemExit):
            parse_args(["render", "--fast"])


class TestMain:
    def test_prints_json(self, repo, pipeline, capsys):
        code = run_main(["render", "--repo", str(repo), "--file", "./components/date-picker.tsx"])

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["component_name"] == "DatePicker"
        assert data["file_path"] == "components/date-picker.tsx"
        assert data["tier"] == "static"
        assert data["interactive_elements"][0]["action"] == "type"
        record, source, source_map, context = pipeline.generate_preview.await_args.args
        assert source == source_map["components/date-picker.tsx"]
        assert context.name == repo.name

    def test_writes_out_file(self, repo, pipeline, tmp_path):
        out = tmp_path / "preview.json"

        argv = ["render", "--repo", str(repo), "--file", "components/date-picker.tsx", "--component", "Picker"]
        code = run_main([*argv, "--out", str(out)])

        assert code == 0
        assert json.loads(out.read_text())["component_name"] == "Picker"

    def test_no_preview_exits_nonzero(self, repo, pipeline):
        pipeline.generate_preview.return_value = PreviewOutcome(error="preview skipped: no demo props")

        assert run_main(["render", "--repo", str(repo), "--file", "components/date-picker.tsx"]) == 1

    def test_file_not_in_repo(self, repo, pipeline, capsys):
        assert run_main(["render", "--repo", str(repo), "--file", "components/missing.tsx"]) == 1
        assert "not found" in capsys.readouterr().out

    def test_requires_repo_and_file(self, capsys):
        assert run_main(["render", "--file", "a.tsx"]) == 1
        assert "requires --repo and --file" in capsys.readouterr().out
