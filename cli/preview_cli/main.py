"""Main entry point for the component preview CLI."""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from backend.config import settings
from backend.logging_config import configure_logging
from backend.models.preview import PreviewResponse
from backend.routes.previews import component_name_from_path
from backend.services.orchestrator import PreviewPipeline
from engine.preview.resolver import normalize_path
from engine.preview.types import ComponentRecord, RepoContext
from preview_cli import __version__
from preview_cli.repo import read_source_map


def print_help():
    """Print help message."""
    print(f"""
component-preview v{__version__}

Usage:
  component-preview render --repo DIR --file PATH [options]

Commands:
  render            Generate a preview for one component and print it as JSON

Options:
  --repo DIR        Repository checkout to read sources from
  --file PATH       Component file, relative to --repo
  --component NAME  Exported component name (default: derived from the file name)
  --out FILE        Write the JSON to FILE instead of stdout
  -h, --help        Show this help
  -v, --version     Show version

Environment:
  ANTHROPIC_API_KEY / OPENAI_API_KEY   Generation service credential
  SANDBOX_URL                          Sandbox Renderer worker (unset = skip that tier)
  USE_MOCK_LLM=true                    Scripted answers, no API calls
  LOG_LEVEL                            Log level for stderr output (default: INFO)

Examples:
  component-preview render --repo ~/src/web --file components/ui/button.tsx
  component-preview render --repo . --file src/Card.tsx --component Card --out card.json
""")


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        command: str | None (render)
        repo: str | None
        file: str | None
        component: str | None
        out: str | None
        show_help: bool
        show_version: bool
    """
    result = {
        "command": None,
        "repo": None,
        "file": None,
        "component": None,
        "out": None,
        "show_help": False,
        "show_version": False,
    }
    valued = {"--repo": "repo", "--file": "file", "--component": "component", "--out": "out"}

    i = 0
    while i < len(args):
        arg = args[i]

        if arg == "render":
            result["command"] = "render"
        elif arg in valued:
            if i + 1 < len(args):
                result[valued[arg]] = args[i + 1]
                i += 1
            else:
                print(f"Error: {arg} requires a value")
                sys.exit(1)
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}")
            print("Run 'component-preview --help' for usage.")
            sys.exit(1)
        else:
            print(f"Unknown command: {arg}")
            print("Run 'component-preview --help' for usage.")
            sys.exit(1)

        i += 1

    return result


async def render(repo: Path, file_path: str, component: str | None) -> PreviewResponse:
    """Preview one component of a repository checkout."""
    source_map = read_source_map(repo)
    file_path = normalize_path(file_path)
    if file_path not in source_map:
        raise FileNotFoundError(f"{file_path} not found under {repo}")

    record = ComponentRecord(file_path=file_path, name=component or component_name_from_path(file_path))
    context = RepoContext(name=repo.resolve().name)
    pipeline = PreviewPipeline()
    outcome = await pipeline.generate_preview(record, source_map[file_path], source_map, context)
    return PreviewResponse.from_outcome(record, outcome)


def main():
    """Main entry point."""
    args = parse_args(sys.argv[1:])

    # Handle help and version first
    if args["show_help"]:
        print_help()
        return

    if args["show_version"]:
        print(f"component-preview {__version__}")
        return

    if args["command"] is None:
        print_help()
        sys.exit(1)

    if not args["repo"] or not args["file"]:
        print("Error: render requires --repo and --file")
        sys.exit(1)

    configure_logging(settings.LOG_LEVEL)

    try:
        response = asyncio.run(render(Path(args["repo"]).expanduser(), args["file"], args["component"]))
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    output = response.model_dump_json(indent=2)
    if args["out"]:
        Path(args["out"]).write_text(output + "\n")
        print(f"Wrote {args['out']} (tier: {response.tier or 'none'})")
    else:
        print(output)

    sys.exit(0 if response.html else 1)


if __name__ == "__main__":
    main()
