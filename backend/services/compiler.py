"""Per-module TSX → CommonJS compilation via the esbuild binary."""

from __future__ import annotations

import logging
import subprocess
from pathlib import PurePosixPath

from backend.config import settings
from engine.preview.errors import BundleError

logger = logging.getLogger(__name__)

LOADERS = {
    ".tsx": "tsx",
    ".ts": "ts",
    ".jsx": "jsx",
    ".js": "jsx",
    ".mjs": "jsx",
    ".cjs": "js",
}


def compile_module(path: str, source: str) -> str:
    """
    Compile one module to CommonJS with the automatic JSX runtime.

    Args:
        path: Module path, used for the loader and error messages
        source: Module source text

    Returns:
        CommonJS code

    Raises:
        BundleError: If esbuild is missing, fails, or times out
    """
    loader = LOADERS.get(PurePosixPath(path).suffix, "tsx")
    try:
        result = subprocess.run(  # noqa: S603
            [
                settings.ESBUILD_BINARY,
                f"--loader={loader}",
                "--format=cjs",
                "--jsx=automatic",
                "--target=es2019",
                "--platform=browser",
                f"--sourcefile={path}",
                "--log-level=error",
            ],
            input=source,
            capture_output=True,
            text=True,
            timeout=settings.COMPILE_TIMEOUT_S,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise BundleError(f"Compile failed for {path}: {e.stderr.strip()}") from e
    except subprocess.TimeoutExpired as e:
        raise BundleError(f"Compile timeout for {path}") from e
    except FileNotFoundError as e:
        raise BundleError(f"esbuild not found: {settings.ESBUILD_BINARY}") from e
    return result.stdout
