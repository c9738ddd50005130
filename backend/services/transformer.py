"""
Code Transformer service.

Asks the generation service to rewrite a component along one of three
branches, then applies the kernel's deterministic cleanup:

- server: strip async / server-bound calls, inline literal results
- data:   replace query / fetch hook results with literal data
- pure:   replace every non-runtime import with an inline equivalent

Any failure is a TransformError; the pipeline escalates a tier and never
retries the transform.
"""

from __future__ import annotations

import logging
from typing import Any

from backend.services.generation import GenerationClient
from backend.services.prompt_builder import build_prompt, to_json
from engine.preview.errors import ServiceError, TransformError
from engine.preview.transform import Branch, choose_branch, cleanup
from engine.preview.types import ComponentRecord, RepoContext, SourceAnalysis

logger = logging.getLogger(__name__)

FAILURE_MARKER = "TRANSFORM_FAILED"

SYSTEM_PROMPT = (
    "You rewrite React components so they render in an isolated browser sandbox. "
    "You answer with code only."
)


class CodeTransformer:
    """Runs one rewrite branch per call."""

    def __init__(self, client: GenerationClient):
        self.client = client

    async def transform(
        self,
        record: ComponentRecord,
        source: str,
        analysis: SourceAnalysis | None,
        demo_props: dict[str, Any] | None = None,
        context: RepoContext | None = None,
        branch: Branch | None = None,
    ) -> str:
        """
        Return self-contained source for `record`.

        Raises:
            TransformError: the service failed, reported failure, or its
                output still holds disallowed imports or async constructs
        """
        branch = branch or choose_branch(analysis)
        task = f"transform_{branch}"
        prompt = build_prompt(
            task,
            {
                "component_name": record.name,
                "file_path": record.file_path,
                "repo_label": (context or RepoContext()).label or "unknown",
                "signals": list(analysis.signals) if analysis else [],
                "source": source,
                "props_json": to_json(demo_props or {}),
            },
        )
        logger.info("transform: %s via %s branch", record.name, branch)
        try:
            result = await self.client.generate(task, prompt, system=SYSTEM_PROMPT, max_tokens=8192)
        except ServiceError as e:
            raise TransformError(f"{branch} rewrite unavailable: {e}") from e

        text = result.text.strip()
        if text.startswith(FAILURE_MARKER):
            reason = text[len(FAILURE_MARKER) :].lstrip(": ").strip() or "no reason given"
            raise TransformError(f"{branch} rewrite reported failure: {reason}")

        code = cleanup(text, record.name)
        logger.debug("transform: %s %s branch produced %d chars", record.name, branch, len(code))
        return code
