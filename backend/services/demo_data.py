"""
Demo Data Synthesizer.

Produces the prop-value map a component is previewed with:

1. Empty prop schema        → {} at high confidence, no service call
2. Storybook args declared  → the declared args at high confidence, used unconditionally
3. Otherwise                → values from the generation service

A failed or empty service answer raises SynthesisError; the caller skips
the preview stage for that component.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from backend.config import settings
from backend.services.generation import GenerationClient
from backend.services.prompt_builder import build_prompt, to_json
from engine.preview.analyzer import related_sources
from engine.preview.errors import ServiceError, SynthesisError
from engine.preview.story_args import extract_story_args
from engine.preview.types import CONFIDENCE_LEVELS, ComponentRecord, DemoProps, PropSpec, RepoContext

logger = logging.getLogger(__name__)

DEMO_PROPS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "props": {"type": "object", "description": "Prop name to demo value"},
        "confidence": {"type": "string", "enum": list(CONFIDENCE_LEVELS)},
        "notes": {"type": "string"},
        "suggested_state": {"type": "string"},
    },
    "required": ["props", "confidence"],
}

OVERLAY_NAME = re.compile(r"modal|dialog|drawer|popover|tooltip|sheet|dropdown|menu|alert|toast|overlay|portal", re.I)
VISIBILITY_PROPS = ("open", "isOpen", "visible", "show", "isVisible", "isShown")

_ARROW_FUNCTION = re.compile(r"^\s*(?:async\s*)?(?:\([^)]*\)|[A-Za-z_$][\w$]*)\s*=>")
_FUNCTION_KEYWORD = re.compile(r"^\s*(?:async\s+)?function\b")


def is_function_string(value: Any) -> bool:
    """True for strings like "() => {}" or "function () {}"."""
    return isinstance(value, str) and bool(_ARROW_FUNCTION.match(value) or _FUNCTION_KEYWORD.match(value))


def nullify_function_strings(props: Mapping[str, Any]) -> dict[str, Any]:
    """Replace function-source strings with None; the sandbox supplies inert functions."""
    return {name: (None if is_function_string(value) else value) for name, value in props.items()}


def force_overlay_visibility(component_name: str, schema: list[PropSpec], props: dict[str, Any]) -> dict[str, Any]:
    """
    Open overlay-like components.

    A modal rendered closed is an empty preview, so a declared visibility
    prop the generated map left out is forced to true.
    """
    if not OVERLAY_NAME.search(component_name):
        return props
    declared = {p.name for p in schema}
    forced = dict(props)
    for name in VISIBILITY_PROPS:
        if name in declared and name not in forced:
            forced[name] = True
            logger.info("demo data: %s forcing %s=true", component_name, name)
    return forced


@dataclass
class SynthesisJob:
    record: ComponentRecord
    source: str


class DemoDataSynthesizer:
    """Chooses declared examples or asks the generation service for demo props."""

    def __init__(self, client: GenerationClient):
        self.client = client

    async def synthesize(
        self,
        record: ComponentRecord,
        source: str,
        source_map: Mapping[str, str],
        context: RepoContext | None = None,
    ) -> DemoProps:
        if not record.props:
            return DemoProps(props={}, confidence="high", source="empty")

        stories = extract_story_args(record.file_path, dict(source_map))
        declared = stories.default_args
        if declared:
            logger.info("demo data: %s using declared args from %s", record.name, stories.path)
            return DemoProps(
                props=nullify_function_strings(declared),
                confidence="high",
                source="declared",
                notes=f"Storybook args from {stories.path}",
            )

        context = context or RepoContext()
        prompt = build_prompt(
            "demo_props",
            {
                "component_name": record.name,
                "file_path": record.file_path,
                "repo_label": context.label or "unknown",
                "repo_description": context.description,
                "props_json": to_json([p.to_dict() for p in record.props]),
                "source": source,
                "related": [
                    {"path": path, "source": text}
                    for path, text in related_sources(record.file_path, source_map, max_chars=1500).items()
                ],
            },
        )
        try:
            result = await self.client.generate("demo_props", prompt, schema=DEMO_PROPS_SCHEMA, fast=True)
        except ServiceError as e:
            raise SynthesisError(f"{record.name}: demo props unavailable: {e}") from e

        data = result.data or {}
        values = data.get("props")
        if not isinstance(values, dict) or not values:
            raise SynthesisError(f"{record.name}: empty demo props")

        confidence = data.get("confidence")
        if confidence not in CONFIDENCE_LEVELS:
            confidence = "medium"
        values = force_overlay_visibility(record.name, record.props, nullify_function_strings(values))
        return DemoProps(
            props=values,
            confidence=confidence,
            source="generated",
            notes=data.get("notes") or None,
            suggested_state=data.get("suggested_state") or None,
        )

    async def synthesize_many(
        self,
        jobs: list[SynthesisJob],
        source_map: Mapping[str, str],
        context: RepoContext | None = None,
        batch_size: int | None = None,
        pause_s: float | None = None,
    ) -> list[DemoProps | Exception]:
        """
        Synthesize for many components in bounded concurrent batches.

        Results line up with `jobs`; a failed job yields its exception.
        """
        batch_size = max(1, batch_size or settings.ANALYSIS_CONCURRENCY)
        pause_s = settings.ANALYSIS_BATCH_PAUSE_S if pause_s is None else pause_s
        results: list[DemoProps | Exception] = []
        for start in range(0, len(jobs), batch_size):
            if start and pause_s > 0:
                await asyncio.sleep(pause_s)
            batch = jobs[start : start + batch_size]
            outcomes = await asyncio.gather(
                *(self.synthesize(job.record, job.source, source_map, context) for job in batch),
                return_exceptions=True,
            )
            for job, outcome in zip(batch, outcomes, strict=True):
                if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                    raise outcome
                if isinstance(outcome, Exception):
                    logger.warning("demo data: %s failed: %s", job.record.name, outcome)
                results.append(outcome)
        return results
