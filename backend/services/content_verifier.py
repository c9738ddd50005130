"""
Content Verifier.

Judges whether a render that "succeeded" shows real content. Deterministic
checks run first and reject without a service call; otherwise the
generation service decides. A verifier-service failure accepts (fail-open)
so one unavailable dependency never blocks the pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from backend.services.generation import GenerationClient
from backend.services.prompt_builder import build_prompt
from engine.preview.content_checks import check_markup
from engine.preview.errors import ServiceError

logger = logging.getLogger(__name__)

MAX_SOURCE_CHARS = 6000
MAX_MARKUP_CHARS = 12000

VERDICT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "is_valid": {"type": "boolean"},
        "reason": {"type": "string"},
    },
    "required": ["is_valid", "reason"],
}


@dataclass
class Verdict:
    is_valid: bool
    reason: str = ""
    decided_by: Literal["rules", "service", "fail-open"] = "service"


class ContentVerifier:
    def __init__(self, client: GenerationClient):
        self.client = client

    async def verify(self, component_name: str, source: str, markup: str | None) -> Verdict:
        check = check_markup(markup)
        if not check.is_valid:
            logger.info("verify: %s rejected by rules: %s", component_name, check.reason)
            return Verdict(False, check.reason, "rules")

        prompt = build_prompt(
            "verify",
            {
                "component_name": component_name,
                "source": source[:MAX_SOURCE_CHARS],
                "markup": (markup or "")[:MAX_MARKUP_CHARS],
            },
        )
        try:
            result = await self.client.generate("verify", prompt, schema=VERDICT_SCHEMA, fast=True)
        except ServiceError as e:
            logger.warning("verify: %s verifier unavailable, accepting: %s", component_name, e)
            return Verdict(True, f"verifier unavailable: {e}", "fail-open")

        data = result.data or {}
        is_valid = data.get("is_valid")
        if not isinstance(is_valid, bool):
            logger.warning("verify: %s malformed verdict, accepting: %r", component_name, data)
            return Verdict(True, "malformed verdict", "fail-open")
        reason = str(data.get("reason") or "")
        if not is_valid:
            logger.info("verify: %s rejected: %s", component_name, reason)
        return Verdict(is_valid, reason, "service")
