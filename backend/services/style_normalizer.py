"""
Style Normalizer service.

`table` mode applies the kernel's utility table directly. `ai` mode asks the
generation service to inline the styles and then runs the table pass over
its answer, so both modes guarantee no class attributes, stable test ids
and a responsively sized root. Any failure falls back to the original
markup in a minimal responsive container; normalization never discards a
preview.
"""

from __future__ import annotations

import logging

from backend.config import settings
from backend.services.generation import GenerationClient, strip_fences
from backend.services.prompt_builder import build_prompt
from engine.preview.content_checks import visible_text
from engine.preview.errors import ServiceError
from engine.preview.style_normalizer import normalize_markup, wrap_in_container

logger = logging.getLogger(__name__)

MODES = ("table", "ai")


class StyleNormalizer:
    def __init__(self, client: GenerationClient | None = None, mode: str | None = None):
        self.client = client
        self.mode = mode or settings.STYLE_NORMALIZER_MODE
        if self.mode not in MODES:
            logger.warning("style: unknown mode %r, using table", self.mode)
            self.mode = "table"

    async def normalize(self, markup: str, component_name: str = "") -> str:
        if self.mode == "ai" and self.client is not None:
            return await self._normalize_ai(markup, component_name)
        return self._normalize_table(markup, component_name)

    def _normalize_table(self, markup: str, component_name: str) -> str:
        try:
            return normalize_markup(markup)
        except Exception:
            logger.exception("style: %s table pass failed, wrapping original", component_name)
            return wrap_in_container(markup)

    async def _normalize_ai(self, markup: str, component_name: str) -> str:
        prompt = build_prompt("style", {"markup": markup})
        try:
            result = await self.client.generate("style", prompt, fast=True, max_tokens=8192)
        except ServiceError as e:
            logger.warning("style: %s service failed, using table result: %s", component_name, e)
            return self._normalize_table(markup, component_name)

        converted = strip_fences(result.text)
        if not visible_text(converted) and visible_text(markup):
            logger.warning("style: %s service dropped the content, using table result", component_name)
            return self._normalize_table(markup, component_name)
        return self._normalize_table(converted, component_name)
