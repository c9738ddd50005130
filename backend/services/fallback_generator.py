"""
Fallback Generator.

Last tier: asks the generation service to write preview markup straight
from source and demo props, with no execution at all.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup, Doctype

from backend.services.generation import GenerationClient, strip_fences
from backend.services.prompt_builder import build_prompt, to_json
from engine.preview.analyzer import related_sources
from engine.preview.errors import RenderError, ServiceError
from engine.preview.types import ComponentRecord, RepoContext

logger = logging.getLogger(__name__)

# Never part of preview markup
DROPPED_TAGS = ("script", "head", "noscript")


def extract_markup(text: str) -> str:
    """Pull the HTML fragment out of a model answer: the body of a document, minus scripts."""
    soup = BeautifulSoup(strip_fences(text), "html.parser")
    for tag in soup.find_all(DROPPED_TAGS):
        tag.decompose()
    root = soup.body or soup.find("html") or soup
    return "".join(str(node) for node in root.contents if not isinstance(node, Doctype)).strip()


class FallbackGenerator:
    def __init__(self, client: GenerationClient):
        self.client = client

    async def generate(
        self,
        record: ComponentRecord,
        source: str,
        props: dict[str, Any],
        source_map: Mapping[str, str],
        context: RepoContext | None = None,
        reason: str = "",
    ) -> str:
        """
        Return generated preview markup.

        Raises:
            RenderError: the service failed or answered without markup
        """
        prompt = build_prompt(
            "fallback",
            {
                "repo_label": (context or RepoContext()).label or "unknown",
                "component_name": record.name,
                "file_path": record.file_path,
                "reason": reason or "not attempted",
                "source": source,
                "related": [
                    {"path": path, "source": text}
                    for path, text in related_sources(record.file_path, source_map, max_chars=2000).items()
                ],
                "props_json": to_json(props),
            },
        )
        logger.info("fallback: %s generating markup (%s)", record.name, reason or "direct")
        try:
            result = await self.client.generate("fallback", prompt, max_tokens=8192)
        except ServiceError as e:
            raise RenderError(f"Fallback generation failed: {e}") from e

        markup = extract_markup(result.text)
        if not markup:
            raise RenderError("Fallback generation returned no markup")
        return markup
