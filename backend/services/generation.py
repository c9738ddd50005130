"""
Generation service clients for Anthropic and OpenAI models.

Every pipeline stage that needs a model goes through `GenerationClient.generate`:

    result = await client.generate("verify", prompt, schema=VERDICT_SCHEMA, fast=True)
    result.data   # parsed JSON when a schema was requested
    result.text   # raw text otherwise

Failure modes are folded into ServiceError:
- network / rate limit / 5xx: retried with exponential backoff, then ServiceError(retryable=True)
- empty response: ServiceError, no retry
- malformed JSON when a schema was requested: ServiceError, no retry
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any

import anthropic
import openai

from backend.config import settings
from engine.preview.errors import ServiceError

logger = logging.getLogger(__name__)

# Transient error types that warrant a retry
_RETRYABLE_ANTHROPIC = (
    anthropic.RateLimitError,
    anthropic.APIConnectionError,
    anthropic.InternalServerError,
)
_RETRYABLE_OPENAI = (
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.InternalServerError,
)

_FENCE = re.compile(r"^\s*```[\w-]*\s*\n(.*?)\n?```\s*$", re.DOTALL)

STRUCTURED_TOOL = "submit_result"


@dataclass
class GenerationResult:
    """One answer from the generation service."""

    text: str
    data: dict[str, Any] | None = None
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0


def strip_fences(text: str) -> str:
    """Remove a single markdown code fence wrapping the whole answer."""
    match = _FENCE.match(text)
    return match.group(1) if match else text.strip()


def parse_json_object(text: str) -> dict[str, Any]:
    """
    Parse a JSON object out of model text.

    Tolerates a wrapping code fence and prose around the object.
    Raises ServiceError when no object can be parsed.
    """
    body = strip_fences(text)
    try:
        value = json.loads(body)
    except json.JSONDecodeError:
        start, end = body.find("{"), body.rfind("}")
        if start < 0 or end <= start:
            raise ServiceError("Malformed JSON response: no object found") from None
        try:
            value = json.loads(body[start : end + 1])
        except json.JSONDecodeError as e:
            raise ServiceError(f"Malformed JSON response: {e.msg}") from e
    if not isinstance(value, dict):
        raise ServiceError(f"Malformed JSON response: expected object, got {type(value).__name__}")
    return value


class GenerationClient:
    """Interface shared by the real and scripted clients."""

    provider = "none"

    async def generate(
        self,
        task: str,
        prompt: str,
        *,
        schema: dict[str, Any] | None = None,
        system: str | None = None,
        model: str | None = None,
        fast: bool = False,
        max_tokens: int = 4096,
    ) -> GenerationResult:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------


class AnthropicGenerationClient(GenerationClient):
    """
    Calls the Anthropic Messages API.

    Structured output is requested through a single forced tool whose
    input_schema is the requested schema.
    """

    provider = "anthropic"

    def __init__(self, api_key: str, max_retries: int | None = None):
        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.max_retries = settings.GENERATION_MAX_RETRIES if max_retries is None else max_retries

    async def generate(
        self,
        task: str,
        prompt: str,
        *,
        schema: dict[str, Any] | None = None,
        system: str | None = None,
        model: str | None = None,
        fast: bool = False,
        max_tokens: int = 4096,
    ) -> GenerationResult:
        kwargs: dict[str, Any] = {
            "model": model or (settings.FAST_MODEL if fast else settings.GENERATION_MODEL),
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        if schema is not None:
            kwargs["tools"] = [
                {
                    "name": STRUCTURED_TOOL,
                    "description": f"Return the {task} result.",
                    "input_schema": schema,
                }
            ]
            kwargs["tool_choice"] = {"type": "tool", "name": STRUCTURED_TOOL}

        last_error: Exception | None = None
        for attempt in range(self.max_retries + 1):
            started = time.perf_counter()
            try:
                async with self.client.messages.stream(**kwargs) as stream:
                    message = await stream.get_final_message()
            except _RETRYABLE_ANTHROPIC as e:
                last_error = e
                if attempt < self.max_retries:
                    wait_time = 2**attempt  # 1s, 2s, 4s...
                    logger.warning(
                        "generation: %s anthropic error (attempt %d), retrying in %ds: %s",
                        task,
                        attempt + 1,
                        wait_time,
                        e,
                    )
                    await asyncio.sleep(wait_time)
                continue
            except anthropic.APIError as e:
                raise ServiceError(f"{task}: Anthropic API error: {e}") from e

            latency_ms = int((time.perf_counter() - started) * 1000)
            return self._result(task, message, schema, latency_ms)

        logger.error("generation: %s anthropic retries exhausted: %s", task, last_error)
        raise ServiceError(f"{task}: Anthropic unavailable after retries: {last_error}", retryable=True) from last_error

    @staticmethod
    def _result(task: str, message: Any, schema: dict[str, Any] | None, latency_ms: int) -> GenerationResult:
        text = ""
        data: dict[str, Any] | None = None
        for block in getattr(message, "content", None) or []:
            block_type = getattr(block, "type", None)
            if block_type == "text":
                text += block.text
            elif block_type == "tool_use" and isinstance(block.input, dict):
                data = block.input

        usage: dict[str, int] = {}
        if getattr(message, "usage", None) is not None:
            usage = {
                "input_tokens": message.usage.input_tokens,
                "output_tokens": message.usage.output_tokens,
            }

        if data is None and not text.strip():
            raise ServiceError(f"{task}: empty response")
        if schema is not None and data is None:
            data = parse_json_object(text)
        logger.debug("generation: %s answered in %dms", task, latency_ms)
        return GenerationResult(text=text, data=data, usage=usage, latency_ms=latency_ms)


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------


class OpenAIGenerationClient(GenerationClient):
    """Calls OpenAI chat completions; structured output uses JSON mode."""

    provider = "openai"

    def __init__(self, api_key: str, max_retries: int | None = None):
        self.client = openai.AsyncOpenAI(api_key=api_key)
        self.max_retries = settings.GENERATION_MAX_RETRIES if max_retries is None else max_retries

    async def generate(
        self,
        task: str,
        prompt: str,
        *,
        schema: dict[str, Any] | None = None,
        system: str | None = None,
        model: str | None = None,
        fast: bool = False,
        max_tokens: int = 4096,
    ) -> GenerationResult:
        if schema is not None:
            prompt = (
                f"{prompt}\n\nRespond with a single JSON object matching this JSON schema:\n"
                f"{json.dumps(schema, indent=2)}"
            )
        messages = [{"role": "system", "content": system}] if system else []
        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, Any] = {
            "model": model if model and not model.startswith("claude") else settings.OPENAI_MODEL,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if schema is not None:
            kwargs["response_format"] = {"type": "json_object"}

        last_error: Exception | None = None
        for attempt in range(self.max_retries + 1):
            started = time.perf_counter()
            try:
                response = await self.client.chat.completions.create(**kwargs)
            except _RETRYABLE_OPENAI as e:
                last_error = e
                if attempt < self.max_retries:
                    wait_time = 2**attempt
                    logger.warning(
                        "generation: %s openai error (attempt %d), retrying in %ds: %s",
                        task,
                        attempt + 1,
                        wait_time,
                        e,
                    )
                    await asyncio.sleep(wait_time)
                continue
            except openai.APIError as e:
                raise ServiceError(f"{task}: OpenAI API error: {e}") from e

            latency_ms = int((time.perf_counter() - started) * 1000)
            text = (response.choices[0].message.content or "") if response.choices else ""
            if not text.strip():
                raise ServiceError(f"{task}: empty response")
            usage: dict[str, int] = {}
            if response.usage is not None:
                usage = {
                    "input_tokens": response.usage.prompt_tokens,
                    "output_tokens": response.usage.completion_tokens,
                }
            data = parse_json_object(text) if schema is not None else None
            return GenerationResult(text=text, data=data, usage=usage, latency_ms=latency_ms)

        logger.error("generation: %s openai retries exhausted: %s", task, last_error)
        raise ServiceError(f"{task}: OpenAI unavailable after retries: {last_error}", retryable=True) from last_error
