"""
Scripted generation client for deterministic tests and offline runs.

Answers come from, in order:
1. a per-task queue given to the constructor (or added with `queue()`)
2. a golden file `backend/golden/{task}.json` (structured) or `{task}.txt` (text)

A queued item may be a dict (structured answer), a str (text answer), a
callable taking the prompt and returning either, or an exception instance
to raise. With nothing scripted for a task the client raises ServiceError,
which every caller already treats as its documented failure default.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict, deque
from collections.abc import Callable
from pathlib import Path
from typing import Any

from backend.services.generation import GenerationClient, GenerationResult, parse_json_object
from engine.preview.errors import ServiceError

logger = logging.getLogger(__name__)

GOLDEN_DIR = Path(__file__).parent.parent / "golden"

ScriptedAnswer = dict | str | BaseException | Callable[[str], Any]


class ScriptedGenerationClient(GenerationClient):
    """Plays queued or golden responses per task."""

    provider = "scripted"

    def __init__(
        self,
        responses: dict[str, list[ScriptedAnswer] | ScriptedAnswer] | None = None,
        golden_dir: Path | None = None,
    ):
        self.golden_dir = golden_dir
        self._queues: dict[str, deque[ScriptedAnswer]] = defaultdict(deque)
        self.calls: list[tuple[str, str]] = []
        for task, answers in (responses or {}).items():
            self.queue(task, *(answers if isinstance(answers, list) else [answers]))

    def queue(self, task: str, *answers: ScriptedAnswer) -> None:
        self._queues[task].extend(answers)

    def calls_for(self, task: str) -> list[str]:
        """Prompts sent for one task, in order."""
        return [prompt for t, prompt in self.calls if t == task]

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
        self.calls.append((task, prompt))
        answer = self._next(task)
        if callable(answer) and not isinstance(answer, BaseException):
            answer = answer(prompt)
        if isinstance(answer, BaseException):
            raise answer

        if isinstance(answer, dict):
            return GenerationResult(text=json.dumps(answer), data=answer)
        text = str(answer)
        if not text.strip():
            raise ServiceError(f"{task}: empty response")
        if schema is not None:
            return GenerationResult(text=text, data=parse_json_object(text))
        return GenerationResult(text=text)

    def _next(self, task: str) -> ScriptedAnswer:
        queue = self._queues.get(task)
        if queue:
            return queue.popleft()
        golden = self._golden(task)
        if golden is not None:
            return golden
        logger.debug("scripted: no answer for %s", task)
        raise ServiceError(f"{task}: no scripted response")

    def _golden(self, task: str) -> ScriptedAnswer | None:
        if self.golden_dir is None:
            return None
        structured = self.golden_dir / f"{task}.json"
        if structured.exists():
            return json.loads(structured.read_text())
        text = self.golden_dir / f"{task}.txt"
        if text.exists():
            return text.read_text()
        return None
