"""
Recovery Loop.

Renders a bundle, and after each failure asks the generation service for a
RecoveryFix, applies it, and renders again:

    attempt 1: render(demo props)              → fail → fix₁
    attempt 2: render(props + fix₁)            → fail → fix₂
    ...
    attempt N: render(props + fix₁..fixₙ₋₁)    → stop

Exit on success, on an `unfixable` fix, or at the attempt ceiling N. The
loop never renders more than N times. Prop additions are last-write-wins
per key; setup code accumulates by concatenation and is wrapped once in
the artifact so its own failure cannot abort the render.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from backend.config import settings
from backend.services.demo_data import nullify_function_strings
from backend.services.generation import GenerationClient
from backend.services.prompt_builder import build_prompt, to_json
from backend.services.sandbox_client import SandboxClient, is_transient
from engine.preview.bundler import sanitize_setup_code
from engine.preview.errors import ServiceError
from engine.preview.types import BundleArtifact, PropSpec, RecoveryFix, RenderRequest, RenderResult

logger = logging.getLogger(__name__)

RECOVERY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "props_to_add": {"type": "object"},
        "props_to_remove": {"type": "array", "items": {"type": "string"}},
        "setup_code": {"type": "string"},
        "reason": {"type": "string"},
        "unfixable": {"type": "boolean"},
    },
    "required": ["reason", "unfixable"],
}

# Installed when an empty fix leaves no prop to fill.
SHIM_SETUP = """\
if (!window.matchMedia) {
  window.matchMedia = function (q) {
    return {
      matches: false, media: q, onchange: null,
      addListener: function () {}, removeListener: function () {},
      addEventListener: function () {}, removeEventListener: function () {},
      dispatchEvent: function () { return false; }
    };
  };
}
["ResizeObserver", "IntersectionObserver", "MutationObserver"].forEach(function (name) {
  if (!window[name]) {
    window[name] = function () {
      return {
        observe: function () {}, unobserve: function () {}, disconnect: function () {},
        takeRecords: function () { return []; }
      };
    };
  }
});"""

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|[_\-]+")


def humanize(name: str) -> str:
    """`userName` → `User name`."""
    words = [w for w in _WORD_BOUNDARY.split(name) if w]
    if not words:
        return name
    text = " ".join(w.lower() for w in words)
    return text[0].upper() + text[1:]


def placeholder_value(prop: PropSpec) -> Any:
    """A type-shaped stand-in for a missing prop."""
    kind = prop.kind
    if kind == "number":
        return 42
    if kind == "boolean":
        return True
    if kind == "array":
        if prop.type.startswith(("string", "Array<string")):
            return [f"{humanize(prop.name)} 1", f"{humanize(prop.name)} 2"]
        return [
            {"id": 1, "name": "First", "label": "First", "title": "First"},
            {"id": 2, "name": "Second", "label": "Second", "title": "Second"},
        ]
    if kind == "object":
        return {}
    if kind == "union":
        first = prop.type.split("|")[0].strip()
        return first.strip("'\"")
    if kind == "function":
        return None
    return humanize(prop.name)


def default_fix(schema: list[PropSpec], current: dict[str, Any]) -> RecoveryFix:
    """
    Minimal action for a non-committal answer.

    Fill schema props missing from the current map; when nothing is
    missing, install inert browser-API shims.
    """
    missing = {p.name: placeholder_value(p) for p in schema if p.name not in current and p.kind != "function"}
    if missing:
        return RecoveryFix(props_to_add=missing, reason=f"default: filled {', '.join(sorted(missing))}")
    return RecoveryFix(setup_code=SHIM_SETUP, reason="default: installed browser API shims")


def parse_fix(data: dict[str, Any] | None) -> RecoveryFix:
    """Coerce a service answer into a RecoveryFix; odd shapes become empty fields."""
    data = data or {}
    add = data.get("props_to_add")
    remove = data.get("props_to_remove")
    setup = data.get("setup_code")
    return RecoveryFix(
        props_to_add=nullify_function_strings(add) if isinstance(add, dict) else {},
        props_to_remove=[str(n) for n in remove] if isinstance(remove, list) else [],
        setup_code=setup if isinstance(setup, str) else "",
        reason=str(data.get("reason") or ""),
        unfixable=data.get("unfixable") is True,
    )


@dataclass
class RecoveryState:
    """Mutable state of one job's loop."""

    props: dict[str, Any]
    setup_code: str = ""
    attempts: int = 0
    trail: list[RenderResult] = field(default_factory=list)
    fixes: list[RecoveryFix] = field(default_factory=list)

    def apply(self, fix: RecoveryFix) -> None:
        for name in fix.props_to_remove:
            self.props.pop(name, None)
        self.props.update(fix.props_to_add)
        chunk = sanitize_setup_code(fix.setup_code)
        if chunk:
            self.setup_code = f"{self.setup_code}\n{chunk}" if self.setup_code else chunk


@dataclass
class RecoveryOutcome:
    state: RecoveryState
    unfixable: bool = False
    reason: str = ""

    @property
    def result(self) -> RenderResult | None:
        return self.state.trail[-1] if self.state.trail else None

    @property
    def success(self) -> bool:
        return self.result is not None and self.result.success

    @property
    def html(self) -> str | None:
        return self.result.html if self.success and self.result else None


class RecoveryLoop:
    """Bounded, strictly sequential render → fix → re-render loop."""

    def __init__(self, client: GenerationClient, sandbox: SandboxClient, max_attempts: int | None = None):
        self.client = client
        self.sandbox = sandbox
        self.max_attempts = max(1, max_attempts or settings.RECOVERY_MAX_ATTEMPTS)

    async def run(
        self,
        artifact: BundleArtifact,
        source: str,
        props: dict[str, Any],
        schema: list[PropSpec] | None = None,
        timeout_ms: int | None = None,
    ) -> RecoveryOutcome:
        name = artifact.component_name
        state = RecoveryState(props=dict(props))
        timeout_ms = timeout_ms or self.sandbox.timeout_ms

        while state.attempts < self.max_attempts:
            request = RenderRequest(
                artifact=artifact.code_with(state.setup_code),
                component_name=name,
                props=dict(state.props),
                timeout_ms=timeout_ms,
            )
            result = await self.sandbox.render_with_retry(request)
            state.attempts += 1
            state.trail.append(result)

            if result.success:
                logger.info("recovery: %s rendered on attempt %d", name, state.attempts)
                return RecoveryOutcome(state)
            if is_transient(result):
                logger.warning("recovery: %s sandbox unavailable, leaving tier: %s", name, result.error)
                return RecoveryOutcome(state, reason=result.error or "sandbox unavailable")
            if state.attempts >= self.max_attempts:
                break

            fix = await self.propose_fix(name, source, result, state)
            state.fixes.append(fix)
            if fix.unfixable:
                logger.info("recovery: %s unfixable: %s", name, fix.reason)
                return RecoveryOutcome(state, unfixable=True, reason=fix.reason)
            if fix.is_empty:
                fix = default_fix(schema or [], state.props)
                state.fixes[-1] = fix
            logger.info(
                "recovery: %s attempt %d failed (%s); applying %s", name, state.attempts, result.error, fix.reason
            )
            state.apply(fix)

        logger.warning("recovery: %s exhausted %d attempts", name, state.attempts)
        return RecoveryOutcome(state, reason=f"attempt ceiling {self.max_attempts} reached")

    async def propose_fix(self, name: str, source: str, result: RenderResult, state: RecoveryState) -> RecoveryFix:
        """Ask for a fix; a service failure counts as an empty fix."""
        prompt = build_prompt(
            "recovery",
            {
                "component_name": name,
                "attempt": state.attempts,
                "max_attempts": self.max_attempts,
                "error": result.error or "unknown error",
                "console_log": result.console_log[-4000:],
                "props_json": to_json(state.props),
                "source": source,
            },
        )
        try:
            answer = await self.client.generate("recovery", prompt, schema=RECOVERY_SCHEMA)
        except ServiceError as e:
            logger.warning("recovery: %s fix service failed: %s", name, e)
            return RecoveryFix.empty(f"service failed: {e}")
        return parse_fix(answer.data)
