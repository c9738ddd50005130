"""
HTTP client for the Sandbox Renderer worker.

Worker contract:
    GET  {SANDBOX_URL}/health  → {"status": "ok"}
    POST {SANDBOX_URL}/render  ← {bundledJs, componentName, props, timeout}
                               → {success, html?, error?, consoleLog?, renderTime?}

An empty SANDBOX_URL means "not configured"; the pipeline skips the tier.
Each render is cancelled at timeout + latency buffer. Only transient
failures are retried, with linear backoff.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any

import httpx

from backend.config import settings
from engine.preview.types import RenderRequest, RenderResult

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "sandbox unavailable: not configured"

_TRANSIENT = re.compile(
    r"^\s*(?:render timeout|timeout|timed out|connection refused|econnrefused|sandbox unavailable|unavailable|"
    r"service unavailable|sandbox HTTP 50[234]\b)",
    re.IGNORECASE,
)


def is_transient(result: RenderResult) -> bool:
    """Transport-level failures: timeouts, refused connections, gateway errors."""
    return not result.success and bool(result.error) and bool(_TRANSIENT.search(result.error or ""))


def _console_text(value: Any) -> str:
    if isinstance(value, list):
        return "\n".join(str(line) for line in value)
    return str(value or "")


class SandboxClient:
    """Talks to the Sandbox Renderer worker over HTTP."""

    def __init__(
        self,
        base_url: str | None = None,
        secret: str | None = None,
        timeout_ms: int | None = None,
        buffer_ms: int | None = None,
        max_retries: int | None = None,
        backoff_s: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (settings.SANDBOX_URL if base_url is None else base_url).rstrip("/")
        self.secret = settings.SANDBOX_SECRET if secret is None else secret
        self.timeout_ms = timeout_ms or settings.SANDBOX_TIMEOUT_MS
        self.buffer_ms = settings.SANDBOX_LATENCY_BUFFER_MS if buffer_ms is None else buffer_ms
        self.max_retries = settings.SANDBOX_MAX_RETRIES if max_retries is None else max_retries
        self.backoff_s = backoff_s
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.secret}"} if self.secret else {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=None, transport=self._transport)

    async def health(self) -> bool:
        """True when the worker is configured and answers its health check."""
        if not self.is_configured:
            return False
        try:
            async with self._client() as client:
                response = await asyncio.wait_for(
                    client.get(f"{self.base_url}/health", headers=self._headers()),
                    timeout=5.0,
                )
            return response.status_code == 200 and response.json().get("status") == "ok"
        except (httpx.HTTPError, TimeoutError, ValueError) as e:
            logger.warning("sandbox: health check failed: %s", e)
            return False

    async def render(self, request: RenderRequest) -> RenderResult:
        """
        One render attempt.

        Never raises for transport problems; they come back as a failed
        RenderResult whose error text classifies as transient.
        """
        if not self.is_configured:
            return RenderResult(success=False, error=NOT_CONFIGURED)

        deadline_s = (request.timeout_ms + self.buffer_ms) / 1000
        started = time.perf_counter()

        def elapsed() -> int:
            return int((time.perf_counter() - started) * 1000)

        try:
            async with self._client() as client:
                response = await asyncio.wait_for(
                    client.post(f"{self.base_url}/render", json=request.to_payload(), headers=self._headers()),
                    timeout=deadline_s,
                )
        except TimeoutError:
            return RenderResult(success=False, error=f"Render timeout after {elapsed()}ms", elapsed_ms=elapsed())
        except httpx.ConnectError as e:
            return RenderResult(success=False, error=f"Connection refused: {e}", elapsed_ms=elapsed())
        except httpx.TimeoutException as e:
            return RenderResult(success=False, error=f"Render timeout: {e}", elapsed_ms=elapsed())
        except httpx.HTTPError as e:
            return RenderResult(success=False, error=f"Sandbox unavailable: {e}", elapsed_ms=elapsed())

        if response.status_code >= 500:
            return RenderResult(
                success=False,
                error=f"Sandbox HTTP {response.status_code}: {response.text[:200]}",
                elapsed_ms=elapsed(),
            )
        try:
            body = response.json()
        except ValueError:
            return RenderResult(success=False, error="Malformed sandbox response", elapsed_ms=elapsed())
        if not isinstance(body, dict):
            return RenderResult(success=False, error="Malformed sandbox response", elapsed_ms=elapsed())

        html = body.get("html") or None
        success = bool(body.get("success")) and bool(html)
        error = body.get("error")
        if not success and not error:
            error = "Component rendered nothing" if body.get("success") else f"Sandbox HTTP {response.status_code}"
        render_time = body.get("renderTime")
        return RenderResult(
            success=success,
            html=html if success else None,
            error=None if success else str(error),
            console_log=_console_text(body.get("consoleLog")),
            elapsed_ms=int(render_time) if isinstance(render_time, (int, float)) else elapsed(),
        )

    async def render_with_retry(self, request: RenderRequest) -> RenderResult:
        """Render, retrying transient failures only (backoff 1s × attempt)."""
        result = await self.render(request)
        attempt = 0
        while is_transient(result) and attempt < self.max_retries and result.error != NOT_CONFIGURED:
            attempt += 1
            wait_time = self.backoff_s * attempt
            logger.warning(
                "sandbox: %s transient failure (%s), retry %d in %.1fs",
                request.component_name,
                result.error,
                attempt,
                wait_time,
            )
            await asyncio.sleep(wait_time)
            result = await self.render(request)
        return result
