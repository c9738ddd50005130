"""Tests for the Sandbox Renderer HTTP client."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from backend.services.sandbox_client import NOT_CONFIGURED, SandboxClient, is_transient
from engine.preview.types import RenderRequest, RenderResult

REQUEST = RenderRequest(artifact="(function(){})()", component_name="Card", props={"title": "Inbox"}, timeout_ms=1000)


def client_for(handler, **kwargs) -> SandboxClient:
    return SandboxClient(
        base_url="http://sandbox.test/",
        secret="s3cret",
        buffer_ms=kwargs.pop("buffer_ms", 500),
        max_retries=kwargs.pop("max_retries", 1),
        backoff_s=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio(loop_scope="session")
class TestRender:
    async def test_success_payload_and_headers(self):
        """The worker receives the wire payload and the bearer secret."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"success": True, "html": "<div>ok</div>", "consoleLog": ["a", "b"], "renderTime": 321},
            )

        result = await client_for(handler).render(REQUEST)

        assert result.success
        assert result.html == "<div>ok</div>"
        assert result.console_log == "a\nb"
        assert result.elapsed_ms == 321
        assert seen["url"] == "http://sandbox.test/render"
        assert seen["auth"] == "Bearer s3cret"
        assert seen["body"] == {
            "bundledJs": "(function(){})()",
            "componentName": "Card",
            "props": {"title": "Inbox"},
            "timeout": 1000,
        }

    async def test_component_error_is_not_transient(self):
        def handler(request):
            return httpx.Response(200, json={"success": False, "error": "TypeError: x is undefined"})

        result = await client_for(handler).render(REQUEST)

        assert not result.success
        assert result.error == "TypeError: x is undefined"
        assert not is_transient(result)

    async def test_success_without_html_is_failure(self):
        def handler(request):
            return httpx.Response(200, json={"success": True, "html": ""})

        result = await client_for(handler).render(REQUEST)

        assert not result.success
        assert result.error == "Component rendered nothing"

    async def test_gateway_error_is_transient(self):
        def handler(request):
            return httpx.Response(503, text="overloaded")

        result = await client_for(handler).render(REQUEST)

        assert result.error.startswith("Sandbox HTTP 503")
        assert is_transient(result)

    async def test_malformed_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>")

        result = await client_for(handler).render(REQUEST)

        assert result.error == "Malformed sandbox response"

    async def test_connection_refused(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        result = await client_for(handler).render(REQUEST)

        assert result.error.startswith("Connection refused")
        assert is_transient(result)

    async def test_deadline_is_timeout_plus_buffer(self):
        """A worker slower than timeout + buffer yields a render timeout."""

        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json={"success": True, "html": "<p>late</p>"})

        request = RenderRequest(artifact="x", component_name="Card", props={}, timeout_ms=10)
        result = await client_for(handler, buffer_ms=10).render(request)

        assert result.error.startswith("Render timeout after")
        assert is_transient(result)

    async def test_not_configured(self):
        client = SandboxClient(base_url="")
        result = await client.render(REQUEST)
        assert not client.is_configured
        assert result.error == NOT_CONFIGURED


@pytest.mark.asyncio(loop_scope="session")
class TestRetry:
    async def test_transient_failure_is_retried(self):
        calls = []

        def handler(request):
            calls.append(1)
            if len(calls) == 1:
                return httpx.Response(502, text="bad gateway")
            return httpx.Response(200, json={"success": True, "html": "<p>ok</p>"})

        result = await client_for(handler, max_retries=2).render_with_retry(REQUEST)

        assert result.success
        assert len(calls) == 2

    async def test_component_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(200, json={"success": False, "error": "ReferenceError: foo is not defined"})

        result = await client_for(handler, max_retries=3).render_with_retry(REQUEST)

        assert not result.success
        assert len(calls) == 1

    async def test_linear_backoff(self):
        """Waits grow by backoff × attempt."""

        def handler(request):
            return httpx.Response(504, text="timeout")

        client = client_for(handler, max_retries=2)
        client.backoff_s = 1.0
        with patch("backend.services.sandbox_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await client.render_with_retry(REQUEST)

        assert not result.success
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    async def test_not_configured_is_never_retried(self):
        client = SandboxClient(base_url="", max_retries=3)
        with patch("backend.services.sandbox_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await client.render_with_retry(REQUEST)
        assert result.error == NOT_CONFIGURED
        sleep.assert_not_awaited()


@pytest.mark.asyncio(loop_scope="session")
class TestHealth:
    async def test_healthy(self):
        def handler(request):
            assert request.url.path == "/health"
            return httpx.Response(200, json={"status": "ok"})

        assert await client_for(handler).health() is True

    async def test_unhealthy_status(self):
        def handler(request):
            return httpx.Response(500, json={"status": "down"})

        assert await client_for(handler).health() is False

    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert await client_for(handler).health() is False


@pytest.mark.parametrize(
    ("error", "transient"),
    [
        ("Render timeout after 20000ms", True),
        ("Connection refused: [Errno 111]", True),
        ("Sandbox unavailable: boom", True),
        ("Sandbox HTTP 503: overloaded", True),
        ("Sandbox HTTP 500: crash", False),
        ("TypeError: timeout is not a function", False),
        ("Error: request timed out", False),
    ],
)
def test_is_transient(error, transient):
    """Only errors that start with a transport failure are transient."""
    assert is_transient(RenderResult(success=False, error=error)) is transient
