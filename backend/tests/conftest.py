"""
Pytest configuration and fixtures for the preview backend tests.

No test talks to a real model or sandbox: generation goes through
ScriptedGenerationClient, rendering through FakeSandbox.
"""

from __future__ import annotations

import os

# Set test environment variables before importing config
os.environ["TESTING"] = "true"
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("USE_MOCK_LLM", "true")
os.environ.setdefault("PREVIEW_PAUSE_S", "0")
os.environ.setdefault("ANALYSIS_BATCH_PAUSE_S", "0")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from backend.main import app  # noqa: E402
from backend.routes import previews as preview_routes  # noqa: E402
from backend.services.orchestrator import PreviewPipeline  # noqa: E402
from backend.services.scripted_client import ScriptedGenerationClient  # noqa: E402
from engine.preview.types import RenderRequest, RenderResult  # noqa: E402

CARD_SOURCE = """\
interface CardProps {
  title: string;
  count?: number;
}

export function Card({ title, count = 0 }: CardProps) {
  return (
    <div className="p-4 rounded-lg bg-white">
      <h3 className="text-lg font-semibold">{title}</h3>
      <span className="text-sm">{count} items</span>
      <button className="px-2">Open</button>
    </div>
  );
}
"""

PROFILE_SOURCE = """\
export async function Profile({ userId }: { userId: string }) {
  const user = await fetchUser(userId);
  return <div>{user.name}</div>;
}
"""

GLOBE_SOURCE = """\
import { Canvas } from "@react-three/fiber";

export function Globe({ label }: { label: string }) {
  return <Canvas><mesh /></Canvas>;
}
"""


class FakeSandbox:
    """
    Stands in for SandboxClient.

    `results` is consumed one per render; when it runs out the last result
    repeats. Every request is kept in `requests`.
    """

    def __init__(self, results: list[RenderResult] | None = None, configured: bool = True, healthy: bool = True):
        self.results = list(results or [])
        self.configured = configured
        self.healthy = healthy
        self.timeout_ms = 15000
        self.requests: list[RenderRequest] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def health(self) -> bool:
        return self.configured and self.healthy

    async def render_with_retry(self, request: RenderRequest) -> RenderResult:
        self.requests.append(request)
        if len(self.results) > 1:
            return self.results.pop(0)
        if self.results:
            return self.results[0]
        return RenderResult(success=False, error="TypeError: nothing scripted")


def fake_compile(path: str, source: str) -> str:
    """Stand-in for esbuild."""
    return f"/* compiled {path} */\nmodule.exports = {{}};"


@pytest.fixture
def scripted() -> ScriptedGenerationClient:
    """Scripted client with no golden fallback: unscripted tasks raise ServiceError."""
    return ScriptedGenerationClient()


@pytest.fixture
def sandbox() -> FakeSandbox:
    return FakeSandbox()


@pytest.fixture
def pipeline(scripted, sandbox) -> PreviewPipeline:
    return PreviewPipeline(client=scripted, sandbox=sandbox, compile_module=fake_compile)


@pytest.fixture
def card_source() -> str:
    return CARD_SOURCE


@pytest.fixture
def profile_source() -> str:
    return PROFILE_SOURCE


@pytest.fixture
def globe_source() -> str:
    return GLOBE_SOURCE


@pytest_asyncio.fixture(loop_scope="session")
async def async_client(pipeline):
    """Async HTTP client against the ASGI app, wired to the test pipeline."""
    app.dependency_overrides[preview_routes.get_pipeline] = lambda: pipeline
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def sandbox_factory():
    """Build a FakeSandbox with scripted results."""
    return FakeSandbox
