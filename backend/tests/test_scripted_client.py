"""Tests for the scripted generation client and the client factory."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from backend.services.llm_provider import get_generation_client
from backend.services.scripted_client import GOLDEN_DIR, ScriptedGenerationClient
from engine.preview.errors import ServiceError


@pytest.mark.asyncio(loop_scope="session")
class TestScriptedClient:
    async def test_queue_is_consumed_in_order(self):
        client = ScriptedGenerationClient({"verify": [{"is_valid": True}, {"is_valid": False}]})

        first = await client.generate("verify", "one", schema={})
        second = await client.generate("verify", "two", schema={})

        assert first.data == {"is_valid": True}
        assert second.data == {"is_valid": False}
        assert client.calls_for("verify") == ["one", "two"]

    async def test_callable_sees_prompt(self):
        client = ScriptedGenerationClient()
        client.queue("fallback", lambda prompt: f"<p>{prompt}</p>")

        result = await client.generate("fallback", "Card")

        assert result.text == "<p>Card</p>"

    async def test_text_parsed_when_schema_requested(self):
        client = ScriptedGenerationClient({"verify": '{"is_valid": true}'})
        result = await client.generate("verify", "x", schema={})
        assert result.data == {"is_valid": True}

    async def test_exception_is_raised(self):
        client = ScriptedGenerationClient({"style": ServiceError("down")})
        with pytest.raises(ServiceError, match="down"):
            await client.generate("style", "x")

    async def test_unscripted_task_raises(self):
        client = ScriptedGenerationClient()
        with pytest.raises(ServiceError, match="no scripted response"):
            await client.generate("demo_props", "x")

    async def test_golden_fallback(self):
        """Golden answers keep offline runs moving: the verifier accepts, recovery gives up."""
        client = ScriptedGenerationClient(golden_dir=GOLDEN_DIR)

        verdict = await client.generate("verify", "x", schema={})
        fix = await client.generate("recovery", "x", schema={})

        assert verdict.data["is_valid"] is True
        assert fix.data["unfixable"] is True


class TestFactory:
    def test_mock_mode(self):
        with patch("backend.services.llm_provider.settings") as mock_settings:
            mock_settings.USE_MOCK_LLM = True
            client = get_generation_client()
        assert isinstance(client, ScriptedGenerationClient)
        assert client.golden_dir == GOLDEN_DIR

    def test_openai_provider(self):
        with patch("backend.services.llm_provider.settings") as mock_settings:
            mock_settings.USE_MOCK_LLM = False
            mock_settings.GENERATION_PROVIDER = "openai"
            mock_settings.OPENAI_API_KEY = "sk-test"
            client = get_generation_client()
        assert client.provider == "openai"

    def test_anthropic_provider(self):
        with patch("backend.services.llm_provider.settings") as mock_settings:
            mock_settings.USE_MOCK_LLM = False
            mock_settings.GENERATION_PROVIDER = "anthropic"
            mock_settings.ANTHROPIC_API_KEY = "sk-ant-test"
            client = get_generation_client()
        assert client.provider == "anthropic"

    def test_no_credential_falls_back_to_scripted(self):
        with patch("backend.services.llm_provider.settings") as mock_settings:
            mock_settings.USE_MOCK_LLM = False
            mock_settings.GENERATION_PROVIDER = "anthropic"
            mock_settings.ANTHROPIC_API_KEY = ""
            client = get_generation_client()
        assert client.provider == "scripted"
