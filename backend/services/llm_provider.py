"""
Generation client factory.

Returns ScriptedGenerationClient when USE_MOCK_LLM=true (tests / offline runs)
or a real client for the configured provider when its credential is available.
"""

from __future__ import annotations

from backend.config import settings
from backend.services.generation import AnthropicGenerationClient, GenerationClient, OpenAIGenerationClient
from backend.services.scripted_client import GOLDEN_DIR, ScriptedGenerationClient


def get_generation_client() -> GenerationClient:
    """
    Return the configured generation client.

    - USE_MOCK_LLM=true                         → ScriptedGenerationClient (golden answers, no API calls)
    - GENERATION_PROVIDER=openai + OPENAI key   → OpenAIGenerationClient
    - ANTHROPIC_API_KEY available               → AnthropicGenerationClient
    - default                                   → ScriptedGenerationClient (fallback)
    """
    if settings.USE_MOCK_LLM:
        return ScriptedGenerationClient(golden_dir=GOLDEN_DIR)

    if settings.GENERATION_PROVIDER == "openai" and settings.OPENAI_API_KEY:
        return OpenAIGenerationClient(api_key=settings.OPENAI_API_KEY)

    if settings.ANTHROPIC_API_KEY:
        return AnthropicGenerationClient(api_key=settings.ANTHROPIC_API_KEY)

    # Fallback to scripted answers if no credential configured
    return ScriptedGenerationClient(golden_dir=GOLDEN_DIR)
