"""
Component preview configuration — all environment variables in one place.

Read from environment at import time. Never hardcode secrets.
"""

from __future__ import annotations

import os


def _bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Settings:
    """Application settings from environment variables."""

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # Generation service
    GENERATION_PROVIDER: str = os.environ.get("GENERATION_PROVIDER", "anthropic")
    ANTHROPIC_API_KEY: str = os.environ.get("ANTHROPIC_API_KEY", "")
    OPENAI_API_KEY: str = os.environ.get("OPENAI_API_KEY", "")

    # Rewrite, recovery and fallback use the higher tier; verifier and demo data the fast one
    GENERATION_MODEL: str = os.environ.get("GENERATION_MODEL", "claude-sonnet-4-5-20250929")
    FAST_MODEL: str = os.environ.get("FAST_MODEL", "claude-3-5-haiku-20241022")
    OPENAI_MODEL: str = os.environ.get("OPENAI_MODEL", "gpt-4o")
    GENERATION_MAX_RETRIES: int = int(os.environ.get("GENERATION_MAX_RETRIES", "2"))
    USE_MOCK_LLM: bool = _bool("USE_MOCK_LLM")

    # Sandbox Renderer worker (empty URL = not configured)
    SANDBOX_URL: str = os.environ.get("SANDBOX_URL", "").rstrip("/")
    SANDBOX_SECRET: str = os.environ.get("SANDBOX_SECRET", "")
    SANDBOX_TIMEOUT_MS: int = int(os.environ.get("SANDBOX_TIMEOUT_MS", "15000"))
    SANDBOX_LATENCY_BUFFER_MS: int = int(os.environ.get("SANDBOX_LATENCY_BUFFER_MS", "5000"))
    SANDBOX_MAX_RETRIES: int = int(os.environ.get("SANDBOX_MAX_RETRIES", "1"))

    # Pipeline
    RECOVERY_MAX_ATTEMPTS: int = int(os.environ.get("RECOVERY_MAX_ATTEMPTS", "4"))
    ANALYSIS_CONCURRENCY: int = int(os.environ.get("ANALYSIS_CONCURRENCY", "3"))
    ANALYSIS_BATCH_PAUSE_S: float = float(os.environ.get("ANALYSIS_BATCH_PAUSE_S", "0.2"))
    PREVIEW_PAUSE_S: float = float(os.environ.get("PREVIEW_PAUSE_S", "0.15"))
    STYLE_NORMALIZER_MODE: str = os.environ.get("STYLE_NORMALIZER_MODE", "table")

    # Compiler
    ESBUILD_BINARY: str = os.environ.get("ESBUILD_BINARY", "esbuild")
    COMPILE_TIMEOUT_S: float = float(os.environ.get("COMPILE_TIMEOUT_S", "10"))

    @property
    def generation_credential(self) -> str:
        if self.GENERATION_PROVIDER == "openai":
            return self.OPENAI_API_KEY
        return self.ANTHROPIC_API_KEY

    @property
    def sandbox_configured(self) -> bool:
        return bool(self.SANDBOX_URL)


# Singleton instance
settings = Settings()

# Validate required settings (skip in test mode)
_testing = os.environ.get("TESTING", "").lower() == "true"

if not _testing and settings.ENVIRONMENT == "production":
    if settings.GENERATION_PROVIDER not in ("anthropic", "openai"):
        raise RuntimeError(f"GENERATION_PROVIDER must be 'anthropic' or 'openai', got {settings.GENERATION_PROVIDER!r}")
    if not settings.USE_MOCK_LLM and not settings.generation_credential:
        raise RuntimeError(
            f"{settings.GENERATION_PROVIDER.upper()}_API_KEY environment variable is required in production"
        )
