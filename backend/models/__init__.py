"""
Pydantic models for the preview API.

All HTTP data shapes defined here. No imports from routes or services.
"""

from backend.models.preview import (
    HealthResponse,
    InteractiveElementResponse,
    PreviewRequest,
    PreviewResponse,
    PropSchemaItem,
    RepoInfo,
)

__all__ = [
    "HealthResponse",
    "InteractiveElementResponse",
    "PreviewRequest",
    "PreviewResponse",
    "PropSchemaItem",
    "RepoInfo",
]
