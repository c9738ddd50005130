"""Preview request / response models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from engine.preview.types import ComponentRecord, InteractiveElement, PreviewOutcome, PropSpec


class PropSchemaItem(BaseModel):
    """One declared prop, as the discovery stage reports it."""

    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1)
    type: str = "unknown"
    required: bool = False
    default: Any = None
    description: str | None = None

    def to_spec(self) -> PropSpec:
        return PropSpec(
            name=self.name,
            type=self.type,
            required=self.required,
            default=self.default,
            description=self.description,
        )


class RepoInfo(BaseModel):
    model_config = {"extra": "forbid"}

    owner: str = ""
    name: str = ""
    description: str | None = None


class PreviewRequest(BaseModel):
    """What the client sends to POST /api/previews."""

    model_config = {"extra": "forbid"}

    source_map: dict[str, str] = Field(min_length=1)
    file_path: str = Field(min_length=1)
    component_name: str | None = None
    props_schema: list[PropSchemaItem] | None = None
    demo_props: dict[str, Any] | None = None  # skips synthesis when given
    repo: RepoInfo | None = None


class InteractiveElementResponse(BaseModel):
    tag: str
    selector: str
    label: str
    action: Literal["click", "type", "select", "check", "hover", "focus"]
    input_type: str | None = None
    name: str | None = None
    placeholder: str | None = None
    role: str | None = None
    test_id: str | None = None

    @classmethod
    def from_element(cls, element: InteractiveElement) -> InteractiveElementResponse:
        return cls(**element.to_dict())


class PreviewResponse(BaseModel):
    """What the preview endpoint returns."""

    file_path: str
    component_name: str
    html: str | None
    tier: Literal["sandbox", "static", "generated"] | None
    verified: bool
    attempts: int
    interactive_elements: list[InteractiveElementResponse]
    demo_props: dict[str, Any] | None = None
    analysis_error: str | None = None
    error: str | None = None

    @classmethod
    def from_outcome(cls, record: ComponentRecord, outcome: PreviewOutcome) -> PreviewResponse:
        return cls(
            file_path=record.file_path,
            component_name=record.name,
            html=outcome.html,
            tier=outcome.tier,
            verified=outcome.verified,
            attempts=outcome.attempts,
            interactive_elements=[InteractiveElementResponse.from_element(e) for e in outcome.interactive_elements],
            demo_props=record.demo_props.props if record.demo_props else None,
            analysis_error=record.analysis_error,
            error=outcome.error,
        )


class HealthResponse(BaseModel):
    status: str
    sandbox_configured: bool
    sandbox_healthy: bool
    generation_provider: str
