"""Preview routes — generate one component preview."""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, HTTPException

from backend.models.preview import PreviewRequest, PreviewResponse
from backend.services.orchestrator import PreviewPipeline
from engine.preview.resolver import normalize_path
from engine.preview.types import ComponentRecord, DemoProps, RepoContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/previews", tags=["previews"])

_pipeline: PreviewPipeline | None = None


def get_pipeline() -> PreviewPipeline:
    """Shared pipeline; built on first use so configuration is read at runtime."""
    global _pipeline
    if _pipeline is None:
        _pipeline = PreviewPipeline()
    return _pipeline


def component_name_from_path(file_path: str) -> str:
    """`components/date-picker.tsx` → `DatePicker`; index files use their directory."""
    path = PurePosixPath(file_path)
    stem = path.parent.name if path.stem == "index" and path.parent.name else path.stem
    words = [w for w in re.split(r"[^A-Za-z0-9]+", stem) if w]
    return "".join(w[:1].upper() + w[1:] for w in words) or "Component"


@router.post("", status_code=200)
async def create_preview(
    req: PreviewRequest,
    pipeline: PreviewPipeline = Depends(get_pipeline),
) -> PreviewResponse:
    """
    Generate a preview for one component.

    The source map is read-only input; the component file must be in it.
    """
    source_map = {normalize_path(path): text for path, text in req.source_map.items()}
    file_path = normalize_path(req.file_path)
    if file_path not in source_map:
        raise HTTPException(
            status_code=422,
            detail=f"{req.file_path} is not in the source map.",
        )

    record = ComponentRecord(
        file_path=file_path,
        name=req.component_name or component_name_from_path(file_path),
        props=[p.to_spec() for p in req.props_schema or []],
    )
    if req.demo_props is not None:
        record.demo_props = DemoProps(props=req.demo_props, confidence="high", source="declared")

    context = RepoContext(**req.repo.model_dump()) if req.repo else None
    outcome = await pipeline.generate_preview(record, source_map[file_path], source_map, context)
    return PreviewResponse.from_outcome(record, outcome)
