"""
Preview pipeline orchestrator.

Tiers, strictly ordered; each runs only when the previous one is unavailable
or fails:

1. sandbox    transform (when flagged) → bundle → render + recovery → verify
2. static     tree-to-markup render of simple source → verify
3. generated  markup written by the generation service from source

Unrenderable components (3D, WebRTC, media capture, sockets) go straight to
tier 3. Accepted markup is style-normalized, then interactive elements are
extracted from it. A render the verifier rejected is remembered; when tier 3
fails too, the best rejected render is used and flagged unverified.

Nothing raises out of `generate_preview` or `analyze_components`. The worst
outcome for a component is `preview_html=None` with the reason recorded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from backend.config import settings
from backend.services.compiler import compile_module as esbuild_compile
from backend.services.content_verifier import ContentVerifier
from backend.services.demo_data import DemoDataSynthesizer, SynthesisJob
from backend.services.fallback_generator import FallbackGenerator
from backend.services.generation import GenerationClient
from backend.services.llm_provider import get_generation_client
from backend.services.recovery import RecoveryLoop
from backend.services.sandbox_client import SandboxClient
from backend.services.style_normalizer import StyleNormalizer
from backend.services.transformer import CodeTransformer
from engine.preview.analyzer import analyze_source, build_links
from engine.preview.bundler import CompileFn, DependencyBundler
from engine.preview.content_checks import check_markup
from engine.preview.errors import BundleError, PreviewError, StaticRenderError, SynthesisError, TransformError
from engine.preview.interactive import extract_interactive_elements
from engine.preview.mock_registry import MockRegistry
from engine.preview.static_render import has_unsupported_constructs, render_static
from engine.preview.transform import choose_branch
from engine.preview.types import (
    BundleArtifact,
    ComponentRecord,
    DemoProps,
    PreviewOutcome,
    PreviewTier,
    RenderResult,
    RepoContext,
    SourceAnalysis,
)

logger = logging.getLogger(__name__)


@dataclass
class _Job:
    """Working state of one preview job."""

    record: ComponentRecord
    source: str
    analysis: SourceAnalysis
    demo: DemoProps
    attempts: int = 0
    trail: list[RenderResult] = field(default_factory=list)
    rejected: list[tuple[PreviewTier, str, str]] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class PreviewPipeline:
    """Runs analysis, demo data and the preview tiers for components of one repository."""

    def __init__(
        self,
        client: GenerationClient | None = None,
        sandbox: SandboxClient | None = None,
        compile_module: CompileFn | None = None,
        registry: MockRegistry | None = None,
        normalizer: StyleNormalizer | None = None,
    ) -> None:
        self.client = client or get_generation_client()
        self.sandbox = sandbox or SandboxClient()
        self.compile_module = compile_module or esbuild_compile
        self.registry = registry
        self.demo_data = DemoDataSynthesizer(self.client)
        self.transformer = CodeTransformer(self.client)
        self.recovery = RecoveryLoop(self.client, self.sandbox)
        self.verifier = ContentVerifier(self.client)
        self.normalizer = normalizer or StyleNormalizer(self.client)
        self.fallback = FallbackGenerator(self.client)
        # The sandbox is a scarce resource; jobs use it one at a time.
        self._sandbox_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------

    async def analyze_components(
        self,
        records: list[ComponentRecord],
        source_map: Mapping[str, str],
        context: RepoContext | None = None,
    ) -> dict[str, PreviewOutcome]:
        """
        Analyze, synthesize demo data and preview many components.

        1. analysis + demo data, demo data in bounded batches
        2. relationship links
        3. previews, sequentially, with a short pause between components

        Returns outcomes keyed by `ComponentRecord.key`.
        """
        for record in records:
            record.begin_pass()

        errors: dict[str, list[str]] = {r.key: [] for r in records}
        for record in records:
            analysis = self._analyze(record, source_map.get(record.file_path, ""))
            if analysis.error:
                errors[record.key].append(f"analysis: {analysis.error}")

        jobs = [SynthesisJob(r, source_map.get(r.file_path, "")) for r in records if r.demo_props is None]
        results = await self.demo_data.synthesize_many(jobs, source_map, context)
        for job, result in zip(jobs, results, strict=True):
            if isinstance(result, DemoProps):
                job.record.write("demo_props", result)
            else:
                errors[job.record.key].append(f"demo data: {result}")

        for record in records:
            if errors[record.key]:
                record.write("analysis_error", "; ".join(errors[record.key]))

        links = build_links(records, source_map)
        for record in records:
            record.write("links", links[record.key])

        outcomes: dict[str, PreviewOutcome] = {}
        for index, record in enumerate(records):
            if index and settings.PREVIEW_PAUSE_S > 0:
                await asyncio.sleep(settings.PREVIEW_PAUSE_S)
            source = source_map.get(record.file_path, "")
            outcomes[record.key] = await self.generate_preview(record, source, source_map, context)
        return outcomes

    # ------------------------------------------------------------------
    # One component
    # ------------------------------------------------------------------

    async def generate_preview(
        self,
        record: ComponentRecord,
        source: str,
        source_map: Mapping[str, str],
        context: RepoContext | None = None,
    ) -> PreviewOutcome:
        """Run the tiers for one component and write its preview fields once."""
        try:
            outcome = await self._generate(record, source, source_map, context)
        except Exception as e:
            logger.exception("preview: %s failed unexpectedly", record.name)
            outcome = PreviewOutcome(error=f"{type(e).__name__}: {e}")

        record.write("preview_html", outcome.html)
        record.write("preview_tier", outcome.tier)
        record.write("preview_verified", outcome.verified)
        record.write("interactive_elements", outcome.interactive_elements)
        if outcome.html:
            logger.info(
                "preview: %s done via %s tier (verified=%s, attempts=%d)",
                record.name,
                outcome.tier,
                outcome.verified,
                outcome.attempts,
            )
        else:
            logger.warning("preview: %s produced no preview: %s", record.name, outcome.error)
        return outcome

    async def _generate(
        self,
        record: ComponentRecord,
        source: str,
        source_map: Mapping[str, str],
        context: RepoContext | None,
    ) -> PreviewOutcome:
        errors: list[str] = []
        analysis = record.analysis
        if analysis is None:
            analysis = self._analyze(record, source)
            if analysis.error:
                errors.append(f"analysis: {analysis.error}")
        # A synthesis that already failed in this pass is not retried.
        if record.demo_props is None and not record.analysis_error:
            try:
                record.write("demo_props", await self.demo_data.synthesize(record, source, source_map, context))
            except SynthesisError as e:
                errors.append(f"demo data: {e}")
        if errors:
            record.write("analysis_error", "; ".join(errors))

        if record.demo_props is None:
            # Soft failure: no demo props means no preview stage for this component.
            logger.warning("preview: %s skipped, no demo props", record.name)
            return PreviewOutcome(error=f"preview skipped: {record.analysis_error or 'no demo props'}")

        job = _Job(record=record, source=source, analysis=analysis, demo=record.demo_props)

        if analysis.is_unrenderable:
            logger.info("preview: %s unrenderable (%s), generating directly", record.name, analysis.unrenderable_reason)
            job.notes.append(f"unrenderable: {analysis.unrenderable_reason}")
        else:
            html = await self._sandbox_tier(job, source_map, context)
            if html is not None:
                return await self._finish(job, html, "sandbox", verified=True)
            html = await self._static_tier(job)
            if html is not None:
                return await self._finish(job, html, "static", verified=True)

        html = await self._generated_tier(job, source_map, context)
        if html is not None:
            return await self._finish(job, html, "generated", verified=True)

        if job.rejected:
            tier, best, reason = job.rejected[0]
            logger.warning("preview: %s using rejected %s render as last resort (%s)", record.name, tier, reason)
            return await self._finish(job, best, tier, verified=False)

        return PreviewOutcome(attempts=job.attempts, trail=job.trail, error="; ".join(job.notes) or "no tier succeeded")

    def _analyze(self, record: ComponentRecord, source: str) -> SourceAnalysis:
        analysis = analyze_source(source, record.name, record.file_path)
        record.write("analysis", analysis)
        if not record.props:
            record.write("props", analysis.props)
        return analysis

    async def _finish(self, job: _Job, html: str, tier: PreviewTier, verified: bool) -> PreviewOutcome:
        normalized = await self.normalizer.normalize(html, job.record.name)
        return PreviewOutcome(
            html=normalized,
            tier=tier,
            verified=verified,
            attempts=job.attempts,
            trail=job.trail,
            interactive_elements=extract_interactive_elements(normalized),
            error=None if verified else "; ".join(job.notes) or None,
        )

    # ------------------------------------------------------------------
    # Tier 1: sandbox
    # ------------------------------------------------------------------

    async def _bundle(
        self, record: ComponentRecord, source_map: Mapping[str, str], entry_source: str
    ) -> BundleArtifact:
        bundler = DependencyBundler(source_map, self.compile_module, registry=self.registry)
        return await asyncio.to_thread(bundler.bundle, record.file_path, record.name, entry_source)

    async def _sandbox_tier(self, job: _Job, source_map: Mapping[str, str], context: RepoContext | None) -> str | None:
        record = job.record
        if not self.sandbox.is_configured:
            job.notes.append("sandbox: not configured")
            logger.info("preview: %s sandbox not configured, skipping tier", record.name)
            return None
        if not await self.sandbox.health():
            job.notes.append("sandbox: unavailable")
            logger.warning("preview: %s sandbox unhealthy, skipping tier", record.name)
            return None

        branch = choose_branch(job.analysis)
        code = job.source
        try:
            if branch == "pure":
                try:
                    artifact = await self._bundle(record, source_map, code)
                except BundleError as e:
                    logger.info("preview: %s direct bundle failed (%s), rewriting", record.name, e)
                    code = await self.transformer.transform(
                        record, job.source, job.analysis, job.demo.props, context, "pure"
                    )
                    artifact = await self._bundle(record, source_map, code)
            else:
                code = await self.transformer.transform(
                    record, job.source, job.analysis, job.demo.props, context, branch
                )
                artifact = await self._bundle(record, source_map, code)
        except (TransformError, BundleError) as e:
            job.notes.append(f"sandbox: {e}")
            logger.warning("preview: %s escalating from sandbox tier: %s", record.name, e)
            return None

        async with self._sandbox_lock:
            outcome = await self.recovery.run(artifact, code, job.demo.props, record.props)
        job.attempts += outcome.state.attempts
        job.trail.extend(outcome.state.trail)
        if not outcome.success:
            job.notes.append(f"sandbox: {outcome.reason or (outcome.result.error if outcome.result else 'failed')}")
            return None

        html = outcome.html or ""
        verdict = await self.verifier.verify(record.name, job.source, html)
        if verdict.is_valid:
            return html
        job.rejected.append(("sandbox", html, verdict.reason))
        job.notes.append(f"sandbox: rejected ({verdict.reason})")
        return None

    # ------------------------------------------------------------------
    # Tier 2: static
    # ------------------------------------------------------------------

    async def _static_tier(self, job: _Job) -> str | None:
        record = job.record
        if job.analysis.is_server_only or job.analysis.uses_data_fetching or has_unsupported_constructs(job.source):
            job.notes.append("static: not viable for this source")
            return None
        try:
            html = await asyncio.to_thread(render_static, job.source, record.name, job.demo.props)
        except StaticRenderError as e:
            job.notes.append(f"static: {e}")
            logger.info("preview: %s static render not viable: %s", record.name, e)
            return None

        verdict = await self.verifier.verify(record.name, job.source, html)
        if verdict.is_valid:
            return html
        job.rejected.append(("static", html, verdict.reason))
        job.notes.append(f"static: rejected ({verdict.reason})")
        return None

    # ------------------------------------------------------------------
    # Tier 3: generated
    # ------------------------------------------------------------------

    async def _generated_tier(
        self, job: _Job, source_map: Mapping[str, str], context: RepoContext | None
    ) -> str | None:
        record = job.record
        try:
            html = await self.fallback.generate(
                record, job.source, job.demo.props, source_map, context, reason="; ".join(job.notes)
            )
        except PreviewError as e:
            job.notes.append(f"generated: {e}")
            return None

        check = check_markup(html)
        if not check.is_valid:
            job.notes.append(f"generated: rejected ({check.reason})")
            logger.warning("preview: %s generated markup rejected: %s", record.name, check.reason)
            return None
        return html
