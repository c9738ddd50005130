"""
Preview pipeline error taxonomy.

Every stage raises one of these; the orchestrator catches them at the tier
boundary and degrades to the next tier instead of aborting the job.
"""

from __future__ import annotations


class PreviewError(Exception):
    """Base class for all preview pipeline failures."""


class AnalysisError(PreviewError):
    """Source could not be parsed or the component could not be located."""


class SynthesisError(PreviewError):
    """Demo data could not be produced for a component."""


class TransformError(PreviewError):
    """Source could not be rewritten into a self-contained form."""


class BundleError(PreviewError):
    """Module resolution or compilation failed while bundling."""


class RenderError(PreviewError):
    """Rendering the component failed."""


class StaticRenderError(RenderError):
    """The static tree-to-markup renderer met a construct it cannot evaluate."""


class VerificationFailure(PreviewError):
    """A render completed but was judged materially invalid."""

    def __init__(self, reason: str, html: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.html = html


class ServiceError(PreviewError):
    """The external generation service was unreachable or answered badly."""

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable
