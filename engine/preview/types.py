"""
Preview Kernel — Shared Types

Data classes passed between the analyzer, bundler, renderers, and the
backend pipeline. These are the contracts that bind the stages together.

- ComponentRecord is created at discovery and enriched by later stages.
  Derived fields are written once per pass through `write()`.
- RenderRequest / RenderResult are ephemeral, one pair per render attempt.
- RecoveryFix is produced once per failed attempt.
- MockModuleEntry is recomputed for every bundle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Confidence = Literal["high", "medium", "low"]
InteractionVerb = Literal["click", "type", "select", "check", "hover", "focus"]
PreviewTier = Literal["sandbox", "static", "generated"]

CONFIDENCE_LEVELS: tuple[str, ...] = ("high", "medium", "low")

# Fields of ComponentRecord that later stages derive; each is written once per pass.
DERIVED_FIELDS: frozenset[str] = frozenset(
    {
        "props",
        "analysis",
        "demo_props",
        "preview_html",
        "preview_tier",
        "preview_verified",
        "interactive_elements",
        "links",
        "analysis_error",
    }
)


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


@dataclass
class PropSpec:
    """One entry of a component's prop schema."""

    name: str
    type: str = "unknown"
    required: bool = False
    default: Any = None
    description: str | None = None

    @property
    def kind(self) -> str:
        """Coarse category of the declared type, used for placeholder values."""
        t = self.type.strip()
        for suffix in (" | undefined", " | null"):
            if t.endswith(suffix):
                t = t[: -len(suffix)].strip()
        if "=>" in t or t in ("Function", "VoidFunction"):
            return "function"
        if t.endswith("[]") or t.startswith("Array<") or t.startswith("ReadonlyArray<"):
            return "array"
        if t in ("string", "number", "boolean"):
            return t
        if t.startswith(("'", '"')):
            return "union"
        if t in ("ReactNode", "React.ReactNode", "ReactElement", "React.ReactElement", "JSX.Element"):
            return "node"
        if t.startswith("{") or t.startswith("Record<") or t == "object":
            return "object"
        return "unknown"

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"name": self.name, "type": self.type, "required": self.required}
        if self.default is not None:
            d["default"] = self.default
        if self.description:
            d["description"] = self.description
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PropSpec:
        return cls(
            name=d["name"],
            type=d.get("type", "unknown"),
            required=d.get("required", False),
            default=d.get("default"),
            description=d.get("description"),
        )


@dataclass
class SourceAnalysis:
    """
    What the Source Analyzer learned about one component.

    The boolean classifications are routing hints, never proof. `signals`
    lists the patterns that produced them so misroutes can be traced.
    """

    props: list[PropSpec] = field(default_factory=list)
    is_server_only: bool = False
    uses_data_fetching: bool = False
    is_unrenderable: bool = False
    unrenderable_reason: str | None = None
    signals: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass
class DemoProps:
    """A concrete prop-value map plus how much to trust it."""

    props: dict[str, Any]
    confidence: Confidence = "medium"
    source: Literal["empty", "declared", "generated"] = "generated"
    notes: str | None = None
    suggested_state: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"props": self.props, "confidence": self.confidence, "source": self.source}
        if self.notes:
            d["notes"] = self.notes
        if self.suggested_state:
            d["suggested_state"] = self.suggested_state
        return d


@dataclass
class ComponentLinks:
    """Relationships between components in one repository."""

    uses: list[str] = field(default_factory=list)
    used_by: list[str] = field(default_factory=list)
    related: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {"uses": self.uses, "used_by": self.used_by, "related": self.related}


@dataclass
class InteractiveElement:
    """An element in final markup that a cursor can target."""

    tag: str
    selector: str
    label: str
    action: InteractionVerb
    input_type: str | None = None
    name: str | None = None
    placeholder: str | None = None
    role: str | None = None
    test_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "tag": self.tag,
            "selector": self.selector,
            "label": self.label,
            "action": self.action,
        }
        for key in ("input_type", "name", "placeholder", "role", "test_id"):
            value = getattr(self, key)
            if value is not None:
                d[key] = value
        return d


@dataclass
class RepoContext:
    """Repository identity handed to generation prompts."""

    owner: str = ""
    name: str = ""
    description: str | None = None

    @property
    def label(self) -> str:
        return f"{self.owner}/{self.name}" if self.owner else self.name


@dataclass
class ComponentRecord:
    """
    A discovered component and everything derived from it.

    Derived fields must go through `write()`, which refuses a second write
    of the same field in one pass. `begin_pass()` opens a new pass.
    """

    file_path: str
    name: str
    props: list[PropSpec] = field(default_factory=list)
    analysis: SourceAnalysis | None = None
    demo_props: DemoProps | None = None
    preview_html: str | None = None
    preview_tier: PreviewTier | None = None
    preview_verified: bool = False
    interactive_elements: list[InteractiveElement] = field(default_factory=list)
    links: ComponentLinks = field(default_factory=ComponentLinks)
    analysis_error: str | None = None
    _written: set[str] = field(default_factory=set, repr=False, compare=False)

    @property
    def key(self) -> str:
        return f"{self.file_path}::{self.name}"

    def begin_pass(self) -> None:
        self._written.clear()

    def write(self, name: str, value: Any) -> None:
        if name not in DERIVED_FIELDS:
            raise ValueError(f"Not a derived field: {name!r}")
        if name in self._written:
            raise RuntimeError(f"{self.key}: field {name!r} already written in this pass")
        self._written.add(name)
        setattr(self, name, value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "name": self.name,
            "props": [p.to_dict() for p in self.props],
            "demo_props": self.demo_props.to_dict() if self.demo_props else None,
            "preview_html": self.preview_html,
            "preview_tier": self.preview_tier,
            "preview_verified": self.preview_verified,
            "interactive_elements": [e.to_dict() for e in self.interactive_elements],
            "links": self.links.to_dict(),
            "analysis_error": self.analysis_error,
        }


# ---------------------------------------------------------------------------
# Bundling
# ---------------------------------------------------------------------------


@dataclass
class MockModuleEntry:
    """
    An external package and the symbols the bundle references from it.

    `default` stands for a default import and `*` for a namespace import.
    """

    package: str
    symbols: set[str] = field(default_factory=set)

    @property
    def named_symbols(self) -> list[str]:
        return sorted(s for s in self.symbols if s not in ("default", "*"))

    def merge(self, symbols: set[str]) -> None:
        self.symbols |= symbols


@dataclass
class BundleArtifact:
    """
    A linked, dependency-free bundle split around the setup-code slot.

    Recovery setup code changes between attempts while the compiled modules
    do not, so the artifact keeps both halves and re-links cheaply.
    """

    component_name: str
    entry_path: str
    prologue: str
    epilogue: str
    modules: list[str] = field(default_factory=list)
    mocks: dict[str, MockModuleEntry] = field(default_factory=dict)

    def code_with(self, setup_code: str = "") -> str:
        from engine.preview.bundler import wrap_setup_code

        return self.prologue + wrap_setup_code(setup_code) + self.epilogue

    @property
    def code(self) -> str:
        return self.code_with("")


# ---------------------------------------------------------------------------
# Rendering and recovery
# ---------------------------------------------------------------------------


@dataclass
class RenderRequest:
    """One render attempt against the sandbox."""

    artifact: str
    component_name: str
    props: dict[str, Any]
    timeout_ms: int = 15000

    def to_payload(self) -> dict[str, Any]:
        return {
            "bundledJs": self.artifact,
            "componentName": self.component_name,
            "props": self.props,
            "timeout": self.timeout_ms,
        }


@dataclass
class RenderResult:
    """Outcome of one render attempt. A job's results form its recovery trail."""

    success: bool
    html: str | None = None
    error: str | None = None
    console_log: str = ""
    elapsed_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "html": self.html,
            "error": self.error,
            "console_log": self.console_log,
            "elapsed_ms": self.elapsed_ms,
        }


@dataclass
class RecoveryFix:
    """
    A patch proposed after a failed render.

    Additions overwrite by key, removals apply first, setup code is appended.
    """

    props_to_add: dict[str, Any] = field(default_factory=dict)
    props_to_remove: list[str] = field(default_factory=list)
    setup_code: str = ""
    reason: str = ""
    unfixable: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.props_to_add and not self.props_to_remove and not self.setup_code.strip()

    @classmethod
    def empty(cls, reason: str) -> RecoveryFix:
        return cls(reason=reason)


@dataclass
class PreviewOutcome:
    """What one preview job produced."""

    html: str | None = None
    tier: PreviewTier | None = None
    verified: bool = False
    attempts: int = 0
    trail: list[RenderResult] = field(default_factory=list)
    interactive_elements: list[InteractiveElement] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "html": self.html,
            "tier": self.tier,
            "verified": self.verified,
            "attempts": self.attempts,
            "interactive_elements": [e.to_dict() for e in self.interactive_elements],
            "error": self.error,
        }
