"""
Preview Kernel — Source Analyzer

Extracts a component's prop schema and classifies the source patterns
that block direct sandboxed execution:

- is_server_only:     async components, server directives, filesystem /
                      database / server-auth imports, request-scoped calls
- uses_data_fetching: query / fetch hooks and fetch-in-effect patterns
- is_unrenderable:    3D / WebGL / WebRTC / media capture / live sockets

These are routing hints. Each positive match is recorded in `signals`
and logged so misroutes can be traced back to the pattern that caused
them.
"""

from __future__ import annotations

import logging
import posixpath
import re
from collections.abc import Iterable, Mapping

from engine.preview.errors import AnalysisError
from engine.preview.imports import scan_imports
from engine.preview.resolver import PathResolver, normalize_path
from engine.preview.ts_parser import extract_props, is_async, locate_component, parse
from engine.preview.types import ComponentLinks, ComponentRecord, SourceAnalysis

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Signal tables
# ---------------------------------------------------------------------------

SERVER_IMPORTS: tuple[str, ...] = (
    "server-only",
    "fs",
    "fs/promises",
    "path",
    "child_process",
    "crypto",
    "os",
    "next/headers",
    "next/server",
    "next/cache",
    "@prisma/client",
    "drizzle-orm",
    "@vercel/postgres",
    "@vercel/kv",
    "pg",
    "mysql2",
    "mongoose",
    "mongodb",
    "redis",
    "ioredis",
    "firebase-admin",
    "@clerk/nextjs/server",
    "@supabase/ssr",
    "next-auth/next",
)
SERVER_IMPORT_PREFIXES: tuple[str, ...] = ("node:", "drizzle-orm/", "firebase-admin/", "@/server/", "~/server/")

SERVER_CALLS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("getServerSession()", re.compile(r"\bgetServerSession\s*\(")),
    ("cookies()", re.compile(r"\bcookies\s*\(\s*\)")),
    ("headers()", re.compile(r"\bheaders\s*\(\s*\)\s*\.")),
    ("currentUser()", re.compile(r"\bawait\s+currentUser\s*\(")),
    ("await auth()", re.compile(r"\bawait\s+auth\s*\(")),
    ("prisma query", re.compile(r"\bprisma\.\w+\.(?:find|create|update|delete|count|aggregate)")),
    ("db query", re.compile(r"\bdb\.(?:select|query|insert|update|delete)\b")),
    ("process.env secret", re.compile(r"\bprocess\.env\.(?!NEXT_PUBLIC_)[A-Z_]*(?:SECRET|KEY|TOKEN|DATABASE)")),
)

DATA_IMPORTS: tuple[str, ...] = (
    "@tanstack/react-query",
    "react-query",
    "swr",
    "swr/infinite",
    "swr/mutation",
    "@apollo/client",
    "urql",
    "axios",
    "ky",
)
DATA_IMPORT_PREFIXES: tuple[str, ...] = ("@trpc/",)

DATA_CALLS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("query hook", re.compile(r"\buse(?:Suspense|Infinite)?Query\s*\(")),
    ("swr hook", re.compile(r"\buseSWR(?:Infinite|Immutable)?\s*\(")),
    ("trpc hook", re.compile(r"\.\s*use(?:Suspense)?Query\s*\(")),
    ("fetch hook", re.compile(r"\buse(?:Fetch|Api|Data|Resource)\s*\(")),
    ("loader data", re.compile(r"\buseLoaderData\s*\(")),
    (
        "fetch in effect",
        re.compile(r"useEffect\s*\(\s*(?:async\s*)?\([^)]*\)\s*=>\s*\{[^}]*?\b(?:fetch|axios\.\w+)\s*\(", re.S),
    ),
)

UNRENDERABLE_IMPORTS: dict[str, str] = {
    "three": "3D (three.js)",
    "@react-three/fiber": "3D (react-three-fiber)",
    "@react-three/drei": "3D (drei)",
    "babylonjs": "3D (babylon)",
    "@babylonjs/core": "3D (babylon)",
    "pixi.js": "WebGL (pixi)",
    "mapbox-gl": "WebGL (mapbox)",
    "maplibre-gl": "WebGL (maplibre)",
    "simple-peer": "WebRTC",
    "peerjs": "WebRTC",
    "livekit-client": "WebRTC",
    "@livekit/components-react": "WebRTC",
    "socket.io-client": "live socket",
    "react-webcam": "media capture",
}

UNRENDERABLE_CALLS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("WebGL", re.compile(r"getContext\s*\(\s*['\"](?:webgl2?|experimental-webgl)['\"]")),
    ("WebRTC", re.compile(r"\bnew\s+RTCPeerConnection\b")),
    ("media capture", re.compile(r"\b(?:getUserMedia|getDisplayMedia)\s*\(")),
    ("live socket", re.compile(r"\bnew\s+(?:WebSocket|EventSource)\s*\(")),
)

_USE_CLIENT = re.compile(r"^\s*['\"]use client['\"]", re.MULTILINE)
_USE_SERVER = re.compile(r"^\s*['\"]use server['\"]", re.MULTILINE)


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def analyze_source(source: str, component_name: str | None = None, file_path: str = "") -> SourceAnalysis:
    """
    Analyze one component. Never raises.

    A malformed source yields an empty schema and `error`.
    """
    analysis = SourceAnalysis()
    label = component_name or file_path or "<component>"

    try:
        analysis.props = extract_props(source, component_name)
    except AnalysisError as e:
        analysis.error = str(e)
        logger.warning("analyzer: %s: %s", label, e)

    specifiers = [r.specifier for r in scan_imports(source) if not r.type_only]
    is_client = bool(_USE_CLIENT.search(source))

    server = _server_signals(source, component_name, specifiers, is_client)
    data = _data_signals(source, specifiers)
    unrenderable = _unrenderable_signals(source, specifiers)

    analysis.is_server_only = bool(server)
    analysis.uses_data_fetching = bool(data)
    if unrenderable:
        analysis.is_unrenderable = True
        analysis.unrenderable_reason = unrenderable[0]
    analysis.signals = [f"server:{s}" for s in server] + [f"data:{s}" for s in data]
    analysis.signals += [f"unrenderable:{s}" for s in unrenderable]

    if analysis.signals:
        logger.info("analyzer: %s routed by %s", label, ", ".join(analysis.signals))
    return analysis


def _server_signals(source: str, component_name: str | None, specifiers: list[str], is_client: bool) -> list[str]:
    signals: list[str] = []
    if _USE_SERVER.search(source):
        signals.append("'use server' directive")
    for spec in specifiers:
        if spec in SERVER_IMPORTS or spec.startswith(SERVER_IMPORT_PREFIXES):
            signals.append(f"import {spec}")

    location = locate_component(parse(source).root_node, component_name)
    if location is not None and is_async(location.function):
        signals.append("async component")

    # A client boundary makes awaited calls ordinary event-handler code.
    if not is_client:
        for label, pattern in SERVER_CALLS:
            if pattern.search(source):
                signals.append(label)
    return _unique(signals)


def _data_signals(source: str, specifiers: list[str]) -> list[str]:
    signals: list[str] = []
    for spec in specifiers:
        if spec in DATA_IMPORTS or spec.startswith(DATA_IMPORT_PREFIXES):
            signals.append(f"import {spec}")
    for label, pattern in DATA_CALLS:
        if pattern.search(source):
            signals.append(label)
    return _unique(signals)


def _unrenderable_signals(source: str, specifiers: list[str]) -> list[str]:
    signals: list[str] = []
    for spec in specifiers:
        reason = UNRENDERABLE_IMPORTS.get(spec)
        if reason is None and spec.startswith("@react-three/"):
            reason = "3D (react-three)"
        if reason is not None:
            signals.append(reason)
    for label, pattern in UNRENDERABLE_CALLS:
        if pattern.search(source):
            signals.append(label)
    return _unique(signals)


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------


def build_links(records: list[ComponentRecord], sources: Mapping[str, str]) -> dict[str, ComponentLinks]:
    """
    Compute uses / used_by / related for every record, keyed by record key.

    `uses` are other known component names rendered as JSX tags in the
    record's file; `related` are components in the same directory.
    """
    names = {r.name for r in records}
    links = {r.key: ComponentLinks() for r in records}
    by_name: dict[str, list[ComponentRecord]] = {}
    for record in records:
        by_name.setdefault(record.name, []).append(record)

    for record in records:
        source = sources.get(normalize_path(record.file_path)) or sources.get(record.file_path) or ""
        tags = set(re.findall(r"<([A-Z][\w$]*)[\s/>]", source))
        used = sorted((tags & names) - {record.name})
        links[record.key].uses = used
        for name in used:
            for other in by_name[name]:
                if record.name not in links[other.key].used_by:
                    links[other.key].used_by.append(record.name)

    by_dir: dict[str, list[str]] = {}
    for record in records:
        by_dir.setdefault(posixpath.dirname(normalize_path(record.file_path)), []).append(record.name)
    for record in records:
        siblings = by_dir[posixpath.dirname(normalize_path(record.file_path))]
        links[record.key].related = sorted({n for n in siblings if n != record.name})

    for link in links.values():
        link.used_by.sort()
    return links


def related_sources(
    file_path: str,
    source_map: Mapping[str, str],
    resolver: PathResolver | None = None,
    max_files: int = 4,
    max_chars: int = 4000,
) -> dict[str, str]:
    """Sources of the component's local imports, for generation context."""
    normalized = {normalize_path(p): text for p, text in source_map.items()}
    path = normalize_path(file_path)
    source = normalized.get(path)
    if source is None:
        return {}
    resolver = resolver or PathResolver.from_source_map(normalized)

    related: dict[str, str] = {}
    for record in scan_imports(source):
        if record.type_only or not resolver.is_local(record.specifier):
            continue
        resolved = resolver.resolve(record.specifier, path)
        if resolved is None or resolved in related or resolved == path:
            continue
        text = normalized[resolved]
        related[resolved] = text if len(text) <= max_chars else text[:max_chars] + "\n// ...truncated"
        if len(related) >= max_files:
            break
    return related
