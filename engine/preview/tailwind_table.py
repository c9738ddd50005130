"""
Preview Kernel — Utility Class Table

A fixed Tailwind-subset mapping from utility classes to CSS declarations.
`utility_css(cls)` returns the declarations for one class, or None when
the class is unknown (the normalizer drops unknown classes).

Covered: spacing scale and sides, gap, sizing, typography, font weights,
leading, tracking, radius, shadow, flex / grid, display, position, inset,
overflow, opacity, borders, palette and shadcn token colors, arbitrary
values (`w-[320px]`, `bg-[#0a0a0a]`), and negative spacing.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Scales
# ---------------------------------------------------------------------------

SPACING: dict[str, str] = {"0": "0px", "px": "1px"}
for _step in (0.5, 1, 1.5, 2, 2.5, 3, 3.5, 4, 5, 6, 7, 8, 9, 10, 11, 12, 14, 16, 20, 24, 28, 32, 36, 40, 44, 48,
              52, 56, 60, 64, 72, 80, 96):
    _key = str(_step).removesuffix(".0")
    SPACING[_key] = f"{_step * 0.25:g}rem"

FRACTIONS: dict[str, str] = {}
for _den in (2, 3, 4, 5, 6, 12):
    for _num in range(1, _den):
        FRACTIONS[f"{_num}/{_den}"] = f"{_num / _den * 100:.6g}%"

FONT_SIZES: dict[str, tuple[str, str]] = {
    "xs": ("0.75rem", "1rem"),
    "sm": ("0.875rem", "1.25rem"),
    "base": ("1rem", "1.5rem"),
    "lg": ("1.125rem", "1.75rem"),
    "xl": ("1.25rem", "1.75rem"),
    "2xl": ("1.5rem", "2rem"),
    "3xl": ("1.875rem", "2.25rem"),
    "4xl": ("2.25rem", "2.5rem"),
    "5xl": ("3rem", "1"),
    "6xl": ("3.75rem", "1"),
    "7xl": ("4.5rem", "1"),
    "8xl": ("6rem", "1"),
    "9xl": ("8rem", "1"),
}

FONT_WEIGHTS: dict[str, str] = {
    "thin": "100",
    "extralight": "200",
    "light": "300",
    "normal": "400",
    "medium": "500",
    "semibold": "600",
    "bold": "700",
    "extrabold": "800",
    "black": "900",
}

LEADING: dict[str, str] = {
    "none": "1",
    "tight": "1.25",
    "snug": "1.375",
    "normal": "1.5",
    "relaxed": "1.625",
    "loose": "2",
    "3": ".75rem",
    "4": "1rem",
    "5": "1.25rem",
    "6": "1.5rem",
    "7": "1.75rem",
    "8": "2rem",
    "9": "2.25rem",
    "10": "2.5rem",
}

TRACKING: dict[str, str] = {
    "tighter": "-0.05em",
    "tight": "-0.025em",
    "normal": "0em",
    "wide": "0.025em",
    "wider": "0.05em",
    "widest": "0.1em",
}

RADIUS: dict[str, str] = {
    "none": "0px",
    "sm": "0.125rem",
    "": "0.25rem",
    "md": "0.375rem",
    "lg": "0.5rem",
    "xl": "0.75rem",
    "2xl": "1rem",
    "3xl": "1.5rem",
    "full": "9999px",
}

SHADOWS: dict[str, str] = {
    "sm": "0 1px 2px 0 rgb(0 0 0 / 0.05)",
    "": "0 1px 3px 0 rgb(0 0 0 / 0.1), 0 1px 2px -1px rgb(0 0 0 / 0.1)",
    "md": "0 4px 6px -1px rgb(0 0 0 / 0.1), 0 2px 4px -2px rgb(0 0 0 / 0.1)",
    "lg": "0 10px 15px -3px rgb(0 0 0 / 0.1), 0 4px 6px -4px rgb(0 0 0 / 0.1)",
    "xl": "0 20px 25px -5px rgb(0 0 0 / 0.1), 0 8px 10px -6px rgb(0 0 0 / 0.1)",
    "2xl": "0 25px 50px -12px rgb(0 0 0 / 0.25)",
    "inner": "inset 0 2px 4px 0 rgb(0 0 0 / 0.05)",
    "none": "none",
}

MAX_WIDTHS: dict[str, str] = {
    "xs": "20rem",
    "sm": "24rem",
    "md": "28rem",
    "lg": "32rem",
    "xl": "36rem",
    "2xl": "42rem",
    "3xl": "48rem",
    "4xl": "56rem",
    "5xl": "64rem",
    "6xl": "72rem",
    "7xl": "80rem",
    "full": "100%",
    "none": "none",
    "prose": "65ch",
    "screen-sm": "640px",
    "screen-md": "768px",
    "screen-lg": "1024px",
    "screen-xl": "1280px",
}

# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------

_SHADES = ("50", "100", "200", "300", "400", "500", "600", "700", "800", "900", "950")

_PALETTE_ROWS: dict[str, tuple[str, ...]] = {
    "slate": ("#f8fafc", "#f1f5f9", "#e2e8f0", "#cbd5e1", "#94a3b8", "#64748b", "#475569", "#334155", "#1e293b", "#0f172a", "#020617"),
    "gray": ("#f9fafb", "#f3f4f6", "#e5e7eb", "#d1d5db", "#9ca3af", "#6b7280", "#4b5563", "#374151", "#1f2937", "#111827", "#030712"),
    "zinc": ("#fafafa", "#f4f4f5", "#e4e4e7", "#d4d4d8", "#a1a1aa", "#71717a", "#52525b", "#3f3f46", "#27272a", "#18181b", "#09090b"),
    "neutral": ("#fafafa", "#f5f5f5", "#e5e5e5", "#d4d4d4", "#a3a3a3", "#737373", "#525252", "#404040", "#262626", "#171717", "#0a0a0a"),
    "stone": ("#fafaf9", "#f5f5f4", "#e7e5e4", "#d6d3d1", "#a8a29e", "#78716c", "#57534e", "#44403c", "#292524", "#1c1917", "#0c0a09"),
    "red": ("#fef2f2", "#fee2e2", "#fecaca", "#fca5a5", "#f87171", "#ef4444", "#dc2626", "#b91c1c", "#991b1b", "#7f1d1d", "#450a0a"),
    "orange": ("#fff7ed", "#ffedd5", "#fed7aa", "#fdba74", "#fb923c", "#f97316", "#ea580c", "#c2410c", "#9a3412", "#7c2d12", "#431407"),
    "amber": ("#fffbeb", "#fef3c7", "#fde68a", "#fcd34d", "#fbbf24", "#f59e0b", "#d97706", "#b45309", "#92400e", "#78350f", "#451a03"),
    "yellow": ("#fefce8", "#fef9c3", "#fef08a", "#fde047", "#facc15", "#eab308", "#ca8a04", "#a16207", "#854d0e", "#713f12", "#422006"),
    "lime": ("#f7fee7", "#ecfccb", "#d9f99d", "#bef264", "#a3e635", "#84cc16", "#65a30d", "#4d7c0f", "#3f6212", "#365314", "#1a2e05"),
    "green": ("#f0fdf4", "#dcfce7", "#bbf7d0", "#86efac", "#4ade80", "#22c55e", "#16a34a", "#15803d", "#166534", "#14532d", "#052e16"),
    "emerald": ("#ecfdf5", "#d1fae5", "#a7f3d0", "#6ee7b7", "#34d399", "#10b981", "#059669", "#047857", "#065f46", "#064e3b", "#022c22"),
    "teal": ("#f0fdfa", "#ccfbf1", "#99f6e4", "#5eead4", "#2dd4bf", "#14b8a6", "#0d9488", "#0f766e", "#115e59", "#134e4a", "#042f2e"),
    "cyan": ("#ecfeff", "#cffafe", "#a5f3fc", "#67e8f9", "#22d3ee", "#06b6d4", "#0891b2", "#0e7490", "#155e75", "#164e63", "#083344"),
    "sky": ("#f0f9ff", "#e0f2fe", "#bae6fd", "#7dd3fc", "#38bdf8", "#0ea5e9", "#0284c7", "#0369a1", "#075985", "#0c4a6e", "#082f49"),
    "blue": ("#eff6ff", "#dbeafe", "#bfdbfe", "#93c5fd", "#60a5fa", "#3b82f6", "#2563eb", "#1d4ed8", "#1e40af", "#1e3a8a", "#172554"),
    "indigo": ("#eef2ff", "#e0e7ff", "#c7d2fe", "#a5b4fc", "#818cf8", "#6366f1", "#4f46e5", "#4338ca", "#3730a3", "#312e81", "#1e1b4b"),
    "violet": ("#f5f3ff", "#ede9fe", "#ddd6fe", "#c4b5fd", "#a78bfa", "#8b5cf6", "#7c3aed", "#6d28d9", "#5b21b6", "#4c1d95", "#2e1065"),
    "purple": ("#faf5ff", "#f3e8ff", "#e9d5ff", "#d8b4fe", "#c084fc", "#a855f7", "#9333ea", "#7e22ce", "#6b21a8", "#581c87", "#3b0764"),
    "fuchsia": ("#fdf4ff", "#fae8ff", "#f5d0fe", "#f0abfc", "#e879f9", "#d946ef", "#c026d3", "#a21caf", "#86198f", "#701a75", "#4a044e"),
    "pink": ("#fdf2f8", "#fce7f3", "#fbcfe8", "#f9a8d4", "#f472b6", "#ec4899", "#db2777", "#be185d", "#9d174d", "#831843", "#500724"),
    "rose": ("#fff1f2", "#ffe4e6", "#fecdd3", "#fda4af", "#fb7185", "#f43f5e", "#e11d48", "#be123c", "#9f1239", "#881337", "#4c0519"),
}

COLORS: dict[str, str] = {
    "white": "#ffffff",
    "black": "#000000",
    "transparent": "transparent",
    "current": "currentColor",
    "inherit": "inherit",
}
for _name, _row in _PALETTE_ROWS.items():
    for _shade, _hex in zip(_SHADES, _row, strict=True):
        COLORS[f"{_name}-{_shade}"] = _hex

# shadcn/ui design tokens (light theme)
TOKEN_COLORS: dict[str, str] = {
    "background": "#ffffff",
    "foreground": "#0a0a0a",
    "card": "#ffffff",
    "card-foreground": "#0a0a0a",
    "popover": "#ffffff",
    "popover-foreground": "#0a0a0a",
    "primary": "#171717",
    "primary-foreground": "#fafafa",
    "secondary": "#f5f5f5",
    "secondary-foreground": "#171717",
    "muted": "#f5f5f5",
    "muted-foreground": "#737373",
    "accent": "#f5f5f5",
    "accent-foreground": "#171717",
    "destructive": "#ef4444",
    "destructive-foreground": "#fafafa",
    "border": "#e5e5e5",
    "input": "#e5e5e5",
    "ring": "#0a0a0a",
}
COLORS.update(TOKEN_COLORS)

# ---------------------------------------------------------------------------
# Static utilities
# ---------------------------------------------------------------------------

STATIC: dict[str, str] = {
    # display
    "block": "display: block",
    "inline-block": "display: inline-block",
    "inline": "display: inline",
    "flex": "display: flex",
    "inline-flex": "display: inline-flex",
    "grid": "display: grid",
    "inline-grid": "display: inline-grid",
    "table": "display: table",
    "contents": "display: contents",
    "hidden": "display: none",
    # flexbox
    "flex-row": "flex-direction: row",
    "flex-row-reverse": "flex-direction: row-reverse",
    "flex-col": "flex-direction: column",
    "flex-col-reverse": "flex-direction: column-reverse",
    "flex-wrap": "flex-wrap: wrap",
    "flex-nowrap": "flex-wrap: nowrap",
    "flex-1": "flex: 1 1 0%",
    "flex-auto": "flex: 1 1 auto",
    "flex-initial": "flex: 0 1 auto",
    "flex-none": "flex: none",
    "grow": "flex-grow: 1",
    "grow-0": "flex-grow: 0",
    "shrink": "flex-shrink: 1",
    "shrink-0": "flex-shrink: 0",
    "items-start": "align-items: flex-start",
    "items-end": "align-items: flex-end",
    "items-center": "align-items: center",
    "items-baseline": "align-items: baseline",
    "items-stretch": "align-items: stretch",
    "justify-start": "justify-content: flex-start",
    "justify-end": "justify-content: flex-end",
    "justify-center": "justify-content: center",
    "justify-between": "justify-content: space-between",
    "justify-around": "justify-content: space-around",
    "justify-evenly": "justify-content: space-evenly",
    "self-auto": "align-self: auto",
    "self-start": "align-self: flex-start",
    "self-end": "align-self: flex-end",
    "self-center": "align-self: center",
    "self-stretch": "align-self: stretch",
    "content-center": "align-content: center",
    "content-between": "align-content: space-between",
    "place-items-center": "place-items: center",
    "place-content-center": "place-content: center",
    # position
    "static": "position: static",
    "fixed": "position: fixed",
    "absolute": "position: absolute",
    "relative": "position: relative",
    "sticky": "position: sticky",
    # overflow
    "overflow-auto": "overflow: auto",
    "overflow-hidden": "overflow: hidden",
    "overflow-visible": "overflow: visible",
    "overflow-scroll": "overflow: scroll",
    "overflow-x-auto": "overflow-x: auto",
    "overflow-y-auto": "overflow-y: auto",
    "overflow-x-hidden": "overflow-x: hidden",
    "overflow-y-hidden": "overflow-y: hidden",
    # typography
    "italic": "font-style: italic",
    "not-italic": "font-style: normal",
    "underline": "text-decoration-line: underline",
    "line-through": "text-decoration-line: line-through",
    "no-underline": "text-decoration-line: none",
    "uppercase": "text-transform: uppercase",
    "lowercase": "text-transform: lowercase",
    "capitalize": "text-transform: capitalize",
    "normal-case": "text-transform: none",
    "text-left": "text-align: left",
    "text-center": "text-align: center",
    "text-right": "text-align: right",
    "text-justify": "text-align: justify",
    "truncate": "overflow: hidden; text-overflow: ellipsis; white-space: nowrap",
    "whitespace-nowrap": "white-space: nowrap",
    "whitespace-normal": "white-space: normal",
    "whitespace-pre": "white-space: pre",
    "whitespace-pre-wrap": "white-space: pre-wrap",
    "break-words": "overflow-wrap: break-word",
    "break-all": "word-break: break-all",
    "font-sans": "font-family: ui-sans-serif, system-ui, sans-serif",
    "font-serif": "font-family: ui-serif, Georgia, serif",
    "font-mono": "font-family: ui-monospace, SFMono-Regular, Menlo, monospace",
    "antialiased": "-webkit-font-smoothing: antialiased",
    "tabular-nums": "font-variant-numeric: tabular-nums",
    "align-middle": "vertical-align: middle",
    "align-top": "vertical-align: top",
    "list-none": "list-style-type: none",
    "list-disc": "list-style-type: disc",
    "list-decimal": "list-style-type: decimal",
    # borders
    "border": "border-width: 1px; border-style: solid; border-color: #e5e7eb",
    "border-0": "border-width: 0px",
    "border-2": "border-width: 2px; border-style: solid",
    "border-4": "border-width: 4px; border-style: solid",
    "border-t": "border-top-width: 1px; border-top-style: solid; border-top-color: #e5e7eb",
    "border-b": "border-bottom-width: 1px; border-bottom-style: solid; border-bottom-color: #e5e7eb",
    "border-l": "border-left-width: 1px; border-left-style: solid; border-left-color: #e5e7eb",
    "border-r": "border-right-width: 1px; border-right-style: solid; border-right-color: #e5e7eb",
    "border-y": "border-top-width: 1px; border-bottom-width: 1px; border-style: solid; border-color: #e5e7eb",
    "border-x": "border-left-width: 1px; border-right-width: 1px; border-style: solid; border-color: #e5e7eb",
    "border-solid": "border-style: solid",
    "border-dashed": "border-style: dashed",
    "border-dotted": "border-style: dotted",
    "border-none": "border-style: none",
    "outline-none": "outline: 2px solid transparent; outline-offset: 2px",
    # sizing keywords
    "w-full": "width: 100%",
    "w-screen": "width: 100vw",
    "w-auto": "width: auto",
    "w-fit": "width: fit-content",
    "w-min": "width: min-content",
    "w-max": "width: max-content",
    "h-full": "height: 100%",
    "h-screen": "height: 100vh",
    "h-auto": "height: auto",
    "h-fit": "height: fit-content",
    "min-h-screen": "min-height: 100vh",
    "min-h-full": "min-height: 100%",
    "min-h-0": "min-height: 0px",
    "min-w-0": "min-width: 0px",
    "min-w-full": "min-width: 100%",
    "max-h-full": "max-height: 100%",
    "max-h-screen": "max-height: 100vh",
    "size-full": "width: 100%; height: 100%",
    "aspect-square": "aspect-ratio: 1 / 1",
    "aspect-video": "aspect-ratio: 16 / 9",
    "object-cover": "object-fit: cover",
    "object-contain": "object-fit: contain",
    "object-center": "object-position: center",
    # misc
    "cursor-pointer": "cursor: pointer",
    "cursor-default": "cursor: default",
    "cursor-not-allowed": "cursor: not-allowed",
    "pointer-events-none": "pointer-events: none",
    "select-none": "user-select: none",
    "resize-none": "resize: none",
    "appearance-none": "appearance: none",
    "visible": "visibility: visible",
    "invisible": "visibility: hidden",
    "sr-only": "position: absolute; width: 1px; height: 1px; padding: 0; margin: -1px; overflow: hidden; clip: rect(0, 0, 0, 0); white-space: nowrap; border-width: 0",
    "mx-auto": "margin-left: auto; margin-right: auto",
    "my-auto": "margin-top: auto; margin-bottom: auto",
    "ml-auto": "margin-left: auto",
    "mr-auto": "margin-right: auto",
    "mt-auto": "margin-top: auto",
    "mb-auto": "margin-bottom: auto",
    "m-auto": "margin: auto",
    "container": "width: 100%; margin-left: auto; margin-right: auto",
    "inset-0": "top: 0px; right: 0px; bottom: 0px; left: 0px",
    "isolate": "isolation: isolate",
    "box-border": "box-sizing: border-box",
    "box-content": "box-sizing: content-box",
    "transition": "transition-property: color, background-color, border-color, opacity, box-shadow, transform; transition-duration: 150ms",
    "transition-all": "transition-property: all; transition-duration: 150ms",
    "transition-colors": "transition-property: color, background-color, border-color; transition-duration: 150ms",
    "backdrop-blur": "backdrop-filter: blur(8px)",
    "blur": "filter: blur(8px)",
    "grid-flow-col": "grid-auto-flow: column",
    "grid-flow-row": "grid-auto-flow: row",
}

# ---------------------------------------------------------------------------
# Pattern utilities
# ---------------------------------------------------------------------------

_SPACING_PROPS: dict[str, tuple[str, ...]] = {
    "p": ("padding",),
    "px": ("padding-left", "padding-right"),
    "py": ("padding-top", "padding-bottom"),
    "pt": ("padding-top",),
    "pr": ("padding-right",),
    "pb": ("padding-bottom",),
    "pl": ("padding-left",),
    "ps": ("padding-inline-start",),
    "pe": ("padding-inline-end",),
    "m": ("margin",),
    "mx": ("margin-left", "margin-right"),
    "my": ("margin-top", "margin-bottom"),
    "mt": ("margin-top",),
    "mr": ("margin-right",),
    "mb": ("margin-bottom",),
    "ml": ("margin-left",),
    "ms": ("margin-inline-start",),
    "me": ("margin-inline-end",),
    "gap": ("gap",),
    "gap-x": ("column-gap",),
    "gap-y": ("row-gap",),
    "top": ("top",),
    "right": ("right",),
    "bottom": ("bottom",),
    "left": ("left",),
    "inset": ("top", "right", "bottom", "left"),
    "inset-x": ("left", "right"),
    "inset-y": ("top", "bottom"),
}

_SIZE_PROPS: dict[str, tuple[str, ...]] = {
    "w": ("width",),
    "h": ("height",),
    "size": ("width", "height"),
    "min-w": ("min-width",),
    "min-h": ("min-height",),
    "max-h": ("max-height",),
}

_RADIUS_SIDES: dict[str, tuple[str, ...]] = {
    "rounded": ("border-radius",),
    "rounded-t": ("border-top-left-radius", "border-top-right-radius"),
    "rounded-b": ("border-bottom-left-radius", "border-bottom-right-radius"),
    "rounded-l": ("border-top-left-radius", "border-bottom-left-radius"),
    "rounded-r": ("border-top-right-radius", "border-bottom-right-radius"),
    "rounded-tl": ("border-top-left-radius",),
    "rounded-tr": ("border-top-right-radius",),
    "rounded-bl": ("border-bottom-left-radius",),
    "rounded-br": ("border-bottom-right-radius",),
}

_COLOR_PROPS: dict[str, str] = {
    "bg": "background-color",
    "text": "color",
    "border": "border-color",
    "ring": "--ring-color",
    "fill": "fill",
    "stroke": "stroke",
    "outline": "outline-color",
    "placeholder": "--placeholder-color",
    "divide": "--divide-color",
    "accent": "accent-color",
    "caret": "caret-color",
    "decoration": "text-decoration-color",
}

_ARBITRARY = re.compile(r"^(?P<prefix>[a-z-]+)-\[(?P<value>[^\]]+)\]$")
_OPACITY_SUFFIX = re.compile(r"^(?P<color>.+)/(?P<alpha>\d{1,3})$")


def _decl(props: tuple[str, ...], value: str) -> str:
    return "; ".join(f"{p}: {value}" for p in props)


def _with_alpha(color: str, alpha: str) -> str:
    """Apply a `/50` opacity suffix to a hex color."""
    if not color.startswith("#") or len(color) != 7:
        return color
    r, g, b = int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)
    return f"rgba({r}, {g}, {b}, {int(alpha) / 100:g})"


def resolve_color(token: str) -> str | None:
    """`blue-500`, `primary`, `black/50`, `[#123456]` -> CSS color."""
    alpha = None
    match = _OPACITY_SUFFIX.match(token)
    if match:
        token, alpha = match.group("color"), match.group("alpha")
    if token.startswith("[") and token.endswith("]"):
        color = token[1:-1].replace("_", " ")
    else:
        color = COLORS.get(token)
    if color is None:
        return None
    return _with_alpha(color, alpha) if alpha else color


def _arbitrary(prefix: str, value: str) -> str | None:
    value = value.replace("_", " ")
    if prefix in _SPACING_PROPS:
        return _decl(_SPACING_PROPS[prefix], value)
    if prefix in _SIZE_PROPS:
        return _decl(_SIZE_PROPS[prefix], value)
    if prefix == "max-w":
        return f"max-width: {value}"
    if prefix in _RADIUS_SIDES:
        return _decl(_RADIUS_SIDES[prefix], value)
    if prefix == "text":
        if value.startswith(("#", "rgb", "hsl", "var(")):
            return f"color: {value}"
        return f"font-size: {value}"
    if prefix in _COLOR_PROPS:
        return f"{_COLOR_PROPS[prefix]}: {value}"
    if prefix == "grid-cols":
        return f"grid-template-columns: {value}"
    if prefix == "leading":
        return f"line-height: {value}"
    if prefix == "tracking":
        return f"letter-spacing: {value}"
    if prefix == "z":
        return f"z-index: {value}"
    if prefix == "shadow":
        return f"box-shadow: {value}"
    return None


def utility_css(cls: str) -> str | None:
    """CSS declarations for one utility class, or None when unknown."""
    if cls in STATIC:
        return STATIC[cls]

    negative = cls.startswith("-")
    body = cls[1:] if negative else cls

    match = _ARBITRARY.match(body)
    if match:
        return _arbitrary(match.group("prefix"), match.group("value"))

    # spacing: p-4, mx-2, gap-x-3, -mt-1, top-1/2
    for prefix in sorted(_SPACING_PROPS, key=len, reverse=True):
        if body.startswith(prefix + "-"):
            key = body[len(prefix) + 1 :]
            value = SPACING.get(key) or FRACTIONS.get(key) or ("100%" if key == "full" else None)
            if value is None:
                continue
            if negative and value != "0px":
                value = f"-{value}"
            return _decl(_SPACING_PROPS[prefix], value)

    # space-x / space-y are applied to children by the normalizer
    if body.startswith(("space-x-", "space-y-")):
        return None

    for prefix in sorted(_SIZE_PROPS, key=len, reverse=True):
        if body.startswith(prefix + "-"):
            key = body[len(prefix) + 1 :]
            value = SPACING.get(key) or FRACTIONS.get(key)
            if value is None:
                continue
            return _decl(_SIZE_PROPS[prefix], value)

    if body.startswith("max-w-"):
        value = MAX_WIDTHS.get(body[6:])
        return f"max-width: {value}" if value else None

    if body.startswith("text-"):
        key = body[5:]
        if key in FONT_SIZES:
            size, line_height = FONT_SIZES[key]
            return f"font-size: {size}; line-height: {line_height}"
        color = resolve_color(key)
        return f"color: {color}" if color else None

    if body.startswith("font-"):
        weight = FONT_WEIGHTS.get(body[5:])
        return f"font-weight: {weight}" if weight else None

    if body.startswith("leading-"):
        value = LEADING.get(body[8:])
        return f"line-height: {value}" if value else None

    if body.startswith("tracking-"):
        value = TRACKING.get(body[9:])
        return f"letter-spacing: {value}" if value else None

    for prefix in sorted(_RADIUS_SIDES, key=len, reverse=True):
        if body == prefix or body.startswith(prefix + "-"):
            key = body[len(prefix) + 1 :] if body != prefix else ""
            if key in RADIUS:
                return _decl(_RADIUS_SIDES[prefix], RADIUS[key])

    if body == "shadow" or body.startswith("shadow-"):
        value = SHADOWS.get(body[7:] if body != "shadow" else "")
        return f"box-shadow: {value}" if value else None

    if body.startswith("opacity-"):
        key = body[8:]
        return f"opacity: {int(key) / 100:g}" if key.isdigit() else None

    if body.startswith("z-"):
        key = body[2:]
        return f"z-index: {key}" if key.isdigit() or key == "auto" else None

    if body.startswith("grid-cols-"):
        key = body[10:]
        return f"grid-template-columns: repeat({key}, minmax(0, 1fr))" if key.isdigit() else None
    if body.startswith("grid-rows-"):
        key = body[10:]
        return f"grid-template-rows: repeat({key}, minmax(0, 1fr))" if key.isdigit() else None
    if body.startswith("col-span-"):
        key = body[9:]
        if key == "full":
            return "grid-column: 1 / -1"
        return f"grid-column: span {key} / span {key}" if key.isdigit() else None

    if body.startswith("border-") and body[7:] not in ("0", "2", "4"):
        color = resolve_color(body[7:])
        return f"border-color: {color}" if color else None

    for prefix, prop in _COLOR_PROPS.items():
        if prefix in ("text", "border"):
            continue
        if body.startswith(prefix + "-"):
            color = resolve_color(body[len(prefix) + 1 :])
            return f"{prop}: {color}" if color else None

    return None


def space_between(cls: str) -> tuple[str, str] | None:
    """`space-y-4` -> ("margin-top", "1rem") for every child but the first."""
    match = re.match(r"^space-(x|y)-(.+)$", cls)
    if not match:
        return None
    value = SPACING.get(match.group(2))
    if value is None:
        return None
    return ("margin-left" if match.group(1) == "x" else "margin-top", value)
