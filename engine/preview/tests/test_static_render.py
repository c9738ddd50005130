"""Tests for the static tree-to-markup renderer."""

from __future__ import annotations

import pytest

from engine.preview.errors import StaticRenderError
from engine.preview.static_render import (
    MAX_ALLOCATION,
    has_unsupported_constructs,
    js_json,
    js_str,
    js_truthy,
    render_static,
    style_to_css,
)

TASK_LIST = """
export function TaskList({ tasks = [], title }) {
  if (!tasks.length) return <p className="empty">Nothing yet</p>;
  return (
    <section>
      <h2>{title ?? "Tasks"}</h2>
      <ul>
        {tasks.map((t) => (
          <li key={t.id} style={{ fontWeight: t.done ? 700 : 400, marginTop: 4 }}>{t.label}</li>
        ))}
      </ul>
    </section>
  );
}
"""


def test_renders_props_and_class_helpers(button_source: str) -> None:
    """Destructuring defaults, cn() and handler removal."""
    html = render_static(button_source, "Button", {"label": "Save"})
    assert html == '<button class="px-4 py-2 rounded-md bg-blue-600 text-white">Save</button>'


def test_map_style_and_escaping() -> None:
    """Lists map to elements; style objects become CSS text; text is escaped."""
    tasks = [{"id": 1, "label": "Draft", "done": True}, {"id": 2, "label": "B & C", "done": False}]
    html = render_static(TASK_LIST, "TaskList", {"tasks": tasks})
    assert "<h2>Tasks</h2>" in html
    assert '<li style="font-weight: 700; margin-top: 4px">Draft</li>' in html
    assert "B &amp; C" in html
    assert "key=" not in html


def test_early_return_guard() -> None:
    """An `if (...) return` guard short-circuits the render."""
    assert render_static(TASK_LIST, "TaskList", {}) == '<p class="empty">Nothing yet</p>'


def test_state_hook_and_local_component() -> None:
    """useState literals and same-file components render."""
    source = """
function Badge({ children }) {
  return <span className="badge">{children}</span>;
}
export default function Counter() {
  const [count] = useState(3);
  return <div>Count: {count} <Badge>new</Badge></div>;
}
"""
    html = render_static(source, None)
    assert "Count: 3" in html
    assert '<span class="badge">new</span>' in html


def test_template_strings_and_ternaries() -> None:
    """Template literals and conditional expressions evaluate."""
    source = (
        "export const Pill = ({ n = 2 }) => "
        "<span data-count={n} aria-hidden>{`${n} ${n === 1 ? 'item' : 'items'}`}</span>;"
    )
    html = render_static(source, "Pill")
    assert html == '<span data-count="2" aria-hidden="true">2 items</span>'


def test_unsupported_hook_raises() -> None:
    """Hooks outside the supported set make the tier unviable."""
    source = "export function A() { const q = useQuery(); return <div>{q}</div>; }"
    with pytest.raises(StaticRenderError, match="useQuery"):
        render_static(source, "A")


def test_async_component_raises() -> None:
    """Async components are never rendered statically."""
    with pytest.raises(StaticRenderError):
        render_static("export default async function P() { return <div />; }", "P")


def test_unknown_component_raises() -> None:
    """A capitalized tag with no same-file definition is unviable."""
    with pytest.raises(StaticRenderError, match="Card"):
        render_static("export function A() { return <Card />; }", "A")


def test_empty_render_raises() -> None:
    """A component that renders nothing is not a preview."""
    with pytest.raises(StaticRenderError, match="rendered nothing"):
        render_static("export function A() { return null; }", "A")


def test_unsupported_constructs() -> None:
    """Class components are caught by the pre-check."""
    assert has_unsupported_constructs("class A extends React.Component { render() { return null; } }")
    assert not has_unsupported_constructs("export function A() { return <div />; }")


def test_style_to_css_units() -> None:
    """Numbers get px except unitless properties and zero; custom properties pass."""
    assert style_to_css({"zIndex": 2, "padding": 8, "margin": 0, "--gap": "1rem"}) == (
        "z-index: 2; padding: 8px; margin: 0; --gap: 1rem"
    )


def test_js_value_semantics() -> None:
    """Truthiness and string conversion follow JavaScript."""
    assert js_truthy([]) and js_truthy({})
    assert not js_truthy(0) and not js_truthy("")
    assert js_str(None) == ""
    assert js_str(3.0) == "3"
    assert js_str([1, "a"]) == "1,a"
    assert js_str(float("inf")) == "Infinity"
    assert js_str(float("-inf")) == "-Infinity"
    assert js_str(float("nan")) == "NaN"


# ---------------------------------------------------------------------------
# Property reads and builtins
# ---------------------------------------------------------------------------


def test_unknown_property_of_number_renders_nothing() -> None:
    """`n.length` on a number is undefined, not a method object."""
    html = render_static("export function A({ n }) { return <div>{n.length}</div>; }", "A", {"n": 5})
    assert html == "<div></div>"


def test_unknown_property_of_list_and_string_renders_nothing() -> None:
    """Only real methods resolve; other names read as undefined."""
    source = "export function A({ xs, s }) { return <p>{xs.total}|{s.size}|{xs.map}</p>; }"
    assert render_static(source, "A", {"xs": [1], "s": "ab"}) == "<p>||</p>"


def test_calling_unknown_method_raises() -> None:
    """A missing method is not callable."""
    with pytest.raises(StaticRenderError, match="Not callable"):
        render_static("export function A({ s }) { return <p>{s.normalize()}</p>; }", "A", {"s": "x"})


def test_index_reads_follow_js() -> None:
    """Fractional and negative indexes are undefined; numeric strings index."""
    source = 'export function A({ xs }) { return <p>{xs[1.5]}|{xs[-1]}|{xs["1"]}|{xs[1.0]}</p>; }'
    assert render_static(source, "A", {"xs": ["a", "b"]}) == "<p>||b|b</p>"


def test_number_text_follows_js() -> None:
    """Division by zero and NaN render the way JavaScript prints them."""
    source = 'export function A() { return <p>{10 / 0}|{"x" * 2}</p>; }'
    assert render_static(source, "A") == "<p>Infinity|NaN</p>"


def test_json_stringify_is_compact() -> None:
    """JSON.stringify uses JavaScript separators, with optional indent."""
    source = "export function A({ v }) { return <pre>{JSON.stringify(v)}</pre>; }"
    assert render_static(source, "A", {"v": {"a": [1, 2]}}) == '<pre>{"a":[1,2]}</pre>'
    assert js_json({"a": 1}, None, 2) == '{\n  "a": 1\n}'
    assert js_json(float("nan")) == "null"


def test_pad_methods() -> None:
    """padStart and padEnd fill to the target width."""
    source = 'export function A({ s }) { return <p>{s.padStart(4, "0")}-{s.padEnd(3)}|</p>; }'
    assert render_static(source, "A", {"s": "7"}) == "<p>0007-7  |</p>"


@pytest.mark.parametrize(
    "expression",
    [
        "s.repeat(100000000)",
        's.padStart(100000000, "x")',
        "s.padEnd(100000000)",
        "Array.from({ length: 100000000 }).length",
        "s.repeat(-1)",
    ],
)
def test_oversized_allocations_raise(expression: str) -> None:
    """Builtins refuse to build strings or arrays past the allocation cap."""
    source = f"export function A({{ s }}) {{ return <p>{{{expression}}}</p>; }}"
    with pytest.raises(StaticRenderError, match="length"):
        render_static(source, "A", {"s": "ab"})


def test_allocation_at_cap_is_allowed() -> None:
    """The cap is inclusive."""
    source = f"export function A() {{ return <p>{{Array.from({{ length: {MAX_ALLOCATION} }}).length}}</p>; }}"
    assert render_static(source, "A") == f"<p>{MAX_ALLOCATION}</p>"
