"""Tests for the Demo Data Synthesizer."""

from __future__ import annotations

import pytest

from backend.services.demo_data import (
    DemoDataSynthesizer,
    SynthesisJob,
    force_overlay_visibility,
    is_function_string,
    nullify_function_strings,
)
from engine.preview.errors import ServiceError, SynthesisError
from engine.preview.types import ComponentRecord, PropSpec, RepoContext

STORIES = """
import type { Meta, StoryObj } from "@storybook/react";
import { Card } from "./card";

const meta = { component: Card, args: { count: 3 } } satisfies Meta<typeof Card>;
export default meta;

export const Primary: StoryObj<typeof meta> = { args: { title: "Quarterly report", onOpen: () => {} } };
"""


def card_record() -> ComponentRecord:
    return ComponentRecord(
        file_path="components/card.tsx",
        name="Card",
        props=[PropSpec("title", "string", required=True), PropSpec("count", "number")],
    )


@pytest.mark.asyncio(loop_scope="session")
class TestSynthesize:
    async def test_empty_schema_makes_no_call(self, scripted):
        """A prop-less component gets {} at high confidence for free."""
        record = ComponentRecord(file_path="components/logo.tsx", name="Logo")

        demo = await DemoDataSynthesizer(scripted).synthesize(record, "export function Logo() {}", {})

        assert demo.props == {}
        assert demo.confidence == "high"
        assert demo.source == "empty"
        assert scripted.calls == []

    async def test_declared_story_args_win(self, scripted, card_source):
        """Storybook args are used unconditionally; functions become null."""
        source_map = {"components/card.tsx": card_source, "components/card.stories.tsx": STORIES}

        demo = await DemoDataSynthesizer(scripted).synthesize(card_record(), card_source, source_map)

        assert demo.source == "declared"
        assert demo.confidence == "high"
        assert demo.props == {"count": 3, "title": "Quarterly report", "onOpen": None}
        assert scripted.calls == []

    async def test_generated_props(self, scripted, card_source):
        scripted.queue(
            "demo_props",
            {
                "props": {"title": "Team inbox", "count": 12, "onOpen": "() => {}"},
                "confidence": "certain",
                "notes": "typical unread count",
            },
        )

        demo = await DemoDataSynthesizer(scripted).synthesize(
            card_record(), card_source, {"components/card.tsx": card_source}, RepoContext("acme", "web")
        )

        assert demo.source == "generated"
        assert demo.props == {"title": "Team inbox", "count": 12, "onOpen": None}
        assert demo.confidence == "medium"
        assert demo.notes == "typical unread count"
        prompt = scripted.calls_for("demo_props")[0]
        assert "acme/web" in prompt
        assert '"name": "title"' in prompt

    async def test_service_failure_is_synthesis_error(self, scripted, card_source):
        scripted.queue("demo_props", ServiceError("rate limited", retryable=True))
        with pytest.raises(SynthesisError, match="demo props unavailable"):
            await DemoDataSynthesizer(scripted).synthesize(card_record(), card_source, {})

    async def test_empty_answer_is_synthesis_error(self, scripted, card_source):
        scripted.queue("demo_props", {"props": {}, "confidence": "low"})
        with pytest.raises(SynthesisError, match="empty demo props"):
            await DemoDataSynthesizer(scripted).synthesize(card_record(), card_source, {})

    async def test_overlay_opened(self, scripted):
        """A generated map that leaves a dialog closed is forced open."""
        record = ComponentRecord(
            file_path="components/confirm-dialog.tsx",
            name="ConfirmDialog",
            props=[PropSpec("open", "boolean"), PropSpec("title", "string")],
        )
        scripted.queue("demo_props", {"props": {"title": "Delete project?"}, "confidence": "high"})

        demo = await DemoDataSynthesizer(scripted).synthesize(record, "export function ConfirmDialog() {}", {})

        assert demo.props == {"title": "Delete project?", "open": True}


@pytest.mark.asyncio(loop_scope="session")
class TestSynthesizeMany:
    async def test_results_line_up_with_jobs(self, scripted, card_source):
        """Failures come back in place as exceptions; other jobs still succeed."""
        scripted.queue(
            "demo_props",
            {"props": {"title": "A"}, "confidence": "high"},
            ServiceError("boom"),
            {"props": {"title": "C"}, "confidence": "low"},
        )
        jobs = [SynthesisJob(card_record(), card_source) for _ in range(3)]

        results = await DemoDataSynthesizer(scripted).synthesize_many(jobs, {}, batch_size=2, pause_s=0)

        assert results[0].props == {"title": "A"}
        assert isinstance(results[1], SynthesisError)
        assert results[2].props == {"title": "C"}
        assert len(scripted.calls_for("demo_props")) == 3


class TestHelpers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("() => {}", True),
            ("(e) => console.log(e)", True),
            ("async () => null", True),
            ("function () {}", True),
            ("value => value", True),
            ("Save changes", False),
            (42, False),
        ],
    )
    def test_is_function_string(self, value, expected):
        assert is_function_string(value) is expected

    def test_nullify_function_strings(self):
        assert nullify_function_strings({"a": "() => 1", "b": "text"}) == {"a": None, "b": "text"}

    def test_overlay_keeps_explicit_false(self):
        """A value the map sets is never overridden."""
        schema = [PropSpec("isOpen", "boolean")]
        assert force_overlay_visibility("SettingsModal", schema, {"isOpen": False}) == {"isOpen": False}

    def test_non_overlay_untouched(self):
        schema = [PropSpec("open", "boolean")]
        assert force_overlay_visibility("Accordion", schema, {}) == {}
