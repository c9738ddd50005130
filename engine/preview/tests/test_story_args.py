"""Tests for author-declared example extraction from Storybook stories."""

from __future__ import annotations

from engine.preview.story_args import extract_story_args, find_stories_file, parse_stories

CSF3 = """
import type { Meta, StoryObj } from "@storybook/react";
import { Button } from "./button";

const meta = {
  title: "UI/Button",
  component: Button,
  args: { size: "md" },
} satisfies Meta<typeof Button>;
export default meta;

type Story = StoryObj<typeof meta>;

export const Secondary: Story = { args: { label: "Cancel", variant: "secondary" } };
export const Primary: Story = { args: { label: "Save", onClick: () => {} } };
"""

CSF2 = """
import { Button } from "./button";
export default { title: "Button" };
const Template = (args) => <Button {...args} />;
export const Ghost = Template.bind({});
Ghost.args = { label: "Skip" };
export const Default = Template.bind({});
Default.args = { label: "Go", count: 2 };
"""


def test_csf3_prefers_primary_and_merges_meta() -> None:
    """Primary wins over earlier stories; meta args sit underneath; functions become null."""
    extraction = parse_stories(CSF3)
    assert [s.name for s in extraction.stories] == ["Secondary", "Primary"]
    assert extraction.meta_args == {"size": "md"}
    assert extraction.default_args == {"size": "md", "label": "Save", "onClick": None}


def test_csf2_args_assignments() -> None:
    """`Story.args = {...}` assignments are collected; Default wins."""
    extraction = parse_stories(CSF2)
    assert [s.name for s in extraction.stories] == ["Ghost", "Default"]
    assert extraction.default_args == {"label": "Go", "count": 2}


def test_first_story_when_no_preferred_name() -> None:
    """Without Default or Primary the first story is used."""
    source = 'export default { args: { tone: "info" } };\nexport const Large = { args: { size: "lg" } };'
    assert parse_stories(source).default_args == {"tone": "info", "size": "lg"}


def test_meta_args_alone() -> None:
    """Meta args are returned when no story declares its own."""
    assert parse_stories('export default { args: { open: true } };').default_args == {"open": True}


def test_no_args_at_all() -> None:
    """A stories file without any args yields None."""
    assert parse_stories('export default { title: "X" };').default_args is None


def test_find_stories_file_locations() -> None:
    """Stories beside the component and in __stories__/ are found."""
    source_map = {
        "components/ui/button.tsx": "",
        "components/ui/button.stories.tsx": CSF3,
        "components/card.tsx": "",
        "components/__stories__/card.stories.jsx": CSF2,
    }
    assert find_stories_file("components/ui/button.tsx", source_map) == "components/ui/button.stories.tsx"
    assert find_stories_file("components/card.tsx", source_map) == "components/__stories__/card.stories.jsx"
    assert find_stories_file("components/none.tsx", source_map) is None


def test_extract_story_args_without_file() -> None:
    """No stories file means no declared examples."""
    extraction = extract_story_args("components/ui/button.tsx", {"components/ui/button.tsx": ""})
    assert not extraction.has_stories
    assert extraction.default_args is None


def test_extract_story_args_with_file() -> None:
    """The stories path is recorded alongside the parsed args."""
    source_map = {"components/ui/button.tsx": "", "components/ui/button.stories.tsx": CSF3}
    extraction = extract_story_args("components/ui/button.tsx", source_map)
    assert extraction.has_stories
    assert extraction.path == "components/ui/button.stories.tsx"
