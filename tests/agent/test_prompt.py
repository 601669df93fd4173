"""Tests for prompt builder."""

from lumen.agent import ContextBuilder, PromptConfig
from lumen.agent.prompt import format_args_preview
from lumen.memory import Episode, EpisodeStep, Fact, FactType
from lumen.skills import Skill


def make_skill(name: str) -> Skill:
    return Skill(name=name, description=f"{name} skill", content=f"Do {name} things.")


def make_episode(task: str, n_steps: int = 1, summary: str | None = None) -> Episode:
    return Episode(
        id=task,
        task=task,
        steps=tuple(EpisodeStep(tool=f"tool{i}", arguments={"i": i}) for i in range(n_steps)),
        success=True,
        summary=summary,
    )


TOOLS = [{"type": "function", "function": {"name": "file_read", "description": "Read a file"}}]


class TestBuild:
    """Tests for ContextBuilder.build."""

    def test_base_prompt_lists_tools(self):
        prompt = ContextBuilder(tools_schema=TOOLS).build_simple("task")

        assert "- file_read: Read a file" in prompt

    def test_no_tools(self):
        assert "No tools available." in ContextBuilder().build_simple("task")

    def test_custom_base_prompt(self):
        builder = ContextBuilder(PromptConfig(base_prompt="BASE"))

        assert builder.build_simple("task") == "BASE"

    def test_empty_sections_omitted(self):
        builder = ContextBuilder(PromptConfig(base_prompt="BASE"))

        prompt = builder.build("task", [], [], [])

        assert prompt == "BASE"
        assert "## Relevant skills" not in prompt
        assert "## Past experience" not in prompt

    def test_section_order(self):
        builder = ContextBuilder(PromptConfig(base_prompt="BASE"))
        prompt = builder.build(
            "task",
            [make_skill("alpha")],
            [make_episode("earlier task")],
            [Fact(id="1", type=FactType.KNOWLEDGE, key="k", value="v")],
        )

        assert prompt.index("BASE") < prompt.index("## Relevant skills") < prompt.index("## Past experience")
        assert prompt.startswith("BASE\n\n## Relevant skills")

    def test_skills_section_format(self):
        builder = ContextBuilder(PromptConfig(base_prompt="BASE"))

        prompt = builder.build("task", [make_skill("alpha")])

        assert prompt == "BASE\n\n## Relevant skills\n\n### alpha\n\nDo alpha things."

    def test_skills_capped(self):
        builder = ContextBuilder(PromptConfig(base_prompt="BASE", max_skills=3))

        prompt = builder.build("task", [make_skill(n) for n in "abcde"])

        assert "### c" in prompt
        assert "### d" not in prompt

    def test_episodes_capped_and_formatted(self):
        builder = ContextBuilder(PromptConfig(base_prompt="BASE"))
        episodes = [make_episode("first", summary="went well"), make_episode("second"), make_episode("third")]

        prompt = builder.build("task", episodes=episodes)

        assert "**Task**: first" in prompt
        assert "**Summary**: went well" in prompt
        assert "**Task**: second" in prompt
        assert "third" not in prompt
        assert "  - tool0 (0)" in prompt

    def test_long_episode_collapsed(self):
        builder = ContextBuilder(PromptConfig(base_prompt="BASE"))

        prompt = builder.build("task", episodes=[make_episode("long", n_steps=8)])

        assert "  - tool4" in prompt
        assert "  - tool5" not in prompt
        assert "  - ... (8 steps total)" in prompt

    def test_facts_listed(self):
        builder = ContextBuilder(PromptConfig(base_prompt="BASE"))
        facts = [
            Fact(id="1", type=FactType.WEBSITE, key="github.com", value="use the API"),
            Fact(id="2", type=FactType.PREFERENCE, key="tone", value="brief"),
        ]

        prompt = builder.build("task", facts=facts)

        assert "### Known facts" in prompt
        assert "- **github.com**: use the API" in prompt
        assert "- **tone**: brief" in prompt
        assert "### Successful runs" not in prompt

    def test_build_is_deterministic(self):
        builder = ContextBuilder(tools_schema=TOOLS)
        args = ("task", [make_skill("a")], [make_episode("e")], [])

        assert builder.build(*args) == builder.build(*args)


class TestFormatArgsPreview:
    """Tests for format_args_preview."""

    def test_empty(self):
        assert format_args_preview({}) == ""

    def test_first_two_values(self):
        assert format_args_preview({"a": "x", "b": 2, "c": "ignored"}) == " (x, 2)"

    def test_long_string_cut(self):
        preview = format_args_preview({"url": "h" * 40})

        assert preview == f" ({'h' * 30}...)"
