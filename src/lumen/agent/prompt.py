"""Prompt builder for the agent."""

from dataclasses import dataclass
from typing import Any, Sequence

from ..memory.models import Episode, Fact
from ..skills.base import Skill

BASE_PROMPT_TEMPLATE = """You are Lumen, an assistant that completes tasks by calling tools.

You have access to the following tools:
{tools_description}

Principles:
- Work step by step and call one tool at a time when later steps depend on earlier results.
- Read a tool's output before deciding what to do next.
- When a tool reports an error, adjust the arguments or try another approach.
- Save durable information the user will want later with remember_fact when it is available.
- When the task is done, reply with the final answer and no tool call.

If you cannot complete a task with the available tools, explain why."""

MAX_STEPS_SHOWN = 5
MAX_PREVIEW_ARGS = 2
MAX_PREVIEW_CHARS = 30


@dataclass
class PromptConfig:
    """Configuration for ContextBuilder.

    ``base_prompt`` of None means the default base prompt, rendered with the
    names and descriptions of the tools in the catalog.
    """

    base_prompt: str | None = None
    skill_section_title: str = "## Relevant skills"
    memory_section_title: str = "## Past experience"
    episodes_heading: str = "### Successful runs of similar tasks"
    facts_heading: str = "### Known facts"
    max_skills: int = 3
    max_episodes: int = 2


def describe_tools(tools_schema: list[dict[str, Any]]) -> str:
    """One ``- name: description`` line per tool."""
    if not tools_schema:
        return "No tools available."
    return "\n".join(
        f"- {t['function']['name']}: {t['function']['description']}"
        for t in tools_schema
    )


def format_args_preview(arguments: dict[str, Any]) -> str:
    """Short preview of the first argument values, e.g. ``" (a.txt, 42)"``."""
    if not arguments:
        return ""

    values = []
    for value in list(arguments.values())[:MAX_PREVIEW_ARGS]:
        if isinstance(value, str):
            if len(value) > MAX_PREVIEW_CHARS:
                value = value[:MAX_PREVIEW_CHARS] + "..."
            values.append(value)
        else:
            values.append(str(value))

    return f" ({', '.join(values)})"


class ContextBuilder:
    """Assembles the system prompt from the base prompt, skills and memory.

    build() is pure: the same inputs always give the same prompt.
    """

    def __init__(
        self,
        config: PromptConfig | None = None,
        tools_schema: list[dict[str, Any]] | None = None,
    ) -> None:
        self.config = config or PromptConfig()
        if self.config.base_prompt is not None:
            self.base_prompt = self.config.base_prompt
        else:
            self.base_prompt = BASE_PROMPT_TEMPLATE.format(
                tools_description=describe_tools(tools_schema or [])
            )

    def build(
        self,
        task: str,
        skills: Sequence[Skill] = (),
        episodes: Sequence[Episode] = (),
        facts: Sequence[Fact] = (),
    ) -> str:
        """Build the system prompt for a task.

        Args:
            task: The task text. Selection of skills and memory happens
                upstream; the task is accepted for symmetry with the caller.
            skills: Matched skills, best first.
            episodes: Recalled episodes, best first.
            facts: Facts relevant to the task.

        Returns:
            Sections joined by a blank line. Empty sections are omitted.
        """
        sections = [self.base_prompt]

        if skills:
            sections.append(self._skills_section(skills))

        if episodes or facts:
            sections.append(self._memory_section(episodes, facts))

        return "\n\n".join(sections)

    def build_simple(self, task: str) -> str:
        """Build a prompt with no skills and no memory."""
        return self.build(task)

    def _skills_section(self, skills: Sequence[Skill]) -> str:
        lines = [self.config.skill_section_title]
        for skill in list(skills)[: self.config.max_skills]:
            lines.extend(["", f"### {skill.name}", "", skill.content])
        return "\n".join(lines)

    def _memory_section(self, episodes: Sequence[Episode], facts: Sequence[Fact]) -> str:
        lines = [self.config.memory_section_title]

        if episodes:
            lines.extend(["", self.config.episodes_heading, ""])
            for episode in list(episodes)[: self.config.max_episodes]:
                lines.append(f"**Task**: {episode.task}")
                if episode.summary:
                    lines.append(f"**Summary**: {episode.summary}")
                lines.append("**Steps**:")
                for step in episode.steps[:MAX_STEPS_SHOWN]:
                    lines.append(f"  - {step.tool}{format_args_preview(step.arguments)}")
                if len(episode.steps) > MAX_STEPS_SHOWN:
                    lines.append(f"  - ... ({len(episode.steps)} steps total)")
                lines.append("")

        if facts:
            lines.extend(["", self.config.facts_heading, ""])
            for fact in facts:
                lines.append(f"- **{fact.key}**: {fact.value}")

        return "\n".join(lines)
