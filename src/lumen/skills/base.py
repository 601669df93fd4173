"""Core skill types.

- Skill: A capability guide loaded from a SKILL.md file
- SkillMatch: A skill paired with its relevance score for a task
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Skill:
    """A named capability guide.

    Attributes:
        name: Unique identifier, e.g. "github-browse".
        description: Matched against tasks to decide relevance.
        content: Markdown guide injected into the system prompt.
        path: SKILL.md file the skill was loaded from, if any.
    """

    name: str
    description: str
    content: str
    path: Path | None = None


@dataclass(frozen=True)
class SkillMatch:
    """A skill scored against a task."""

    skill: Skill
    score: float
