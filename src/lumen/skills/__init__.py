"""Skills: reusable capability guides matched to tasks by keyword overlap.

A skill is a SKILL.md file whose frontmatter carries a ``name`` and a
``description``. The description decides when the skill is relevant; the body
is injected into the system prompt as guidance.
"""

from .base import Skill, SkillMatch
from .manager import BUNDLED_SKILLS_DIR, SkillManager
from .matcher import SCORE_THRESHOLD, score_skill
from .parser import (
    SkillParseError,
    SkillValidationError,
    parse_skill_content,
    parse_skill_file,
    render_skill_document,
)

__all__ = [
    "BUNDLED_SKILLS_DIR",
    "SCORE_THRESHOLD",
    "Skill",
    "SkillManager",
    "SkillMatch",
    "SkillParseError",
    "SkillValidationError",
    "parse_skill_content",
    "parse_skill_file",
    "render_skill_document",
    "score_skill",
]
