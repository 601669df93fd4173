"""Parser for SKILL.md files with YAML frontmatter.

Reads skill definition files and extracts metadata (frontmatter) and
the guide text (body). Uses python-frontmatter for robust parsing.
"""

from pathlib import Path
from typing import Any

import frontmatter

from ..errors import LumenError
from .base import Skill


class SkillParseError(LumenError):
    """Raised when a SKILL.md file cannot be parsed."""

    pass


class SkillValidationError(SkillParseError):
    """Raised when SKILL.md frontmatter fails validation."""

    pass


def _required_text(meta: dict[str, Any], field: str) -> str:
    """Return a required frontmatter field as a non-empty string."""
    if field not in meta:
        raise SkillValidationError(f"Missing required field: {field}")

    raw = meta[field]
    if not isinstance(raw, (str, int, float)):
        raise SkillValidationError(
            f"Field '{field}' must be a string, got {type(raw).__name__}"
        )

    value = str(raw).strip()
    if not value:
        raise SkillValidationError(f"Field '{field}' cannot be empty")
    return value


def parse_skill_file(path: Path) -> Skill:
    """Parse a SKILL.md file into a Skill.

    Args:
        path: Path to the SKILL.md file.

    Returns:
        The parsed Skill, with ``path`` set.

    Raises:
        SkillParseError: If the file cannot be read or parsed.
        SkillValidationError: If required fields are missing.
    """
    if not path.is_file():
        raise SkillParseError(f"Skill file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SkillParseError(f"Cannot read skill file {path}: {e}") from e

    return parse_skill_content(content, path=path)


def parse_skill_content(content: str, path: Path | None = None) -> Skill:
    """Parse SKILL.md content into a Skill.

    Args:
        content: The raw content of a SKILL.md file.
        path: Optional origin path stored on the skill.

    Raises:
        SkillParseError: If the content cannot be parsed.
        SkillValidationError: If required fields are missing.
    """
    try:
        post = frontmatter.loads(content)
    except Exception as e:
        raise SkillParseError(f"Failed to parse frontmatter: {e}") from e

    meta = post.metadata
    if not meta:
        raise SkillParseError("Missing frontmatter block")

    return Skill(
        name=_required_text(meta, "name"),
        description=_required_text(meta, "description"),
        content=post.content.strip(),
        path=path,
    )


def render_skill_document(name: str, description: str, body: str) -> str:
    """Render a SKILL.md document that parse_skill_content can read back."""
    post = frontmatter.Post(body.strip() + "\n", name=name, description=description)
    return frontmatter.dumps(post, sort_keys=False) + "\n"
