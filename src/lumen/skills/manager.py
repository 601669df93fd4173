"""SkillManager: discovery, lookup and task matching for skills.

Skills are loaded from an ordered list of root directories. Each root holds
one subdirectory per skill containing a SKILL.md file. Roots later in the
list override earlier ones when two skills share a name.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping

from .base import Skill, SkillMatch
from .matcher import SCORE_THRESHOLD, score_skill
from .parser import SkillParseError, parse_skill_content, parse_skill_file

logger = logging.getLogger(__name__)

BUNDLED_SKILLS_DIR = Path(__file__).parent / "bundled"


class SkillManager:
    """Holds the current set of skills and matches them against tasks.

    Example:
        manager = SkillManager()
        manager.load([BUNDLED_SKILLS_DIR, Path("~/.lumen/skills")])

        for match in manager.match("open github.com and read trending"):
            print(match.skill.name, match.score)
    """

    def __init__(self, threshold: float = SCORE_THRESHOLD) -> None:
        self.threshold = threshold
        self._skills: Mapping[str, Skill] = MappingProxyType({})

    def load(self, roots: list[Path]) -> Mapping[str, Skill]:
        """Rebuild the skill map from the given roots.

        A missing or unreadable root contributes nothing; an invalid SKILL.md
        is logged and skipped. The previous map is replaced wholesale.

        Returns:
            Read-only mapping of skill name to Skill.
        """
        skills: dict[str, Skill] = {}

        for root in roots:
            root = Path(root).expanduser()
            for skill_file in self._scan_root(root):
                try:
                    skill = parse_skill_file(skill_file)
                except SkillParseError as e:
                    logger.warning("Failed to load skill from %s: %s", skill_file, e)
                    continue
                if skill.name in skills:
                    logger.debug("Skill %s overridden by %s", skill.name, skill_file)
                skills[skill.name] = skill

        self._skills = MappingProxyType(skills)
        logger.info("Loaded %d skills", len(skills))
        return self._skills

    def _scan_root(self, root: Path) -> Iterator[Path]:
        """Yield SKILL.md files directly under root's subdirectories."""
        try:
            entries = sorted(root.iterdir())
        except OSError:
            return

        for entry in entries:
            skill_file = entry / "SKILL.md"
            if entry.is_dir() and skill_file.is_file():
                yield skill_file

    @property
    def skills(self) -> Mapping[str, Skill]:
        """Read-only mapping of loaded skills."""
        return self._skills

    def get(self, name: str) -> Skill | None:
        """Get a skill by name."""
        return self._skills.get(name)

    def list_skills(self) -> list[Skill]:
        """List loaded skills in load order."""
        return list(self._skills.values())

    @property
    def skill_count(self) -> int:
        """Return the number of loaded skills."""
        return len(self._skills)

    def match(self, task: str, limit: int = 3) -> list[SkillMatch]:
        """Find skills relevant to a task.

        Args:
            task: The task description.
            limit: Maximum number of matches to return.

        Returns:
            Matches scoring above the threshold, highest score first. Equal
            scores keep load order.
        """
        matches: list[SkillMatch] = []

        for skill in self._skills.values():
            score = score_skill(task, skill.description)
            if score > self.threshold:
                matches.append(SkillMatch(skill=skill, score=score))

        # Stable sort: ties keep load order
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:limit]

    def install(self, document: str, root: Path) -> Path:
        """Write a SKILL.md document under root/<skill name>.

        The skill is not added to the current map; call load() again to
        pick it up.

        Args:
            document: Full SKILL.md text, frontmatter included.
            root: Skills root directory to install into.

        Returns:
            Path of the written SKILL.md.

        Raises:
            SkillParseError: If the document is not a valid skill, or its
                name is not a single directory name.
            FileExistsError: If a skill directory with that name exists.
        """
        skill = parse_skill_content(document)
        root = Path(root).expanduser()
        skill_dir = root / skill.name

        # The loader only scans direct children of a root
        if skill_dir.resolve().parent != root.resolve():
            raise SkillParseError(f"Invalid skill name for installation: {skill.name!r}")
        if skill_dir.exists():
            raise FileExistsError(f"Skill directory already exists: {skill_dir}")

        skill_dir.mkdir(parents=True)
        skill_file = skill_dir / "SKILL.md"
        skill_file.write_text(document, encoding="utf-8")
        return skill_file
