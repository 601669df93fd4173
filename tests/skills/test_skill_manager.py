"""Tests for SkillManager."""

from types import MappingProxyType

import pytest

from lumen.skills import BUNDLED_SKILLS_DIR, SkillManager, SkillParseError


class TestLoad:
    """Tests for SkillManager.load."""

    def test_loads_skills(self, tmp_path, make_skill):
        make_skill(tmp_path, "alpha", "first skill")
        make_skill(tmp_path, "beta", "second skill")

        manager = SkillManager()
        skills = manager.load([tmp_path])

        assert set(skills) == {"alpha", "beta"}
        assert manager.skill_count == 2
        assert isinstance(skills, MappingProxyType)

    def test_missing_root_is_empty(self, tmp_path):
        manager = SkillManager()
        assert dict(manager.load([tmp_path / "nope"])) == {}

    def test_invalid_skill_skipped(self, tmp_path, make_skill):
        make_skill(tmp_path, "good", "fine")
        bad = tmp_path / "bad"
        bad.mkdir()
        (bad / "SKILL.md").write_text("no frontmatter here")

        manager = SkillManager()
        manager.load([tmp_path])

        assert manager.get("good") is not None
        assert manager.get("bad") is None

    def test_directories_without_skill_file_ignored(self, tmp_path, make_skill):
        make_skill(tmp_path, "real", "fine")
        (tmp_path / "empty").mkdir()
        (tmp_path / "stray.md").write_text("not a skill dir")

        manager = SkillManager()
        manager.load([tmp_path])

        assert [s.name for s in manager.list_skills()] == ["real"]

    def test_later_root_overrides(self, tmp_path, make_skill):
        first = tmp_path / "first"
        second = tmp_path / "second"
        make_skill(first, "shared", "from first")
        make_skill(second, "shared", "from second")

        manager = SkillManager()
        manager.load([first, second])

        assert manager.get("shared").description == "from second"

    def test_reload_replaces_map(self, tmp_path, make_skill):
        make_skill(tmp_path / "a", "one", "first")
        make_skill(tmp_path / "b", "two", "second")

        manager = SkillManager()
        manager.load([tmp_path / "a"])
        old = manager.skills
        manager.load([tmp_path / "b"])

        assert "one" in old
        assert "one" not in manager.skills
        assert "two" in manager.skills

    def test_map_is_read_only(self, tmp_path, make_skill):
        make_skill(tmp_path, "alpha", "first")
        manager = SkillManager()
        manager.load([tmp_path])

        with pytest.raises(TypeError):
            manager.skills["new"] = None


class TestMatch:
    """Tests for SkillManager.match."""

    def test_github_task_matches_github_skill(self, tmp_path, make_skill):
        make_skill(tmp_path, "github-browse", "Browse github repositories and trending pages")
        make_skill(tmp_path, "cooking", "Recipes for dinner")

        manager = SkillManager()
        manager.load([tmp_path])
        matches = manager.match("open github and find trending repositories")

        assert [m.skill.name for m in matches] == ["github-browse"]
        assert matches[0].score > 0.1

    def test_quoted_trigger_matches_github_page_task(self, tmp_path, make_skill):
        make_skill(tmp_path, "github-browse", "'Use when asked to \"github\"'")

        manager = SkillManager()
        manager.load([tmp_path])
        matches = manager.match("open github.com and read the trending page", 3)

        assert [m.skill.name for m in matches] == ["github-browse"]
        assert matches[0].score > 0.1

    def test_sorted_descending_and_limited(self, tmp_path, make_skill):
        make_skill(tmp_path, "a-weak", "github issues labels milestones")
        make_skill(tmp_path, "b-strong", "github issues")
        make_skill(tmp_path, "c-mid", "github issues labels")

        manager = SkillManager()
        manager.load([tmp_path])
        matches = manager.match("list github issues", limit=2)

        assert [m.skill.name for m in matches] == ["b-strong", "c-mid"]
        assert matches[0].score >= matches[1].score

    def test_ties_keep_load_order(self, tmp_path, make_skill):
        make_skill(tmp_path, "first", "github")
        make_skill(tmp_path, "second", "github")

        manager = SkillManager()
        manager.load([tmp_path])

        assert [m.skill.name for m in manager.match("github")] == ["first", "second"]

    def test_empty_task(self, tmp_path, make_skill):
        make_skill(tmp_path, "alpha", "github")
        manager = SkillManager()
        manager.load([tmp_path])

        assert manager.match("") == []

    def test_no_skills(self):
        assert SkillManager().match("anything") == []


class TestInstall:
    """Tests for SkillManager.install."""

    DOCUMENT = "---\nname: my-skill\ndescription: does things\n---\n\nbody\n"

    def test_writes_skill(self, tmp_path):
        manager = SkillManager()
        path = manager.install(self.DOCUMENT, tmp_path)

        assert path == tmp_path / "my-skill" / "SKILL.md"
        manager.load([tmp_path])
        assert manager.get("my-skill").content == "body"

    def test_existing_dir_raises(self, tmp_path):
        manager = SkillManager()
        manager.install(self.DOCUMENT, tmp_path)

        with pytest.raises(FileExistsError):
            manager.install(self.DOCUMENT, tmp_path)

    def test_invalid_document_raises(self, tmp_path):
        with pytest.raises(SkillParseError):
            SkillManager().install("no frontmatter", tmp_path)

    @pytest.mark.parametrize("name", ["../escaped", "nested/dir", ".."])
    def test_unsafe_name_rejected(self, tmp_path, name):
        root = tmp_path / "skills"
        document = f"---\nname: '{name}'\ndescription: does things\n---\n\nbody\n"

        with pytest.raises(SkillParseError, match="Invalid skill name"):
            SkillManager().install(document, root)

        assert not (tmp_path / "escaped").exists()
        assert not (root / "nested").exists()


class TestBundledSkills:
    """Tests for the skills shipped with the package."""

    def test_bundled_dir_exists(self):
        assert BUNDLED_SKILLS_DIR.is_dir()

    def test_bundled_skills_load(self):
        manager = SkillManager()
        manager.load([BUNDLED_SKILLS_DIR])

        assert manager.get("github-browse") is not None
        assert manager.skill_count >= 3

    def test_github_task_picks_bundled_github_skill(self):
        manager = SkillManager()
        manager.load([BUNDLED_SKILLS_DIR])

        matches = manager.match("show me the github trending repositories today")

        assert matches
        assert matches[0].skill.name == "github-browse"
