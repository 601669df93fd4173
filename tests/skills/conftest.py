"""Shared fixtures for skill tests."""

from pathlib import Path

import pytest


def create_skill_dir(base: Path, name: str, description: str, body: str | None = None) -> Path:
    """Helper to create a skill directory with SKILL.md."""
    skill_dir = base / name
    skill_dir.mkdir(parents=True)
    content = f"""---
name: {name}
description: {description}
---

{body or f"Instructions for {name}"}
"""
    (skill_dir / "SKILL.md").write_text(content)
    return skill_dir


@pytest.fixture
def make_skill():
    return create_skill_dir
