"""Settings loader.

Loads settings from ~/.lumen/config.json, then applies environment
overrides. A missing or unreadable file means defaults.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from .agent import DEFAULT_MODEL, AgentConfig
from .skills import BUNDLED_SKILLS_DIR

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".lumen"
DEFAULT_CONFIG_PATH = DEFAULT_DATA_DIR / "config.json"

_PATH_FIELDS = ("data_dir", "workspace_dir", "log_dir", "task_log_dir")


@dataclass
class Settings:
    """Runtime settings.

    Attributes:
        model: Chat model name.
        max_iterations: Iteration cap for one task.
        temperature: Sampling temperature.
        max_tokens: Completion token cap per reply.
        data_dir: Directory holding memory.json and user skills.
        skill_dirs: Skill roots, later roots override earlier ones.
            Defaults to the bundled skills plus data_dir/skills.
        workspace_dir: Root for file and code tools.
        log_dir: Directory for the JSONL event log. Defaults to data_dir/logs.
        task_log_dir: Directory for per-task Markdown logs.
        max_skills: Skills shown in the system prompt.
        max_episodes: Past episodes shown in the system prompt.
        max_step_result_length: Step result cap inside stored episodes.
        code_timeout: Seconds before a code_run process is killed.
        record_failures: Also store episodes for runs that did not finish.
    """

    model: str = DEFAULT_MODEL
    max_iterations: int = 20
    temperature: float = 0.7
    max_tokens: int = 4096
    data_dir: Path = DEFAULT_DATA_DIR
    skill_dirs: list[Path] | None = None
    workspace_dir: Path = Path("workspace")
    log_dir: Path | None = None
    task_log_dir: Path = Path("logs")
    max_skills: int = 3
    max_episodes: int = 2
    max_step_result_length: int = 500
    code_timeout: float = 30.0
    record_failures: bool = False

    def __post_init__(self) -> None:
        """Fill derived paths and validate ranges."""
        self.data_dir = Path(self.data_dir).expanduser()
        if self.log_dir is None:
            self.log_dir = self.data_dir / "logs"
        if self.skill_dirs is None:
            self.skill_dirs = [BUNDLED_SKILLS_DIR, self.user_skills_dir]

        self.log_dir = Path(self.log_dir).expanduser()
        self.workspace_dir = Path(self.workspace_dir).expanduser()
        self.task_log_dir = Path(self.task_log_dir).expanduser()
        self.skill_dirs = [Path(d).expanduser() for d in self.skill_dirs]

        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if self.max_skills < 0 or self.max_episodes < 0:
            raise ValueError("max_skills and max_episodes must not be negative")
        if self.max_step_result_length < 1:
            raise ValueError("max_step_result_length must be at least 1")
        if self.code_timeout <= 0:
            raise ValueError("code_timeout must be positive")

    @property
    def user_skills_dir(self) -> Path:
        """Where exported skills are installed."""
        return self.data_dir / "skills"

    def agent_config(self) -> AgentConfig:
        """The AgentConfig matching these settings."""
        return AgentConfig(
            model=self.model,
            max_iterations=self.max_iterations,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            max_skills=self.max_skills,
            max_episodes=self.max_episodes,
            max_step_result_length=self.max_step_result_length,
            record_failures=self.record_failures,
        )


def load_settings(config_path: Path | None = None) -> Settings:
    """Load Settings from a JSON file and the environment.

    The config file is a flat object keyed by Settings field names:
    ```json
    {
      "model": "llama-3.3-70b-versatile",
      "max_iterations": 30,
      "skill_dirs": ["~/.lumen/skills", "~/my-skills"]
    }
    ```

    Environment variables LUMEN_MODEL, LUMEN_MAX_ITERATIONS, LUMEN_WORKSPACE
    and LUMEN_DATA_DIR override the file.

    Args:
        config_path: Path to config file. Uses DEFAULT_CONFIG_PATH if None.

    Returns:
        Settings instance with loaded values.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    data: Any = {}

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
    else:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
        except OSError as e:
            logger.warning("Cannot read %s: %s. Using defaults.", path, e)

    if not isinstance(data, dict):
        logger.warning("Config in %s is not an object. Using defaults.", path)
        data = {}

    values = _parse_config(data)
    values.update(_env_overrides())

    try:
        return Settings(**values)
    except ValueError as e:
        logger.warning("Invalid settings (%s). Using defaults.", e)
        return Settings()


def _parse_config(data: dict[str, Any]) -> dict[str, Any]:
    """Keep known keys whose values have the right type.

    Args:
        data: Parsed JSON data.

    Returns:
        Keyword arguments for Settings.
    """
    defaults = Settings()
    values: dict[str, Any] = {}

    for f in fields(Settings):
        if f.name not in data:
            continue
        value = data[f.name]
        default = getattr(defaults, f.name)

        if f.name == "skill_dirs":
            valid = isinstance(value, list) and all(isinstance(d, str) for d in value)
        elif f.name in _PATH_FIELDS:
            valid = isinstance(value, str)
        elif isinstance(default, bool):
            valid = isinstance(value, bool)
        elif isinstance(default, int):
            valid = isinstance(value, int) and not isinstance(value, bool)
        elif isinstance(default, float):
            valid = isinstance(value, (int, float)) and not isinstance(value, bool)
        else:
            valid = isinstance(value, str)

        if not valid:
            logger.warning("Ignoring invalid %s in config: %r", f.name, value)
            continue

        values[f.name] = value

    return values


def _env_overrides() -> dict[str, Any]:
    """Settings values taken from LUMEN_* environment variables."""
    values: dict[str, Any] = {}

    model = os.getenv("LUMEN_MODEL")
    if model:
        values["model"] = model

    max_iterations = os.getenv("LUMEN_MAX_ITERATIONS")
    if max_iterations:
        try:
            values["max_iterations"] = int(max_iterations)
        except ValueError:
            logger.warning("Ignoring LUMEN_MAX_ITERATIONS=%r", max_iterations)

    workspace = os.getenv("LUMEN_WORKSPACE")
    if workspace:
        values["workspace_dir"] = workspace

    data_dir = os.getenv("LUMEN_DATA_DIR")
    if data_dir:
        values["data_dir"] = data_dir

    return values
