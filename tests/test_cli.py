"""Tests for CLI."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from lumen.agent import AgentResult, StopReason
from lumen.cli import CLI, create_parser, format_result, run, run_task
from lumen.config import load_settings
from lumen.logging import JSONLLogger
from lumen.memory import EpisodeStep, MemoryManager


@pytest.fixture
def config_path(tmp_path, monkeypatch) -> Path:
    """Config pointing every directory into tmp_path."""
    for name in ("LUMEN_MODEL", "LUMEN_MAX_ITERATIONS", "LUMEN_WORKSPACE", "LUMEN_DATA_DIR"):
        monkeypatch.delenv(name, raising=False)

    skills = tmp_path / "skills" / "github-browse"
    skills.mkdir(parents=True)
    (skills / "SKILL.md").write_text(
        "---\nname: github-browse\ndescription: Browse github trending repositories\n---\nUse the API.\n"
    )

    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "data_dir": str(tmp_path / "data"),
        "skill_dirs": [str(tmp_path / "skills")],
        "workspace_dir": str(tmp_path / "workspace"),
        "task_log_dir": str(tmp_path / "task-logs"),
    }))
    return path


def lumen(config_path: Path, *args: str) -> int:
    return run(["--config", str(config_path), *args])


class TestParser:
    def test_run_command(self):
        args = create_parser().parse_args(["run", "do it"])

        assert args.command == "run"
        assert args.task == "do it"

    def test_no_command_means_repl(self):
        assert create_parser().parse_args([]).command is None


class TestSkillsCommands:
    def test_list(self, config_path, capsys):
        assert lumen(config_path, "skills", "list") == 0

        out = capsys.readouterr().out
        assert "github-browse" in out
        assert "Total: 1 skill(s)" in out

    def test_info(self, config_path, capsys):
        assert lumen(config_path, "skills", "info", "github-browse") == 0

        out = capsys.readouterr().out
        assert "Description: Browse github trending repositories" in out
        assert "Use the API." in out

    def test_info_missing(self, config_path, capsys):
        assert lumen(config_path, "skills", "info", "nope") == 1
        assert "not found" in capsys.readouterr().out

    def test_match(self, config_path, capsys):
        assert lumen(config_path, "skills", "match", "show github trending") == 0

        assert "github-browse" in capsys.readouterr().out

    def test_match_none(self, config_path, capsys):
        assert lumen(config_path, "skills", "match", "bake bread") == 0
        assert "No matching skills." in capsys.readouterr().out

    def test_skills_without_subcommand(self, config_path, capsys):
        assert lumen(config_path, "skills") == 1


class TestMemoryCommands:
    @pytest.fixture
    def memory(self, config_path, tmp_path) -> MemoryManager:
        return MemoryManager.open(tmp_path / "data")

    def test_stats(self, config_path, memory, capsys):
        memory.episodes.record("a", [], success=True)
        memory.episodes.record("b", [], success=False)

        assert lumen(config_path, "memory", "stats") == 0

        out = capsys.readouterr().out
        assert "Episodes: 2" in out
        assert "Success rate: 50%" in out
        assert "Facts: 0" in out

    def test_facts(self, config_path, memory, capsys):
        memory.facts.upsert("preference", "language", "English")
        memory.facts.upsert("knowledge", "python", "3.12")

        assert lumen(config_path, "memory", "facts", "engl") == 0

        out = capsys.readouterr().out
        assert "[preference] language: English" in out
        assert "python" not in out

    def test_export_prints_document(self, config_path, memory, capsys):
        episode = memory.episodes.record(
            "read the notes file", [EpisodeStep(tool="file_read")], success=True
        )

        assert lumen(config_path, "memory", "export", episode.id) == 0

        out = capsys.readouterr().out
        assert "name: read-the-notes" in out
        assert "1. Use the `file_read` tool" in out

    def test_export_install(self, config_path, memory, tmp_path, capsys):
        episode = memory.episodes.record("read the notes file", [], success=True)

        assert lumen(config_path, "memory", "export", episode.id, "--install") == 0
        assert (tmp_path / "data" / "skills" / "read-the-notes" / "SKILL.md").is_file()

        # Installing twice is refused
        assert lumen(config_path, "memory", "export", episode.id, "--install") == 1

    def test_export_missing(self, config_path, capsys):
        assert lumen(config_path, "memory", "export", "nope") == 1
        assert "not found" in capsys.readouterr().out


class TestRunCommand:
    def test_requires_api_key(self, config_path, monkeypatch, capsys):
        monkeypatch.delenv("GROQ_API_KEY", raising=False)

        assert lumen(config_path, "run", "hello") == 1
        assert "GROQ_API_KEY" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_run_task_end_to_end(self, config_path, tmp_path):
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = "Hello there"
        response.choices[0].message.tool_calls = None
        response.choices[0].finish_reason = "stop"
        client = AsyncMock()
        client.chat.completions.create.return_value = response

        result = await run_task(load_settings(config_path), "say hello", groq_client=client)

        assert result.answer == "Hello there"
        assert result.task_log.parent == tmp_path / "task-logs"
        assert (tmp_path / "workspace").is_dir()
        tools = [t["function"]["name"] for t in client.chat.completions.create.call_args.kwargs["tools"]]
        assert "remember_fact" in tools


class TestReplCli:
    @pytest.fixture
    def cli(self, config_path, tmp_path) -> CLI:
        settings = load_settings(config_path)
        agent = MagicMock()
        agent.run = AsyncMock()
        return CLI(
            settings,
            agent,
            MemoryManager.open(settings.data_dir),
            JSONLLogger(tmp_path / "events"),
        )

    def test_session_id(self, cli):
        assert cli.session_id.startswith("cli-")
        assert len(cli.session_id) == 12

    def test_handle_commands(self, cli, capsys):
        assert cli._handle_command("/exit") is False
        assert cli._handle_command("/quit") is False
        assert cli._handle_command("/help") is True
        assert cli._handle_command("/stats") is True
        assert "Episodes: 0" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_process_task_prints_answer(self, cli, capsys):
        cli.agent.run.return_value = AgentResult(
            answer="42", stop_reason=StopReason.COMPLETE, iterations=1
        )

        await cli._process_task("what is the answer")

        assert "42" in capsys.readouterr().out
        events = [json.loads(line)["event"] for line in cli.logger.log_path.read_text().splitlines()]
        assert events == ["task_start", "agent_stop"]

    @pytest.mark.asyncio
    async def test_process_task_error_is_reported(self, cli, capsys):
        cli.agent.run.side_effect = RuntimeError("network down")

        await cli._process_task("anything")

        assert "Error: network down" in capsys.readouterr().out
        last = json.loads(cli.logger.log_path.read_text().splitlines()[-1])
        assert last["event"] == "error"

    @pytest.mark.asyncio
    async def test_repl_exits_on_eof(self, cli, monkeypatch, capsys):
        inputs = iter(["", "/stats"])

        def fake_input(prompt):
            try:
                return next(inputs)
            except StopIteration:
                raise EOFError

        monkeypatch.setattr("builtins.input", fake_input)

        await cli.run()

        out = capsys.readouterr().out
        assert "Goodbye" in out
        cli.agent.run.assert_not_called()


def test_format_result_flags_incomplete_runs():
    result = AgentResult(answer="(reached iteration limit)", stop_reason=StopReason.MAX_ITERATIONS, iterations=20)

    output = format_result(result)

    assert "(reached iteration limit)" in output
    assert "Stopped: max_iterations (iterations: 20)" in output
