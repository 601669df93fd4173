"""CLI interface for Lumen.

`lumen` with no arguments starts the interactive REPL; subcommands run a
single task or inspect skills and memory.
"""

import argparse
import asyncio
import logging
import os
import time
import uuid
from pathlib import Path

from groq import AsyncGroq

from .agent import AgentLoop, AgentResult, StopReason
from .config import Settings, load_settings
from .errors import LumenError
from .logging import JSONLLogger, configure_logger
from .memory import MemoryManager
from .skills import SkillManager, SkillParseError
from .task_recorder import TaskRecorder
from .tools import ActionExecutor, build_registry

BANNER = """
╔══════════════════════════════════════════╗
║              Lumen v0.1.0                ║
║   Tool-using agent with skills + memory  ║
╚══════════════════════════════════════════╝

Commands:
  /exit, /quit  - Exit the CLI
  /stats        - Show memory statistics
  /help         - Show this help

Type a task and press Enter.
"""


def _get_settings(args: argparse.Namespace) -> Settings:
    """Load settings, honouring --config."""
    config_path = Path(args.config).expanduser() if args.config else None
    return load_settings(config_path)


def _get_skills(settings: Settings) -> SkillManager:
    """Create a SkillManager loaded from the configured roots."""
    manager = SkillManager()
    manager.load(settings.skill_dirs)
    return manager


def build_agent(
    settings: Settings,
    executor: ActionExecutor,
    skills: SkillManager,
    memory: MemoryManager,
    groq_client: AsyncGroq | None = None,
    recorder: TaskRecorder | None = None,
) -> AgentLoop:
    """Wire an AgentLoop with the standard tool set."""
    registry = build_registry(executor, facts=memory.facts)
    return AgentLoop(
        registry,
        settings.agent_config(),
        groq_client=groq_client,
        skills=skills,
        memory=memory,
        recorder=recorder,
    )


def format_result(result: AgentResult) -> str:
    """Format the agent's answer for display."""
    output = ["\n" + "─" * 40, result.answer, "─" * 40]

    if result.stop_reason != StopReason.COMPLETE:
        output.append(f"⚠ Stopped: {result.stop_reason.value} (iterations: {result.iterations})")
    if result.task_log is not None:
        output.append(f"Log: {result.task_log}")

    return "\n".join(output)


def format_stats(memory: MemoryManager) -> str:
    """Memory statistics as display text."""
    stats = memory.stats()
    return (
        f"Episodes: {stats.episodes}\n"
        f"Success rate: {stats.success_rate:.0%}\n"
        f"Facts: {stats.facts}"
    )


class CLI:
    """Interactive command-line interface for Lumen."""

    def __init__(
        self,
        settings: Settings,
        agent: AgentLoop,
        memory: MemoryManager,
        event_logger: JSONLLogger,
    ) -> None:
        self.settings = settings
        self.agent = agent
        self.memory = memory
        self.logger = event_logger
        self.session_id = f"cli-{uuid.uuid4().hex[:8]}"

    async def _process_task(self, task: str) -> None:
        """Run one task through the agent and print the answer."""
        self.logger.log_task_start(task, session_id=self.session_id)
        start = time.monotonic()

        try:
            result = await self.agent.run(task)
        except Exception as e:
            print(f"\n❌ Error: {e}")
            self.logger.log_error(str(e), session_id=self.session_id, task=task)
            return

        print(format_result(result))
        self.logger.log_agent_stop(
            result.stop_reason.value,
            session_id=self.session_id,
            iterations=result.iterations,
            duration_ms=(time.monotonic() - start) * 1000,
            tool_calls=len(result.trajectory),
            episode_id=result.episode_id,
        )

    def _handle_command(self, command: str) -> bool:
        """Handle a slash command. Returns True to continue, False to exit."""
        cmd = command.lower().strip()

        if cmd in ("/exit", "/quit", "exit", "quit"):
            print("\n👋 Goodbye!")
            return False

        if cmd == "/stats":
            print(format_stats(self.memory))
            return True

        if cmd == "/help":
            print(BANNER)
            return True

        print(f"Unknown command: {command}")
        return True

    async def run(self) -> None:
        """Run the interactive REPL."""
        print(BANNER)
        print(f"Session: {self.session_id}\n")
        self.logger.log("session_start", session_id=self.session_id)

        try:
            while True:
                try:
                    user_input = input("you> ").strip()
                except EOFError:
                    print("\n👋 Goodbye!")
                    break
                except KeyboardInterrupt:
                    print("\n👋 Goodbye!")
                    break

                if not user_input:
                    continue

                if user_input.startswith("/") or user_input.lower() in ("exit", "quit"):
                    if not self._handle_command(user_input):
                        break
                    continue

                await self._process_task(user_input)
        finally:
            self.logger.log("session_end", session_id=self.session_id)


def _check_api_key() -> bool:
    if os.getenv("GROQ_API_KEY"):
        return True
    print("❌ Error: GROQ_API_KEY environment variable not set")
    print("Please set it in your .env file or environment")
    return False


async def run_cli(settings: Settings, groq_client: AsyncGroq | None = None) -> None:
    """Run the REPL with one ActionExecutor for the whole session."""
    event_logger = configure_logger(settings.log_dir)
    skills = _get_skills(settings)
    memory = MemoryManager.open(settings.data_dir)
    recorder = TaskRecorder(settings.task_log_dir)

    async with ActionExecutor(settings.workspace_dir, code_timeout=settings.code_timeout) as executor:
        agent = build_agent(settings, executor, skills, memory, groq_client, recorder)
        await CLI(settings, agent, memory, event_logger).run()


async def run_task(
    settings: Settings,
    task: str,
    groq_client: AsyncGroq | None = None,
) -> AgentResult:
    """Run a single task in a fresh executor session."""
    skills = _get_skills(settings)
    memory = MemoryManager.open(settings.data_dir)
    recorder = TaskRecorder(settings.task_log_dir)

    async with ActionExecutor(settings.workspace_dir, code_timeout=settings.code_timeout) as executor:
        agent = build_agent(settings, executor, skills, memory, groq_client, recorder)
        return await agent.run(task)


def cmd_run(args: argparse.Namespace) -> int:
    """Run one task and print the answer."""
    settings = _get_settings(args)
    if not _check_api_key():
        return 1

    try:
        result = asyncio.run(run_task(settings, args.task))
    except LumenError as e:
        print(f"❌ Error: {e}")
        return 1

    print(format_result(result))
    return 0 if result.success else 1


def cmd_skills_list(args: argparse.Namespace) -> int:
    """List all loaded skills."""
    manager = _get_skills(_get_settings(args))
    skills = manager.list_skills()

    if not skills:
        print("No skills found.")
        return 0

    print(f"\n{'Name':<24} Description")
    print("-" * 80)
    for skill in sorted(skills, key=lambda s: s.name):
        desc = skill.description
        if len(desc) > 52:
            desc = desc[:49] + "..."
        print(f"{skill.name:<24} {desc}")

    print(f"\nTotal: {len(skills)} skill(s)")
    return 0


def cmd_skills_info(args: argparse.Namespace) -> int:
    """Show a skill's metadata and instructions."""
    manager = _get_skills(_get_settings(args))

    skill = manager.get(args.name)
    if skill is None:
        print(f"Error: Skill '{args.name}' not found.")
        return 1

    print(f"\nSkill: {skill.name}")
    print("-" * 40)
    print(f"Description: {skill.description}")
    if skill.path:
        print(f"Path: {skill.path}")
    print()
    print(skill.content)
    return 0


def cmd_skills_match(args: argparse.Namespace) -> int:
    """Show which skills a task would pull into the prompt."""
    settings = _get_settings(args)
    manager = _get_skills(settings)

    matches = manager.match(args.task, limit=args.limit or settings.max_skills)
    if not matches:
        print("No matching skills.")
        return 0

    for match in matches:
        print(f"{match.score:.2f}  {match.skill.name}")
    return 0


def cmd_memory_stats(args: argparse.Namespace) -> int:
    """Print episode and fact counts."""
    memory = MemoryManager.open(_get_settings(args).data_dir)
    print(format_stats(memory))
    return 0


def cmd_memory_facts(args: argparse.Namespace) -> int:
    """List facts, or those matching a query."""
    memory = MemoryManager.open(_get_settings(args).data_dir)
    facts = memory.facts.search(args.query) if args.query else memory.facts.list_facts()

    if not facts:
        print("No facts found.")
        return 0

    for fact in facts:
        print(f"[{fact.type.value}] {fact.key}: {fact.value}")
    return 0


def cmd_memory_export(args: argparse.Namespace) -> int:
    """Print an episode as a SKILL.md document, or install it."""
    settings = _get_settings(args)
    memory = MemoryManager.open(settings.data_dir)

    document = memory.episodes.export_as_skill(args.episode_id)
    if document is None:
        print(f"Error: Episode '{args.episode_id}' not found.")
        return 1

    if not args.install:
        print(document)
        return 0

    try:
        path = SkillManager().install(document, settings.user_skills_dir)
    except FileExistsError as e:
        print(f"Error: {e}")
        return 1
    except SkillParseError as e:
        print(f"Error: exported skill is invalid: {e}")
        return 1

    print(f"✓ Installed skill at {path}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the lumen command."""
    parser = argparse.ArgumentParser(
        prog="lumen",
        description="Tool-using agent with skills and episodic memory",
    )
    parser.add_argument("--config", help="Path to config.json (default ~/.lumen/config.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Sub-command help")

    run_parser = subparsers.add_parser("run", help="Run a single task")
    run_parser.add_argument("task", help="Task description")
    run_parser.set_defaults(handler=cmd_run)

    # skills
    skills_parser = subparsers.add_parser("skills", help="Inspect skills")
    skills_sub = skills_parser.add_subparsers(dest="skills_command")

    list_parser = skills_sub.add_parser("list", help="List loaded skills")
    list_parser.set_defaults(handler=cmd_skills_list)

    info_parser = skills_sub.add_parser("info", help="Show detailed skill info")
    info_parser.add_argument("name", help="Name of the skill")
    info_parser.set_defaults(handler=cmd_skills_info)

    match_parser = skills_sub.add_parser("match", help="Score skills against a task")
    match_parser.add_argument("task", help="Task description")
    match_parser.add_argument("-n", "--limit", type=int, help="Maximum matches to show")
    match_parser.set_defaults(handler=cmd_skills_match)

    # memory
    memory_parser = subparsers.add_parser("memory", help="Inspect memory")
    memory_sub = memory_parser.add_subparsers(dest="memory_command")

    stats_parser = memory_sub.add_parser("stats", help="Show memory statistics")
    stats_parser.set_defaults(handler=cmd_memory_stats)

    facts_parser = memory_sub.add_parser("facts", help="List or search facts")
    facts_parser.add_argument("query", nargs="?", help="Search text")
    facts_parser.set_defaults(handler=cmd_memory_facts)

    export_parser = memory_sub.add_parser("export", help="Export an episode as a skill")
    export_parser.add_argument("episode_id", help="Episode id")
    export_parser.add_argument(
        "--install",
        action="store_true",
        help="Install into the user skills directory instead of printing",
    )
    export_parser.set_defaults(handler=cmd_memory_export)

    return parser


def run(argv: list[str] | None = None) -> int:
    """Run the lumen CLI with given arguments.

    Args:
        argv: Command-line arguments. Uses sys.argv[1:] if None.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if args.command is None:
        settings = _get_settings(args)
        if not _check_api_key():
            return 1
        asyncio.run(run_cli(settings))
        return 0

    handler = getattr(args, "handler", None)
    if handler is None:
        # "skills" or "memory" without a sub-command
        parser.print_help()
        return 1

    return handler(args)
