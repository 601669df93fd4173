"""Per-task Markdown audit logs.

Each task run gets one Markdown file under the log directory with a summary
table, every tool step and the final answer. Logs are keyed by task id, so
several runs can record through the same recorder at once.
"""

import json
import logging
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

MAX_RESULT_LENGTH = 2000


@dataclass
class StepLog:
    """One tool step of a recorded task."""

    index: int
    tool: str
    arguments: dict[str, Any]
    result: str
    duration_ms: float
    success: bool = True


@dataclass
class TaskLog:
    """In-progress record of a task run."""

    id: str
    task: str
    start_time: float
    steps: list[StepLog] = field(default_factory=list)
    end_time: float | None = None
    response: str = ""
    success: bool = False
    iterations: int = 0
    stop_reason: str | None = None


def generate_task_id(now: datetime | None = None) -> str:
    """Build an id like ``task-20250101-120000-a1b2``."""
    now = now or datetime.now()
    return f"task-{now.strftime('%Y%m%d-%H%M%S')}-{secrets.token_hex(2)}"


def format_duration(ms: float) -> str:
    """Human-readable duration: ``850ms``, ``2.5s`` or ``3m 12s``."""
    if ms < 1000:
        return f"{int(ms)}ms"
    if ms < 60000:
        return f"{ms / 1000:.1f}s"
    minutes, rest = divmod(int(ms), 60000)
    return f"{minutes}m {rest // 1000}s"


class TaskRecorder:
    """Writes one Markdown log per task.

    Example:
        recorder = TaskRecorder(Path("logs"))
        task_id = recorder.start_task("list the workspace")
        recorder.log_step(task_id, "file_list", {"path": "."}, "a.txt", 3.2)
        path = recorder.finish_task(task_id, "One file: a.txt", success=True, iterations=2)
    """

    def __init__(
        self,
        log_dir: Path | str | None = None,
        max_result_length: int = MAX_RESULT_LENGTH,
    ) -> None:
        """Initialize the recorder.

        Args:
            log_dir: Directory for the Markdown files. Defaults to ./logs.
            max_result_length: Step results longer than this are cut.
        """
        if log_dir is None:
            log_dir = Path.cwd() / "logs"
        self.log_dir = Path(log_dir).expanduser()
        self.max_result_length = max_result_length
        self._active: dict[str, TaskLog] = {}

    def start_task(self, task: str) -> str:
        """Begin recording a task and return its id.

        Raises:
            OSError: If the log directory cannot be created.
        """
        self.log_dir.mkdir(parents=True, exist_ok=True)

        task_id = generate_task_id()
        while task_id in self._active:
            task_id = generate_task_id()

        self._active[task_id] = TaskLog(id=task_id, task=task, start_time=time.time())
        logger.debug("Started task log %s", task_id)
        return task_id

    def log_step(
        self,
        task_id: str,
        tool: str,
        arguments: dict[str, Any],
        result: str,
        duration_ms: float,
        success: bool = True,
    ) -> None:
        """Add a tool step to an active task. Unknown ids are ignored."""
        log = self._active.get(task_id)
        if log is None:
            return

        if len(result) > self.max_result_length:
            result = result[: self.max_result_length] + "\n... (truncated)"

        log.steps.append(StepLog(
            index=len(log.steps) + 1,
            tool=tool,
            arguments=arguments,
            result=result,
            duration_ms=duration_ms,
            success=success,
        ))

    def finish_task(
        self,
        task_id: str,
        response: str,
        success: bool,
        iterations: int,
        stop_reason: str | None = None,
    ) -> Path:
        """Close a task and write its Markdown file.

        Returns:
            Path of the written log.

        Raises:
            KeyError: If no task with that id is in progress.
            OSError: If the file cannot be written.
        """
        log = self._active.pop(task_id)
        log.end_time = time.time()
        log.response = response
        log.success = success
        log.iterations = iterations
        log.stop_reason = stop_reason

        path = self.log_dir / f"{log.id}.md"
        path.write_text(render_markdown(log), encoding="utf-8")
        logger.info("Task log written to %s", path)
        return path

    def discard(self, task_id: str) -> None:
        """Drop an active task without writing anything."""
        self._active.pop(task_id, None)

    @property
    def active_tasks(self) -> list[str]:
        """Ids of tasks currently being recorded."""
        return list(self._active)


def render_markdown(log: TaskLog) -> str:
    """Render a finished task log as Markdown."""
    duration_ms = ((log.end_time or log.start_time) - log.start_time) * 1000
    started = datetime.fromtimestamp(log.start_time).strftime("%Y-%m-%d %H:%M:%S")

    lines = [
        f"# Task log: {log.task}",
        "",
        "## Summary",
        "",
        "| Field | Value |",
        "| --- | --- |",
        f"| Task ID | `{log.id}` |",
        f"| Status | {'success' if log.success else 'failed'} |",
    ]
    if log.stop_reason:
        lines.append(f"| Stop reason | {log.stop_reason} |")
    lines.extend([
        f"| Started | {started} |",
        f"| Duration | {format_duration(duration_ms)} |",
        f"| Iterations | {log.iterations} |",
        f"| Steps | {len(log.steps)} |",
        "",
        "## Steps",
        "",
    ])

    for step in log.steps:
        lines.extend([f"### Step {step.index}: {step.tool}", ""])

        if step.arguments:
            lines.extend([
                "**Arguments:**",
                "```json",
                json.dumps(step.arguments, indent=2, ensure_ascii=False),
                "```",
                "",
            ])

        lines.extend([f"**Duration:** {step.duration_ms:.0f}ms", ""])
        if not step.success:
            lines.extend(["**Failed**", ""])

        lines.extend([
            "<details>",
            "<summary><b>Result</b></summary>",
            "",
            "```",
            step.result,
            "```",
            "",
            "</details>",
            "",
            "---",
            "",
        ])

    if log.response:
        lines.extend(["## Final answer", "", log.response, ""])

    return "\n".join(lines)
