"""JSONL logging for observability."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class LogEntry:
    """A single log entry."""

    timestamp: str
    event: str
    session_id: str | None = None
    task: str | None = None
    duration_ms: float | None = None
    iterations: int | None = None
    stopped_reason: str | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None and v != {}}


class JSONLLogger:
    """Logger that writes structured events in JSONL format.

    The file is rotated to ``<stem>_<timestamp>.jsonl`` once it reaches
    ``max_size_mb``.
    """

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "events.jsonl",
        max_size_mb: float = 10.0,
    ) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".lumen" / "logs"
        self.log_dir = Path(log_dir).expanduser()
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self._session_id: str | None = None

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / self.filename

    def set_session_id(self, session_id: str | None) -> None:
        """Set the session id attached to all subsequent entries."""
        self._session_id = session_id

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size."""
        if not self.log_path.exists():
            return

        if self.log_path.stat().st_size >= self.max_size_bytes:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
            rotated_name = f"{self.log_path.stem}_{timestamp}.jsonl"
            self.log_path.rename(self.log_dir / rotated_name)

    def _write(self, entry: LogEntry) -> None:
        """Write a log entry to the file."""
        self._rotate_if_needed()

        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    def log(
        self,
        event: str,
        *,
        session_id: str | None = None,
        task: str | None = None,
        duration_ms: float | None = None,
        iterations: int | None = None,
        stopped_reason: str | None = None,
        error: str | None = None,
        **extra: Any,
    ) -> None:
        """Log an event."""
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            session_id=session_id or self._session_id,
            task=task,
            duration_ms=duration_ms,
            iterations=iterations,
            stopped_reason=stopped_reason,
            error=error,
            extra=extra if extra else {},
        )
        self._write(entry)

    def log_task_start(self, task: str, *, session_id: str | None = None) -> None:
        """Log the start of a task run."""
        self.log("task_start", session_id=session_id, task=task)

    def log_agent_stop(
        self,
        reason: str,
        *,
        session_id: str | None = None,
        iterations: int | None = None,
        duration_ms: float | None = None,
        tool_calls: int | None = None,
        episode_id: str | None = None,
    ) -> None:
        """Log when the agent loop stops."""
        extra: dict[str, Any] = {}
        if tool_calls is not None:
            extra["tool_calls"] = tool_calls
        if episode_id is not None:
            extra["episode_id"] = episode_id
        self.log(
            "agent_stop",
            session_id=session_id,
            stopped_reason=reason,
            iterations=iterations,
            duration_ms=duration_ms,
            **extra,
        )

    def log_error(self, error: str, *, session_id: str | None = None, task: str | None = None) -> None:
        """Log a failed task run."""
        self.log("error", session_id=session_id, task=task, error=error)


# Global logger instance
_logger: JSONLLogger | None = None


def get_logger() -> JSONLLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = JSONLLogger()
    return _logger


def configure_logger(log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> JSONLLogger:
    """Configure and return the global logger."""
    global _logger
    _logger = JSONLLogger(log_dir=log_dir, max_size_mb=max_size_mb)
    return _logger
