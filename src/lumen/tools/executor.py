"""Action executor: the side-effecting handle tools act through.

One ActionExecutor owns a workspace directory, an HTTP client and the code
execution limits for a session. It is created by the caller, handed to the
tools that need it and closed with ``async with`` on every exit path. It is
not safe to share between concurrently running tasks.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType

import httpx

logger = logging.getLogger(__name__)

MAX_OUTPUT_CHARS = 20_000
MAX_READ_BYTES = 200 * 1024

INTERPRETERS = {
    "python": "python3",
    "shell": "sh",
}


@dataclass
class CodeRunResult:
    """Outcome of a code_run invocation."""

    exit_code: int
    stdout: str
    stderr: str
    duration_ms: float
    killed: bool = False

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and not self.killed


@dataclass
class DirEntry:
    """One entry of a directory listing."""

    name: str
    is_dir: bool


def _truncate(text: str, limit: int = MAX_OUTPUT_CHARS) -> str:
    if len(text) > limit:
        return text[:limit] + "\n... (truncated)"
    return text


class ActionExecutor:
    """Workspace-scoped file, process and HTTP access for one session."""

    def __init__(
        self,
        workspace: Path | str,
        code_timeout: float = 30.0,
        http_timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.workspace = Path(workspace).expanduser().resolve()
        self.code_timeout = code_timeout
        self.http_timeout = http_timeout
        self._client = http_client
        self._owns_client = http_client is None
        self._closed = False

    async def __aenter__(self) -> ActionExecutor:
        self.workspace.mkdir(parents=True, exist_ok=True)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the HTTP client. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    @property
    def http(self) -> httpx.AsyncClient:
        """The session's HTTP client, created on first use."""
        if self._closed:
            raise RuntimeError("ActionExecutor is closed")
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.http_timeout,
                follow_redirects=True,
            )
        return self._client

    def resolve(self, path: str) -> Path:
        """Resolve a workspace-relative path.

        Raises:
            ValueError: If the path escapes the workspace.
        """
        resolved = (self.workspace / path).resolve()
        if resolved != self.workspace and self.workspace not in resolved.parents:
            raise ValueError(f"Path traversal not allowed: {path}")
        return resolved

    def read_file(self, path: str, max_bytes: int = MAX_READ_BYTES) -> tuple[str, int]:
        """Read a text file. Returns (content, size_in_bytes)."""
        resolved = self.resolve(path)
        content = resolved.read_text(encoding="utf-8", errors="replace")
        size = resolved.stat().st_size
        return _truncate(content, max_bytes), size

    def write_file(self, path: str, content: str) -> Path:
        """Write a text file, creating parent directories."""
        resolved = self.resolve(path)
        resolved.parent.mkdir(parents=True, exist_ok=True)
        resolved.write_text(content, encoding="utf-8")
        return resolved

    def list_dir(self, path: str = ".") -> list[DirEntry]:
        """List a directory, sorted by name."""
        resolved = self.resolve(path)
        return sorted(
            (DirEntry(name=item.name, is_dir=item.is_dir()) for item in resolved.iterdir()),
            key=lambda entry: entry.name,
        )

    async def run_code(self, language: str, code: str) -> CodeRunResult:
        """Run Python or shell code in the workspace.

        Raises:
            ValueError: If the language is not supported.
        """
        interpreter = INTERPRETERS.get(language)
        if interpreter is None:
            raise ValueError(f"Unsupported language: {language}")

        self.workspace.mkdir(parents=True, exist_ok=True)
        start = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                interpreter,
                "-c",
                code,
                cwd=self.workspace,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return CodeRunResult(
                exit_code=-1,
                stdout="",
                stderr=str(e),
                duration_ms=(time.monotonic() - start) * 1000,
            )

        killed = False
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.code_timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            stdout, stderr = await process.communicate()
            killed = True
            logger.warning("code_run killed after %.1fs", self.code_timeout)

        return CodeRunResult(
            exit_code=process.returncode if process.returncode is not None else -1,
            stdout=_truncate(stdout.decode("utf-8", errors="replace")),
            stderr=_truncate(stderr.decode("utf-8", errors="replace")),
            duration_ms=(time.monotonic() - start) * 1000,
            killed=killed,
        )
