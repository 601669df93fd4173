"""Workspace file tools: read, write and list."""

from typing import Any

from .base import Tool, ToolResult
from .executor import ActionExecutor


class FileReadTool(Tool):
    """Read a text file from the workspace."""

    def __init__(self, executor: ActionExecutor) -> None:
        self._executor = executor

    @property
    def name(self) -> str:
        return "file_read"

    @property
    def description(self) -> str:
        return "Read a file's contents. Paths are relative to the workspace."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path"},
            },
            "required": ["path"],
        }

    async def execute(self, path: str) -> ToolResult:
        try:
            content, size = self._executor.read_file(path)
        except (OSError, ValueError) as e:
            return ToolResult.error(str(e))
        return ToolResult(
            success=True,
            output=f"File: {path} ({size} bytes)\n\n{content}",
            metadata={"size": size},
        )


class FileWriteTool(Tool):
    """Write a text file into the workspace."""

    def __init__(self, executor: ActionExecutor) -> None:
        self._executor = executor

    @property
    def name(self) -> str:
        return "file_write"

    @property
    def description(self) -> str:
        return (
            "Write content to a file. Paths are relative to the workspace; "
            "missing directories are created."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path"},
                "content": {"type": "string", "description": "File content"},
            },
            "required": ["path", "content"],
        }

    async def execute(self, path: str, content: str) -> ToolResult:
        try:
            self._executor.write_file(path, content)
        except (OSError, ValueError) as e:
            return ToolResult.error(str(e))
        return ToolResult(success=True, output=f"Wrote file: {path}")


class FileListTool(Tool):
    """List a workspace directory."""

    def __init__(self, executor: ActionExecutor) -> None:
        self._executor = executor

    @property
    def name(self) -> str:
        return "file_list"

    @property
    def description(self) -> str:
        return "List directory contents. Paths are relative to the workspace."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Directory path, defaults to the workspace root",
                },
            },
        }

    async def execute(self, path: str = ".") -> ToolResult:
        try:
            entries = self._executor.list_dir(path)
        except (OSError, ValueError) as e:
            return ToolResult.error(str(e))

        lines = [f"{e.name}/" if e.is_dir else e.name for e in entries]
        listing = "\n".join(lines) or "(empty directory)"
        return ToolResult(success=True, output=f"Directory: {path}\n\n{listing}")
