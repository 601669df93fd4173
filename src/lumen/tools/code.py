"""Code execution tool."""

from typing import Any

from .base import Tool, ToolResult
from .executor import INTERPRETERS, ActionExecutor


class CodeRunTool(Tool):
    """Run Python or shell code inside the workspace."""

    def __init__(self, executor: ActionExecutor) -> None:
        self._executor = executor

    @property
    def name(self) -> str:
        return "code_run"

    @property
    def description(self) -> str:
        return (
            "Execute Python or shell code with the workspace as working directory. "
            "Returns the exit code, stdout and stderr."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "language": {
                    "type": "string",
                    "enum": sorted(INTERPRETERS),
                    "description": "Programming language",
                },
                "code": {"type": "string", "description": "Code to execute"},
            },
            "required": ["language", "code"],
        }

    async def execute(self, language: str, code: str) -> ToolResult:
        result = await self._executor.run_code(language, code)

        lines = [
            f"Exit code: {result.exit_code}",
            f"Duration: {result.duration_ms:.0f}ms",
        ]
        if result.killed:
            lines.append("(process killed after timeout)")
        lines.extend([
            "",
            "=== stdout ===",
            result.stdout or "(empty)",
            "",
            "=== stderr ===",
            result.stderr or "(empty)",
        ])

        return ToolResult(
            success=result.success,
            output="\n".join(lines),
            metadata={
                "exit_code": result.exit_code,
                "duration_ms": result.duration_ms,
                "killed": result.killed,
            },
        )
