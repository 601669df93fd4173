"""Tool registry and tool implementations."""

from ..memory import FactStore
from .base import Tool, ToolResult
from .code import CodeRunTool
from .executor import ActionExecutor, CodeRunResult
from .files import FileListTool, FileReadTool, FileWriteTool
from .memory import RememberFactTool, SearchFactsTool
from .registry import ToolRegistry
from .web_fetch import WebFetchTool


def build_registry(executor: ActionExecutor, facts: FactStore | None = None) -> ToolRegistry:
    """Registry with the standard tool catalog bound to one executor."""
    registry = ToolRegistry()
    registry.register(WebFetchTool(executor))
    registry.register(CodeRunTool(executor))
    registry.register(FileReadTool(executor))
    registry.register(FileWriteTool(executor))
    registry.register(FileListTool(executor))
    if facts is not None:
        registry.register(RememberFactTool(facts))
        registry.register(SearchFactsTool(facts))
    return registry


__all__ = [
    "ActionExecutor",
    "CodeRunResult",
    "CodeRunTool",
    "FileListTool",
    "FileReadTool",
    "FileWriteTool",
    "RememberFactTool",
    "SearchFactsTool",
    "Tool",
    "ToolRegistry",
    "ToolResult",
    "WebFetchTool",
    "build_registry",
]
