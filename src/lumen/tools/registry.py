"""Tool registry: the dispatcher between the agent loop and tools."""

import logging
from typing import Any

from .base import Tool, ToolResult

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry for available tools.

    ``dispatch`` never raises: unknown tools, invalid arguments and tool
    exceptions all come back as a failed ToolResult so the model gets text
    feedback it can correct from.
    """

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool."""
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' already registered")
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> None:
        """Unregister a tool by name."""
        self._tools.pop(name, None)

    def get(self, name: str) -> Tool | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> list[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def get_tools_schema(self) -> list[dict[str, Any]]:
        """Get schemas for all tools (for LLM function calling)."""
        return [tool.get_schema() for tool in self._tools.values()]

    async def dispatch(self, tool_name: str, args: dict[str, Any]) -> ToolResult:
        """Dispatch a tool call by name with arguments."""
        tool = self._tools.get(tool_name)

        if tool is None:
            return ToolResult.error(f"unknown tool {tool_name}")

        valid, error = tool.validate_args(args)
        if not valid:
            return ToolResult.error(error or "invalid arguments")

        try:
            return await tool.execute(**args)
        except Exception as e:
            logger.warning("Tool %s raised: %s", tool_name, e)
            return ToolResult.error(f"{tool_name} failed: {e}")
