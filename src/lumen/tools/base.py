"""Base tool interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class ToolResult:
    """Result from tool execution.

    Failures are encoded here rather than raised: ``success`` is False and
    ``output`` carries an ``Error: ...`` message the model can react to.
    """

    success: bool
    output: str
    metadata: dict[str, Any] | None = None

    @classmethod
    def error(cls, message: str, **metadata: Any) -> "ToolResult":
        """Build a failed result with an ``Error:`` prefixed output."""
        return cls(success=False, output=f"Error: {message}", metadata=metadata or None)


class Tool(ABC):
    """Base interface for all tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description for LLM."""
        ...

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for tool parameters."""
        ...

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute the tool with given arguments."""
        ...

    def get_schema(self) -> dict[str, Any]:
        """Get tool schema for LLM function calling."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def validate_args(self, args: dict[str, Any]) -> tuple[bool, str | None]:
        """Validate arguments against schema. Returns (valid, error_message)."""
        required = self.parameters.get("required", [])
        properties = self.parameters.get("properties", {})

        for field in required:
            if field not in args:
                return False, f"Missing required argument: {field}"

        # Basic primitive type checks; bool is not accepted as a number
        for key, value in args.items():
            if key not in properties:
                continue
            spec = properties[key]
            expected_type = spec.get("type")
            if expected_type == "string" and not isinstance(value, str):
                return False, f"Argument '{key}' must be a string"
            if expected_type == "integer" and (
                not isinstance(value, int) or isinstance(value, bool)
            ):
                return False, f"Argument '{key}' must be an integer"
            if expected_type == "number" and (
                not isinstance(value, (int, float)) or isinstance(value, bool)
            ):
                return False, f"Argument '{key}' must be a number"
            if expected_type == "boolean" and not isinstance(value, bool):
                return False, f"Argument '{key}' must be a boolean"
            if "enum" in spec and value not in spec["enum"]:
                allowed = ", ".join(str(v) for v in spec["enum"])
                return False, f"Argument '{key}' must be one of: {allowed}"

        return True, None
