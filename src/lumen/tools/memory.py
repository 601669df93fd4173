"""Tools exposing the fact store to the model."""

from typing import Any

from ..errors import MemoryStoreError
from ..memory import FactStore, FactType
from .base import Tool, ToolResult


class RememberFactTool(Tool):
    """Save or update a fact for future runs."""

    def __init__(self, facts: FactStore) -> None:
        self.facts = facts

    @property
    def name(self) -> str:
        return "remember_fact"

    @property
    def description(self) -> str:
        return (
            "Save a fact for future tasks, such as a site's input selector or a "
            "user preference. Saving the same type and key again overwrites it."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": [t.value for t in FactType],
                    "description": "Fact category",
                },
                "key": {
                    "type": "string",
                    "description": "Lookup key, e.g. 'chatgpt.com/input-selector'",
                },
                "value": {"type": "string", "description": "The fact to remember"},
            },
            "required": ["type", "key", "value"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        key = kwargs.get("key", "")
        value = kwargs.get("value", "")
        if not key or not value:
            return ToolResult.error("Both 'key' and 'value' are required")

        try:
            fact = self.facts.upsert(kwargs["type"], key, value)
        except MemoryStoreError as e:
            return ToolResult.error(str(e))

        return ToolResult(
            success=True,
            output=f"Remembered {fact.type.value}/{fact.key}: {fact.value}",
            metadata={"fact_id": fact.id},
        )


class SearchFactsTool(Tool):
    """Search stored facts by substring."""

    def __init__(self, facts: FactStore) -> None:
        self.facts = facts

    @property
    def name(self) -> str:
        return "search_facts"

    @property
    def description(self) -> str:
        return "Search remembered facts whose key or value contains the query."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Text to look for"},
            },
            "required": ["query"],
        }

    async def execute(self, query: str) -> ToolResult:
        found = self.facts.search(query)
        if not found:
            return ToolResult(success=True, output=f"No facts matching '{query}'")

        lines = [f"- [{f.type.value}] {f.key}: {f.value}" for f in found]
        return ToolResult(success=True, output="\n".join(lines))
