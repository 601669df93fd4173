"""Model provider: chat completions with tool calling.

The agent loop talks to the model through the small ModelProvider protocol.
GroqChatProvider implements it on top of the Groq SDK and normalises the
response into a ChatReply.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Protocol

from groq import AsyncGroq

from ..errors import ModelProviderError

DEFAULT_MODEL = "llama-3.3-70b-versatile"


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model.

    Attributes:
        id: Correlates the later ``tool`` message with this request.
        name: Tool name.
        arguments: JSON-encoded argument object, as sent by the model.
    """

    id: str
    name: str
    arguments: str = "{}"

    def parsed_arguments(self) -> dict[str, Any]:
        """Decode the arguments; malformed or non-object JSON gives {}."""
        try:
            args = json.loads(self.arguments or "{}")
        except json.JSONDecodeError:
            return {}
        return args if isinstance(args, dict) else {}

    def to_message(self) -> dict[str, Any]:
        """The wire shape used inside an assistant message."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class TokenUsage:
    """Token counts reported by the provider."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def add(self, other: "TokenUsage") -> None:
        """Accumulate another usage report into this one."""
        self.prompt_tokens += other.prompt_tokens
        self.completion_tokens += other.completion_tokens
        self.total_tokens += other.total_tokens


@dataclass
class ChatReply:
    """One model reply.

    ``finish_reason`` is usually "stop", "tool_calls" or "length"; anything
    else is passed through unchanged.
    """

    content: str | None
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str | None = None
    usage: TokenUsage | None = None


class ModelProvider(Protocol):
    """Anything that can answer a conversation with an optional tool catalog."""

    async def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> ChatReply:
        """Send the conversation and return the model's reply."""
        ...


def _as_int(value: Any) -> int:
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


class GroqChatProvider:
    """ModelProvider implementation that wraps AsyncGroq.

    Transport, authentication and rate-limit errors raised by the SDK are not
    caught here; they propagate to the caller of the agent loop.

    Example:
        from groq import AsyncGroq

        provider = GroqChatProvider(AsyncGroq(api_key="..."))
        reply = await provider.chat(messages, registry.get_tools_schema())
    """

    def __init__(
        self,
        client: AsyncGroq,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> None:
        """Initialize the Groq provider.

        Args:
            client: The AsyncGroq client instance to wrap.
            model: The model to use for completions.
            temperature: Sampling temperature.
            max_tokens: Completion token cap per reply.
        """
        self._client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> ChatReply:
        """Send the conversation and return the model's reply.

        Raises:
            ModelProviderError: If the response carries no choices.
        """
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            tools=tools or None,
            tool_choice="auto" if tools else None,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        if not response.choices:
            raise ModelProviderError("Model response contained no choices")

        choice = response.choices[0]
        message = choice.message

        tool_calls = [
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments=tc.function.arguments or "{}",
            )
            for tc in (message.tool_calls or [])
        ]

        finish_reason = choice.finish_reason
        content = message.content

        usage = None
        raw_usage = getattr(response, "usage", None)
        if raw_usage is not None:
            usage = TokenUsage(
                prompt_tokens=_as_int(getattr(raw_usage, "prompt_tokens", 0)),
                completion_tokens=_as_int(getattr(raw_usage, "completion_tokens", 0)),
                total_tokens=_as_int(getattr(raw_usage, "total_tokens", 0)),
            )

        return ChatReply(
            content=content if isinstance(content, str) else None,
            tool_calls=tool_calls,
            finish_reason=finish_reason if isinstance(finish_reason, str) else None,
            usage=usage,
        )
