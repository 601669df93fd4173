"""Agent module: the think/act/observe loop and its collaborators."""

from .llm import (
    DEFAULT_MODEL,
    ChatReply,
    GroqChatProvider,
    ModelProvider,
    TokenUsage,
    ToolCall,
)
from .loop import (
    MAX_ITERATIONS_ANSWER,
    NO_ANSWER,
    TRUNCATED_ANSWER,
    AgentConfig,
    AgentLoop,
    AgentResult,
    StopReason,
    ToolCallRecord,
)
from .prompt import ContextBuilder, PromptConfig

__all__ = [
    "AgentConfig",
    "AgentLoop",
    "AgentResult",
    "ChatReply",
    "ContextBuilder",
    "DEFAULT_MODEL",
    "GroqChatProvider",
    "MAX_ITERATIONS_ANSWER",
    "ModelProvider",
    "NO_ANSWER",
    "PromptConfig",
    "StopReason",
    "TRUNCATED_ANSWER",
    "TokenUsage",
    "ToolCall",
    "ToolCallRecord",
]
