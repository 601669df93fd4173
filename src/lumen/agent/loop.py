"""Agent loop implementation."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from groq import AsyncGroq

from ..errors import MemoryStoreError
from ..memory.models import EpisodeStep
from ..tools import ToolRegistry
from .llm import DEFAULT_MODEL, GroqChatProvider, ModelProvider, TokenUsage, ToolCall
from .prompt import ContextBuilder, PromptConfig

if TYPE_CHECKING:
    from ..memory import MemoryManager
    from ..skills import SkillManager
    from ..task_recorder import TaskRecorder

logger = logging.getLogger(__name__)

NO_ANSWER = "(no answer)"
TRUNCATED_ANSWER = "(response truncated)"
MAX_ITERATIONS_ANSWER = "(reached iteration limit)"


class StopReason(Enum):
    """Reasons for stopping the agent loop."""

    COMPLETE = "complete"
    TRUNCATED = "truncated"
    MAX_ITERATIONS = "max_iterations"


@dataclass
class AgentConfig:
    """Configuration for the agent loop."""

    model: str = DEFAULT_MODEL
    max_iterations: int = 20
    temperature: float = 0.7
    max_tokens: int = 4096
    max_skills: int = 3
    max_episodes: int = 2
    max_step_result_length: int = 500
    record_failures: bool = False


@dataclass
class ToolCallRecord:
    """One executed tool call in a run's trajectory."""

    name: str
    arguments: dict[str, Any]
    result: str
    duration_ms: float
    success: bool


@dataclass
class AgentResult:
    """Result from running the agent loop."""

    answer: str
    stop_reason: StopReason
    iterations: int
    trajectory: list[ToolCallRecord] = field(default_factory=list)
    episode_id: str | None = None
    usage: TokenUsage = field(default_factory=TokenUsage)
    task_log: Path | None = None

    @property
    def success(self) -> bool:
        """True when the model produced a final answer."""
        return self.stop_reason == StopReason.COMPLETE


class AgentLoop:
    """Main agent loop: think, act, observe.

    Each call to run() is independent: the conversation, trajectory and
    usage live only for that call, so one AgentLoop can serve several tasks
    concurrently. Tool calls within an iteration run one after another in
    the order the model emitted them.

    Example:
        async with ActionExecutor(Path("workspace")) as executor:
            loop = AgentLoop(build_registry(executor), skills=skills, memory=memory)
            result = await loop.run("summarise notes.txt")
            print(result.answer)
    """

    def __init__(
        self,
        registry: ToolRegistry,
        config: AgentConfig | None = None,
        groq_client: AsyncGroq | None = None,
        provider: ModelProvider | None = None,
        skills: SkillManager | None = None,
        memory: MemoryManager | None = None,
        context_builder: ContextBuilder | None = None,
        recorder: TaskRecorder | None = None,
    ) -> None:
        """Initialize the loop.

        Args:
            registry: Tools the model may call.
            config: Loop configuration.
            groq_client: Client used to build the default GroqChatProvider.
            provider: Model provider; overrides groq_client when given.
            skills: Skill source for the system prompt.
            memory: Episode and fact source; successful runs are recorded here.
            context_builder: System prompt builder.
            recorder: Optional Markdown task recorder.
        """
        self.registry = registry
        self.config = config or AgentConfig()
        if provider is None:
            client = groq_client or AsyncGroq(api_key=os.getenv("GROQ_API_KEY"))
            provider = GroqChatProvider(
                client,
                model=self.config.model,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        self.provider = provider
        self.skills = skills
        self.memory = memory
        self.context_builder = context_builder or ContextBuilder(
            PromptConfig(
                max_skills=self.config.max_skills,
                max_episodes=self.config.max_episodes,
            ),
            tools_schema=registry.get_tools_schema(),
        )
        self.recorder = recorder

    def build_system_prompt(self, task: str) -> str:
        """Select skills, episodes and facts for a task and build the prompt."""
        skills = []
        if self.skills is not None:
            skills = [m.skill for m in self.skills.match(task, limit=self.config.max_skills)]

        episodes, facts = [], []
        if self.memory is not None:
            episodes, facts = self.memory.context_for(task, max_episodes=self.config.max_episodes)

        return self.context_builder.build(task, skills, episodes, facts)

    async def run(self, task: str) -> AgentResult:
        """Run the agent loop for a task.

        Args:
            task: The task text from the user.

        Returns:
            AgentResult with the answer, trajectory and metadata.

        Raises:
            ModelProviderError: If the provider returns a malformed response.
            Exception: Provider transport errors propagate unchanged.
        """
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": self.build_system_prompt(task)},
            {"role": "user", "content": task},
        ]
        tools_schema = self.registry.get_tools_schema()
        trajectory: list[ToolCallRecord] = []
        usage = TokenUsage()
        task_id = self._start_recording(task)

        try:
            for iteration in range(1, self.config.max_iterations + 1):
                logger.debug("Iteration %d: %d messages", iteration, len(messages))

                # Think
                reply = await self.provider.chat(messages, tools_schema)
                if reply.usage is not None:
                    usage.add(reply.usage)

                if reply.tool_calls:
                    messages.append({
                        "role": "assistant",
                        "content": reply.content,
                        "tool_calls": [call.to_message() for call in reply.tool_calls],
                    })

                    # Act, then observe
                    for call in reply.tool_calls:
                        record = await self._execute(call)
                        trajectory.append(record)
                        messages.append({
                            "role": "tool",
                            "tool_call_id": call.id,
                            "content": record.result,
                        })
                        self._record_step(task_id, record)
                    continue

                if reply.finish_reason == "stop" or reply.content:
                    return self._finish(
                        task, reply.content or NO_ANSWER, StopReason.COMPLETE,
                        iteration, trajectory, usage, task_id,
                    )

                if reply.finish_reason == "length":
                    return self._finish(
                        task, reply.content or TRUNCATED_ANSWER, StopReason.TRUNCATED,
                        iteration, trajectory, usage, task_id,
                    )

                logger.warning(
                    "Reply with no content and no tool calls (finish_reason=%s)",
                    reply.finish_reason,
                )
        except Exception:
            self._discard_recording(task_id)
            raise

        return self._finish(
            task, MAX_ITERATIONS_ANSWER, StopReason.MAX_ITERATIONS,
            self.config.max_iterations, trajectory, usage, task_id,
        )

    async def _execute(self, call: ToolCall) -> ToolCallRecord:
        """Dispatch one tool call and time it."""
        arguments = call.parsed_arguments()
        start = time.monotonic()
        result = await self.registry.dispatch(call.name, arguments)
        duration_ms = (time.monotonic() - start) * 1000

        logger.debug(
            "Tool %s -> %s (%.0fms)", call.name, "ok" if result.success else "error", duration_ms
        )
        return ToolCallRecord(
            name=call.name,
            arguments=arguments,
            result=result.output,
            duration_ms=duration_ms,
            success=result.success,
        )

    def _finish(
        self,
        task: str,
        answer: str,
        stop_reason: StopReason,
        iterations: int,
        trajectory: list[ToolCallRecord],
        usage: TokenUsage,
        task_id: str | None,
    ) -> AgentResult:
        success = stop_reason == StopReason.COMPLETE
        logger.info(
            "Agent stopped: %s after %d iterations, %d tool calls",
            stop_reason.value, iterations, len(trajectory),
        )

        episode_id = None
        if self.memory is not None and trajectory and (success or self.config.record_failures):
            episode_id = self._record_episode(task, trajectory, success)

        task_log = None
        if task_id is not None and self.recorder is not None:
            try:
                task_log = self.recorder.finish_task(
                    task_id, answer, success=success, iterations=iterations,
                    stop_reason=stop_reason.value,
                )
            except OSError as e:
                logger.warning("Failed to write task log: %s", e)

        return AgentResult(
            answer=answer,
            stop_reason=stop_reason,
            iterations=iterations,
            trajectory=trajectory,
            episode_id=episode_id,
            usage=usage,
            task_log=task_log,
        )

    def _record_episode(
        self, task: str, trajectory: list[ToolCallRecord], success: bool
    ) -> str | None:
        limit = self.config.max_step_result_length
        steps = [
            EpisodeStep(
                tool=record.name,
                arguments=record.arguments,
                result=record.result[:limit],
                duration_ms=record.duration_ms,
            )
            for record in trajectory
        ]
        try:
            episode = self.memory.episodes.record(task, steps, success=success)
        except MemoryStoreError as e:
            logger.error("Failed to persist episode: %s", e)
            return None
        return episode.id

    def _start_recording(self, task: str) -> str | None:
        if self.recorder is None:
            return None
        try:
            return self.recorder.start_task(task)
        except OSError as e:
            logger.warning("Task recorder unavailable: %s", e)
            return None

    def _record_step(self, task_id: str | None, record: ToolCallRecord) -> None:
        if task_id is None or self.recorder is None:
            return
        self.recorder.log_step(
            task_id,
            record.name,
            record.arguments,
            record.result,
            record.duration_ms,
            success=record.success,
        )

    def _discard_recording(self, task_id: str | None) -> None:
        if task_id is not None and self.recorder is not None:
            self.recorder.discard(task_id)
