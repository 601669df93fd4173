"""Data models for the memory system."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

SCHEMA_VERSION = 1


class FactType(str, Enum):
    """Category of a stored fact."""

    WEBSITE = "website"
    PREFERENCE = "preference"
    KNOWLEDGE = "knowledge"


@dataclass(frozen=True)
class EpisodeStep:
    """One tool invocation inside an episode.

    Attributes:
        tool: Tool name.
        arguments: Decoded tool arguments.
        result: Tool output, possibly truncated.
        duration_ms: Wall-clock duration of the call.
    """

    tool: str
    arguments: dict[str, Any] = field(default_factory=dict)
    result: str = ""
    duration_ms: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EpisodeStep":
        return cls(
            tool=str(data["tool"]),
            arguments=dict(data.get("arguments") or {}),
            result=str(data.get("result", "")),
            duration_ms=data.get("duration_ms"),
        )


@dataclass(frozen=True)
class Episode:
    """A recorded task execution.

    Attributes:
        id: Unique episode id.
        task: The task text the run was given.
        steps: Tool invocations in execution order.
        success: Whether the run reached a final answer.
        tags: Category tags used for recall, without duplicates.
        summary: Optional one-line summary.
        timestamp: Creation time, epoch seconds.
    """

    id: str
    task: str
    steps: tuple[EpisodeStep, ...]
    success: bool
    tags: tuple[str, ...] = ()
    summary: str | None = None
    timestamp: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["steps"] = [asdict(step) for step in self.steps]
        data["tags"] = list(self.tags)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Episode":
        return cls(
            id=str(data["id"]),
            task=str(data["task"]),
            steps=tuple(EpisodeStep.from_dict(s) for s in data.get("steps", [])),
            success=bool(data.get("success", False)),
            tags=tuple(dict.fromkeys(data.get("tags", []))),
            summary=data.get("summary"),
            timestamp=float(data.get("timestamp", 0.0)),
        )


@dataclass(frozen=True)
class Fact:
    """A key/value knowledge record, unique per (type, key).

    Attributes:
        id: Stable id, kept across overwrites.
        type: Fact category.
        key: Lookup key, e.g. "chatgpt.com/input-selector".
        value: The stored knowledge.
        timestamp: Last write time, epoch seconds.
    """

    id: str
    type: FactType
    key: str
    value: str
    timestamp: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Fact":
        return cls(
            id=str(data["id"]),
            type=FactType(data["type"]),
            key=str(data["key"]),
            value=str(data["value"]),
            timestamp=float(data.get("timestamp", 0.0)),
        )


@dataclass
class MemoryDocument:
    """The persisted aggregate behind episodic memory and the fact store."""

    episodes: list[Episode] = field(default_factory=list)
    facts: list[Fact] = field(default_factory=list)
    version: int = SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "episodes": [ep.to_dict() for ep in self.episodes],
            "facts": [fact.to_dict() for fact in self.facts],
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MemoryDocument":
        return cls(
            episodes=[Episode.from_dict(ep) for ep in data.get("episodes") or []],
            facts=[Fact.from_dict(f) for f in data.get("facts") or []],
            version=int(data.get("version") or SCHEMA_VERSION),
        )


@dataclass(frozen=True)
class MemoryStats:
    """Summary counts over the memory document."""

    episodes: int
    success_rate: float
    facts: int
