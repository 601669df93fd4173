"""Episodic memory: recorded task executions and their recall."""

from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable

from ..keywords import extract_tags, extract_words
from ..skills.parser import render_skill_document
from .models import Episode, EpisodeStep
from .relevance import DEFAULT_WEIGHTS, RECALL_THRESHOLD, RelevanceWeights, score_episode
from .store import MemoryStore

logger = logging.getLogger(__name__)


def generate_id(now: float) -> str:
    """Time-prefixed random id, e.g. '1718000000000-3fa2c1'."""
    return f"{int(now * 1000)}-{uuid.uuid4().hex[:6]}"


class EpisodicMemory:
    """Append-only log of task executions, recalled by relevance."""

    def __init__(
        self,
        store: MemoryStore,
        weights: RelevanceWeights = DEFAULT_WEIGHTS,
        threshold: float = RECALL_THRESHOLD,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.weights = weights
        self.threshold = threshold
        self._clock = clock

    def record(
        self,
        task: str,
        steps: Iterable[EpisodeStep],
        success: bool,
        tags: Iterable[str] | None = None,
        summary: str | None = None,
    ) -> Episode:
        """Append a new episode and persist the memory document.

        Args:
            task: The task text.
            steps: Tool invocations in execution order.
            success: Whether the run succeeded.
            tags: Explicit tags, or a single tag string; derived from the task
                when omitted.
            summary: Optional summary used as the exported skill description.

        Returns:
            The stored episode.

        Raises:
            MemoryStoreError: If persisting fails. The episode stays in memory.
        """
        now = self._clock()
        if tags is None:
            tags = extract_tags(task)
        elif isinstance(tags, str):
            tags = [tags]

        episode = Episode(
            id=generate_id(now),
            task=task,
            steps=tuple(steps),
            success=success,
            tags=tuple(dict.fromkeys(tags)),
            summary=summary,
            timestamp=now,
        )

        with self.store.transaction() as document:
            document.episodes.append(episode)

        logger.info(
            "Recorded episode %s (%s)", episode.id, "success" if success else "failed"
        )
        return episode

    def recall(self, task: str, limit: int = 3) -> list[Episode]:
        """Return successful episodes relevant to a task, best first.

        Episodes scoring at or below the threshold are dropped. Equal scores
        keep recording order.
        """
        now = self._clock()
        scored: list[tuple[Episode, float]] = []

        for episode in self.store.document.episodes:
            if not episode.success:
                continue
            score = score_episode(task, episode, now=now, weights=self.weights)
            if score > self.threshold:
                scored.append((episode, score))

        scored.sort(key=lambda item: item[1], reverse=True)
        return [episode for episode, _ in scored[:limit]]

    def get(self, episode_id: str) -> Episode | None:
        """Get an episode by id."""
        for episode in self.store.document.episodes:
            if episode.id == episode_id:
                return episode
        return None

    def list_episodes(self) -> list[Episode]:
        """All episodes in recording order."""
        return list(self.store.document.episodes)

    def export_as_skill(self, episode_id: str) -> str | None:
        """Render a successful episode as a SKILL.md document.

        Returns:
            The document text, or None if the episode is missing or failed.
        """
        episode = self.get(episode_id)
        if episode is None or not episode.success:
            return None

        name = skill_name_for(episode.task, episode.timestamp)
        description = episode.summary or episode.task

        lines = [f"# {episode.task}", "", "## Steps", ""]
        for i, step in enumerate(episode.steps, start=1):
            lines.append(f"{i}. Use the `{step.tool}` tool")
            if step.arguments:
                args_json = json.dumps(step.arguments, ensure_ascii=False)
                lines.append(f"   Arguments: `{args_json}`")

        recorded_at = datetime.fromtimestamp(episode.timestamp, tz=timezone.utc)
        lines.extend([
            "",
            "## Notes",
            "",
            f"- Original task: {episode.task}",
            f"- Recorded at: {recorded_at.isoformat()}",
            f"- Tags: {', '.join(episode.tags)}",
        ])

        return render_skill_document(name, description, "\n".join(lines))


def skill_name_for(task: str, timestamp: float) -> str:
    """Skill name from the first three task words, safe as a directory name."""
    keywords = extract_words(task)
    if not keywords:
        return f"skill-{int(timestamp * 1000)}"
    return "-".join(keywords[:3])
