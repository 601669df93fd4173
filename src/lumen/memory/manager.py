"""Memory manager tying episodes and facts to one persisted document."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from .episodes import EpisodicMemory
from .facts import FactStore
from .models import Episode, Fact, MemoryStats
from .relevance import DEFAULT_WEIGHTS, RelevanceWeights
from .store import MemoryStore


class MemoryManager:
    """Orchestrates memory operations over a single MemoryStore.

    Episodic memory and the fact store share the store's document, so a
    mutation through either one rewrites the same memory.json.
    """

    def __init__(
        self,
        store: MemoryStore,
        weights: RelevanceWeights = DEFAULT_WEIGHTS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the manager with a store.

        Args:
            store: The MemoryStore for persistence.
            weights: Relevance weights for episode recall.
            clock: Time source, epoch seconds.
        """
        self.store = store
        self.episodes = EpisodicMemory(store, weights=weights, clock=clock)
        self.facts = FactStore(store, clock=clock)

    @classmethod
    def open(cls, data_dir: Path | str) -> MemoryManager:
        """Create a manager for data_dir and load its document."""
        manager = cls(MemoryStore(data_dir))
        manager.store.load()
        return manager

    def context_for(self, task: str, max_episodes: int = 2) -> tuple[list[Episode], list[Fact]]:
        """Select the episodes and facts to show the model for a task."""
        return self.episodes.recall(task, limit=max_episodes), self.facts.relevant_to(task)

    def stats(self) -> MemoryStats:
        """Episode count, success rate and fact count."""
        document = self.store.document
        total = len(document.episodes)
        successes = sum(1 for ep in document.episodes if ep.success)
        return MemoryStats(
            episodes=total,
            success_rate=successes / total if total else 0.0,
            facts=len(document.facts),
        )
