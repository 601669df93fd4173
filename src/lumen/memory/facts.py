"""Fact store: key/value knowledge upserted by (type, key)."""

from __future__ import annotations

import logging
import time
from typing import Callable

from ..keywords import extract_keywords
from .episodes import generate_id
from .models import Fact, FactType
from .store import MemoryStore

logger = logging.getLogger(__name__)


class FactStore:
    """Durable key/value facts scoped by a type tag."""

    def __init__(
        self,
        store: MemoryStore,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self._clock = clock

    def upsert(self, fact_type: FactType | str, key: str, value: str) -> Fact:
        """Create or overwrite the fact for (type, key).

        Overwriting keeps the original id and refreshes value and timestamp.

        Raises:
            ValueError: If type is not a known FactType.
            MemoryStoreError: If persisting fails. The fact stays in memory.
        """
        fact_type = FactType(fact_type)
        now = self._clock()

        with self.store.transaction() as document:
            for i, existing in enumerate(document.facts):
                if existing.type == fact_type and existing.key == key:
                    fact = Fact(
                        id=existing.id,
                        type=fact_type,
                        key=key,
                        value=value,
                        timestamp=now,
                    )
                    document.facts[i] = fact
                    break
            else:
                fact = Fact(
                    id=generate_id(now),
                    type=fact_type,
                    key=key,
                    value=value,
                    timestamp=now,
                )
                document.facts.append(fact)

        logger.info("Recorded fact %s/%s", fact_type.value, key)
        return fact

    def get(self, fact_type: FactType | str, key: str) -> Fact | None:
        """Get the fact for (type, key), if any."""
        fact_type = FactType(fact_type)
        for fact in self.store.document.facts:
            if fact.type == fact_type and fact.key == key:
                return fact
        return None

    def by_type(self, fact_type: FactType | str) -> list[Fact]:
        """All facts of one type, in store order."""
        fact_type = FactType(fact_type)
        return [f for f in self.store.document.facts if f.type == fact_type]

    def list_facts(self) -> list[Fact]:
        """All facts in store order."""
        return list(self.store.document.facts)

    def search(self, query: str) -> list[Fact]:
        """Facts whose key or value contains query, case-insensitively."""
        query_lower = query.lower()
        if not query_lower:
            return []

        return [
            f
            for f in self.store.document.facts
            if query_lower in f.key.lower() or query_lower in f.value.lower()
        ]

    def relevant_to(self, task: str) -> list[Fact]:
        """Facts matching any keyword of the task, in store order."""
        keywords = extract_keywords(task.lower())
        if not keywords:
            return []

        return [
            f
            for f in self.store.document.facts
            if any(k in f.key.lower() or k in f.value.lower() for k in keywords)
        ]
