"""Memory: recorded episodes and key/value facts in one persisted document."""

from .episodes import EpisodicMemory
from .facts import FactStore
from .manager import MemoryManager
from .models import (
    SCHEMA_VERSION,
    Episode,
    EpisodeStep,
    Fact,
    FactType,
    MemoryDocument,
    MemoryStats,
)
from .relevance import RECALL_THRESHOLD, RelevanceWeights, score_episode
from .store import MemoryStore

__all__ = [
    "Episode",
    "EpisodeStep",
    "EpisodicMemory",
    "Fact",
    "FactStore",
    "FactType",
    "MemoryDocument",
    "MemoryManager",
    "MemoryStats",
    "MemoryStore",
    "RECALL_THRESHOLD",
    "RelevanceWeights",
    "SCHEMA_VERSION",
    "score_episode",
]
