"""Relevance scoring of past episodes against a new task."""

import time
from dataclasses import dataclass

from ..keywords import extract_keywords, extract_tags
from .models import Episode

SECONDS_PER_DAY = 60 * 60 * 24

# Results at or below this score are dropped.
RECALL_THRESHOLD = 0.1


@dataclass(frozen=True)
class RelevanceWeights:
    """Weights of the three relevance terms.

    Attributes:
        text: Keyword overlap between task texts.
        tags: Overlap of the new task's tags with the episode's tags.
        recency: Bonus for fresh episodes, decaying linearly to zero.
        recency_window_days: Age at which the recency bonus reaches zero.
    """

    text: float = 0.5
    tags: float = 0.3
    recency: float = 0.2
    recency_window_days: float = 30.0


DEFAULT_WEIGHTS = RelevanceWeights()


def _clamp(value: float, upper: float) -> float:
    return max(0.0, min(upper, value))


def text_overlap(task: str, episode_task: str) -> float:
    """Fraction of the task's keywords found in the episode's task text."""
    task_keywords = extract_keywords(task.lower())
    if not task_keywords:
        return 0.0

    episode_lower = episode_task.lower()
    episode_keywords = set(extract_keywords(episode_lower))
    matched = sum(
        1 for word in task_keywords if word in episode_keywords or word in episode_lower
    )
    return matched / len(task_keywords)


def tag_overlap(task: str, episode_tags: tuple[str, ...]) -> float:
    """Fraction of the task's derived tags present on the episode."""
    task_tags = extract_tags(task)
    if not task_tags:
        return 0.0

    matched = sum(1 for tag in task_tags if tag in episode_tags)
    return matched / len(task_tags)


def recency_bonus(
    timestamp: float,
    now: float,
    weight: float = DEFAULT_WEIGHTS.recency,
    window_days: float = DEFAULT_WEIGHTS.recency_window_days,
) -> float:
    """Linear decay from ``weight`` at age zero to 0 at ``window_days``."""
    age_days = (now - timestamp) / SECONDS_PER_DAY
    return max(0.0, weight * (1 - age_days / window_days))


def score_episode(
    task: str,
    episode: Episode,
    now: float | None = None,
    weights: RelevanceWeights = DEFAULT_WEIGHTS,
) -> float:
    """Score an episode's relevance to a task, in [0, 1].

    Each term is clamped to its own weight before summing.
    """
    if now is None:
        now = time.time()

    text = _clamp(text_overlap(task, episode.task) * weights.text, weights.text)
    tags = _clamp(tag_overlap(task, episode.tags) * weights.tags, weights.tags)
    recency = _clamp(
        recency_bonus(episode.timestamp, now, weights.recency, weights.recency_window_days),
        weights.recency,
    )
    return _clamp(text + tags + recency, 1.0)
