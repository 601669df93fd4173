"""Keyword-overlap scoring of skills against a task."""

from ..keywords import extract_keywords

# Results at or below this score are dropped.
SCORE_THRESHOLD = 0.1

MATCH_WEIGHT = 0.6
LENGTH_WEIGHT = 0.4


def score_skill(task: str, description: str) -> float:
    """Score how well a skill description matches a task.

    Each description keyword found as a substring of the task counts once
    towards the match ratio and adds 2 (long keywords) or 1 (short ones) to a
    length-weighted ratio. The two ratios are blended and clamped to [0, 1].
    """
    keywords = extract_keywords(description.lower())
    if not keywords:
        return 0.0

    task_lower = task.lower()
    match_count = 0
    weighted = 0

    for keyword in keywords:
        if keyword in task_lower:
            match_count += 1
            weighted += 2 if len(keyword) > 2 else 1

    base = match_count / len(keywords)
    bonus = weighted / (len(keywords) * 2)
    return max(0.0, min(1.0, base * MATCH_WEIGHT + bonus * LENGTH_WEIGHT))
