"""Mood statistics over sentence annotations.

Aggregates per-sentence emotions into counts, percentages and a single
dominant mood for a note or a set of notes.
"""

from collections import Counter
from collections.abc import Iterable

from .labels import NEUTRAL_LABEL
from .models import SentenceAnnotation

DOMINANT_MIN_SCORE = 0.6


def emotion_counts(annotations: Iterable[SentenceAnnotation]) -> dict[str, int]:
    """Count sentences per emotion label."""
    return dict(Counter(a.emotion.label for a in annotations))


def emotion_percentages(annotations: Iterable[SentenceAnnotation]) -> dict[str, float]:
    """Share of sentences per emotion label, in percent.

    Returns an empty dict when there are no annotations.
    """
    counts = emotion_counts(annotations)
    total = sum(counts.values())
    if total == 0:
        return {}
    return {label: count / total * 100 for label, count in counts.items()}


def dominant_emotion(
    annotations: Iterable[SentenceAnnotation],
    min_score: float = DOMINANT_MIN_SCORE,
) -> str | None:
    """Pick the mood to display for a note.

    Only confident annotations count. Neutral loses to the runner-up when
    anything else qualifies.

    Args:
        annotations: Sentence annotations
        min_score: Minimum confidence for an annotation to count

    Returns:
        Emotion label, or None if no annotation qualifies
    """
    counts = Counter(a.emotion.label for a in annotations if a.emotion.score >= min_score)
    if not counts:
        return None

    # most_common keeps first-seen order for equal counts
    ranked = counts.most_common()
    top = ranked[0][0]
    if top.lower() == NEUTRAL_LABEL.lower() and len(ranked) > 1:
        return ranked[1][0]
    return top


__all__ = [
    "DOMINANT_MIN_SCORE",
    "dominant_emotion",
    "emotion_counts",
    "emotion_percentages",
]
