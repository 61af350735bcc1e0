"""Emotion label set for the bert-emotion classifier.

Order matches the classifier's output columns.
"""

EMOTION_LABELS: tuple[str, ...] = (
    "Sadness",
    "Anger",
    "Love",
    "Surprise",
    "Fear",
    "Happiness",
    "Neutral",
    "Disgust",
    "Shame",
    "Guilt",
    "Confusion",
    "Desire",
    "Sarcasm",
)

NEUTRAL_LABEL = "Neutral"
UNKNOWN_LABEL = "Unknown"

__all__ = ["EMOTION_LABELS", "NEUTRAL_LABEL", "UNKNOWN_LABEL"]
