"""Emotion classification module for the Journai pipeline.

Provides per-sentence emotion detection and mood statistics.
"""

from typing import TYPE_CHECKING

from ..engine import CLASSIFIER_INPUTS, InferenceEngine, create_engine
from .classifier import EmotionClassifier, build_result, softmax
from .labels import EMOTION_LABELS, NEUTRAL_LABEL, UNKNOWN_LABEL
from .models import EmotionResult, SentenceAnnotation
from .stats import dominant_emotion, emotion_counts, emotion_percentages

if TYPE_CHECKING:
    from ..config import JournaiConfig


def create_emotion_classifier(
    config: "JournaiConfig | None" = None,
    engine: InferenceEngine | None = None,
    use_mock: bool = False,
) -> EmotionClassifier:
    """Create an uninitialized emotion classifier.

    Args:
        config: Journai configuration
        engine: Engine to use instead of building one from config
        use_mock: If True, back the classifier with a mock engine

    Returns:
        EmotionClassifier ready for initialize()
    """
    labels = EMOTION_LABELS
    max_length = 512

    if config is not None:
        labels = tuple(config.emotion.labels)
        max_length = config.emotion.max_length

    if engine is None:
        engine = create_engine(
            config.engine if config is not None else None,
            use_mock=use_mock,
            input_names=CLASSIFIER_INPUTS,
        )

    return EmotionClassifier(engine=engine, labels=labels, max_length=max_length)


__all__ = [
    "EMOTION_LABELS",
    "EmotionClassifier",
    "EmotionResult",
    "NEUTRAL_LABEL",
    "SentenceAnnotation",
    "UNKNOWN_LABEL",
    "build_result",
    "create_emotion_classifier",
    "dominant_emotion",
    "emotion_counts",
    "emotion_percentages",
    "softmax",
]
