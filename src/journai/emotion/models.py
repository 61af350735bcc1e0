"""Data models for emotion classification results."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class EmotionResult:
    """Classification of one sentence.

    Attributes:
        label: Highest-probability emotion
        score: Probability of that emotion (0.0 to 1.0)
        all_scores: Probability per label, in label-set order
    """

    label: str
    score: float
    all_scores: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "label": self.label,
            "score": self.score,
            "all_scores": dict(self.all_scores),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmotionResult":
        """Create from dictionary."""
        return cls(
            label=data["label"],
            score=float(data["score"]),
            all_scores={k: float(v) for k, v in data.get("all_scores", {}).items()},
        )


@dataclass
class SentenceAnnotation:
    """A sentence paired with its emotion.

    Attributes:
        sentence: Sentence text
        emotion: Classification result
    """

    sentence: str
    emotion: EmotionResult

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"sentence": self.sentence, "emotion": self.emotion.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SentenceAnnotation":
        """Create from dictionary."""
        return cls(
            sentence=data["sentence"],
            emotion=EmotionResult.from_dict(data["emotion"]),
        )


__all__ = ["EmotionResult", "SentenceAnnotation"]
