"""Note processing pipeline.

Runs title generation and per-sentence emotion analysis for a new journal
note. Both steps are best-effort: a failure leaves the default in place.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .emotion import EmotionClassifier, SentenceAnnotation, dominant_emotion
from .errors import EmptyInputError, JournaiError
from .generation import TitleGenerator

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Note"


@dataclass
class ProcessedNote:
    """A note with generated metadata.

    Attributes:
        content: Note text as written
        title: Generated title, or DEFAULT_TITLE
        emotions: Per-sentence annotations, or None if analysis did not run
        created_at: When the note was processed
    """

    content: str
    title: str = DEFAULT_TITLE
    emotions: list[SentenceAnnotation] | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def mood(self) -> str | None:
        """Get the dominant emotion, if any."""
        if not self.emotions:
            return None
        return dominant_emotion(self.emotions)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "title": self.title,
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
            "emotionAnalysis": (
                [a.to_dict() for a in self.emotions] if self.emotions is not None else None
            ),
        }


class NoteProcessor:
    """Adds a title and emotion analysis to new notes.

    Either collaborator may be missing or uninitialized; its step is skipped.
    """

    def __init__(
        self,
        title_generator: TitleGenerator | None = None,
        emotion_classifier: EmotionClassifier | None = None,
    ) -> None:
        """Initialize note processor.

        Args:
            title_generator: Generates note titles
            emotion_classifier: Classifies sentence emotions
        """
        self._title_generator = title_generator
        self._emotion_classifier = emotion_classifier

    async def process(self, content: str) -> ProcessedNote:
        """Process note content.

        Args:
            content: Note text

        Returns:
            ProcessedNote with whatever metadata could be produced

        Raises:
            EmptyInputError: If content is blank
        """
        if not content.strip():
            raise EmptyInputError("Note content cannot be empty")

        note = ProcessedNote(content=content)

        if self._title_generator is not None and self._title_generator.is_initialized:
            try:
                title = await self._title_generator.generate_title(content)
                if title:
                    note.title = title
            except JournaiError as e:
                logger.warning(f"Error generating title: {e}")

        if self._emotion_classifier is not None and self._emotion_classifier.is_initialized:
            try:
                note.emotions = await self._emotion_classifier.analyze_sentences(content)
            except JournaiError as e:
                logger.warning(f"Error analyzing emotions: {e}")

        logger.info(
            f"Processed note: title={note.title!r}, "
            f"sentences={len(note.emotions) if note.emotions is not None else 0}"
        )
        return note


__all__ = ["DEFAULT_TITLE", "NoteProcessor", "ProcessedNote"]
