"""Note-level generation agents.

TitleGenerator and QuestioningAgent share one GenerativeSession and differ only
in prompt and how much of the note they send.
"""

import logging

from ..errors import EmptyInputError, NotInitializedError
from .prompts import (
    QUESTION_CONTENT_CHARS,
    TITLE_CONTENT_CHARS,
    build_question_prompt,
    build_title_prompt,
)
from .session import GenerativeSession

logger = logging.getLogger(__name__)


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


class TitleGenerator:
    """Generates a short title for a journal note."""

    def __init__(self, session: GenerativeSession, max_chars: int = TITLE_CONTENT_CHARS) -> None:
        self._session = session
        self._max_chars = max_chars

    @property
    def is_initialized(self) -> bool:
        """Check if the underlying session is ready."""
        return self._session.is_initialized

    async def generate_title(self, note_content: str) -> str:
        """Generate a title from the start of a note.

        Raises:
            NotInitializedError: If the session is not initialized
            EmptyInputError: If note_content is blank
        """
        if not self._session.is_initialized:
            raise NotInitializedError("Title generator not initialized")
        if not note_content.strip():
            raise EmptyInputError("Note content cannot be empty")

        prompt = build_title_prompt(note_content, self._max_chars)
        title = _first_line(await self._session.generate(prompt)).strip("\"'")
        logger.debug(f"Generated title: {title!r}")
        return title


class QuestioningAgent:
    """Asks a reflective follow-up question about a journal note."""

    def __init__(
        self, session: GenerativeSession, max_chars: int = QUESTION_CONTENT_CHARS
    ) -> None:
        self._session = session
        self._max_chars = max_chars

    @property
    def is_initialized(self) -> bool:
        """Check if the underlying session is ready."""
        return self._session.is_initialized

    async def generate_question(self, note_content: str) -> str:
        """Generate a thought-provoking question about a note.

        Raises:
            NotInitializedError: If the session is not initialized
            EmptyInputError: If note_content is blank
        """
        if not self._session.is_initialized:
            raise NotInitializedError("Questioning agent not initialized")
        if not note_content.strip():
            raise EmptyInputError("Note content cannot be empty")

        logger.debug(f"Generating question for note of {len(note_content)} chars")
        prompt = build_question_prompt(note_content, self._max_chars)
        question = (await self._session.generate(prompt)).strip()
        logger.debug(f"Generated question: {question!r}")
        return question


__all__ = ["QuestioningAgent", "TitleGenerator"]
