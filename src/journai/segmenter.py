"""Heuristic sentence segmentation for journal text.

Splits after runs of sentence-ending punctuation followed by whitespace, and
at blank lines. Punctuation stays with the sentence it ends.
"""

import re

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+\s+|\n{2,}")


def split_sentences(text: str) -> list[str]:
    """Split text into sentences in reading order.

    Args:
        text: Raw text

    Returns:
        Non-empty, stripped sentences

    Examples:
        >>> split_sentences("Hello world. How are you? Fine.")
        ['Hello world.', 'How are you?', 'Fine.']
    """
    text = text.strip()
    sentences: list[str] = []

    last_end = 0
    for match in _SENTENCE_BOUNDARY.finditer(text):
        sentences.append(text[last_end : match.end()].strip())
        last_end = match.end()

    if last_end < len(text):
        sentences.append(text[last_end:].strip())

    return [s for s in sentences if s]


class SentenceSegmenter:
    """Callable wrapper around split_sentences for injection into sessions."""

    def split(self, text: str) -> list[str]:
        """Split text into sentences."""
        return split_sentences(text)

    def __call__(self, text: str) -> list[str]:
        return split_sentences(text)


__all__ = ["SentenceSegmenter", "split_sentences"]
