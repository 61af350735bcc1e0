"""Emotion classification session.

Wraps a BERT-style sequence classifier: WordPiece encoding, one forward pass
per sentence, softmax over the output row and argmax label selection.
"""

import asyncio
import logging
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path

import numpy as np

from ..engine import InferenceEngine, TensorScope
from ..errors import (
    EmptyInputError,
    InferenceError,
    InitializationError,
    NotInitializedError,
    SessionBusyError,
)
from ..segmenter import split_sentences
from ..tokenizer import WordPieceTokenizer
from .labels import EMOTION_LABELS, UNKNOWN_LABEL
from .models import EmotionResult, SentenceAnnotation

logger = logging.getLogger(__name__)


def softmax(logits: Sequence[float] | np.ndarray) -> np.ndarray:
    """Numerically stable softmax over a 1-D logit vector.

    Raises:
        ValueError: If logits is empty
    """
    values = np.asarray(logits, dtype=np.float64).reshape(-1)
    if values.size == 0:
        raise ValueError("Cannot apply softmax to an empty vector")
    exp_values = np.exp(values - values.max())
    return exp_values / exp_values.sum()


def build_result(logits: Sequence[float] | np.ndarray, labels: Sequence[str]) -> EmotionResult:
    """Turn one row of logits into an EmotionResult.

    Ties resolve to the lowest index. If the row width differs from the label
    count only the overlapping prefix appears in all_scores.
    """
    scores = softmax(logits)
    index = int(np.argmax(scores))

    overlap = min(len(scores), len(labels))
    if len(scores) != len(labels):
        logger.warning(
            f"Classifier output width {len(scores)} does not match "
            f"{len(labels)} labels; using first {overlap}"
        )

    all_scores = {labels[i]: float(scores[i]) for i in range(overlap)}
    label = labels[index] if index < len(labels) else UNKNOWN_LABEL

    return EmotionResult(label=label, score=float(scores[index]), all_scores=all_scores)


class EmotionClassifier:
    """Sentence-level emotion classification session.

    One instance owns one loaded model. At most one forward pass runs at a
    time; overlapping calls raise SessionBusyError.
    """

    def __init__(
        self,
        engine: InferenceEngine,
        labels: Sequence[str] = EMOTION_LABELS,
        max_length: int = 512,
        segmenter: Callable[[str], list[str]] = split_sentences,
    ) -> None:
        """Initialize classifier.

        Args:
            engine: Inference engine that will own the model
            labels: Label names in model output order
            max_length: Fixed encoded sequence length
            segmenter: Sentence splitter used by analyze_sentences
        """
        self._engine = engine
        self._labels = tuple(labels)
        self._max_length = max_length
        self._segmenter = segmenter
        self._tokenizer: WordPieceTokenizer | None = None
        self._initialized = False
        self._busy = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        """Check if the model and vocabulary are loaded."""
        return self._initialized

    @property
    def labels(self) -> tuple[str, ...]:
        """Get the label set."""
        return self._labels

    @property
    def tokenizer(self) -> WordPieceTokenizer | None:
        """Get the tokenizer, if initialized."""
        return self._tokenizer

    def initialize(self, model_bytes: bytes, vocab_path: str | Path) -> None:
        """Load the vocabulary and model.

        Calling this on an initialized session does nothing.

        Raises:
            InitializationError: If the vocabulary or model cannot be loaded
        """
        if self._initialized:
            logger.info("Emotion classifier already initialized")
            return

        start = time.time()

        try:
            tokenizer = WordPieceTokenizer.from_file(vocab_path, max_length=self._max_length)
        except (OSError, ValueError) as e:
            raise InitializationError(f"Failed to load vocabulary: {e}", path=vocab_path) from e

        try:
            self._engine.load(model_bytes)
        except Exception as e:
            raise InitializationError(f"Failed to load emotion model: {e}") from e

        self._tokenizer = tokenizer
        self._initialized = True

        load_time = (time.time() - start) * 1000
        logger.info(f"Emotion classifier initialized in {load_time:.0f}ms")

    def initialize_from_files(self, model_path: str | Path, vocab_path: str | Path) -> None:
        """Read model bytes from disk and initialize.

        Raises:
            InitializationError: If the model file cannot be read
        """
        if self._initialized:
            logger.info("Emotion classifier already initialized")
            return
        try:
            model_bytes = Path(model_path).read_bytes()
        except OSError as e:
            raise InitializationError(f"Failed to read emotion model: {e}", path=model_path) from e
        self.initialize(model_bytes, vocab_path)

    async def classify(self, sentence: str) -> EmotionResult:
        """Classify the emotion of one sentence.

        Raises:
            NotInitializedError: If initialize() has not succeeded
            EmptyInputError: If sentence is blank
            InferenceError: If the engine fails or returns invalid output
            SessionBusyError: If another call is in flight
        """
        tokenizer = self._ready_tokenizer(sentence)
        if not self._busy.acquire(blocking=False):
            raise SessionBusyError("Emotion classifier is busy")
        try:
            return await self._classify(tokenizer, sentence)
        finally:
            self._busy.release()

    async def analyze_sentences(self, text: str) -> list[SentenceAnnotation]:
        """Classify every sentence of text in order.

        The first per-sentence failure propagates.

        Raises:
            NotInitializedError: If initialize() has not succeeded
            EmptyInputError: If text is blank
            InferenceError: If any sentence fails
            SessionBusyError: If another call is in flight
        """
        tokenizer = self._ready_tokenizer(text)
        if not self._busy.acquire(blocking=False):
            raise SessionBusyError("Emotion classifier is busy")
        try:
            results = []
            for sentence in self._segmenter(text):
                if not sentence.strip():
                    continue
                emotion = await self._classify(tokenizer, sentence)
                results.append(SentenceAnnotation(sentence=sentence, emotion=emotion))
            logger.debug(f"Analyzed {len(results)} sentences")
            return results
        finally:
            self._busy.release()

    def _ready_tokenizer(self, text: str) -> WordPieceTokenizer:
        tokenizer = self._tokenizer
        if not self._initialized or tokenizer is None:
            raise NotInitializedError("Emotion classifier not initialized. Call initialize() first.")
        if not text or not text.strip():
            raise EmptyInputError("Text cannot be empty")
        return tokenizer

    async def _classify(self, tokenizer: WordPieceTokenizer, sentence: str) -> EmotionResult:
        encoded = tokenizer.encode(sentence, self._max_length)
        shape = [1, len(encoded)]

        with TensorScope(self._engine) as scope:
            inputs = {
                name: scope.tensor(values, shape) for name, values in encoded.as_dict().items()
            }

            try:
                outputs = await asyncio.to_thread(self._engine.run, inputs)
            except Exception as e:
                raise InferenceError(f"Emotion inference failed: {e}") from e

            outputs = scope.adopt(outputs)
            if not outputs:
                raise InferenceError("Emotion inference returned no outputs")

            logits = outputs[0].numpy()
            if logits.ndim != 2 or logits.shape[0] < 1 or logits.shape[1] < 1:
                raise InferenceError(f"Expected logits shaped [1, classes], got {logits.shape}")

            return build_result(logits[0], self._labels)

    def dispose(self) -> None:
        """Release the model. Safe to call more than once.

        Raises:
            SessionBusyError: If a call is in flight
        """
        if not self._busy.acquire(blocking=False):
            raise SessionBusyError("Cannot dispose emotion classifier while a call is in flight")
        try:
            if self._initialized:
                self._engine.close()
                self._tokenizer = None
                self._initialized = False
                logger.debug("Emotion classifier disposed")
        finally:
            self._busy.release()


__all__ = ["EmotionClassifier", "build_result", "softmax"]
