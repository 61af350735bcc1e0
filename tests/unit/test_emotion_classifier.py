"""Unit tests for the emotion classification session."""

import asyncio
import logging
from pathlib import Path

import numpy as np
import pytest

from journai.emotion import EMOTION_LABELS, EmotionClassifier, build_result, softmax
from journai.engine import MockInferenceEngine
from journai.errors import (
    EmptyInputError,
    InferenceError,
    InitializationError,
    NotInitializedError,
    SessionBusyError,
)

MAX_LENGTH = 16
HAPPY_ID = 13
SAD_ID = 14


def _one_hot_logits(index: int, width: int = len(EMOTION_LABELS)) -> list[float]:
    logits = [0.0] * width
    logits[index] = 5.0
    return logits


@pytest.fixture
def engine() -> MockInferenceEngine:
    """Create mock engine."""
    return MockInferenceEngine()


@pytest.fixture
def classifier(engine: MockInferenceEngine, wordpiece_vocab_path: Path) -> EmotionClassifier:
    """Create an initialized classifier over the mock engine."""
    classifier = EmotionClassifier(engine=engine, max_length=MAX_LENGTH)
    classifier.initialize(b"model", wordpiece_vocab_path)
    return classifier


class TestSoftmax:
    """Tests for softmax."""

    def test_sums_to_one_and_non_negative(self) -> None:
        """Test probabilities are a distribution for varied inputs."""
        rng = np.random.default_rng(0)
        for _ in range(50):
            logits = rng.normal(0, 20, size=rng.integers(1, 30))
            probs = softmax(logits)
            assert abs(probs.sum() - 1.0) < 1e-6
            assert (probs >= 0).all()

    def test_large_logits_are_stable(self) -> None:
        """Test large logits do not overflow."""
        probs = softmax([1000.0, 1001.0, 1002.0])
        assert np.isfinite(probs).all()
        assert abs(probs.sum() - 1.0) < 1e-6
        assert probs[2] > probs[1] > probs[0]

    def test_empty_vector(self) -> None:
        """Test empty input is rejected."""
        with pytest.raises(ValueError):
            softmax([])


class TestBuildResult:
    """Tests for turning logits into an EmotionResult."""

    def test_ties_pick_first_maximum(self) -> None:
        """Test [0.5, 0.5, 0.9, 0.9] selects index 2."""
        labels = ["a", "b", "c", "d"]
        result = build_result([0.5, 0.5, 0.9, 0.9], labels)
        assert result.label == "c"

    def test_score_is_probability_of_label(self) -> None:
        """Test score equals the chosen label's probability."""
        result = build_result([0.0, 2.0, 1.0], ["x", "y", "z"])
        assert result.label == "y"
        assert result.score == pytest.approx(result.all_scores["y"])
        assert sum(result.all_scores.values()) == pytest.approx(1.0)

    def test_fewer_outputs_than_labels(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a 10-wide output with 13 labels maps 10 scores and warns."""
        with caplog.at_level(logging.WARNING):
            result = build_result(_one_hot_logits(3, width=10), EMOTION_LABELS)

        assert len(result.all_scores) == 10
        assert list(result.all_scores) == list(EMOTION_LABELS[:10])
        assert result.label == "Surprise"
        assert "does not match" in caplog.text

    def test_more_outputs_than_labels(self) -> None:
        """Test an argmax beyond the label set reports Unknown."""
        result = build_result([0.0, 0.0, 0.0, 0.0, 9.0], ["a", "b", "c"])
        assert result.label == "Unknown"
        assert len(result.all_scores) == 3

    def test_matching_width_does_not_warn(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test no warning when widths match."""
        with caplog.at_level(logging.WARNING):
            build_result(_one_hot_logits(0), EMOTION_LABELS)
        assert "does not match" not in caplog.text


class TestInitialization:
    """Tests for classifier lifecycle."""

    def test_not_initialized(self, engine: MockInferenceEngine) -> None:
        """Test classify before initialize is rejected."""
        classifier = EmotionClassifier(engine=engine)
        with pytest.raises(NotInitializedError):
            asyncio.run(classifier.classify("hello"))

    def test_missing_vocab(self, engine: MockInferenceEngine, tmp_path: Path) -> None:
        """Test an unreadable vocabulary fails initialization."""
        classifier = EmotionClassifier(engine=engine)
        missing = tmp_path / "missing.txt"

        with pytest.raises(InitializationError) as exc_info:
            classifier.initialize(b"model", missing)

        assert exc_info.value.path == missing
        assert classifier.is_initialized is False

    def test_model_load_failure(
        self, engine: MockInferenceEngine, wordpiece_vocab_path: Path
    ) -> None:
        """Test an engine load error fails initialization."""
        engine.set_load_error("corrupt model")
        classifier = EmotionClassifier(engine=engine)

        with pytest.raises(InitializationError, match="corrupt model"):
            classifier.initialize(b"model", wordpiece_vocab_path)
        assert classifier.is_initialized is False

    def test_reinitialize_is_noop(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine, tmp_path: Path
    ) -> None:
        """Test a second initialize keeps the loaded session."""
        engine.set_load_error("should not be called")
        classifier.initialize(b"other", tmp_path / "missing.txt")
        assert classifier.is_initialized is True

    def test_initialize_from_missing_file(
        self, engine: MockInferenceEngine, wordpiece_vocab_path: Path, tmp_path: Path
    ) -> None:
        """Test an unreadable model file fails initialization."""
        classifier = EmotionClassifier(engine=engine)
        with pytest.raises(InitializationError):
            classifier.initialize_from_files(tmp_path / "model.onnx", wordpiece_vocab_path)

    def test_initialize_from_files(
        self, engine: MockInferenceEngine, wordpiece_vocab_path: Path, tmp_path: Path
    ) -> None:
        """Test initializing from a model file on disk."""
        model_path = tmp_path / "model.onnx"
        model_path.write_bytes(b"onnx")
        classifier = EmotionClassifier(engine=engine)

        classifier.initialize_from_files(model_path, wordpiece_vocab_path)

        assert classifier.is_initialized is True
        assert engine.is_loaded is True

    def test_dispose_releases_once(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test dispose closes the engine exactly once."""
        classifier.dispose()
        classifier.dispose()

        assert engine.closed_count == 1
        with pytest.raises(NotInitializedError):
            asyncio.run(classifier.classify("hello"))

    def test_dispose_during_classify_is_rejected(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test dispose cannot pull the model out from under a running call."""
        errors = []

        def respond(inputs):
            try:
                classifier.dispose()
            except SessionBusyError as e:
                errors.append(e)
            return np.asarray([_one_hot_logits(5)], dtype=np.float32)

        engine.set_responder(respond)

        result = asyncio.run(classifier.classify("I am so happy today!"))

        assert result.label == "Happiness"
        assert len(errors) == 1
        assert classifier.is_initialized is True
        assert engine.closed_count == 0

        classifier.dispose()
        assert classifier.is_initialized is False


class TestClassify:
    """Tests for single-sentence classification."""

    def test_classify_returns_label(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test the argmax label is returned with all scores."""
        engine.set_logits(_one_hot_logits(5))

        result = asyncio.run(classifier.classify("I am so happy today!"))

        assert result.label == "Happiness"
        assert 0.0 < result.score <= 1.0
        assert len(result.all_scores) == len(EMOTION_LABELS)
        assert engine.seen_lengths == [MAX_LENGTH]

    def test_blank_sentence(self, classifier: EmotionClassifier) -> None:
        """Test blank input is rejected."""
        with pytest.raises(EmptyInputError):
            asyncio.run(classifier.classify("   "))

    def test_tensors_released_after_success(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test inputs and outputs are all released."""
        asyncio.run(classifier.classify("hello world"))

        assert engine.allocated == 4
        assert engine.live_tensors == 0

    def test_empty_output_raises(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test no output is an InferenceError and tensors are released."""
        engine.fail_with_empty_output(1)

        with pytest.raises(InferenceError):
            asyncio.run(classifier.classify("hello"))
        assert engine.live_tensors == 0

    def test_engine_error_raises(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test an engine exception is wrapped and tensors are released."""
        engine.fail_with_error(1, "device lost")

        with pytest.raises(InferenceError, match="device lost"):
            asyncio.run(classifier.classify("hello"))
        assert engine.live_tensors == 0

    def test_wrong_output_rank(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test a non 2-D output is rejected."""
        engine.set_responder(lambda inputs: np.zeros((1, 2, 3), dtype=np.float32))

        with pytest.raises(InferenceError, match="Expected logits"):
            asyncio.run(classifier.classify("hello"))
        assert engine.live_tensors == 0

    def test_label_mismatch_is_not_fatal(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test a 10-wide model output still classifies."""
        engine.set_logits(_one_hot_logits(1, width=10))

        result = asyncio.run(classifier.classify("hello"))

        assert result.label == "Anger"
        assert len(result.all_scores) == 10

    def test_release_failure_keeps_result(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test a failing tensor release does not replace the result."""
        engine.set_logits(_one_hot_logits(2))
        engine.set_release_error("release failed")

        result = asyncio.run(classifier.classify("hello"))

        assert result.label == "Love"

    def test_concurrent_calls_fail_fast(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test a second in-flight call raises SessionBusyError."""

        async def both():
            return await asyncio.gather(
                classifier.classify("hello"),
                classifier.classify("world"),
                return_exceptions=True,
            )

        first, second = asyncio.run(both())

        assert first.label in EMOTION_LABELS
        assert isinstance(second, SessionBusyError)
        assert engine.run_count == 1


class TestAnalyzeSentences:
    """Tests for per-sentence analysis."""

    @pytest.fixture(autouse=True)
    def keyword_responder(self, engine: MockInferenceEngine) -> None:
        """Pick Happiness for 'happy', Sadness for 'sad', else Neutral."""

        def respond(inputs):
            ids = inputs["input_ids"][0].tolist()
            if HAPPY_ID in ids:
                index = EMOTION_LABELS.index("Happiness")
            elif SAD_ID in ids:
                index = EMOTION_LABELS.index("Sadness")
            else:
                index = EMOTION_LABELS.index("Neutral")
            return np.asarray([_one_hot_logits(index)], dtype=np.float32)

        engine.set_responder(respond)

    def test_annotations_in_order(self, classifier: EmotionClassifier) -> None:
        """Test each sentence is classified in reading order."""
        annotations = asyncio.run(
            classifier.analyze_sentences("I am so happy. I am sad today! How are you?")
        )

        assert [a.sentence for a in annotations] == [
            "I am so happy.",
            "I am sad today!",
            "How are you?",
        ]
        assert [a.emotion.label for a in annotations] == ["Happiness", "Sadness", "Neutral"]

    def test_blank_text(self, classifier: EmotionClassifier) -> None:
        """Test blank text is rejected."""
        with pytest.raises(EmptyInputError):
            asyncio.run(classifier.analyze_sentences("\n\n"))

    def test_failure_propagates(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test the first failing sentence aborts the analysis."""
        engine.fail_with_empty_output(2)

        with pytest.raises(InferenceError):
            asyncio.run(classifier.analyze_sentences("One. Two. Three."))

        assert engine.run_count == 2
        assert engine.live_tensors == 0

    def test_balanced_tensors_over_many_calls(
        self, classifier: EmotionClassifier, engine: MockInferenceEngine
    ) -> None:
        """Test allocations and releases balance across success and failure."""
        engine.fail_with_error(3)
        engine.fail_with_empty_output(5)

        for text in ["I am happy. So sad.", "Fine.", "Hello. World.", "Again."]:
            try:
                asyncio.run(classifier.analyze_sentences(text))
            except InferenceError:
                pass

        assert engine.allocated == engine.released
        assert engine.live_tensors == 0
