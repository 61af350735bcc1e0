"""Unit tests for inference engines and tensor scopes."""

from unittest import mock

import numpy as np
import pytest

from journai.config import EngineConfig
from journai.engine import (
    GENERATOR_INPUTS,
    MockInferenceEngine,
    Tensor,
    TensorScope,
    create_engine,
)


class TestTensor:
    """Tests for the Tensor handle."""

    def test_numpy_view(self) -> None:
        """Test numpy() returns the contents."""
        tensor = Tensor(data=np.array([[1, 2]]), shape=(1, 2))
        assert tensor.numpy().tolist() == [[1, 2]]

    def test_released_tensor_cannot_be_read(self) -> None:
        """Test reading a released tensor raises."""
        tensor = Tensor(data=None, shape=(1,), released=True)
        with pytest.raises(ValueError):
            tensor.numpy()


class TestMockInferenceEngine:
    """Tests for MockInferenceEngine."""

    def test_load_rejects_empty_bytes(self) -> None:
        """Test empty model bytes fail to load."""
        engine = MockInferenceEngine()
        with pytest.raises(RuntimeError):
            engine.load(b"")
        assert engine.is_loaded is False

    def test_run_returns_scripted_logits(self) -> None:
        """Test classification logits are returned as [1, n]."""
        engine = MockInferenceEngine()
        engine.load(b"model")
        engine.set_logits([0.1, 0.2, 0.3])

        ids = engine.create_tensor([1, 2, 3], [1, 3])
        outputs = engine.run({"input_ids": ids})

        assert outputs is not None
        assert outputs[0].shape == (1, 3)
        assert outputs[0].numpy().tolist()[0] == pytest.approx([0.1, 0.2, 0.3])

    def test_next_token_script(self) -> None:
        """Test causal-LM logits select the scripted token at the last position."""
        engine = MockInferenceEngine(input_names=GENERATOR_INPUTS)
        engine.load(b"model")
        engine.set_next_tokens([5, 7], vocab_size=10)

        first = engine.run({"input_ids": engine.create_tensor([1, 2], [1, 2])})
        second = engine.run({"input_ids": engine.create_tensor([1, 2, 5], [1, 3])})
        third = engine.run({"input_ids": engine.create_tensor([1, 2, 5, 7], [1, 4])})

        assert int(np.argmax(first[0].numpy()[0, -1])) == 5
        assert int(np.argmax(second[0].numpy()[0, -1])) == 7
        assert int(np.argmax(third[0].numpy()[0, -1])) == 7
        assert engine.seen_lengths == [2, 3, 4]

    def test_failure_injection(self) -> None:
        """Test empty outputs and errors on chosen calls."""
        engine = MockInferenceEngine()
        engine.load(b"model")
        engine.fail_with_empty_output(1)
        engine.fail_with_error(2, "boom")

        tensor = engine.create_tensor([1], [1, 1])
        assert engine.run({"input_ids": tensor}) is None
        with pytest.raises(RuntimeError, match="boom"):
            engine.run({"input_ids": tensor})
        assert engine.run({"input_ids": tensor}) is not None

    def test_rejects_released_inputs(self) -> None:
        """Test the engine refuses inputs that were already freed."""
        engine = MockInferenceEngine()
        engine.load(b"model")
        tensor = engine.create_tensor([1], [1, 1])
        engine.release(tensor)

        with pytest.raises(RuntimeError):
            engine.run({"input_ids": tensor})

    def test_allocation_accounting(self) -> None:
        """Test allocated and released counters."""
        engine = MockInferenceEngine()
        engine.load(b"model")
        a = engine.create_tensor([1], [1, 1])
        b = engine.create_tensor([2], [1, 1])

        engine.release(a)
        engine.release(a)

        assert engine.allocated == 2
        assert engine.released == 1
        assert engine.live_tensors == 1
        engine.release(b)
        assert engine.live_tensors == 0

    def test_close_counts_once(self) -> None:
        """Test closing twice only releases the model once."""
        engine = MockInferenceEngine()
        engine.load(b"model")
        engine.close()
        engine.close()
        assert engine.closed_count == 1


class TestTensorScope:
    """Tests for TensorScope."""

    def test_releases_on_success(self) -> None:
        """Test every tensor is released when the block exits."""
        engine = MockInferenceEngine()
        engine.load(b"model")

        with TensorScope(engine) as scope:
            tensor = scope.tensor([1, 2], [1, 2])
            outputs = scope.adopt(engine.run({"input_ids": tensor}))
            assert scope.owned == 2
            assert outputs

        assert engine.allocated == 2
        assert engine.live_tensors == 0

    def test_releases_on_exception(self) -> None:
        """Test tensors are released when the block raises."""
        engine = MockInferenceEngine()

        with pytest.raises(KeyError):
            with TensorScope(engine) as scope:
                scope.tensor([1], [1, 1])
                scope.tensor([2], [1, 1])
                raise KeyError("primary")

        assert engine.live_tensors == 0

    def test_release_errors_do_not_mask_primary_error(self) -> None:
        """Test a failing release never replaces the block's exception."""
        engine = MockInferenceEngine()
        engine.set_release_error("release failed")

        with pytest.raises(KeyError, match="primary"):
            with TensorScope(engine) as scope:
                scope.tensor([1], [1, 1])
                raise KeyError("primary")

    def test_release_errors_do_not_mask_result(self) -> None:
        """Test a failing release never replaces the block's return value."""
        engine = MockInferenceEngine()
        engine.set_release_error("release failed")

        def compute() -> int:
            with TensorScope(engine) as scope:
                scope.tensor([1], [1, 1])
                scope.tensor([2], [1, 1])
                return 42

        assert compute() == 42
        assert engine.released == 2

    def test_adopt_none(self) -> None:
        """Test adopting no outputs returns an empty list."""
        engine = MockInferenceEngine()
        with TensorScope(engine) as scope:
            assert scope.adopt(None) == []


class TestCreateEngine:
    """Tests for the engine factory."""

    def test_create_mock_engine(self) -> None:
        """Test creating a mock engine."""
        engine = create_engine(use_mock=True)
        assert isinstance(engine, MockInferenceEngine)

    def test_config_use_mock(self) -> None:
        """Test the config flag selects the mock engine."""
        engine = create_engine(EngineConfig(use_mock=True), input_names=GENERATOR_INPUTS)
        assert isinstance(engine, MockInferenceEngine)
        assert engine.input_names == GENERATOR_INPUTS

    def test_onnx_unavailable_raises(self) -> None:
        """Test a clear error when onnxruntime is missing."""
        with mock.patch("journai.engine.onnx.ONNXRUNTIME_AVAILABLE", False):
            with pytest.raises(RuntimeError, match="onnxruntime"):
                create_engine(EngineConfig(providers=["CPUExecutionProvider"]))
