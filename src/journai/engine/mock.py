"""Mock inference engine for testing.

Provides a controllable engine that returns scripted logits and counts every
tensor it allocates and frees.
"""

from collections.abc import Callable, Sequence

import numpy as np

from .base import Tensor

CLASSIFIER_INPUTS = ["input_ids", "attention_mask", "token_type_ids"]
GENERATOR_INPUTS = ["input_ids", "attention_mask", "position_ids"]


class MockInferenceEngine:
    """Mock inference engine for testing.

    Returns classification logits shaped [1, num_classes] by default. Call
    set_next_tokens() to emit causal-LM logits shaped [1, seq_len, vocab_size]
    whose last row selects a scripted token on each forward pass.
    """

    def __init__(self, input_names: list[str] | None = None) -> None:
        """Initialize mock engine."""
        self._input_names = list(input_names or CLASSIFIER_INPUTS)
        self._loaded = False
        self._closed_count = 0
        self._logits: list[float] = [0.0, 1.0, 0.5]
        self._responder: Callable[[dict[str, np.ndarray]], np.ndarray | None] | None = None
        self._empty_calls: set[int] = set()
        self._error_calls: dict[int, str] = {}
        self._release_error: str | None = None
        self._load_error: str | None = None
        self._run_count = 0
        self._allocated = 0
        self._released = 0
        self._live: set[int] = set()
        self._seen_lengths: list[int] = []

    def set_logits(self, logits: Sequence[float]) -> None:
        """Set the classification logits returned by every forward pass."""
        self._logits = [float(x) for x in logits]
        self._responder = None

    def set_next_tokens(self, tokens: Sequence[int], vocab_size: int = 32) -> None:
        """Script one generated token per forward pass.

        Once the script runs out the last token repeats.
        """
        script = list(tokens)
        if not script:
            raise ValueError("Token script must not be empty")

        def respond(inputs: dict[str, np.ndarray]) -> np.ndarray:
            seq_len = inputs["input_ids"].shape[1]
            token = script[min(self._run_count - 1, len(script) - 1)]
            logits = np.zeros((1, seq_len, vocab_size), dtype=np.float32)
            logits[0, -1, token] = 10.0
            return logits

        self._responder = respond

    def set_responder(self, responder: Callable[[dict[str, np.ndarray]], np.ndarray | None]) -> None:
        """Compute outputs from the raw input arrays."""
        self._responder = responder

    def fail_with_empty_output(self, call_index: int) -> None:
        """Return no outputs on the given forward pass (1-based)."""
        self._empty_calls.add(call_index)

    def fail_with_error(self, call_index: int, message: str = "mock engine failure") -> None:
        """Raise RuntimeError on the given forward pass (1-based)."""
        self._error_calls[call_index] = message

    def set_release_error(self, message: str | None) -> None:
        """Raise RuntimeError from release() (the tensor is still counted as freed)."""
        self._release_error = message

    def set_load_error(self, message: str | None) -> None:
        """Raise RuntimeError from load()."""
        self._load_error = message

    def load(self, model_bytes: bytes) -> None:
        """Pretend to load a model."""
        if self._load_error:
            raise RuntimeError(self._load_error)
        if not model_bytes:
            raise RuntimeError("Model bytes are empty")
        self._loaded = True

    @property
    def is_loaded(self) -> bool:
        """Check if a model is loaded."""
        return self._loaded

    @property
    def input_names(self) -> list[str]:
        """Get the mock graph input names."""
        return list(self._input_names)

    def create_tensor(self, values: Sequence[int], shape: Sequence[int]) -> Tensor:
        """Allocate a tracked int64 tensor."""
        array = np.asarray(values, dtype=np.int64).reshape(tuple(shape))
        return self._track(Tensor(data=array, shape=tuple(shape)))

    def run(self, inputs: dict[str, Tensor]) -> list[Tensor] | None:
        """Return scripted outputs."""
        if not self._loaded:
            raise RuntimeError("No model loaded")

        self._run_count += 1
        for name, tensor in inputs.items():
            if tensor.released:
                raise RuntimeError(f"Input {name} was released before the forward pass")

        arrays = {name: t.numpy() for name, t in inputs.items()}
        self._seen_lengths.append(arrays["input_ids"].shape[1])

        if self._run_count in self._error_calls:
            raise RuntimeError(self._error_calls[self._run_count])
        if self._run_count in self._empty_calls:
            return None

        if self._responder is not None:
            output = self._responder(arrays)
            if output is None:
                return None
        else:
            output = np.asarray([self._logits], dtype=np.float32)

        return [self._track(Tensor(data=output, shape=tuple(output.shape)))]

    def release(self, tensor: Tensor) -> None:
        """Free a tracked tensor."""
        if tensor.released:
            return
        tensor.released = True
        tensor.data = None
        if id(tensor) in self._live:
            self._live.discard(id(tensor))
            self._released += 1
        if self._release_error:
            raise RuntimeError(self._release_error)

    def close(self) -> None:
        """Unload the mock model."""
        if self._loaded:
            self._closed_count += 1
        self._loaded = False

    def _track(self, tensor: Tensor) -> Tensor:
        self._allocated += 1
        self._live.add(id(tensor))
        return tensor

    @property
    def allocated(self) -> int:
        """Get number of tensors allocated."""
        return self._allocated

    @property
    def released(self) -> int:
        """Get number of tensors released."""
        return self._released

    @property
    def live_tensors(self) -> int:
        """Get number of tensors allocated but not released."""
        return len(self._live)

    @property
    def run_count(self) -> int:
        """Get number of forward passes."""
        return self._run_count

    @property
    def closed_count(self) -> int:
        """Get number of times a loaded model was closed."""
        return self._closed_count

    @property
    def seen_lengths(self) -> list[int]:
        """Get the sequence length of every forward pass input."""
        return list(self._seen_lengths)

    def clear(self) -> None:
        """Reset failure injection and counters."""
        self._empty_calls.clear()
        self._error_calls.clear()
        self._release_error = None
        self._run_count = 0
        self._allocated = 0
        self._released = 0
        self._live.clear()
        self._seen_lengths.clear()


__all__ = ["CLASSIFIER_INPUTS", "GENERATOR_INPUTS", "MockInferenceEngine"]
