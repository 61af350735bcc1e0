"""Inference engine protocol and tensor ownership helpers.

Defines the interface a local runtime must implement to execute one forward
pass, and the scope object sessions use to release tensors on every exit path.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Tensor:
    """Handle to an engine-owned tensor.

    Attributes:
        data: Engine-native value (numpy array or runtime value)
        shape: Tensor dimensions
        released: True once the engine has freed the tensor
    """

    data: Any
    shape: tuple[int, ...] = field(default_factory=tuple)
    released: bool = False

    def numpy(self) -> np.ndarray:
        """Get the tensor contents as a numpy array."""
        if self.released:
            raise ValueError("Tensor has already been released")
        if hasattr(self.data, "numpy") and not isinstance(self.data, np.ndarray):
            return self.data.numpy()
        return np.asarray(self.data)


class InferenceEngine(Protocol):
    """Interface for a local model runtime.

    Implementations own the model weights and device resources. Tensors they
    create must be handed back through release().
    """

    def load(self, model_bytes: bytes) -> None:
        """Build an execution context from serialized model bytes.

        Raises:
            RuntimeError: If the model cannot be loaded
        """
        ...

    @property
    def is_loaded(self) -> bool:
        """Check if a model is loaded."""
        ...

    @property
    def input_names(self) -> list[str]:
        """Get the input names declared by the model graph."""
        ...

    def create_tensor(self, values: Sequence[int], shape: Sequence[int]) -> Tensor:
        """Allocate an int64 input tensor."""
        ...

    def run(self, inputs: dict[str, Tensor]) -> list[Tensor] | None:
        """Execute one forward pass.

        Args:
            inputs: Input tensors keyed by graph input name

        Returns:
            Output tensors, or None if the runtime produced nothing
        """
        ...

    def release(self, tensor: Tensor) -> None:
        """Free a tensor. Releasing twice is a no-op."""
        ...

    def close(self) -> None:
        """Release the execution context."""
        ...


class TensorScope:
    """Owns every tensor acquired inside a ``with`` block.

    All tensors are released on exit, whether the block returns or raises.
    Release failures are logged and never replace the block's own result or
    exception.
    """

    def __init__(self, engine: InferenceEngine) -> None:
        self._engine = engine
        self._tensors: list[Tensor] = []

    def __enter__(self) -> "TensorScope":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release_all()
        return False

    def tensor(self, values: Sequence[int], shape: Sequence[int]) -> Tensor:
        """Allocate an input tensor owned by this scope."""
        tensor = self._engine.create_tensor(values, shape)
        self._tensors.append(tensor)
        return tensor

    def adopt(self, tensors: list[Tensor] | None) -> list[Tensor]:
        """Take ownership of engine outputs."""
        if not tensors:
            return []
        self._tensors.extend(tensors)
        return tensors

    def release_all(self) -> None:
        """Release owned tensors, most recent first."""
        while self._tensors:
            tensor = self._tensors.pop()
            try:
                self._engine.release(tensor)
            except Exception as e:
                logger.warning(f"Failed to release tensor {tensor.shape}: {e}")

    @property
    def owned(self) -> int:
        """Get the number of tensors still owned."""
        return len(self._tensors)


__all__ = ["InferenceEngine", "Tensor", "TensorScope"]
