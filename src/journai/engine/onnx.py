"""ONNX Runtime inference engine implementation.

Runs exported transformer graphs on CPU or an available accelerator.
"""

import logging
import time
from collections.abc import Sequence
from typing import Any

import numpy as np

from .base import Tensor

# onnxruntime import with fallback
try:
    import onnxruntime as ort

    ONNXRUNTIME_AVAILABLE = True
except ImportError:
    ONNXRUNTIME_AVAILABLE = False
    ort = None  # type: ignore

logger = logging.getLogger(__name__)


class OnnxInferenceEngine:
    """Inference engine backed by an onnxruntime InferenceSession.

    Inputs are int64 OrtValues. Only inputs the graph declares are fed, so one
    session can serve graphs that take token_type_ids or position_ids.
    """

    def __init__(
        self,
        providers: list[str] | None = None,
        intra_op_threads: int = 0,
    ) -> None:
        """Initialize ONNX engine.

        Args:
            providers: Execution providers in priority order; auto-detected if empty
            intra_op_threads: Thread count for intra-op parallelism (0 = runtime default)

        Raises:
            RuntimeError: If onnxruntime is not available
        """
        if not ONNXRUNTIME_AVAILABLE:
            raise RuntimeError("onnxruntime not available. Install with: pip install onnxruntime")

        if not providers:
            from ..config.profiles import default_providers

            providers = default_providers()

        self._providers = providers
        self._intra_op_threads = intra_op_threads
        self._session: Any = None
        self._input_names: list[str] = []

    def load(self, model_bytes: bytes) -> None:
        """Create an InferenceSession from serialized model bytes."""
        if self._session is not None:
            raise RuntimeError("Engine already has a model loaded")

        start = time.time()

        options = ort.SessionOptions()
        if self._intra_op_threads > 0:
            options.intra_op_num_threads = self._intra_op_threads

        self._session = ort.InferenceSession(
            model_bytes,
            sess_options=options,
            providers=self._providers,
        )
        self._input_names = [i.name for i in self._session.get_inputs()]

        load_time = (time.time() - start) * 1000
        logger.info(
            f"ONNX model loaded in {load_time:.0f}ms "
            f"(inputs={self._input_names}, providers={self._session.get_providers()})"
        )

    @property
    def is_loaded(self) -> bool:
        """Check if a model is loaded."""
        return self._session is not None

    @property
    def input_names(self) -> list[str]:
        """Get the graph input names."""
        return list(self._input_names)

    def create_tensor(self, values: Sequence[int], shape: Sequence[int]) -> Tensor:
        """Allocate an int64 OrtValue."""
        array = np.asarray(values, dtype=np.int64).reshape(tuple(shape))
        value = ort.OrtValue.ortvalue_from_numpy(array)
        return Tensor(data=value, shape=tuple(shape))

    def run(self, inputs: dict[str, Tensor]) -> list[Tensor] | None:
        """Run one forward pass over the declared graph inputs."""
        if self._session is None:
            raise RuntimeError("No model loaded")

        feeds = {name: t.data for name, t in inputs.items() if name in self._input_names}
        outputs = self._session.run_with_ort_values(None, feeds)
        if not outputs:
            return None

        result = []
        for value in outputs:
            array = value.numpy()
            result.append(Tensor(data=array, shape=tuple(array.shape)))
        return result

    def release(self, tensor: Tensor) -> None:
        """Drop the engine reference to a tensor."""
        if tensor.released:
            return
        tensor.data = None
        tensor.released = True

    def close(self) -> None:
        """Release the InferenceSession."""
        if self._session is not None:
            self._session = None
            self._input_names = []
            logger.debug("ONNX session released")

    @property
    def providers(self) -> list[str]:
        """Get requested execution providers."""
        return list(self._providers)


__all__ = ["OnnxInferenceEngine"]
