"""Inference engine module for the Journai pipeline.

Provides forward-pass execution using ONNX Runtime or mock implementation.
"""

from typing import TYPE_CHECKING

from .base import InferenceEngine, Tensor, TensorScope
from .mock import CLASSIFIER_INPUTS, GENERATOR_INPUTS, MockInferenceEngine

if TYPE_CHECKING:
    from ..config import EngineConfig


def create_engine(
    config: "EngineConfig | None" = None,
    use_mock: bool = False,
    input_names: list[str] | None = None,
) -> InferenceEngine:
    """Create an inference engine instance.

    Args:
        config: Engine configuration
        use_mock: If True, return mock implementation for testing
        input_names: Graph inputs the mock should report

    Returns:
        InferenceEngine implementation

    Raises:
        RuntimeError: If onnxruntime is not installed
    """
    if use_mock or (config is not None and config.use_mock):
        return MockInferenceEngine(input_names=input_names)

    providers: list[str] = []
    intra_op_threads = 0

    if config is not None:
        providers = config.providers
        intra_op_threads = config.intra_op_threads

    from .onnx import OnnxInferenceEngine

    return OnnxInferenceEngine(providers=providers, intra_op_threads=intra_op_threads)


__all__ = [
    "CLASSIFIER_INPUTS",
    "GENERATOR_INPUTS",
    "InferenceEngine",
    "MockInferenceEngine",
    "Tensor",
    "TensorScope",
    "create_engine",
]
