"""Configuration profile management.

Provides utilities for detecting the active configuration profile and the
execution providers available to the inference engine.
"""

import os
from enum import Enum


class Profile(Enum):
    """Available configuration profiles."""

    DEV = "dev"
    PROD = "prod"
    TEST = "test"


class Accelerator(Enum):
    """Hardware accelerators exposed as ONNX Runtime execution providers."""

    CUDA = "CUDAExecutionProvider"
    COREML = "CoreMLExecutionProvider"
    CPU = "CPUExecutionProvider"


def detect_profile() -> Profile:
    """Detect appropriate configuration profile.

    Reads the JOURNAI_PROFILE environment variable and falls back to dev.

    Returns:
        Profile enum value
    """
    env_profile = os.environ.get("JOURNAI_PROFILE", "").lower()
    profile_map = {
        "prod": Profile.PROD,
        "dev": Profile.DEV,
        "test": Profile.TEST,
    }
    return profile_map.get(env_profile, Profile.DEV)


def detect_accelerator() -> Accelerator:
    """Detect the best execution provider offered by onnxruntime.

    Checks for:
    1. NVIDIA CUDA
    2. Apple CoreML
    3. Falls back to CPU

    Returns:
        Accelerator enum value
    """
    try:
        import onnxruntime
    except ImportError:
        return Accelerator.CPU

    available = set(onnxruntime.get_available_providers())
    for accelerator in (Accelerator.CUDA, Accelerator.COREML):
        if accelerator.value in available:
            return accelerator
    return Accelerator.CPU


def default_providers() -> list[str]:
    """Get the provider list for a session, best accelerator first."""
    accelerator = detect_accelerator()
    if accelerator == Accelerator.CPU:
        return [Accelerator.CPU.value]
    return [accelerator.value, Accelerator.CPU.value]


__all__ = [
    "Accelerator",
    "Profile",
    "default_providers",
    "detect_accelerator",
    "detect_profile",
]
