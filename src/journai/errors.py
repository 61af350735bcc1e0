"""Error types for the inference pipeline.

Custom exceptions raised by tokenizers, engines and model sessions.
"""

from pathlib import Path


class JournaiError(Exception):
    """Base exception for inference pipeline errors."""

    pass


class InitializationError(JournaiError):
    """Raised when a model or vocabulary cannot be loaded."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        """Initialize load error.

        Args:
            message: Error message.
            path: Artifact that failed to load, if known.
        """
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class NotInitializedError(JournaiError):
    """Raised when a session is used before initialize()."""

    pass


class EmptyInputError(JournaiError):
    """Raised when input text is blank."""

    pass


class InferenceError(JournaiError):
    """Raised when the engine returns no output or an invalid output."""

    pass


class SessionBusyError(JournaiError):
    """Raised when a session already has a forward pass in flight."""

    pass


__all__ = [
    "EmptyInputError",
    "InferenceError",
    "InitializationError",
    "JournaiError",
    "NotInitializedError",
    "SessionBusyError",
]
