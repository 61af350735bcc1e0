"""Configuration module for the Journai inference pipeline.

This module provides configuration loading and profile management.
"""

from dataclasses import dataclass, field

from ..emotion.labels import EMOTION_LABELS


@dataclass
class EngineConfig:
    """Inference engine configuration."""

    providers: list[str] = field(default_factory=list)
    intra_op_threads: int = 0
    use_mock: bool = False


@dataclass
class EmotionConfig:
    """Emotion classification model configuration."""

    model_path: str = "assets/bert-emotion/model.onnx"
    vocab_path: str = "assets/bert-emotion/vocab.txt"
    max_length: int = 512
    labels: list[str] = field(default_factory=lambda: list(EMOTION_LABELS))


@dataclass
class GeneratorConfig:
    """Generative model configuration."""

    model_path: str = "assets/smollm2/model.onnx"
    vocab_path: str = "assets/smollm2/vocab.json"
    merges_path: str = "assets/smollm2/merges.txt"
    max_new_tokens: int = 50
    bos_token_id: int = 1
    eos_token_id: int = 2
    append_eos_to_prompt: bool = True
    title_chars: int = 200
    question_chars: int = 300


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class JournaiConfig:
    """Main Journai configuration."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    emotion: EmotionConfig = field(default_factory=EmotionConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Public API
__all__ = [
    "EmotionConfig",
    "EngineConfig",
    "GeneratorConfig",
    "JournaiConfig",
    "LoggingConfig",
]
