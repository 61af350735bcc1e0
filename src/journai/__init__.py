"""Journai - on-device NLP inference for a personal journal.

Journai turns journal text into model inputs and model outputs back into:
- Per-sentence emotion labels with confidence (BERT classifier)
- Short note titles (SmolLM2, greedy decoding)
- Reflective follow-up questions (SmolLM2, greedy decoding)

Models run locally through ONNX Runtime; nothing leaves the device.

Usage:
    python -m journai analyze "Today was long. I'm glad it's over."
    python -m journai --profile prod title "Went hiking with Sam..."
"""

__version__ = "0.1.0"
__author__ = "Journai"

from .config import JournaiConfig
from .config.loader import load_config
from .emotion import EmotionClassifier, create_emotion_classifier
from .generation import (
    GenerativeSession,
    QuestioningAgent,
    TitleGenerator,
    create_generative_session,
)
from .pipeline import NoteProcessor

__all__ = [
    "EmotionClassifier",
    "GenerativeSession",
    "JournaiConfig",
    "NoteProcessor",
    "QuestioningAgent",
    "TitleGenerator",
    "__version__",
    "create_emotion_classifier",
    "create_generative_session",
    "load_config",
]
