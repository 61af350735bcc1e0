"""Tokenizers for the Journai inference pipeline.

Provides WordPiece encoding for the classifier and byte-level BPE for the
generative model.
"""

from .bpe import ByteLevelBPETokenizer
from .wordpiece import EncodedSequence, Vocabulary, WordPieceTokenizer, load_vocabulary

__all__ = [
    "ByteLevelBPETokenizer",
    "EncodedSequence",
    "Vocabulary",
    "WordPieceTokenizer",
    "load_vocabulary",
]
