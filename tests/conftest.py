"""Shared fixtures: tiny on-disk vocabularies for both tokenizers."""

import json
from dataclasses import dataclass
from pathlib import Path

import pytest

from tokenizers.pre_tokenizers import ByteLevel

WORDPIECE_TOKENS = [
    "[PAD]",
    "[UNK]",
    "[CLS]",
    "[SEP]",
    "hello",
    "world",
    "how",
    "are",
    "you",
    "fine",
    "i",
    "am",
    "so",
    "happy",
    "sad",
    "today",
    "un",
    "##believ",
    "##able",
    "play",
    "##ing",
    ".",
    ",",
    "?",
    "!",
    "-",
]

BPE_MERGES = [
    ("h", "e"),
    ("l", "l"),
    ("he", "ll"),
    ("hell", "o"),
    ("Ġ", "w"),
    ("o", "r"),
    ("Ġw", "or"),
    ("Ġwor", "l"),
    ("Ġworl", "d"),
]


@dataclass
class BPEArtifacts:
    """Paths and token map of a tiny byte-level BPE vocabulary."""

    vocab_path: Path
    merges_path: Path
    vocab: dict[str, int]

    def id_of(self, token: str) -> int:
        return self.vocab[token]


@pytest.fixture
def wordpiece_vocab_path(tmp_path: Path) -> Path:
    """Write a small BERT-style vocab.txt."""
    path = tmp_path / "vocab.txt"
    path.write_text("\n".join(WORDPIECE_TOKENS) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def bpe_artifacts(tmp_path: Path) -> BPEArtifacts:
    """Write a vocab.json/merges.txt pair covering every byte plus 'hello world'."""
    vocab: dict[str, int] = {"<|endoftext|>": 0, "<|im_start|>": 1, "<|im_end|>": 2}
    for symbol in sorted(ByteLevel.alphabet()):
        vocab.setdefault(symbol, len(vocab))
    for left, right in BPE_MERGES:
        vocab.setdefault(left + right, len(vocab))

    vocab_path = tmp_path / "vocab.json"
    vocab_path.write_text(json.dumps(vocab), encoding="utf-8")

    merges_path = tmp_path / "merges.txt"
    lines = ["#version: 0.2"] + [f"{left} {right}" for left, right in BPE_MERGES]
    merges_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    return BPEArtifacts(vocab_path=vocab_path, merges_path=merges_path, vocab=vocab)
