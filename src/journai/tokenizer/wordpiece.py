"""WordPiece tokenizer for BERT-style classification models.

Encodes text into fixed-length id, attention mask and token-type sequences
using greedy longest-match subword segmentation.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CLS_TOKEN = "[CLS]"
SEP_TOKEN = "[SEP]"
PAD_TOKEN = "[PAD]"
UNK_TOKEN = "[UNK]"
CONTINUATION_PREFIX = "##"

# Fallback id for [UNK] when the vocabulary does not list it (BERT uncased).
DEFAULT_UNK_ID = 100

_PUNCTUATION = re.compile(r"""([.,!?;:\-"()\[\]{}])""")
_WHITESPACE = re.compile(r"\s+")


class Vocabulary:
    """Immutable token to id mapping with reverse lookup.

    Ids are line numbers of the newline-delimited vocabulary file. A token
    listed twice keeps the id of its last occurrence.
    """

    def __init__(self, tokens: list[str]) -> None:
        self._token_to_id: dict[str, int] = {}
        for index, token in enumerate(tokens):
            self._token_to_id[token] = index
        self._id_to_token: dict[int, str] = {i: t for t, i in self._token_to_id.items()}

    def __contains__(self, token: object) -> bool:
        return token in self._token_to_id

    def __len__(self) -> int:
        return len(self._token_to_id)

    def get(self, token: str, default: int | None = None) -> int | None:
        """Get the id for a token."""
        return self._token_to_id.get(token, default)

    def token_for(self, token_id: int) -> str | None:
        """Get the token for an id, or None if the id is unknown."""
        return self._id_to_token.get(token_id)


def load_vocabulary(path: str | Path) -> Vocabulary:
    """Load a newline-delimited vocabulary file.

    Args:
        path: Path to vocab.txt

    Returns:
        Vocabulary built from the file

    Raises:
        OSError: If the file cannot be read
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        tokens = [line.strip() for line in f.read().splitlines()]

    logger.debug(f"Loaded {len(tokens)} vocabulary entries from {path}")
    return Vocabulary(tokens)


@dataclass
class EncodedSequence:
    """Model-ready integer sequences of equal length.

    Attributes:
        input_ids: Token ids
        attention_mask: 1 for real tokens, 0 for padding
        token_type_ids: Segment ids (all 0 for a single sentence)
    """

    input_ids: list[int]
    attention_mask: list[int]
    token_type_ids: list[int]

    def __len__(self) -> int:
        return len(self.input_ids)

    def as_dict(self) -> dict[str, list[int]]:
        """Get the sequences keyed by model input name."""
        return {
            "input_ids": self.input_ids,
            "attention_mask": self.attention_mask,
            "token_type_ids": self.token_type_ids,
        }


class WordPieceTokenizer:
    """Lowercasing WordPiece tokenizer.

    Unknown words never raise: characters that match no vocabulary entry
    become [UNK] one at a time.
    """

    def __init__(self, vocabulary: Vocabulary, max_length: int = 512) -> None:
        """Initialize tokenizer.

        Args:
            vocabulary: Loaded vocabulary
            max_length: Default encoded length

        Raises:
            ValueError: If max_length is smaller than 1
        """
        if max_length < 1:
            raise ValueError(f"max_length must be at least 1, got {max_length}")
        self._vocab = vocabulary
        self._max_length = max_length

    @classmethod
    def from_file(cls, path: str | Path, max_length: int = 512) -> "WordPieceTokenizer":
        """Create a tokenizer from a vocab.txt file."""
        return cls(load_vocabulary(path), max_length=max_length)

    @property
    def vocabulary(self) -> Vocabulary:
        """Get the vocabulary."""
        return self._vocab

    @property
    def max_length(self) -> int:
        """Get the default encoded length."""
        return self._max_length

    def token_id(self, token: str) -> int:
        """Map a token to its id, falling back to [UNK]."""
        token_id = self._vocab.get(token)
        if token_id is not None:
            return token_id
        unk_id = self._vocab.get(UNK_TOKEN)
        return unk_id if unk_id is not None else DEFAULT_UNK_ID

    def basic_tokenize(self, text: str) -> list[str]:
        """Lowercase, isolate punctuation and split on whitespace."""
        text = text.lower().strip()
        text = _PUNCTUATION.sub(r" \1 ", text)
        return [token for token in _WHITESPACE.split(text) if token]

    def wordpiece_tokenize(self, word: str) -> list[str]:
        """Split one word into the longest matching vocabulary pieces."""
        if word in self._vocab:
            return [word]

        pieces: list[str] = []
        start = 0
        while start < len(word):
            end = len(word)
            piece = None
            while start < end:
                candidate = word[start:end]
                if start > 0:
                    candidate = CONTINUATION_PREFIX + candidate
                if candidate in self._vocab:
                    piece = candidate
                    break
                end -= 1

            if piece is None:
                pieces.append(UNK_TOKEN)
                start += 1
            else:
                pieces.append(piece)
                start = end

        return pieces

    def tokenize(self, text: str) -> list[str]:
        """Tokenize text into WordPiece tokens without special tokens."""
        tokens: list[str] = []
        for word in self.basic_tokenize(text):
            tokens.extend(self.wordpiece_tokenize(word))
        return tokens

    def encode(self, text: str, max_length: int | None = None) -> EncodedSequence:
        """Encode text to fixed-length model inputs.

        Args:
            text: Raw input text
            max_length: Encoded length, defaults to the tokenizer's

        Returns:
            EncodedSequence whose three sequences all have length max_length
        """
        if max_length is None:
            max_length = self._max_length
        if max_length < 1:
            raise ValueError(f"max_length must be at least 1, got {max_length}")

        tokens = [CLS_TOKEN, *self.tokenize(text), SEP_TOKEN]

        # Truncated output still ends with the separator
        if len(tokens) > max_length:
            tokens = tokens[: max_length - 1]
            tokens.append(SEP_TOKEN)

        input_ids = [self.token_id(token) for token in tokens]
        attention_mask = [1] * len(input_ids)
        token_type_ids = [0] * len(input_ids)

        padding = max_length - len(input_ids)
        input_ids.extend([self.token_id(PAD_TOKEN)] * padding)
        attention_mask.extend([0] * padding)
        token_type_ids.extend([0] * padding)

        return EncodedSequence(
            input_ids=input_ids,
            attention_mask=attention_mask,
            token_type_ids=token_type_ids,
        )

    def decode(self, ids: list[int]) -> str:
        """Convert ids back to text, merging ## continuations.

        Special tokens and unknown ids are skipped.
        """
        special = {CLS_TOKEN, SEP_TOKEN, PAD_TOKEN}
        words: list[str] = []
        for token_id in ids:
            token = self._vocab.token_for(token_id)
            if token is None or token in special:
                continue
            if token.startswith(CONTINUATION_PREFIX) and words:
                words[-1] += token[len(CONTINUATION_PREFIX) :]
            else:
                words.append(token)
        return " ".join(words)


__all__ = [
    "CLS_TOKEN",
    "EncodedSequence",
    "PAD_TOKEN",
    "SEP_TOKEN",
    "UNK_TOKEN",
    "Vocabulary",
    "WordPieceTokenizer",
    "load_vocabulary",
]
