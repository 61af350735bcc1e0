"""Byte-level BPE tokenizer for the generative model.

Loads a vocab.json token map and a merges.txt rank list, in the layout
shipped with GPT-2 derived models such as SmolLM2, into a Hugging Face
``tokenizers`` pipeline.
"""

import logging
import re
from pathlib import Path

from tokenizers import Tokenizer, decoders, pre_tokenizers
from tokenizers.models import BPE

logger = logging.getLogger(__name__)

DEFAULT_SPECIAL_TOKENS = ("<|endoftext|>", "<|im_start|>", "<|im_end|>")

_SPECIAL_PATTERN = re.compile(r"^<\|.+\|>$")


def build_pipeline(vocab_path: str | Path, merges_path: str | Path) -> Tokenizer:
    """Build the SmolLM2 tokenization pipeline from vocab and merges files.

    Digits are split one per token before byte-level pre-tokenization.

    Raises:
        OSError: If either file is missing
        ValueError: If the files cannot be parsed
    """
    for path in (vocab_path, merges_path):
        if not Path(path).is_file():
            raise FileNotFoundError(f"Tokenizer artifact not found: {path}")

    try:
        model = BPE.from_file(str(vocab_path), str(merges_path))
    except Exception as e:
        raise ValueError(f"Invalid BPE artifacts ({vocab_path}, {merges_path}): {e}") from e

    tokenizer = Tokenizer(model)
    tokenizer.pre_tokenizer = pre_tokenizers.Sequence(
        [
            pre_tokenizers.Digits(individual_digits=True),
            pre_tokenizers.ByteLevel(add_prefix_space=False, use_regex=True),
        ]
    )
    tokenizer.decoder = decoders.ByteLevel()
    return tokenizer


class ByteLevelBPETokenizer:
    """Byte-level BPE encoder/decoder.

    Special tokens (``<|...|>`` entries) are matched verbatim before
    pre-tokenization and never split by merges.
    """

    def __init__(
        self,
        tokenizer: Tokenizer,
        special_tokens: tuple[str, ...] = DEFAULT_SPECIAL_TOKENS,
    ) -> None:
        """Initialize tokenizer.

        Args:
            tokenizer: Pipeline built by build_pipeline()
            special_tokens: Extra tokens to treat as atomic
        """
        vocab = tokenizer.get_vocab(with_added_tokens=False)
        specials = {t for t in special_tokens if t in vocab}
        specials.update(t for t in vocab if _SPECIAL_PATTERN.match(t))
        if specials:
            tokenizer.add_special_tokens(sorted(specials))

        self._tokenizer = tokenizer
        self._special_tokens = specials

    @classmethod
    def from_files(cls, vocab_path: str | Path, merges_path: str | Path) -> "ByteLevelBPETokenizer":
        """Load a tokenizer from vocab.json and merges.txt.

        Raises:
            OSError: If either file cannot be read
            ValueError: If the files are not valid BPE artifacts
        """
        tokenizer = cls(build_pipeline(vocab_path, merges_path))
        logger.debug(f"Loaded BPE vocabulary ({tokenizer.vocab_size} tokens)")
        return tokenizer

    @property
    def vocab_size(self) -> int:
        """Get the number of vocabulary entries."""
        return self._tokenizer.get_vocab_size(with_added_tokens=True)

    @property
    def special_tokens(self) -> set[str]:
        """Get the atomic special tokens."""
        return set(self._special_tokens)

    def encode(self, text: str) -> list[int]:
        """Encode text to token ids without adding any markers."""
        return self._tokenizer.encode(text, add_special_tokens=False).ids

    def decode(self, ids: list[int], skip_special_tokens: bool = True) -> str:
        """Decode token ids to text. Ids outside the vocabulary are dropped."""
        known = [i for i in ids if self._tokenizer.id_to_token(i) is not None]
        return self._tokenizer.decode(known, skip_special_tokens=skip_special_tokens)


__all__ = ["DEFAULT_SPECIAL_TOKENS", "ByteLevelBPETokenizer", "build_pipeline"]
