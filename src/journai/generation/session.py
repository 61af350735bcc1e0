"""Generative model session with greedy autoregressive decoding.

Each decode step re-runs the model over the whole sequence (no key/value
cache) and appends the argmax of the final position's logits.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import numpy as np

from ..engine import InferenceEngine, TensorScope
from ..errors import (
    EmptyInputError,
    InferenceError,
    InitializationError,
    NotInitializedError,
    SessionBusyError,
)
from ..tokenizer import ByteLevelBPETokenizer

logger = logging.getLogger(__name__)


class DecodePhase(Enum):
    """Phase of one generate call."""

    START = "start"
    ENCODE = "encode"
    FIRST_FORWARD = "first_forward"
    DECODE_LOOP = "decode_loop"
    STOP = "stop"


class StopReason(Enum):
    """Why decoding ended."""

    EOS = "eos"
    MAX_TOKENS = "max_tokens"
    INFERENCE_ERROR = "inference_error"


@dataclass
class GenerationState:
    """Mutable state owned by a single generate call.

    Attributes:
        sequence: Prompt ids followed by generated ids
        prompt_length: Number of prompt ids at the head of sequence
        steps: Forward passes that produced a token
        phase: Current decode phase
        stop_reason: Set once decoding ends
    """

    sequence: list[int] = field(default_factory=list)
    prompt_length: int = 0
    steps: int = 0
    phase: DecodePhase = DecodePhase.START
    stop_reason: StopReason | None = None

    @property
    def generated(self) -> list[int]:
        """Get ids produced after the prompt."""
        return self.sequence[self.prompt_length :]

    @property
    def last_token(self) -> int | None:
        """Get the most recently generated id."""
        return self.sequence[-1] if self.steps else None

    @property
    def stopped(self) -> bool:
        """Check if decoding has ended."""
        return self.stop_reason is not None

    def advance(self, token_id: int) -> None:
        """Record one generated token."""
        self.sequence.append(token_id)
        self.steps += 1

    def stop(self, reason: StopReason) -> None:
        """End decoding."""
        self.stop_reason = reason
        self.phase = DecodePhase.STOP


@dataclass
class GenerationResult:
    """Output of a generate call.

    Attributes:
        text: Decoded generated text
        token_ids: Generated ids, prompt excluded
        stop_reason: Why decoding ended
        latency_ms: Wall time of the call in milliseconds
    """

    text: str
    token_ids: list[int]
    stop_reason: StopReason
    latency_ms: int


class GenerativeSession:
    """Greedy text generation session over a causal language model.

    One instance owns one loaded model. At most one generate call runs at a
    time; overlapping calls raise SessionBusyError.
    """

    def __init__(
        self,
        engine: InferenceEngine,
        max_new_tokens: int = 50,
        bos_token_id: int = 1,
        eos_token_id: int = 2,
        append_eos_to_prompt: bool = True,
    ) -> None:
        """Initialize generative session.

        Args:
            engine: Inference engine that will own the model
            max_new_tokens: Upper bound on generated tokens per call
            bos_token_id: Id prepended to every prompt
            eos_token_id: Id that ends generation
            append_eos_to_prompt: Close the prompt with the end id before decoding

        Raises:
            ValueError: If max_new_tokens is less than 1
        """
        if max_new_tokens < 1:
            raise ValueError(f"max_new_tokens must be at least 1, got {max_new_tokens}")

        self._engine = engine
        self._max_new_tokens = max_new_tokens
        self._bos_token_id = bos_token_id
        self._eos_token_id = eos_token_id
        self._append_eos_to_prompt = append_eos_to_prompt
        self._tokenizer: ByteLevelBPETokenizer | None = None
        self._initialized = False
        self._busy = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        """Check if the model and tokenizer are loaded."""
        return self._initialized

    @property
    def max_new_tokens(self) -> int:
        """Get the generation budget."""
        return self._max_new_tokens

    @property
    def eos_token_id(self) -> int:
        """Get the end-of-sequence id."""
        return self._eos_token_id

    @property
    def tokenizer(self) -> ByteLevelBPETokenizer | None:
        """Get the tokenizer, if initialized."""
        return self._tokenizer

    def initialize(
        self,
        model_bytes: bytes,
        vocab_path: str | Path,
        merges_path: str | Path,
    ) -> None:
        """Load the tokenizer artifacts and model.

        Calling this on an initialized session does nothing.

        Raises:
            InitializationError: If an artifact or the model cannot be loaded
        """
        if self._initialized:
            logger.info("Generative session already initialized")
            return

        start = time.time()

        try:
            tokenizer = ByteLevelBPETokenizer.from_files(vocab_path, merges_path)
        except (OSError, ValueError) as e:
            raise InitializationError(f"Failed to load tokenizer: {e}", path=vocab_path) from e

        try:
            self._engine.load(model_bytes)
        except Exception as e:
            raise InitializationError(f"Failed to load generative model: {e}") from e

        self._tokenizer = tokenizer
        self._initialized = True

        load_time = (time.time() - start) * 1000
        logger.info(
            f"Generative session initialized in {load_time:.0f}ms "
            f"(vocab={tokenizer.vocab_size}, max_new_tokens={self._max_new_tokens})"
        )

    def initialize_from_files(
        self,
        model_path: str | Path,
        vocab_path: str | Path,
        merges_path: str | Path,
    ) -> None:
        """Read model bytes from disk and initialize.

        Raises:
            InitializationError: If the model file cannot be read
        """
        if self._initialized:
            logger.info("Generative session already initialized")
            return
        try:
            model_bytes = Path(model_path).read_bytes()
        except OSError as e:
            raise InitializationError(
                f"Failed to read generative model: {e}", path=model_path
            ) from e
        self.initialize(model_bytes, vocab_path, merges_path)

    async def generate(self, prompt: str) -> str:
        """Generate a continuation of prompt.

        Raises:
            NotInitializedError: If initialize() has not succeeded
            EmptyInputError: If prompt is blank
            InferenceError: If the first forward pass fails
            SessionBusyError: If another call is in flight
        """
        result = await self.complete(prompt)
        return result.text

    async def complete(self, prompt: str) -> GenerationResult:
        """Generate a continuation of prompt with decoding details.

        Failures after the first token end decoding early and return what
        was generated so far.
        """
        tokenizer = self._tokenizer
        if not self._initialized or tokenizer is None:
            raise NotInitializedError("Generative session not initialized. Call initialize() first.")
        if not prompt or not prompt.strip():
            raise EmptyInputError("Prompt cannot be empty")
        if not self._busy.acquire(blocking=False):
            raise SessionBusyError("Generative session is busy")

        try:
            return await self._decode(tokenizer, prompt)
        finally:
            self._busy.release()

    async def _decode(self, tokenizer: ByteLevelBPETokenizer, prompt: str) -> GenerationResult:
        start = time.time()

        state = GenerationState(phase=DecodePhase.ENCODE)
        state.sequence = self._wrap_prompt(tokenizer, prompt)
        state.prompt_length = len(state.sequence)
        logger.debug(f"Prompt encoded to {state.prompt_length} tokens")

        state.phase = DecodePhase.FIRST_FORWARD
        state.advance(await self._next_token(state.sequence))

        state.phase = DecodePhase.DECODE_LOOP
        while not state.stopped:
            if state.last_token == self._eos_token_id:
                state.stop(StopReason.EOS)
            elif state.steps >= self._max_new_tokens:
                state.stop(StopReason.MAX_TOKENS)
            else:
                try:
                    token_id = await self._next_token(state.sequence)
                except InferenceError as e:
                    logger.warning(f"Stopping generation after {state.steps} tokens: {e}")
                    state.stop(StopReason.INFERENCE_ERROR)
                else:
                    state.advance(token_id)

        generated = state.generated
        text = tokenizer.decode(generated, skip_special_tokens=True).strip()
        latency_ms = int((time.time() - start) * 1000)

        logger.debug(
            f"Generated {len(generated)} tokens in {latency_ms}ms "
            f"(stop={state.stop_reason.value})"
        )

        return GenerationResult(
            text=text,
            token_ids=generated,
            stop_reason=state.stop_reason,
            latency_ms=latency_ms,
        )

    def encode_prompt(self, prompt: str) -> list[int]:
        """Encode a prompt with begin and (optionally) end markers."""
        tokenizer = self._tokenizer
        if tokenizer is None:
            raise NotInitializedError("Generative session not initialized. Call initialize() first.")
        return self._wrap_prompt(tokenizer, prompt)

    def _wrap_prompt(self, tokenizer: ByteLevelBPETokenizer, prompt: str) -> list[int]:
        ids = [self._bos_token_id, *tokenizer.encode(prompt)]
        if self._append_eos_to_prompt:
            ids.append(self._eos_token_id)
        return ids

    async def _next_token(self, sequence: list[int]) -> int:
        """Run one forward pass and return the greedy next token."""
        length = len(sequence)
        shape = [1, length]

        with TensorScope(self._engine) as output_scope:
            with TensorScope(self._engine) as input_scope:
                inputs = {
                    "input_ids": input_scope.tensor(sequence, shape),
                    "attention_mask": input_scope.tensor([1] * length, shape),
                    "position_ids": input_scope.tensor(list(range(length)), shape),
                }
                try:
                    outputs = await asyncio.to_thread(self._engine.run, inputs)
                except Exception as e:
                    raise InferenceError(f"Forward pass failed at length {length}: {e}") from e

            outputs = output_scope.adopt(outputs)
            if not outputs:
                raise InferenceError(f"Forward pass at length {length} returned no outputs")

            logits = outputs[0].numpy()
            if logits.ndim != 3 or logits.shape[1] < 1 or logits.shape[2] < 1:
                raise InferenceError(
                    f"Expected logits shaped [1, seq_len, vocab], got {logits.shape}"
                )

            return int(np.argmax(logits[0, -1]))

    def dispose(self) -> None:
        """Release the model. Safe to call more than once.

        Raises:
            SessionBusyError: If a call is in flight
        """
        if not self._busy.acquire(blocking=False):
            raise SessionBusyError("Cannot dispose generative session while a call is in flight")
        try:
            if self._initialized:
                self._engine.close()
                self._tokenizer = None
                self._initialized = False
                logger.debug("Generative session disposed")
        finally:
            self._busy.release()


__all__ = [
    "DecodePhase",
    "GenerationResult",
    "GenerationState",
    "GenerativeSession",
    "StopReason",
]
