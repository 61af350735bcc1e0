"""Text generation module for the Journai pipeline.

Provides greedy generation of note titles and reflective questions.
"""

from typing import TYPE_CHECKING

from ..engine import GENERATOR_INPUTS, InferenceEngine, create_engine
from .agents import QuestioningAgent, TitleGenerator
from .prompts import build_chat_prompt, build_question_prompt, build_title_prompt
from .session import (
    DecodePhase,
    GenerationResult,
    GenerationState,
    GenerativeSession,
    StopReason,
)

if TYPE_CHECKING:
    from ..config import JournaiConfig


def create_generative_session(
    config: "JournaiConfig | None" = None,
    engine: InferenceEngine | None = None,
    use_mock: bool = False,
) -> GenerativeSession:
    """Create an uninitialized generative session.

    Args:
        config: Journai configuration
        engine: Engine to use instead of building one from config
        use_mock: If True, back the session with a mock engine

    Returns:
        GenerativeSession ready for initialize()
    """
    if engine is None:
        engine = create_engine(
            config.engine if config is not None else None,
            use_mock=use_mock,
            input_names=GENERATOR_INPUTS,
        )

    if config is None:
        return GenerativeSession(engine=engine)

    gen = config.generator
    return GenerativeSession(
        engine=engine,
        max_new_tokens=gen.max_new_tokens,
        bos_token_id=gen.bos_token_id,
        eos_token_id=gen.eos_token_id,
        append_eos_to_prompt=gen.append_eos_to_prompt,
    )


__all__ = [
    "DecodePhase",
    "GenerationResult",
    "GenerationState",
    "GenerativeSession",
    "QuestioningAgent",
    "StopReason",
    "TitleGenerator",
    "build_chat_prompt",
    "build_question_prompt",
    "build_title_prompt",
    "create_generative_session",
]
