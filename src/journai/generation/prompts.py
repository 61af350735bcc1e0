"""Chat-format prompts for title and question generation.

Prompts use ChatML role markers; the model continues after the assistant
marker.
"""

IM_START = "<|im_start|>"
IM_END = "<|im_end|>"

TITLE_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates short, concise titles "
    "(5 words or less) for journal entries. Only output the title, nothing else."
)
TITLE_USER_PROMPT = "Generate a short title for this note:\n\n{content}"

QUESTION_SYSTEM_PROMPT = (
    "You are a thoughtful journaling coach that asks insightful questions to help "
    "deepen reflection. Generate ONE concise, open-ended question that encourages "
    "the writer to explore their thoughts more deeply, be more specific, or examine "
    "different perspectives. Keep the question under 20 words. Only output the "
    "question, nothing else."
)
QUESTION_USER_PROMPT = (
    "Based on this journal entry, ask a question to deepen their reflection:\n\n{content}"
)

TITLE_CONTENT_CHARS = 200
QUESTION_CONTENT_CHARS = 300


def build_chat_prompt(system: str, user: str) -> str:
    """Wrap system and user messages and open the assistant turn."""
    return (
        f"{IM_START}system\n{system}{IM_END}\n"
        f"{IM_START}user\n{user}{IM_END}\n"
        f"{IM_START}assistant\n"
    )


def build_title_prompt(note_content: str, max_chars: int = TITLE_CONTENT_CHARS) -> str:
    """Build the title prompt from the first max_chars of a note."""
    return build_chat_prompt(
        TITLE_SYSTEM_PROMPT,
        TITLE_USER_PROMPT.format(content=note_content[:max_chars]),
    )


def build_question_prompt(note_content: str, max_chars: int = QUESTION_CONTENT_CHARS) -> str:
    """Build the reflection-question prompt from the first max_chars of a note."""
    return build_chat_prompt(
        QUESTION_SYSTEM_PROMPT,
        QUESTION_USER_PROMPT.format(content=note_content[:max_chars]),
    )


__all__ = [
    "IM_END",
    "IM_START",
    "QUESTION_CONTENT_CHARS",
    "TITLE_CONTENT_CHARS",
    "build_chat_prompt",
    "build_question_prompt",
    "build_title_prompt",
]
