"""
Prompt Builder - System instructions per task kind.

Each task kind maps to one fixed system prompt. The mapping is pure and
stable so identical requests produce identical payloads.
"""

from enum import Enum
from typing import Optional, Union


class TaskKind(str, Enum):
    """Kind of text processing requested by the caller."""

    TRANSLATE = "translate"
    POLISH = "polish"
    SUMMARIZE = "summarize"
    CORRECT = "correct"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Union["TaskKind", str]) -> "TaskKind":
        """
        Resolve a member from a member, value, name or alias (case-insensitive).

        Unknown strings resolve to OTHER.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        key = _TASK_ALIASES.get(key, key)
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        return cls.OTHER


# Alternate spellings seen in stored tasks
_TASK_ALIASES = {
    "summary": "summarize",
    "translation": "translate",
    "correction": "correct",
}

GENERIC_PROMPT = (
    "You are a helpful assistant. Process the user's text according to their "
    "request and return only the result."
)

SYSTEM_PROMPTS = {
    TaskKind.TRANSLATE: (
        "You are a professional translator. Detect whether the user's text is "
        "Chinese or English and translate it into the other language "
        "(Chinese to English, English to Chinese). Keep the meaning accurate and "
        "the wording natural. Return only the translation without any explanation."
    ),
    TaskKind.POLISH: (
        "You are a text polishing expert. Improve the user's text for richness, "
        "fluency and professionalism while keeping its original meaning. "
        "Return only the processed text."
    ),
    TaskKind.SUMMARIZE: (
        "You are a summarization assistant. Extract the core points of the "
        "user's text and summarize them concisely in no more than 200 words. "
        "Return only the processed text."
    ),
    TaskKind.CORRECT: (
        "You are a grammar correction expert. Fix grammar and spelling errors in "
        "the user's text. Return only the processed text."
    ),
    TaskKind.OTHER: GENERIC_PROMPT,
}


def get_system_prompt(task_kind: Optional[TaskKind]) -> str:
    """
    Get the system prompt for a task kind.

    Total function: None and unrecognised kinds get the generic prompt.
    """
    if task_kind is None:
        return GENERIC_PROMPT
    return SYSTEM_PROMPTS.get(TaskKind.parse(task_kind), GENERIC_PROMPT)
