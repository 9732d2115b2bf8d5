"""Compress a batch of turns into a 1-2 sentence summary via the completion backend."""

import logging
from typing import Callable

from companion.memory_config import MemoryConfig
from companion.memory_prompts import summarize_conversation_prompt

logger = logging.getLogger(__name__)

CompleteFn = Callable[..., str]


class Summarizer:
    """Turns conversation text into a short summary, or None on failure.

    complete_fn(system_prompt, user_prompt, max_tokens=...) is the only
    collaborator; it may raise, which is logged and reported as None.
    """

    def __init__(self, complete_fn: CompleteFn, config: MemoryConfig | None = None):
        self.complete_fn = complete_fn
        self.config = config or MemoryConfig()

    def summarize(self, conversation_text: str, message_count: int) -> str | None:
        if message_count < self.config.min_batch_size:
            logger.debug(
                "Skipping summary: %d messages < %d",
                message_count, self.config.min_batch_size,
            )
            return None

        system_prompt, user_prompt = summarize_conversation_prompt(conversation_text)
        try:
            raw = self.complete_fn(
                system_prompt, user_prompt, max_tokens=self.config.summary_max_tokens
            )
        except Exception as e:
            logger.error("Summarization failed (non-fatal): %s", e)
            return None

        summary = (raw or "").strip()
        if not summary:
            logger.warning("Summarization returned empty text, batch dropped")
            return None
        return summary
