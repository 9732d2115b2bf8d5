"""Memory orchestration: short-term window, summarization cadence, context and retrieval."""

import json
import logging
import math
import re
from datetime import datetime

from pydantic import ValidationError

from companion.memory_config import MemoryConfig
from companion.memory_prompts import format_conversation, format_relevant_memories
from companion.memory_schema import MemoryEntry, ShortTermState
from companion.storage import JsonStorage, StorageError
from companion.summarizer import Summarizer
from companion.vector_store import VectorStore

logger = logging.getLogger(__name__)

ROLES = ("user", "assistant", "system")

INTERNAL_CODE_PREFIX = "[INTERNAL CODE]"
CALL_PREFIX = "[CALL]"
TRUNCATION_MARKER = "... (truncated)"

# Han, kana, hangul and CJK punctuation
_CJK_RE = re.compile(
    r"[\u3000-\u303f\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff"
    r"\uac00-\ud7af\uf900-\ufaff\uff00-\uffef]"
)


def estimate_tokens(text: str) -> int:
    """Rough token count: ~1.5 chars per token for CJK, ~4 for everything else."""
    cjk = len(_CJK_RE.findall(text))
    other = len(text) - cjk
    return math.ceil(cjk / 1.5 + other / 4)


def log_timestamp() -> str:
    return datetime.now().strftime("%m/%d/%Y, %I:%M:%S %p")


class MemoryManager:
    """Owns the short-term window and feeds long-term memory.

    Lifecycle: construct -> load() -> add_message()/get_context()/... -> save().
    Every mutation is written through to disk; the chat log is a separate,
    append-only sink that the sliding window never trims.
    """

    def __init__(
        self,
        vector_store: VectorStore,
        summarizer: Summarizer,
        config: MemoryConfig | None = None,
        storage: JsonStorage | None = None,
    ):
        self.vector_store = vector_store
        self.summarizer = summarizer
        self.config = config or MemoryConfig()
        self.storage = storage or JsonStorage()
        self.memory_path = self.config.memory_path
        self.chat_log_path = self.config.chat_log_path

        self.short_term: list[MemoryEntry] = []
        self.unsummarized_count = 0

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Restore the window and counter; a missing or broken file starts fresh."""
        try:
            if not self.storage.path_exists(self.memory_path):
                logger.info("No existing memory found, starting fresh.")
                return
            state = ShortTermState.model_validate(self.storage.read_json(self.memory_path))
        except (StorageError, ValidationError) as e:
            logger.error("Failed to load memory (non-fatal): %s", e)
            return

        self.short_term = state.short_term[-self.config.max_short_term:]
        self.unsummarized_count = state.unsummarized_count
        logger.info(
            "Loaded %d short-term messages (%d unsummarized)",
            len(self.short_term), self.unsummarized_count,
        )

    def save(self) -> None:
        state = ShortTermState(
            short_term=self.short_term, unsummarized_count=self.unsummarized_count
        )
        try:
            self.storage.write_json(self.memory_path, state.model_dump(by_alias=True))
        except StorageError as e:
            logger.error("Failed to save memory (non-fatal): %s", e)

    def _append_chat_log(self, entry: MemoryEntry) -> None:
        """Only USER and ASSISTANT turns go to the human-readable log."""
        if entry.role == "system":
            return
        line = f"**[{log_timestamp()}] {entry.role.upper()}**: {entry.content}\n\n"
        try:
            self.storage.append_file(self.chat_log_path, line)
        except StorageError as e:
            logger.error("Failed to log to chat history (non-fatal): %s", e)

    # ------------------------------------------------------------------
    # Recording turns
    # ------------------------------------------------------------------

    def add_message(self, role: str, content: str) -> MemoryEntry:
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")

        logger.debug("Adding %s message: %s...", role, content[:50])
        entry = MemoryEntry(role=role, content=content)
        self.short_term.append(entry)
        self.unsummarized_count += 1

        if self.unsummarized_count >= self.config.summarize_every:
            self._summarize_recent()

        if len(self.short_term) > self.config.max_short_term:
            self.short_term = self.short_term[-self.config.max_short_term:]

        self._append_chat_log(entry)
        self.save()
        return entry

    def _summarize_recent(self) -> bool:
        """Summarize the last unsummarized_count turns into long-term memory.

        Under the "drop" policy the counter is reset even when the summary
        fails, so that batch never reaches long-term memory.
        """
        batch = self.short_term[-self.unsummarized_count:]
        logger.info("Summarizing %d recent messages", len(batch))

        text = format_conversation(batch)
        summary = self.summarizer.summarize(text, len(batch))
        if summary:
            self.vector_store.add(text, summary, len(batch))
            logger.info("Stored summary: %s", summary[:80])

        if summary or self.config.failed_batch_policy == "drop":
            self.unsummarized_count = 0
        return summary is not None

    def force_summarize(self) -> bool:
        """Summarize the most recent window now, regardless of the cadence."""
        self.unsummarized_count = self.config.summarize_every
        stored = self._summarize_recent()
        self.save()
        return stored

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _context_lines(self, entries: list[MemoryEntry]) -> list[str]:
        limit = self.config.internal_truncate_chars
        lines = []
        for e in entries:
            content = e.content
            if content.startswith(INTERNAL_CODE_PREFIX) and len(content) > limit:
                content = content[:limit] + TRUNCATION_MARKER
            lines.append(f"[{e.role.upper()}]: {content}")
        return lines

    def get_context(self) -> str:
        """Serialize the recent window for the model, trimmed to the token budget.

        The oldest lines are dropped first, but never below context_min_entries.
        """
        lines = self._context_lines(self.short_term[-self.config.max_short_term:])

        payload = json.dumps({"recent_dialogue": lines}, indent=2, ensure_ascii=False)
        while (
            estimate_tokens(payload) > self.config.context_token_budget
            and len(lines) > self.config.context_min_entries
        ):
            lines = lines[1:]
            payload = json.dumps({"recent_dialogue": lines}, indent=2, ensure_ascii=False)
        return payload

    def retrieve_relevant_memories(self, query: str) -> str:
        """Formatted block of long-term memories related to query, or ''."""
        try:
            memories = self.vector_store.search(query, self.config.retrieval_top_k)
        except Exception as e:
            logger.warning("Memory retrieval failed (non-fatal): %s", e)
            return ""
        return format_relevant_memories(memories)

    def get_recent_chat(self, limit: int = 20) -> list[MemoryEntry]:
        if limit <= 0:
            raise ValueError("limit must be positive")
        return list(self.short_term[-limit:])

    def get_stats(self) -> dict:
        return {
            "short_term": len(self.short_term),
            "long_term": self.vector_store.count(),
            "unsummarized": self.unsummarized_count,
        }
