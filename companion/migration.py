"""One-time backfill of long-term memory from the human-readable chat log."""

import logging
import re
import time
from pathlib import Path
from typing import Callable

from companion.memory_config import MemoryConfig
from companion.memory_prompts import format_conversation
from companion.memory_schema import MemoryEntry
from companion.storage import JsonStorage, StorageError
from companion.summarizer import Summarizer
from companion.vector_store import VectorStore

logger = logging.getLogger(__name__)

# **[<timestamp>] ROLE**: content
_ENTRY_RE = re.compile(r"^\*\*\[(?P<ts>[^\]]*)\] (?P<role>[A-Z]+)\*\*: ?(?P<content>.*)$")

_LOG_ROLES = {"USER": "user", "ASSISTANT": "assistant"}


def parse_chat_log(text: str) -> list[MemoryEntry]:
    """Parse chat_history.md into ordered turns.

    Non-header lines continue the previous turn, blank lines included;
    the blank separator lines after a turn are stripped. Text before the
    first header and turns with roles other than USER/ASSISTANT are dropped.
    """
    entries: list[MemoryEntry] = []
    current: list[str] | None = None
    current_role: str | None = None

    def flush() -> None:
        if current_role and current is not None:
            content = "\n".join(current).strip()
            if content:
                entries.append(MemoryEntry(role=current_role, content=content))

    for line in text.splitlines():
        match = _ENTRY_RE.match(line)
        if match:
            flush()
            current_role = _LOG_ROLES.get(match.group("role"))
            current = [match.group("content")]
        elif current is not None:
            current.append(line)

    flush()
    return entries


def migrate_history(
    vector_store: VectorStore,
    summarizer: Summarizer,
    config: MemoryConfig | None = None,
    storage: JsonStorage | None = None,
    log_path: str | Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Summarize the chat log into the vector store if it is still empty.

    Returns the number of memories created.
    """
    config = config or MemoryConfig()
    storage = storage or JsonStorage()
    log_path = Path(log_path) if log_path else config.chat_log_path

    existing = vector_store.count()
    if existing > 0:
        logger.info("Vector store already has %d memories, skipping migration", existing)
        return 0

    if not storage.path_exists(log_path):
        logger.info("No chat history at %s, nothing to migrate", log_path)
        return 0

    try:
        messages = parse_chat_log(storage.read_text(log_path))
    except StorageError as e:
        logger.error("Failed to read chat history (non-fatal): %s", e)
        return 0

    if len(messages) < config.min_batch_size:
        logger.info("Only %d messages in chat history, skipping migration", len(messages))
        return 0

    batch_size = config.summarize_every
    total_batches = (len(messages) + batch_size - 1) // batch_size
    logger.info("Migrating %d messages in %d batches", len(messages), total_batches)

    created = 0
    for n, start in enumerate(range(0, len(messages), batch_size), start=1):
        batch = messages[start:start + batch_size]
        if len(batch) < config.min_batch_size:
            logger.debug("Skipping batch %d: only %d messages", n, len(batch))
            continue

        try:
            text = format_conversation(batch)
            summary = summarizer.summarize(text, len(batch))
            if summary:
                vector_store.add(text, summary, len(batch))
                created += 1
                logger.info("Batch %d/%d: %s", n, total_batches, summary[:60])
            else:
                logger.warning("Batch %d/%d produced no summary", n, total_batches)
        except Exception as e:
            logger.error("Batch %d/%d failed (non-fatal): %s", n, total_batches, e)

        if n < total_batches:
            sleep(config.migration_delay_seconds)

    logger.info("Migration complete: %d memories created", created)
    return created
