"""Prompt templates for summarization and the memory blocks spliced into the chat prompt."""

from datetime import datetime

from companion.memory_schema import MemoryEntry, MemoryVector

SUMMARY_SYSTEM_PROMPT = (
    "You are a memory assistant. Summarize the following conversation in 1-2 "
    "sentences.\n\n"
    "Focus on:\n"
    "- Key topics discussed\n"
    "- New facts learned about the partner\n"
    "- Emotionally significant moments or decisions\n"
    "- Any promises or commitments made\n\n"
    "Output ONLY the summary, nothing else."
)

RELEVANT_MEMORIES_HEADER = "RELEVANT MEMORIES (from past conversations):"


def format_conversation(entries: list[MemoryEntry]) -> str:
    """Render turns as 'ROLE: content' lines, the input format for summaries."""
    return "\n".join(f"{e.role.upper()}: {e.content}" for e in entries)


def summarize_conversation_prompt(conversation_text: str) -> tuple[str, str]:
    """Return (system_prompt, user_prompt) for summarizing a batch of turns."""
    return SUMMARY_SYSTEM_PROMPT, f"Conversation:\n{conversation_text}"


def format_memory_date(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d")


def format_relevant_memories(memories: list[MemoryVector]) -> str:
    """Numbered, dated bullets under a header; empty string when nothing matched."""
    if not memories:
        return ""
    lines = [
        f"[Memory {i} - {format_memory_date(m.timestamp)}]: {m.summary}"
        for i, m in enumerate(memories, start=1)
    ]
    return RELEVANT_MEMORIES_HEADER + "\n" + "\n".join(lines)
