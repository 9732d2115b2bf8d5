"""Companion chat memory: short-term window, summaries, and semantic recall."""

from companion.memory_config import MemoryConfig
from companion.memory_manager import MemoryManager
from companion.vector_store import VectorStore

__all__ = ["MemoryConfig", "MemoryManager", "VectorStore"]
