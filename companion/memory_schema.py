"""On-disk layout for the memory files.

Both files are plain JSON documents, rewritten whole on every change.
Field names use camelCase aliases on disk; missing fields fall back to
their defaults and unknown fields are ignored, so older files still load.

memory.json::

    {"version": 1, "shortTerm": [MemoryEntry...], "unsummarizedCount": 0}

memory_vectors.json::

    {"version": 1, "vectors": [MemoryVector...]}
"""

import random
import string
import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_VERSION = 1

Role = Literal["user", "assistant", "system"]

_ID_ALPHABET = string.digits + string.ascii_lowercase


def now_ms() -> int:
    return int(time.time() * 1000)


def new_vector_id() -> str:
    """mem_<ms timestamp>_<9 random base36 chars>."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"mem_{now_ms()}_{suffix}"


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MemoryEntry(_Document):
    """One conversational turn."""
    role: Role
    content: str
    timestamp: int = Field(default_factory=now_ms)


class MemoryVector(_Document):
    """One summarized batch of turns with the embedding of its summary."""
    id: str = Field(default_factory=new_vector_id)
    text: str = ""
    summary: str = ""
    embedding: list[float] = Field(default_factory=list)
    timestamp: int = Field(default_factory=now_ms)
    message_count: int = Field(default=0, alias="messageCount")


class ShortTermState(_Document):
    version: int = SCHEMA_VERSION
    short_term: list[MemoryEntry] = Field(default_factory=list, alias="shortTerm")
    unsummarized_count: int = Field(default=0, alias="unsummarizedCount")


class VectorStoreState(_Document):
    version: int = SCHEMA_VERSION
    vectors: list[MemoryVector] = Field(default_factory=list)
