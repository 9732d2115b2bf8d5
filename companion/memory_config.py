"""Memory system configuration: all thresholds and tunables in one place."""

import os
from dataclasses import dataclass
from pathlib import Path

FAILED_BATCH_POLICIES = ("drop", "retry")


@dataclass
class MemoryConfig:
    """Tunables for the persistent memory system."""

    # Storage
    data_dir: str = "data"
    memory_file: str = "memory.json"
    vector_file: str = "memory_vectors.json"
    chat_log_file: str = "chat_history.md"

    # Short-term window: raw turns kept verbatim for the model
    max_short_term: int = 30

    # Summarization cadence: compress after this many new turns
    summarize_every: int = 10
    min_batch_size: int = 3  # smaller batches are not worth a summary
    summary_max_tokens: int = 150
    failed_batch_policy: str = "drop"  # "drop" resets the counter anyway, "retry" keeps it

    # Long-term store
    vector_capacity: int = 100
    retrieval_top_k: int = 3
    retrieval_min_similarity: float = 0.3  # cosine similarity floor

    # Context building
    context_token_budget: int = 6000
    context_min_entries: int = 3
    internal_truncate_chars: int = 200

    # Models
    chat_model: str = "llama3.2:3b"
    embedding_model: str = "nomic-embed-text"
    embedding_dim: int = 768
    embedding_max_chars: int = 8000

    # History migration
    migration_delay_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.failed_batch_policy not in FAILED_BATCH_POLICIES:
            raise ValueError(
                f"failed_batch_policy must be one of {FAILED_BATCH_POLICIES}, "
                f"got {self.failed_batch_policy!r}"
            )

    @property
    def memory_path(self) -> Path:
        return Path(self.data_dir) / self.memory_file

    @property
    def vector_path(self) -> Path:
        return Path(self.data_dir) / self.vector_file

    @property
    def chat_log_path(self) -> Path:
        """The human-readable log sits next to the short-term memory file."""
        return self.memory_path.parent / self.chat_log_file

    @classmethod
    def from_env(cls) -> "MemoryConfig":
        """Build a config with COMPANION_* environment overrides applied."""
        config = cls()
        config.data_dir = os.getenv("COMPANION_DATA_DIR", config.data_dir)
        config.chat_model = os.getenv("COMPANION_CHAT_MODEL", config.chat_model)
        config.embedding_model = os.getenv(
            "COMPANION_EMBEDDING_MODEL", config.embedding_model
        )
        config.embedding_dim = int(
            os.getenv("COMPANION_EMBEDDING_DIM", str(config.embedding_dim))
        )
        config.failed_batch_policy = os.getenv(
            "COMPANION_FAILED_BATCH_POLICY", config.failed_batch_policy
        )
        config.__post_init__()
        return config
